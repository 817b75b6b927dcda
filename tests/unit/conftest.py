"""Pytest configuration and fixtures for unit tests."""

from decimal import Decimal

import pytest

from src.domain.service import PlanType
from src.domain.user import OperatorActor, PayerActor, WorkerActor
from tests.unit.mocks import FakeBillingGateway
from tests.unit.seed import OWNER_CUSTOMER, World, seed_world


@pytest.fixture
def gateway() -> FakeBillingGateway:
    """Gateway with catalog prices for every plan and a card on file for the home owner."""
    return FakeBillingGateway(
        prices={
            PlanType.SINGLE_CAN: Decimal("6.00"),
            PlanType.DOUBLE_CAN: Decimal("7.50"),
            PlanType.TRIPLE_CAN: Decimal("9.00"),
        },
        customers_with_payment_method={OWNER_CUSTOMER},
    )


@pytest.fixture
async def world(db) -> World:
    """Seeded owner, workers, operator, home and weekly service."""
    return await seed_world()


@pytest.fixture
def owner(world: World) -> PayerActor:
    return PayerActor(user_id=world.owner_id)


@pytest.fixture
def other_payer(world: World) -> PayerActor:
    return PayerActor(user_id=world.other_payer_id)


@pytest.fixture
def worker(world: World) -> WorkerActor:
    return WorkerActor(user_id=world.worker_id)


@pytest.fixture
def other_worker(world: World) -> WorkerActor:
    return WorkerActor(user_id=world.other_worker_id)


@pytest.fixture
def operator(world: World) -> OperatorActor:
    return OperatorActor(user_id=world.operator_id)
