"""Service records: creation, lookup, pausing, soft cancellation and stats."""

import logging
from datetime import date
from decimal import Decimal
from typing import Any

from src.core import db_client
from src.core.db_client import Transaction
from src.core.errors import ConflictError, NotFoundError, RequestValidationError
from src.core.logging import span
from src.domain.create_models import ServiceCreate
from src.domain.service import (
    PickupDay,
    Service,
    ServiceStats,
    ServiceStatus,
    plan_display_name,
)
from src.domain.user import Actor, Home, User
from src.interface.billing_gateway import BillingGateway
from src.services import authorization
from src.services.billing_checks import has_billing_setup, resolve_plan_price


logger = logging.getLogger(__name__)


def _service_from_row(row: dict[str, Any], pickup_days: list[PickupDay]) -> Service:
    return Service.model_validate({**row, "pickup_days": pickup_days})


async def get_user(*, user_id: int) -> User:
    """Fetch a user, raising NotFoundError if missing."""
    try:
        record = await db_client.get_record(collection="users", record_id=user_id)
    except db_client.RecordNotFoundError as e:
        raise NotFoundError("User not found") from e
    return User.model_validate(record)


async def get_home(*, home_id: int) -> Home:
    """Fetch a home, raising NotFoundError if missing."""
    try:
        record = await db_client.get_record(collection="homes", record_id=home_id)
    except db_client.RecordNotFoundError as e:
        raise NotFoundError("Home not found") from e
    return Home.model_validate(record)


async def get_pickup_days(*, service_id: int, tx: Transaction | None = None) -> list[PickupDay]:
    """Return a service's weekly pickup pattern in insertion order."""
    query = (
        "SELECT day_of_week, can_number FROM service_pickup_days "
        "WHERE service_id = ? ORDER BY id ASC"
    )
    rows = await tx.fetch_all(query, (service_id,)) if tx else await db_client.fetch_all(query, (service_id,))
    return [PickupDay.model_validate(row) for row in rows]


async def get_service(*, service_id: int) -> Service:
    """Fetch a service with its pickup days.

    Raises:
        NotFoundError: If the service does not exist
    """
    with span("service_registry.get_service"):
        row = await db_client.fetch_one("SELECT * FROM services WHERE id = ?", (service_id,))
        if row is None:
            raise NotFoundError("Service not found")
        return _service_from_row(row, await get_pickup_days(service_id=service_id))


async def list_services(
    *,
    worker_id: int | None = None,
    home_id: int | None = None,
    status: ServiceStatus | None = None,
) -> list[Service]:
    """List services, newest first, optionally filtered."""
    with span("service_registry.list_services"):
        clauses: list[str] = []
        params: list[Any] = []
        if worker_id is not None:
            clauses.append("worker_id = ?")
            params.append(worker_id)
        if home_id is not None:
            clauses.append("home_id = ?")
            params.append(home_id)
        if status is not None:
            clauses.append("status = ?")
            params.append(status)

        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        rows = await db_client.fetch_all(f"SELECT * FROM services{where} ORDER BY id DESC", params)  # noqa: S608 - clauses are fixed strings

        services = []
        for row in rows:
            services.append(_service_from_row(row, await get_pickup_days(service_id=row["id"])))
        return services


async def create_service(*, actor: Actor, request: ServiceCreate, gateway: BillingGateway) -> Service:
    """Create a service and its pickup days in one transaction.

    The owning payer must have billing set up. The stored price comes from the
    live catalog when the plan has one, else from the request.

    Args:
        actor: Acting party
        request: Service details
        gateway: Billing gateway for the payment-method check and price lookup

    Returns:
        The created service

    Raises:
        NotFoundError: If the home or its owner does not exist
        AuthorizationError: If the actor may not manage the home
        RequestValidationError: If the owner has no valid payment method
    """
    with span("service_registry.create_service"):
        home = await get_home(home_id=request.home_id)
        authorization.authorize_service_management(actor, home_owner_id=home.owner_id)

        owner = await get_user(user_id=home.owner_id)
        if not await has_billing_setup(gateway, owner.stripe_customer_id):
            raise RequestValidationError(
                "Valid payment method required to create services. Please set up automatic billing first."
            )

        price = request.price_per_task
        if request.plan_type is not None:
            price = await resolve_plan_price(gateway, request.plan_type, request.price_per_task)

        async with db_client.transaction() as tx:
            service_id = await tx.insert(
                collection="services",
                data={
                    "home_id": request.home_id,
                    "worker_id": request.worker_id,
                    "name": plan_display_name(request.plan_type),
                    "plan_type": request.plan_type,
                    "frequency": request.frequency,
                    "price_per_task": price,
                    "status": ServiceStatus.ACTIVE,
                    "start_date": request.start_date,
                    "end_date": request.end_date,
                },
            )
            await tx.execute_many(
                "INSERT INTO service_pickup_days (service_id, day_of_week, can_number) VALUES (?, ?, ?)",
                [(service_id, p.day_of_week, p.can_number) for p in request.pickup_days],
            )

        logger.info(
            "Created service",
            extra={"service_id": service_id, "home_id": request.home_id, "price_per_task": str(price)},
        )
        return await get_service(service_id=service_id)


async def set_service_paused(*, service_id: int, actor: Actor, paused: bool, gateway: BillingGateway) -> Service:
    """Pause an active service or resume a paused one.

    Resuming requires the owner's billing to be set up again.

    Raises:
        ConflictError: If the service is cancelled
    """
    with span("service_registry.set_service_paused"):
        service = await get_service(service_id=service_id)
        home = await get_home(home_id=service.home_id)
        authorization.authorize_service_management(actor, home_owner_id=home.owner_id)

        if service.status == ServiceStatus.CANCELLED:
            raise ConflictError("Cancelled services cannot be paused or resumed")

        if not paused:
            owner = await get_user(user_id=home.owner_id)
            if not await has_billing_setup(gateway, owner.stripe_customer_id):
                raise RequestValidationError("Valid payment method required to resume a service")

        new_status = ServiceStatus.PAUSED if paused else ServiceStatus.ACTIVE
        await db_client.execute(
            "UPDATE services SET status = ?, updated = datetime('now') WHERE id = ?",
            (new_status, service_id),
        )
        logger.info("Service status changed", extra={"service_id": service_id, "status": new_status})
        return await get_service(service_id=service_id)


async def cancel_service(*, service_id: int, actor: Actor, today: date | None = None) -> Service:
    """Soft-delete a service: status cancelled, end date today.

    Raises:
        ConflictError: If the service still has pending tasks
    """
    with span("service_registry.cancel_service"):
        service = await get_service(service_id=service_id)
        home = await get_home(home_id=service.home_id)
        authorization.authorize_service_management(actor, home_owner_id=home.owner_id)

        async with db_client.transaction() as tx:
            pending = await tx.fetch_one(
                "SELECT COUNT(*) AS count FROM tasks WHERE service_id = ? AND status = 'pending'",
                (service_id,),
            )
            if pending and pending["count"] > 0:
                raise ConflictError("Cannot cancel a service with pending tasks")

            await tx.execute(
                "UPDATE services SET status = ?, end_date = ?, updated = datetime('now') WHERE id = ?",
                (ServiceStatus.CANCELLED, today or date.today(), service_id),
            )

        logger.info("Service cancelled", extra={"service_id": service_id})
        return await get_service(service_id=service_id)


async def get_service_stats(*, service_id: int) -> ServiceStats:
    """Count completed, pending and missed tasks and total the stored prices of completed ones."""
    with span("service_registry.get_service_stats"):
        await get_service(service_id=service_id)
        rows = await db_client.fetch_all(
            "SELECT status, price_per_task FROM tasks WHERE service_id = ?",
            (service_id,),
        )

        stats = ServiceStats()
        for row in rows:
            if row["status"] == "completed":
                stats.completed_tasks += 1
                # Summed in Python: SQLite would add the TEXT prices as floats
                stats.total_earned += Decimal(row["price_per_task"])
            elif row["status"] == "pending":
                stats.pending_tasks += 1
            elif row["status"] == "missed":
                stats.missed_tasks += 1
        return stats
