"""Tests for the HTTP routes, driven through an in-process ASGI client."""

from datetime import date
from decimal import Decimal

import httpx
import pytest
from fastapi import FastAPI

from src.interface import api_router
from tests.unit.seed import seed_profile, seed_task, tasks_for


@pytest.fixture
def app(gateway) -> FastAPI:
    test_app = FastAPI()
    test_app.include_router(api_router.router)
    api_router.register_error_handlers(test_app)
    test_app.state.billing_gateway = gateway
    return test_app


@pytest.fixture
async def client(app):
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as c:
        yield c


def _as(user_id: int, role: str) -> dict[str, str]:
    return {"X-Actor-Id": str(user_id), "X-Actor-Role": role}


@pytest.mark.unit
class TestActorHeaders:
    """Tests for the acting-party dependency."""

    async def test_missing_headers(self, world, client):
        response = await client.get(f"/services/{world.service_id}")

        assert response.status_code == 401
        assert response.json()["detail"] == "Missing actor headers"

    async def test_unknown_role(self, world, client):
        response = await client.get(f"/services/{world.service_id}", headers=_as(world.owner_id, "landlord"))

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid actor role"

    async def test_role_is_case_insensitive(self, world, client):
        response = await client.get(f"/services/{world.service_id}", headers=_as(world.owner_id, "Payer"))

        assert response.status_code == 200


@pytest.mark.unit
class TestServiceRoutes:
    """Tests for /services."""

    async def test_create_service(self, world, client):
        response = await client.post(
            "/services",
            headers=_as(world.owner_id, "payer"),
            json={
                "home_id": world.home_id,
                "worker_id": world.worker_id,
                "plan_type": "triple_can",
                "frequency": "weekly",
                "price_per_task": "8.00",
                "start_date": "2025-02-01",
                "pickup_days": [{"day_of_week": "Friday", "can_number": 3}],
            },
        )

        assert response.status_code == 201
        body = response.json()
        assert Decimal(body["price_per_task"]) == Decimal("9.00")
        assert body["pickup_days"] == [{"day_of_week": "Friday", "can_number": 3}]

    async def test_unknown_weekday_is_422(self, world, client):
        response = await client.post(
            f"/services/{world.service_id}/change-plan",
            headers=_as(world.owner_id, "payer"),
            json={
                "plan_type": "double_can",
                "price_per_task": "4.00",
                "pickup_days": [{"day_of_week": "Funday", "can_number": 1}],
            },
        )

        assert response.status_code == 422

    async def test_change_plan(self, world, client, gateway):
        response = await client.post(
            f"/services/{world.service_id}/change-plan",
            headers=_as(world.owner_id, "payer"),
            json={"plan_type": "double_can", "price_per_task": "4.00"},
        )

        assert response.status_code == 200
        assert response.json()["plan_type"] == "double_can"
        assert gateway.subscription_syncs

    async def test_change_plan_forbidden(self, world, client):
        response = await client.post(
            f"/services/{world.service_id}/change-plan",
            headers=_as(world.other_payer_id, "payer"),
            json={"plan_type": "double_can", "price_per_task": "4.00"},
        )

        assert response.status_code == 403
        assert response.json()["code"] == "ERR_PERMISSION_DENIED"

    async def test_unknown_service_is_404(self, world, client):
        response = await client.get("/services/9999", headers=_as(world.owner_id, "payer"))

        assert response.status_code == 404
        assert response.json()["code"] == "ERR_NOT_FOUND"

    async def test_generate_tasks(self, world, client):
        response = await client.post(
            f"/services/{world.service_id}/generate-tasks",
            headers=_as(world.owner_id, "payer"),
            json={"end_date": "2024-01-22"},
        )

        assert response.status_code == 200
        assert response.json()["tasks_generated"] == 3
        assert len(await tasks_for(world.service_id)) == 3

    async def test_generate_tasks_skipped_without_billing(self, world, client, gateway):
        gateway.customers_with_payment_method.clear()

        response = await client.post(
            f"/services/{world.service_id}/generate-tasks",
            headers=_as(world.owner_id, "payer"),
            json={"end_date": "2024-01-22"},
        )

        assert response.status_code == 200
        assert response.json()["skipped"] is True

    async def test_cancel_with_pending_tasks_is_409(self, world, client):
        await seed_task(service_id=world.service_id, scheduled_date=date(2025, 1, 14))

        response = await client.delete(f"/services/{world.service_id}", headers=_as(world.owner_id, "payer"))

        assert response.status_code == 409

    async def test_pause(self, world, client):
        response = await client.post(f"/services/{world.service_id}/pause", headers=_as(world.owner_id, "payer"))

        assert response.status_code == 200
        assert response.json()["status"] == "paused"

    async def test_stats(self, world, client):
        await seed_task(service_id=world.service_id, scheduled_date=date(2025, 1, 7), status="completed")

        response = await client.get(f"/services/{world.service_id}/stats", headers=_as(world.owner_id, "payer"))

        assert response.status_code == 200
        assert response.json()["completed_tasks"] == 1
        assert Decimal(response.json()["total_earned"]) == Decimal("5.00")


@pytest.mark.unit
class TestTaskRoutes:
    """Tests for /tasks."""

    async def test_complete_then_conflict(self, world, client, gateway):
        task_id = await seed_task(service_id=world.service_id, scheduled_date=date(2025, 1, 14))

        first = await client.post(
            f"/tasks/{task_id}/complete",
            headers=_as(world.worker_id, "worker"),
            json={"photo_url": "photos/1.jpg"},
        )
        second = await client.post(f"/tasks/{task_id}/complete", headers=_as(world.worker_id, "worker"), json={})

        assert first.status_code == 200
        assert first.json()["status"] == "completed"
        assert second.status_code == 409
        assert second.json()["code"] == "ERR_INVALID_STATE_TRANSITION"
        assert len(gateway.usage_reports) == 1

    async def test_complete_by_payer_forbidden(self, world, client):
        task_id = await seed_task(service_id=world.service_id, scheduled_date=date(2025, 1, 14))

        response = await client.post(f"/tasks/{task_id}/complete", headers=_as(world.owner_id, "payer"), json={})

        assert response.status_code == 403

    async def test_create_and_list(self, world, client):
        created = await client.post(
            "/tasks",
            headers=_as(world.owner_id, "payer"),
            json={"service_id": world.service_id, "scheduled_date": "2025-01-20"},
        )
        listed = await client.get(
            "/tasks",
            headers=_as(world.owner_id, "payer"),
            params={"service_id": world.service_id, "task_status": "pending"},
        )

        assert created.status_code == 201
        assert [t["id"] for t in listed.json()] == [created.json()["id"]]

    async def test_cancel_and_missed(self, world, client):
        cancel_id = await seed_task(service_id=world.service_id, scheduled_date=date(2025, 1, 14))
        missed_id = await seed_task(service_id=world.service_id, scheduled_date=date(2025, 1, 21))

        cancelled = await client.post(f"/tasks/{cancel_id}/cancel", headers=_as(world.owner_id, "payer"))
        missed = await client.post(f"/tasks/{missed_id}/missed", headers=_as(world.worker_id, "worker"))

        assert cancelled.json()["status"] == "cancelled"
        assert missed.json()["status"] == "missed"

    async def test_unknown_task_is_404(self, world, client):
        response = await client.post("/tasks/999/cancel", headers=_as(world.operator_id, "operator"))

        assert response.status_code == 404


@pytest.mark.unit
class TestProfileRoutes:
    """Tests for /profiles."""

    async def test_assign_and_lookup(self, world, client):
        await seed_profile(user_id=world.worker_id)

        assigned = await client.post(
            f"/profiles/{world.worker_id}/referral-code", headers=_as(world.worker_id, "worker")
        )
        code = assigned.json()["referral_code"]
        found = await client.get(
            f"/profiles/by-referral-code/{code.lower()}", headers=_as(world.owner_id, "payer")
        )

        assert assigned.status_code == 200
        assert found.status_code == 200
        assert found.json()["user_id"] == world.worker_id

    async def test_lookup_unknown_code(self, world, client):
        response = await client.get("/profiles/by-referral-code/ZZZZ", headers=_as(world.owner_id, "payer"))

        assert response.status_code == 404


@pytest.mark.unit
async def test_health_check():
    """Test the health endpoint of the real application."""
    from src.main import app

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as c:
        response = await c.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
