"""Plan transitions: atomic price, plan and schedule replacement with post-commit subscription sync."""

import logging
from datetime import date

from src.core import db_client
from src.core.errors import RequestValidationError
from src.core.logging import log_gateway_failure, span
from src.core.recurrence import month_bounds
from src.domain.create_models import ChangePlanRequest
from src.domain.service import PlanType, Service, ServiceStatus, plan_display_name
from src.domain.task import TaskStatus
from src.domain.user import Actor, Home
from src.interface.billing_gateway import BillingGateway
from src.services import authorization, service_registry
from src.services.billing_checks import resolve_plan_price
from src.services.schedule_generator import generate_month_schedule, regeneration_window


logger = logging.getLogger(__name__)


async def change_plan(
    *,
    service_id: int,
    actor: Actor,
    request: ChangePlanRequest,
    gateway: BillingGateway,
    today: date | None = None,
) -> Service:
    """Move a service to a new plan tier, optionally replacing its weekly schedule.

    Price, plan and schedule change together in one transaction. When new pickup
    days are given, the pending tasks of the current month are deleted and
    regenerated from them at the resolved price; completed, missed and
    cancelled tasks and tasks outside the month are left alone. The external
    subscription is switched after commit and a failure there is only logged.

    Args:
        service_id: Service to transition
        actor: Acting party
        request: Target plan, fallback price and optional new pickup days
        gateway: Billing gateway for the price catalog and subscription sync
        today: Date that selects the current month (defaults to today)

    Returns:
        The updated service with its pickup days

    Raises:
        NotFoundError: If the service or its home does not exist
        AuthorizationError: If the actor may not change this service's plan
        RequestValidationError: If the service is not active
    """
    with span("plan_transition.change_plan"):
        service = await service_registry.get_service(service_id=service_id)
        home = await service_registry.get_home(home_id=service.home_id)
        authorization.authorize_plan_change(actor, home_owner_id=home.owner_id)

        if service.status != ServiceStatus.ACTIVE:
            raise RequestValidationError(f"Service is {service.status}; only active services can change plan")

        # Network call stays outside the transaction
        price = await resolve_plan_price(gateway, request.plan_type, request.price_per_task)

        month_start, month_end = month_bounds(today or date.today())
        window_start, window_end = regeneration_window(month_start, month_end)

        tasks_deleted = 0
        tasks_created = 0
        async with db_client.transaction() as tx:
            await tx.execute(
                "UPDATE services SET price_per_task = ?, name = ?, plan_type = ?, updated = datetime('now') "
                "WHERE id = ?",
                (price, plan_display_name(request.plan_type), request.plan_type, service_id),
            )

            if request.pickup_days is not None:
                await tx.execute("DELETE FROM service_pickup_days WHERE service_id = ?", (service_id,))
                await tx.execute_many(
                    "INSERT INTO service_pickup_days (service_id, day_of_week, can_number) VALUES (?, ?, ?)",
                    [(service_id, p.day_of_week, p.can_number) for p in request.pickup_days],
                )

                tasks_deleted = await tx.execute(
                    "DELETE FROM tasks WHERE service_id = ? AND status = ? AND scheduled_date BETWEEN ? AND ?",
                    (service_id, TaskStatus.PENDING, window_start, window_end),
                )

                schedule = generate_month_schedule(request.pickup_days, month_start, month_end, price)
                tasks_created = await tx.execute_many(
                    "INSERT INTO tasks (service_id, scheduled_date, status, notes, can_number, price_per_task) "
                    "VALUES (?, ?, ?, ?, ?, ?)",
                    [
                        (service_id, t.scheduled_date, TaskStatus.PENDING, t.notes, t.can_number, t.price_per_task)
                        for t in schedule
                    ],
                )

        logger.info(
            "Plan changed",
            extra={
                "service_id": service_id,
                "plan_type": str(request.plan_type),
                "price_per_task": str(price),
                "tasks_deleted": tasks_deleted,
                "tasks_created": tasks_created,
            },
        )

        await _sync_subscription(gateway, home, request.plan_type, service_id)
        return await service_registry.get_service(service_id=service_id)


async def _sync_subscription(gateway: BillingGateway, home: Home, plan_type: PlanType, service_id: int) -> None:
    """Best-effort switch of the home's subscription; never raises."""
    if not home.stripe_subscription_id:
        logger.warning(
            "No subscription to sync for home",
            extra={"home_id": home.id, "service_id": service_id, "plan_type": str(plan_type)},
        )
        return

    try:
        await gateway.sync_subscription_plan(home.stripe_subscription_id, plan_type)
    except Exception as e:
        log_gateway_failure(
            logger,
            "sync_subscription_plan",
            e,
            home_id=home.id,
            service_id=service_id,
            subscription_ref=home.stripe_subscription_id,
            plan_type=str(plan_type),
        )
