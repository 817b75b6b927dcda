"""Extending a recurring service's pending tasks forward to a horizon."""

import logging
from datetime import date

from src.core import db_client
from src.core.errors import RequestValidationError
from src.core.logging import span
from src.core.recurrence import step_dates
from src.domain.service import ServiceFrequency, ServiceStatus
from src.domain.task import GenerationResult, TaskStatus
from src.domain.user import Actor
from src.interface.billing_gateway import BillingGateway
from src.services import authorization, service_registry
from src.services.billing_checks import has_billing_setup


logger = logging.getLogger(__name__)

BILLING_SETUP_REQUIRED_MESSAGE = "Task generation skipped - homeowner billing setup required"


async def generate_recurring_tasks(
    *,
    service_id: int,
    end_date: date,
    gateway: BillingGateway,
    actor: Actor | None = None,
) -> GenerationResult:
    """Generate pending tasks from the latest scheduled date (or start date) up to ``end_date``.

    The anchor date itself is not generated again. Every new task carries the
    service's current price. If the home owner has no valid payment method,
    nothing is generated and the result is marked skipped.

    Args:
        service_id: Recurring service to extend
        end_date: Last date that may receive a task
        gateway: Billing gateway for the payment-method check
        actor: Acting party; None for system-initiated runs

    Returns:
        Number of tasks generated and whether generation was skipped

    Raises:
        NotFoundError: If the service does not exist
        AuthorizationError: If the actor may not generate tasks for the service
        RequestValidationError: If the service is one-time or not active
    """
    with span("recurring_generator.generate_recurring_tasks"):
        service = await service_registry.get_service(service_id=service_id)
        home = await service_registry.get_home(home_id=service.home_id)
        if actor is not None:
            authorization.authorize_task_generation(actor, home_owner_id=home.owner_id)

        if service.frequency == ServiceFrequency.ONETIME:
            raise RequestValidationError("Cannot generate recurring tasks for one-time service")
        if service.status != ServiceStatus.ACTIVE:
            raise RequestValidationError(f"Service is {service.status}; only active services generate tasks")

        owner = await service_registry.get_user(user_id=home.owner_id)
        if not await has_billing_setup(gateway, owner.stripe_customer_id):
            logger.warning(
                "Skipping task generation: billing not set up",
                extra={"service_id": service_id, "owner_id": home.owner_id},
            )
            return GenerationResult(tasks_generated=0, skipped=True, message=BILLING_SETUP_REQUIRED_MESSAGE)

        async with db_client.transaction() as tx:
            last = await tx.fetch_one(
                "SELECT MAX(scheduled_date) AS last_date FROM tasks WHERE service_id = ?",
                (service_id,),
            )
            anchor = date.fromisoformat(last["last_date"]) if last and last["last_date"] else service.start_date
            dates = step_dates(anchor, service.frequency, end_date)

            generated = await tx.execute_many(
                "INSERT INTO tasks (service_id, scheduled_date, status, price_per_task) VALUES (?, ?, ?, ?)",
                [(service_id, d, TaskStatus.PENDING, service.price_per_task) for d in dates],
            )

        logger.info(
            "Generated recurring tasks",
            extra={"service_id": service_id, "anchor": anchor.isoformat(), "tasks_generated": generated},
        )
        return GenerationResult(tasks_generated=generated, message=f"Generated {generated} tasks")
