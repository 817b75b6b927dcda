"""Usage reporting for completed tasks."""

import logging
from datetime import UTC, datetime

from src.core.config import constants
from src.core.logging import log_gateway_failure, span
from src.domain.billing import UsageEvent
from src.domain.task import Task
from src.interface.billing_gateway import BillingGateway


logger = logging.getLogger(__name__)


def build_idempotency_key(task_id: int, at: datetime) -> str:
    """Return ``task_{id}_{epoch_ms}`` for a report attempt."""
    return f"task_{task_id}_{int(at.timestamp() * 1000)}"


async def report_task_usage(
    *,
    task: Task,
    customer_ref: str | None,
    gateway: BillingGateway,
    now: datetime | None = None,
) -> UsageEvent | None:
    """Report one unit of usage for a completed task.

    Makes exactly one gateway call. Failures are logged and swallowed; the task
    table stays the record of what was completed.

    Args:
        task: The completed task
        customer_ref: Billing customer of the home owner
        gateway: Billing gateway
        now: Report timestamp (defaults to the current time)

    Returns:
        The reported event, or None if nothing was reported
    """
    with span("usage_reporter.report_task_usage"):
        if not customer_ref:
            logger.warning("No billing customer for completed task, usage not reported", extra={"task_id": task.id})
            return None

        reported_at = now or datetime.now(UTC)
        event = UsageEvent(
            task_id=task.id,
            customer_ref=customer_ref,
            idempotency_key=build_idempotency_key(task.id, reported_at),
            quantity=constants.USAGE_QUANTITY_PER_TASK,
            reported_at=reported_at,
        )

        try:
            await gateway.report_usage(event.customer_ref, event.idempotency_key, event.quantity)
        except Exception as e:
            log_gateway_failure(
                logger,
                "report_usage",
                e,
                task_id=task.id,
                service_id=task.service_id,
                idempotency_key=event.idempotency_key,
            )
            return None

        logger.info("Usage reported", extra={"task_id": task.id, "idempotency_key": event.idempotency_key})
        return event
