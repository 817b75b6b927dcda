"""Task lookup, manual creation and the pending -> completed/cancelled/missed transitions."""

import logging
from datetime import UTC, date, datetime, timedelta
from typing import Any

from src.core import db_client
from src.core.config import constants
from src.core.errors import ConflictError, NotFoundError, RequestValidationError
from src.core.logging import span
from src.domain.billing import PaymentStatus, PaymentType
from src.domain.create_models import CompleteTaskRequest, TaskCreate
from src.domain.service import ServiceStatus
from src.domain.task import Task, TaskStatus
from src.domain.user import Actor
from src.interface.billing_gateway import BillingGateway
from src.services import authorization, service_registry, usage_reporter
from src.services.billing_checks import has_billing_setup


logger = logging.getLogger(__name__)

_TASK_CONTEXT_QUERY = """
    SELECT t.*, s.worker_id AS worker_id, s.home_id AS home_id, s.name AS service_name,
           h.owner_id AS home_owner_id
    FROM tasks t
    JOIN services s ON t.service_id = s.id
    JOIN homes h ON s.home_id = h.id
    WHERE t.id = ?
"""


async def _get_task_context(task_id: int) -> dict[str, Any]:
    row = await db_client.fetch_one(_TASK_CONTEXT_QUERY, (task_id,))
    if row is None:
        raise NotFoundError("Task not found")
    return row


async def get_task(*, task_id: int) -> Task:
    """Fetch a task.

    Raises:
        NotFoundError: If the task does not exist
    """
    try:
        record = await db_client.get_record(collection="tasks", record_id=task_id)
    except db_client.RecordNotFoundError as e:
        raise NotFoundError("Task not found") from e
    return Task.model_validate(record)


async def list_tasks(
    *,
    service_id: int | None = None,
    worker_id: int | None = None,
    status: TaskStatus | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    limit: int | None = None,
) -> list[Task]:
    """List tasks by scheduled date, optionally filtered."""
    with span("task_service.list_tasks"):
        clauses: list[str] = []
        params: list[Any] = []
        if service_id is not None:
            clauses.append("t.service_id = ?")
            params.append(service_id)
        if worker_id is not None:
            clauses.append("s.worker_id = ?")
            params.append(worker_id)
        if status is not None:
            clauses.append("t.status = ?")
            params.append(status)
        if start_date is not None:
            clauses.append("t.scheduled_date >= ?")
            params.append(start_date)
        if end_date is not None:
            clauses.append("t.scheduled_date <= ?")
            params.append(end_date)

        query = "SELECT t.* FROM tasks t JOIN services s ON t.service_id = s.id"
        if clauses:
            query += f" WHERE {' AND '.join(clauses)}"
        query += " ORDER BY t.scheduled_date ASC, t.id ASC"
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        rows = await db_client.fetch_all(query, params)
        return [Task.model_validate(row) for row in rows]


async def get_upcoming_tasks(
    *,
    worker_id: int,
    days: int = constants.UPCOMING_TASKS_DEFAULT_DAYS,
    today: date | None = None,
) -> list[Task]:
    """Pending tasks for a worker from today through the next ``days`` days."""
    start = today or date.today()
    return await list_tasks(
        worker_id=worker_id,
        status=TaskStatus.PENDING,
        start_date=start,
        end_date=start + timedelta(days=days),
    )


async def create_task(*, actor: Actor, request: TaskCreate, gateway: BillingGateway) -> Task:
    """Create a one-off pending task priced at the service's current price.

    Raises:
        NotFoundError: If the service does not exist
        AuthorizationError: If the actor may not add tasks to the service
        RequestValidationError: If the service is not active or the owner has no billing set up
    """
    with span("task_service.create_task"):
        service = await service_registry.get_service(service_id=request.service_id)
        home = await service_registry.get_home(home_id=service.home_id)
        authorization.authorize_task_creation(actor, home_owner_id=home.owner_id)

        if service.status != ServiceStatus.ACTIVE:
            raise RequestValidationError("Cannot create tasks for inactive services")

        owner = await service_registry.get_user(user_id=home.owner_id)
        if not await has_billing_setup(gateway, owner.stripe_customer_id):
            raise RequestValidationError(
                "Cannot create tasks: homeowner must have valid payment method and billing setup"
            )

        record = await db_client.create_record(
            collection="tasks",
            data={
                "service_id": service.id,
                "scheduled_date": request.scheduled_date,
                "status": TaskStatus.PENDING,
                "notes": request.notes,
                "price_per_task": service.price_per_task,
            },
        )
        logger.info("Created task", extra={"task_id": record["id"], "service_id": service.id})
        return Task.model_validate(record)


async def complete_task(
    *,
    task_id: int,
    actor: Actor,
    request: CompleteTaskRequest,
    gateway: BillingGateway,
    now: datetime | None = None,
) -> Task:
    """Complete a pending task, record the worker's payment and report usage.

    The task update and payment insert commit together; the payment amount is
    the task's stored price. Usage is reported once after commit and a
    reporting failure leaves the completion in place.

    Args:
        task_id: Task to complete
        actor: Acting party; must be the assigned worker
        request: Optional photo reference and notes
        gateway: Billing gateway for usage reporting
        now: Completion timestamp (defaults to the current time)

    Returns:
        The completed task

    Raises:
        NotFoundError: If the task does not exist
        AuthorizationError: If the actor is not the assigned worker
        ConflictError: If the task is not pending
    """
    with span("task_service.complete_task"):
        context = await _get_task_context(task_id)
        authorization.authorize_task_completion(actor, assigned_worker_id=context["worker_id"])

        if context["status"] != TaskStatus.PENDING:
            raise ConflictError("Task is not pending")

        owner = await service_registry.get_user(user_id=context["home_owner_id"])
        task = Task.model_validate(context)
        completed_at = now or datetime.now(UTC)

        async with db_client.transaction() as tx:
            updated = await tx.execute(
                "UPDATE tasks SET status = ?, completed_at = ?, photo_url = ?, notes = COALESCE(?, notes), "
                "updated = datetime('now') WHERE id = ? AND status = ?",
                (TaskStatus.COMPLETED, completed_at, request.photo_url, request.notes, task_id, TaskStatus.PENDING),
            )
            if updated == 0:
                raise ConflictError("Task is not pending")

            await tx.insert(
                collection="payments",
                data={
                    "worker_id": context["worker_id"],
                    "amount": task.price_per_task,
                    "type": PaymentType.TASK_COMPLETION,
                    "status": PaymentStatus.PENDING,
                    "description": f"Task completion: {context['service_name']}",
                    "reference_id": task_id,
                    "reference_type": "task",
                },
            )

        completed = task.model_copy(
            update={
                "status": TaskStatus.COMPLETED,
                "completed_at": completed_at,
                "photo_url": request.photo_url,
                "notes": request.notes if request.notes is not None else task.notes,
            }
        )
        logger.info(
            "Task completed",
            extra={"task_id": task_id, "worker_id": context["worker_id"], "amount": str(task.price_per_task)},
        )

        await usage_reporter.report_task_usage(task=completed, customer_ref=owner.stripe_customer_id, gateway=gateway)
        return completed


async def _transition_pending(task_id: int, new_status: TaskStatus, error_message: str) -> Task:
    async with db_client.transaction() as tx:
        updated = await tx.execute(
            "UPDATE tasks SET status = ?, updated = datetime('now') WHERE id = ? AND status = ?",
            (new_status, task_id, TaskStatus.PENDING),
        )
        if updated == 0:
            raise ConflictError(error_message)
    logger.info("Task status changed", extra={"task_id": task_id, "status": new_status})
    return await get_task(task_id=task_id)


async def cancel_task(*, task_id: int, actor: Actor) -> Task:
    """Cancel a pending task.

    Raises:
        NotFoundError: If the task does not exist
        AuthorizationError: If the actor is neither the assigned worker, the owning payer nor an operator
        ConflictError: If the task is not pending
    """
    with span("task_service.cancel_task"):
        context = await _get_task_context(task_id)
        authorization.authorize_task_cancel(
            actor,
            assigned_worker_id=context["worker_id"],
            home_owner_id=context["home_owner_id"],
        )
        return await _transition_pending(task_id, TaskStatus.CANCELLED, "Only pending tasks can be cancelled")


async def mark_task_missed(*, task_id: int, actor: Actor) -> Task:
    """Mark a pending task as missed.

    Raises:
        NotFoundError: If the task does not exist
        AuthorizationError: If the actor is neither the assigned worker nor an operator
        ConflictError: If the task is not pending
    """
    with span("task_service.mark_task_missed"):
        context = await _get_task_context(task_id)
        authorization.authorize_task_missed(actor, assigned_worker_id=context["worker_id"])
        return await _transition_pending(task_id, TaskStatus.MISSED, "Only pending tasks can be marked missed")
