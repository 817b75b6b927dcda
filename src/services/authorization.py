"""Authorization matrix: one check per operation over the closed Actor variant.

Each function returns None when the actor may proceed and raises
AuthorizationError otherwise. Checks run before any mutation.
"""

import logging

from src.core.errors import AuthorizationError
from src.domain.user import Actor, OperatorActor, PayerActor, WorkerActor


logger = logging.getLogger(__name__)


def _deny(actor: Actor, operation: str, message: str) -> AuthorizationError:
    logger.warning(
        "Authorization denied",
        extra={"operation": operation, "actor_id": actor.user_id, "actor_role": actor.role},
    )
    return AuthorizationError(message)


def _authorize_home_owner(actor: Actor, home_owner_id: int, operation: str) -> None:
    if isinstance(actor, OperatorActor):
        return
    if isinstance(actor, PayerActor) and actor.user_id == home_owner_id:
        return
    raise _deny(actor, operation, "You can only manage services for your own homes")


def authorize_plan_change(actor: Actor, *, home_owner_id: int) -> None:
    """Payer must own the home; operators always may; workers never."""
    _authorize_home_owner(actor, home_owner_id, "change_plan")


def authorize_service_management(actor: Actor, *, home_owner_id: int) -> None:
    """Create, pause, resume or cancel a service: same rule as a plan change."""
    _authorize_home_owner(actor, home_owner_id, "manage_service")


def authorize_task_generation(actor: Actor, *, home_owner_id: int) -> None:
    """Extend a service's task horizon: owning payer or operator."""
    _authorize_home_owner(actor, home_owner_id, "generate_tasks")


def authorize_task_completion(actor: Actor, *, assigned_worker_id: int | None) -> None:
    """Only the assigned worker may complete a task."""
    if isinstance(actor, WorkerActor) and assigned_worker_id is not None and actor.user_id == assigned_worker_id:
        return
    raise _deny(actor, "complete_task", "You can only complete your own tasks")


def authorize_task_cancel(actor: Actor, *, assigned_worker_id: int | None, home_owner_id: int) -> None:
    """Assigned worker, owning payer or operator may cancel."""
    if isinstance(actor, OperatorActor):
        return
    if isinstance(actor, WorkerActor) and actor.user_id == assigned_worker_id:
        return
    if isinstance(actor, PayerActor) and actor.user_id == home_owner_id:
        return
    raise _deny(actor, "cancel_task", "You can only cancel tasks you are assigned to or that belong to your home")


def authorize_task_missed(actor: Actor, *, assigned_worker_id: int | None) -> None:
    """Assigned worker or operator may mark a task missed."""
    if isinstance(actor, OperatorActor):
        return
    if isinstance(actor, WorkerActor) and actor.user_id == assigned_worker_id:
        return
    raise _deny(actor, "mark_task_missed", "You can only mark your own tasks as missed")


def authorize_task_creation(actor: Actor, *, home_owner_id: int) -> None:
    """Manual one-off tasks: owning payer or operator."""
    _authorize_home_owner(actor, home_owner_id, "create_task")


def authorize_profile_access(actor: Actor, *, user_id: int) -> None:
    """A user may act on their own profile; operators on any."""
    if isinstance(actor, OperatorActor) or actor.user_id == user_id:
        return
    raise _deny(actor, "profile_access", "You can only manage your own profile")
