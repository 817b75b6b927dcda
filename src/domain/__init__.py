"""Domain models and DTOs."""

from src.domain.billing import Payment, PaymentStatus, PaymentType, PlanPrice, UsageEvent
from src.domain.create_models import (
    ChangePlanRequest,
    CompleteTaskRequest,
    GenerateTasksRequest,
    PickupDayCreate,
    ServiceCreate,
    TaskCreate,
)
from src.domain.service import (
    PickupDay,
    PlanType,
    Service,
    ServiceFrequency,
    ServiceStats,
    ServiceStatus,
    plan_display_name,
)
from src.domain.task import GenerationResult, ScheduledTask, Task, TaskStatus
from src.domain.user import Actor, Home, OperatorActor, PayerActor, Profile, User, UserRole, WorkerActor


__all__ = [
    "Actor",
    "ChangePlanRequest",
    "CompleteTaskRequest",
    "GenerateTasksRequest",
    "GenerationResult",
    "Home",
    "OperatorActor",
    "PayerActor",
    "Payment",
    "PaymentStatus",
    "PaymentType",
    "PickupDay",
    "PickupDayCreate",
    "PlanPrice",
    "PlanType",
    "Profile",
    "ScheduledTask",
    "Service",
    "ServiceCreate",
    "ServiceFrequency",
    "ServiceStats",
    "ServiceStatus",
    "Task",
    "TaskCreate",
    "TaskStatus",
    "UsageEvent",
    "User",
    "UserRole",
    "WorkerActor",
    "plan_display_name",
]
