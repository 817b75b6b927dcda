"""Service domain models and enums."""

from datetime import date
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, Field


class ServiceFrequency(StrEnum):
    """How often a service produces tasks."""

    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    ONETIME = "onetime"


class ServiceStatus(StrEnum):
    """Service lifecycle status. Cancelled is terminal (soft delete)."""

    ACTIVE = "active"
    PAUSED = "paused"
    CANCELLED = "cancelled"


class PlanType(StrEnum):
    """Capacity tier of a trash service."""

    SINGLE_CAN = "single_can"
    DOUBLE_CAN = "double_can"
    TRIPLE_CAN = "triple_can"


DEFAULT_SERVICE_NAME = "Trash Service"

PLAN_DISPLAY_NAMES: dict[PlanType, str] = {
    PlanType.SINGLE_CAN: "Trash Service - Single Can",
    PlanType.DOUBLE_CAN: "Trash Service - Double Can",
    PlanType.TRIPLE_CAN: "Trash Service - Triple Can",
}


def plan_display_name(plan_type: PlanType | str | None) -> str:
    """Return the display name for a plan tier, or the generic service name."""
    if plan_type is None:
        return DEFAULT_SERVICE_NAME
    try:
        return PLAN_DISPLAY_NAMES[PlanType(plan_type)]
    except ValueError:
        return DEFAULT_SERVICE_NAME


class PickupDay(BaseModel):
    """One (weekday, can number) pair of a service's weekly pattern."""

    day_of_week: str = Field(..., description="Weekday name, e.g. 'Monday'")
    can_number: int = Field(..., ge=1, le=3, description="Which can is put out (1-3)")


class Service(BaseModel):
    """Service data transfer object."""

    id: int = Field(..., description="Unique service ID from database")
    home_id: int = Field(..., description="Home the service belongs to")
    worker_id: int | None = Field(default=None, description="Assigned worker user ID")
    name: str = Field(default=DEFAULT_SERVICE_NAME, description="Display name derived from the plan tier")
    plan_type: PlanType | None = Field(default=None, description="Capacity tier")
    frequency: ServiceFrequency = Field(..., description="weekly, biweekly, monthly or onetime")
    price_per_task: Decimal = Field(..., description="Current price charged per task")
    status: ServiceStatus = Field(default=ServiceStatus.ACTIVE, description="Lifecycle status")
    start_date: date = Field(..., description="First day the service runs")
    end_date: date | None = Field(default=None, description="Last day the service runs")
    pickup_days: list[PickupDay] = Field(default_factory=list, description="Weekly pickup pattern")


class ServiceStats(BaseModel):
    """Task counts and earnings for a service."""

    completed_tasks: int = Field(default=0, description="Number of completed tasks")
    pending_tasks: int = Field(default=0, description="Number of pending tasks")
    missed_tasks: int = Field(default=0, description="Number of missed tasks")
    total_earned: Decimal = Field(default=Decimal("0"), description="Sum of stored prices of completed tasks")
