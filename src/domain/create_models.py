"""Pydantic models for requests that create or mutate records."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from src.core.recurrence import WEEKDAY_NAMES, parse_weekday
from src.domain.service import PlanType, ServiceFrequency


class PickupDayCreate(BaseModel):
    """A requested (weekday, can number) pair."""

    day_of_week: str = Field(..., description="Weekday name, e.g. 'Monday'")
    can_number: int = Field(..., ge=1, le=3, description="Which can is put out (1-3)")

    @field_validator("day_of_week")
    @classmethod
    def validate_day_of_week(cls, v: str) -> str:
        """Reject unknown weekday names and normalise to 'Monday' style."""
        return WEEKDAY_NAMES[parse_weekday(v)]


class ServiceCreate(BaseModel):
    """Pydantic model for creating a service record."""

    home_id: int = Field(..., description="Home the service belongs to")
    worker_id: int | None = Field(default=None, description="Assigned worker user ID")
    plan_type: PlanType | None = Field(default=None, description="Capacity tier")
    frequency: ServiceFrequency = Field(..., description="weekly, biweekly, monthly or onetime")
    price_per_task: Decimal = Field(..., gt=0, description="Fallback price when the catalog is unavailable")
    start_date: date = Field(..., description="First day the service runs")
    end_date: date | None = Field(default=None, description="Last day the service runs")
    pickup_days: list[PickupDayCreate] = Field(default_factory=list, description="Weekly pickup pattern")


class ChangePlanRequest(BaseModel):
    """Pydantic model for a plan transition."""

    plan_type: PlanType = Field(..., description="Target capacity tier")
    price_per_task: Decimal = Field(..., gt=0, description="Fallback price when the catalog is unavailable")
    pickup_days: list[PickupDayCreate] | None = Field(
        default=None,
        description="Replacement weekly pattern; omitted to keep the current schedule",
    )


class TaskCreate(BaseModel):
    """Pydantic model for a manual one-off task."""

    service_id: int = Field(..., description="Owning service ID")
    scheduled_date: date = Field(..., description="Date the work is due")
    notes: str | None = Field(default=None, description="Free-text notes")


class CompleteTaskRequest(BaseModel):
    """Pydantic model for completing a task."""

    photo_url: str | None = Field(default=None, description="Evidence photo reference")
    notes: str | None = Field(default=None, description="Free-text notes")


class GenerateTasksRequest(BaseModel):
    """Pydantic model for extending a service's task horizon."""

    end_date: date = Field(..., description="Generate tasks up to and including this date")
