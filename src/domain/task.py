"""Task domain models and enums."""

from datetime import date, datetime
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class TaskStatus(StrEnum):
    """Task lifecycle state. Every state except pending is terminal."""

    PENDING = "pending"
    COMPLETED = "completed"
    MISSED = "missed"
    CANCELLED = "cancelled"


class Task(BaseModel):
    """Task data transfer object."""

    id: int = Field(..., description="Unique task ID from database")
    service_id: int = Field(..., description="Owning service ID")
    scheduled_date: date = Field(..., description="Date the work is due")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="Current lifecycle state")
    completed_at: datetime | None = Field(default=None, description="Set only on completion")
    photo_url: str | None = Field(default=None, description="Evidence photo reference")
    notes: str | None = Field(default=None, description="Free-text notes")
    can_number: int | None = Field(default=None, description="Can number for scheduled pickups")
    price_per_task: Decimal = Field(..., description="Price captured when the task was created")


class ScheduledTask(BaseModel):
    """A task descriptor produced by schedule generation, not yet persisted."""

    model_config = ConfigDict(frozen=True)

    scheduled_date: date
    can_number: int | None = None
    price_per_task: Decimal
    notes: str | None = None


class GenerationResult(BaseModel):
    """Outcome of extending a service's task horizon."""

    tasks_generated: int = Field(default=0, description="Number of tasks inserted")
    skipped: bool = Field(default=False, description="True when billing setup blocked generation")
    message: str = Field(..., description="Human-readable outcome")
