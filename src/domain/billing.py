"""Billing value objects exchanged with the metered-billing gateway."""

from datetime import datetime
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, Field


class PaymentType(StrEnum):
    """Kind of payment owed to a worker."""

    TASK_COMPLETION = "task_completion"


class PaymentStatus(StrEnum):
    """Payment settlement status."""

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class Payment(BaseModel):
    """Payment data transfer object."""

    id: int = Field(..., description="Unique payment ID from database")
    worker_id: int = Field(..., description="Worker the payment is owed to")
    amount: Decimal = Field(..., description="Amount, taken from the task's stored price")
    type: PaymentType = Field(default=PaymentType.TASK_COMPLETION, description="Payment kind")
    status: PaymentStatus = Field(default=PaymentStatus.PENDING, description="Settlement status")
    description: str | None = Field(default=None, description="Human-readable description")
    reference_id: int | None = Field(default=None, description="ID of the referenced record")
    reference_type: str | None = Field(default=None, description="Type of the referenced record")


class PlanPrice(BaseModel):
    """Live catalog price of a plan tier."""

    amount: Decimal = Field(..., description="Price per task in currency units")
    currency: str = Field(default="usd", description="ISO currency code")


class UsageEvent(BaseModel):
    """One unit of metered consumption reported for a completed task."""

    task_id: int = Field(..., description="Completed task the usage belongs to")
    customer_ref: str = Field(..., description="Billing customer reference")
    idempotency_key: str = Field(..., description="task_{id}_{epoch_ms}")
    quantity: int = Field(default=1, description="Units consumed")
    reported_at: datetime = Field(..., description="When the report was attempted")
