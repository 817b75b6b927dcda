"""User, profile and acting-party models."""

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, Field


class UserRole(StrEnum):
    """Role a user acts in."""

    WORKER = "worker"
    PAYER = "payer"
    OPERATOR = "operator"


class User(BaseModel):
    """User data transfer object."""

    id: int = Field(..., description="Unique user ID from database")
    email: str = Field(..., description="Email address")
    role: UserRole = Field(..., description="worker, payer or operator")
    stripe_customer_id: str | None = Field(default=None, description="Billing customer reference")


class Profile(BaseModel):
    """Profile data transfer object."""

    id: int = Field(..., description="Unique profile ID from database")
    user_id: int = Field(..., description="User the profile belongs to")
    first_name: str | None = Field(default=None, description="Given name")
    last_name: str | None = Field(default=None, description="Family name")
    referral_code: str | None = Field(default=None, description="Shareable referral short code")
    referred_by: int | None = Field(default=None, description="User who referred this user")


class Home(BaseModel):
    """Home data transfer object."""

    id: int = Field(..., description="Unique home ID from database")
    owner_id: int = Field(..., description="Paying owner user ID")
    name: str = Field(..., description="Home display name")
    stripe_subscription_id: str | None = Field(default=None, description="Billing subscription reference")


class WorkerActor(BaseModel):
    """A worker acting on tasks assigned to them."""

    role: Literal["worker"] = "worker"
    user_id: int


class PayerActor(BaseModel):
    """A paying home owner."""

    role: Literal["payer"] = "payer"
    user_id: int


class OperatorActor(BaseModel):
    """A platform operator who may act on any resource."""

    role: Literal["operator"] = "operator"
    user_id: int


Actor = Annotated[WorkerActor | PayerActor | OperatorActor, Field(discriminator="role")]
