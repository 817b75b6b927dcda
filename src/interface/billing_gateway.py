"""Billing gateway Protocol consumed by scheduling and completion services."""

from typing import Protocol

from src.domain.billing import PlanPrice
from src.domain.service import PlanType


class BillingGateway(Protocol):
    """Metered-billing provider capabilities. Every call is fallible and network bound."""

    async def get_plan_price(self, plan_type: PlanType) -> PlanPrice | None:
        """Look up the live catalog price for a plan tier.

        Returns:
            The price, or None when the catalog has no price for the tier
        """
        ...

    async def sync_subscription_plan(self, subscription_ref: str, plan_type: PlanType) -> None:
        """Switch a subscription to the plan's price, prorating immediately."""
        ...

    async def report_usage(self, customer_ref: str, idempotency_key: str, quantity: int) -> None:
        """Report metered usage once per idempotency key."""
        ...

    async def has_valid_payment_method(self, payer_ref: str) -> bool:
        """Return whether the payer has a usable payment method on file."""
        ...
