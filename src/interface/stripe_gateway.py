"""Stripe implementation of the billing gateway."""

import asyncio
import logging
import time
from collections.abc import Callable
from decimal import Decimal
from typing import Any

import stripe

from src.core.config import settings
from src.domain.billing import PlanPrice
from src.domain.service import PlanType


logger = logging.getLogger(__name__)

_CENTS = Decimal("100")


class StripeBillingGateway:
    """Billing gateway backed by the Stripe SDK.

    The SDK is synchronous, so each call runs in a worker thread and is bounded
    by ``billing_gateway_timeout_seconds``. A call past the bound raises
    ``TimeoutError``; callers treat that like any other gateway failure.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        timeout_seconds: float | None = None,
        price_lookup_keys: dict[str, str] | None = None,
        meter_event_name: str | None = None,
    ) -> None:
        self._api_key = api_key or settings.require_credential("stripe_secret_key", "Stripe")
        self._timeout = timeout_seconds or settings.billing_gateway_timeout_seconds
        self._lookup_keys = price_lookup_keys or settings.stripe_price_lookup_keys
        self._meter_event_name = meter_event_name or settings.stripe_meter_event_name

    async def _call(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        return await asyncio.wait_for(
            asyncio.to_thread(func, *args, api_key=self._api_key, **kwargs),
            timeout=self._timeout,
        )

    async def _find_price(self, plan_type: PlanType) -> Any | None:
        lookup_key = self._lookup_keys.get(str(plan_type))
        if lookup_key is None:
            logger.warning("No price lookup key configured", extra={"plan_type": str(plan_type)})
            return None

        prices = await self._call(stripe.Price.list, lookup_keys=[lookup_key], active=True, limit=1)
        if not prices.data:
            logger.warning("No active price for lookup key", extra={"lookup_key": lookup_key})
            return None
        return prices.data[0]

    async def get_plan_price(self, plan_type: PlanType) -> PlanPrice | None:
        """Look up the active price for a plan tier by its lookup key."""
        price = await self._find_price(plan_type)
        if price is None:
            return None

        # StripeObject is not a dict on current SDKs
        fields = price.to_dict()
        unit_amount = fields.get("unit_amount_decimal") or fields.get("unit_amount")
        if unit_amount is None:
            return None
        return PlanPrice(amount=Decimal(str(unit_amount)) / _CENTS, currency=fields.get("currency") or "usd")

    async def sync_subscription_plan(self, subscription_ref: str, plan_type: PlanType) -> None:
        """Swap the subscription's first item to the plan's price with prorations.

        Raises:
            LookupError: If the catalog has no price for the plan or the subscription has no items
        """
        price = await self._find_price(plan_type)
        if price is None:
            raise LookupError(f"No Stripe price for plan {plan_type}")

        subscription = await self._call(stripe.Subscription.retrieve, subscription_ref)
        items = subscription["items"]["data"]
        if not items:
            raise LookupError(f"Subscription {subscription_ref} has no items")

        await self._call(
            stripe.SubscriptionItem.modify,
            items[0]["id"],
            price=price["id"],
            proration_behavior="create_prorations",
        )
        logger.info(
            "Subscription plan updated",
            extra={"subscription_ref": subscription_ref, "plan_type": str(plan_type), "price_id": price["id"]},
        )

    async def report_usage(self, customer_ref: str, idempotency_key: str, quantity: int) -> None:
        """Send one billing meter event; Stripe deduplicates on ``identifier``."""
        await self._call(
            stripe.billing.MeterEvent.create,
            event_name=self._meter_event_name,
            payload={"stripe_customer_id": customer_ref, "value": str(quantity)},
            identifier=idempotency_key,
            timestamp=int(time.time()),
        )

    async def has_valid_payment_method(self, payer_ref: str) -> bool:
        """Return True when the customer has at least one card on file.

        Any Stripe error or timeout counts as no payment method.
        """
        try:
            methods = await self._call(stripe.PaymentMethod.list, customer=payer_ref, type="card")
        except (stripe.StripeError, TimeoutError) as e:
            logger.warning(
                "Payment method check failed",
                extra={"payer_ref": payer_ref, "error": str(e), "error_type": type(e).__name__},
            )
            return False
        return len(methods.data) > 0
