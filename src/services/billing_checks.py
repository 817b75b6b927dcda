"""Gateway lookups shared by services: catalog price with fallback, payer billing check.

Both helpers run outside any database transaction and never raise on gateway
failure; they fall back and log instead.
"""

import logging
from decimal import Decimal

from src.core.logging import log_gateway_failure
from src.domain.service import PlanType
from src.interface.billing_gateway import BillingGateway


logger = logging.getLogger(__name__)


async def resolve_plan_price(gateway: BillingGateway, plan_type: PlanType, fallback: Decimal) -> Decimal:
    """Return the catalog price for a plan, or ``fallback`` when it cannot be fetched.

    Args:
        gateway: Billing gateway to query
        plan_type: Target plan tier
        fallback: Caller-supplied price

    Returns:
        The authoritative price if available, else the fallback
    """
    try:
        plan_price = await gateway.get_plan_price(plan_type)
    except Exception as e:
        log_gateway_failure(logger, "get_plan_price", e, plan_type=str(plan_type))
        return fallback

    if plan_price is None:
        logger.warning(
            "No catalog price for plan, using requested price",
            extra={"plan_type": str(plan_type), "fallback": str(fallback)},
        )
        return fallback
    return plan_price.amount


async def has_billing_setup(gateway: BillingGateway, customer_ref: str | None) -> bool:
    """Return whether a payer can be billed.

    A missing customer reference, a negative answer and a gateway failure all
    count as not set up.
    """
    if not customer_ref:
        return False
    try:
        return await gateway.has_valid_payment_method(customer_ref)
    except Exception as e:
        log_gateway_failure(logger, "has_valid_payment_method", e, customer_ref=customer_ref)
        return False
