"""
Subscription plans and usage limits.

A limit of ``UNLIMITED`` (-1) never blocks. Otherwise a creation is allowed
while the current count is strictly below the limit.
"""
from typing import Any, Dict, NamedTuple, Union

from invoicing.core.permissions import Resource

UNLIMITED = -1


class PlanType:
    FREE = "free"
    PRO = "pro"
    BUSINESS = "business"

    ALL = (FREE, PRO, BUSINESS)


class SubscriptionStatus:
    ACTIVE = "active"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
    PAST_DUE = "past_due"
    UNPAID = "unpaid"


class PlanLimits(NamedTuple):
    invoices_per_month: int
    clients: int
    users: int


PLAN_LIMITS: Dict[str, PlanLimits] = {
    PlanType.FREE: PlanLimits(5, 2, 1),
    PlanType.PRO: PlanLimits(100, UNLIMITED, 5),
    PlanType.BUSINESS: PlanLimits(UNLIMITED, UNLIMITED, UNLIMITED),
}

PLAN_PRICES: Dict[str, float] = {
    PlanType.FREE: 0.0,
    PlanType.PRO: 15.0,
    PlanType.BUSINESS: 50.0,
}

# Subscription column holding the limit for each limited resource
LIMIT_FIELDS: Dict[Resource, str] = {
    Resource.INVOICES: "monthly_invoice_limit",
    Resource.CLIENTS: "monthly_client_limit",
    Resource.USERS: "monthly_user_limit",
}


def get_plan_limits(plan: str) -> PlanLimits:
    """Limits for a plan; unknown plans get the free tier."""
    return PLAN_LIMITS.get(plan, PLAN_LIMITS[PlanType.FREE])


def get_plan_price(plan: str) -> float:
    """Monthly price in USD."""
    return PLAN_PRICES.get(plan, 0.0)


def within_limit(limit: int, current_count: int) -> bool:
    if limit == UNLIMITED:
        return True
    return current_count < limit


def check_limit(resource_type: Union[Resource, str], subscription: Any, current_count: int) -> bool:
    """
    Whether one more ``resource_type`` may be created under ``subscription``.

    Resource types without a plan limit are denied.
    """
    try:
        resource = Resource(resource_type)
    except ValueError:
        return False
    field = LIMIT_FIELDS.get(resource)
    if field is None:
        return False
    return within_limit(getattr(subscription, field), current_count)
