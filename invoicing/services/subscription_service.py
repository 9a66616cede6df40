"""
Subscription service - subscription gate and usage-limit enforcement.

Limits are check-then-create: two concurrent creators in one organization can
both pass the check, so a plan limit may be overshot by a small margin.
"""
import logging
import uuid
from datetime import datetime
from typing import Optional, Union

from sqlmodel.ext.asyncio.session import AsyncSession

from invoicing.core.authorization import AuthorizationContext
from invoicing.core.entitlements import (
    LIMIT_FIELDS,
    PLAN_LIMITS,
    PlanType,
    check_limit,
    get_plan_price,
)
from invoicing.core.exceptions import (
    LimitReachedError,
    NotFoundError,
    SubscriptionRequiredError,
    ValidationError,
)
from invoicing.core.permissions import Resource
from invoicing.models.subscription import Subscription
from invoicing.repositories.client_repo import ClientRepository
from invoicing.repositories.invoice_repo import InvoiceRepository
from invoicing.repositories.subscription_repo import SubscriptionRepository
from invoicing.repositories.user_repo import MembershipRepository

logger = logging.getLogger(__name__)


def start_of_month(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


class SubscriptionService:
    """Service for subscription checks and plan management."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.subscription_repo = SubscriptionRepository(session)
        self.client_repo = ClientRepository(session)
        self.invoice_repo = InvoiceRepository(session)
        self.member_repo = MembershipRepository(session)

    async def check_subscription_active(self, organization_id: uuid.UUID) -> Subscription:
        """
        Gate every protected request on a live subscription.

        Raises:
            SubscriptionRequiredError: none, not ``active``, or past its period end
        """
        subscription = await self.subscription_repo.get_for_organization(organization_id)
        if subscription is None or not subscription.is_active():
            logger.info(f"Organization {organization_id} has no active subscription")
            raise SubscriptionRequiredError("Active subscription required")
        if subscription.is_expired():
            logger.info(f"Subscription of organization {organization_id} expired")
            raise SubscriptionRequiredError("Subscription expired")
        return subscription

    async def count_usage(
        self,
        resource_type: Union[Resource, str],
        organization_id: uuid.UUID,
        now: Optional[datetime] = None
    ) -> int:
        """
        Current usage counted against a plan limit.
        Invoices count for the current calendar month; clients and members
        count all-time.
        """
        resource = Resource(resource_type)
        if resource == Resource.INVOICES:
            since = start_of_month(now or datetime.utcnow())
            return await self.invoice_repo.count(organization_id, created_since=since)
        if resource == Resource.CLIENTS:
            return await self.client_repo.count(organization_id)
        if resource == Resource.USERS:
            return await self.member_repo.count(organization_id)
        raise ValueError(f"{resource.value} has no usage limit")

    async def check_usage_limit(
        self,
        resource_type: Union[Resource, str],
        subscription: Subscription,
        organization_id: uuid.UUID
    ) -> bool:
        """Whether one more ``resource_type`` may be created right now."""
        try:
            resource = Resource(resource_type)
        except ValueError:
            return False
        if resource not in LIMIT_FIELDS:
            return False
        current = await self.count_usage(resource, organization_id)
        return check_limit(resource, subscription, current)

    async def enforce_usage_limit(
        self,
        resource_type: Union[Resource, str],
        subscription: Subscription,
        organization_id: uuid.UUID
    ) -> None:
        if not await self.check_usage_limit(resource_type, subscription, organization_id):
            name = getattr(resource_type, "value", resource_type)
            logger.info(f"Organization {organization_id} reached its {name} limit")
            raise LimitReachedError(name)

    async def get_subscription(self, context: AuthorizationContext) -> dict:
        """Current subscription with derived billing details."""
        subscription = await self.subscription_repo.get_for_organization(context.organization_id)
        if subscription is None:
            raise NotFoundError("Subscription")
        return {
            **subscription.model_dump(),
            "monthly_price": subscription.monthly_price,
            "is_expired": subscription.is_expired(),
            "days_until_expiry": subscription.days_until_expiry(),
        }

    async def get_usage(self, context: AuthorizationContext, subscription: Subscription) -> dict:
        """Usage against each plan limit."""
        usage = {}
        for resource, field in LIMIT_FIELDS.items():
            used = await self.count_usage(resource, context.organization_id)
            usage[resource.value] = {
                "used": used,
                "limit": getattr(subscription, field),
                "can_create": check_limit(resource, subscription, used),
            }
        return {"plan_type": subscription.plan_type, "usage": usage}

    async def change_plan(self, context: AuthorizationContext, plan_type: str) -> Subscription:
        """Move the organization to another plan; limits follow the plan table."""
        if plan_type not in PlanType.ALL:
            raise ValidationError(f"Invalid plan. Must be one of: {list(PlanType.ALL)}", "plan_type")

        subscription = await self.subscription_repo.get_for_organization(context.organization_id)
        if subscription is None:
            raise NotFoundError("Subscription")

        old_plan = subscription.plan_type
        subscription.apply_plan(plan_type)
        subscription.updated_at = datetime.utcnow()
        self.session.add(subscription)
        await self.session.commit()
        await self.session.refresh(subscription)

        logger.info(
            f"Organization {context.organization_id} changed plan {old_plan} -> {plan_type} "
            f"by user {context.user_id}"
        )
        return subscription


def list_plans() -> list:
    """Public plan catalogue."""
    return [
        {
            "plan_type": plan,
            "monthly_price": get_plan_price(plan),
            "monthly_invoice_limit": limits.invoices_per_month,
            "monthly_client_limit": limits.clients,
            "monthly_user_limit": limits.users,
        }
        for plan, limits in PLAN_LIMITS.items()
    ]
