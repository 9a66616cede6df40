"""
Subscription API routes.
"""
from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from invoicing.database import get_session
from invoicing.core.authorization import AuthorizationContext
from invoicing.core.permissions import Action, Resource
from invoicing.models.subscription import Subscription
from invoicing.models.user import User
from invoicing.services.subscription_service import SubscriptionService, list_plans
from invoicing.schemas.subscription import (
    ChangePlanRequest,
    PlanListResponse,
    SubscriptionResponse,
    UsageResponse,
)
from invoicing.api.deps import get_active_subscription, get_current_user, require_permission

router = APIRouter(prefix="/api/subscription", tags=["subscription"])


@router.get("", response_model=SubscriptionResponse)
async def get_subscription(
    context: AuthorizationContext = Depends(require_permission(Resource.SUBSCRIPTION, Action.READ)),
    session: AsyncSession = Depends(get_session)
):
    """Current plan, limits, price and days until the period ends."""
    subscription_service = SubscriptionService(session)
    return await subscription_service.get_subscription(context)


@router.get("/usage", response_model=UsageResponse)
async def get_usage(
    context: AuthorizationContext = Depends(require_permission(Resource.SUBSCRIPTION, Action.READ)),
    subscription: Subscription = Depends(get_active_subscription),
    session: AsyncSession = Depends(get_session)
):
    """Usage against each plan limit."""
    subscription_service = SubscriptionService(session)
    return await subscription_service.get_usage(context, subscription)


@router.put("/plan", response_model=SubscriptionResponse)
async def change_plan(
    request: ChangePlanRequest,
    context: AuthorizationContext = Depends(require_permission(Resource.SUBSCRIPTION, Action.UPDATE)),
    session: AsyncSession = Depends(get_session)
):
    """Switch plan; limits are reset from the plan table."""
    subscription_service = SubscriptionService(session)
    await subscription_service.change_plan(context, request.plan_type)
    return await subscription_service.get_subscription(context)


@router.get("/plans", response_model=PlanListResponse)
async def get_plans(current_user: User = Depends(get_current_user)):
    """Available plans with their limits and prices."""
    return {"plans": list_plans()}
