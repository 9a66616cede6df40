"""
API dependencies - shared across all routes.

Protected routes run the authorization pipeline in a fixed order:
organization resolution, subscription gate, permission, then usage limit.
Each step is a dependency on the previous one, so the first failure wins.
"""
import uuid
from typing import Callable

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlmodel.ext.asyncio.session import AsyncSession

from invoicing.config import settings
from invoicing.core.authorization import AuthorizationContext, OrganizationHints
from invoicing.core.exceptions import NotFoundError, UnauthorizedError
from invoicing.core.permissions import ActionLike, Resource, ResourceLike
from invoicing.core.security import verify_token
from invoicing.database import get_session
from invoicing.models.subscription import Subscription
from invoicing.models.user import User
from invoicing.services.auth_service import AuthService
from invoicing.services.authorization_service import AuthorizationService
from invoicing.services.subscription_service import SubscriptionService


oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/auth/login")


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    session: AsyncSession = Depends(get_session)
) -> User:
    """Get current authenticated user from JWT token."""
    user_id = verify_token(token, "access")
    if not user_id:
        raise UnauthorizedError("Could not validate credentials")

    return await AuthService(session).get_user(user_id)


def get_organization_hints(request: Request) -> OrganizationHints:
    """Organization hints carried by the request, in precedence order."""
    return OrganizationHints(
        header=request.headers.get(settings.ORGANIZATION_HEADER),
        query=request.query_params.get("organization_id"),
        path=request.path_params.get("organization_id"),
    )


async def get_authorization_context(
    hints: OrganizationHints = Depends(get_organization_hints),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
) -> AuthorizationContext:
    """Resolve the acting organization and the caller's role in it."""
    return await AuthorizationService(session).resolve_organization(hints, current_user.id)


async def get_active_subscription(
    context: AuthorizationContext = Depends(get_authorization_context),
    session: AsyncSession = Depends(get_session)
) -> Subscription:
    """Subscription gate: the acting organization must have a live subscription."""
    return await SubscriptionService(session).check_subscription_active(context.organization_id)


async def get_gated_context(
    context: AuthorizationContext = Depends(get_authorization_context),
    subscription: Subscription = Depends(get_active_subscription)
) -> AuthorizationContext:
    """Authorization context that already passed the subscription gate."""
    return context


def require_permission(resource: ResourceLike, action: ActionLike) -> Callable:
    """Dependency factory: role must grant ``action`` on ``resource``."""

    async def dependency(
        context: AuthorizationContext = Depends(get_gated_context),
        session: AsyncSession = Depends(get_session)
    ) -> AuthorizationContext:
        return AuthorizationService(session).require_permission(context, resource, action)

    return dependency


def require_ownership_or_permission(
    resource: ResourceLike,
    action: ActionLike,
    id_param: str = "id"
) -> Callable:
    """
    Dependency factory: role grant, or the ``own_`` grant when the caller
    created the row named by path parameter ``id_param``.
    """

    async def dependency(
        request: Request,
        context: AuthorizationContext = Depends(get_gated_context),
        session: AsyncSession = Depends(get_session)
    ) -> AuthorizationContext:
        raw_id = request.path_params.get(id_param)
        try:
            resource_id = uuid.UUID(str(raw_id))
        except ValueError:
            raise NotFoundError(Resource(resource).value.rstrip("s").capitalize(), raw_id)
        return await AuthorizationService(session).require_ownership_or_permission(
            context, resource, action, resource_id
        )

    return dependency


def require_role(*allowed_roles: str) -> Callable:
    """Dependency factory: caller's role must be one of ``allowed_roles``."""

    async def dependency(
        context: AuthorizationContext = Depends(get_gated_context),
        session: AsyncSession = Depends(get_session)
    ) -> AuthorizationContext:
        return AuthorizationService(session).require_role(context, *allowed_roles)

    return dependency


def enforce_usage_limit(resource: ResourceLike, action: ActionLike) -> Callable:
    """
    Dependency factory for creations: permission first, then the plan limit
    for ``resource``.
    """
    permission = require_permission(resource, action)

    async def dependency(
        context: AuthorizationContext = Depends(permission),
        subscription: Subscription = Depends(get_active_subscription),
        session: AsyncSession = Depends(get_session)
    ) -> AuthorizationContext:
        await SubscriptionService(session).enforce_usage_limit(
            resource, subscription, context.organization_id
        )
        return context

    return dependency
