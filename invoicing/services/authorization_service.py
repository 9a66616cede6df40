"""
Authorization service - organization resolution and permission gates.

Resolution order for the acting organization:
header hint, query hint, path hint, the caller's current organization, then
the caller's earliest membership. Whatever wins must match a membership of
the caller; explicit hints are never trusted on their own.
"""
import logging
import uuid
from typing import Dict, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from invoicing.core.authorization import (
    AuthorizationContext,
    OrganizationHints,
    authorize,
    require_role,
)
from invoicing.core.exceptions import (
    AccessDeniedError,
    NoOrganizationContextError,
    UnauthorizedError,
)
from invoicing.core.permissions import ActionLike, Resource, ResourceLike
from invoicing.repositories.base import TenantRepository
from invoicing.repositories.client_repo import ClientRepository
from invoicing.repositories.invoice_repo import InvoiceRepository
from invoicing.repositories.user_repo import MembershipRepository, UserRepository

logger = logging.getLogger(__name__)


class AuthorizationService:
    """Builds the per-request AuthorizationContext and enforces it."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repo = UserRepository(session)
        self.member_repo = MembershipRepository(session)
        # Resources whose rows record an owning user
        self.ownable: Dict[Resource, TenantRepository] = {
            Resource.CLIENTS: ClientRepository(session),
            Resource.INVOICES: InvoiceRepository(session),
        }

    async def _default_organization_id(self, user_id: uuid.UUID) -> Optional[uuid.UUID]:
        user = await self.user_repo.get(user_id)
        if user is None:
            raise UnauthorizedError("User not found")
        if user.current_organization_id:
            return user.current_organization_id

        membership = await self.member_repo.get_earliest_membership(user_id)
        return membership.organization_id if membership else None

    async def resolve_organization(
        self,
        hints: OrganizationHints,
        user_id: uuid.UUID
    ) -> AuthorizationContext:
        """
        Determine the acting organization and bind the caller's role to it.

        Raises:
            NoOrganizationContextError: no organization could be determined
            AccessDeniedError: caller is not a member of that organization
        """
        explicit = hints.explicit_organization_id()
        if explicit is not None:
            try:
                organization_id = uuid.UUID(explicit)
            except ValueError:
                logger.info(f"User {user_id} sent malformed organization hint {explicit!r}")
                raise AccessDeniedError("Access denied to organization")
        else:
            organization_id = await self._default_organization_id(user_id)
            if organization_id is None:
                raise NoOrganizationContextError()

        row = await self.member_repo.get_membership_with_role(user_id, organization_id)
        if row is None:
            logger.warning(f"User {user_id} denied access to organization {organization_id}")
            raise AccessDeniedError("Access denied to organization")

        membership, role = row
        try:
            permissions = role.permission_set
        except ValueError:
            logger.error(f"Role {role.name} has permissions outside the vocabulary")
            raise AccessDeniedError("Role configuration is invalid")

        return AuthorizationContext(
            user_id=user_id,
            organization_id=membership.organization_id,
            role_name=role.name,
            permissions=permissions,
        )

    def require_permission(
        self,
        context: AuthorizationContext,
        resource: ResourceLike,
        action: ActionLike
    ) -> AuthorizationContext:
        """Role-level gate with no ownership consideration."""
        if not authorize(context, resource, action):
            logger.info(
                f"User {context.user_id} ({context.role_name}) lacks "
                f"{_name(resource)}:{_name(action)} in {context.organization_id}"
            )
            raise AccessDeniedError("Insufficient permissions")
        return context

    def require_role(self, context: AuthorizationContext, *allowed_roles: str) -> AuthorizationContext:
        if not require_role(context, *allowed_roles):
            logger.info(f"User {context.user_id} with role {context.role_name} needs one of {allowed_roles}")
            raise AccessDeniedError("Insufficient role permissions")
        return context

    async def is_owner(
        self,
        context: AuthorizationContext,
        resource: ResourceLike,
        resource_id: uuid.UUID
    ) -> bool:
        """Whether the caller created the given row of an ownable resource."""
        try:
            repo = self.ownable.get(Resource(resource))
        except ValueError:
            return False
        if repo is None:
            return False
        owner_id = await repo.get_owner_id(context.organization_id, resource_id)
        return owner_id is not None and owner_id == context.user_id

    async def require_ownership_or_permission(
        self,
        context: AuthorizationContext,
        resource: ResourceLike,
        action: ActionLike,
        resource_id: uuid.UUID
    ) -> AuthorizationContext:
        """
        Allow on a role grant; otherwise look up ownership and retry with the
        ``own_`` grant. Returns the context with the ownership flag applied.
        """
        if authorize(context, resource, action):
            return context

        owned = context.with_ownership(await self.is_owner(context, resource, resource_id))
        if authorize(owned, resource, action):
            return owned

        logger.info(
            f"User {context.user_id} ({context.role_name}) denied "
            f"{_name(resource)}:{_name(action)} on {resource_id}"
        )
        raise AccessDeniedError("Insufficient permissions")


def _name(value) -> str:
    return getattr(value, "value", value)
