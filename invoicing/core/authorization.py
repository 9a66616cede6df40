"""
Request-scoped authorization context and policy evaluation.

The context is built once per request by the organization resolver and passed
explicitly to every later check. Evaluation here is pure; all data lookups
(membership, ownership, usage counts) happen in the services layer.
"""
import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict

from invoicing.core.permissions import (
    ActionLike,
    PermissionSet,
    Resource,
    ResourceLike,
    has_permission,
)


class OrganizationHints(BaseModel):
    """Explicit organization identifiers supplied with a request."""
    model_config = ConfigDict(frozen=True)

    header: Optional[str] = None
    query: Optional[str] = None
    path: Optional[str] = None

    def explicit_organization_id(self) -> Optional[str]:
        """First non-empty hint in precedence order: header, query, path."""
        for value in (self.header, self.query, self.path):
            if value:
                return value
        return None


class AuthorizationContext(BaseModel):
    """Who is acting, in which organization, with which grants."""
    model_config = ConfigDict(frozen=True)

    user_id: uuid.UUID
    organization_id: uuid.UUID
    role_name: Optional[str] = None
    permissions: PermissionSet = {}
    is_owner: bool = False

    def with_ownership(self, is_owner: bool) -> "AuthorizationContext":
        return self.model_copy(update={"is_owner": is_owner})

    def can(self, resource: ResourceLike, action: ActionLike) -> bool:
        return authorize(self, resource, action)


def authorize(context: AuthorizationContext, resource: ResourceLike, action: ActionLike) -> bool:
    """
    Direct role grant, or the ``own_`` grant when the caller owns the row.

    Ownership only widens access as far as the ``own_`` bucket allows.
    """
    if context.role_name is None:
        return False
    if has_permission(context.permissions, resource, action):
        return True
    if not context.is_owner:
        return False
    try:
        own = Resource(resource).own
    except ValueError:
        return False
    return own is not None and has_permission(context.permissions, own, action)


def require_role(context: AuthorizationContext, *allowed_roles: str) -> bool:
    """Exact role-name match; no hierarchy between roles."""
    return context.role_name is not None and context.role_name in allowed_roles
