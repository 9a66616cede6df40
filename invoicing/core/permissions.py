"""
Role and permission vocabulary.

Permissions are a mapping from a closed set of resources to a set of allowed
actions. ``manage`` grants every action on its resource. Names that are not
part of the vocabulary never grant anything.
"""
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Union


class Resource(str, Enum):
    ORGANIZATIONS = "organizations"
    USERS = "users"
    INVOICES = "invoices"
    CLIENTS = "clients"
    SUBSCRIPTIONS = "subscriptions"
    OWN_INVOICES = "own_invoices"
    OWN_CLIENTS = "own_clients"
    ORGANIZATION = "organization"  # current organization
    SUBSCRIPTION = "subscription"  # current organization's subscription

    @property
    def own(self) -> Optional["Resource"]:
        """The ``own_`` bucket for this resource, if the vocabulary has one."""
        try:
            return Resource(f"own_{self.value}")
        except ValueError:
            return None


class Action(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    MANAGE = "manage"  # implies every other action on the resource


class SystemRole:
    PLATFORM_ADMIN = "platform_admin"
    ORG_ADMIN = "org_admin"
    ORG_USER = "org_user"
    ORG_VIEWER = "org_viewer"

    ALL = (PLATFORM_ADMIN, ORG_ADMIN, ORG_USER, ORG_VIEWER)
    # Roles an organization admin may hand out to members
    ASSIGNABLE = (ORG_ADMIN, ORG_USER, ORG_VIEWER)

    DESCRIPTIONS = {
        PLATFORM_ADMIN: "Platform Administrator",
        ORG_ADMIN: "Organization Administrator",
        ORG_USER: "Organization User",
        ORG_VIEWER: "Organization Viewer",
    }


PermissionSet = Dict[Resource, FrozenSet[Action]]

ResourceLike = Union[Resource, str]
ActionLike = Union[Action, str]


def build_permission_set(raw: Mapping[str, Iterable[str]]) -> PermissionSet:
    """
    Build a typed permission set from its stored JSON form.

    Raises:
        ValueError: if a resource or action name is not in the vocabulary
    """
    permissions: PermissionSet = {}
    for resource_name, actions in (raw or {}).items():
        resource = Resource(resource_name)
        granted = frozenset(Action(action) for action in actions)
        if granted:
            permissions[resource] = granted
    return permissions


def serialize_permission_set(permissions: PermissionSet) -> Dict[str, list]:
    """Stored JSON form of a permission set, with stable action ordering."""
    order = list(Action)
    return {
        resource.value: sorted((a.value for a in actions), key=lambda v: order.index(Action(v)))
        for resource, actions in permissions.items()
        if actions
    }


def _coerce(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


def has_permission(permissions: Optional[PermissionSet], resource: ResourceLike, action: ActionLike) -> bool:
    """True if ``action`` (or ``manage``) is granted on ``resource``."""
    if not permissions:
        return False
    resource = _coerce(Resource, resource)
    action = _coerce(Action, action)
    if resource is None or action is None:
        return False
    granted = permissions.get(resource, frozenset())
    return action in granted or Action.MANAGE in granted


def get_default_permissions(role_name: str) -> PermissionSet:
    """Default grants for the system roles. Unknown roles get nothing."""
    C, R, U, D, M = Action.CREATE, Action.READ, Action.UPDATE, Action.DELETE, Action.MANAGE

    defaults = {
        SystemRole.PLATFORM_ADMIN: {
            Resource.ORGANIZATIONS: {M},
            Resource.USERS: {M},
            Resource.SUBSCRIPTIONS: {M},
            Resource.INVOICES: {R, U, D},
            Resource.CLIENTS: {R, U, D},
        },
        SystemRole.ORG_ADMIN: {
            Resource.ORGANIZATION: {R, U},
            Resource.USERS: {M},
            Resource.INVOICES: {M},
            Resource.CLIENTS: {M},
            Resource.SUBSCRIPTION: {R, U},
        },
        SystemRole.ORG_USER: {
            Resource.INVOICES: {C, R, U},
            Resource.CLIENTS: {C, R, U},
            Resource.OWN_INVOICES: {D},
            Resource.OWN_CLIENTS: {D},
        },
        SystemRole.ORG_VIEWER: {
            Resource.INVOICES: {R},
            Resource.CLIENTS: {R},
        },
    }
    return {
        resource: frozenset(actions)
        for resource, actions in defaults.get(role_name, {}).items()
    }
