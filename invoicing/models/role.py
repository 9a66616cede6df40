"""
Role model - named, reusable permission bundle.
System roles are seeded lazily from get_default_permissions().
"""
import uuid
from datetime import datetime
from typing import Optional, Dict, List

from sqlmodel import SQLModel, Field
from sqlalchemy import Column

from invoicing.core.permissions import (
    ActionLike,
    PermissionSet,
    ResourceLike,
    build_permission_set,
    has_permission,
)
from invoicing.models.columns import JSONType


class Role(SQLModel, table=True):
    """
    Role with a JSON permission map, e.g.
    {"invoices": ["create", "read", "update"], "own_invoices": ["delete"]}
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(unique=True, index=True, max_length=100)
    description: Optional[str] = None
    permissions: Dict[str, List[str]] = Field(
        default_factory=dict, sa_column=Column(JSONType, nullable=False)
    )
    is_system_role: bool = Field(default=False, index=True)

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def permission_set(self) -> PermissionSet:
        """Typed permissions; raises ValueError on names outside the vocabulary."""
        return build_permission_set(self.permissions)

    def has_permission(self, resource: ResourceLike, action: ActionLike) -> bool:
        return has_permission(self.permission_set, resource, action)
