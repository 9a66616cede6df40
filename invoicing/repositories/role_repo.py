"""
Role repository with lazy seeding of system roles.
"""
import logging
from typing import Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from invoicing.core.permissions import (
    SystemRole,
    get_default_permissions,
    serialize_permission_set,
)
from invoicing.models.role import Role
from invoicing.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class RoleRepository(BaseRepository[Role]):
    """Repository for Role operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Role, session)

    async def get_by_name(self, name: str) -> Optional[Role]:
        """Get role by its unique name."""
        query = select(Role).where(Role.name == name)
        result = await self.session.exec(query)
        return result.first()

    async def get_or_create_system_role(self, name: str) -> Role:
        """
        Fetch a system role, creating it with default permissions on first use.
        Flushed, not committed, so it joins the caller's transaction.
        """
        role = await self.get_by_name(name)
        if role:
            return role

        if name not in SystemRole.ALL:
            raise ValueError(f"Unknown system role: {name}")

        role = Role(
            name=name,
            description=SystemRole.DESCRIPTIONS[name],
            permissions=serialize_permission_set(get_default_permissions(name)),
            is_system_role=True
        )
        self.session.add(role)
        await self.session.flush()
        logger.info(f"Seeded system role {name}")
        return role
