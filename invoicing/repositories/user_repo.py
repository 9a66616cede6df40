"""
User, Organization and membership repositories.
"""
import uuid
from typing import Optional, List
from datetime import datetime

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from invoicing.models.user import User, Organization, UserOrganizationRole
from invoicing.models.role import Role
from invoicing.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(User, session)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        query = select(User).where(User.email == email)
        result = await self.session.exec(query)
        return result.first()

    async def update_last_login(self, user_id: uuid.UUID) -> None:
        """Update user's last login timestamp."""
        user = await self.get(user_id)
        if user:
            user.last_login_at = datetime.utcnow()
            self.session.add(user)
            await self.session.commit()

    async def switch_organization(self, user_id: uuid.UUID, organization_id: Optional[uuid.UUID]) -> bool:
        """Set (or clear) the user's current organization."""
        user = await self.get(user_id)
        if user:
            user.current_organization_id = organization_id
            user.updated_at = datetime.utcnow()
            self.session.add(user)
            await self.session.commit()
            return True
        return False


class OrganizationRepository(BaseRepository[Organization]):
    """Repository for Organization operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Organization, session)

    async def next_invoice_sequence(self, organization_id: uuid.UUID) -> int:
        """
        Reserve the next invoice sequence number for an organization.

        The row is locked (FOR UPDATE) and re-read so concurrent creations
        serialize on it. Flushed, not committed: the caller commits it
        together with the invoice.
        """
        query = (
            select(Organization)
            .where(Organization.id == organization_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(query)
        org = result.one()
        org.invoice_sequence += 1
        self.session.add(org)
        await self.session.flush()
        return org.invoice_sequence


class MembershipRepository(BaseRepository[UserOrganizationRole]):
    """Repository for UserOrganizationRole (membership binding) operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(UserOrganizationRole, session)

    async def get_membership(
        self,
        user_id: uuid.UUID,
        organization_id: uuid.UUID
    ) -> Optional[UserOrganizationRole]:
        """Get the binding for exactly this (user, organization) pair."""
        query = select(UserOrganizationRole).where(
            UserOrganizationRole.user_id == user_id,
            UserOrganizationRole.organization_id == organization_id
        )
        result = await self.session.exec(query)
        return result.first()

    async def get_membership_with_role(
        self,
        user_id: uuid.UUID,
        organization_id: uuid.UUID
    ) -> Optional[tuple[UserOrganizationRole, Role]]:
        """Binding and its role in one round trip."""
        query = (
            select(UserOrganizationRole, Role)
            .join(Role, Role.id == UserOrganizationRole.role_id)
            .where(
                UserOrganizationRole.user_id == user_id,
                UserOrganizationRole.organization_id == organization_id
            )
        )
        result = await self.session.exec(query)
        return result.first()

    async def get_earliest_membership(self, user_id: uuid.UUID) -> Optional[UserOrganizationRole]:
        """Oldest binding of a user; ties broken by binding ID."""
        query = (
            select(UserOrganizationRole)
            .where(UserOrganizationRole.user_id == user_id)
            .order_by(UserOrganizationRole.assigned_at, UserOrganizationRole.id)
        )
        result = await self.session.exec(query)
        return result.first()

    async def get_user_memberships(self, user_id: uuid.UUID) -> List[tuple[UserOrganizationRole, Organization, Role]]:
        """All organizations a user belongs to, with their role in each."""
        query = (
            select(UserOrganizationRole, Organization, Role)
            .join(Organization, Organization.id == UserOrganizationRole.organization_id)
            .join(Role, Role.id == UserOrganizationRole.role_id)
            .where(UserOrganizationRole.user_id == user_id)
            .order_by(UserOrganizationRole.assigned_at, UserOrganizationRole.id)
        )
        result = await self.session.exec(query)
        return list(result.all())

    async def get_organization_members(self, organization_id: uuid.UUID) -> List[tuple[UserOrganizationRole, User, Role]]:
        """All members of an organization."""
        query = (
            select(UserOrganizationRole, User, Role)
            .join(User, User.id == UserOrganizationRole.user_id)
            .join(Role, Role.id == UserOrganizationRole.role_id)
            .where(UserOrganizationRole.organization_id == organization_id)
            .order_by(UserOrganizationRole.assigned_at, UserOrganizationRole.id)
        )
        result = await self.session.exec(query)
        return list(result.all())

    async def create_membership(
        self,
        user_id: uuid.UUID,
        organization_id: uuid.UUID,
        role_id: uuid.UUID,
        assigned_by: Optional[uuid.UUID] = None,
        commit: bool = True
    ) -> UserOrganizationRole:
        """Bind a user to an organization."""
        membership = UserOrganizationRole(
            user_id=user_id,
            organization_id=organization_id,
            role_id=role_id,
            assigned_by=assigned_by
        )
        self.session.add(membership)
        if commit:
            await self.session.commit()
            await self.session.refresh(membership)
        else:
            await self.session.flush()
        return membership

    async def update_role(
        self,
        membership_id: uuid.UUID,
        role_id: uuid.UUID,
        assigned_by: Optional[uuid.UUID] = None
    ) -> bool:
        """Re-assign the role of a binding."""
        membership = await self.get(membership_id)
        if membership:
            # assigned_at is left alone: it orders default-organization fallback
            membership.role_id = role_id
            membership.assigned_by = assigned_by
            membership.updated_at = datetime.utcnow()
            self.session.add(membership)
            await self.session.commit()
            return True
        return False
