"""
Organization service - handles multi-org operations.

Permission checks happen in the API dependencies before these methods run;
the service enforces the membership rules that depend on row state.
"""
import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from invoicing.core.authorization import AuthorizationContext
from invoicing.core.exceptions import (
    AccessDeniedError,
    AlreadyExistsError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from invoicing.core.permissions import SystemRole
from invoicing.models.user import Organization, User
from invoicing.repositories.role_repo import RoleRepository
from invoicing.repositories.user_repo import (
    MembershipRepository,
    OrganizationRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)


def merge_settings(current: Dict[str, Any], changes: Dict[str, Any]) -> Dict[str, Any]:
    """Merge settings one section deep; sections not mentioned are kept."""
    merged = dict(current or {})
    for key, value in changes.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


class OrganizationService:
    """Service for organization management."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repo = UserRepository(session)
        self.org_repo = OrganizationRepository(session)
        self.member_repo = MembershipRepository(session)
        self.role_repo = RoleRepository(session)

    async def get_user_organizations(self, user: User) -> List[dict]:
        """Get all organizations user belongs to."""
        rows = await self.member_repo.get_user_memberships(user.id)
        return [
            {
                "id": org.id,
                "name": org.name,
                "subdomain": org.subdomain,
                "role": role.name,
                "assigned_at": membership.assigned_at,
                "is_current": org.id == user.current_organization_id,
            }
            for membership, org, role in rows
        ]

    async def switch_organization(self, user: User, organization_id: uuid.UUID) -> Organization:
        """Make ``organization_id`` the user's default organization."""
        membership = await self.member_repo.get_membership(user.id, organization_id)
        if not membership:
            logger.info(f"User {user.id} tried to switch to foreign organization {organization_id}")
            raise AccessDeniedError("You are not a member of this organization")

        await self.user_repo.switch_organization(user.id, organization_id)
        logger.info(f"User {user.id} switched to organization {organization_id}")
        return await self.org_repo.get(organization_id)

    async def get_organization(self, context: AuthorizationContext) -> Organization:
        org = await self.org_repo.get(context.organization_id)
        if not org:
            raise NotFoundError("Organization")
        return org

    async def update_organization(
        self,
        context: AuthorizationContext,
        name: Optional[str] = None,
        settings: Optional[Dict[str, Any]] = None
    ) -> Organization:
        """Rename the organization and/or merge new settings into it."""
        org = await self.get_organization(context)

        if name is not None:
            org.name = name
        if settings:
            org.settings = merge_settings(org.settings, settings)

        org.updated_at = datetime.utcnow()
        self.session.add(org)
        await self.session.commit()
        await self.session.refresh(org)
        return org

    async def list_all_organizations(self, page: int = 1, limit: int = 20) -> dict:
        """Every organization on the platform."""
        return await self.org_repo.list_paginated(page=page, limit=limit)

    async def get_organization_members(self, context: AuthorizationContext) -> List[dict]:
        """Get all members of the organization."""
        rows = await self.member_repo.get_organization_members(context.organization_id)
        return [
            {
                "id": membership.id,
                "user_id": member.id,
                "email": member.email,
                "full_name": member.full_name,
                "role": role.name,
                "assigned_at": membership.assigned_at,
            }
            for membership, member, role in rows
        ]

    def _validate_role(self, role_name: str) -> None:
        if role_name not in SystemRole.ASSIGNABLE:
            raise ValidationError(
                f"Invalid role. Must be one of: {list(SystemRole.ASSIGNABLE)}", "role"
            )

    async def invite_member(
        self,
        context: AuthorizationContext,
        email: str,
        role_name: str = SystemRole.ORG_USER
    ) -> dict:
        """
        Add an existing user to the organization.

        The user limit of the plan is checked by the caller.
        """
        self._validate_role(role_name)

        invitee = await self.user_repo.get_by_email(email)
        if not invitee:
            raise NotFoundError("User")

        existing = await self.member_repo.get_membership(invitee.id, context.organization_id)
        if existing:
            raise AlreadyExistsError("Member", "email", email)

        role = await self.role_repo.get_or_create_system_role(role_name)
        membership = await self.member_repo.create_membership(
            user_id=invitee.id,
            organization_id=context.organization_id,
            role_id=role.id,
            assigned_by=context.user_id
        )

        logger.info(
            f"User {context.user_id} added {invitee.id} to organization "
            f"{context.organization_id} as {role_name}"
        )
        return {
            "id": membership.id,
            "user_id": invitee.id,
            "email": invitee.email,
            "full_name": invitee.full_name,
            "role": role_name,
            "assigned_at": membership.assigned_at,
        }

    async def update_member_role(
        self,
        context: AuthorizationContext,
        target_user_id: uuid.UUID,
        role_name: str
    ) -> dict:
        """Update a member's role in the organization."""
        self._validate_role(role_name)

        membership = await self.member_repo.get_membership(target_user_id, context.organization_id)
        if not membership:
            raise NotFoundError("Membership")

        if role_name != SystemRole.ORG_ADMIN:
            rows = await self.member_repo.get_organization_members(context.organization_id)
            admins = {member.id for _, member, role in rows if role.name == SystemRole.ORG_ADMIN}
            if admins == {target_user_id}:
                raise ForbiddenError("The organization must keep at least one org_admin")

        role = await self.role_repo.get_or_create_system_role(role_name)
        await self.member_repo.update_role(membership.id, role.id, assigned_by=context.user_id)

        logger.info(
            f"User {context.user_id} set role of {target_user_id} to {role_name} "
            f"in organization {context.organization_id}"
        )
        return {"message": f"Role updated to {role_name}"}

    async def remove_member(self, context: AuthorizationContext, target_user_id: uuid.UUID) -> dict:
        """Remove a member from the organization."""
        if target_user_id == context.user_id:
            raise ForbiddenError("You cannot remove yourself from the organization")

        membership = await self.member_repo.get_membership(target_user_id, context.organization_id)
        if not membership:
            raise NotFoundError("Membership")

        await self.member_repo.delete(membership.id)

        # The removed user must fall back to another organization
        target = await self.user_repo.get(target_user_id)
        if target and target.current_organization_id == context.organization_id:
            await self.user_repo.switch_organization(target_user_id, None)

        logger.info(
            f"User {context.user_id} removed {target_user_id} from organization {context.organization_id}"
        )
        return {"message": "Member removed from organization"}
