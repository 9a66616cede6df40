"""
Authentication service - registration, login and identity.
"""
import logging
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from invoicing.config import settings
from invoicing.core.entitlements import PlanType, SubscriptionStatus
from invoicing.core.exceptions import AlreadyExistsError, UnauthorizedError
from invoicing.core.permissions import SystemRole
from invoicing.core.security import create_access_token, get_password_hash, verify_password
from invoicing.models.subscription import Subscription
from invoicing.models.user import Organization, User
from invoicing.repositories.role_repo import RoleRepository
from invoicing.repositories.user_repo import (
    MembershipRepository,
    OrganizationRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)


class AuthService:
    """Service for authentication operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repo = UserRepository(session)
        self.org_repo = OrganizationRepository(session)
        self.role_repo = RoleRepository(session)
        self.member_repo = MembershipRepository(session)

    def _token_response(self, user: User) -> dict:
        return {
            "access_token": create_access_token(user.id, user.email),
            "token_type": "bearer",
            "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            "user": user,
        }

    async def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        company_name: Optional[str] = None
    ) -> dict:
        """
        Register a user together with a personal organization.

        The user becomes ``org_admin`` of the new organization, which starts on
        an active free subscription. Everything is committed in one transaction.
        """
        existing = await self.user_repo.get_by_email(email)
        if existing:
            raise AlreadyExistsError("User", "email", email)

        user = User(
            email=email,
            password_hash=get_password_hash(password),
            first_name=first_name,
            last_name=last_name,
            company_name=company_name
        )
        self.session.add(user)
        await self.session.flush()

        org = Organization(
            name=f"{first_name} {last_name}'s Organization",
            subdomain=f"org-{str(user.id)[:8]}",
            settings={"is_default": True}
        )
        self.session.add(org)
        await self.session.flush()

        role = await self.role_repo.get_or_create_system_role(SystemRole.ORG_ADMIN)
        await self.member_repo.create_membership(
            user_id=user.id,
            organization_id=org.id,
            role_id=role.id,
            commit=False
        )

        subscription = Subscription(
            organization_id=org.id,
            status=SubscriptionStatus.ACTIVE,
            current_period_start=datetime.utcnow()
        )
        subscription.apply_plan(PlanType.FREE)
        self.session.add(subscription)

        user.current_organization_id = org.id
        self.session.add(user)

        await self.session.commit()
        await self.session.refresh(user)

        logger.info(f"Registered user {user.id} with organization {org.id}")
        return self._token_response(user)

    async def login(self, email: str, password: str) -> dict:
        """Authenticate user and return an access token."""
        user = await self.user_repo.get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            logger.info(f"Failed login for {email}")
            raise UnauthorizedError("Incorrect email or password")

        if not user.is_active:
            raise UnauthorizedError("User account is deactivated")

        await self.user_repo.update_last_login(user.id)
        await self.session.refresh(user)
        return self._token_response(user)

    async def get_user(self, user_id: uuid.UUID) -> User:
        """Active user behind a verified token."""
        user = await self.user_repo.get(user_id)
        if not user or not user.is_active:
            raise UnauthorizedError()
        return user
