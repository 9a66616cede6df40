"""Pytest configuration and fixtures."""

import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import datetime
from typing import Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import invoicing.models  # noqa: F401
from invoicing.core.entitlements import PlanType
from invoicing.database import get_session
from invoicing.main import app
from invoicing.models import Organization, Subscription, User, UserOrganizationRole
from invoicing.repositories.role_repo import RoleRepository


@pytest.fixture
async def engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    """HTTP client against the app, wired to the test database."""

    async def override_get_session():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http_client:
        yield http_client
    app.dependency_overrides.clear()


# =============================================================================
# API HELPERS
# =============================================================================

async def register(client: AsyncClient, email: str, first_name: str = "Test", last_name: str = "User") -> dict:
    """Register through the API; returns token, user ID and personal organization ID."""
    response = await client.post("/api/auth/register", json={
        "email": email,
        "password": "password123",
        "first_name": first_name,
        "last_name": last_name,
    })
    assert response.status_code == 201, response.text
    body = response.json()
    return {
        "token": body["access_token"],
        "user_id": body["user"]["id"],
        "organization_id": body["user"]["current_organization_id"],
    }


def auth_headers(token: str, organization_id: Optional[str] = None) -> dict:
    headers = {"Authorization": f"Bearer {token}"}
    if organization_id:
        headers["X-Organization-ID"] = organization_id
    return headers


# =============================================================================
# DATABASE HELPERS
# =============================================================================

async def create_user(session: AsyncSession, email: str, current_organization_id=None) -> User:
    user = User(
        email=email,
        password_hash="not-a-real-hash",
        first_name="Db",
        last_name="User",
        current_organization_id=current_organization_id,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


async def create_organization(
    session: AsyncSession,
    name: str,
    plan_type: str = PlanType.FREE,
    with_subscription: bool = True
) -> Organization:
    org = Organization(name=name, settings={})
    session.add(org)
    await session.flush()
    if with_subscription:
        subscription = Subscription(organization_id=org.id)
        subscription.apply_plan(plan_type)
        session.add(subscription)
    await session.commit()
    await session.refresh(org)
    return org


async def bind(
    session: AsyncSession,
    user: User,
    org: Organization,
    role_name: str,
    assigned_at: Optional[datetime] = None
) -> UserOrganizationRole:
    role = await RoleRepository(session).get_or_create_system_role(role_name)
    membership = UserOrganizationRole(
        user_id=user.id,
        organization_id=org.id,
        role_id=role.id,
        assigned_at=assigned_at or datetime.utcnow(),
    )
    session.add(membership)
    await session.commit()
    await session.refresh(membership)
    return membership
