"""
Tests for the subscription gate and usage counting.
"""

import uuid
from datetime import datetime, timedelta

import pytest

from invoicing.core.authorization import AuthorizationContext
from invoicing.core.entitlements import PlanType, SubscriptionStatus
from invoicing.core.exceptions import LimitReachedError, SubscriptionRequiredError, ValidationError
from invoicing.core.permissions import Resource, SystemRole
from invoicing.models import Client, Invoice
from invoicing.repositories.subscription_repo import SubscriptionRepository
from invoicing.services.subscription_service import SubscriptionService, list_plans, start_of_month

from conftest import bind, create_organization, create_user


async def add_invoices(session, org, user, count, created_at=None):
    client = Client(user_id=user.id, organization_id=org.id, name="Acme", email="acme@example.com")
    session.add(client)
    await session.flush()
    now = datetime.utcnow()
    for _ in range(count):
        session.add(Invoice(
            user_id=user.id,
            organization_id=org.id,
            client_id=client.id,
            invoice_number=f"INV-{uuid.uuid4().hex[:8]}",
            issue_date=now,
            due_date=now,
            created_at=created_at or now,
        ))
    await session.commit()


class TestSubscriptionGate:

    async def test_active_subscription_passes(self, session):
        org = await create_organization(session, "A")
        subscription = await SubscriptionService(session).check_subscription_active(org.id)
        assert subscription.organization_id == org.id

    async def test_missing_subscription_denied(self, session):
        org = await create_organization(session, "A", with_subscription=False)
        with pytest.raises(SubscriptionRequiredError):
            await SubscriptionService(session).check_subscription_active(org.id)

    async def test_inactive_status_denied(self, session):
        org = await create_organization(session, "A")
        subscription = await SubscriptionRepository(session).get_for_organization(org.id)
        subscription.status = SubscriptionStatus.CANCELLED
        session.add(subscription)
        await session.commit()

        with pytest.raises(SubscriptionRequiredError):
            await SubscriptionService(session).check_subscription_active(org.id)

    async def test_expired_period_denied_even_when_active(self, session):
        org = await create_organization(session, "A")
        subscription = await SubscriptionRepository(session).get_for_organization(org.id)
        subscription.status = SubscriptionStatus.ACTIVE
        subscription.current_period_end = datetime.utcnow() - timedelta(days=1)
        session.add(subscription)
        await session.commit()

        with pytest.raises(SubscriptionRequiredError):
            await SubscriptionService(session).check_subscription_active(org.id)


class TestUsageLimits:

    async def test_invoices_counted_for_current_month_only(self, session):
        user = await create_user(session, "user@example.com")
        org = await create_organization(session, "A")
        last_month = start_of_month(datetime.utcnow()) - timedelta(days=1)
        await add_invoices(session, org, user, 7, created_at=last_month)
        await add_invoices(session, org, user, 4)

        service = SubscriptionService(session)
        assert await service.count_usage(Resource.INVOICES, org.id) == 4

        subscription = await service.check_subscription_active(org.id)
        assert await service.check_usage_limit(Resource.INVOICES, subscription, org.id)

        await add_invoices(session, org, user, 1)
        assert not await service.check_usage_limit(Resource.INVOICES, subscription, org.id)
        with pytest.raises(LimitReachedError):
            await service.enforce_usage_limit(Resource.INVOICES, subscription, org.id)

    async def test_members_counted_against_user_limit(self, session):
        admin = await create_user(session, "admin@example.com")
        org = await create_organization(session, "A")
        await bind(session, admin, org, SystemRole.ORG_ADMIN)

        service = SubscriptionService(session)
        subscription = await service.check_subscription_active(org.id)
        assert await service.count_usage(Resource.USERS, org.id) == 1
        # free plan allows a single member
        assert not await service.check_usage_limit(Resource.USERS, subscription, org.id)

    async def test_unlimited_plan_never_blocks(self, session):
        user = await create_user(session, "user@example.com")
        org = await create_organization(session, "A", plan_type=PlanType.BUSINESS)
        await add_invoices(session, org, user, 12)

        service = SubscriptionService(session)
        subscription = await service.check_subscription_active(org.id)
        assert await service.check_usage_limit(Resource.INVOICES, subscription, org.id)
        assert await service.check_usage_limit(Resource.CLIENTS, subscription, org.id)

    async def test_resource_without_limit_denied(self, session):
        org = await create_organization(session, "A", plan_type=PlanType.BUSINESS)
        service = SubscriptionService(session)
        subscription = await service.check_subscription_active(org.id)
        assert not await service.check_usage_limit(Resource.ORGANIZATION, subscription, org.id)
        assert not await service.check_usage_limit("payments", subscription, org.id)


class TestPlans:

    async def test_invalid_plan_rejected(self, session):
        org = await create_organization(session, "A")
        user = await create_user(session, "user@example.com")
        context = AuthorizationContext(user_id=user.id, organization_id=org.id, role_name=SystemRole.ORG_ADMIN)
        with pytest.raises(ValidationError):
            await SubscriptionService(session).change_plan(context, "enterprise")

    def test_plan_catalogue(self):
        plans = {plan["plan_type"]: plan for plan in list_plans()}
        assert set(plans) == set(PlanType.ALL)
        assert plans[PlanType.PRO]["monthly_price"] == 15.0
        assert plans[PlanType.BUSINESS]["monthly_invoice_limit"] == -1
