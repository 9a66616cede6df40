"""
Tests for subscription plans and usage limits.
"""

from datetime import datetime, timedelta

import pytest

from invoicing.core.entitlements import (
    UNLIMITED,
    PlanType,
    SubscriptionStatus,
    check_limit,
    get_plan_limits,
    get_plan_price,
    within_limit,
)
from invoicing.core.permissions import Resource
from invoicing.models.subscription import Subscription


class TestWithinLimit:

    @pytest.mark.parametrize("count", [0, 1, 5, 10_000, 10**12])
    def test_unlimited_sentinel(self, count):
        assert within_limit(UNLIMITED, count)

    def test_counts_below_limit_allowed(self):
        for count in range(5):
            assert within_limit(5, count)

    def test_counts_at_or_above_limit_denied(self):
        for count in (5, 6, 100):
            assert not within_limit(5, count)

    def test_zero_limit_denies(self):
        assert not within_limit(0, 0)


class TestCheckLimit:

    def test_reads_the_matching_limit(self):
        subscription = Subscription(
            monthly_invoice_limit=5, monthly_client_limit=2, monthly_user_limit=1
        )
        assert check_limit(Resource.INVOICES, subscription, 4)
        assert not check_limit(Resource.INVOICES, subscription, 5)
        assert check_limit("clients", subscription, 1)
        assert not check_limit("clients", subscription, 2)
        assert not check_limit(Resource.USERS, subscription, 1)

    def test_unknown_resource_type_denied(self):
        subscription = Subscription(monthly_invoice_limit=UNLIMITED)
        assert not check_limit("payments", subscription, 0)
        assert not check_limit(Resource.ORGANIZATION, subscription, 0)


class TestPlans:

    def test_plan_table(self):
        assert get_plan_limits(PlanType.FREE) == (5, 2, 1)
        assert get_plan_limits(PlanType.PRO) == (100, UNLIMITED, 5)
        assert get_plan_limits(PlanType.BUSINESS) == (UNLIMITED, UNLIMITED, UNLIMITED)

    def test_unknown_plan_falls_back_to_free(self):
        assert get_plan_limits("enterprise") == get_plan_limits(PlanType.FREE)
        assert get_plan_price("enterprise") == 0.0

    def test_prices(self):
        assert get_plan_price(PlanType.PRO) == 15.0
        assert get_plan_price(PlanType.BUSINESS) == 50.0

    def test_apply_plan_resets_limits(self):
        subscription = Subscription()
        subscription.apply_plan(PlanType.PRO)
        assert subscription.plan_type == PlanType.PRO
        assert subscription.monthly_invoice_limit == 100
        assert subscription.monthly_client_limit == UNLIMITED
        assert subscription.monthly_user_limit == 5
        assert subscription.monthly_price == 15.0


class TestSubscriptionState:

    def test_expired_when_period_ended(self):
        now = datetime(2024, 6, 15)
        subscription = Subscription(
            status=SubscriptionStatus.ACTIVE,
            current_period_end=now - timedelta(days=1),
        )
        assert subscription.is_active()
        assert subscription.is_expired(now)
        assert subscription.days_until_expiry(now) == 0

    def test_no_period_end_never_expires(self):
        subscription = Subscription(status=SubscriptionStatus.ACTIVE)
        assert not subscription.is_expired()

    def test_days_until_expiry(self):
        now = datetime(2024, 6, 15)
        subscription = Subscription(current_period_end=now + timedelta(days=10, hours=1))
        assert subscription.days_until_expiry(now) == 10

    def test_cancelled_is_not_active(self):
        assert not Subscription(status=SubscriptionStatus.CANCELLED).is_active()
