"""
Subscription model - one per organization, carries plan limits.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field

from invoicing.core.entitlements import (
    PlanType,
    SubscriptionStatus,
    get_plan_limits,
    get_plan_price,
)


class Subscription(SQLModel, table=True):
    """
    Organization subscription.
    Limits of -1 mean unlimited. ``status`` and expiry are independent:
    billing keeps them consistent, this service only reads them.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    organization_id: uuid.UUID = Field(
        foreign_key="organization.id", ondelete="CASCADE", unique=True, index=True
    )

    plan_type: str = Field(default=PlanType.FREE, index=True)
    status: str = Field(default=SubscriptionStatus.ACTIVE, index=True)

    # External billing references
    paypal_subscription_id: Optional[str] = Field(default=None, index=True, max_length=255)
    paypal_plan_id: Optional[str] = Field(default=None, max_length=255)

    # Billing period
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    trial_end: Optional[datetime] = None

    # Limits
    monthly_invoice_limit: int = Field(default=5)
    monthly_client_limit: int = Field(default=2)
    monthly_user_limit: int = Field(default=1)

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def is_active(self) -> bool:
        return self.status == SubscriptionStatus.ACTIVE

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Derived from current_period_end only; no end date never expires."""
        if self.current_period_end is None:
            return False
        return self.current_period_end < (now or datetime.utcnow())

    def days_until_expiry(self, now: Optional[datetime] = None) -> int:
        if self.current_period_end is None:
            return 0
        days = (self.current_period_end - (now or datetime.utcnow())).days
        return max(days, 0)

    @property
    def monthly_price(self) -> float:
        return get_plan_price(self.plan_type)

    def apply_plan(self, plan_type: str) -> None:
        """Switch plan and reset limits from the plan table."""
        limits = get_plan_limits(plan_type)
        self.plan_type = plan_type
        self.monthly_invoice_limit = limits.invoices_per_month
        self.monthly_client_limit = limits.clients
        self.monthly_user_limit = limits.users
