"""
Subscription schemas.
"""
import uuid
from datetime import datetime
from typing import Dict, List, Optional
from pydantic import BaseModel


class SubscriptionResponse(BaseModel):
    id: uuid.UUID
    organization_id: uuid.UUID
    plan_type: str
    status: str
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    trial_end: Optional[datetime] = None
    monthly_invoice_limit: int
    monthly_client_limit: int
    monthly_user_limit: int
    monthly_price: float
    is_expired: bool
    days_until_expiry: int


class UsageEntry(BaseModel):
    used: int
    limit: int  # -1 is unlimited
    can_create: bool


class UsageResponse(BaseModel):
    plan_type: str
    usage: Dict[str, UsageEntry]


class ChangePlanRequest(BaseModel):
    plan_type: str

    class Config:
        json_schema_extra = {"example": {"plan_type": "pro"}}


class PlanResponse(BaseModel):
    plan_type: str
    monthly_price: float
    monthly_invoice_limit: int
    monthly_client_limit: int
    monthly_user_limit: int


class PlanListResponse(BaseModel):
    plans: List[PlanResponse]
