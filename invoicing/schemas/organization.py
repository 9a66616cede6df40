"""
Organization schemas for API requests/responses.
"""
import uuid
from typing import Optional, List, Dict, Any
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field

from invoicing.core.permissions import SystemRole


# =============================================================================
# SETTINGS
# =============================================================================

class CompanyAddress(BaseModel):
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None


class BrandingSettings(BaseModel):
    logo_url: Optional[str] = None
    primary_color: Optional[str] = None
    theme: Optional[str] = None


class InvoiceSettings(BaseModel):
    """Defaults applied to new invoices."""
    default_currency: Optional[str] = Field(None, min_length=3, max_length=3)
    default_tax_rate: Optional[float] = Field(None, ge=0, le=1)
    invoice_number_prefix: Optional[str] = Field(None, min_length=1, max_length=20)
    payment_terms_days: Optional[int] = Field(None, ge=0, le=365)


class NotificationSettings(BaseModel):
    email_notifications: Optional[bool] = None
    slack_integration: Optional[bool] = None


class OrganizationSettings(BaseModel):
    """Settings document stored as JSON on the organization."""
    is_default: Optional[bool] = None
    company_address: Optional[CompanyAddress] = None
    branding_settings: Optional[BrandingSettings] = None
    invoice_settings: Optional[InvoiceSettings] = None
    notification_settings: Optional[NotificationSettings] = None


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class UpdateOrganizationRequest(BaseModel):
    """Request to update organization details."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    settings: Optional[OrganizationSettings] = None


class InviteUserRequest(BaseModel):
    """Request to add an existing user to the organization."""
    email: EmailStr
    role: str = Field(default=SystemRole.ORG_USER)


class UpdateMemberRoleRequest(BaseModel):
    """Request to update member's role."""
    role: str


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class OrganizationResponse(BaseModel):
    """Organization details response."""
    id: uuid.UUID
    name: str
    subdomain: Optional[str] = None
    settings: Dict[str, Any] = {}
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class OrganizationWithRoleResponse(BaseModel):
    """Organization with user's role in it."""
    id: uuid.UUID
    name: str
    subdomain: Optional[str] = None
    role: str
    assigned_at: datetime
    is_current: bool


class MemberResponse(BaseModel):
    """Member of an organization."""
    id: uuid.UUID
    user_id: uuid.UUID
    email: str
    full_name: str
    role: str
    assigned_at: datetime


class OrganizationListResponse(BaseModel):
    """List of user's organizations."""
    organizations: List[OrganizationWithRoleResponse]
    count: int


class MemberListResponse(BaseModel):
    """List of organization members."""
    members: List[MemberResponse]
    count: int
