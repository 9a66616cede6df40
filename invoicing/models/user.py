"""
User, Organization and membership models.
Core entities for multi-tenant support: every tenant-owned row carries an
organization_id, and a user reaches an organization only through a
UserOrganizationRole binding.
"""
import uuid
from datetime import datetime
from typing import Optional, Dict, Any

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, UniqueConstraint

from invoicing.models.columns import JSONType


class Organization(SQLModel, table=True):
    """
    Organization/Tenant model.
    All clients, invoices and role bindings are scoped to an organization.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(index=True)
    subdomain: Optional[str] = Field(default=None, unique=True, max_length=100)

    # Branding, invoice defaults, address, notifications (see schemas.organization)
    settings: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSONType, nullable=False))

    # Last invoice sequence number handed out in this organization
    invoice_sequence: int = Field(default=0)

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class User(SQLModel, table=True):
    """
    User model with authentication and profile info.
    Users can belong to multiple organizations via UserOrganizationRole.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)

    # Preferred organization when a request carries no explicit hint
    current_organization_id: Optional[uuid.UUID] = Field(
        default=None, foreign_key="organization.id", ondelete="SET NULL", index=True
    )

    # Auth
    email: str = Field(unique=True, index=True)
    password_hash: str

    # Profile
    first_name: str
    last_name: str
    company_name: Optional[str] = None
    timezone: str = Field(default="UTC")

    is_active: bool = Field(default=True)

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    last_login_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class UserOrganizationRole(SQLModel, table=True):
    """
    Binds a user to an organization with exactly one role.
    The unique constraint keeps "the" role of a member unambiguous.
    """
    __tablename__ = "user_organization_role"
    __table_args__ = (
        UniqueConstraint("user_id", "organization_id", name="uq_user_organization_role"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="user.id", ondelete="CASCADE", index=True)
    organization_id: uuid.UUID = Field(foreign_key="organization.id", ondelete="CASCADE", index=True)
    role_id: uuid.UUID = Field(foreign_key="role.id", ondelete="CASCADE", index=True)

    # Audit
    assigned_by: Optional[uuid.UUID] = Field(
        default=None, foreign_key="user.id", ondelete="SET NULL", index=True
    )
    assigned_at: datetime = Field(default_factory=datetime.utcnow)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
