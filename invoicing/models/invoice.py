"""
Invoice and line item models.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


class InvoiceStatus:
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"

    ALL = (DRAFT, SENT, PAID, OVERDUE, CANCELLED)


class Invoice(SQLModel, table=True):
    """
    Invoice entity, scoped to an organization.
    ``user_id`` is the creator and drives ownership-based permissions.
    """
    __table_args__ = (
        UniqueConstraint("organization_id", "invoice_number", name="uq_invoice_organization_number"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="user.id", ondelete="CASCADE", index=True)
    organization_id: uuid.UUID = Field(foreign_key="organization.id", ondelete="CASCADE", index=True)
    client_id: uuid.UUID = Field(foreign_key="client.id", ondelete="RESTRICT", index=True)

    invoice_number: str = Field(index=True)
    issue_date: datetime
    due_date: datetime
    status: str = Field(default=InvoiceStatus.DRAFT, index=True)
    currency: str = Field(default="USD", max_length=3)

    # Amounts
    subtotal: float = Field(default=0)
    tax_rate: float = Field(default=0)
    tax_amount: float = Field(default=0)
    total_amount: float = Field(default=0)

    notes: Optional[str] = None
    terms: Optional[str] = None

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class InvoiceItem(SQLModel, table=True):
    """Invoice line; total_price is always quantity * unit_price."""
    __tablename__ = "invoice_item"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    invoice_id: uuid.UUID = Field(foreign_key="invoice.id", ondelete="CASCADE", index=True)

    description: str
    quantity: float = Field(default=1)
    unit_price: float
    total_price: float = Field(default=0)
    sort_order: int = Field(default=0)

    created_at: datetime = Field(default_factory=datetime.utcnow)
