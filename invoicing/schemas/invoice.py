"""
Invoice schemas.
"""
import uuid
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field


class InvoiceItemCreate(BaseModel):
    description: str = Field(..., min_length=1)
    quantity: float = Field(default=1, gt=0)
    unit_price: float = Field(..., ge=0)


class InvoiceItemResponse(BaseModel):
    id: uuid.UUID
    description: str
    quantity: float
    unit_price: float
    total_price: float
    sort_order: int


class InvoiceCreate(BaseModel):
    """
    Request to create an invoice.
    Omitted currency, tax rate and due date come from the organization's
    invoice settings.
    """
    client_id: uuid.UUID
    issue_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    tax_rate: Optional[float] = Field(None, ge=0, le=1)
    notes: Optional[str] = None
    terms: Optional[str] = None
    items: List[InvoiceItemCreate] = []

    class Config:
        json_schema_extra = {
            "example": {
                "client_id": "2b1c7f8e-5a0e-4c0e-9d4a-6d1f5b8f3a10",
                "tax_rate": 0.1,
                "items": [
                    {"description": "Consulting", "quantity": 10, "unit_price": 120.0}
                ]
            }
        }


class InvoiceUpdate(BaseModel):
    """Draft-only update; ``items`` replaces all line items when given."""
    client_id: Optional[uuid.UUID] = None
    issue_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    tax_rate: Optional[float] = Field(None, ge=0, le=1)
    notes: Optional[str] = None
    terms: Optional[str] = None
    items: Optional[List[InvoiceItemCreate]] = None


class InvoiceStatusUpdate(BaseModel):
    status: str


class InvoiceSummary(BaseModel):
    """Invoice without line items, used in listings."""
    id: uuid.UUID
    user_id: uuid.UUID
    organization_id: uuid.UUID
    client_id: uuid.UUID
    invoice_number: str
    issue_date: datetime
    due_date: datetime
    status: str
    currency: str
    subtotal: float
    tax_rate: float
    tax_amount: float
    total_amount: float
    notes: Optional[str] = None
    terms: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class InvoiceResponse(InvoiceSummary):
    items: List[InvoiceItemResponse] = []
