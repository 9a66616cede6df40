"""
Invoice API routes.
"""
import uuid
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from invoicing.database import get_session
from invoicing.core.authorization import AuthorizationContext
from invoicing.core.pagination import PaginationParams, pagination_params
from invoicing.core.permissions import Action, Resource
from invoicing.services.invoice_service import InvoiceService
from invoicing.schemas.common import PaginatedResponse
from invoicing.schemas.invoice import (
    InvoiceCreate,
    InvoiceResponse,
    InvoiceStatusUpdate,
    InvoiceSummary,
    InvoiceUpdate,
)
from invoicing.api.deps import (
    enforce_usage_limit,
    require_ownership_or_permission,
    require_permission,
)

router = APIRouter(prefix="/api/invoices", tags=["invoices"])


@router.post("/", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
async def create_invoice(
    request: InvoiceCreate,
    context: AuthorizationContext = Depends(enforce_usage_limit(Resource.INVOICES, Action.CREATE)),
    session: AsyncSession = Depends(get_session)
):
    """
    Create a draft invoice with its line items.
    Counts against the plan's monthly invoice limit.
    """
    invoice_service = InvoiceService(session)
    return await invoice_service.create_invoice(context, request.model_dump())


@router.get("/", response_model=PaginatedResponse[InvoiceSummary])
async def list_invoices(
    status_filter: Optional[str] = Query(None, alias="status", description="Filter by status"),
    pagination: PaginationParams = Depends(pagination_params),
    context: AuthorizationContext = Depends(require_permission(Resource.INVOICES, Action.READ)),
    session: AsyncSession = Depends(get_session)
):
    invoice_service = InvoiceService(session)
    return await invoice_service.list_invoices(
        context, status=status_filter, page=pagination.page, limit=pagination.limit
    )


@router.get("/{id}", response_model=InvoiceResponse)
async def get_invoice(
    id: uuid.UUID,
    context: AuthorizationContext = Depends(require_permission(Resource.INVOICES, Action.READ)),
    session: AsyncSession = Depends(get_session)
):
    invoice_service = InvoiceService(session)
    return await invoice_service.get_invoice(context, id)


@router.patch("/{id}", response_model=InvoiceResponse)
async def update_invoice(
    id: uuid.UUID,
    request: InvoiceUpdate,
    context: AuthorizationContext = Depends(
        require_ownership_or_permission(Resource.INVOICES, Action.UPDATE)
    ),
    session: AsyncSession = Depends(get_session)
):
    """Update a draft invoice; sent or paid invoices are immutable."""
    invoice_service = InvoiceService(session)
    data = request.model_dump(exclude_unset=True)
    return await invoice_service.update_invoice(context, id, data)


@router.patch("/{id}/status", response_model=InvoiceResponse)
async def update_invoice_status(
    id: uuid.UUID,
    request: InvoiceStatusUpdate,
    context: AuthorizationContext = Depends(
        require_ownership_or_permission(Resource.INVOICES, Action.UPDATE)
    ),
    session: AsyncSession = Depends(get_session)
):
    invoice_service = InvoiceService(session)
    return await invoice_service.update_status(context, id, request.status)


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_invoice(
    id: uuid.UUID,
    context: AuthorizationContext = Depends(
        require_ownership_or_permission(Resource.INVOICES, Action.DELETE)
    ),
    session: AsyncSession = Depends(get_session)
):
    """Delete an invoice. Creators may delete their own when their role allows it."""
    invoice_service = InvoiceService(session)
    await invoice_service.delete_invoice(context, id)
