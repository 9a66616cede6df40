"""
Invoice service - invoices, their line items and numbering.
"""
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from invoicing.core.authorization import AuthorizationContext
from invoicing.core.exceptions import ConflictError, NotFoundError, ValidationError
from invoicing.models.invoice import Invoice, InvoiceItem, InvoiceStatus
from invoicing.models.user import Organization
from invoicing.repositories.client_repo import ClientRepository
from invoicing.repositories.invoice_repo import InvoiceRepository
from invoicing.repositories.user_repo import OrganizationRepository

logger = logging.getLogger(__name__)

DEFAULT_NUMBER_PREFIX = "INV"
DEFAULT_CURRENCY = "USD"
DEFAULT_PAYMENT_TERMS_DAYS = 30


def format_invoice_number(prefix: str, year: int, sequence: int) -> str:
    """e.g. INV-20240001"""
    return f"{prefix}-{year}{sequence:04d}"


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive UTC, the form every timestamp column stores. Aware input is converted."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def build_items(items: List[dict]) -> List[InvoiceItem]:
    """Line items with total_price derived from quantity and unit price."""
    built = []
    for index, item in enumerate(items):
        quantity = item.get("quantity", 1)
        unit_price = item["unit_price"]
        built.append(InvoiceItem(
            description=item["description"],
            quantity=quantity,
            unit_price=unit_price,
            total_price=round(quantity * unit_price, 2),
            sort_order=item.get("sort_order", index),
        ))
    return built


def apply_totals(invoice: Invoice, items: List[InvoiceItem]) -> None:
    subtotal = round(sum(item.total_price for item in items), 2)
    invoice.subtotal = subtotal
    invoice.tax_amount = round(subtotal * invoice.tax_rate, 2)
    invoice.total_amount = round(subtotal + invoice.tax_amount, 2)


class InvoiceService:
    """Service for invoice operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.invoice_repo = InvoiceRepository(session)
        self.client_repo = ClientRepository(session)
        self.org_repo = OrganizationRepository(session)

    async def _require_client(self, context: AuthorizationContext, client_id: uuid.UUID) -> None:
        client = await self.client_repo.get_in_organization(context.organization_id, client_id)
        if not client:
            raise ValidationError("Client does not belong to this organization", "client_id")

    async def _serialize(self, invoice: Invoice) -> dict:
        items = await self.invoice_repo.get_items(invoice.id)
        return {**invoice.model_dump(), "items": [item.model_dump() for item in items]}

    async def create_invoice(self, context: AuthorizationContext, data: dict) -> dict:
        """
        Create a draft invoice.

        Currency, tax rate, due date and number prefix fall back to the
        organization's invoice settings.
        """
        await self._require_client(context, data["client_id"])

        org: Organization = await self.org_repo.get(context.organization_id)
        defaults = (org.settings or {}).get("invoice_settings") or {}

        issue_date = as_utc(data.get("issue_date")) or datetime.utcnow()
        due_date = as_utc(data.get("due_date"))
        if due_date is None:
            terms_days = defaults.get("payment_terms_days")
            if terms_days is None:
                terms_days = DEFAULT_PAYMENT_TERMS_DAYS
            due_date = issue_date + timedelta(days=terms_days)

        tax_rate = data.get("tax_rate")
        if tax_rate is None:
            tax_rate = defaults.get("default_tax_rate") or 0

        sequence = await self.org_repo.next_invoice_sequence(context.organization_id)
        prefix = defaults.get("invoice_number_prefix") or DEFAULT_NUMBER_PREFIX

        invoice = Invoice(
            user_id=context.user_id,
            organization_id=context.organization_id,
            client_id=data["client_id"],
            invoice_number=format_invoice_number(prefix, issue_date.year, sequence),
            issue_date=issue_date,
            due_date=due_date,
            status=InvoiceStatus.DRAFT,
            currency=data.get("currency") or defaults.get("default_currency") or DEFAULT_CURRENCY,
            tax_rate=tax_rate,
            notes=data.get("notes"),
            terms=data.get("terms"),
        )
        items = build_items(data.get("items") or [])
        apply_totals(invoice, items)

        self.session.add(invoice)
        await self.session.flush()
        await self.invoice_repo.replace_items(invoice.id, items)
        await self.session.commit()
        await self.session.refresh(invoice)

        logger.info(
            f"Invoice {invoice.invoice_number} created in organization {context.organization_id} "
            f"by user {context.user_id}"
        )
        return await self._serialize(invoice)

    async def list_invoices(
        self,
        context: AuthorizationContext,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = 20
    ) -> dict:
        if status is not None and status not in InvoiceStatus.ALL:
            raise ValidationError(f"Invalid status. Must be one of: {list(InvoiceStatus.ALL)}", "status")
        return await self.invoice_repo.list_paginated(
            organization_id=context.organization_id,
            filters={"status": status},
            page=page,
            limit=limit
        )

    async def _get(self, context: AuthorizationContext, invoice_id: uuid.UUID) -> Invoice:
        invoice = await self.invoice_repo.get_in_organization(context.organization_id, invoice_id)
        if not invoice:
            raise NotFoundError("Invoice", str(invoice_id))
        return invoice

    async def get_invoice(self, context: AuthorizationContext, invoice_id: uuid.UUID) -> dict:
        return await self._serialize(await self._get(context, invoice_id))

    async def update_invoice(
        self,
        context: AuthorizationContext,
        invoice_id: uuid.UUID,
        data: dict
    ) -> dict:
        """Edit a draft invoice; items, when given, replace the existing ones."""
        invoice = await self._get(context, invoice_id)
        if invoice.status != InvoiceStatus.DRAFT:
            raise ConflictError("Only draft invoices can be updated")

        if data.get("client_id") is not None:
            await self._require_client(context, data["client_id"])

        changes = {
            **data,
            "issue_date": as_utc(data.get("issue_date")),
            "due_date": as_utc(data.get("due_date")),
        }
        for field in ("client_id", "issue_date", "due_date", "currency", "tax_rate", "notes", "terms"):
            if changes.get(field) is not None:
                setattr(invoice, field, changes[field])

        if data.get("items") is not None:
            items = build_items(data["items"])
            await self.invoice_repo.replace_items(invoice.id, items)
        else:
            items = await self.invoice_repo.get_items(invoice.id)
        apply_totals(invoice, items)

        invoice.updated_at = datetime.utcnow()
        self.session.add(invoice)
        await self.session.commit()
        await self.session.refresh(invoice)
        return await self._serialize(invoice)

    async def update_status(
        self,
        context: AuthorizationContext,
        invoice_id: uuid.UUID,
        status: str
    ) -> dict:
        if status not in InvoiceStatus.ALL:
            raise ValidationError(f"Invalid status. Must be one of: {list(InvoiceStatus.ALL)}", "status")

        invoice = await self._get(context, invoice_id)
        old_status = invoice.status
        invoice.status = status
        invoice.updated_at = datetime.utcnow()
        self.session.add(invoice)
        await self.session.commit()
        await self.session.refresh(invoice)

        logger.info(f"Invoice {invoice.id} status {old_status} -> {status}")
        return await self._serialize(invoice)

    async def delete_invoice(self, context: AuthorizationContext, invoice_id: uuid.UUID) -> None:
        invoice = await self._get(context, invoice_id)
        await self.invoice_repo.delete_with_items(invoice)
        logger.info(f"Invoice {invoice_id} deleted by user {context.user_id}")
