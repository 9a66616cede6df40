"""
Invoice repository, including line items.
"""
import uuid
from typing import List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from invoicing.models.invoice import Invoice, InvoiceItem
from invoicing.repositories.base import TenantRepository


class InvoiceRepository(TenantRepository[Invoice]):
    """Repository for Invoice operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Invoice, session)

    async def get_items(self, invoice_id: uuid.UUID) -> List[InvoiceItem]:
        """Line items of an invoice in display order."""
        query = (
            select(InvoiceItem)
            .where(InvoiceItem.invoice_id == invoice_id)
            .order_by(InvoiceItem.sort_order, InvoiceItem.created_at)
        )
        result = await self.session.exec(query)
        return list(result.all())

    async def replace_items(self, invoice_id: uuid.UUID, items: List[InvoiceItem]) -> None:
        """Drop existing line items and stage the new ones (no commit)."""
        for old in await self.get_items(invoice_id):
            await self.session.delete(old)
        for item in items:
            item.invoice_id = invoice_id
            self.session.add(item)

    async def delete_with_items(self, invoice: Invoice) -> None:
        """Delete an invoice and its line items."""
        for item in await self.get_items(invoice.id):
            await self.session.delete(item)
        await self.session.flush()
        await self.session.delete(invoice)
        await self.session.commit()
