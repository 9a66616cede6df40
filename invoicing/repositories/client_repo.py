"""
Client repository.
"""
import uuid

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import func

from invoicing.models.client import Client
from invoicing.models.invoice import Invoice
from invoicing.repositories.base import TenantRepository


class ClientRepository(TenantRepository[Client]):
    """Repository for Client operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Client, session)

    async def has_invoices(self, client_id: uuid.UUID) -> bool:
        """Whether any invoice still references the client."""
        query = select(func.count()).select_from(Invoice).where(Invoice.client_id == client_id)
        result = await self.session.exec(query)
        return result.one() > 0
