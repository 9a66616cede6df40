"""
Client service - CRUD on an organization's clients.
"""
import logging
import uuid

from sqlmodel.ext.asyncio.session import AsyncSession

from invoicing.core.authorization import AuthorizationContext
from invoicing.core.exceptions import ConflictError, NotFoundError
from invoicing.models.client import Client
from invoicing.repositories.client_repo import ClientRepository

logger = logging.getLogger(__name__)


class ClientService:
    """Service for client operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.client_repo = ClientRepository(session)

    async def create_client(self, context: AuthorizationContext, data: dict) -> Client:
        client = await self.client_repo.create({
            **data,
            "user_id": context.user_id,
            "organization_id": context.organization_id,
        })
        logger.info(f"Client {client.id} created in organization {context.organization_id}")
        return client

    async def list_clients(
        self,
        context: AuthorizationContext,
        page: int = 1,
        limit: int = 20
    ) -> dict:
        return await self.client_repo.list_paginated(
            organization_id=context.organization_id,
            page=page,
            limit=limit
        )

    async def get_client(self, context: AuthorizationContext, client_id: uuid.UUID) -> Client:
        """Get a client of the acting organization; other organizations' clients are not found."""
        client = await self.client_repo.get_in_organization(context.organization_id, client_id)
        if not client:
            raise NotFoundError("Client", str(client_id))
        return client

    async def update_client(
        self,
        context: AuthorizationContext,
        client_id: uuid.UUID,
        data: dict
    ) -> Client:
        await self.get_client(context, client_id)
        return await self.client_repo.update(client_id, data)

    async def delete_client(self, context: AuthorizationContext, client_id: uuid.UUID) -> None:
        """Delete a client that no invoice references any more."""
        await self.get_client(context, client_id)
        if await self.client_repo.has_invoices(client_id):
            raise ConflictError("Client has invoices and cannot be deleted")

        await self.client_repo.delete(client_id)
        logger.info(f"Client {client_id} deleted by user {context.user_id}")
