"""
Client API routes.
"""
import uuid
from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from invoicing.database import get_session
from invoicing.core.authorization import AuthorizationContext
from invoicing.core.pagination import PaginationParams, pagination_params
from invoicing.core.permissions import Action, Resource
from invoicing.services.client_service import ClientService
from invoicing.schemas.client import ClientCreate, ClientResponse, ClientUpdate
from invoicing.schemas.common import PaginatedResponse
from invoicing.api.deps import (
    enforce_usage_limit,
    require_ownership_or_permission,
    require_permission,
)

router = APIRouter(prefix="/api/clients", tags=["clients"])


@router.post("/", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
async def create_client(
    request: ClientCreate,
    context: AuthorizationContext = Depends(enforce_usage_limit(Resource.CLIENTS, Action.CREATE)),
    session: AsyncSession = Depends(get_session)
):
    """Create a client. Counts against the plan's client limit."""
    client_service = ClientService(session)
    return await client_service.create_client(context, request.model_dump())


@router.get("/", response_model=PaginatedResponse[ClientResponse])
async def list_clients(
    pagination: PaginationParams = Depends(pagination_params),
    context: AuthorizationContext = Depends(require_permission(Resource.CLIENTS, Action.READ)),
    session: AsyncSession = Depends(get_session)
):
    client_service = ClientService(session)
    return await client_service.list_clients(context, page=pagination.page, limit=pagination.limit)


@router.get("/{id}", response_model=ClientResponse)
async def get_client(
    id: uuid.UUID,
    context: AuthorizationContext = Depends(require_permission(Resource.CLIENTS, Action.READ)),
    session: AsyncSession = Depends(get_session)
):
    client_service = ClientService(session)
    return await client_service.get_client(context, id)


@router.patch("/{id}", response_model=ClientResponse)
async def update_client(
    id: uuid.UUID,
    request: ClientUpdate,
    context: AuthorizationContext = Depends(
        require_ownership_or_permission(Resource.CLIENTS, Action.UPDATE)
    ),
    session: AsyncSession = Depends(get_session)
):
    """Update a client. Creators may update their own clients."""
    client_service = ClientService(session)
    return await client_service.update_client(context, id, request.model_dump(exclude_unset=True))


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(
    id: uuid.UUID,
    context: AuthorizationContext = Depends(
        require_ownership_or_permission(Resource.CLIENTS, Action.DELETE)
    ),
    session: AsyncSession = Depends(get_session)
):
    """
    Delete a client.
    Refused while invoices still reference it.
    """
    client_service = ClientService(session)
    await client_service.delete_client(context, id)
