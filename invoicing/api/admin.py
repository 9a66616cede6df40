"""
Platform administration routes.
"""
from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from invoicing.database import get_session
from invoicing.core.authorization import AuthorizationContext
from invoicing.core.pagination import PaginationParams, pagination_params
from invoicing.core.permissions import SystemRole
from invoicing.services.org_service import OrganizationService
from invoicing.schemas.common import PaginatedResponse
from invoicing.schemas.organization import OrganizationResponse
from invoicing.api.deps import require_role

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/organizations", response_model=PaginatedResponse[OrganizationResponse])
async def list_all_organizations(
    pagination: PaginationParams = Depends(pagination_params),
    context: AuthorizationContext = Depends(require_role(SystemRole.PLATFORM_ADMIN)),
    session: AsyncSession = Depends(get_session)
):
    """Every organization on the platform. Platform admins only."""
    org_service = OrganizationService(session)
    return await org_service.list_all_organizations(page=pagination.page, limit=pagination.limit)
