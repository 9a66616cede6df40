"""
Resolved request context for the caller.
"""
from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from invoicing.database import get_session
from invoicing.core.authorization import AuthorizationContext
from invoicing.core.permissions import serialize_permission_set
from invoicing.schemas.common import ContextResponse
from invoicing.api.deps import get_current_user, get_authorization_context
from invoicing.models.user import User
from invoicing.services.org_service import OrganizationService

router = APIRouter(prefix="/api/me", tags=["me"])


@router.get("", response_model=ContextResponse)
async def get_my_context(
    current_user: User = Depends(get_current_user),
    context: AuthorizationContext = Depends(get_authorization_context),
    session: AsyncSession = Depends(get_session)
):
    """
    Which organization this request acts in and what the caller may do there.
    Honors the same organization hints as every other route.
    """
    org = await OrganizationService(session).get_organization(context)
    return ContextResponse(
        user_id=current_user.id,
        email=current_user.email,
        full_name=current_user.full_name,
        organization_id=org.id,
        organization_name=org.name,
        role=context.role_name,
        permissions=serialize_permission_set(context.permissions),
    )
