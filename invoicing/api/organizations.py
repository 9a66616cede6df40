"""
Organization API routes.
Handles multi-org operations: list, switch, settings, manage members.

Routes with an ``{organization_id}`` path segment use it as the organization
hint; a header or query hint still takes precedence.
"""
import uuid
from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from invoicing.database import get_session
from invoicing.core.authorization import AuthorizationContext
from invoicing.core.permissions import Action, Resource
from invoicing.services.org_service import OrganizationService
from invoicing.schemas.organization import (
    InviteUserRequest,
    MemberListResponse,
    MemberResponse,
    OrganizationListResponse,
    OrganizationResponse,
    UpdateMemberRoleRequest,
    UpdateOrganizationRequest,
)
from invoicing.schemas.common import MessageResponse
from invoicing.api.deps import enforce_usage_limit, get_current_user, require_permission
from invoicing.models.user import User

router = APIRouter(prefix="/api/organizations", tags=["organizations"])


@router.get("/", response_model=OrganizationListResponse)
async def list_my_organizations(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """
    List all organizations the current user belongs to.
    """
    org_service = OrganizationService(session)
    orgs = await org_service.get_user_organizations(current_user)
    return {
        "organizations": orgs,
        "count": len(orgs)
    }


@router.post("/switch/{org_id}", response_model=OrganizationResponse)
async def switch_organization(
    org_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """
    Switch the default organization.
    Used for requests that carry no organization hint.
    """
    org_service = OrganizationService(session)
    return await org_service.switch_organization(current_user, org_id)


@router.get("/current", response_model=OrganizationResponse)
async def get_current_organization(
    context: AuthorizationContext = Depends(require_permission(Resource.ORGANIZATION, Action.READ)),
    session: AsyncSession = Depends(get_session)
):
    """Get the organization this request acts in."""
    org_service = OrganizationService(session)
    return await org_service.get_organization(context)


@router.patch("/current", response_model=OrganizationResponse)
async def update_current_organization(
    request: UpdateOrganizationRequest,
    context: AuthorizationContext = Depends(require_permission(Resource.ORGANIZATION, Action.UPDATE)),
    session: AsyncSession = Depends(get_session)
):
    """
    Update name and settings.
    Settings are merged per section; omitted sections are kept.
    """
    org_service = OrganizationService(session)
    return await org_service.update_organization(
        context,
        name=request.name,
        settings=request.settings.model_dump(exclude_none=True) if request.settings else None
    )


@router.get("/{organization_id}", response_model=OrganizationResponse)
async def get_organization(
    organization_id: uuid.UUID,
    context: AuthorizationContext = Depends(require_permission(Resource.ORGANIZATION, Action.READ)),
    session: AsyncSession = Depends(get_session)
):
    org_service = OrganizationService(session)
    return await org_service.get_organization(context)


@router.get("/{organization_id}/members", response_model=MemberListResponse)
async def list_organization_members(
    organization_id: uuid.UUID,
    context: AuthorizationContext = Depends(require_permission(Resource.USERS, Action.READ)),
    session: AsyncSession = Depends(get_session)
):
    """
    List all members of an organization.
    """
    org_service = OrganizationService(session)
    members = await org_service.get_organization_members(context)
    return {
        "members": members,
        "count": len(members)
    }


@router.post("/{organization_id}/members", response_model=MemberResponse, status_code=201)
async def invite_user(
    organization_id: uuid.UUID,
    request: InviteUserRequest,
    context: AuthorizationContext = Depends(enforce_usage_limit(Resource.USERS, Action.CREATE)),
    session: AsyncSession = Depends(get_session)
):
    """
    Add an existing user to the organization.
    Counts against the plan's user limit.
    """
    org_service = OrganizationService(session)
    return await org_service.invite_member(context, email=request.email, role_name=request.role)


@router.patch("/{organization_id}/members/{user_id}", response_model=MessageResponse)
async def update_member_role(
    organization_id: uuid.UUID,
    user_id: uuid.UUID,
    request: UpdateMemberRoleRequest,
    context: AuthorizationContext = Depends(require_permission(Resource.USERS, Action.UPDATE)),
    session: AsyncSession = Depends(get_session)
):
    """
    Update a member's role in the organization.
    """
    org_service = OrganizationService(session)
    return await org_service.update_member_role(context, target_user_id=user_id, role_name=request.role)


@router.delete("/{organization_id}/members/{user_id}", response_model=MessageResponse)
async def remove_member(
    organization_id: uuid.UUID,
    user_id: uuid.UUID,
    context: AuthorizationContext = Depends(require_permission(Resource.USERS, Action.DELETE)),
    session: AsyncSession = Depends(get_session)
):
    """
    Remove a member from the organization.
    """
    org_service = OrganizationService(session)
    return await org_service.remove_member(context, target_user_id=user_id)
