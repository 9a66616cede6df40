"""
Authentication API routes.
"""
from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from invoicing.database import get_session
from invoicing.services.auth_service import AuthService
from invoicing.schemas.auth import RegisterRequest, LoginRequest, TokenResponse, UserResponse
from invoicing.api.deps import get_current_user
from invoicing.models.user import User

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _token_response(result: dict) -> TokenResponse:
    return TokenResponse(**{**result, "user": UserResponse.model_validate(result["user"])})


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    session: AsyncSession = Depends(get_session)
):
    """
    Register a new user.
    Also creates a personal organization on the free plan, administered by the user.
    """
    auth_service = AuthService(session)
    result = await auth_service.register(
        email=request.email,
        password=request.password,
        first_name=request.first_name,
        last_name=request.last_name,
        company_name=request.company_name
    )
    return _token_response(result)


@router.post("/login", response_model=TokenResponse)
async def login(
    request: LoginRequest,
    session: AsyncSession = Depends(get_session)
):
    """Login and get an access token."""
    auth_service = AuthService(session)
    result = await auth_service.login(email=request.email, password=request.password)
    return _token_response(result)


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get current user profile."""
    return UserResponse.model_validate(current_user)
