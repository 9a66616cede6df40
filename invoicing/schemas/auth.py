"""
Authentication schemas.
"""
import uuid
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    """User registration request."""
    email: EmailStr
    password: str = Field(..., min_length=8)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    company_name: Optional[str] = Field(None, max_length=255)

    class Config:
        json_schema_extra = {
            "example": {
                "email": "user@company.com",
                "password": "securepassword123",
                "first_name": "John",
                "last_name": "Doe",
                "company_name": "Acme Corp"
            }
        }


class LoginRequest(BaseModel):
    """User login request."""
    email: EmailStr
    password: str

    class Config:
        json_schema_extra = {
            "example": {
                "email": "user@company.com",
                "password": "securepassword123"
            }
        }


class UserResponse(BaseModel):
    """Public view of a user."""
    id: uuid.UUID
    email: str
    first_name: str
    last_name: str
    full_name: str
    company_name: Optional[str] = None
    timezone: str
    is_active: bool
    current_organization_id: Optional[uuid.UUID] = None
    created_at: datetime
    last_login_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    """Token response after register or login."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    user: UserResponse
