"""
Security utilities for the Invoicing API.
Consolidated JWT and password handling.
"""
from datetime import datetime, timedelta
from typing import Optional, Literal
import uuid

import jwt
import bcrypt

from invoicing.config import settings


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return bcrypt.checkpw(
        plain_password.encode('utf-8'),
        hashed_password.encode('utf-8')
    )


def get_password_hash(password: str) -> str:
    """Hash a password."""
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


TokenType = Literal["access"]


def create_access_token(
    user_id: uuid.UUID,
    email: str,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a signed access token for a user.

    Args:
        user_id: ID of the authenticated user
        email: Stored as the ``sub`` claim
        expires_delta: Custom expiration time

    Returns:
        Encoded JWT string
    """
    now = datetime.utcnow()
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))

    to_encode = {
        "sub": email,
        "user_id": str(user_id),
        "exp": expire,
        "iat": now,
        "type": "access",
        "jti": str(uuid.uuid4())
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """
    Decode and validate a JWT token.

    Returns:
        Decoded payload dict or None if invalid
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def verify_token(token: str, token_type: TokenType = "access") -> Optional[uuid.UUID]:
    """
    Resolve a bearer token to the caller's user ID.

    Returns:
        User ID if the token is valid and of the right type, None otherwise
    """
    payload = decode_token(token)
    if not payload or payload.get("type") != token_type:
        return None
    try:
        return uuid.UUID(payload.get("user_id", ""))
    except (TypeError, ValueError):
        return None
