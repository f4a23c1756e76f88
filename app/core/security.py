"""
JWT helpers for HR-user authentication.

Sessions are issued by the identity provider in front of this service; tokens
are signed with the shared SECRET_KEY and carry the user's id, email and role.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from app.core.config import settings

HR_ROLES = ("hr", "admin")

# 32 random bytes, hex encoded (256 bits)
TOKEN_BYTES = 32


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed access token.

    Args:
        data: Claims to encode (typically {"sub": user_id, "email": ..., "role": "hr"})
        expires_delta: Optional expiration time delta

    Returns:
        Encoded JWT token as a string
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict:
    """
    Decode and validate a JWT token.

    Raises:
        JWTError: If token is invalid or expired
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise


def generate_invite_token() -> str:
    """Opaque capability token for candidate test/interview links."""
    return secrets.token_hex(TOKEN_BYTES)
