"""
FastAPI dependencies for authentication and authorization.

These dependencies are used to protect HR endpoints and extract user context.
"""

from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError

from app.core.exceptions import Unauthorized
from app.core.security import decode_token, HR_ROLES
from app.schemas.user import CurrentUser

# HTTP Bearer token scheme (Authorization: Bearer <token>)
# auto_error is off so a missing header is a 401 like any other bad credential
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str = "Unauthorized") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> CurrentUser:
    """
    Extract and validate the current user from the bearer JWT.

    Raises:
        HTTPException 401: If the token is missing, invalid or has no subject
    """
    if credentials is None:
        raise _unauthorized()

    try:
        payload = decode_token(credentials.credentials)
    except JWTError:
        raise _unauthorized("Could not validate credentials")

    user_id = payload.get("sub")
    if user_id is None:
        raise _unauthorized("Could not validate credentials")

    return CurrentUser(
        id=str(user_id),
        email=payload.get("email"),
        role=payload.get("role") or "",
    )


async def get_hr_user(
    user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """
    Require the hr or admin role.

    The role claim is trusted as already verified by the identity provider.

    Raises:
        Unauthorized: If the caller is not an HR user (401)
    """
    if user.role not in HR_ROLES:
        raise Unauthorized("HR role required")
    return user
