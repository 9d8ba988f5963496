from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from pydantic import ValidationError

from libs.auth.models import AuthUser, UserRole
from libs.auth.security import decode_access_token
from libs.common.error_handler import AuthenticationError, AuthorizationError

# auto_error=False so a missing header becomes our 401, not FastAPI's 403
security = HTTPBearer(auto_error=False)


def _resolve_user(
    token: Optional[HTTPAuthorizationCredentials],
) -> Optional[AuthUser]:
    if token is None:
        return None
    try:
        payload = decode_access_token(token.credentials)
        return AuthUser(**payload)
    except (JWTError, ValidationError):
        raise AuthenticationError("Could not validate credentials")


async def get_optional_user(
    request: Request,
    token: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> Optional[AuthUser]:
    """
    Return the authenticated user, or None when no bearer token was sent.
    A token that is present but invalid is still rejected.
    """
    user = _resolve_user(token)
    request.state.user = user
    return user


async def get_current_user(
    user: Annotated[Optional[AuthUser], Depends(get_optional_user)],
) -> AuthUser:
    """
    Validate the bearer JWT and return the authenticated user.
    """
    if user is None:
        raise AuthenticationError()
    return user


def require_roles(*roles: UserRole):
    """Dependency factory allowing only the given roles through."""

    async def role_dependency(
        current_user: Annotated[AuthUser, Depends(get_current_user)],
    ) -> AuthUser:
        if current_user.role not in roles:
            raise AuthorizationError(
                f"Requires role: {', '.join(role.name for role in roles)}"
            )
        return current_user

    return role_dependency


require_admin = require_roles(UserRole.ADMIN)
require_shop_owner = require_roles(UserRole.SHOP_OWNER)
