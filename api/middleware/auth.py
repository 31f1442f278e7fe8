"""
JWT Authentication middleware.

Validates account tokens (either key scope) through the account service
and extracts user information.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from modules.accounts.exceptions import (
    InsufficientPermissionsError,
    MissingTokenError,
)
from modules.accounts.interfaces import IAccountService
from modules.accounts.models import Role
from shared.models import AuthenticatedUser

from ..dependencies import get_account_service

# Bearer token extractor
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    service: IAccountService = Depends(get_account_service),
) -> AuthenticatedUser:
    """
    Dependency that requires authentication.

    Use this for endpoints that require a logged-in user.
    Token errors propagate as account exceptions and are rendered as
    401 responses by the app error handler.

    Usage:
        @router.get("/protected")
        async def protected_route(user: AuthenticatedUser = Depends(get_current_user)):
            return {"user_id": user.id}
    """
    if credentials is None:
        raise MissingTokenError("Missing authorization header")

    return await service.validate_token(credentials.credentials)


async def require_admin(
    user: AuthenticatedUser = Depends(get_current_user),
) -> AuthenticatedUser:
    """
    Dependency that requires an authenticated admin.

    The service re-checks the role on every admin operation; this only
    fails fast before any body parsing.
    """
    if not user.is_admin:
        raise InsufficientPermissionsError(Role.ADMIN.value, user.role)
    return user

