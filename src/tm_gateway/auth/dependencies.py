"""FastAPI dependencies: get_current_principal, require_admin.

Usage in any protected router:
    from src.tm_gateway.auth.dependencies import get_current_principal

    @router.get("/protected")
    async def protected(principal: str = Depends(get_current_principal)):
        ...
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from config.settings import settings
from src.tm_common.errors import ForbiddenError, InvalidCredentialsError
from src.tm_gateway.auth.jwt_handler import decode_token

# Tokens come from the external auth service; tokenUrl only feeds Swagger UI
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_principal(token: str = Depends(oauth2_scheme)) -> str:
    """Return the caller's principal id. HTTP 401 on a missing or bad token."""
    try:
        return decode_token(token)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None


async def require_admin(principal: str = Depends(get_current_principal)) -> str:
    """Only principals listed in ADMIN_USER_IDS may moderate or run maintenance."""
    if principal not in settings.ADMIN_USER_IDS:
        raise ForbiddenError()
    return principal
