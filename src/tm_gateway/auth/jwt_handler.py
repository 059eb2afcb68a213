"""JWT access token verification.

Tokens are issued by the external auth service with the shared JWT_SECRET
(HS256). This service only verifies them and reads the `sub` claim as the
caller's principal id. create_access_token exists for local tooling and tests.
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from config.settings import settings
from src.tm_common.errors import InvalidCredentialsError

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"
_ACCESS_EXPIRE = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)


def create_access_token(principal_id: str) -> str:
    now = datetime.now(UTC)
    payload = {
        "sub": principal_id,
        "type": "access",
        "iat": now,
        "exp": now + _ACCESS_EXPIRE,
    }
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM))


def decode_token(token: str) -> str:
    """Validate an access token and return its principal id.

    Raises:
        InvalidCredentialsError: bad signature, expired, wrong type or no `sub`.
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise InvalidCredentialsError() from None

    if payload.get("type") != "access":
        raise InvalidCredentialsError()
    principal_id = payload.get("sub")
    if not principal_id:
        raise InvalidCredentialsError()
    return str(principal_id)
