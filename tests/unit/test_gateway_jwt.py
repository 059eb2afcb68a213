"""Tests for tm_gateway.auth.jwt_handler and the auth dependencies."""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi import HTTPException
from jose import jwt

from config.settings import settings
from src.tm_common.errors import ForbiddenError, InvalidCredentialsError
from src.tm_gateway.auth.dependencies import get_current_principal, require_admin
from src.tm_gateway.auth.jwt_handler import create_access_token, decode_token


def _encode(payload: dict) -> str:
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM))


class TestDecodeToken:
    def test_round_trip_returns_principal(self) -> None:
        assert decode_token(create_access_token("buyer-1")) == "buyer-1"

    def test_expired_token(self) -> None:
        past = datetime.now(UTC) - timedelta(minutes=5)
        token = _encode({"sub": "buyer-1", "type": "access", "exp": past})
        with pytest.raises(InvalidCredentialsError):
            decode_token(token)

    def test_wrong_secret(self) -> None:
        token = jwt.encode({"sub": "buyer-1", "type": "access"}, "other", algorithm="HS256")
        with pytest.raises(InvalidCredentialsError):
            decode_token(token)

    def test_refresh_token_rejected(self) -> None:
        with pytest.raises(InvalidCredentialsError):
            decode_token(_encode({"sub": "buyer-1", "type": "refresh"}))

    def test_missing_sub(self) -> None:
        with pytest.raises(InvalidCredentialsError):
            decode_token(_encode({"type": "access"}))

    def test_garbage(self) -> None:
        with pytest.raises(InvalidCredentialsError):
            decode_token("not-a-jwt")


class TestDependencies:
    async def test_bad_token_is_401(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_current_principal("not-a-jwt")
        assert exc_info.value.status_code == 401

    async def test_good_token(self) -> None:
        assert await get_current_principal(create_access_token("u1")) == "u1"

    async def test_require_admin(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings, "ADMIN_USER_IDS", ["admin-1"])
        assert await require_admin("admin-1") == "admin-1"
        with pytest.raises(ForbiddenError):
            await require_admin("buyer-1")
