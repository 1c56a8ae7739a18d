"""Unit tests for JWT authentication and role gates."""

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt
from libs.auth.dependencies import ensure_admin, ensure_coach, get_current_user
from libs.auth.models import Role
from libs.common.config import get_settings
from tests.conftest import make_admin_user, make_client_user, make_coach_user


def _bearer(claims, secret=None):
    settings = get_settings()
    token = jwt.encode(
        claims, secret or settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM
    )
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_valid_token_decodes_to_auth_user():
    user = await get_current_user(
        _bearer({"sub": "12", "email": "coach@test.com", "role": "coach"})
    )

    assert user.user_id == 12
    assert user.role == Role.COACH
    assert user.is_staff is True


@pytest.mark.asyncio
@pytest.mark.unit
async def test_role_defaults_to_client():
    user = await get_current_user(_bearer({"sub": "3"}))
    assert user.role == Role.CLIENT
    assert user.is_admin is False


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.parametrize(
    "claims, secret",
    [
        ({"sub": "1", "role": "admin"}, "wrong-secret"),
        ({"sub": "not-a-number"}, None),
        ({"sub": "1", "role": "superuser"}, None),
        ({"email": "nobody@test.com"}, None),
    ],
)
async def test_invalid_tokens_rejected(claims, secret):
    with pytest.raises(HTTPException) as exc_info:
        await get_current_user(_bearer(claims, secret))

    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == "Could not validate credentials"


@pytest.mark.unit
def test_role_gates():
    assert ensure_admin(make_admin_user()).is_admin
    assert ensure_coach(make_coach_user()).role == Role.COACH
    assert ensure_coach(make_admin_user()).role == Role.ADMIN

    with pytest.raises(HTTPException) as exc_info:
        ensure_coach(make_client_user())
    assert exc_info.value.detail == "Coach privileges required"

    with pytest.raises(HTTPException) as exc_info:
        ensure_admin(make_coach_user())
    assert exc_info.value.status_code == 403
