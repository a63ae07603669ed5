from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from jose import jwt

from task_manager.app.core.config import Settings
from task_manager.app.core.security import (
    InvalidTokenError,
    Principal,
    create_access_token,
    get_password_hash,
    refresh_access_token,
    verify_password,
    verify_token,
)
from task_manager.app.models import UserRole


def test_password_hash_round_trip() -> None:
    hashed = get_password_hash("pw123", rounds=4)

    assert hashed != "pw123"
    assert verify_password("pw123", hashed)
    assert not verify_password("wrong", hashed)


def test_verify_password_rejects_malformed_hash() -> None:
    assert verify_password("pw123", "not-a-bcrypt-hash") is False


def test_access_token_carries_user_id_and_role(settings: Settings) -> None:
    user_id = uuid4()
    generated = create_access_token(subject=user_id, role=UserRole.ADMIN, settings=settings)

    payload = jwt.decode(generated.token, settings.jwt_secret_key, algorithms=["HS256"])
    assert payload["user_id"] == str(user_id)
    assert payload["role"] == "admin"
    assert payload["exp"] == int(generated.expires_at.timestamp())

    claims = verify_token(generated.token, settings)
    assert claims.user_id == user_id
    assert claims.role is UserRole.ADMIN
    assert claims.jti == generated.jti


def test_default_lifetime_follows_settings(settings: Settings) -> None:
    before = datetime.now(timezone.utc)
    generated = create_access_token(subject=uuid4(), role=UserRole.USER, settings=settings)

    lifetime = generated.expires_at - before
    expected = timedelta(minutes=settings.access_token_expire_minutes)
    assert expected - timedelta(seconds=2) <= lifetime <= expected + timedelta(seconds=1)


def test_expired_token_is_rejected(settings: Settings) -> None:
    generated = create_access_token(
        subject=uuid4(),
        role=UserRole.USER,
        settings=settings,
        expires_delta=timedelta(seconds=-5),
    )

    with pytest.raises(InvalidTokenError) as exc_info:
        verify_token(generated.token, settings)
    assert exc_info.value.reason == "Token has expired."


def test_token_signed_with_other_secret_is_rejected(settings: Settings) -> None:
    other = settings.model_copy(update={"jwt_secret_key": "another-secret"})
    generated = create_access_token(subject=uuid4(), role=UserRole.USER, settings=other)

    with pytest.raises(InvalidTokenError) as exc_info:
        verify_token(generated.token, settings)
    assert exc_info.value.reason == "Invalid token."


def test_garbage_token_is_rejected(settings: Settings) -> None:
    with pytest.raises(InvalidTokenError):
        verify_token("definitely.not.a-token", settings)


@pytest.mark.parametrize(
    "claims",
    [
        {"user_id": "not-a-uuid", "role": "user"},
        {"user_id": str(uuid4()), "role": "superuser"},
        {"role": "user"},
        {"user_id": str(uuid4())},
    ],
)
def test_invalid_claims_are_rejected(settings: Settings, claims: dict[str, str]) -> None:
    exp = int((datetime.now(timezone.utc) + timedelta(minutes=5)).timestamp())
    token = jwt.encode({**claims, "exp": exp}, settings.jwt_secret_key, algorithm="HS256")

    with pytest.raises(InvalidTokenError) as exc_info:
        verify_token(token, settings)
    assert exc_info.value.reason == "Invalid token claims."


def test_token_without_expiry_is_rejected(settings: Settings) -> None:
    token = jwt.encode(
        {"user_id": str(uuid4()), "role": "user"},
        settings.jwt_secret_key,
        algorithm="HS256",
    )

    with pytest.raises(InvalidTokenError):
        verify_token(token, settings)


def test_refresh_grants_full_lifetime_and_new_token(settings: Settings) -> None:
    user_id = uuid4()
    original = create_access_token(
        subject=user_id,
        role=UserRole.USER,
        settings=settings,
        expires_delta=timedelta(minutes=1),
    )

    refreshed = refresh_access_token(original.token, settings)

    assert refreshed.token != original.token
    assert refreshed.jti != original.jti
    assert refreshed.expires_at > original.expires_at
    claims = verify_token(refreshed.token, settings)
    assert claims.user_id == user_id
    assert claims.role is UserRole.USER


def test_expired_token_cannot_be_refreshed(settings: Settings) -> None:
    expired = create_access_token(
        subject=uuid4(),
        role=UserRole.USER,
        settings=settings,
        expires_delta=timedelta(seconds=-5),
    )

    with pytest.raises(InvalidTokenError):
        refresh_access_token(expired.token, settings)


def test_principal_ownership_rules() -> None:
    owner_id = uuid4()
    owner = Principal(user_id=owner_id, role=UserRole.USER)
    stranger = Principal(user_id=uuid4(), role=UserRole.USER)
    admin = Principal(user_id=uuid4(), role=UserRole.ADMIN)

    assert owner.may_modify(owner_id)
    assert not stranger.may_modify(owner_id)
    assert admin.may_modify(owner_id)
