"""Security helpers for password hashing and JWT bearer tokens."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any
from uuid import UUID, uuid4

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from ..models.user import UserRole
from .config import Settings

DEFAULT_HASH_ROUNDS = 12


@lru_cache(maxsize=8)
def _password_context(rounds: int) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


@dataclass(slots=True, frozen=True)
class GeneratedToken:
    """A signed token together with its absolute expiry."""

    token: str
    expires_at: datetime
    jti: str


@dataclass(slots=True, frozen=True)
class TokenClaims:
    """Verified identity carried by a bearer token."""

    user_id: UUID
    role: UserRole
    expires_at: datetime
    jti: str


@dataclass(slots=True, frozen=True)
class Principal:
    """The authenticated caller of a request."""

    user_id: UUID
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def may_modify(self, owner_id: UUID) -> bool:
        """Admins may modify anything, everyone else only what they own."""
        return self.is_admin or self.user_id == owner_id

    @classmethod
    def from_claims(cls, claims: TokenClaims) -> "Principal":
        return cls(user_id=claims.user_id, role=claims.role)


class InvalidTokenError(Exception):
    """Raised when a bearer token is malformed, tampered with or expired."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


def get_password_hash(password: str, *, rounds: int = DEFAULT_HASH_ROUNDS) -> str:
    """Return a salted bcrypt hash of ``password``."""

    return _password_context(rounds).hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check ``plain_password`` against ``hashed_password``.

    Mismatches and unrecognised hashes both yield ``False``.
    """

    try:
        return _password_context(DEFAULT_HASH_ROUNDS).verify(plain_password, hashed_password)
    except ValueError:
        return False


def create_access_token(
    *,
    subject: UUID | str,
    role: UserRole | str,
    settings: Settings,
    expires_delta: timedelta | None = None,
) -> GeneratedToken:
    """Create a signed HS256 token for ``subject`` carrying ``role``."""

    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    now = datetime.now(timezone.utc)
    expire = int((now + expires_delta).timestamp())
    payload: dict[str, Any] = {
        "user_id": str(subject),
        "role": UserRole(role).value,
        "iat": int(now.timestamp()),
        "exp": expire,
        "jti": uuid4().hex,
    }
    token = jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    return GeneratedToken(
        token=token,
        expires_at=datetime.fromtimestamp(expire, tz=timezone.utc),
        jti=payload["jti"],
    )


def decode_token(*, token: str, secret: str, algorithm: str) -> dict[str, Any]:
    """Decode a JWT and return its raw payload."""

    return jwt.decode(token, secret, algorithms=[algorithm], options={"require_exp": True})


def verify_token(token: str, settings: Settings) -> TokenClaims:
    """Validate ``token`` and return the identity it carries.

    The expiry check is strict: a token is rejected as soon as the current
    time passes ``exp``.
    """

    try:
        payload = decode_token(
            token=token,
            secret=settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
        )
    except ExpiredSignatureError as exc:
        raise InvalidTokenError("Token has expired.") from exc
    except JWTError as exc:
        raise InvalidTokenError("Invalid token.") from exc

    try:
        user_id = UUID(str(payload["user_id"]))
        role = UserRole(payload["role"])
        expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidTokenError("Invalid token claims.") from exc

    return TokenClaims(
        user_id=user_id,
        role=role,
        expires_at=expires_at,
        jti=str(payload.get("jti", "")),
    )


def refresh_access_token(token: str, settings: Settings) -> GeneratedToken:
    """Re-issue a still-valid token for the same subject with a full TTL."""

    claims = verify_token(token, settings)
    return create_access_token(subject=claims.user_id, role=claims.role, settings=settings)


__all__ = [
    "GeneratedToken",
    "InvalidTokenError",
    "Principal",
    "TokenClaims",
    "create_access_token",
    "decode_token",
    "get_password_hash",
    "refresh_access_token",
    "verify_password",
    "verify_token",
]
