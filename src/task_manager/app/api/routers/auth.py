"""Routes handling signup, login and token refresh."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...core.config import Settings
from ...core.security import GeneratedToken
from ...deps import (
    BearerTokenDependency,
    DatabaseSessionDependency,
    PrincipalDependency,
    SettingsDependency,
)
from ...schemas import LoginRequest, SignupRequest, TokenResponse, UserPublic
from ...services import AuthService

router = APIRouter(tags=["auth"])


def _token_response(token: GeneratedToken, settings: Settings) -> TokenResponse:
    return TokenResponse(
        token=token.token,
        expires_at=token.expires_at,
        expires_in=settings.access_token_expire_minutes * 60,
    )


@router.post(
    "/signup",
    response_model=UserPublic,
    status_code=status.HTTP_200_OK,
    summary="Register a new user account",
)
async def signup(
    payload: SignupRequest,
    session: DatabaseSessionDependency,
    settings: SettingsDependency,
) -> UserPublic:
    service = AuthService(session, settings)
    user = await service.signup(name=payload.name, email=payload.email, password=payload.password)
    return UserPublic.model_validate(user)


@router.post(
    "/login",
    response_model=TokenResponse,
    status_code=status.HTTP_200_OK,
    summary="Exchange e-mail and password for a bearer token",
)
async def login(
    payload: LoginRequest,
    session: DatabaseSessionDependency,
    settings: SettingsDependency,
) -> TokenResponse:
    service = AuthService(session, settings)
    token = await service.login(email=payload.email, password=payload.password)
    return _token_response(token, settings)


@router.post(
    "/refresh",
    response_model=TokenResponse,
    status_code=status.HTTP_200_OK,
    summary="Re-issue a still-valid bearer token",
)
async def refresh(
    token: BearerTokenDependency,
    _: PrincipalDependency,
    session: DatabaseSessionDependency,
    settings: SettingsDependency,
) -> TokenResponse:
    service = AuthService(session, settings)
    return _token_response(service.refresh(token), settings)
