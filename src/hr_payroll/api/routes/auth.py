"""Login, token refresh and current-user endpoints."""

from fastapi import APIRouter

from hr_payroll.api.dependencies import CacheDep, CurrentUser, DbSession, SignerDep
from hr_payroll.api.schemas import (
    AuthResponse,
    CurrentUserResponse,
    ErrorResponse,
    LoginRequest,
    RefreshRequest,
    UserResponse,
)
from hr_payroll.services import AuthService, PermissionService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={401: {"model": ErrorResponse}},
)
async def login(db: DbSession, signer: SignerDep, payload: LoginRequest) -> AuthResponse:
    """Authenticate by CPF and password and issue a session token."""
    service = AuthService(db, signer)
    user = await service.authenticate(payload.cpf, payload.password)
    return AuthResponse(
        user=UserResponse.model_validate(user),
        token=service.issue_token(user),
        expires_in=signer.ttl_seconds,
    )


@router.post(
    "/refresh",
    response_model=AuthResponse,
    responses={401: {"model": ErrorResponse}},
)
async def refresh(db: DbSession, signer: SignerDep, payload: RefreshRequest) -> AuthResponse:
    """Exchange a valid token for a fresh one."""
    user, token = await AuthService(db, signer).refresh(payload.token)
    return AuthResponse(
        user=UserResponse.model_validate(user),
        token=token,
        expires_in=signer.ttl_seconds,
    )


@router.get(
    "/me",
    response_model=CurrentUserResponse,
    responses={401: {"model": ErrorResponse}},
)
async def me(db: DbSession, cache: CacheDep, user: CurrentUser) -> CurrentUserResponse:
    """The logged-in user and their effective permissions."""
    grants = await PermissionService(db, cache).effective_permissions(user.id)
    return CurrentUserResponse(
        user=UserResponse.model_validate(user),
        permissions=PermissionService.grants_as_dict(grants),
    )
