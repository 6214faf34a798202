"""User API endpoints, including group membership and effective permissions."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from hr_payroll.api.dependencies import CacheDep, DbSession, require_permission
from hr_payroll.api.schemas import (
    EffectivePermissionsResponse,
    ErrorResponse,
    UserCreate,
    UserGroupMembership,
    UserResponse,
    UserUpdate,
)
from hr_payroll.models import Action, Module, User
from hr_payroll.services import PermissionService, UserService

router = APIRouter(prefix="/users", tags=["users"])

CanRead = Annotated[User | None, Depends(require_permission(Module.PERMISSIONS, Action.READ))]
CanCreate = Annotated[User | None, Depends(require_permission(Module.PERMISSIONS, Action.CREATE))]
CanUpdate = Annotated[User | None, Depends(require_permission(Module.PERMISSIONS, Action.UPDATE))]
CanDelete = Annotated[User | None, Depends(require_permission(Module.PERMISSIONS, Action.DELETE))]


@router.get("", response_model=list[UserResponse])
async def list_users(
    db: DbSession,
    cache: CacheDep,
    _: CanRead,
    search: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[UserResponse]:
    """List users without their password hashes."""
    rows = await UserService(db, cache).list(search, limit, offset)
    return [UserResponse.model_validate(row) for row in rows]


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_user(
    db: DbSession, cache: CacheDep, _: CanCreate, payload: UserCreate
) -> UserResponse:
    user = await UserService(db, cache).create(payload.model_dump())
    return UserResponse.model_validate(user)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_user(db: DbSession, cache: CacheDep, _: CanRead, user_id: str) -> UserResponse:
    user = await UserService(db, cache).require(user_id)
    return UserResponse.model_validate(user)


@router.put(
    "/{user_id}",
    response_model=UserResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_user(
    db: DbSession, cache: CacheDep, _: CanUpdate, user_id: str, payload: UserUpdate
) -> UserResponse:
    """Update a user. A new password is hashed; an empty one leaves it unchanged."""
    user = await UserService(db, cache).update(user_id, payload.model_dump(exclude_unset=True))
    return UserResponse.model_validate(user)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"model": ErrorResponse}},
)
async def delete_user(db: DbSession, cache: CacheDep, _: CanDelete, user_id: str) -> Response:
    await UserService(db, cache).delete(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{user_id}/groups",
    response_model=list[UserGroupMembership],
    responses={404: {"model": ErrorResponse}},
)
async def list_user_groups(
    db: DbSession, cache: CacheDep, _: CanRead, user_id: str
) -> list[UserGroupMembership]:
    groups = await PermissionService(db, cache).list_user_groups(user_id)
    return [UserGroupMembership.model_validate(group) for group in groups]


@router.get(
    "/{user_id}/permissions",
    response_model=EffectivePermissionsResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_user_permissions(
    db: DbSession, cache: CacheDep, _: CanRead, user_id: str
) -> EffectivePermissionsResponse:
    """Effective permissions: per module, the OR of the flags of all the user's groups."""
    await UserService(db, cache).require(user_id)
    service = PermissionService(db, cache)
    grants = await service.effective_permissions(user_id)
    return EffectivePermissionsResponse(
        user_id=user_id,
        permissions=service.grants_as_dict(grants),
    )
