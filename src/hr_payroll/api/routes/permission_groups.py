"""Permission group, membership and module permission endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from hr_payroll.api.dependencies import CacheDep, DbSession, require_permission
from hr_payroll.api.schemas import (
    ErrorResponse,
    ModulePermissionResponse,
    ModulePermissionSet,
    PermissionGroupCreate,
    PermissionGroupResponse,
    PermissionGroupUpdate,
    UserGroupCreate,
    UserGroupResponse,
)
from hr_payroll.models import Action, Module, User
from hr_payroll.services import PermissionGroupService, PermissionService

router = APIRouter(prefix="/permission-groups", tags=["permissions"])
user_groups_router = APIRouter(prefix="/user-groups", tags=["permissions"])
module_permissions_router = APIRouter(prefix="/module-permissions", tags=["permissions"])

CanRead = Annotated[User | None, Depends(require_permission(Module.PERMISSIONS, Action.READ))]
CanCreate = Annotated[User | None, Depends(require_permission(Module.PERMISSIONS, Action.CREATE))]
CanUpdate = Annotated[User | None, Depends(require_permission(Module.PERMISSIONS, Action.UPDATE))]
CanDelete = Annotated[User | None, Depends(require_permission(Module.PERMISSIONS, Action.DELETE))]


# ============================================================================
# Permission groups
# ============================================================================


@router.get("", response_model=list[PermissionGroupResponse])
async def list_permission_groups(
    db: DbSession,
    cache: CacheDep,
    _: CanRead,
    search: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[PermissionGroupResponse]:
    rows = await PermissionGroupService(db, cache).list(search, limit, offset)
    return [PermissionGroupResponse.model_validate(row) for row in rows]


@router.post(
    "",
    response_model=PermissionGroupResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_permission_group(
    db: DbSession, cache: CacheDep, _: CanCreate, payload: PermissionGroupCreate
) -> PermissionGroupResponse:
    group = await PermissionGroupService(db, cache).create(payload.model_dump())
    return PermissionGroupResponse.model_validate(group)


@router.get(
    "/{group_id}",
    response_model=PermissionGroupResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_permission_group(
    db: DbSession, cache: CacheDep, _: CanRead, group_id: str
) -> PermissionGroupResponse:
    group = await PermissionGroupService(db, cache).require(group_id)
    return PermissionGroupResponse.model_validate(group)


@router.put(
    "/{group_id}",
    response_model=PermissionGroupResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_permission_group(
    db: DbSession,
    cache: CacheDep,
    _: CanUpdate,
    group_id: str,
    payload: PermissionGroupUpdate,
) -> PermissionGroupResponse:
    group = await PermissionGroupService(db, cache).update(
        group_id, payload.model_dump(exclude_unset=True)
    )
    return PermissionGroupResponse.model_validate(group)


@router.delete(
    "/{group_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"model": ErrorResponse}},
)
async def delete_permission_group(
    db: DbSession, cache: CacheDep, _: CanDelete, group_id: str
) -> Response:
    """Delete a group with its memberships and module permissions."""
    await PermissionGroupService(db, cache).delete(group_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{group_id}/permissions",
    response_model=list[ModulePermissionResponse],
    responses={404: {"model": ErrorResponse}},
)
async def list_group_permissions(
    db: DbSession, cache: CacheDep, _: CanRead, group_id: str
) -> list[ModulePermissionResponse]:
    permissions = await PermissionService(db, cache).list_group_permissions(group_id)
    return [ModulePermissionResponse.model_validate(p) for p in permissions]


# ============================================================================
# Group membership
# ============================================================================


@user_groups_router.post(
    "",
    response_model=UserGroupResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}},
)
async def assign_user_to_group(
    db: DbSession, cache: CacheDep, _: CanCreate, payload: UserGroupCreate
) -> UserGroupResponse:
    """Add a user to a group. Adding an existing member returns the current link."""
    link = await PermissionService(db, cache).assign_user_to_group(
        payload.user_id, payload.group_id
    )
    return UserGroupResponse.model_validate(link)


@user_groups_router.delete(
    "/{user_id}/{group_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"model": ErrorResponse}},
)
async def remove_user_from_group(
    db: DbSession, cache: CacheDep, _: CanDelete, user_id: str, group_id: str
) -> Response:
    await PermissionService(db, cache).remove_user_from_group(user_id, group_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================================
# Module permissions
# ============================================================================


@module_permissions_router.post(
    "",
    response_model=ModulePermissionResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def set_module_permission(
    db: DbSession, cache: CacheDep, _: CanCreate, payload: ModulePermissionSet
) -> ModulePermissionResponse:
    """Create or replace the flags of a group for one module."""
    permission = await PermissionService(db, cache).set_module_permission(
        payload.group_id,
        payload.module,
        can_read=payload.can_read,
        can_create=payload.can_create,
        can_update=payload.can_update,
        can_delete=payload.can_delete,
    )
    return ModulePermissionResponse.model_validate(permission)


@module_permissions_router.delete(
    "/{group_id}/{module}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"model": ErrorResponse}},
)
async def delete_module_permission(
    db: DbSession, cache: CacheDep, _: CanDelete, group_id: str, module: Module
) -> Response:
    await PermissionService(db, cache).delete_module_permission(group_id, module)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
