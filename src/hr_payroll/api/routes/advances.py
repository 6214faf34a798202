"""Salary advance API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from hr_payroll.api.dependencies import (
    CacheDep,
    DbSession,
    SettingsDep,
    record_service,
    require_permission,
)
from hr_payroll.api.schemas import AdvanceCreate, AdvanceResponse, AdvanceUpdate, ErrorResponse
from hr_payroll.models import Action, Module, User
from hr_payroll.services import AdvanceService

router = APIRouter(prefix="/advances", tags=["advances"])

CanRead = Annotated[User | None, Depends(require_permission(Module.ADVANCES, Action.READ))]
CanCreate = Annotated[User | None, Depends(require_permission(Module.ADVANCES, Action.CREATE))]
CanUpdate = Annotated[User | None, Depends(require_permission(Module.ADVANCES, Action.UPDATE))]
CanDelete = Annotated[User | None, Depends(require_permission(Module.ADVANCES, Action.DELETE))]


@router.get("", response_model=list[AdvanceResponse])
async def list_advances(
    db: DbSession,
    cache: CacheDep,
    settings: SettingsDep,
    user: CanRead,
    search: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[AdvanceResponse]:
    service = record_service(AdvanceService, db, cache, settings, user)
    rows = await service.list(search, limit, offset)
    return [AdvanceResponse.model_validate(row) for row in rows]


@router.post(
    "",
    response_model=AdvanceResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_advance(
    db: DbSession,
    cache: CacheDep,
    settings: SettingsDep,
    user: CanCreate,
    payload: AdvanceCreate,
) -> AdvanceResponse:
    """Create an advance. The amount is base amount times percentage over 100."""
    service = record_service(AdvanceService, db, cache, settings, user)
    advance = await service.create(payload.model_dump())
    return AdvanceResponse.model_validate(advance)


@router.get(
    "/{advance_id}",
    response_model=AdvanceResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_advance(
    db: DbSession, cache: CacheDep, settings: SettingsDep, user: CanRead, advance_id: str
) -> AdvanceResponse:
    service = record_service(AdvanceService, db, cache, settings, user)
    return AdvanceResponse.model_validate(await service.require(advance_id))


@router.put(
    "/{advance_id}",
    response_model=AdvanceResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_advance(
    db: DbSession,
    cache: CacheDep,
    settings: SettingsDep,
    user: CanUpdate,
    advance_id: str,
    payload: AdvanceUpdate,
) -> AdvanceResponse:
    service = record_service(AdvanceService, db, cache, settings, user)
    advance = await service.update(advance_id, payload.model_dump(exclude_unset=True))
    return AdvanceResponse.model_validate(advance)


@router.delete(
    "/{advance_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"model": ErrorResponse}},
)
async def delete_advance(
    db: DbSession, cache: CacheDep, settings: SettingsDep, user: CanDelete, advance_id: str
) -> Response:
    service = record_service(AdvanceService, db, cache, settings, user)
    await service.delete(advance_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
