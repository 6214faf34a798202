"""Termination API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from hr_payroll.api.dependencies import (
    CacheDep,
    DbSession,
    SettingsDep,
    record_service,
    require_permission,
)
from hr_payroll.api.schemas import (
    ErrorResponse,
    TerminationCreate,
    TerminationResponse,
    TerminationUpdate,
)
from hr_payroll.models import Action, Module, User
from hr_payroll.services import TerminationService

router = APIRouter(prefix="/terminations", tags=["terminations"])

CanRead = Annotated[User | None, Depends(require_permission(Module.TERMINATIONS, Action.READ))]
CanCreate = Annotated[User | None, Depends(require_permission(Module.TERMINATIONS, Action.CREATE))]
CanUpdate = Annotated[User | None, Depends(require_permission(Module.TERMINATIONS, Action.UPDATE))]
CanDelete = Annotated[User | None, Depends(require_permission(Module.TERMINATIONS, Action.DELETE))]


@router.get("", response_model=list[TerminationResponse])
async def list_terminations(
    db: DbSession,
    cache: CacheDep,
    settings: SettingsDep,
    user: CanRead,
    search: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[TerminationResponse]:
    service = record_service(TerminationService, db, cache, settings, user)
    rows = await service.list(search, limit, offset)
    return [TerminationResponse.model_validate(row) for row in rows]


@router.post(
    "",
    response_model=TerminationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_termination(
    db: DbSession,
    cache: CacheDep,
    settings: SettingsDep,
    user: CanCreate,
    payload: TerminationCreate,
) -> TerminationResponse:
    service = record_service(TerminationService, db, cache, settings, user)
    termination = await service.create(payload.model_dump())
    return TerminationResponse.model_validate(termination)


@router.get(
    "/{termination_id}",
    response_model=TerminationResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_termination(
    db: DbSession, cache: CacheDep, settings: SettingsDep, user: CanRead, termination_id: str
) -> TerminationResponse:
    service = record_service(TerminationService, db, cache, settings, user)
    return TerminationResponse.model_validate(await service.require(termination_id))


@router.put(
    "/{termination_id}",
    response_model=TerminationResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_termination(
    db: DbSession,
    cache: CacheDep,
    settings: SettingsDep,
    user: CanUpdate,
    termination_id: str,
    payload: TerminationUpdate,
) -> TerminationResponse:
    service = record_service(TerminationService, db, cache, settings, user)
    termination = await service.update(termination_id, payload.model_dump(exclude_unset=True))
    return TerminationResponse.model_validate(termination)


@router.delete(
    "/{termination_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"model": ErrorResponse}},
)
async def delete_termination(
    db: DbSession, cache: CacheDep, settings: SettingsDep, user: CanDelete, termination_id: str
) -> Response:
    service = record_service(TerminationService, db, cache, settings, user)
    await service.delete(termination_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
