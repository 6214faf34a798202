"""Vacation API endpoints."""

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
    VacationCreate,
    VacationResponse,
    VacationStats,
    VacationUpdate,
)
from hr_payroll.models import Action, Module, User
from hr_payroll.services import VacationService

router = APIRouter(prefix="/vacations", tags=["vacations"])

CanRead = Annotated[User | None, Depends(require_permission(Module.VACATIONS, Action.READ))]
CanCreate = Annotated[User | None, Depends(require_permission(Module.VACATIONS, Action.CREATE))]
CanUpdate = Annotated[User | None, Depends(require_permission(Module.VACATIONS, Action.UPDATE))]
CanDelete = Annotated[User | None, Depends(require_permission(Module.VACATIONS, Action.DELETE))]
CanReadDashboard = Annotated[
    User | None, Depends(require_permission(Module.DASHBOARD, Action.READ))
]


@router.get("", response_model=list[VacationResponse])
async def list_vacations(
    db: DbSession,
    cache: CacheDep,
    settings: SettingsDep,
    user: CanRead,
    search: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[VacationResponse]:
    """List vacations with the employee name. Search matches the employee name."""
    service = record_service(VacationService, db, cache, settings, user)
    rows = await service.list(search, limit, offset)
    return [VacationResponse.model_validate(row) for row in rows]


@router.get("/stats", response_model=VacationStats)
async def vacation_stats(
    db: DbSession, cache: CacheDep, settings: SettingsDep, user: CanReadDashboard
) -> VacationStats:
    """Pending, approved, in-progress and expiring counts."""
    service = record_service(VacationService, db, cache, settings, user)
    return VacationStats.model_validate(await service.stats())


@router.post(
    "",
    response_model=VacationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_vacation(
    db: DbSession,
    cache: CacheDep,
    settings: SettingsDep,
    user: CanCreate,
    payload: VacationCreate,
) -> VacationResponse:
    service = record_service(VacationService, db, cache, settings, user)
    vacation = await service.create(payload.model_dump())
    return VacationResponse.model_validate(vacation)


@router.get(
    "/{vacation_id}",
    response_model=VacationResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_vacation(
    db: DbSession, cache: CacheDep, settings: SettingsDep, user: CanRead, vacation_id: str
) -> VacationResponse:
    service = record_service(VacationService, db, cache, settings, user)
    return VacationResponse.model_validate(await service.require(vacation_id))


@router.put(
    "/{vacation_id}",
    response_model=VacationResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_vacation(
    db: DbSession,
    cache: CacheDep,
    settings: SettingsDep,
    user: CanUpdate,
    vacation_id: str,
    payload: VacationUpdate,
) -> VacationResponse:
    """Update a vacation. Approving it records the approval time and approver."""
    service = record_service(VacationService, db, cache, settings, user)
    vacation = await service.update(vacation_id, payload.model_dump(exclude_unset=True))
    return VacationResponse.model_validate(vacation)


@router.delete(
    "/{vacation_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"model": ErrorResponse}},
)
async def delete_vacation(
    db: DbSession, cache: CacheDep, settings: SettingsDep, user: CanDelete, vacation_id: str
) -> Response:
    service = record_service(VacationService, db, cache, settings, user)
    await service.delete(vacation_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
