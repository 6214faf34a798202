"""Payroll entry API endpoints."""

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
    PayrollCreate,
    PayrollResponse,
    PayrollStats,
    PayrollUpdate,
)
from hr_payroll.models import Action, Module, User
from hr_payroll.services import PayrollService

router = APIRouter(prefix="/payroll", tags=["payroll"])

CanRead = Annotated[User | None, Depends(require_permission(Module.PAYROLL, Action.READ))]
CanCreate = Annotated[User | None, Depends(require_permission(Module.PAYROLL, Action.CREATE))]
CanUpdate = Annotated[User | None, Depends(require_permission(Module.PAYROLL, Action.UPDATE))]
CanDelete = Annotated[User | None, Depends(require_permission(Module.PAYROLL, Action.DELETE))]
CanReadDashboard = Annotated[
    User | None, Depends(require_permission(Module.DASHBOARD, Action.READ))
]


@router.get("", response_model=list[PayrollResponse])
async def list_payroll(
    db: DbSession,
    cache: CacheDep,
    settings: SettingsDep,
    user: CanRead,
    search: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[PayrollResponse]:
    service = record_service(PayrollService, db, cache, settings, user)
    rows = await service.list(search, limit, offset)
    return [PayrollResponse.model_validate(row) for row in rows]


@router.get("/stats", response_model=PayrollStats)
async def payroll_stats(
    db: DbSession, cache: CacheDep, settings: SettingsDep, user: CanReadDashboard
) -> PayrollStats:
    """Current month net total with processed and pending counts."""
    service = record_service(PayrollService, db, cache, settings, user)
    return PayrollStats.model_validate(await service.stats())


@router.post(
    "",
    response_model=PayrollResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_payroll(
    db: DbSession,
    cache: CacheDep,
    settings: SettingsDep,
    user: CanCreate,
    payload: PayrollCreate,
) -> PayrollResponse:
    """Create a payroll entry. Gross and net amounts are computed from the components."""
    service = record_service(PayrollService, db, cache, settings, user)
    entry = await service.create(payload.model_dump())
    return PayrollResponse.model_validate(entry)


@router.get(
    "/{payroll_id}",
    response_model=PayrollResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_payroll(
    db: DbSession, cache: CacheDep, settings: SettingsDep, user: CanRead, payroll_id: str
) -> PayrollResponse:
    service = record_service(PayrollService, db, cache, settings, user)
    return PayrollResponse.model_validate(await service.require(payroll_id))


@router.put(
    "/{payroll_id}",
    response_model=PayrollResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_payroll(
    db: DbSession,
    cache: CacheDep,
    settings: SettingsDep,
    user: CanUpdate,
    payroll_id: str,
    payload: PayrollUpdate,
) -> PayrollResponse:
    service = record_service(PayrollService, db, cache, settings, user)
    entry = await service.update(payroll_id, payload.model_dump(exclude_unset=True))
    return PayrollResponse.model_validate(entry)


@router.delete(
    "/{payroll_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"model": ErrorResponse}},
)
async def delete_payroll(
    db: DbSession, cache: CacheDep, settings: SettingsDep, user: CanDelete, payroll_id: str
) -> Response:
    service = record_service(PayrollService, db, cache, settings, user)
    await service.delete(payroll_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
