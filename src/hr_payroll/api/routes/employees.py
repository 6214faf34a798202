"""Employee API endpoints, including per-employee record listings."""

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
    AdvanceResponse,
    EmployeeCreate,
    EmployeeResponse,
    EmployeeStats,
    EmployeeUpdate,
    ErrorResponse,
    PayrollResponse,
    VacationResponse,
)
from hr_payroll.models import Action, Module, User
from hr_payroll.services import AdvanceService, EmployeeService, PayrollService, VacationService

router = APIRouter(prefix="/employees", tags=["employees"])

CanRead = Annotated[User | None, Depends(require_permission(Module.EMPLOYEES, Action.READ))]
CanCreate = Annotated[User | None, Depends(require_permission(Module.EMPLOYEES, Action.CREATE))]
CanUpdate = Annotated[User | None, Depends(require_permission(Module.EMPLOYEES, Action.UPDATE))]
CanDelete = Annotated[User | None, Depends(require_permission(Module.EMPLOYEES, Action.DELETE))]
CanReadDashboard = Annotated[
    User | None, Depends(require_permission(Module.DASHBOARD, Action.READ))
]


@router.get("", response_model=list[EmployeeResponse])
async def list_employees(
    db: DbSession,
    cache: CacheDep,
    _: CanRead,
    search: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[EmployeeResponse]:
    """List employees, newest first. Search matches name, CPF and email."""
    rows = await EmployeeService(db, cache).list(search, limit, offset)
    return [EmployeeResponse.model_validate(row) for row in rows]


@router.get("/stats", response_model=EmployeeStats)
async def employee_stats(db: DbSession, cache: CacheDep, _: CanReadDashboard) -> EmployeeStats:
    """Headcount by status."""
    return EmployeeStats.model_validate(await EmployeeService(db, cache).stats())


@router.post(
    "",
    response_model=EmployeeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_employee(
    db: DbSession, cache: CacheDep, _: CanCreate, payload: EmployeeCreate
) -> EmployeeResponse:
    employee = await EmployeeService(db, cache).create(payload.model_dump())
    return EmployeeResponse.model_validate(employee)


@router.get(
    "/{employee_id}",
    response_model=EmployeeResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_employee(
    db: DbSession, cache: CacheDep, _: CanRead, employee_id: str
) -> EmployeeResponse:
    employee = await EmployeeService(db, cache).require(employee_id)
    return EmployeeResponse.model_validate(employee)


@router.put(
    "/{employee_id}",
    response_model=EmployeeResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_employee(
    db: DbSession,
    cache: CacheDep,
    _: CanUpdate,
    employee_id: str,
    payload: EmployeeUpdate,
) -> EmployeeResponse:
    employee = await EmployeeService(db, cache).update(
        employee_id, payload.model_dump(exclude_unset=True)
    )
    return EmployeeResponse.model_validate(employee)


@router.delete(
    "/{employee_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"model": ErrorResponse}},
)
async def delete_employee(
    db: DbSession, cache: CacheDep, _: CanDelete, employee_id: str
) -> Response:
    """Delete an employee with all vacations, terminations, advances and payroll entries."""
    await EmployeeService(db, cache).delete(employee_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================================
# Records of one employee
# ============================================================================


@router.get(
    "/{employee_id}/vacations",
    response_model=list[VacationResponse],
    responses={404: {"model": ErrorResponse}},
)
async def list_employee_vacations(
    db: DbSession,
    cache: CacheDep,
    settings: SettingsDep,
    user: Annotated[User | None, Depends(require_permission(Module.VACATIONS, Action.READ))],
    employee_id: str,
) -> list[VacationResponse]:
    service = record_service(VacationService, db, cache, settings, user)
    rows = await service.list_for_employee(employee_id)
    return [VacationResponse.model_validate(row) for row in rows]


@router.get(
    "/{employee_id}/advances",
    response_model=list[AdvanceResponse],
    responses={404: {"model": ErrorResponse}},
)
async def list_employee_advances(
    db: DbSession,
    cache: CacheDep,
    settings: SettingsDep,
    user: Annotated[User | None, Depends(require_permission(Module.ADVANCES, Action.READ))],
    employee_id: str,
) -> list[AdvanceResponse]:
    service = record_service(AdvanceService, db, cache, settings, user)
    rows = await service.list_for_employee(employee_id)
    return [AdvanceResponse.model_validate(row) for row in rows]


@router.get(
    "/{employee_id}/payroll",
    response_model=list[PayrollResponse],
    responses={404: {"model": ErrorResponse}},
)
async def list_employee_payroll(
    db: DbSession,
    cache: CacheDep,
    settings: SettingsDep,
    user: Annotated[User | None, Depends(require_permission(Module.PAYROLL, Action.READ))],
    employee_id: str,
) -> list[PayrollResponse]:
    service = record_service(PayrollService, db, cache, settings, user)
    rows = await service.list_for_employee(employee_id)
    return [PayrollResponse.model_validate(row) for row in rows]
