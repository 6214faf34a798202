"""Job position API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from hr_payroll.api.dependencies import CacheDep, DbSession, require_permission
from hr_payroll.api.schemas import (
    ErrorResponse,
    JobPositionCreate,
    JobPositionResponse,
    JobPositionUpdate,
)
from hr_payroll.models import Action, Module, User
from hr_payroll.services import JobPositionService

router = APIRouter(prefix="/job-positions", tags=["job-positions"])

CanRead = Annotated[User | None, Depends(require_permission(Module.JOB_POSITIONS, Action.READ))]
CanCreate = Annotated[User | None, Depends(require_permission(Module.JOB_POSITIONS, Action.CREATE))]
CanUpdate = Annotated[User | None, Depends(require_permission(Module.JOB_POSITIONS, Action.UPDATE))]
CanDelete = Annotated[User | None, Depends(require_permission(Module.JOB_POSITIONS, Action.DELETE))]


@router.get("", response_model=list[JobPositionResponse])
async def list_job_positions(
    db: DbSession,
    cache: CacheDep,
    _: CanRead,
    search: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[JobPositionResponse]:
    """List job positions by name."""
    rows = await JobPositionService(db, cache).list(search, limit, offset)
    return [JobPositionResponse.model_validate(row) for row in rows]


@router.post(
    "",
    response_model=JobPositionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_job_position(
    db: DbSession, cache: CacheDep, _: CanCreate, payload: JobPositionCreate
) -> JobPositionResponse:
    position = await JobPositionService(db, cache).create(payload.model_dump())
    return JobPositionResponse.model_validate(position)


@router.get(
    "/{position_id}",
    response_model=JobPositionResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_job_position(
    db: DbSession, cache: CacheDep, _: CanRead, position_id: str
) -> JobPositionResponse:
    position = await JobPositionService(db, cache).require(position_id)
    return JobPositionResponse.model_validate(position)


@router.put(
    "/{position_id}",
    response_model=JobPositionResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_job_position(
    db: DbSession,
    cache: CacheDep,
    _: CanUpdate,
    position_id: str,
    payload: JobPositionUpdate,
) -> JobPositionResponse:
    position = await JobPositionService(db, cache).update(
        position_id, payload.model_dump(exclude_unset=True)
    )
    return JobPositionResponse.model_validate(position)


@router.delete(
    "/{position_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"model": ErrorResponse}},
)
async def delete_job_position(
    db: DbSession, cache: CacheDep, _: CanDelete, position_id: str
) -> Response:
    """Delete a job position. Employees holding it keep no position."""
    await JobPositionService(db, cache).delete(position_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
