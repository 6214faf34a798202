"""Branch API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from hr_payroll.api.dependencies import CacheDep, DbSession, require_permission
from hr_payroll.api.schemas import BranchCreate, BranchResponse, BranchUpdate, ErrorResponse
from hr_payroll.models import Action, Module, User
from hr_payroll.services import BranchService

router = APIRouter(prefix="/branches", tags=["branches"])

CanRead = Annotated[User | None, Depends(require_permission(Module.BRANCHES, Action.READ))]
CanCreate = Annotated[User | None, Depends(require_permission(Module.BRANCHES, Action.CREATE))]
CanUpdate = Annotated[User | None, Depends(require_permission(Module.BRANCHES, Action.UPDATE))]
CanDelete = Annotated[User | None, Depends(require_permission(Module.BRANCHES, Action.DELETE))]


@router.get("", response_model=list[BranchResponse])
async def list_branches(
    db: DbSession,
    cache: CacheDep,
    _: CanRead,
    search: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[BranchResponse]:
    """List branches, newest first."""
    rows = await BranchService(db, cache).list(search, limit, offset)
    return [BranchResponse.model_validate(row) for row in rows]


@router.post(
    "",
    response_model=BranchResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_branch(
    db: DbSession, cache: CacheDep, _: CanCreate, payload: BranchCreate
) -> BranchResponse:
    branch = await BranchService(db, cache).create(payload.model_dump())
    return BranchResponse.model_validate(branch)


@router.get(
    "/{branch_id}",
    response_model=BranchResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_branch(db: DbSession, cache: CacheDep, _: CanRead, branch_id: str) -> BranchResponse:
    branch = await BranchService(db, cache).require(branch_id)
    return BranchResponse.model_validate(branch)


@router.put(
    "/{branch_id}",
    response_model=BranchResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_branch(
    db: DbSession, cache: CacheDep, _: CanUpdate, branch_id: str, payload: BranchUpdate
) -> BranchResponse:
    branch = await BranchService(db, cache).update(
        branch_id, payload.model_dump(exclude_unset=True)
    )
    return BranchResponse.model_validate(branch)


@router.delete(
    "/{branch_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"model": ErrorResponse}},
)
async def delete_branch(db: DbSession, cache: CacheDep, _: CanDelete, branch_id: str) -> Response:
    """Delete a branch together with its employees and their records."""
    await BranchService(db, cache).delete(branch_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
