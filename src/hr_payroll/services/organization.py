"""Branch, job position and employee services."""

from __future__ import annotations

from typing import Any

from sqlalchemy import case, func, select

from hr_payroll.errors import EntityNotFoundError
from hr_payroll.models import Branch, Employee, EmployeeStatus, JobPosition
from hr_payroll.services.base import EntityService
from hr_payroll.services.cache import ENTITY_TTL

# Entity types whose rows belong to an employee
EMPLOYEE_RECORDS = ("vacations", "terminations", "advances", "payroll")


class BranchService(EntityService[Branch]):
    """Branches. Deleting one removes its employees and their records."""

    model = Branch
    entity = "branches"
    label = "Branch"
    search_columns = (Branch.fantasy_name, Branch.cnpj, Branch.city)
    cascades_to = ("employees", *EMPLOYEE_RECORDS)


class JobPositionService(EntityService[JobPosition]):
    model = JobPosition
    entity = "job_positions"
    label = "Job position"
    search_columns = (JobPosition.name, JobPosition.description)
    cascades_to = ("employees",)

    def order_clause(self) -> tuple[Any, ...]:
        return (JobPosition.name.asc(),)


class EmployeeService(EntityService[Employee]):
    """Employees. Deleting one removes its vacations, terminations, advances and payroll."""

    model = Employee
    entity = "employees"
    label = "Employee"
    search_columns = (Employee.name, Employee.cpf, Employee.email)
    cascades_to = EMPLOYEE_RECORDS

    async def _require_references(self, values: dict[str, Any]) -> None:
        branch_id = values.get("branch_id")
        if branch_id is not None and await self.session.get(Branch, branch_id) is None:
            raise EntityNotFoundError("Branch", branch_id)
        position_id = values.get("position_id")
        if position_id is not None and await self.session.get(JobPosition, position_id) is None:
            raise EntityNotFoundError("Job position", position_id)

    async def prepare_create(self, values: dict[str, Any]) -> dict[str, Any]:
        await self._require_references(values)
        return values

    async def prepare_update(self, obj: Employee, changes: dict[str, Any]) -> dict[str, Any]:
        await self._require_references(changes)
        return changes

    async def update(self, entity_id: str, changes: dict[str, Any]) -> Employee:
        previous = await self.require(entity_id)
        old_name = previous.name
        employee = await super().update(entity_id, changes)
        # record lists carry the employee name
        if employee.name != old_name:
            self.invalidate(*EMPLOYEE_RECORDS)
        return employee

    async def stats(self) -> dict[str, int]:
        """Headcount by status."""
        return await self.cache.get_or_set(
            "stats:employees",
            self._fetch_stats,
            ttl=ENTITY_TTL["stats"],
        )

    async def _fetch_stats(self) -> dict[str, int]:
        def count_status(status: EmployeeStatus) -> Any:
            return func.coalesce(
                func.sum(case((Employee.status == status.value, 1), else_=0)), 0
            )

        result = await self.session.execute(
            select(
                func.count(Employee.id),
                count_status(EmployeeStatus.ACTIVE),
                count_status(EmployeeStatus.INACTIVE),
                count_status(EmployeeStatus.ON_LEAVE),
            )
        )
        total, active, inactive, on_leave = result.one()
        return {
            "total": int(total or 0),
            "active": int(active or 0),
            "inactive": int(inactive or 0),
            "on_leave": int(on_leave or 0),
        }
