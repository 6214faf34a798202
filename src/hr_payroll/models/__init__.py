"""ORM models."""

from hr_payroll.models.access import ModulePermission, PermissionGroup, User, UserGroup
from hr_payroll.models.base import Base, new_id
from hr_payroll.models.branch import Branch
from hr_payroll.models.employee import Employee, JobPosition
from hr_payroll.models.enums import (
    Action,
    EmployeeStatus,
    Module,
    PaymentStatus,
    TerminationReason,
    VacationStatus,
)
from hr_payroll.models.leave import Termination, Vacation
from hr_payroll.models.payroll import Advance, Payroll

__all__ = [
    "Action",
    "Advance",
    "Base",
    "Branch",
    "Employee",
    "EmployeeStatus",
    "JobPosition",
    "Module",
    "ModulePermission",
    "PaymentStatus",
    "Payroll",
    "PermissionGroup",
    "Termination",
    "TerminationReason",
    "User",
    "UserGroup",
    "Vacation",
    "VacationStatus",
    "new_id",
]
