"""HR payroll services."""

from hr_payroll.services.access import (
    ModuleGrant,
    PermissionGroupService,
    PermissionService,
    UserService,
    evaluate_permissions,
)
from hr_payroll.services.auth import AuthService, TokenSigner, hash_password, verify_password
from hr_payroll.services.cache import QueryCache, cache_key
from hr_payroll.services.organization import BranchService, EmployeeService, JobPositionService
from hr_payroll.services.records import (
    AdvanceService,
    PayrollService,
    TerminationService,
    VacationService,
)
from hr_payroll.services.state_machine import (
    InvalidTransitionError,
    PaymentStateMachine,
    VacationStateMachine,
)

__all__ = [
    "AdvanceService",
    "AuthService",
    "BranchService",
    "EmployeeService",
    "InvalidTransitionError",
    "JobPositionService",
    "ModuleGrant",
    "PaymentStateMachine",
    "PayrollService",
    "PermissionGroupService",
    "PermissionService",
    "QueryCache",
    "TerminationService",
    "TokenSigner",
    "UserService",
    "VacationService",
    "VacationStateMachine",
    "cache_key",
    "evaluate_permissions",
    "hash_password",
    "verify_password",
]
