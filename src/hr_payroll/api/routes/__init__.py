"""API routes."""

from hr_payroll.api.routes.advances import router as advances_router
from hr_payroll.api.routes.auth import router as auth_router
from hr_payroll.api.routes.branches import router as branches_router
from hr_payroll.api.routes.employees import router as employees_router
from hr_payroll.api.routes.health import router as health_router
from hr_payroll.api.routes.job_positions import router as job_positions_router
from hr_payroll.api.routes.payroll import router as payroll_router
from hr_payroll.api.routes.permission_groups import module_permissions_router, user_groups_router
from hr_payroll.api.routes.permission_groups import router as permission_groups_router
from hr_payroll.api.routes.terminations import router as terminations_router
from hr_payroll.api.routes.users import router as users_router
from hr_payroll.api.routes.vacations import router as vacations_router

API_ROUTERS = [
    auth_router,
    branches_router,
    users_router,
    permission_groups_router,
    user_groups_router,
    module_permissions_router,
    job_positions_router,
    employees_router,
    vacations_router,
    terminations_router,
    advances_router,
    payroll_router,
]

__all__ = ["API_ROUTERS", "health_router"]
