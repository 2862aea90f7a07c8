"""API routes."""

from hr_payroll.api.routes.employees import router as employees_router
from hr_payroll.api.routes.health import router as health_router
from hr_payroll.api.routes.payroll import router as payroll_router
from hr_payroll.api.routes.references import router as references_router
from hr_payroll.api.routes.settings import router as settings_router

__all__ = [
    "employees_router",
    "health_router",
    "payroll_router",
    "references_router",
    "settings_router",
]
