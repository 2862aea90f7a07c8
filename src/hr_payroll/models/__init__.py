"""ORM models."""

from hr_payroll.models.audit import AuditLog
from hr_payroll.models.base import Base, TimestampMixin
from hr_payroll.models.employee import Employee, User
from hr_payroll.models.payroll import PayrollPeriodLock, PayrollRecord, TaxConfiguration
from hr_payroll.models.reference import Department, Role

__all__ = [
    "AuditLog",
    "Base",
    "Department",
    "Employee",
    "PayrollPeriodLock",
    "PayrollRecord",
    "Role",
    "TaxConfiguration",
    "TimestampMixin",
    "User",
]
