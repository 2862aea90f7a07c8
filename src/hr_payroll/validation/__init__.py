"""Validation layer: pure checks run before any persistence."""

from hr_payroll.validation.forms import (
    GENDERS,
    STATUSES,
    EmployeeFields,
    UserFields,
    validate_employee_update,
    validate_new_employee,
)
from hr_payroll.validation.report import CheckResult, FieldError, ValidationReport
from hr_payroll.validation.rules import (
    check_choice,
    check_date,
    check_email,
    check_name,
    check_non_negative_amount,
    check_phone,
    check_rate,
    check_required,
    check_salary,
    parse_date,
    parse_decimal,
)

__all__ = [
    "GENDERS",
    "STATUSES",
    "CheckResult",
    "EmployeeFields",
    "FieldError",
    "UserFields",
    "ValidationReport",
    "check_choice",
    "check_date",
    "check_email",
    "check_name",
    "check_non_negative_amount",
    "check_phone",
    "check_rate",
    "check_required",
    "check_salary",
    "parse_date",
    "parse_decimal",
    "validate_employee_update",
    "validate_new_employee",
]
