"""Submission shapes for provisioning and their aggregated validation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from hr_payroll.validation import rules
from hr_payroll.validation.report import ValidationReport

GENDERS = ("Male", "Female")
STATUSES = ("Active", "Inactive")


@dataclass(frozen=True)
class UserFields:
    """Identity-side fields of an employee submission."""

    username: str
    first_name: str
    last_name: str
    email: str
    phone: str
    role_name: str
    department_name: str
    designation: str
    date_joined: str | date
    status: str = "Active"
    password: str | None = None


@dataclass(frozen=True)
class EmployeeFields:
    """Payroll-profile fields of an employee submission."""

    gender: str
    salary: str | Decimal
    bank_account: str


def _check_user_fields(
    report: ValidationReport,
    user: UserFields,
    today: date | None,
) -> None:
    report.record("username", rules.check_required(user.username, "Username"))
    report.record("first_name", rules.check_name(user.first_name, "First Name"))
    report.record("last_name", rules.check_name(user.last_name, "Last Name"))
    report.record("email", rules.check_email(user.email))
    report.record("phone", rules.check_phone(user.phone))
    report.record("role_name", rules.check_required(user.role_name, "Role"))
    report.record("department_name", rules.check_required(user.department_name, "Department"))
    report.record("designation", rules.check_required(user.designation, "Designation"))
    report.record(
        "date_joined",
        rules.check_date(user.date_joined, "Date Joined", not_future=True, today=today),
    )
    report.record("status", rules.check_choice(user.status, "Status", STATUSES))


def _check_employee_fields(report: ValidationReport, employee: EmployeeFields) -> None:
    report.record("gender", rules.check_choice(employee.gender, "Gender", GENDERS))
    report.record("salary", rules.check_salary(employee.salary))
    report.record("bank_account", rules.check_required(employee.bank_account, "Bank Account"))


def validate_new_employee(
    user: UserFields,
    employee: EmployeeFields,
    today: date | None = None,
) -> ValidationReport:
    """Run every creation check and return the aggregated report."""
    report = ValidationReport()
    report.record("password", rules.check_required(user.password, "Password"))
    _check_user_fields(report, user, today)
    _check_employee_fields(report, employee)
    return report


def validate_employee_update(
    user: UserFields,
    employee: EmployeeFields,
    new_password: str | None = None,
    today: date | None = None,
) -> ValidationReport:
    """Run every update check; a new password is optional but may not be blank."""
    report = ValidationReport()
    _check_user_fields(report, user, today)
    _check_employee_fields(report, employee)
    if new_password is not None:
        report.record("new_password", rules.check_required(new_password, "New Password"))
    return report
