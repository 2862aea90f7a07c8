"""Identity and employee provisioning.

Creates, updates and removes the linked User + Employee pair. Every
operation runs in exactly one transaction; a failure in any step rolls
back all of them, so no User is ever left without its Employee and no
Employee ever points at a missing User.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from hr_payroll.context import CallerContext
from hr_payroll.database import session_scope, unique_violation_field
from hr_payroll.errors import (
    DuplicateError,
    PayrollCoreError,
    RecordNotFoundError,
    TransactionError,
)
from hr_payroll.models import Department, Employee, PayrollRecord, Role, User
from hr_payroll.services.audit import AuditService
from hr_payroll.services.passwords import hash_password
from hr_payroll.services.reference_resolver import ReferenceResolver
from hr_payroll.validation import (
    EmployeeFields,
    UserFields,
    ValidationReport,
    check_email,
    check_name,
    check_phone,
    parse_date,
    parse_decimal,
    validate_employee_update,
    validate_new_employee,
)

logger = logging.getLogger(__name__)

UNIQUE_USER_COLUMNS = ("username", "email")


@dataclass(frozen=True)
class ProvisioningResult:
    """Identifiers of a provisioned pair."""

    user_id: int
    employee_id: int


@dataclass(frozen=True)
class EmployeeProfile:
    """Read-only join of a User and its Employee."""

    employee_id: int
    user_id: int
    username: str
    first_name: str
    last_name: str
    email: str
    phone: str
    role: str
    department: str
    designation: str
    gender: str
    salary: Decimal
    bank_account: str
    date_joined: date
    status: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class ProvisioningService:
    """Service for the User + Employee lifecycle.

    Operations:
    - create_employee: insert User, then Employee with the new user id
    - update_employee: update both rows and optionally the credential
    - update_user_profile: contact details on the User row only
    - terminate_employee: mark both rows Inactive
    - delete_employee: delete Employee, then User
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session] | None = None,
        today: Callable[[], date] = date.today,
    ):
        self.session_factory = session_factory
        self.today = today

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create_employee(
        self,
        ctx: CallerContext,
        user: UserFields,
        employee: EmployeeFields,
    ) -> ProvisioningResult:
        """Create the User and Employee rows as one atomic unit.

        Raises:
            ValidationError: If any field check fails (nothing is written)
            ReferenceNotFoundError: If the role or department is unknown
            DuplicateError: If the username or email is already in use
            TransactionError: For any other persistence failure
        """
        validate_new_employee(user, employee, today=self.today()).raise_if_failed()

        operation = "Employee provisioning"
        try:
            with session_scope(self.session_factory) as session:
                resolver = ReferenceResolver(session)
                role_id = resolver.resolve_role(user.role_name)
                dept_id = resolver.resolve_department(user.department_name)
                self._ensure_unique(session, user)

                user_row = self._insert_user(session, user, role_id, dept_id)
                employee_row = self._insert_employee(
                    session, user_row, employee, role_id, dept_id
                )

                AuditService(session).record(
                    ctx,
                    "employee_created",
                    "employee",
                    employee_row.id,
                    details=f"user_id={user_row.id} username={user_row.username}",
                )
                result = ProvisioningResult(user_id=user_row.id, employee_id=employee_row.id)
        except PayrollCoreError:
            raise
        except SQLAlchemyError as exc:
            submitted = _unique_values(user.username, user.email)
            raise self._translate(exc, operation, submitted) from exc

        logger.info(
            "Provisioned employee %s (user %s, username %r) by %s",
            result.employee_id,
            result.user_id,
            user.username.strip(),
            ctx.label,
        )
        return result

    def _insert_user(
        self,
        session: Session,
        user: UserFields,
        role_id: int,
        dept_id: int,
    ) -> User:
        """Insert the User row and flush so its generated id is known."""
        row = User(
            username=user.username.strip(),
            password=hash_password(user.password or ""),
            first_name=user.first_name.strip(),
            last_name=user.last_name.strip(),
            email=user.email.strip(),
            phone=user.phone.strip(),
            dept_id=dept_id,
            role_id=role_id,
            designation=user.designation.strip(),
            date_of_joining=parse_date(user.date_joined),
            status=user.status,
        )
        session.add(row)
        session.flush()
        return row

    def _insert_employee(
        self,
        session: Session,
        user_row: User,
        employee: EmployeeFields,
        role_id: int,
        dept_id: int,
    ) -> Employee:
        """Insert the Employee row keyed to an already-flushed User."""
        row = Employee(
            user_id=user_row.id,
            role_id=role_id,
            dept_id=dept_id,
            gender=employee.gender,
            position=user_row.designation,
            salary=parse_decimal(employee.salary),
            bank_account=employee.bank_account.strip(),
            date_joined=user_row.date_of_joining,
            status=user_row.status,
        )
        session.add(row)
        session.flush()
        return row

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def update_employee(
        self,
        ctx: CallerContext,
        employee_id: int,
        user: UserFields,
        employee: EmployeeFields,
        new_password: str | None = None,
    ) -> ProvisioningResult:
        """Update the User row, the Employee row and optionally the password together.

        Uniqueness of username/email is checked against every other user,
        excluding the one being edited.
        """
        validate_employee_update(
            user, employee, new_password=new_password, today=self.today()
        ).raise_if_failed()

        operation = f"Update of employee {employee_id}"
        try:
            with session_scope(self.session_factory) as session:
                employee_row = self._get_employee_row(session, employee_id)
                user_row = employee_row.user

                resolver = ReferenceResolver(session)
                role_id = resolver.resolve_role(user.role_name)
                dept_id = resolver.resolve_department(user.department_name)
                self._ensure_unique(session, user, exclude_user_id=user_row.id)

                joined = parse_date(user.date_joined)
                user_row.username = user.username.strip()
                user_row.first_name = user.first_name.strip()
                user_row.last_name = user.last_name.strip()
                user_row.email = user.email.strip()
                user_row.phone = user.phone.strip()
                user_row.designation = user.designation.strip()
                user_row.date_of_joining = joined  # type: ignore[assignment]
                user_row.status = user.status
                user_row.role_id = role_id
                user_row.dept_id = dept_id
                session.flush()

                employee_row.gender = employee.gender
                employee_row.position = user.designation.strip()
                employee_row.salary = parse_decimal(employee.salary)  # type: ignore[assignment]
                employee_row.bank_account = employee.bank_account.strip()
                employee_row.date_joined = joined  # type: ignore[assignment]
                employee_row.status = user.status
                employee_row.role_id = role_id
                employee_row.dept_id = dept_id
                session.flush()

                if new_password is not None:
                    user_row.password = hash_password(new_password)
                    session.flush()

                AuditService(session).record(
                    ctx,
                    "employee_updated",
                    "employee",
                    employee_id,
                    details="password changed" if new_password is not None else None,
                )
                result = ProvisioningResult(user_id=user_row.id, employee_id=employee_row.id)
        except PayrollCoreError:
            raise
        except SQLAlchemyError as exc:
            submitted = _unique_values(user.username, user.email)
            raise self._translate(exc, operation, submitted) from exc

        logger.info("Updated employee %s by %s", employee_id, ctx.label)
        return result

    def update_user_profile(
        self,
        ctx: CallerContext,
        user_id: int,
        *,
        first_name: str,
        last_name: str,
        email: str,
        phone: str,
    ) -> None:
        """Update contact details on the User row only."""
        report = ValidationReport()
        report.record("first_name", check_name(first_name, "First Name"))
        report.record("last_name", check_name(last_name, "Last Name"))
        report.record("email", check_email(email))
        report.record("phone", check_phone(phone))
        report.raise_if_failed()

        operation = f"Profile update of user {user_id}"
        try:
            with session_scope(self.session_factory) as session:
                user_row = session.get(User, user_id)
                if user_row is None:
                    raise RecordNotFoundError("user", user_id)
                self._ensure_email_unique(session, email, exclude_user_id=user_id)

                user_row.first_name = first_name.strip()
                user_row.last_name = last_name.strip()
                user_row.email = email.strip()
                user_row.phone = phone.strip()
                session.flush()
                AuditService(session).record(ctx, "user_profile_updated", "user", user_id)
        except PayrollCoreError:
            raise
        except SQLAlchemyError as exc:
            raise self._translate(exc, operation, _unique_values(email=email)) from exc

    # ------------------------------------------------------------------
    # Terminate / delete
    # ------------------------------------------------------------------

    def terminate_employee(self, ctx: CallerContext, employee_id: int) -> None:
        """Mark both the Employee and its User Inactive."""
        operation = f"Termination of employee {employee_id}"
        try:
            with session_scope(self.session_factory) as session:
                employee_row = self._get_employee_row(session, employee_id)
                employee_row.status = "Inactive"
                employee_row.user.status = "Inactive"
                session.flush()
                AuditService(session).record(ctx, "employee_terminated", "employee", employee_id)
        except PayrollCoreError:
            raise
        except SQLAlchemyError as exc:
            raise self._translate(exc, operation) from exc

        logger.info("Terminated employee %s by %s", employee_id, ctx.label)

    def delete_employee(self, ctx: CallerContext, employee_id: int) -> None:
        """Delete the Employee row, then its User row.

        Employees with payroll history cannot be deleted; terminate them
        instead.
        """
        operation = f"Deletion of employee {employee_id}"
        try:
            with session_scope(self.session_factory) as session:
                employee_row = self._get_employee_row(session, employee_id)
                payroll_rows = session.execute(
                    select(func.count())
                    .select_from(PayrollRecord)
                    .where(PayrollRecord.emp_id == employee_id)
                ).scalar_one()
                if payroll_rows:
                    raise TransactionError(
                        operation,
                        f"employee has {payroll_rows} payroll record(s); terminate instead",
                    )

                user_row = employee_row.user
                user_id = user_row.id
                session.delete(employee_row)
                session.flush()
                session.delete(user_row)
                session.flush()
                AuditService(session).record(
                    ctx,
                    "employee_deleted",
                    "employee",
                    employee_id,
                    details=f"user_id={user_id}",
                )
        except PayrollCoreError:
            raise
        except SQLAlchemyError as exc:
            raise self._translate(exc, operation) from exc

        logger.info("Deleted employee %s (user %s) by %s", employee_id, user_id, ctx.label)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_employee(self, employee_id: int) -> EmployeeProfile:
        """Load the joined profile of one employee."""
        with session_scope(self.session_factory) as session:
            row = session.execute(
                select(Employee, User, Role.name, Department.name)
                .join(User, Employee.user_id == User.id)
                .join(Role, Employee.role_id == Role.id)
                .join(Department, Employee.dept_id == Department.id)
                .where(Employee.id == employee_id)
            ).one_or_none()
            if row is None:
                raise RecordNotFoundError("employee", employee_id)

            employee_row, user_row, role_name, dept_name = row
            return EmployeeProfile(
                employee_id=employee_row.id,
                user_id=user_row.id,
                username=user_row.username,
                first_name=user_row.first_name,
                last_name=user_row.last_name,
                email=user_row.email,
                phone=user_row.phone,
                role=role_name,
                department=dept_name,
                designation=user_row.designation,
                gender=employee_row.gender,
                salary=employee_row.salary,
                bank_account=employee_row.bank_account,
                date_joined=employee_row.date_joined,
                status=employee_row.status,
            )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_employee_row(self, session: Session, employee_id: int) -> Employee:
        employee_row = session.get(Employee, employee_id)
        if employee_row is None:
            raise RecordNotFoundError("employee", employee_id)
        return employee_row

    def _ensure_unique(
        self,
        session: Session,
        user: UserFields,
        exclude_user_id: int | None = None,
    ) -> None:
        """Reject a username or email already held by a different user."""
        query = select(User.id).where(
            func.lower(User.username) == func.lower(user.username.strip())
        )
        if exclude_user_id is not None:
            query = query.where(User.id != exclude_user_id)
        if session.execute(query.limit(1)).first() is not None:
            raise DuplicateError("username", user.username.strip())

        self._ensure_email_unique(session, user.email, exclude_user_id)

    def _ensure_email_unique(
        self,
        session: Session,
        email: str,
        exclude_user_id: int | None = None,
    ) -> None:
        query = select(User.id).where(func.lower(User.email) == func.lower(email.strip()))
        if exclude_user_id is not None:
            query = query.where(User.id != exclude_user_id)
        if session.execute(query.limit(1)).first() is not None:
            raise DuplicateError("email", email.strip())

    def _translate(
        self,
        exc: SQLAlchemyError,
        operation: str,
        values: dict[str, str] | None = None,
    ) -> PayrollCoreError:
        """Map a persistence failure (already rolled back) onto the error taxonomy.

        ``values`` holds the submitted username/email so a constraint-level
        duplicate can name the conflicting value.
        """
        if isinstance(exc, IntegrityError):
            column = unique_violation_field(exc, UNIQUE_USER_COLUMNS)
            if column is not None:
                logger.warning("%s rolled back: duplicate %s", operation, column)
                return DuplicateError(column, (values or {}).get(column))

        logger.exception("%s rolled back", operation)
        reason = str(getattr(exc, "orig", None) or exc)
        return TransactionError(operation, reason)


def _unique_values(username: str | None = None, email: str | None = None) -> dict[str, str]:
    """Submitted values of the unique user columns, trimmed."""
    submitted = {"username": username, "email": email}
    return {column: value.strip() for column, value in submitted.items() if value is not None}
