"""Payroll generation, period locking and payroll queries."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from hr_payroll.calculators import PayAdjustment, PayPeriod, TaxSettings, compute_payroll
from hr_payroll.calculators.types import ZERO
from hr_payroll.context import CallerContext
from hr_payroll.database import session_scope, unique_violation_field
from hr_payroll.errors import (
    DuplicateError,
    LockedPeriodError,
    PayrollCoreError,
    RecordNotFoundError,
    TransactionError,
)
from hr_payroll.models import Employee, PayrollPeriodLock, PayrollRecord
from hr_payroll.services.audit import AuditService
from hr_payroll.services.configuration import ConfigurationStore
from hr_payroll.services.reference_resolver import ReferenceResolver
from hr_payroll.services.state_machine import (
    PayrollStatus,
    PayrollStatusMachine,
    PeriodState,
    PeriodStateMachine,
)
from hr_payroll.validation import ValidationReport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchFailure:
    """One employee the batch could not write a row for."""

    employee_id: int
    reason: str
    code: str


@dataclass
class BatchResult:
    """Outcome of a batch run: committed rows plus per-employee failures."""

    period: PayPeriod
    success_count: int = 0
    record_ids: list[int] = field(default_factory=list)
    failures: list[BatchFailure] = field(default_factory=list)
    cancelled: bool = False

    @property
    def failure_count(self) -> int:
        return len(self.failures)


@dataclass(frozen=True)
class PeriodSummary:
    """State and totals of one pay period."""

    period: PayPeriod
    state: PeriodState
    record_count: int
    active_employee_count: int
    total_base: Decimal
    total_allowances: Decimal
    total_deductions: Decimal
    total_tax: Decimal
    total_net: Decimal

    @property
    def is_complete(self) -> bool:
        """Every active employee has a row for the period."""
        return self.record_count >= self.active_employee_count > 0


class PayrollService:
    """Service for computing and persisting payroll rows.

    Key invariants:
    1. One payroll row per (employee, month, year); a second attempt is
       reported as DuplicateError, never skipped or overwritten
    2. Single generation is one transaction; batch generation is one
       transaction per employee, so a failed row never undoes committed ones
    3. The lock status of the target period is checked before every insert
    4. Tax settings are read from the store for every row, not once per batch
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None):
        self.session_factory = session_factory

    # ------------------------------------------------------------------
    # Computation
    # ------------------------------------------------------------------

    def compute_one(
        self,
        employee: Employee,
        period: PayPeriod,
        config: TaxSettings,
        adjustment: PayAdjustment | None = None,
    ) -> PayrollRecord:
        """Compute an unsaved payroll row for one employee and period."""
        computation = compute_payroll(
            Decimal(employee.salary),
            adjustment or PayAdjustment(),
            config,
        )
        return PayrollRecord.from_computation(employee.id, period, computation)

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def generate_one(
        self,
        ctx: CallerContext,
        employee_id: int,
        period: PayPeriod,
        adjustment: PayAdjustment | None = None,
    ) -> PayrollRecord:
        """Compute and persist the row for one employee in its own transaction.

        Raises:
            RecordNotFoundError: If the employee does not exist
            ValidationError: If the employee is Inactive
            LockedPeriodError: If the period is locked
            DuplicateError: If the employee already has a row for the period
            TransactionError: For any other persistence failure
        """
        operation = f"Payroll generation for employee {employee_id} in {period}"
        try:
            with session_scope(self.session_factory) as session:
                employee = session.get(Employee, employee_id)
                if employee is None:
                    raise RecordNotFoundError("employee", employee_id)
                if not employee.is_active:
                    report = ValidationReport()
                    report.add("employee_id", f"Employee {employee_id} is Inactive")
                    report.raise_if_failed()

                record = self._write_row(session, ctx, employee, period, adjustment)
        except PayrollCoreError:
            raise
        except SQLAlchemyError as exc:
            raise self._translate(exc, operation, employee_id, period) from exc

        logger.info(
            "Generated payroll %s for employee %s in %s (net %s)",
            record.id,
            employee_id,
            period,
            record.net_salary,
        )
        return record

    def _write_row(
        self,
        session: Session,
        ctx: CallerContext,
        employee: Employee,
        period: PayPeriod,
        adjustment: PayAdjustment | None,
    ) -> PayrollRecord:
        if not PeriodStateMachine.accepts_writes(self._state(session, period)):
            raise LockedPeriodError(period)

        existing = session.execute(
            select(PayrollRecord.id).where(
                PayrollRecord.emp_id == employee.id,
                PayrollRecord.month == period.month,
                PayrollRecord.year == period.year,
            )
        ).first()
        if existing is not None:
            raise self._duplicate(employee.id, period)

        config = ConfigurationStore(session).get()
        record = self.compute_one(employee, period, config, adjustment)
        session.add(record)
        session.flush()

        AuditService(session).record(
            ctx,
            "payroll_generated",
            "payroll",
            record.id,
            details=f"emp_id={employee.id} period={period} tax_rate={config.tax_rate}",
        )
        return record

    def generate_batch(
        self,
        ctx: CallerContext,
        period: PayPeriod,
        default_adjustment: PayAdjustment | None = None,
        adjustments: Mapping[int, PayAdjustment] | None = None,
        employee_ids: Iterable[int] | None = None,
        cancel_event: threading.Event | None = None,
    ) -> BatchResult:
        """Generate rows for the active employee set, best effort per row.

        Each employee is written in its own transaction. A failing employee
        (duplicate period, locked period, missing or inactive record) is
        reported in ``failures`` and the batch moves on. When
        ``cancel_event`` is set the batch stops before the next employee,
        leaving the rows already committed in place.

        Blocks for the whole run; interactive callers should drive it from
        a worker thread.
        """
        result = BatchResult(period=period)
        default = default_adjustment or PayAdjustment()
        overrides = adjustments or {}

        with session_scope(self.session_factory) as session:
            targets = self._batch_targets(session, employee_ids)

        for employee_id, skip_reason in targets:
            if cancel_event is not None and cancel_event.is_set():
                result.cancelled = True
                logger.info("Payroll batch for %s cancelled by %s", period, ctx.label)
                break

            if skip_reason is not None:
                result.failures.append(skip_reason)
                continue

            try:
                record = self.generate_one(
                    ctx,
                    employee_id,
                    period,
                    overrides.get(employee_id, default),
                )
            except PayrollCoreError as exc:
                logger.warning(
                    "Payroll batch %s: employee %s failed (%s): %s",
                    period,
                    employee_id,
                    exc.code,
                    exc,
                )
                result.failures.append(BatchFailure(employee_id, str(exc), exc.code))
                continue

            result.success_count += 1
            result.record_ids.append(record.id)

        if result.success_count:
            with session_scope(self.session_factory) as session:
                AuditService(session).record(
                    ctx,
                    "payroll_batch_generated",
                    "payroll_period",
                    str(period),
                    details=(
                        f"succeeded={result.success_count} failed={result.failure_count} "
                        f"cancelled={result.cancelled}"
                    ),
                )

        logger.info(
            "Payroll batch for %s: %d succeeded, %d failed%s",
            period,
            result.success_count,
            result.failure_count,
            " (cancelled)" if result.cancelled else "",
        )
        return result

    def _batch_targets(
        self,
        session: Session,
        employee_ids: Iterable[int] | None,
    ) -> list[tuple[int, BatchFailure | None]]:
        """Employees to process, each with a precomputed failure if it must be skipped."""
        if employee_ids is None:
            active_ids = session.execute(
                select(Employee.id).where(Employee.status == "Active").order_by(Employee.id)
            ).scalars()
            return [(employee_id, None) for employee_id in active_ids]

        wanted = list(dict.fromkeys(employee_ids))
        statuses = {
            row.id: row.status
            for row in session.execute(
                select(Employee.id, Employee.status).where(Employee.id.in_(wanted))
            )
        }
        targets: list[tuple[int, BatchFailure | None]] = []
        for employee_id in wanted:
            status = statuses.get(employee_id)
            if status is None:
                error = RecordNotFoundError("employee", employee_id)
                targets.append((employee_id, BatchFailure(employee_id, str(error), error.code)))
            elif status != "Active":
                targets.append(
                    (
                        employee_id,
                        BatchFailure(
                            employee_id,
                            f"Employee {employee_id} is Inactive",
                            "VALIDATION_FAILED",
                        ),
                    )
                )
            else:
                targets.append((employee_id, None))
        return targets

    # ------------------------------------------------------------------
    # Status transitions
    # ------------------------------------------------------------------

    def mark_processed(self, ctx: CallerContext, record_id: int) -> PayrollRecord:
        """Move a Pending row to Processed."""
        operation = f"Processing of payroll record {record_id}"
        try:
            with session_scope(self.session_factory) as session:
                record = session.get(PayrollRecord, record_id)
                if record is None:
                    raise RecordNotFoundError("payroll record", record_id)
                period = PayPeriod(record.month, record.year)
                if not PeriodStateMachine.accepts_writes(self._state(session, period)):
                    raise LockedPeriodError(period)

                PayrollStatusMachine.validate_transition(record.status, PayrollStatus.PROCESSED)
                record.status = PayrollStatus.PROCESSED.value
                session.flush()
                AuditService(session).record(ctx, "payroll_processed", "payroll", record_id)
        except PayrollCoreError:
            raise
        except SQLAlchemyError as exc:
            raise self._translate(exc, operation) from exc
        return record

    def lock_period(self, ctx: CallerContext, period: PayPeriod) -> int:
        """Close a period to further payroll writes.

        Flips every row of the period to Locked and records the lock in one
        transaction. Returns the number of rows locked.

        Raises:
            LockedPeriodError: If the period is already locked
        """
        operation = f"Locking of {period}"
        try:
            with session_scope(self.session_factory) as session:
                state = self._state(session, period)
                if not PeriodStateMachine.can_transition(state, PeriodState.LOCKED):
                    raise LockedPeriodError(period, f"Pay period {period} is already locked")

                records = session.execute(
                    select(PayrollRecord).where(
                        PayrollRecord.month == period.month,
                        PayrollRecord.year == period.year,
                    )
                ).scalars().all()
                for record in records:
                    PayrollStatusMachine.validate_transition(record.status, PayrollStatus.LOCKED)
                    record.status = PayrollStatus.LOCKED.value

                session.add(
                    PayrollPeriodLock(month=period.month, year=period.year, locked_by=ctx.label)
                )
                session.flush()
                AuditService(session).record(
                    ctx,
                    "payroll_period_locked",
                    "payroll_period",
                    str(period),
                    details=f"rows={len(records)}",
                )
                locked_count = len(records)
        except PayrollCoreError:
            raise
        except IntegrityError as exc:
            if unique_violation_field(exc, ("month", "year", "payroll_period_lock")):
                raise LockedPeriodError(period, f"Pay period {period} is already locked") from exc
            raise self._translate(exc, operation) from exc
        except SQLAlchemyError as exc:
            raise self._translate(exc, operation) from exc

        logger.info("Locked pay period %s (%d rows) by %s", period, locked_count, ctx.label)
        return locked_count

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def period_state(self, period: PayPeriod) -> PeriodState:
        with session_scope(self.session_factory) as session:
            return self._state(session, period)

    def period_summary(self, period: PayPeriod) -> PeriodSummary:
        """State, coverage and totals of one period."""
        with session_scope(self.session_factory) as session:
            records = self._period_rows(session, period)
            locked = self._is_locked(session, period)
            active = session.execute(
                select(func.count()).select_from(Employee).where(Employee.status == "Active")
            ).scalar_one()

        return PeriodSummary(
            period=period,
            state=PeriodStateMachine.derive(locked=locked, record_count=len(records)),
            record_count=len(records),
            active_employee_count=active,
            total_base=sum((r.base_salary for r in records), ZERO),
            total_allowances=sum((r.allowances for r in records), ZERO),
            total_deductions=sum((r.deductions for r in records), ZERO),
            total_tax=sum((r.tax for r in records), ZERO),
            total_net=sum((r.net_salary for r in records), ZERO),
        )

    def list_period(
        self,
        period: PayPeriod,
        department: str | None = None,
        status: str | None = None,
    ) -> list[PayrollRecord]:
        """Rows of a period by employee id, optionally narrowed.

        ``department`` matches the employee's department by name,
        case-insensitively. ``status`` is a payroll record status.

        Raises:
            ReferenceNotFoundError: If the department is unknown
            ValidationError: If the status is not a payroll status
        """
        wanted_status = _parse_status(status) if status is not None else None
        with session_scope(self.session_factory) as session:
            query = (
                select(PayrollRecord)
                .where(PayrollRecord.month == period.month, PayrollRecord.year == period.year)
                .order_by(PayrollRecord.emp_id)
            )
            if department is not None:
                dept_id = ReferenceResolver(session).resolve_department(department)
                query = query.join(Employee, PayrollRecord.emp_id == Employee.id).where(
                    Employee.dept_id == dept_id
                )
            if wanted_status is not None:
                query = query.where(PayrollRecord.status == wanted_status.value)
            return list(session.execute(query).scalars().all())

    def list_employee_history(self, employee_id: int) -> list[PayrollRecord]:
        """All rows of one employee, newest period first."""
        with session_scope(self.session_factory) as session:
            if session.get(Employee, employee_id) is None:
                raise RecordNotFoundError("employee", employee_id)
            records = session.execute(
                select(PayrollRecord).where(PayrollRecord.emp_id == employee_id)
            ).scalars().all()
        return sorted(
            records,
            key=lambda r: (r.year, PayPeriod(r.month, r.year).month_number),
            reverse=True,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _state(self, session: Session, period: PayPeriod) -> PeriodState:
        return PeriodStateMachine.derive(
            locked=self._is_locked(session, period),
            record_count=self._count_rows(session, period),
        )

    def _is_locked(self, session: Session, period: PayPeriod) -> bool:
        return (
            session.execute(
                select(PayrollPeriodLock.id).where(
                    PayrollPeriodLock.month == period.month,
                    PayrollPeriodLock.year == period.year,
                )
            ).first()
            is not None
        )

    def _count_rows(self, session: Session, period: PayPeriod) -> int:
        return session.execute(
            select(func.count())
            .select_from(PayrollRecord)
            .where(PayrollRecord.month == period.month, PayrollRecord.year == period.year)
        ).scalar_one()

    def _period_rows(self, session: Session, period: PayPeriod) -> list[PayrollRecord]:
        return list(
            session.execute(
                select(PayrollRecord)
                .where(PayrollRecord.month == period.month, PayrollRecord.year == period.year)
                .order_by(PayrollRecord.emp_id)
            ).scalars().all()
        )

    def _duplicate(self, employee_id: int, period: PayPeriod) -> DuplicateError:
        return DuplicateError(
            "period",
            str(period),
            f"Payroll for employee {employee_id} in {period} has already been generated",
        )

    def _translate(
        self,
        exc: SQLAlchemyError,
        operation: str,
        employee_id: int | None = None,
        period: PayPeriod | None = None,
    ) -> PayrollCoreError:
        """Map a persistence failure (already rolled back) onto the error taxonomy."""
        if (
            isinstance(exc, IntegrityError)
            and employee_id is not None
            and period is not None
            and unique_violation_field(exc, ("emp_id", "payroll_emp_period_unique"))
        ):
            return self._duplicate(employee_id, period)

        logger.exception("%s rolled back", operation)
        return TransactionError(operation, str(getattr(exc, "orig", None) or exc))


_STATUS_LOOKUP = {status.value.lower(): status for status in PayrollStatus}


def _parse_status(value: str) -> PayrollStatus:
    status = _STATUS_LOOKUP.get(value.strip().lower())
    if status is None:
        report = ValidationReport()
        report.add(
            "status",
            f"Status must be one of: {', '.join(s.value for s in PayrollStatus)}.",
        )
        report.raise_if_failed()
    return status  # type: ignore[return-value]
