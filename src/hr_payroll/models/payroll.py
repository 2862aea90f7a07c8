"""Payroll record, period lock and tax configuration models."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hr_payroll.models.base import Base

if TYPE_CHECKING:
    from hr_payroll.calculators.payroll_calculator import PayrollComputation
    from hr_payroll.calculators.period import PayPeriod
    from hr_payroll.models.employee import Employee


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PayrollRecord(Base):
    """One computed pay-period result for one employee.

    net_salary is only ever written from a PayrollComputation, never
    edited on its own.
    """

    __tablename__ = "payroll"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    emp_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("employees.id", ondelete="RESTRICT"),
        nullable=False,
    )
    month: Mapped[str] = mapped_column(String(10), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    base_salary: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    allowances: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    deductions: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    tax: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    net_salary: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    generated_on: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="Pending")

    __table_args__ = (
        UniqueConstraint("emp_id", "month", "year", name="payroll_emp_period_unique"),
        CheckConstraint(
            "status IN ('Pending', 'Processed', 'Locked')",
            name="payroll_status_check",
        ),
    )

    # Relationships
    employee: Mapped[Employee] = relationship()

    @classmethod
    def from_computation(
        cls,
        employee_id: int,
        period: PayPeriod,
        computation: PayrollComputation,
    ) -> PayrollRecord:
        """Build an unsaved record from a computation result."""
        return cls(
            emp_id=employee_id,
            month=period.month,
            year=period.year,
            base_salary=computation.base_salary,
            allowances=computation.allowances,
            deductions=computation.deductions,
            tax=computation.tax,
            net_salary=computation.net_salary,
            generated_on=_utcnow(),
            status="Pending",
        )


class PayrollPeriodLock(Base):
    """Marks a (month, year) pay period as closed to further payroll writes."""

    __tablename__ = "payroll_period_lock"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    month: Mapped[str] = mapped_column(String(10), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    locked_on: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    locked_by: Mapped[str | None] = mapped_column(String(100), nullable=True)

    __table_args__ = (
        UniqueConstraint("month", "year", name="payroll_period_lock_unique"),
    )


class TaxConfiguration(Base):
    """Process-wide singleton row of payroll rates."""

    __tablename__ = "settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tax_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    social_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    currency_symbol: Mapped[str] = mapped_column(String(8), nullable=False)

    __table_args__ = (
        CheckConstraint("tax_rate >= 0 AND tax_rate <= 100", name="settings_tax_rate_range"),
        CheckConstraint(
            "social_rate >= 0 AND social_rate <= 100",
            name="settings_social_rate_range",
        ),
    )
