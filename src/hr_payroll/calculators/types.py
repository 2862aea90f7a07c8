"""Type definitions for the payroll computation."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from hr_payroll.validation import check_non_negative_amount, parse_decimal
from hr_payroll.validation.report import ValidationReport

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class TaxSettings:
    """Snapshot of the persisted tax configuration at one moment.

    Rates are percentages (10 means 10%).
    """

    tax_rate: Decimal
    social_rate: Decimal
    currency_symbol: str

    def format_amount(self, amount: Decimal) -> str:
        return f"{self.currency_symbol} {amount:,.2f}"


@dataclass(frozen=True)
class PayAdjustment:
    """Per-period allowances and deductions applied on top of base salary."""

    allowances: Decimal = ZERO
    deductions: Decimal = ZERO

    def __post_init__(self) -> None:
        for label, amount in (("Allowances", self.allowances), ("Deductions", self.deductions)):
            if not amount.is_finite() or amount < 0:
                raise ValueError(f"{label} must be a non-negative amount, got {amount}")

    @classmethod
    def parse(
        cls,
        allowances: str | Decimal | None = None,
        deductions: str | Decimal | None = None,
    ) -> PayAdjustment:
        """Build from loose input; blank means zero, negatives are rejected."""
        report = ValidationReport()
        report.record("allowances", check_non_negative_amount(allowances, "Allowances"))
        report.record("deductions", check_non_negative_amount(deductions, "Deductions"))
        report.raise_if_failed()
        return cls(
            allowances=parse_decimal(allowances) or ZERO,
            deductions=parse_decimal(deductions) or ZERO,
        )


@dataclass(frozen=True)
class PayrollComputation:
    """Derived figures for one employee and period."""

    base_salary: Decimal
    allowances: Decimal
    deductions: Decimal
    tax_rate: Decimal
    tax: Decimal
    net_salary: Decimal

    @property
    def gross(self) -> Decimal:
        return self.base_salary + self.allowances
