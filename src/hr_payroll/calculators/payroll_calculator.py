"""Decimal payroll computation for one employee and period."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from hr_payroll.calculators.types import PayAdjustment, PayrollComputation, TaxSettings

CENT = Decimal("0.01")


def to_money(amount: Decimal) -> Decimal:
    """Round to whole cents, half up."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def compute_tax(base_salary: Decimal, allowances: Decimal, tax_rate: Decimal) -> Decimal:
    """tax = (base + allowances) * rate, with rate given as a percentage."""
    return to_money((base_salary + allowances) * tax_rate / 100)


def compute_payroll(
    base_salary: Decimal,
    adjustment: PayAdjustment,
    settings: TaxSettings,
) -> PayrollComputation:
    """Derive tax and net salary.

    net = base + allowances - deductions - tax. Every operand is rounded to
    cents before the subtraction, so the stored row satisfies the identity
    exactly.
    """
    if base_salary < 0:
        raise ValueError("Base salary cannot be negative")

    base = to_money(base_salary)
    allowances = to_money(adjustment.allowances)
    deductions = to_money(adjustment.deductions)
    tax = compute_tax(base, allowances, settings.tax_rate)
    net = base + allowances - deductions - tax

    return PayrollComputation(
        base_salary=base,
        allowances=allowances,
        deductions=deductions,
        tax_rate=settings.tax_rate,
        tax=tax,
        net_salary=net,
    )
