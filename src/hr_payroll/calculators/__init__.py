"""Payroll calculation: pay periods and decimal net-pay computation."""

from hr_payroll.calculators.payroll_calculator import compute_payroll, compute_tax, to_money
from hr_payroll.calculators.period import MONTHS, PayPeriod
from hr_payroll.calculators.types import PayAdjustment, PayrollComputation, TaxSettings

__all__ = [
    "MONTHS",
    "PayAdjustment",
    "PayPeriod",
    "PayrollComputation",
    "TaxSettings",
    "compute_payroll",
    "compute_tax",
    "to_money",
]
