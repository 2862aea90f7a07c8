"""Pure field checks.

Every function here is side-effect free and returns a CheckResult with a
human-readable reason on failure; none of them raise on bad input.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import date
from decimal import Decimal, InvalidOperation

from hr_payroll.validation.report import CheckResult

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,6}$")

# Ethiopian mobile numbers: 09XXXXXXXX or +2519XXXXXXXX
PHONE_PATTERN = re.compile(r"^(09|\+2519)[0-9]{8}$")

NAME_PATTERN = re.compile(r"^[A-Za-z \-']+$")


def parse_decimal(value: str | Decimal | int | None) -> Decimal | None:
    """Parse a decimal, returning None for anything unparseable or non-finite."""
    if value is None:
        return None
    if isinstance(value, Decimal):
        parsed = value
    else:
        try:
            parsed = Decimal(str(value).strip())
        except InvalidOperation:
            return None
    if not parsed.is_finite():
        return None
    return parsed


def parse_date(value: str | date | None) -> date | None:
    """Parse an ISO date, returning None when unparseable."""
    if value is None:
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


def check_required(value: str | None, label: str) -> CheckResult:
    if value is None or not str(value).strip():
        return CheckResult.fail(f"{label} is required.")
    return CheckResult.ok()


def check_name(value: str | None, label: str) -> CheckResult:
    """Letters, spaces, hyphens and apostrophes only."""
    required = check_required(value, label)
    if not required:
        return required
    if not NAME_PATTERN.match(str(value).strip()):
        return CheckResult.fail(
            f"{label} cannot be purely numeric or contain special characters."
        )
    return CheckResult.ok()


def check_email(value: str | None) -> CheckResult:
    required = check_required(value, "Email")
    if not required:
        return required
    if not EMAIL_PATTERN.match(str(value).strip()):
        return CheckResult.fail("Email format is invalid (e.g., user@example.com).")
    return CheckResult.ok()


def check_phone(value: str | None) -> CheckResult:
    required = check_required(value, "Phone Number")
    if not required:
        return required
    if not PHONE_PATTERN.match(str(value).strip()):
        return CheckResult.fail(
            "Phone Number must be 09XXXXXXXX or +2519XXXXXXXX."
        )
    return CheckResult.ok()


def check_salary(value: str | Decimal | None, label: str = "Base Salary") -> CheckResult:
    """Salary must parse as a decimal and be strictly positive."""
    if isinstance(value, str) or value is None:
        required = check_required(value, label)
        if not required:
            return required
    amount = parse_decimal(value)
    if amount is None or amount <= 0:
        return CheckResult.fail(f"{label} must be a positive numeric value.")
    return CheckResult.ok()


def check_non_negative_amount(value: str | Decimal | None, label: str) -> CheckResult:
    """Optional money amount: blank means zero, otherwise a decimal >= 0."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return CheckResult.ok()
    amount = parse_decimal(value)
    if amount is None:
        return CheckResult.fail(f"{label} must be a numeric value.")
    if amount < 0:
        return CheckResult.fail(f"{label} cannot be negative.")
    return CheckResult.ok()


def check_date(
    value: str | date | None,
    label: str,
    *,
    not_future: bool = False,
    today: date | None = None,
) -> CheckResult:
    """Date must parse; joined-on style dates must not lie in the future."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return CheckResult.fail(f"{label} is required.")
    parsed = parse_date(value)
    if parsed is None:
        return CheckResult.fail(f"{label} must be a valid date (YYYY-MM-DD).")
    if not_future and parsed > (today or date.today()):
        return CheckResult.fail(f"{label} cannot be in the future.")
    return CheckResult.ok()


def check_choice(value: str | None, label: str, choices: Iterable[str]) -> CheckResult:
    required = check_required(value, label)
    if not required:
        return required
    allowed = list(choices)
    if value not in allowed:
        return CheckResult.fail(f"{label} must be one of: {', '.join(allowed)}.")
    return CheckResult.ok()


def check_rate(value: str | Decimal | None, label: str) -> CheckResult:
    """Percentage between 0 and 100 inclusive."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return CheckResult.fail(f"{label} is required.")
    rate = parse_decimal(value)
    if rate is None:
        return CheckResult.fail(f"{label} must be a numeric value.")
    if rate < 0 or rate > 100:
        return CheckResult.fail(f"{label} must be between 0 and 100.")
    return CheckResult.ok()
