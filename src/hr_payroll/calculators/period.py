"""Pay period value type: a (month name, year) pair."""

from __future__ import annotations

from dataclasses import dataclass

from hr_payroll.validation.report import ValidationReport

MONTHS: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

_MONTH_LOOKUP = {name.lower(): name for name in MONTHS}

MIN_YEAR = 1900
MAX_YEAR = 9999


@dataclass(frozen=True, order=False)
class PayPeriod:
    """One payroll cycle, identified by canonical month name and year."""

    month: str
    year: int

    def __post_init__(self) -> None:
        if self.month not in MONTHS:
            raise ValueError(f"Unknown month name {self.month!r}")
        if not MIN_YEAR <= self.year <= MAX_YEAR:
            raise ValueError(f"Year {self.year} out of range")

    @classmethod
    def parse(cls, month: str, year: int | str) -> PayPeriod:
        """Build a period from loose input.

        Month names match case-insensitively. Raises ValidationError
        listing both fields when either is bad.
        """
        report = ValidationReport()
        canonical = _MONTH_LOOKUP.get((month or "").strip().lower())
        if canonical is None:
            report.add("month", f"Month must be one of: {', '.join(MONTHS)}.")

        parsed_year: int | None
        try:
            parsed_year = int(str(year).strip())
        except ValueError:
            parsed_year = None
        if parsed_year is None or not MIN_YEAR <= parsed_year <= MAX_YEAR:
            report.add("year", f"Year must be a number between {MIN_YEAR} and {MAX_YEAR}.")

        report.raise_if_failed()
        return cls(month=canonical, year=parsed_year)  # type: ignore[arg-type]

    @property
    def month_number(self) -> int:
        return MONTHS.index(self.month) + 1

    def __str__(self) -> str:
        return f"{self.month} {self.year}"
