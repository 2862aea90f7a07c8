"""Check results and the aggregated validation report."""

from __future__ import annotations

from dataclasses import dataclass, field

from hr_payroll.errors import ValidationError


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a single field check."""

    passed: bool
    reason: str | None = None

    @classmethod
    def ok(cls) -> CheckResult:
        return cls(passed=True)

    @classmethod
    def fail(cls, reason: str) -> CheckResult:
        return cls(passed=False, reason=reason)

    def __bool__(self) -> bool:
        return self.passed


@dataclass(frozen=True)
class FieldError:
    """A failed check attributed to a named field."""

    field: str
    reason: str


@dataclass
class ValidationReport:
    """Collects every failure of one submission.

    Checks are run to completion and recorded here instead of stopping at
    the first failure, so a caller can present every problem at once.
    """

    errors: list[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def record(self, field_name: str, result: CheckResult) -> bool:
        """Record a check result; returns whether it passed."""
        if not result.passed:
            self.errors.append(FieldError(field_name, result.reason or "is invalid"))
        return result.passed

    def add(self, field_name: str, reason: str) -> None:
        self.errors.append(FieldError(field_name, reason))

    def fields(self) -> list[str]:
        return [error.field for error in self.errors]

    def summary(self) -> str:
        if self.ok:
            return "No validation errors"
        lines = [f"- {error.field}: {error.reason}" for error in self.errors]
        return "Please correct the following issues:\n" + "\n".join(lines)

    def raise_if_failed(self) -> None:
        """Raise ValidationError carrying this report when anything failed."""
        if not self.ok:
            raise ValidationError(self)
