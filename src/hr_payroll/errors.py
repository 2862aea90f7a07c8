"""Error taxonomy shared by provisioning, configuration and payroll services."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from hr_payroll.calculators.period import PayPeriod
    from hr_payroll.validation.report import ValidationReport


class PayrollCoreError(Exception):
    """Base class for every failure the core reports to its callers."""

    code = "CORE_ERROR"

    def to_dict(self) -> dict[str, Any]:
        """Serializable form used by the HTTP adapter."""
        return {"detail": str(self), "code": self.code}


class ValidationError(PayrollCoreError):
    """Raised when input fails one or more syntactic/range rules.

    Never reaches persistence, so nothing needs rolling back.
    """

    code = "VALIDATION_FAILED"

    def __init__(self, report: ValidationReport):
        self.report = report
        super().__init__(report.summary())

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["errors"] = [
            {"field": error.field, "reason": error.reason} for error in self.report.errors
        ]
        return data


class ReferenceNotFoundError(PayrollCoreError):
    """Raised when a role or department name cannot be resolved to an id."""

    code = "REFERENCE_NOT_FOUND"

    def __init__(self, kind: str, name: str):
        self.kind = kind
        self.name = name
        super().__init__(f"No {kind} named '{name}' exists")


class RecordNotFoundError(PayrollCoreError):
    """Raised when an operation targets an id that does not exist."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, record_id: int):
        self.entity = entity
        self.record_id = record_id
        super().__init__(f"{entity.capitalize()} {record_id} not found")


class DuplicateError(PayrollCoreError):
    """Raised when a uniqueness constraint would be violated."""

    code = "DUPLICATE"

    def __init__(self, field: str, value: Any, message: str | None = None):
        self.field = field
        self.value = value
        super().__init__(message or f"The {field} '{value}' already exists")


class TransactionError(PayrollCoreError):
    """Raised for any other persistence failure; the transaction was rolled back."""

    code = "TRANSACTION_FAILED"

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation} failed and was rolled back: {reason}")


class LockedPeriodError(PayrollCoreError):
    """Raised when a payroll write targets a locked pay period."""

    code = "PERIOD_LOCKED"

    def __init__(self, period: PayPeriod, message: str | None = None):
        self.period = period
        super().__init__(message or f"Pay period {period} is locked; no further payroll writes")


class InvalidTransitionError(PayrollCoreError):
    """Raised when a payroll status transition is not allowed."""

    code = "INVALID_TRANSITION"

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        msg = f"Invalid transition from '{from_status}' to '{to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)
