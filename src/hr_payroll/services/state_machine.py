"""Payroll record status and pay period state machines."""

from __future__ import annotations

from enum import Enum

from hr_payroll.errors import InvalidTransitionError


class PayrollStatus(str, Enum):
    """PayrollRecord status values."""

    PENDING = "Pending"
    PROCESSED = "Processed"
    LOCKED = "Locked"


class PeriodState(str, Enum):
    """Derived state of a (month, year) pay period."""

    OPEN = "Open"
    GENERATED = "Generated"
    LOCKED = "Locked"


class PayrollStatusMachine:
    """Allowed status transitions of a payroll record.

    Allowed transitions:
    - Pending → Processed
    - Pending → Locked
    - Processed → Locked

    Locked is terminal; records only ever move toward it.
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        PayrollStatus.PENDING: [PayrollStatus.PROCESSED, PayrollStatus.LOCKED],
        PayrollStatus.PROCESSED: [PayrollStatus.LOCKED],
        PayrollStatus.LOCKED: [],  # Terminal state
    }

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            reason = "Locked is terminal" if from_status == PayrollStatus.LOCKED else None
            raise InvalidTransitionError(from_status, to_status, reason)


class PeriodStateMachine:
    """Open → Generated (partial or full) → Locked. Nothing leaves Locked.

    Locking is also allowed straight from Open so a period can be closed
    before anything was generated for it.
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        PeriodState.OPEN: [PeriodState.GENERATED, PeriodState.LOCKED],
        PeriodState.GENERATED: [PeriodState.LOCKED],
        PeriodState.LOCKED: [],  # Terminal state
    }

    @classmethod
    def can_transition(cls, from_state: str, to_state: str) -> bool:
        return to_state in cls.VALID_TRANSITIONS.get(from_state, [])

    @classmethod
    def accepts_writes(cls, state: str) -> bool:
        """Payroll rows may be inserted while the period is not Locked."""
        return state != PeriodState.LOCKED

    @classmethod
    def derive(cls, *, locked: bool, record_count: int) -> PeriodState:
        """Compute the state from what is persisted for the period."""
        if locked:
            return PeriodState.LOCKED
        if record_count > 0:
            return PeriodState.GENERATED
        return PeriodState.OPEN
