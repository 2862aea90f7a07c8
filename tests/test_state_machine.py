"""Tests for payroll status and pay period state machines."""

import pytest

from hr_payroll.errors import InvalidTransitionError
from hr_payroll.services.state_machine import (
    PayrollStatus,
    PayrollStatusMachine,
    PeriodState,
    PeriodStateMachine,
)


class TestPayrollStatusMachine:
    """Test payroll record status transitions."""

    def test_valid_transitions(self):
        """Test that valid transitions are allowed."""
        # Pending → Processed
        assert PayrollStatusMachine.can_transition("Pending", "Processed") is True

        # Pending → Locked (period locked before processing)
        assert PayrollStatusMachine.can_transition("Pending", "Locked") is True

        # Processed → Locked
        assert PayrollStatusMachine.can_transition("Processed", "Locked") is True

    def test_invalid_transitions(self):
        """Test that invalid transitions are blocked."""
        # Can't go backwards
        assert PayrollStatusMachine.can_transition("Processed", "Pending") is False

        # Locked is terminal
        assert PayrollStatusMachine.can_transition("Locked", "Pending") is False
        assert PayrollStatusMachine.can_transition("Locked", "Processed") is False

        # Unknown status
        assert PayrollStatusMachine.can_transition("Draft", "Pending") is False

    def test_enum_members_behave_as_strings(self):
        assert PayrollStatusMachine.can_transition(
            PayrollStatus.PENDING, PayrollStatus.PROCESSED
        )
        assert PayrollStatus.LOCKED == "Locked"

    def test_validate_transition_raises(self):
        """Test that validate_transition raises for invalid transitions."""
        with pytest.raises(InvalidTransitionError) as exc_info:
            PayrollStatusMachine.validate_transition("Locked", "Processed")

        assert exc_info.value.from_status == "Locked"
        assert exc_info.value.to_status == "Processed"
        assert "terminal" in str(exc_info.value)


class TestPeriodStateMachine:
    """Test pay period state derivation and transitions."""

    def test_derive(self):
        assert PeriodStateMachine.derive(locked=False, record_count=0) is PeriodState.OPEN
        assert PeriodStateMachine.derive(locked=False, record_count=3) is PeriodState.GENERATED
        assert PeriodStateMachine.derive(locked=True, record_count=0) is PeriodState.LOCKED
        assert PeriodStateMachine.derive(locked=True, record_count=3) is PeriodState.LOCKED

    def test_transitions_only_move_forward(self):
        assert PeriodStateMachine.can_transition("Open", "Generated") is True
        assert PeriodStateMachine.can_transition("Open", "Locked") is True
        assert PeriodStateMachine.can_transition("Generated", "Locked") is True
        assert PeriodStateMachine.can_transition("Generated", "Open") is False
        assert PeriodStateMachine.can_transition("Locked", "Open") is False
        assert PeriodStateMachine.can_transition("Locked", "Generated") is False

    def test_accepts_writes(self):
        assert PeriodStateMachine.accepts_writes(PeriodState.OPEN) is True
        assert PeriodStateMachine.accepts_writes(PeriodState.GENERATED) is True
        assert PeriodStateMachine.accepts_writes(PeriodState.LOCKED) is False
