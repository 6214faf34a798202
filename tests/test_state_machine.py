"""Tests for vacation and payment status lifecycles."""

import pytest

from hr_payroll.services.state_machine import (
    InvalidTransitionError,
    PaymentStateMachine,
    VacationStateMachine,
)


class TestVacationStateMachine:
    """Test vacation transitions."""

    def test_valid_transitions(self):
        """Test that valid transitions are allowed."""
        # pendente → aprovado / rejeitado
        assert VacationStateMachine.can_transition("pendente", "aprovado") is True
        assert VacationStateMachine.can_transition("pendente", "rejeitado") is True

        # aprovado → em_gozo → concluido
        assert VacationStateMachine.can_transition("aprovado", "em_gozo") is True
        assert VacationStateMachine.can_transition("em_gozo", "concluido") is True

    def test_invalid_transitions(self):
        """Test that invalid transitions are blocked."""
        # Can't skip approval
        assert VacationStateMachine.can_transition("pendente", "em_gozo") is False
        assert VacationStateMachine.can_transition("pendente", "concluido") is False

        # Can't go backwards
        assert VacationStateMachine.can_transition("aprovado", "pendente") is False
        assert VacationStateMachine.can_transition("concluido", "em_gozo") is False

        # Rejected is terminal
        assert VacationStateMachine.can_transition("rejeitado", "aprovado") is False

    def test_same_status_is_allowed(self):
        assert VacationStateMachine.can_transition("aprovado", "aprovado") is True

    def test_validate_transition_raises(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            VacationStateMachine.validate_transition("pendente", "concluido")

        assert exc_info.value.from_status == "pendente"
        assert exc_info.value.to_status == "concluido"

    def test_unknown_status_is_rejected(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            VacationStateMachine.validate_transition("pendente", "cancelado")
        assert exc_info.value.reason == "unknown status"

    def test_terminal_statuses(self):
        assert VacationStateMachine.is_terminal("concluido") is True
        assert VacationStateMachine.is_terminal("rejeitado") is True
        assert VacationStateMachine.is_terminal("pendente") is False

    def test_next_statuses(self):
        assert set(VacationStateMachine.get_next_statuses("pendente")) == {"aprovado", "rejeitado"}
        assert VacationStateMachine.get_next_statuses("concluido") == []


class TestPaymentStateMachine:
    """Test advance and payroll transitions."""

    def test_forward_path(self):
        assert PaymentStateMachine.can_transition("pendente", "processado") is True
        assert PaymentStateMachine.can_transition("processado", "pago") is True

    def test_no_skipping_or_reverting(self):
        assert PaymentStateMachine.can_transition("pendente", "pago") is False
        assert PaymentStateMachine.can_transition("pago", "pendente") is False
        assert PaymentStateMachine.can_transition("processado", "pendente") is False

    def test_paid_is_terminal(self):
        assert PaymentStateMachine.is_terminal("pago") is True
        assert PaymentStateMachine.statuses() == {"pendente", "processado", "pago"}
