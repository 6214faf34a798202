"""Status lifecycles for vacations, advances and payroll entries."""

from __future__ import annotations

from typing import ClassVar

from hr_payroll.models.enums import PaymentStatus, VacationStatus


class InvalidTransitionError(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        msg = f"Invalid transition from '{from_status}' to '{to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class StatusStateMachine:
    """Transition table with validation.

    Subclasses define ``VALID_TRANSITIONS`` as ``{from_status: [to_statuses]}``.
    Keeping the current status is always allowed.
    """

    VALID_TRANSITIONS: ClassVar[dict[str, list[str]]] = {}

    @classmethod
    def statuses(cls) -> set[str]:
        """All statuses known to this machine."""
        known = set(cls.VALID_TRANSITIONS)
        for targets in cls.VALID_TRANSITIONS.values():
            known.update(targets)
        return known

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        if from_status == to_status:
            return from_status in cls.VALID_TRANSITIONS
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if to_status not in cls.statuses():
            raise InvalidTransitionError(from_status, to_status, "unknown status")
        if not cls.can_transition(from_status, to_status):
            raise InvalidTransitionError(from_status, to_status)

    @classmethod
    def get_next_statuses(cls, current_status: str) -> list[str]:
        """Get list of valid next statuses from current status."""
        return list(cls.VALID_TRANSITIONS.get(current_status, []))

    @classmethod
    def is_terminal(cls, status: str) -> bool:
        """Check if no transition leaves this status."""
        return not cls.VALID_TRANSITIONS.get(status)


class VacationStateMachine(StatusStateMachine):
    """Vacation lifecycle.

    Allowed transitions:
    - pendente → aprovado
    - pendente → rejeitado
    - aprovado → em_gozo
    - em_gozo → concluido
    """

    VALID_TRANSITIONS: ClassVar[dict[str, list[str]]] = {
        VacationStatus.PENDING.value: [
            VacationStatus.APPROVED.value,
            VacationStatus.REJECTED.value,
        ],
        VacationStatus.APPROVED.value: [VacationStatus.IN_PROGRESS.value],
        VacationStatus.IN_PROGRESS.value: [VacationStatus.COMPLETED.value],
        VacationStatus.COMPLETED.value: [],
        VacationStatus.REJECTED.value: [],
    }


class PaymentStateMachine(StatusStateMachine):
    """Advance and payroll lifecycle.

    Allowed transitions:
    - pendente → processado
    - processado → pago
    """

    VALID_TRANSITIONS: ClassVar[dict[str, list[str]]] = {
        PaymentStatus.PENDING.value: [PaymentStatus.PROCESSED.value],
        PaymentStatus.PROCESSED.value: [PaymentStatus.PAID.value],
        PaymentStatus.PAID.value: [],
    }
