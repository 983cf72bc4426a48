"""Training session status machine.

    SCHEDULED -> IN_PROGRESS -> COMPLETED
    SCHEDULED -> COMPLETED
    SCHEDULED -> CANCELLED

COMPLETED and CANCELLED are terminal. Nothing moves a session to
IN_PROGRESS automatically; it only happens through an explicit update.
"""

from libs.common.errors import ValidationFailed
from services.training_service.models import SessionStatus

ALLOWED_TRANSITIONS: dict[SessionStatus, frozenset[SessionStatus]] = {
    SessionStatus.SCHEDULED: frozenset(
        {SessionStatus.IN_PROGRESS, SessionStatus.COMPLETED, SessionStatus.CANCELLED}
    ),
    SessionStatus.IN_PROGRESS: frozenset({SessionStatus.COMPLETED}),
    SessionStatus.COMPLETED: frozenset(),
    SessionStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)


def can_transition(current: SessionStatus, target: SessionStatus) -> bool:
    """Whether ``current -> target`` is allowed. Staying put always is."""
    if current == target:
        return True
    return target in ALLOWED_TRANSITIONS[current]


def ensure_transition(current: SessionStatus, target: SessionStatus) -> None:
    if can_transition(current, target):
        return
    if current in TERMINAL_STATUSES:
        raise ValidationFailed(
            f"Session is already {current.value.lower()}, cannot change status to "
            f"{target.value}"
        )
    raise ValidationFailed(
        f"Cannot change session status from {current.value} to {target.value}"
    )
