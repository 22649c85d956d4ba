# services/venue-booking-service/src/apps/core/services/state_machine.py
"""
Booking State Machine

    requested ─┬─> approved ─┬─> completed
    pending  ──┤             └─> cancelled
               ├─> denied
               └─> cancelled

``requested`` and ``pending`` are interchangeable pre-decision states.
"""

import uuid
from datetime import datetime
from typing import Optional

from django.utils import timezone

from apps.core.models import Booking

from . import InvalidStateTransition
from .authorization import Action

Status = Booking.Status

TRANSITIONS = {
    Status.REQUESTED: frozenset({Status.APPROVED, Status.DENIED, Status.CANCELLED}),
    Status.PENDING: frozenset({Status.APPROVED, Status.DENIED, Status.CANCELLED}),
    Status.APPROVED: frozenset({Status.CANCELLED, Status.COMPLETED}),
    Status.DENIED: frozenset(),
    Status.CANCELLED: frozenset(),
    Status.COMPLETED: frozenset(),
}

PRE_DECISION_STATES = frozenset(Booking.get_pre_decision_statuses())
TERMINAL_STATES = frozenset(Booking.get_terminal_statuses())

# Which policy action gates a move into each target status
TRANSITION_ACTIONS = {
    Status.APPROVED: Action.DECIDE_BOOKING,
    Status.DENIED: Action.DECIDE_BOOKING,
    Status.CANCELLED: Action.CANCEL_BOOKING,
    Status.COMPLETED: Action.COMPLETE_BOOKING,
}


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATES


def can_transition(current: str, target: str) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


def ensure_not_terminal(
    booking: Booking,
    target: Optional[str] = None,
    now: Optional[datetime] = None,
) -> None:
    """
    Reject any change to a booking that reads as terminal.

    An approved booking past its end reads as completed, so it is frozen too.
    Persisting that completion explicitly is the one move still accepted.
    """
    current = effective_status(booking, now)
    if not is_terminal(current):
        return
    if target == Status.COMPLETED and booking.status == Status.APPROVED:
        return
    raise InvalidStateTransition(
        f"Booking is {current} and can no longer change",
        current=current,
        target=target,
    )


def allowed_targets(booking: Booking, now: Optional[datetime] = None) -> frozenset:
    """
    Statuses the booking can still move to, judged on its effective status.
    Recording completion of an ended booking is bookkeeping and not listed.
    """
    if is_effectively_completed(booking, now):
        return frozenset()
    return TRANSITIONS.get(booking.status, frozenset())


def validate_transition(current: str, target: str) -> None:
    if is_terminal(current):
        raise InvalidStateTransition(
            f"Booking is {current} and can no longer change",
            current=current,
            target=target,
        )
    if not can_transition(current, target):
        raise InvalidStateTransition(
            f"Cannot move booking from {current} to {target}",
            current=current,
            target=target,
        )


def apply_transition(
    booking: Booking,
    target: str,
    actor_id: uuid.UUID,
    now: Optional[datetime] = None,
    notes: str = '',
) -> Booking:
    """Validate and apply ``target`` to the instance. Does not save."""
    now = now or timezone.now()
    ensure_not_terminal(booking, target, now)
    validate_transition(booking.status, target)

    if target in (Status.APPROVED, Status.DENIED):
        booking.approver_id = actor_id
        booking.decided_at = now
        if target == Status.APPROVED:
            booking.approval_notes = notes or ''
        else:
            booking.denial_reason = notes or ''
    elif target == Status.CANCELLED:
        booking.cancelled_at = now
        booking.cancellation_reason = notes or ''
    elif target == Status.COMPLETED:
        booking.completed_at = now

    booking.status = target
    return booking


def is_effectively_completed(booking: Booking, now: Optional[datetime] = None) -> bool:
    """An approved booking whose end has passed is completed for every reader."""
    now = now or timezone.now()
    return booking.status == Status.APPROVED and booking.end_datetime < now


def effective_status(booking: Booking, now: Optional[datetime] = None) -> str:
    if is_effectively_completed(booking, now):
        return Status.COMPLETED
    return booking.status
