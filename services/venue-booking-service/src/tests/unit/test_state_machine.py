# services/venue-booking-service/src/tests/unit/test_state_machine.py
"""
Unit Tests for the Booking State Machine
"""

import uuid
from datetime import timedelta

import pytest
from django.utils import timezone

from apps.core.models import Booking
from apps.core.services import InvalidStateTransition
from apps.core.services import state_machine
from apps.core.services.authorization import Action

Status = Booking.Status


def make_booking(status, end_in=timedelta(hours=2)):
    now = timezone.now()
    return Booking(
        status=status,
        start_datetime=now + end_in - timedelta(hours=1),
        end_datetime=now + end_in,
    )


class TestTransitionTable:

    @pytest.mark.parametrize('current', [Status.REQUESTED, Status.PENDING])
    @pytest.mark.parametrize('target', [Status.APPROVED, Status.DENIED, Status.CANCELLED])
    def test_pre_decision_states_share_outbound_transitions(self, current, target):
        assert state_machine.can_transition(current, target)

    @pytest.mark.parametrize('current', [Status.REQUESTED, Status.PENDING])
    def test_pre_decision_cannot_complete(self, current):
        assert not state_machine.can_transition(current, Status.COMPLETED)

    def test_approved_can_cancel_or_complete_only(self):
        assert state_machine.TRANSITIONS[Status.APPROVED] == {Status.CANCELLED, Status.COMPLETED}

    @pytest.mark.parametrize('terminal', [Status.DENIED, Status.CANCELLED, Status.COMPLETED])
    def test_terminal_states_have_no_exits(self, terminal):
        assert state_machine.TRANSITIONS[terminal] == frozenset()
        assert state_machine.is_terminal(terminal)

    def test_every_target_has_a_gating_action(self):
        targets = set().union(*state_machine.TRANSITIONS.values())
        assert targets <= set(state_machine.TRANSITION_ACTIONS)
        assert state_machine.TRANSITION_ACTIONS[Status.APPROVED] == Action.DECIDE_BOOKING
        assert state_machine.TRANSITION_ACTIONS[Status.CANCELLED] == Action.CANCEL_BOOKING


class TestValidateTransition:

    @pytest.mark.parametrize('terminal', [Status.DENIED, Status.CANCELLED, Status.COMPLETED])
    @pytest.mark.parametrize('target', list(Status))
    def test_terminal_always_rejected(self, terminal, target):
        with pytest.raises(InvalidStateTransition):
            state_machine.validate_transition(terminal, target)

    def test_illegal_pair_rejected(self):
        with pytest.raises(InvalidStateTransition) as exc_info:
            state_machine.validate_transition(Status.APPROVED, Status.DENIED)
        assert exc_info.value.details == {'current': Status.APPROVED, 'target': Status.DENIED}


class TestApplyTransition:

    def test_approve_sets_approver_and_timestamp(self):
        booking = make_booking(Status.REQUESTED)
        actor = uuid.uuid4()
        now = timezone.now()

        state_machine.apply_transition(booking, Status.APPROVED, actor, now=now, notes='Enjoy')

        assert booking.status == Status.APPROVED
        assert booking.approver_id == actor
        assert booking.decided_at == now
        assert booking.approval_notes == 'Enjoy'

    def test_deny_records_reason(self):
        booking = make_booking(Status.PENDING)
        actor = uuid.uuid4()

        state_machine.apply_transition(booking, Status.DENIED, actor, notes='Venue closed')

        assert booking.status == Status.DENIED
        assert booking.approver_id == actor
        assert booking.denial_reason == 'Venue closed'

    def test_cancel_does_not_touch_approver(self):
        booking = make_booking(Status.REQUESTED)

        state_machine.apply_transition(booking, Status.CANCELLED, uuid.uuid4(), notes='Travel issue')

        assert booking.approver_id is None
        assert booking.cancelled_at is not None
        assert booking.cancellation_reason == 'Travel issue'

    def test_complete_from_approved(self):
        booking = make_booking(Status.APPROVED)
        state_machine.apply_transition(booking, Status.COMPLETED, uuid.uuid4())
        assert booking.status == Status.COMPLETED
        assert booking.completed_at is not None

    def test_invalid_transition_leaves_instance_untouched(self):
        booking = make_booking(Status.DENIED)
        with pytest.raises(InvalidStateTransition):
            state_machine.apply_transition(booking, Status.APPROVED, uuid.uuid4())
        assert booking.status == Status.DENIED
        assert booking.approver_id is None


class TestEffectiveStatus:

    def test_approved_in_past_is_effectively_completed(self):
        booking = make_booking(Status.APPROVED, end_in=-timedelta(minutes=1))
        assert state_machine.is_effectively_completed(booking)
        assert state_machine.effective_status(booking) == Status.COMPLETED

    def test_approved_in_future_stays_approved(self):
        booking = make_booking(Status.APPROVED)
        assert not state_machine.is_effectively_completed(booking)
        assert state_machine.effective_status(booking) == Status.APPROVED

    def test_requested_in_past_is_not_completed(self):
        booking = make_booking(Status.REQUESTED, end_in=-timedelta(hours=1))
        assert state_machine.effective_status(booking) == Status.REQUESTED

    def test_predicate_uses_given_clock(self):
        booking = make_booking(Status.APPROVED)
        later = booking.end_datetime + timedelta(seconds=1)
        assert state_machine.is_effectively_completed(booking, now=later)
        assert not state_machine.is_effectively_completed(booking, now=booking.end_datetime)


class TestEndedApprovedBooking:

    def setup_method(self):
        self.booking = make_booking(Status.APPROVED, end_in=-timedelta(hours=2))

    @pytest.mark.parametrize('target', [Status.CANCELLED, Status.DENIED, Status.APPROVED])
    def test_reads_as_terminal(self, target):
        with pytest.raises(InvalidStateTransition) as exc_info:
            state_machine.ensure_not_terminal(self.booking, target)
        assert exc_info.value.details['current'] == Status.COMPLETED

    def test_cancel_rejected_on_apply(self):
        with pytest.raises(InvalidStateTransition):
            state_machine.apply_transition(self.booking, Status.CANCELLED, uuid.uuid4())
        assert self.booking.status == Status.APPROVED
        assert self.booking.cancelled_at is None

    def test_completion_can_still_be_recorded(self):
        state_machine.apply_transition(self.booking, Status.COMPLETED, uuid.uuid4())
        assert self.booking.status == Status.COMPLETED

    def test_no_allowed_targets(self):
        assert state_machine.allowed_targets(self.booking) == frozenset()

    def test_future_approved_keeps_its_targets(self):
        booking = make_booking(Status.APPROVED)
        assert state_machine.allowed_targets(booking) == {Status.CANCELLED, Status.COMPLETED}
