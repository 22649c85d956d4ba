# services/venue-booking-service/src/apps/core/services/booking_service.py
"""
Booking Service

Core business logic for venue reservations. Every public method takes the
acting principal explicitly; there is no ambient user.

Mutations follow one shape inside a single transaction:

    authorize -> (create) validate + conflict check -> state machine
    -> persist -> queue notification and audit on the outbox
"""

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import Q, QuerySet
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from apps.core.models import AuditLog, Booking, Notification, SystemConfig, Team, Venue

from . import (
    BookingConflictError,
    BookingNotFoundError,
    BookingValidationError,
    InvalidStateTransition,
)
from . import conflict_detector, state_machine
from .authorization import (
    Action,
    Principal,
    Relation,
    allowed_without_relation,
    authorize,
    is_allowed,
    qualifying_relations,
    require_principal,
)
from .notification_service import NotificationService
from .side_effects import RequestOrigin, SideEffectOutbox

logger = logging.getLogger(__name__)

Status = Booking.Status

TRANSITION_NOTIFICATIONS = {
    Status.APPROVED: Notification.Type.BOOKING_APPROVED,
    Status.DENIED: Notification.Type.BOOKING_DENIED,
    Status.CANCELLED: Notification.Type.BOOKING_CANCELLED,
}

# How each relation narrows a booking queryset for list scoping
RELATION_FILTERS = {
    Relation.REQUESTER: lambda p: Q(requester_id=p.id),
    Relation.SAME_COUNTRY: lambda p: Q(team__country_code=p.country_code) if p.country_code else None,
    Relation.MANAGES_VENUE: lambda p: Q(venue__manager_id=p.id),
    Relation.MANAGES_TEAM: lambda p: Q(team__manager_id=p.id),
}


class BookingService:
    """
    Service for managing bookings.

    Handles:
    - Booking creation with duration, capacity and conflict validation
    - Scoped listing and retrieval
    - Status transitions (approve, deny, cancel, complete)
    - Deletion
    """

    def __init__(self, notifications: Optional[NotificationService] = None):
        self.notifications = notifications or NotificationService()

    # ==========================================================================
    # Creation
    # ==========================================================================

    @transaction.atomic
    def create_booking(
        self,
        principal: Optional[Principal],
        data: Dict[str, Any],
        origin: Optional[RequestOrigin] = None,
    ) -> Booking:
        """
        Create a booking in the ``requested`` state.

        ``data`` keys: venue_id, team_id, start_datetime, end_datetime,
        participant_count, special_requirements and, for actors allowed to
        book on behalf of someone else, requester_id and requester_email.
        A self-booking takes its email from the principal.
        """
        principal = authorize(principal, Action.CREATE_BOOKING)

        start = self._parse_datetime(data.get('start_datetime'), 'start_datetime')
        end = self._parse_datetime(data.get('end_datetime'), 'end_datetime')
        self._validate_interval(start, end)
        self._validate_duration(SystemConfig.load(), start, end)

        # Per-venue critical section: concurrent creates on the same venue
        # queue here until the winner commits.
        venue = self._lock_venue(data.get('venue_id'))
        team = self._get_team(data.get('team_id'))

        participant_count = self._validate_participants(venue, data.get('participant_count', 1))
        if not venue.is_active:
            raise BookingValidationError(f"Venue {venue.name} is not accepting bookings")

        if conflict_detector.venue_has_conflict(venue, start, end):
            raise BookingConflictError(
                'Booking conflicts with existing reservations',
                **conflict_detector.describe_conflicts(venue, start, end)
            )

        requester_id = self._resolve_requester(principal, data.get('requester_id'), venue, team)
        if requester_id == principal.id:
            requester_email = principal.email or ''
        else:
            requester_email = data.get('requester_email') or ''

        booking = Booking.objects.create(
            venue=venue,
            team=team,
            requester_id=requester_id,
            requester_email=requester_email,
            start_datetime=start,
            end_datetime=end,
            participant_count=participant_count,
            special_requirements=data.get('special_requirements') or '',
            status=Status.REQUESTED,
        )

        outbox = SideEffectOutbox()
        self._queue_notification(
            outbox, venue.manager_id, Notification.Type.BOOKING_REQUESTED, booking
        )
        self._queue_audit(
            outbox, principal, AuditLog.Action.CREATE, booking,
            old_values=None, new_values=booking.snapshot(), origin=origin,
        )
        outbox.commit()

        logger.info(
            f"Created booking {booking.id} on venue {venue.id} for "
            f"{start:%Y-%m-%d %H:%M}-{end:%H:%M}",
            extra={'requester_id': str(requester_id), 'actor_id': str(principal.id)}
        )
        return booking

    # ==========================================================================
    # Reads
    # ==========================================================================

    def get_booking(self, principal: Optional[Principal], booking_id: uuid.UUID) -> Booking:
        principal = require_principal(principal)
        booking = self._get(booking_id)
        authorize(principal, Action.READ_BOOKING, self.relations_for(principal, booking))
        return booking

    def list_bookings(
        self,
        principal: Optional[Principal],
        filters: Optional[Dict[str, Any]] = None,
        now: Optional[datetime] = None,
    ) -> QuerySet:
        """
        Bookings the principal may read, narrowed by ``filters``.

        Supported filters (combined with AND): start, end (window overlap),
        status (effective status), venue_id, team_id, requester_id.
        """
        principal = require_principal(principal)
        filters = filters or {}
        queryset = self.visible_bookings(principal)

        if filters.get('start') or filters.get('end'):
            queryset = queryset.for_window(
                self._parse_datetime(filters.get('start'), 'start', required=False),
                self._parse_datetime(filters.get('end'), 'end', required=False),
            )
        if filters.get('status'):
            if filters['status'] not in Status.values:
                raise BookingValidationError(f"Unknown status {filters['status']}", field='status')
            queryset = queryset.with_effective_status(filters['status'], now)
        for key in ('venue_id', 'team_id', 'requester_id'):
            if filters.get(key):
                queryset = queryset.filter(**{key: filters[key]})

        return queryset.order_by('start_datetime')

    def visible_bookings(self, principal: Principal) -> QuerySet:
        """Read scope derived from the READ_BOOKING policy entry."""
        queryset = Booking.objects.select_related('venue', 'team')
        if allowed_without_relation(principal.role, Action.READ_BOOKING):
            return queryset

        scope = None
        for relation in qualifying_relations(principal.role, Action.READ_BOOKING):
            condition = RELATION_FILTERS[relation](principal)
            if condition is not None:
                scope = condition if scope is None else scope | condition
        if scope is None:
            return queryset.none()
        return queryset.filter(scope)

    # ==========================================================================
    # Transitions
    # ==========================================================================

    @transaction.atomic
    def transition_booking(
        self,
        principal: Optional[Principal],
        booking_id: uuid.UUID,
        new_status: str,
        notes: Optional[str] = None,
        origin: Optional[RequestOrigin] = None,
    ) -> Booking:
        principal = require_principal(principal)
        if new_status not in Status.values:
            raise BookingValidationError(f"Unknown status {new_status}", field='status')

        booking = self._get(booking_id, for_update=True)
        state_machine.ensure_not_terminal(booking, new_status)

        action = state_machine.TRANSITION_ACTIONS.get(new_status)
        if action is None:
            raise InvalidStateTransition(
                f"Cannot move booking from {booking.status} to {new_status}",
                current=booking.status,
                target=new_status,
            )
        authorize(principal, action, self.relations_for(principal, booking))

        old_values = booking.snapshot()
        previous = booking.status
        state_machine.apply_transition(booking, new_status, principal.id, notes=notes or '')
        booking.save()

        outbox = SideEffectOutbox()
        notification_type = TRANSITION_NOTIFICATIONS.get(new_status)
        if new_status == Status.CANCELLED:
            if booking.requester_id != principal.id:
                self._queue_notification(outbox, booking.requester_id, notification_type, booking)
        elif notification_type:
            self._queue_notification(outbox, booking.requester_id, notification_type, booking)
        self._queue_audit(
            outbox, principal, AuditLog.Action.UPDATE, booking,
            old_values=old_values, new_values=booking.snapshot(), origin=origin,
        )
        outbox.commit()

        logger.info(f"Booking {booking.id} moved {previous} -> {new_status} by {principal.id}")
        return booking

    def cancel_booking(
        self,
        principal: Optional[Principal],
        booking_id: uuid.UUID,
        reason: Optional[str] = None,
        origin: Optional[RequestOrigin] = None,
    ) -> None:
        self.transition_booking(principal, booking_id, Status.CANCELLED, notes=reason, origin=origin)

    # ==========================================================================
    # Deletion
    # ==========================================================================

    @transaction.atomic
    def delete_booking(
        self,
        principal: Optional[Principal],
        booking_id: uuid.UUID,
        origin: Optional[RequestOrigin] = None,
    ) -> None:
        principal = require_principal(principal)
        booking = self._get(booking_id, for_update=True)
        authorize(principal, Action.DELETE_BOOKING, self.relations_for(principal, booking))

        # Side-effect arguments are built before the row (and its pk) goes away
        outbox = SideEffectOutbox()
        if booking.requester_id != principal.id:
            self._queue_notification(
                outbox, booking.requester_id, Notification.Type.BOOKING_CANCELLED, booking
            )
        self._queue_audit(
            outbox, principal, AuditLog.Action.DELETE, booking,
            old_values=booking.snapshot(), new_values=None, origin=origin,
        )

        booking.delete()
        outbox.commit()

        logger.info(f"Booking {booking_id} deleted by {principal.id}")

    # ==========================================================================
    # Relations
    # ==========================================================================

    def relations_for(self, principal: Principal, booking: Booking) -> frozenset:
        """Ownership relations between the principal and a freshly loaded booking."""
        return self._relations(principal, booking.venue, booking.team, booking.requester_id)

    def _relations(self, principal: Principal, venue: Venue, team: Team, requester_id=None) -> frozenset:
        relations = set()
        if venue.manager_id and venue.manager_id == principal.id:
            relations.add(Relation.MANAGES_VENUE)
        if team.manager_id and team.manager_id == principal.id:
            relations.add(Relation.MANAGES_TEAM)
        if requester_id and requester_id == principal.id:
            relations.add(Relation.REQUESTER)
        if principal.country_code and team.country_code == principal.country_code:
            relations.add(Relation.SAME_COUNTRY)
        return frozenset(relations)

    # ==========================================================================
    # Helper Methods
    # ==========================================================================

    def _get(self, booking_id, for_update: bool = False) -> Booking:
        queryset = Booking.objects.select_related('venue', 'team')
        if for_update:
            queryset = queryset.select_for_update(of=('self',))
        try:
            return queryset.get(id=booking_id)
        except (Booking.DoesNotExist, DjangoValidationError, ValueError):
            raise BookingNotFoundError(f"Booking {booking_id} not found")

    def _lock_venue(self, venue_id) -> Venue:
        if not venue_id:
            raise BookingValidationError('venue_id is required', field='venue_id')
        try:
            return Venue.objects.select_for_update().get(id=venue_id)
        except (Venue.DoesNotExist, DjangoValidationError, ValueError):
            raise BookingNotFoundError(f"Venue {venue_id} not found")

    def _get_team(self, team_id) -> Team:
        if not team_id:
            raise BookingValidationError('team_id is required', field='team_id')
        try:
            return Team.objects.get(id=team_id)
        except (Team.DoesNotExist, DjangoValidationError, ValueError):
            raise BookingNotFoundError(f"Team {team_id} not found")

    def _resolve_requester(self, principal: Principal, requested_id, venue: Venue, team: Team) -> uuid.UUID:
        """Requester is the principal unless the policy allows booking on behalf."""
        if not requested_id:
            return principal.id
        try:
            requested_id = uuid.UUID(str(requested_id))
        except ValueError:
            raise BookingValidationError('requester_id is not a valid id', field='requester_id')
        if requested_id != principal.id and is_allowed(
            principal.role, Action.BOOK_ON_BEHALF, self._relations(principal, venue, team)
        ):
            return requested_id
        return principal.id

    def _parse_datetime(self, value, field: str, required: bool = True) -> Optional[datetime]:
        if value is None or value == '':
            if required:
                raise BookingValidationError(f"{field} is required", field=field)
            return None
        if isinstance(value, str):
            parsed = parse_datetime(value)
            if parsed is None:
                raise BookingValidationError(f"{field} is not a valid datetime", field=field)
            value = parsed
        if not isinstance(value, datetime):
            raise BookingValidationError(f"{field} is not a valid datetime", field=field)
        if timezone.is_naive(value):
            value = timezone.make_aware(value)
        return value

    def _validate_interval(self, start: datetime, end: datetime) -> None:
        if start >= end:
            raise BookingValidationError(
                'start_datetime must be before end_datetime', field='end_datetime'
            )

    def _validate_duration(self, config: SystemConfig, start: datetime, end: datetime) -> None:
        if config.two_hour_limit_enabled and end - start > config.max_booking_duration:
            hours = config.max_booking_duration_minutes / 60
            raise BookingValidationError(
                f"Booking duration cannot exceed {hours:g} hours",
                field='end_datetime',
                max_minutes=config.max_booking_duration_minutes,
            )

    def _validate_participants(self, venue: Venue, participant_count) -> int:
        try:
            participant_count = int(participant_count)
        except (TypeError, ValueError):
            raise BookingValidationError('participant_count must be a number', field='participant_count')
        if participant_count < 1:
            raise BookingValidationError('participant_count must be at least 1', field='participant_count')
        if participant_count > venue.capacity:
            raise BookingValidationError(
                f"{venue.name} holds at most {venue.capacity} participants",
                field='participant_count',
            )
        return participant_count

    def _queue_notification(self, outbox: SideEffectOutbox, recipient_id, notification_type, booking: Booking) -> None:
        if recipient_id is None:
            logger.warning(
                f"No recipient for {notification_type} on booking {booking.id}; venue has no manager"
            )
            return
        title, message = self.notifications.compose(notification_type, booking)
        email = booking.requester_email if recipient_id == booking.requester_id else None
        outbox.notify(
            recipient_id,
            notification_type,
            title,
            message,
            booking_id=booking.id,
            email=email,
        )

    def _queue_audit(self, outbox, principal, action, booking, old_values, new_values, origin) -> None:
        outbox.audit(
            principal.id,
            action,
            'booking',
            booking.id,
            old_values=old_values,
            new_values=new_values,
            origin=origin,
        )
