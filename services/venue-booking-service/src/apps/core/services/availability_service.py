# services/venue-booking-service/src/apps/core/services/availability_service.py
"""
Availability Service

Slot availability and dashboard figures. Slots are judged by the same
conflict detector that guards booking creation, so a slot shown as free
is one that a create request would accept.
"""

import logging
import uuid
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import Sum
from django.utils import timezone

from apps.core.models import Booking, Team, Venue

from . import BookingNotFoundError
from .authorization import (
    Action,
    Principal,
    Relation,
    allowed_without_relation,
    qualifying_relations,
    require_principal,
)
from .booking_service import BookingService
from .conflict_detector import venue_has_conflict
from .state_machine import PRE_DECISION_STATES

logger = logging.getLogger(__name__)


class AvailabilityService:
    """Service for availability views and dashboard statistics."""

    def __init__(self, booking_service: Optional[BookingService] = None):
        self.booking_service = booking_service or BookingService()

    def get_available_slots(
        self,
        venue_id: uuid.UUID,
        day: date,
        slot_minutes: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Fixed-length slots across the venue's working hours for one day.

        A slot is available when the conflict detector finds nothing in it,
        buffer and blackouts included.
        """
        try:
            venue = Venue.objects.get(id=venue_id)
        except (Venue.DoesNotExist, DjangoValidationError, ValueError):
            raise BookingNotFoundError(f"Venue {venue_id} not found")

        step = timedelta(minutes=slot_minutes or settings.AVAILABILITY_SLOT_MINUTES)
        tz = timezone.get_current_timezone()
        opens = timezone.make_aware(datetime.combine(day, venue.working_start_time), tz)
        closes = timezone.make_aware(datetime.combine(day, venue.working_end_time), tz)

        slots = []
        slot_start = opens
        while slot_start + step <= closes:
            slot_end = slot_start + step
            slots.append({
                'start_datetime': slot_start,
                'end_datetime': slot_end,
                'start_time': slot_start.strftime('%H:%M'),
                'end_time': slot_end.strftime('%H:%M'),
                'available': venue.is_active and not venue_has_conflict(venue, slot_start, slot_end),
            })
            slot_start = slot_end

        return slots

    def get_dashboard_stats(
        self,
        principal: Optional[Principal],
        now: Optional[datetime] = None,
    ) -> Dict[str, int]:
        """
        Headline counts for the principal's dashboard.

        Bookings are counted within the principal's read scope; team members
        within the teams they manage (or, failing that, their country's).
        """
        principal = require_principal(principal)
        now = now or timezone.now()

        bookings = self.booking_service.visible_bookings(principal)
        teams = self._teams_in_scope(principal)

        stats = {
            'active_bookings': bookings.with_effective_status(Booking.Status.APPROVED, now).count(),
            'pending_requests': bookings.filter(status__in=PRE_DECISION_STATES).count(),
            'available_venues': Venue.objects.filter(is_active=True).count(),
            'team_members': teams.aggregate(total=Sum('member_count'))['total'] or 0,
        }
        logger.debug(f"Dashboard stats for {principal.id}: {stats}")
        return stats

    def _teams_in_scope(self, principal: Principal):
        if allowed_without_relation(principal.role, Action.MANAGE_TEAM):
            return Team.objects.all()
        if Relation.MANAGES_TEAM in qualifying_relations(principal.role, Action.MANAGE_TEAM):
            return Team.objects.filter(manager_id=principal.id)
        if principal.country_code:
            return Team.objects.filter(country_code=principal.country_code)
        return Team.objects.none()
