# services/venue-booking-service/src/apps/core/services/conflict_detector.py
"""
Conflict Detector

Two intervals conflict iff ``existing.start - buffer < end`` and
``existing.end + buffer > start``, where ``buffer`` is the venue's
``buffer_time_minutes``. Touching intervals do not conflict. Only active
bookings take part.

The check alone is not race-free. Callers creating bookings hold the venue
row lock (see ``BookingService.create_booking``).
"""

import logging
import uuid
from datetime import datetime
from typing import Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import QuerySet

from apps.core.models import Booking, Venue, VenueBlackout

from . import BookingNotFoundError

logger = logging.getLogger(__name__)


def find_conflicts(
    venue: Venue,
    start: datetime,
    end: datetime,
    exclude_booking_id: Optional[uuid.UUID] = None,
) -> QuerySet:
    """Active bookings on ``venue`` whose buffered interval meets [start, end)."""
    queryset = (
        Booking.objects
        .for_venue(venue.id)
        .active()
        .overlapping(start, end, buffer=venue.buffer)
    )
    if exclude_booking_id:
        queryset = queryset.exclude(id=exclude_booking_id)
    return queryset


def find_blackouts(venue: Venue, start: datetime, end: datetime) -> QuerySet:
    return VenueBlackout.objects.filter(
        venue_id=venue.id,
        start_datetime__lt=end,
        end_datetime__gt=start,
    )


def has_conflict(
    venue_id: uuid.UUID,
    start: datetime,
    end: datetime,
    exclude_booking_id: Optional[uuid.UUID] = None,
) -> bool:
    """True if [start, end) overlaps an active booking (with buffer) or a blackout."""
    try:
        venue = Venue.objects.get(id=venue_id)
    except (Venue.DoesNotExist, DjangoValidationError, ValueError):
        raise BookingNotFoundError(f"Venue {venue_id} not found")
    return venue_has_conflict(venue, start, end, exclude_booking_id)


def venue_has_conflict(venue: Venue, start: datetime, end: datetime, exclude_booking_id=None) -> bool:
    if find_conflicts(venue, start, end, exclude_booking_id).exists():
        return True
    return find_blackouts(venue, start, end).exists()


def describe_conflicts(venue: Venue, start: datetime, end: datetime) -> dict:
    """Ids of everything blocking the window, for error details."""
    bookings = [str(pk) for pk in find_conflicts(venue, start, end).values_list('id', flat=True)]
    blackouts = [str(pk) for pk in find_blackouts(venue, start, end).values_list('id', flat=True)]
    if bookings or blackouts:
        logger.debug(
            f"Window {start:%Y-%m-%d %H:%M}-{end:%H:%M} on venue {venue.id} blocked",
            extra={'bookings': bookings, 'blackouts': blackouts}
        )
    return {'conflicting_bookings': bookings, 'blackouts': blackouts}
