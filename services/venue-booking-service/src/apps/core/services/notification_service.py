# services/venue-booking-service/src/apps/core/services/notification_service.py
"""
Notification Service

Writes in-app notifications and serves a user's inbox.
"""

import logging
import uuid
from typing import Optional, Tuple

from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.core.models import Booking, Notification

from . import BookingNotFoundError
from .authorization import Principal, require_principal

logger = logging.getLogger(__name__)


TEMPLATES = {
    Notification.Type.BOOKING_REQUESTED: (
        'New Booking Request',
        '{team} requested {venue} on {start:%Y-%m-%d} {start:%H:%M}-{end:%H:%M}.',
    ),
    Notification.Type.BOOKING_APPROVED: (
        'Booking Approved',
        'Your booking of {venue} on {start:%Y-%m-%d} {start:%H:%M}-{end:%H:%M} has been approved.',
    ),
    Notification.Type.BOOKING_DENIED: (
        'Booking Denied',
        'Your booking of {venue} on {start:%Y-%m-%d} {start:%H:%M}-{end:%H:%M} has been denied.',
    ),
    Notification.Type.BOOKING_CANCELLED: (
        'Booking Cancelled',
        'Your booking of {venue} on {start:%Y-%m-%d} {start:%H:%M}-{end:%H:%M} has been cancelled.',
    ),
    Notification.Type.BOOKING_REMINDER: (
        'Booking Reminder',
        'Your session at {venue} starts at {start:%H:%M}.',
    ),
}

# Types also mailed to the recipient when an address is known
EMAIL_NOTIFICATION_TYPES = frozenset({
    Notification.Type.BOOKING_APPROVED,
    Notification.Type.BOOKING_REMINDER,
})


class NotificationService:
    """Service for notification records."""

    # ==========================================================================
    # Emission
    # ==========================================================================

    def compose(self, notification_type: str, booking: Booking) -> Tuple[str, str]:
        """Title and message for a booking event."""
        title, template = TEMPLATES[notification_type]
        message = template.format(
            team=booking.team.name,
            venue=booking.venue.name,
            start=timezone.localtime(booking.start_datetime),
            end=timezone.localtime(booking.end_datetime),
        )
        return title, message

    def notify(
        self,
        user_id: uuid.UUID,
        notification_type: str,
        title: str,
        message: str,
        booking_id: Optional[uuid.UUID] = None,
    ) -> Notification:
        notification = Notification.objects.create(
            user_id=user_id,
            type=notification_type,
            title=title,
            message=message,
            booking_id=booking_id,
        )
        logger.info(
            f"Notification {notification_type} queued for user {user_id}",
            extra={'notification_id': str(notification.id), 'booking_id': str(booking_id)}
        )
        return notification

    # ==========================================================================
    # Inbox
    # ==========================================================================

    def list_for_user(self, principal: Optional[Principal], unread_only: bool = False) -> QuerySet:
        principal = require_principal(principal)
        queryset = Notification.objects.filter(user_id=principal.id)
        if unread_only:
            queryset = queryset.filter(is_read=False)
        return queryset.order_by('-created_at')

    def mark_read(self, principal: Optional[Principal], notification_id: uuid.UUID) -> Notification:
        principal = require_principal(principal)
        try:
            # Another user's notification is reported as missing
            notification = Notification.objects.get(id=notification_id, user_id=principal.id)
        except Notification.DoesNotExist:
            raise BookingNotFoundError(f"Notification {notification_id} not found")

        if not notification.is_read:
            notification.is_read = True
            notification.save(update_fields=['is_read'])
        return notification

    @transaction.atomic
    def mark_all_read(self, principal: Optional[Principal]) -> int:
        principal = require_principal(principal)
        count = Notification.objects.filter(user_id=principal.id, is_read=False).update(is_read=True)
        logger.info(f"Marked {count} notifications read for user {principal.id}")
        return count
