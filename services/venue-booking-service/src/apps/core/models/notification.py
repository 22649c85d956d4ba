# services/venue-booking-service/src/apps/core/models/notification.py
"""
In-app notifications addressed to a single user.
"""

from django.db import models

from shared.common.mixins import UUIDPrimaryKeyMixin


class Notification(UUIDPrimaryKeyMixin):

    class Type(models.TextChoices):
        BOOKING_REQUESTED = 'booking_requested', 'Booking Requested'
        BOOKING_APPROVED = 'booking_approved', 'Booking Approved'
        BOOKING_DENIED = 'booking_denied', 'Booking Denied'
        BOOKING_CANCELLED = 'booking_cancelled', 'Booking Cancelled'
        BOOKING_REMINDER = 'booking_reminder', 'Booking Reminder'
        SYSTEM_ALERT = 'system_alert', 'System Alert'

    user_id = models.UUIDField()
    type = models.CharField(max_length=30, choices=Type.choices)
    title = models.CharField(max_length=200)
    message = models.TextField()
    # Not a foreign key: the notice outlives a deleted booking
    booking_id = models.UUIDField(null=True, blank=True, db_index=True)
    is_read = models.BooleanField(default=False)
    email_sent = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'notifications'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user_id', 'is_read'], name='idx_notification_user_read'),
        ]

    def __str__(self):
        return f"{self.type} -> {self.user_id}"
