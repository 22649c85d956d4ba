# services/venue-booking-service/src/apps/core/models/booking.py
"""
Booking Model

Time-boxed reservations of a venue by a team.
"""

import uuid
from datetime import datetime, timedelta
from typing import Optional

from django.db import models
from django.db.models import Q
from django.utils import timezone

from shared.common.mixins import UUIDPrimaryKeyMixin, TimestampMixin


class BookingQuerySet(models.QuerySet):
    """Composable booking filters. Every filter narrows (AND semantics)."""

    def active(self):
        return self.filter(status__in=self.model.get_active_statuses())

    def for_venue(self, venue_id: uuid.UUID):
        return self.filter(venue_id=venue_id)

    def overlapping(self, start: datetime, end: datetime, buffer: timedelta = timedelta(0)):
        """
        Bookings whose interval, widened by ``buffer`` on both ends,
        intersects the half-open window [start, end).
        """
        return self.filter(
            Q(start_datetime__lt=end + buffer) & Q(end_datetime__gt=start - buffer)
        )

    def for_window(self, start: Optional[datetime] = None, end: Optional[datetime] = None):
        """Bookings touching a query window; either bound may be open."""
        queryset = self
        if end is not None:
            queryset = queryset.filter(start_datetime__lt=end)
        if start is not None:
            queryset = queryset.filter(end_datetime__gt=start)
        return queryset

    def with_effective_status(self, status: str, now: Optional[datetime] = None):
        """
        Filter on the status a reader should see.

        An approved booking that has already ended reads as completed.
        """
        now = now or timezone.now()
        statuses = self.model.Status

        if status == statuses.COMPLETED:
            return self.filter(
                Q(status=statuses.COMPLETED) |
                Q(status=statuses.APPROVED, end_datetime__lt=now)
            )
        if status == statuses.APPROVED:
            return self.filter(status=statuses.APPROVED, end_datetime__gte=now)
        return self.filter(status=status)


class Booking(UUIDPrimaryKeyMixin, TimestampMixin):
    """
    Venue reservation.

    Created by its requester in a pre-decision state and only ever changed
    through a status transition. Terminal bookings are frozen.
    """

    class Status(models.TextChoices):
        REQUESTED = 'requested', 'Requested'
        PENDING = 'pending', 'Pending'
        APPROVED = 'approved', 'Approved'
        DENIED = 'denied', 'Denied'
        CANCELLED = 'cancelled', 'Cancelled'
        COMPLETED = 'completed', 'Completed'

    venue = models.ForeignKey(
        'core.Venue',
        on_delete=models.PROTECT,
        related_name='bookings'
    )
    team = models.ForeignKey(
        'core.Team',
        on_delete=models.PROTECT,
        related_name='bookings'
    )
    requester_id = models.UUIDField()
    requester_email = models.EmailField(blank=True)
    approver_id = models.UUIDField(null=True, blank=True)

    start_datetime = models.DateTimeField()
    end_datetime = models.DateTimeField()
    participant_count = models.PositiveIntegerField(default=1)
    special_requirements = models.TextField(blank=True)

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.REQUESTED,
        db_index=True
    )
    approval_notes = models.TextField(blank=True)
    denial_reason = models.TextField(blank=True)
    cancellation_reason = models.TextField(blank=True)

    decided_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    reminder_sent_at = models.DateTimeField(null=True, blank=True)

    objects = BookingQuerySet.as_manager()

    class Meta:
        db_table = 'bookings'
        ordering = ['start_datetime']
        indexes = [
            models.Index(fields=['venue', 'start_datetime'], name='idx_booking_venue_start'),
            models.Index(fields=['requester_id', 'start_datetime'], name='idx_booking_requester'),
            models.Index(fields=['status', 'start_datetime'], name='idx_booking_status_start'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_datetime__gt=models.F('start_datetime')),
                name='booking_valid_times'
            ),
        ]

    def __str__(self):
        return f"{self.venue_id} {self.start_datetime:%Y-%m-%d %H:%M} ({self.status})"

    @classmethod
    def get_active_statuses(cls):
        """Statuses that occupy a time slot."""
        return [cls.Status.REQUESTED, cls.Status.PENDING, cls.Status.APPROVED]

    @classmethod
    def get_pre_decision_statuses(cls):
        return [cls.Status.REQUESTED, cls.Status.PENDING]

    @classmethod
    def get_terminal_statuses(cls):
        return [cls.Status.DENIED, cls.Status.CANCELLED, cls.Status.COMPLETED]

    @property
    def duration(self) -> timedelta:
        return self.end_datetime - self.start_datetime

    @property
    def is_terminal(self) -> bool:
        return self.status in self.get_terminal_statuses()

    def snapshot(self) -> dict:
        """JSON-safe copy of the persisted fields, for the audit trail."""
        data = {}
        for field in self._meta.concrete_fields:
            value = getattr(self, field.attname)
            if isinstance(value, uuid.UUID):
                value = str(value)
            elif isinstance(value, datetime):
                value = value.isoformat()
            data[field.attname] = value
        return data
