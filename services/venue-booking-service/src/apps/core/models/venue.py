# services/venue-booking-service/src/apps/core/models/venue.py
"""
Venue reference data

Venues and teams are owned by the reference-data service; this service keeps
a local copy so ownership checks (who manages what) read current rows.
"""

from datetime import time, timedelta

from django.db import models

from shared.common.mixins import UUIDPrimaryKeyMixin, TimestampMixin


class Venue(UUIDPrimaryKeyMixin, TimestampMixin):
    """A bookable training venue."""

    name = models.CharField(max_length=200)
    manager_id = models.UUIDField(
        null=True,
        blank=True,
        db_index=True,
        help_text="User who manages and approves bookings for this venue"
    )
    capacity = models.PositiveIntegerField(default=1)
    working_start_time = models.TimeField(default=time(6, 0))
    working_end_time = models.TimeField(default=time(22, 0))
    buffer_time_minutes = models.PositiveIntegerField(
        default=15,
        help_text="Margin kept free around every reservation"
    )
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        db_table = 'venues'
        ordering = ['name']
        constraints = [
            models.CheckConstraint(
                condition=models.Q(working_end_time__gt=models.F('working_start_time')),
                name='venue_valid_working_hours'
            ),
        ]

    def __str__(self):
        return self.name

    @property
    def buffer(self) -> timedelta:
        return timedelta(minutes=self.buffer_time_minutes)


class Team(UUIDPrimaryKeyMixin, TimestampMixin):
    """A national delegation team that books venues."""

    name = models.CharField(max_length=200)
    country_code = models.CharField(max_length=3, db_index=True)
    sport = models.CharField(max_length=100, blank=True)
    manager_id = models.UUIDField(null=True, blank=True, db_index=True)
    member_count = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'teams'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.country_code})"


class VenueBlackout(UUIDPrimaryKeyMixin, TimestampMixin):
    """A window during which a venue cannot be booked at all."""

    venue = models.ForeignKey(
        Venue,
        on_delete=models.CASCADE,
        related_name='blackouts'
    )
    start_datetime = models.DateTimeField()
    end_datetime = models.DateTimeField()
    reason = models.CharField(max_length=500, blank=True)
    created_by = models.UUIDField()

    class Meta:
        db_table = 'venue_blackouts'
        ordering = ['start_datetime']
        indexes = [
            models.Index(fields=['venue', 'start_datetime'], name='idx_blackout_venue_start'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_datetime__gt=models.F('start_datetime')),
                name='blackout_valid_times'
            ),
        ]

    def __str__(self):
        return f"{self.venue_id} blackout {self.start_datetime:%Y-%m-%d %H:%M}"
