# services/venue-booking-service/src/apps/core/models/system_config.py
"""
System-wide booking configuration (single row).
"""

from datetime import timedelta

from django.db import models


class SystemConfig(models.Model):

    SINGLETON_ID = 1

    two_hour_limit_enabled = models.BooleanField(
        default=True,
        help_text="Enforce max_booking_duration_minutes on new bookings"
    )
    max_booking_duration_minutes = models.PositiveIntegerField(default=120)
    updated_at = models.DateTimeField(auto_now=True)
    updated_by = models.UUIDField(null=True, blank=True)

    class Meta:
        db_table = 'system_config'

    def __str__(self):
        return f"SystemConfig(limit={self.two_hour_limit_enabled}, max={self.max_booking_duration_minutes}m)"

    def save(self, *args, **kwargs):
        self.pk = self.SINGLETON_ID
        super().save(*args, **kwargs)

    @classmethod
    def load(cls) -> 'SystemConfig':
        """Current configuration, created with defaults on first use."""
        config, _ = cls.objects.get_or_create(pk=cls.SINGLETON_ID)
        return config

    @property
    def max_booking_duration(self) -> timedelta:
        return timedelta(minutes=self.max_booking_duration_minutes)
