# services/venue-booking-service/src/apps/api/views/filters.py
"""
API Filters

Django Filter classes for booking API.
"""

import django_filters
from django.utils import timezone

from apps.core.models import Booking, Notification


class BookingFilter(django_filters.FilterSet):
    """Filter for booking queries. All parameters combine with AND."""

    # Window overlap: bookings running at any point in [start, end)
    start = django_filters.IsoDateTimeFilter(method='filter_window_start')
    end = django_filters.IsoDateTimeFilter(method='filter_window_end')

    # Effective status (approved bookings in the past read as completed)
    status = django_filters.ChoiceFilter(
        choices=Booking.Status.choices,
        method='filter_status'
    )

    venue_id = django_filters.UUIDFilter()
    team_id = django_filters.UUIDFilter()
    requester_id = django_filters.UUIDFilter()

    class Meta:
        model = Booking
        fields = ['start', 'end', 'status', 'venue_id', 'team_id', 'requester_id']

    def filter_window_start(self, queryset, name, value):
        return queryset.for_window(start=value)

    def filter_window_end(self, queryset, name, value):
        return queryset.for_window(end=value)

    def filter_status(self, queryset, name, value):
        return queryset.with_effective_status(value, timezone.now())


class NotificationFilter(django_filters.FilterSet):
    unread_only = django_filters.BooleanFilter(method='filter_unread_only')
    type = django_filters.ChoiceFilter(choices=Notification.Type.choices)

    class Meta:
        model = Notification
        fields = ['unread_only', 'type']

    def filter_unread_only(self, queryset, name, value):
        if value:
            return queryset.filter(is_read=False)
        return queryset
