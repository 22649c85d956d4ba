# services/venue-booking-service/src/apps/api/views/__init__.py
"""
API Views
"""

from .booking_views import BookingViewSet
from .venue_views import VenueViewSet
from .notification_views import (
    NotificationViewSet,
    AuditLogViewSet,
    DashboardView,
    SystemConfigView,
)

__all__ = [
    'BookingViewSet',
    'VenueViewSet',
    'NotificationViewSet',
    'AuditLogViewSet',
    'DashboardView',
    'SystemConfigView',
]
