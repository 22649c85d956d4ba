# services/venue-booking-service/src/apps/api/serializers/__init__.py
"""
API Serializers
"""

from .booking_serializers import (
    BookingSerializer,
    BookingCreateSerializer,
    BookingTransitionSerializer,
    BookingCancelSerializer,
)
from .venue_serializers import (
    VenueSerializer,
    VenueBlackoutSerializer,
    AvailabilityQuerySerializer,
    TimeSlotSerializer,
    SystemConfigSerializer,
)
from .notification_serializers import (
    NotificationSerializer,
    AuditLogSerializer,
)

__all__ = [
    'BookingSerializer',
    'BookingCreateSerializer',
    'BookingTransitionSerializer',
    'BookingCancelSerializer',
    'VenueSerializer',
    'VenueBlackoutSerializer',
    'AvailabilityQuerySerializer',
    'TimeSlotSerializer',
    'SystemConfigSerializer',
    'NotificationSerializer',
    'AuditLogSerializer',
]
