# services/venue-booking-service/src/apps/core/models/__init__.py
"""
Venue Booking Service Models
"""

from .venue import Venue, Team, VenueBlackout
from .booking import Booking
from .notification import Notification
from .audit import AuditLog
from .system_config import SystemConfig

__all__ = [
    'Venue',
    'Team',
    'VenueBlackout',
    'Booking',
    'Notification',
    'AuditLog',
    'SystemConfig',
]
