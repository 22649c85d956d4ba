# services/venue-booking-service/src/apps/core/services/__init__.py
"""
Venue Booking Business Logic
"""


# Custom Exceptions
class BookingServiceError(Exception):
    """Base exception for booking service errors."""

    error_code = 'BOOKING_ERROR'

    def __init__(self, message: str = '', **details):
        super().__init__(message)
        self.message = message
        self.details = details


class BookingValidationError(BookingServiceError):
    """Malformed request, or a limit such as the duration cap exceeded."""

    error_code = 'VALIDATION_ERROR'


class BookingUnauthorizedError(BookingServiceError):
    """Principal missing, or role/ownership does not allow the action."""

    error_code = 'UNAUTHORIZED'


class BookingNotFoundError(BookingServiceError):
    """Booking or venue not found."""

    error_code = 'NOT_FOUND'


class BookingConflictError(BookingServiceError):
    """Booking overlaps an active reservation or a venue blackout."""

    error_code = 'BOOKING_CONFLICT'


class InvalidStateTransition(BookingServiceError):
    """Booking is terminal, or the target status is not reachable."""

    error_code = 'INVALID_STATE_TRANSITION'


from .authorization import Principal, Action, Relation, authorize, is_allowed  # noqa: E402
from .side_effects import SideEffectOutbox, RequestOrigin  # noqa: E402
from .notification_service import NotificationService  # noqa: E402
from .audit_service import AuditService  # noqa: E402
from .booking_service import BookingService  # noqa: E402
from .availability_service import AvailabilityService  # noqa: E402
from .venue_service import VenueService, SystemConfigService  # noqa: E402


__all__ = [
    # Services
    'BookingService',
    'AvailabilityService',
    'NotificationService',
    'AuditService',
    'VenueService',
    'SystemConfigService',

    # Policy and plumbing
    'Principal',
    'Action',
    'Relation',
    'authorize',
    'is_allowed',
    'SideEffectOutbox',
    'RequestOrigin',

    # Exceptions
    'BookingServiceError',
    'BookingValidationError',
    'BookingUnauthorizedError',
    'BookingNotFoundError',
    'BookingConflictError',
    'InvalidStateTransition',
]
