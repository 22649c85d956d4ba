# services/venue-booking-service/src/apps/api/views/base.py
"""
Shared view plumbing: principal resolution and domain error translation.
"""

from shared.common.exceptions import (
    BookingConflictException,
    ForbiddenException,
    InvalidStateTransitionException,
    NotFoundException,
    UnauthorizedException,
    ValidationException,
)

from apps.core.services import (
    BookingConflictError,
    BookingNotFoundError,
    BookingServiceError,
    BookingUnauthorizedError,
    BookingValidationError,
    InvalidStateTransition,
    Principal,
    RequestOrigin,
)

ERROR_TRANSLATIONS = {
    BookingValidationError: ValidationException,
    BookingUnauthorizedError: ForbiddenException,
    BookingNotFoundError: NotFoundException,
    BookingConflictError: BookingConflictException,
    InvalidStateTransition: InvalidStateTransitionException,
}


def to_api_exception(exc: BookingServiceError):
    for error_class, api_class in ERROR_TRANSLATIONS.items():
        if isinstance(exc, error_class):
            return api_class(
                detail=exc.message or None,
                error_code=exc.error_code,
                extra_data={'errors': exc.details} if exc.details else None,
            )
    return ValidationException(detail=exc.message or None, error_code=exc.error_code)


class BookingServiceViewMixin:
    """
    Turns service errors into API exceptions so the shared exception
    handler renders them in the common envelope.
    """

    def handle_exception(self, exc):
        if isinstance(exc, BookingServiceError):
            exc = to_api_exception(exc)
        return super().handle_exception(exc)

    def get_principal(self) -> Principal:
        principal = Principal.from_user(self.request.user)
        if principal is None:
            raise UnauthorizedException()
        return principal

    def get_origin(self) -> RequestOrigin:
        return RequestOrigin.from_request(self.request)
