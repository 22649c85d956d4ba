# services/venue-booking-service/src/tests/unit/test_exceptions.py
"""
Unit Tests for error translation and the shared exception handler
"""

from django.core.exceptions import ValidationError as DjangoValidationError
from django.test import override_settings
from rest_framework.test import APIRequestFactory

from shared.common.exceptions import (
    ForbiddenException,
    InvalidStateTransitionException,
    custom_exception_handler,
)
from apps.api.views.base import to_api_exception
from apps.core.services import (
    BookingConflictError,
    BookingUnauthorizedError,
    InvalidStateTransition,
)


def handle(exc, request_id='req-42'):
    request = APIRequestFactory().get('/api/v1/bookings/')
    request.request_id = request_id
    return custom_exception_handler(exc, {'request': request})


class TestToApiException:

    def test_unauthorized_becomes_403(self):
        api_exc = to_api_exception(BookingUnauthorizedError('nope', action='delete_booking'))
        assert isinstance(api_exc, ForbiddenException)
        assert api_exc.status_code == 403
        assert api_exc.error_code == 'UNAUTHORIZED'
        assert api_exc.extra_data == {'errors': {'action': 'delete_booking'}}

    def test_state_transition_becomes_409(self):
        api_exc = to_api_exception(InvalidStateTransition('frozen'))
        assert isinstance(api_exc, InvalidStateTransitionException)
        assert api_exc.status_code == 409


class TestCustomExceptionHandler:

    def test_api_exception_envelope(self):
        api_exc = to_api_exception(BookingConflictError('taken', conflicting_bookings=['b1'], blackouts=[]))

        response = handle(api_exc)

        assert response.status_code == 409
        assert response.data == {
            'success': False,
            'error': {
                'code': 'BOOKING_CONFLICT',
                'message': 'taken',
                'request_id': 'req-42',
                'details': {'conflicting_bookings': ['b1'], 'blackouts': []},
            },
        }

    def test_django_validation_error(self):
        response = handle(DjangoValidationError({'end_datetime': ['Too early']}))
        assert response.status_code == 400
        assert response.data['error']['details'] == {'end_datetime': ['Too early']}

    @override_settings(DEBUG=False)
    def test_unexpected_error_is_masked(self):
        response = handle(KeyError('secret'))
        assert response.status_code == 500
        assert response.data['error']['code'] == 'INTERNAL_ERROR'
        assert 'secret' not in response.data['error']['message']
        assert 'details' not in response.data['error']
