# shared/common/exceptions.py
"""
API Exception Classes and Exception Handler

Every error leaving a service is rendered in the same envelope:

    {"success": false, "error": {"code", "message", "request_id", "details"}}
"""

import logging
import traceback
from typing import Dict, Any, Optional
from rest_framework import status
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework.exceptions import APIException
from django.core.exceptions import ValidationError as DjangoValidationError
from django.conf import settings

logger = logging.getLogger(__name__)


# =============================================================================
# BASE EXCEPTIONS
# =============================================================================

class BaseAPIException(APIException):
    """Base exception class for all custom API exceptions"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'An unexpected error occurred.'
    default_code = 'error'
    error_code = 'INTERNAL_ERROR'

    def __init__(
        self,
        detail: Optional[str] = None,
        code: Optional[str] = None,
        error_code: Optional[str] = None,
        extra_data: Optional[Dict] = None
    ):
        super().__init__(detail=detail, code=code)
        self.error_code = error_code or self.error_code
        self.extra_data = extra_data or {}


# =============================================================================
# CLIENT ERRORS (4xx)
# =============================================================================

class ValidationException(BaseAPIException):
    """400 Validation Error"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Validation error.'
    default_code = 'validation_error'
    error_code = 'VALIDATION_ERROR'

    def __init__(self, detail: str = None, errors: Optional[Dict[str, Any]] = None, **kwargs):
        super().__init__(detail=detail, **kwargs)
        if errors:
            self.extra_data['errors'] = errors


class UnauthorizedException(BaseAPIException):
    """401 Unauthorized"""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Authentication credentials were not provided or are invalid.'
    default_code = 'unauthorized'
    error_code = 'UNAUTHORIZED'


class ForbiddenException(BaseAPIException):
    """403 Forbidden"""
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'You do not have permission to perform this action.'
    default_code = 'forbidden'
    error_code = 'FORBIDDEN'


class NotFoundException(BaseAPIException):
    """404 Not Found"""
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'The requested resource was not found.'
    default_code = 'not_found'
    error_code = 'NOT_FOUND'


class ConflictException(BaseAPIException):
    """409 Conflict"""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'A conflict occurred with the current state of the resource.'
    default_code = 'conflict'
    error_code = 'CONFLICT'


# =============================================================================
# DOMAIN-SPECIFIC EXCEPTIONS
# =============================================================================

class BookingConflictException(ConflictException):
    """Booking conflict (overlapping reservation or venue blackout)"""
    default_detail = 'The requested time slot conflicts with an existing booking.'
    error_code = 'BOOKING_CONFLICT'


class InvalidStateTransitionException(ConflictException):
    """Booking cannot move to the requested status"""
    default_detail = 'The booking cannot be moved to the requested status.'
    default_code = 'invalid_state_transition'
    error_code = 'INVALID_STATE_TRANSITION'


# =============================================================================
# EXCEPTION HANDLER
# =============================================================================

def error_envelope(code: str, message: str, request_id: Optional[str] = None, details: Any = None) -> Dict:
    """The shared error body. ``details`` is omitted when empty."""
    error = {'code': code, 'message': message, 'request_id': request_id}
    if details:
        error['details'] = details
    return {'success': False, 'error': error}


def custom_exception_handler(exc, context) -> Optional[Response]:
    """
    DRF exception handler rendering every failure in the shared envelope.

    DRF-known exceptions (including Http404 and PermissionDenied) keep the
    status DRF picks. Django model validation errors become 400. Anything
    else is logged and reported as 500.
    """
    request = context.get('request')
    request_id = getattr(request, 'request_id', None) if request else None

    response = exception_handler(exc, context)
    if response is not None:
        return format_error_response(exc, response, request_id)

    if isinstance(exc, DjangoValidationError):
        details = exc.message_dict if hasattr(exc, 'message_dict') else {'detail': exc.messages}
        return Response(
            error_envelope('VALIDATION_ERROR', 'Validation error', request_id, details),
            status=status.HTTP_400_BAD_REQUEST
        )

    logger.exception(
        f"Unhandled exception: {exc}",
        extra={'request_id': request_id, 'exception_type': type(exc).__name__}
    )

    body = error_envelope(
        'INTERNAL_ERROR', 'An unexpected error occurred. Please try again later.', request_id
    )
    if settings.DEBUG:
        body['error'].update(
            message=str(exc),
            type=type(exc).__name__,
            traceback=traceback.format_exc().split('\n'),
        )
    return Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


def format_error_response(exc, response: Response, request_id: Optional[str] = None) -> Response:
    """Rewrite a response DRF already rendered into the shared envelope."""
    code = getattr(exc, 'error_code', None) or _default_error_code(response.status_code)
    details = getattr(exc, 'extra_data', {}).get('errors')
    if not details and isinstance(response.data, dict) and 'detail' not in response.data:
        # Serializer field errors
        details = response.data

    response.data = error_envelope(code, get_error_message(exc, response), request_id, details)
    return response


def get_error_message(exc, response: Response) -> str:
    detail = getattr(exc, 'detail', None)
    if isinstance(detail, str):
        return detail
    if isinstance(detail, list) and detail:
        return str(detail[0])
    if isinstance(detail, dict):
        return str(detail.get('detail', 'Invalid input.'))
    if isinstance(response.data, dict):
        return str(response.data.get('detail', response.data))
    return str(response.data)


def _default_error_code(status_code: int) -> str:
    return {
        status.HTTP_400_BAD_REQUEST: 'VALIDATION_ERROR',
        status.HTTP_401_UNAUTHORIZED: 'UNAUTHORIZED',
        status.HTTP_403_FORBIDDEN: 'FORBIDDEN',
        status.HTTP_404_NOT_FOUND: 'NOT_FOUND',
        status.HTTP_405_METHOD_NOT_ALLOWED: 'METHOD_NOT_ALLOWED',
    }.get(status_code, 'ERROR')
