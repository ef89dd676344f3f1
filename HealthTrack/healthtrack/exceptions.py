"""Service error taxonomy and the DRF exception handler that renders it.

Every failure leaves the API as ``{"error": "<message>"}``; service errors
may add extra keys (for example ``count`` when a program delete is blocked).
"""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger('healthtrack')


class ServiceError(Exception):
    """Base class for errors raised by the domain services."""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message, **extra):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def as_payload(self):
        payload = {'error': self.message}
        payload.update(self.extra)
        return payload


class ValidationFailed(ServiceError):
    """Missing or invalid input."""
    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(ServiceError):
    """A referenced record does not exist."""
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(ServiceError):
    """Uniqueness violation, or a delete blocked by dependent rows."""
    status_code = status.HTTP_400_BAD_REQUEST


def _error_message(data):
    if isinstance(data, dict):
        if 'detail' in data:
            return str(data['detail'])
        for field, errors in data.items():
            message = _error_message(errors)
            return message if field == 'non_field_errors' else f"{field}: {message}"
        return 'Invalid request'
    if isinstance(data, (list, tuple)):
        return _error_message(data[0]) if data else 'Invalid request'
    return str(data)


def api_exception_handler(exc, context):
    """Render service, framework and unexpected errors as ``{"error": ...}``."""
    if isinstance(exc, ServiceError):
        return Response(exc.as_payload(), status=exc.status_code)

    response = exception_handler(exc, context)
    if response is not None:
        response.data = {'error': _error_message(response.data)}
        return response

    view = context.get('view')
    logger.error(
        f"Unhandled error in {view.__class__.__name__ if view else 'API'}: {str(exc)}",
        exc_info=True,
    )
    return Response({'error': str(exc)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
