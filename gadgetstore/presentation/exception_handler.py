import logging

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from gadgetstore.core.exceptions import CoreError

logger = logging.getLogger(__name__)


def first_message(detail, field=None) -> str:
    """Flattens DRF error details to the first human-readable message."""
    if isinstance(detail, dict):
        for key, value in detail.items():
            message = first_message(value, None if key in ('detail', 'non_field_errors') else key)
            if message:
                return message
        return ''
    if isinstance(detail, list):
        for value in detail:
            message = first_message(value, field)
            if message:
                return message
        return ''
    message = str(detail)
    return f"{field}: {message}" if field and message else message


def api_exception_handler(exc, context):
    """
    Single error shape for the API: {success: false, message}.
    Core errors carry their own status; anything unexpected is a logged 500.
    """
    if isinstance(exc, CoreError):
        return Response({'success': False, 'message': exc.message}, status=exc.status_code)

    response = exception_handler(exc, context)

    if response is None:
        view = context.get('view')
        logger.error(
            "Unhandled error in %s", view.__class__.__name__ if view else 'unknown view',
            exc_info=(type(exc), exc, exc.__traceback__)
        )
        return Response(
            {'success': False, 'message': 'Internal server error'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    if isinstance(exc, exceptions.NotAuthenticated):
        message = 'No token provided'
    else:
        message = first_message(response.data) or 'Request failed'
    response.data = {'success': False, 'message': message}
    return response
