import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class Conflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Resource already exists or was modified concurrently.'
    default_code = 'conflict'


def api_exception_handler(exc, context):
    """
    Shape API errors as {"error": "..."}.

    Field-level validation errors keep DRF's {"field": ["message"]} layout.
    Anything DRF does not recognise is logged and reported as a bare 500.
    """
    response = exception_handler(exc, context)

    if response is None:
        view = context.get('view')
        logger.error(
            "Unhandled error in %s", view.__class__.__name__ if view else 'unknown view',
            exc_info=exc,
        )
        return Response({'error': 'Internal server error'},
                        status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    data = response.data
    if isinstance(data, dict) and set(data) == {'detail'}:
        response.data = {'error': str(data['detail'])}
    elif isinstance(data, list):
        response.data = {'error': ' '.join(str(message) for message in data)}
    return response
