import logging

from rest_framework import status
from rest_framework.response import Response

logger = logging.getLogger('pullrequester.views')


def error_response(code: str, message: str, http_status: int) -> Response:
    return Response({
        'error': {
            'code': code,
            'message': message
        }
    }, status=http_status)


def validation_error(message: str) -> Response:
    return error_response('VALIDATION_ERROR', message, status.HTTP_400_BAD_REQUEST)


def transient_error() -> Response:
    return error_response(
        'SERVICE_UNAVAILABLE',
        'temporary storage failure, retry the request',
        status.HTTP_503_SERVICE_UNAVAILABLE,
    )


def server_error(view_name: str) -> Response:
    logger.exception("Unhandled error in %s", view_name)
    return error_response('SERVER_ERROR', 'Internal server error', status.HTTP_500_INTERNAL_SERVER_ERROR)
