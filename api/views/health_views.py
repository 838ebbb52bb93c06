import logging

from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response
from django.db import DatabaseError, connection

logger = logging.getLogger('pullrequester.views')


@api_view(['GET'])
def health_check(request):
    """GET /health - Health check, включая доступность БД"""
    try:
        connection.ensure_connection()
    except DatabaseError as e:
        logger.warning("Health check failed: %s", e)
        return Response({'status': 'unhealthy'}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
    return Response({'status': 'healthy'})
