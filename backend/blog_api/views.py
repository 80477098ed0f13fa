import logging

from django.db import DatabaseError, connection
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

logger = logging.getLogger(__name__)


@api_view(["GET"])
@permission_classes([AllowAny])
def health(request):
    """
    GET: Report service status and whether the database answers.
    """
    try:
        connection.ensure_connection()
    except DatabaseError:
        logger.exception("Health check could not reach the database")
        return Response(
            {"status": "degraded", "database": "disconnected"},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    return Response({"status": "ok", "database": "connected"})
