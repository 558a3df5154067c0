import logging
import time

from django.conf import settings
from django.utils import timezone
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from core.store import get_store

logger = logging.getLogger(__name__)

STARTED_AT = time.monotonic()


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def health(request):
    try:
        db_ok = get_store().ping()
    except Exception:
        logger.exception("health check: database unreachable")
        db_ok = False
    return Response({
        'status': 'OK' if db_ok else 'DEGRADED',
        'timestamp': timezone.now().isoformat(),
        'uptime': round(time.monotonic() - STARTED_AT, 3),
        'environment': settings.ENV,
        'database': db_ok,
    }, status=200 if db_ok else 503)
