import time

from django.conf import settings
from django.db import connections
from django.db.utils import OperationalError
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView


class HealthCheckView(APIView):
    """
    GET /api/health/

    Public uptime probe. Reports DB reachability plus the notification
    and deadline-scanner wiring this instance is running with.
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request, *args, **kwargs):
        started = time.perf_counter()
        try:
            connections["default"].cursor()
            db_ok = True
        except OperationalError:
            db_ok = False

        return Response(
            {
                "status": "ok" if db_ok else "degraded",
                "db": db_ok,
                "env": getattr(settings, "ENV", "unknown"),
                "dispatcher": settings.NOTIFICATION_DISPATCHER.rsplit(".", 1)[-1],
                "deadline_scan_interval_seconds": settings.DEADLINE_SCAN_INTERVAL_SECONDS,
                "latency_ms": int((time.perf_counter() - started) * 1000),
            },
            status=status.HTTP_200_OK if db_ok else status.HTTP_503_SERVICE_UNAVAILABLE,
        )
