import logging

from django.core.cache import cache
from django.db import connection
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

logger = logging.getLogger(__name__)


def _check_database():
    connection.ensure_connection()


def _check_cache():
    cache.set("health_check", "ok", 10)
    if cache.get("health_check") != "ok":
        raise RuntimeError("cache read/write failed")


class HealthCheckView(APIView):
    """
    Liveness probe for the load balancer.

    Answers 200 when the database and the cache both respond, 503 otherwise,
    with the per-dependency result in ``checks``.
    """

    permission_classes = []
    authentication_classes = []

    checks = {
        "database": _check_database,
        "cache": _check_cache,
    }

    def get(self, request):
        results = {}
        for name, check in self.checks.items():
            try:
                check()
            except Exception as e:
                logger.error("Health check %s failed: %s", name, e)
                results[name] = f"error: {e}"
            else:
                results[name] = "ok"

        healthy = all(result == "ok" for result in results.values())
        return Response(
            {
                "status": "healthy" if healthy else "unhealthy",
                "service": "social-api",
                "checks": results,
            },
            status=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        )
