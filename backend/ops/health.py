"""
Health endpoints for probes and dashboards.

- /_health/live    process is up; touches nothing external
- /_health/ready   the default database answers a query
- /_health/full    every database plus a schema probe of the company and
                   role tables

A schema probe that fails with a "missing relation" style error reports
"degraded" (a migration is probably running); any other failure is
"unhealthy".
"""
import logging
import time

from django.conf import settings
from django.db import DatabaseError, connections
from django.http import JsonResponse
from django.views import View

from ops.schema_cache import is_schema_cache_error


logger = logging.getLogger(__name__)

HEALTHY = "healthy"
DEGRADED = "degraded"
UNHEALTHY = "unhealthy"


def _elapsed_ms(start: float) -> float:
    return round((time.monotonic() - start) * 1000, 2)


def check_database(alias: str = "default") -> dict:
    start = time.monotonic()
    try:
        with connections[alias].cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except DatabaseError as exc:
        logger.warning("Database probe failed", extra={"alias": alias, "error": str(exc)})
        return {"status": UNHEALTHY, "alias": alias, "error": str(exc), "duration_ms": _elapsed_ms(start)}
    return {"status": HEALTHY, "alias": alias, "duration_ms": _elapsed_ms(start)}


def check_schema() -> dict:
    """Count companies and role grants with RLS bypassed."""
    from accounts.models import Company, UserCompanyRole
    from accounts.rls import rls_bypass

    try:
        with rls_bypass():
            companies = Company.objects.count()
            role_grants = UserCompanyRole.objects.count()
    except DatabaseError as exc:
        status = DEGRADED if is_schema_cache_error(exc) else UNHEALTHY
        logger.warning("Schema probe failed", extra={"status": status, "error": str(exc)})
        return {"status": status, "error": str(exc)}
    return {"status": HEALTHY, "companies": companies, "role_grants": role_grants}


def overall_status(statuses) -> str:
    statuses = list(statuses)
    if all(s == HEALTHY for s in statuses):
        return HEALTHY
    if UNHEALTHY in statuses:
        return UNHEALTHY
    return DEGRADED


def full_report() -> dict:
    databases = {alias: check_database(alias) for alias in settings.DATABASES}
    schema = check_schema()
    statuses = [db["status"] for db in databases.values()] + [schema["status"]]
    return {
        "status": overall_status(statuses),
        "checks": {"databases": databases, "schema": schema},
        "version": settings.VERSION,
        "environment": "development" if settings.DEBUG else "production",
    }


class LivenessView(View):
    def get(self, request):
        return JsonResponse({"status": "alive"})


class ReadinessView(View):
    def get(self, request):
        database = check_database()
        if database["status"] != HEALTHY:
            return JsonResponse({"status": "not_ready", "database": database}, status=503)
        return JsonResponse({"status": "ready", "database": database})


class FullHealthView(View):
    """Internal network only in production."""

    def get(self, request):
        report = full_report()
        return JsonResponse(report, status=200 if report["status"] == HEALTHY else 503)
