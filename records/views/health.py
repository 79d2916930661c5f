"""Liveness probe for load balancers: answers 200 only if the database does."""
import logging

from django.db import DatabaseError, connections
from django.http import JsonResponse

logger = logging.getLogger(__name__)


def _database_ok(alias='default') -> bool:
    with connections[alias].cursor() as cursor:
        cursor.execute('SELECT 1')
        row = cursor.fetchone()
    return bool(row) and row[0] == 1


def healthz(request):
    try:
        db_ok = _database_ok()
    except DatabaseError:
        logger.exception("health check: database unreachable")
        db_ok = False
    return JsonResponse({'ok': db_ok, 'db': db_ok}, status=200 if db_ok else 500)
