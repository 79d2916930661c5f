import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)

GENERIC_ERROR = 'Internal server error'


class StorageFailure(APIException):
    """The database rejected a read or write.  Details stay in the server log."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Request could not be completed'
    default_code = 'storage_error'


def _first_message(detail):
    if isinstance(detail, dict):
        for v in detail.values():
            return _first_message(v)
        return ''
    if isinstance(detail, list):
        return _first_message(detail[0]) if detail else ''
    return str(detail)


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        view = context.get('view')
        logger.exception("unhandled error in %s", view.__class__.__name__ if view else 'view', exc_info=exc)
        return Response(
            {'ok': False, 'message': GENERIC_ERROR, 'error': {'code': 'server_error', 'message': GENERIC_ERROR}},
            status=500,
        )
    # normalize response
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    code = getattr(exc, 'default_code', 'api_error')
    return Response(
        {'ok': False, 'message': _first_message(detail), 'error': {'code': code, 'message': detail}},
        status=resp.status_code,
        headers={k: v for k, v in resp.items()},
    )
