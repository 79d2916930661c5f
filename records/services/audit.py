import logging
from typing import Any, Dict, Optional

from django.db import transaction

from records.models import AuditEvent, Hospital

logger = logging.getLogger(__name__)


def log_action(*, hospital: Optional[Hospital], action: str, object_type: Optional[str]=None, object_id=None, detail: Optional[Dict[str, Any]]=None) -> Optional[AuditEvent]:
    """Write an audit row.  Audit problems are logged, never raised."""
    try:
        with transaction.atomic():
            return AuditEvent.objects.create(
                hospital=hospital if isinstance(hospital, Hospital) else None,
                action=action,
                object_type=object_type,
                object_id=str(object_id) if object_id is not None else None,
                detail=detail or {},
            )
    except Exception:
        logger.exception("audit write failed: action=%s", action)
        return None
