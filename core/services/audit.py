"""
Activity recorder.

Appends one immutable ``ActivityLog`` row per mutating request.  Recording
is best effort: a failure is logged and swallowed so that it can never
fail or roll back the operation being audited.  Call it only after that
operation's write has committed.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Optional

from core.models import ActivityLog
from core.store import get_store

logger = logging.getLogger(__name__)


def _render(details: Any) -> str:
    if details is None:
        return ''
    if isinstance(details, str):
        return details
    return json.dumps(details, ensure_ascii=False, default=str)


def record_activity(actor: Optional[Any], action: str, details: Any = None) -> Optional[ActivityLog]:
    """Record ``action`` performed by ``actor`` (a user, token identity or None)."""
    try:
        with get_store().write():
            return ActivityLog.objects.create(
                user_id=getattr(actor, 'id', None),
                username=getattr(actor, 'username', '') or '',
                action=action,
                details=_render(details),
            )
    except Exception:
        logger.exception("could not record activity %r for user %s", action, getattr(actor, 'id', None))
        return None
