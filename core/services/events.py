from __future__ import annotations

from typing import Any

from core.realtime.broadcast import broadcast
from core.services.audit import record_activity


def publish_change(actor, action: str, event: str, payload: Any, details: Any = None) -> None:
    """Post-commit side effects of a mutation: one audit entry, then one event."""
    record_activity(actor, action, details)
    broadcast(event, payload)
