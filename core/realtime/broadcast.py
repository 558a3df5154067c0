"""
Event broadcaster.

Publishes named state-change events to every connected dashboard through
the Channels layer.  One group carries all events; each consumer in it
forwards the message to its socket as ``{"event": name, "data": payload}``.

Publishing is fire-and-forget: failures are logged and never surface to
the request that triggered them.  Publish only after the write that the
event describes has committed.
"""
from __future__ import annotations

import json
import logging
from typing import Any

from asgiref.sync import async_to_sync
from channels.layers import DEFAULT_CHANNEL_LAYER, get_channel_layer
from django.apps import apps
from django.core.serializers.json import DjangoJSONEncoder

logger = logging.getLogger(__name__)

MESSAGE_TYPE = 'clinic.event'


def normalize(payload: Any) -> Any:
    """Round-trip through JSON so dates and decimals survive any layer backend."""
    return json.loads(json.dumps(payload, cls=DjangoJSONEncoder))


class EventBroadcaster:
    def __init__(self, group: str, alias: str = DEFAULT_CHANNEL_LAYER):
        self.group = group
        self.alias = alias

    def message(self, event: str, payload: Any = None, **extra: Any) -> dict:
        return {'type': MESSAGE_TYPE, 'event': event, 'data': normalize(payload or {}), **extra}

    def publish(self, event: str, payload: Any = None) -> bool:
        try:
            layer = get_channel_layer(self.alias)
            if layer is None:
                logger.debug("no channel layer configured, dropping %s", event)
                return False
            async_to_sync(layer.group_send)(self.group, self.message(event, payload))
        except Exception:
            logger.exception("broadcast of %s failed", event)
            return False
        return True

    async def apublish(self, event: str, payload: Any = None, **extra: Any) -> bool:
        try:
            layer = get_channel_layer(self.alias)
            if layer is None:
                return False
            await layer.group_send(self.group, self.message(event, payload, **extra))
        except Exception:
            logger.exception("broadcast of %s failed", event)
            return False
        return True

    def close(self) -> None:
        layer = get_channel_layer(self.alias)
        close_pools = getattr(layer, 'close_pools', None)
        if close_pools is not None:
            try:
                async_to_sync(close_pools)()
            except Exception:
                logger.exception("closing channel layer %s failed", self.alias)


def get_broadcaster() -> EventBroadcaster:
    broadcaster = apps.get_app_config('core').broadcaster
    if broadcaster is None:
        raise RuntimeError("event broadcaster is not running")
    return broadcaster


def broadcast(event: str, payload: Any = None) -> bool:
    try:
        broadcaster = get_broadcaster()
    except RuntimeError:
        logger.warning("broadcaster stopped, dropping %s", event)
        return False
    return broadcaster.publish(event, payload)
