from __future__ import annotations

import logging

from django.apps import AppConfig
from django.conf import settings

logger = logging.getLogger(__name__)


class CoreConfig(AppConfig):
    """Application config owning the process-wide services.

    The store adapter and the event broadcaster are built once in
    :meth:`ready` and released by :meth:`shutdown`.  Request handlers reach
    them through ``core.store.get_store()`` and
    ``core.realtime.broadcast.get_broadcaster()``.
    """

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'core'
    verbose_name = 'Clinic'

    store = None
    broadcaster = None

    def ready(self) -> None:
        from core.realtime.broadcast import EventBroadcaster
        from core.store import Store

        self.store = Store()
        self.broadcaster = EventBroadcaster(group=settings.REALTIME_GROUP)
        logger.debug("core services ready (group=%s)", settings.REALTIME_GROUP)

    def shutdown(self) -> None:
        if self.broadcaster is not None:
            self.broadcaster.close()
            self.broadcaster = None
        if self.store is not None:
            self.store.close()
            self.store = None
        logger.info("core services stopped")
