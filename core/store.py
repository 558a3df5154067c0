"""
Persistent store adapter.

Every mutation in the clinic backend goes through :meth:`Store.write`,
which holds a process-wide lock and opens a transaction, so that writes
are applied one at a time regardless of how many worker threads the
server runs.  Reads are not locked.

Besides the ORM, the adapter exposes a small raw SQL surface
(``execute``, ``fetch_one``, ``fetch_all``, ``batch``) used by the
reporting endpoints and the health probe, plus ``a``-prefixed awaitable
variants for async callers such as the WebSocket consumer.
"""
from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, Sequence

from asgiref.sync import sync_to_async
from django.apps import apps
from django.db import DEFAULT_DB_ALIAS, connections, transaction

logger = logging.getLogger(__name__)

Params = Sequence[Any] | None


class Store:
    def __init__(self, alias: str = DEFAULT_DB_ALIAS):
        self.alias = alias
        self._lock = threading.RLock()

    @property
    def connection(self):
        return connections[self.alias]

    @contextmanager
    def write(self) -> Iterator['Store']:
        """Serialize a unit of work: one writer at a time, all or nothing."""
        with self._lock:
            with transaction.atomic(using=self.alias):
                yield self

    # ------------------------------------------------------------------
    # Raw SQL
    # ------------------------------------------------------------------
    def execute(self, sql: str, params: Params = None) -> int:
        """Run a single write statement and return the affected row count."""
        with self.write():
            with self.connection.cursor() as cursor:
                cursor.execute(sql, params or ())
                return cursor.rowcount

    def batch(self, statements: Iterable[tuple[str, Params]]) -> list[int]:
        """Run several write statements in one serialized transaction."""
        counts: list[int] = []
        with self.write():
            with self.connection.cursor() as cursor:
                for sql, params in statements:
                    cursor.execute(sql, params or ())
                    counts.append(cursor.rowcount)
        return counts

    def fetch_one(self, sql: str, params: Params = None) -> dict[str, Any] | None:
        with self.connection.cursor() as cursor:
            cursor.execute(sql, params or ())
            row = cursor.fetchone()
            if row is None:
                return None
            columns = [col[0] for col in cursor.description]
            return dict(zip(columns, row))

    def fetch_all(self, sql: str, params: Params = None) -> list[dict[str, Any]]:
        with self.connection.cursor() as cursor:
            cursor.execute(sql, params or ())
            columns = [col[0] for col in cursor.description]
            return [dict(zip(columns, row)) for row in cursor.fetchall()]

    def ping(self) -> bool:
        row = self.fetch_one('SELECT 1 AS ok')
        return bool(row and row['ok'] == 1)

    # ------------------------------------------------------------------
    # Async variants
    # ------------------------------------------------------------------
    async def aexecute(self, sql: str, params: Params = None) -> int:
        return await sync_to_async(self.execute, thread_sensitive=True)(sql, params)

    async def abatch(self, statements: Iterable[tuple[str, Params]]) -> list[int]:
        return await sync_to_async(self.batch, thread_sensitive=True)(list(statements))

    async def afetch_one(self, sql: str, params: Params = None) -> dict[str, Any] | None:
        return await sync_to_async(self.fetch_one, thread_sensitive=True)(sql, params)

    async def afetch_all(self, sql: str, params: Params = None) -> list[dict[str, Any]]:
        return await sync_to_async(self.fetch_all, thread_sensitive=True)(sql, params)

    async def aping(self) -> bool:
        return await sync_to_async(self.ping, thread_sensitive=True)()

    def close(self) -> None:
        with self._lock:
            self.connection.close()
        logger.debug("store connection %s closed", self.alias)


def get_store() -> Store:
    store = apps.get_app_config('core').store
    if store is None:
        raise RuntimeError("core store is not running")
    return store
