"""Abstract record store interface.

A store holds one collection of records ("reviews" or "tasks") keyed by
identifier. ReviewStore and TaskStore depend on BaseStore, not on a
concrete backend, so the on-disk layout can be swapped for an indexed one
without touching the typed facades.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

DEFAULT_LIMIT = 20


class BaseStore(ABC):
    """Identifier-addressed persistence for plain-dict records.

    Every call goes to durable storage: there is no cache, so several
    processes may share a collection. Concurrent writes to the same id are
    last-writer-wins.
    """

    collection: str

    @abstractmethod
    def create(self, fields: dict) -> dict:
        """Assign an id and creation timestamps, persist, and return the full record."""

    @abstractmethod
    def get(self, record_id: str) -> dict:
        """Return the record or raise RecordNotFound."""

    @abstractmethod
    def update(self, record_id: str, fields: dict) -> dict:
        """Shallow-merge ``fields`` over the stored record and refresh ``updated_at``.

        ``id`` and ``created_at`` are rejected with ValueError.
        """

    @abstractmethod
    def list_records(self, status: str | None = None, limit: int | None = DEFAULT_LIMIT) -> list[dict]:
        """Return records newest-id-first, filtered on ``status`` before ``limit`` applies.

        ``limit=None`` scans the whole collection.
        """

    @abstractmethod
    def delete(self, record_id: str) -> None:
        """Remove the record or raise RecordNotFound (a second delete fails)."""

    def close(self) -> None:
        """Release any resources held by the store.

        Optional. The default is a no-op so callers can always call close() safely.
        """
