"""TaskStore: typed access to the "tasks" collection."""

from __future__ import annotations

from pathlib import Path

from revtrack_store.base import DEFAULT_LIMIT, BaseStore
from revtrack_store.errors import MalformedRecord
from revtrack_store.filesystem import FileRecordStore
from revtrack_store.ids import TASK_PREFIX
from revtrack_store.models import (
    STORE_ASSIGNED_FIELDS,
    TASK_FIELDS,
    Severity,
    Task,
    TaskStatus,
    task_field_to_json,
    task_from_dict,
    task_to_dict,
)

COLLECTION = "tasks"
_REQUIRED_FIELDS = frozenset({"title", "description", "severity", "status"})


class TaskStore:
    def __init__(self, data_dir: str | Path, backend: BaseStore | None = None):
        self._store = backend or FileRecordStore(data_dir, COLLECTION, TASK_PREFIX)

    def create(self, task: Task) -> Task:
        """Persist a new task; ``id``, ``created_at`` and ``updated_at`` are assigned here."""
        fields = task_to_dict(task)
        return self._to_task(self._store.create(fields))

    def get(self, task_id: str) -> Task:
        return self._to_task(self._store.get(task_id))

    def update(self, task_id: str, **changes) -> Task:
        """Change only the given attributes, e.g. ``update(id, status=TaskStatus.CANCELLED)``.

        Passing ``None`` clears an optional attribute.
        """
        unknown = set(changes) - TASK_FIELDS
        if unknown:
            raise ValueError(f"Unknown task field(s): {', '.join(sorted(unknown))}")
        fixed = set(changes) & STORE_ASSIGNED_FIELDS
        if fixed:
            raise ValueError(f"Store-assigned field(s) cannot be updated: {', '.join(sorted(fixed))}")
        for name in _REQUIRED_FIELDS & set(changes):
            if changes[name] is None:
                raise ValueError(f"{name} cannot be cleared")
        if "status" in changes:
            changes["status"] = TaskStatus(changes["status"])
        if "severity" in changes:
            changes["severity"] = Severity(changes["severity"])
        fields = dict(task_field_to_json(name, value) for name, value in changes.items())
        return self._to_task(self._store.update(task_id, fields))

    def update_status(
        self,
        task_id: str,
        status: TaskStatus,
        completed_at: str | None = None,
        verification_note: str | None = None,
    ) -> Task:
        """Set ``status`` with no transition checks; completion fields are written only when given."""
        changes: dict = {"status": status}
        if completed_at is not None:
            changes["completed_at"] = completed_at
        if verification_note is not None:
            changes["verification_note"] = verification_note
        return self.update(task_id, **changes)

    def list_tasks(self, status: TaskStatus | None = None, limit: int | None = DEFAULT_LIMIT) -> list[Task]:
        """Return tasks newest first, optionally only those in ``status``."""
        status_value = status.value if status is not None else None
        return [self._to_task(d) for d in self._store.list_records(status=status_value, limit=limit)]

    def delete(self, task_id: str) -> None:
        self._store.delete(task_id)

    def close(self) -> None:
        self._store.close()

    @staticmethod
    def _to_task(d: dict) -> Task:
        try:
            return task_from_dict(d)
        except ValueError as e:
            raise MalformedRecord(f"{COLLECTION}/{d.get('id', '?')}", str(e)) from e
