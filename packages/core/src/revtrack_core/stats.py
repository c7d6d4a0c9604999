"""Task statistics, recomputed from a full scan on every call."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

from revtrack_store.models import TaskStatus
from revtrack_store.tasks import TaskStore


@dataclass
class TaskStats:
    total: int = 0
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    cancelled: int = 0
    by_severity: Counter[str] = field(default_factory=Counter)
    by_file: Counter[str] = field(default_factory=Counter)

    @property
    def open(self) -> int:
        return self.pending + self.in_progress


def task_stats(store: TaskStore) -> TaskStats:
    stats = TaskStats()
    for task in store.list_tasks(limit=None):
        stats.total += 1
        if task.status is TaskStatus.PENDING:
            stats.pending += 1
        elif task.status is TaskStatus.IN_PROGRESS:
            stats.in_progress += 1
        elif task.status is TaskStatus.COMPLETED:
            stats.completed += 1
        elif task.status is TaskStatus.CANCELLED:
            stats.cancelled += 1
        stats.by_severity[task.severity.value] += 1
        if task.file:
            stats.by_file[task.file] += 1
    return stats
