"""Tests for task statistics."""

from __future__ import annotations

from revtrack_core.stats import task_stats
from revtrack_store.models import Severity, Task, TaskStatus
from revtrack_store.tasks import TaskStore


def _add(store, status, severity=Severity.IMPROVEMENT, file=None):
    store.create(Task(title="t", description="d", status=status, severity=severity, file=file))


def test_empty_store():
    # A store pointing at a directory that does not exist yet.
    stats = task_stats(TaskStore("/nonexistent/revtrack-test-data"))
    assert stats.total == 0
    assert stats.open == 0


def test_counts_by_status(tmp_path):
    store = TaskStore(tmp_path)
    _add(store, TaskStatus.PENDING)
    _add(store, TaskStatus.PENDING)
    _add(store, TaskStatus.IN_PROGRESS)
    _add(store, TaskStatus.COMPLETED)
    _add(store, TaskStatus.CANCELLED)

    stats = task_stats(store)

    assert (stats.total, stats.pending, stats.in_progress, stats.completed, stats.cancelled) == (5, 2, 1, 1, 1)
    assert stats.open == 3


def test_counts_beyond_default_list_limit(tmp_path):
    store = TaskStore(tmp_path)
    for _ in range(25):
        _add(store, TaskStatus.PENDING)
    assert task_stats(store).total == 25


def test_severity_and_file_breakdown(tmp_path):
    store = TaskStore(tmp_path)
    _add(store, TaskStatus.PENDING, Severity.REQUIRED, "a.py")
    _add(store, TaskStatus.PENDING, Severity.REQUIRED, "a.py")
    _add(store, TaskStatus.PENDING, Severity.SUGGESTION, "b.py")
    _add(store, TaskStatus.PENDING, Severity.SUGGESTION)

    stats = task_stats(store)

    assert stats.by_severity["required"] == 2
    assert stats.by_severity["suggestion"] == 2
    assert stats.by_file.most_common(1) == [("a.py", 2)]
    assert sum(stats.by_file.values()) == 3


def test_reflects_changes_immediately(tmp_path):
    store = TaskStore(tmp_path)
    _add(store, TaskStatus.PENDING)
    assert task_stats(store).pending == 1

    task = store.list_tasks()[0]
    store.update_status(task.id, TaskStatus.CANCELLED)

    stats = task_stats(store)
    assert stats.pending == 0
    assert stats.cancelled == 1
