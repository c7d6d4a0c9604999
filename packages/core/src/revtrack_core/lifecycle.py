"""Task lifecycle: pending -> in_progress -> completed, with cancelled on the side.

Execute and Complete are guarded transitions. Repeating either on a task
that is already completed is a no-op that reports ``already_done`` rather
than an error. set_task_status() is the unguarded escape hatch used for
manual corrections such as reviving a cancelled task.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from revtrack_store.ids import now_iso
from revtrack_store.models import Task, TaskStatus
from revtrack_store.tasks import TaskStore

logger = logging.getLogger(__name__)


class LifecycleError(Exception):
    """A lifecycle precondition failed. ``guidance`` tells the caller what to do instead."""

    def __init__(self, task: Task, message: str, guidance: str):
        self.task = task
        self.guidance = guidance
        super().__init__(message)


class InvalidTransition(LifecycleError):
    def __init__(self, task: Task, action: str, guidance: str):
        self.action = action
        super().__init__(task, f"Cannot {action} task {task.id} while it is {task.status.value}", guidance)


class InvalidState(LifecycleError):
    def __init__(self, task: Task, expected: TaskStatus, guidance: str):
        self.expected = expected
        super().__init__(
            task,
            f"Task {task.id} is {task.status.value}; this needs it to be {expected.value}",
            guidance,
        )


@dataclass
class TransitionResult:
    task: Task
    changed: bool = True

    @property
    def already_done(self) -> bool:
        return not self.changed and self.task.status is TaskStatus.COMPLETED


# Guarded transitions: action -> statuses it may start from.
EXECUTABLE_FROM = frozenset({TaskStatus.PENDING, TaskStatus.IN_PROGRESS})
COMPLETABLE_FROM = frozenset({TaskStatus.IN_PROGRESS})


def execute_task(store: TaskStore, task_id: str) -> TransitionResult:
    """Start work on a task (or re-enter one already in progress)."""
    task = store.get(task_id)

    if task.status is TaskStatus.COMPLETED:
        return TransitionResult(task, changed=False)

    if task.status not in EXECUTABLE_FROM:
        raise InvalidTransition(
            task,
            "execute",
            f"Task {task.id} is cancelled. Set its status back to pending before executing it.",
        )

    updated = store.update_status(task_id, TaskStatus.IN_PROGRESS)
    logger.info("Task %s: %s -> in_progress", task_id, task.status.value)
    return TransitionResult(updated)


def complete_task(store: TaskStore, task_id: str, verification_note: str | None = None) -> TransitionResult:
    """Mark an in-progress task done, stamping ``completed_at`` exactly once."""
    task = store.get(task_id)

    if task.status is TaskStatus.COMPLETED:
        return TransitionResult(task, changed=False)

    if task.status not in COMPLETABLE_FROM:
        if task.status is TaskStatus.CANCELLED:
            guidance = f"Task {task.id} is cancelled. Set its status back to pending and execute it first."
        else:
            guidance = f"Execute task {task.id} before completing it."
        raise InvalidTransition(task, "complete", guidance)

    updated = store.update_status(
        task_id,
        TaskStatus.COMPLETED,
        completed_at=now_iso(),
        verification_note=verification_note,
    )
    logger.info("Task %s: in_progress -> completed", task_id)
    return TransitionResult(updated)


def verify_task(store: TaskStore, task_id: str) -> Task:
    """Read-only check that a task is ready for verification; returns it unchanged."""
    task = store.get(task_id)
    if task.status is not TaskStatus.IN_PROGRESS:
        raise InvalidState(
            task,
            TaskStatus.IN_PROGRESS,
            "Only tasks in progress can be verified. Execute the task first, "
            "or look it up to see its current state.",
        )
    return task


def set_task_status(store: TaskStore, task_id: str, status: TaskStatus | str) -> Task:
    """Force ``status`` with no guard.

    Forcing ``completed`` stamps ``completed_at`` if the task has none.
    Leaving ``completed`` keeps the old completion metadata.
    """
    status = TaskStatus(status)
    completed_at = None
    if status is TaskStatus.COMPLETED:
        current = store.get(task_id)
        if current.completed_at is None:
            completed_at = now_iso()
    updated = store.update_status(task_id, status, completed_at=completed_at)
    logger.info("Task %s: status forced to %s", task_id, status.value)
    return updated
