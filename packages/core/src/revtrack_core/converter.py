"""Expand a saved review's findings into tasks."""

from __future__ import annotations

import logging

from revtrack_store.models import Finding, Review, Task, TaskStatus
from revtrack_store.reviews import ReviewStore
from revtrack_store.tasks import TaskStore

logger = logging.getLogger(__name__)


def finding_to_task(review: Review, index: int, finding: Finding) -> Task:
    """Build the unsaved task for ``review.findings[index]``."""
    return Task(
        status=TaskStatus.PENDING,
        source_review_id=review.id,
        source_finding_index=index,
        title=finding.title,
        description=finding.detail,
        severity=finding.severity,
        category=finding.category.value if finding.category is not None else None,
        file=finding.file,
        start_line=finding.start_line,
        end_line=finding.end_line,
        suggestion_patch_diff=finding.suggestion_patch_diff,
    )


def tasks_from_review(reviews: ReviewStore, tasks: TaskStore, review_id: str) -> list[Task]:
    """Create one pending task per finding, in finding order.

    A review without findings yields [] and writes nothing. Calling this
    twice for the same review creates a second, independent set of tasks:
    nothing deduplicates on (source_review_id, source_finding_index).
    """
    review = reviews.get(review_id)
    created = [tasks.create(finding_to_task(review, i, f)) for i, f in enumerate(review.findings)]
    if created:
        logger.info("Created %d task(s) from review %s", len(created), review_id)
    else:
        logger.debug("Review %s has no findings; no tasks created", review_id)
    return created
