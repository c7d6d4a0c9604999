"""Record identifiers and timestamps.

Identifiers look like ``task_2026-10-17T13-38-00-123Z_a1b2c3``: an entity
prefix, a millisecond UTC timestamp with ``:`` and ``.`` replaced so the id
is a safe file name, and three random bytes so two records created in the
same millisecond do not collide. Because the timestamp is fixed-width,
sorting ids as strings approximates sorting by creation time.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone

REVIEW_PREFIX = "rev"
TASK_PREFIX = "task"


def now_iso() -> str:
    """Current UTC time as ISO-8601 with a fixed microsecond field."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def later_than(previous: str | None) -> str:
    """Return now_iso(), nudged forward so it sorts strictly after ``previous``."""
    stamp = now_iso()
    if not previous or stamp > previous:
        return stamp
    try:
        bumped = datetime.fromisoformat(previous) + timedelta(microseconds=1)
    except ValueError:
        return stamp
    return bumped.astimezone(timezone.utc).isoformat(timespec="microseconds")


def new_id(prefix: str) -> str:
    stamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    stamp = stamp.replace(":", "-").replace(".", "-")
    return f"{prefix}_{stamp}_{secrets.token_hex(3)}"
