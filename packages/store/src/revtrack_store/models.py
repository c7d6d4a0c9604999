"""Review and task data models.

Decoupled from revtrack_core so the store layer can be used independently.
The ``*_to_dict`` / ``*_from_dict`` helpers define the on-disk JSON shape;
``*_from_dict`` raises ValueError on anything that is not a valid record.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Iterator


class Severity(str, Enum):
    """Evaluation label, mildest first. NEEDS_CONFIRMATION sits outside the scale."""

    SUGGESTION = "suggestion"
    RECOMMENDATION = "recommendation"
    IMPROVEMENT = "improvement"
    REQUIRED = "required"
    NEEDS_CONFIRMATION = "needs_confirmation"


class Category(str, Enum):
    """Quality dimensions, declared in canonical report order."""

    READABILITY = "readability"
    PREDICTABILITY = "predictability"
    COHESION = "cohesion"
    COUPLING = "coupling"
    MICRO_PERSPECTIVE = "micro_perspective"
    INTENT_CLARITY = "intent_clarity"


class Risk(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass
class Finding:
    """One issue inside a review. Addressed only by its index in ``Review.findings``."""

    severity: Severity
    title: str
    detail: str
    category: Category | None = None
    file: str | None = None
    start_line: int | None = None
    end_line: int | None = None
    suggestion_patch_diff: str | None = None


@dataclass
class CriteriaFeedbackItem:
    label: Severity | None = None
    improve: list[str] = field(default_factory=list)


@dataclass
class CriteriaFeedback:
    """Per-dimension feedback. One slot per Category, so the key set is closed."""

    readability: CriteriaFeedbackItem | None = None
    predictability: CriteriaFeedbackItem | None = None
    cohesion: CriteriaFeedbackItem | None = None
    coupling: CriteriaFeedbackItem | None = None
    micro_perspective: CriteriaFeedbackItem | None = None
    intent_clarity: CriteriaFeedbackItem | None = None

    def items(self) -> Iterator[tuple[Category, CriteriaFeedbackItem]]:
        """Yield (dimension, item) in canonical order, skipping empty slots."""
        for category in Category:
            item = getattr(self, category.value)
            if item is not None:
                yield category, item


@dataclass
class ReviewTarget:
    base: str
    head: str


@dataclass
class Review:
    """A persisted review of one change.

    ``id`` and ``created_at`` are assigned by ReviewStore.save(); leave them
    empty when building a review to save.
    """

    target: ReviewTarget
    summary: str
    findings: list[Finding] = field(default_factory=list)
    risk: Risk | None = None
    criteria_feedback: CriteriaFeedback | None = None
    id: str = ""
    created_at: str = ""  # ISO-8601 UTC timestamp


@dataclass
class Task:
    """A unit of remediation work with its own lifecycle.

    ``source_review_id`` / ``source_finding_index`` are set together, and only
    for tasks produced from a review.
    """

    title: str
    description: str
    severity: Severity = Severity.IMPROVEMENT
    status: TaskStatus = TaskStatus.PENDING
    category: str | None = None
    file: str | None = None
    start_line: int | None = None
    end_line: int | None = None
    suggestion_patch_diff: str | None = None
    source_review_id: str | None = None
    source_finding_index: int | None = None
    completed_at: str | None = None
    verification_note: str | None = None
    id: str = ""
    created_at: str = ""
    updated_at: str = ""


# On-disk key for each Task/Finding attribute whose JSON name differs.
_LINE_KEYS = {"start_line": "startLine", "end_line": "endLine"}

TASK_FIELDS = frozenset(f.name for f in fields(Task))
STORE_ASSIGNED_FIELDS = frozenset({"id", "created_at", "updated_at"})


def _enum(cls, value, key: str):
    try:
        return cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in cls)
        raise ValueError(f"{key}: {value!r} is not one of {allowed}") from None


def _optional_enum(cls, value, key: str):
    return None if value is None else _enum(cls, value, key)


def _text(d: dict, key: str, *legacy: str, required: bool = True) -> str | None:
    # Records written by older releases carry localised keys such as summary_ko.
    for k in (key, *legacy):
        value = d.get(k)
        if value is not None:
            if not isinstance(value, str):
                raise ValueError(f"{key}: expected a string, got {type(value).__name__}")
            if required and not value.strip():
                raise ValueError(f"{key}: must not be empty")
            return value
    if required:
        raise ValueError(f"{key}: missing")
    return None


def _line(d: dict, key: str) -> int | None:
    value = d.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"{key}: expected a positive integer, got {value!r}")
    return value


def _drop_none(d: dict) -> dict:
    return {k: v for k, v in d.items() if v is not None}


def _value(member: Enum | None):
    return None if member is None else member.value


# ---------------------------------------------------------------------------
# Finding / criteria feedback
# ---------------------------------------------------------------------------


def finding_to_dict(finding: Finding) -> dict:
    return _drop_none(
        {
            "severity": finding.severity.value,
            "category": _value(finding.category),
            "file": finding.file,
            "startLine": finding.start_line,
            "endLine": finding.end_line,
            "title": finding.title,
            "detail": finding.detail,
            "suggestion_patch_diff": finding.suggestion_patch_diff,
        }
    )


def finding_from_dict(d: dict) -> Finding:
    if not isinstance(d, dict):
        raise ValueError(f"finding: expected an object, got {type(d).__name__}")
    return Finding(
        severity=_enum(Severity, d.get("severity"), "severity"),
        category=_optional_enum(Category, d.get("category"), "category"),
        file=d.get("file"),
        start_line=_line(d, "startLine"),
        end_line=_line(d, "endLine"),
        title=_text(d, "title", "title_ko"),
        detail=_text(d, "detail", "detail_ko"),
        suggestion_patch_diff=d.get("suggestion_patch_diff"),
    )


def criteria_feedback_to_dict(feedback: CriteriaFeedback) -> dict:
    return {
        category.value: _drop_none({"label": _value(item.label), "improve": list(item.improve)})
        for category, item in feedback.items()
    }


def criteria_feedback_from_dict(d: dict) -> CriteriaFeedback:
    if not isinstance(d, dict):
        raise ValueError("criteria_feedback: expected an object")
    slots: dict[str, CriteriaFeedbackItem] = {}
    for key, raw in d.items():
        category = _enum(Category, key, "criteria_feedback")
        if raw is None:
            continue
        if not isinstance(raw, dict):
            raise ValueError(f"criteria_feedback.{key}: expected an object")
        improve = raw.get("improve") or []
        if not isinstance(improve, list):
            raise ValueError(f"criteria_feedback.{key}.improve: expected a list")
        slots[category.value] = CriteriaFeedbackItem(
            label=_optional_enum(Severity, raw.get("label"), f"criteria_feedback.{key}.label"),
            improve=[str(note) for note in improve],
        )
    return CriteriaFeedback(**slots)


# ---------------------------------------------------------------------------
# Review
# ---------------------------------------------------------------------------


def review_to_dict(review: Review) -> dict:
    d: dict[str, Any] = {
        "id": review.id,
        "created_at": review.created_at,
        "target": {"base": review.target.base, "head": review.target.head},
        "summary": review.summary,
        "risk": _value(review.risk),
        "criteria_feedback": (
            criteria_feedback_to_dict(review.criteria_feedback) if review.criteria_feedback is not None else None
        ),
        "findings": [finding_to_dict(f) for f in review.findings],
    }
    return _drop_none(d)


def review_from_dict(d: dict) -> Review:
    """Build a Review from a stored record or a caller payload (id may be absent)."""
    if not isinstance(d, dict):
        raise ValueError(f"review: expected an object, got {type(d).__name__}")
    target = d.get("target")
    if not isinstance(target, dict):
        raise ValueError("target: expected an object with base and head")
    findings = d.get("findings") or []
    if not isinstance(findings, list):
        raise ValueError("findings: expected a list")
    feedback = d.get("criteria_feedback")
    return Review(
        id=d.get("id", ""),
        created_at=d.get("created_at", ""),
        target=ReviewTarget(base=_text(target, "base"), head=_text(target, "head")),
        summary=_text(d, "summary", "summary_ko"),
        risk=_optional_enum(Risk, d.get("risk"), "risk"),
        criteria_feedback=criteria_feedback_from_dict(feedback) if feedback is not None else None,
        findings=[finding_from_dict(f) for f in findings],
    )


# ---------------------------------------------------------------------------
# Task
# ---------------------------------------------------------------------------


def task_field_to_json(name: str, value):
    """Map one Task attribute to its (json_key, json_value) pair."""
    if isinstance(value, Enum):
        value = value.value
    return _LINE_KEYS.get(name, name), value


def task_to_dict(task: Task) -> dict:
    return _drop_none(dict(task_field_to_json(f.name, getattr(task, f.name)) for f in fields(Task)))


def task_from_dict(d: dict) -> Task:
    if not isinstance(d, dict):
        raise ValueError(f"task: expected an object, got {type(d).__name__}")
    index = d.get("source_finding_index")
    if index is not None and (isinstance(index, bool) or not isinstance(index, int) or index < 0):
        raise ValueError(f"source_finding_index: expected a non-negative integer, got {index!r}")
    return Task(
        id=d.get("id", ""),
        created_at=d.get("created_at", ""),
        updated_at=d.get("updated_at", ""),
        status=_enum(TaskStatus, d.get("status", TaskStatus.PENDING.value), "status"),
        title=_text(d, "title"),
        description=_text(d, "description"),
        severity=_enum(Severity, d.get("severity", Severity.IMPROVEMENT.value), "severity"),
        category=d.get("category"),
        file=d.get("file"),
        start_line=_line(d, "startLine"),
        end_line=_line(d, "endLine"),
        suggestion_patch_diff=d.get("suggestion_patch_diff"),
        source_review_id=d.get("source_review_id"),
        source_finding_index=index,
        completed_at=d.get("completed_at"),
        verification_note=d.get("verification_note"),
    )
