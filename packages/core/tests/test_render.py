"""Tests for markdown rendering."""

from __future__ import annotations

import pytest

from revtrack_core import render
from revtrack_core.stats import TaskStats
from revtrack_store.models import (
    Category,
    CriteriaFeedback,
    CriteriaFeedbackItem,
    Finding,
    Review,
    ReviewTarget,
    Risk,
    Severity,
    Task,
    TaskStatus,
)
from revtrack_store.reviews import ReviewStore


def _review(findings=None, **kwargs):
    return Review(
        id="rev_2026-01-01T09-00-00-000Z_abc123",
        created_at="2026-01-01T09:00:00.000000+00:00",
        target=ReviewTarget(base="origin/main", head="HEAD"),
        summary="Looks mostly fine.",
        findings=findings or [],
        **kwargs,
    )


def _task(**kwargs):
    defaults = dict(
        id="task_2026-01-01T09-00-00-000Z_abc123",
        created_at="2026-01-01T09:00:00.000000+00:00",
        updated_at="2026-01-01T09:00:00.000000+00:00",
        title="Guard against None",
        description="user can be None here",
        severity=Severity.REQUIRED,
    )
    defaults.update(kwargs)
    return Task(**defaults)


# ---------------------------------------------------------------------------
# normalize_patch / format_location
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "raw",
    [
        "```diff\n-a\n+b\n```",
        "```DIFF\n-a\n+b\n```\n",
        "  ```diff  \n-a\n+b\n```  ",
        "-a\n+b",
        "\n-a\n+b\n\n",
    ],
)
def test_normalize_patch_strips_fences(raw):
    assert render.normalize_patch(raw) == "-a\n+b"


def test_normalize_patch_removes_one_fence_only():
    assert render.normalize_patch("```diff\n```diff\nx\n```\n```") == "```diff\nx\n```"


@pytest.mark.parametrize(
    "args, expected",
    [
        ((None, 3, 4), None),
        (("a.py", None, None), "a.py"),
        (("a.py", 3, None), "a.py:3"),
        (("a.py", 3, 3), "a.py:3"),
        (("a.py", 3, 8), "a.py:3-8"),
        (("a.py", None, 8), "a.py:-8"),
    ],
)
def test_format_location(args, expected):
    assert render.format_location(*args) == expected


# ---------------------------------------------------------------------------
# review_to_markdown
# ---------------------------------------------------------------------------


class TestReviewMarkdown:
    def test_header_and_summary(self):
        md = render.review_to_markdown(_review(risk=Risk.HIGH))
        assert md.startswith("# Code review (rev_2026-01-01T09-00-00-000Z_abc123)")
        assert "`origin/main...HEAD`" in md
        assert "- Risk: **high**" in md
        assert "## Summary\n\nLooks mostly fine." in md

    def test_no_findings(self):
        md = render.review_to_markdown(_review())
        assert md.endswith("## Findings\n\n- (none)")
        assert "## Details" not in md

    def test_criteria_in_canonical_order_and_omitted_dimensions_skipped(self):
        feedback = CriteriaFeedback(
            intent_clarity=CriteriaFeedbackItem(label=Severity.SUGGESTION, improve=["name the flag"]),
            readability=CriteriaFeedbackItem(improve=["shorter function"]),
            coupling=CriteriaFeedbackItem(label=Severity.REQUIRED),
        )
        md = render.review_to_markdown(_review(criteria_feedback=feedback))

        assert "## Feedback by quality dimension" in md
        positions = [md.index("### Readability"), md.index("### Coupling"), md.index("### Intent clarity")]
        assert positions == sorted(positions)
        assert "### Coupling [Required]\n\n- (no notes)" in md
        assert "### Intent clarity [Suggestion]\n\n- name the flag" in md
        assert "Predictability" not in md
        assert "Cohesion" not in md

    def test_empty_feedback_has_no_section(self):
        md = render.review_to_markdown(_review(criteria_feedback=CriteriaFeedback()))
        assert "quality dimension" not in md

    def test_findings_table_totals_and_details(self):
        findings = [
            Finding(
                severity=Severity.REQUIRED,
                title="Possible None",
                detail="user may be None",
                category=Category.PREDICTABILITY,
                file="src/app/users.py",
                start_line=10,
                end_line=12,
                suggestion_patch_diff="```diff\n-x\n+y\n```",
            ),
            Finding(severity=Severity.SUGGESTION, title="Rename var", detail="call it count"),
        ]
        md = render.review_to_markdown(_review(findings=findings))

        assert "> **2** finding(s) (Required: 1 | Improvement: 0 | Recommendation: 0 | Suggestion: 1" in md
        assert "suggested patches: 1" in md
        assert "| **Required** | `users.py` | Possible None |" in md
        assert "| **Suggestion** | `-` | Rename var |" in md
        assert "### 1. [Required] Possible None" in md
        assert "- **Location**: `src/app/users.py:10-12`" in md
        assert "- **Category**: Predictability" in md
        assert "```diff\n-x\n+y\n```" in md
        assert "### 2. [Suggestion] Rename var" in md
        assert "- **Location**: `(no file)`" in md
        assert "**Suggested patch:** none, review manually." in md

    def test_findings_rendered_in_stored_order(self):
        findings = [
            Finding(severity=Severity.SUGGESTION, title="first", detail="d"),
            Finding(severity=Severity.REQUIRED, title="second", detail="d"),
        ]
        md = render.review_to_markdown(_review(findings=findings))
        assert md.index("### 1. [Suggestion] first") < md.index("### 2. [Required] second")

    def test_rendering_does_not_touch_the_store(self, tmp_path):
        store = ReviewStore(tmp_path)
        saved = store.save(_review(findings=[Finding(severity=Severity.REQUIRED, title="t", detail="d")]))
        path = tmp_path / "reviews" / f"{saved.id}.json"
        before = path.read_bytes()

        render.review_to_markdown(store.get(saved.id))

        assert path.read_bytes() == before
        assert sorted(p.name for p in (tmp_path / "reviews").iterdir()) == [f"{saved.id}.json"]


def test_review_index_line():
    line = render.review_index_line(_review(findings=[Finding(Severity.REQUIRED, "t", "d")], risk=Risk.LOW))
    assert line == (
        "- rev_2026-01-01T09-00-00-000Z_abc123 | 2026-01-01T09:00:00.000000+00:00"
        " | origin/main...HEAD | findings=1 | risk=low"
    )


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


class TestTaskMarkdown:
    def test_full_task(self):
        md = render.task_to_markdown(
            _task(
                category="readability",
                file="a.py",
                start_line=3,
                end_line=5,
                source_review_id="rev_x",
                source_finding_index=1,
                suggestion_patch_diff="```diff\n-a\n+b\n```",
                status=TaskStatus.COMPLETED,
                completed_at="2026-01-02T00:00:00.000000+00:00",
                verification_note="tests pass",
            )
        )
        assert md.startswith("# Task: Guard against None")
        assert "- **Status**: completed" in md
        assert "- **Severity**: Required" in md
        assert "- **Category**: Readability" in md
        assert "- **Location**: `a.py:3-5`" in md
        assert "- **Source review**: rev_x (finding #2)" in md
        assert "## Suggested patch\n\n```diff\n-a\n+b\n```" in md
        assert "- **Verification note**: tests pass" in md

    def test_free_form_category_shown_as_is(self):
        assert "- **Category**: security" in render.task_to_markdown(_task(category="security"))

    def test_minimal_task_omits_optional_sections(self):
        md = render.task_to_markdown(_task())
        assert "Location" not in md
        assert "Suggested patch" not in md
        assert "Completion" not in md


def test_task_index_with_stats():
    tasks = [
        _task(file="a.py", start_line=4),
        _task(id="task_b", title="Other", status=TaskStatus.IN_PROGRESS, severity=Severity.SUGGESTION),
    ]
    stats = TaskStats(total=2, pending=1, in_progress=1)

    out = render.task_index(tasks, stats, title="Tasks (all)")

    assert out.startswith("# Tasks (all)")
    assert "Stats: total=2 | pending=1 | in_progress=1 | completed=0 | cancelled=0" in out
    assert "[ ] [required] **task_2026-01-01T09-00-00-000Z_abc123**" in out
    assert "    Guard against None @ a.py:4" in out
    assert "[~] [suggestion] **task_b**" in out


def test_execution_guide_includes_patch_and_next_steps():
    out = render.execution_guide(_task(suggestion_patch_diff="-a\n+b", file="a.py"))
    assert out.startswith("Started task task_2026-01-01T09-00-00-000Z_abc123")
    assert "```diff\n-a\n+b\n```" in out
    assert "`task verify`" in out
    assert "`task complete`" in out


def test_verification_checklist():
    out = render.verification_checklist(_task(file="a.py", start_line=2))
    assert "### Original request\n\nuser can be None here" in out
    assert "`a.py:2`" in out
    assert "1. [ ] Does the change address the request?" in out


def test_completion_summary_with_remaining_counts():
    task = _task(status=TaskStatus.COMPLETED, completed_at="2026-01-02T00:00:00.000000+00:00", verification_note="ok")
    out = render.completion_summary(task, TaskStats(total=3, pending=1, in_progress=1, completed=1))
    assert "- Completed: 2026-01-02T00:00:00.000000+00:00" in out
    assert "- Verification note: ok" in out
    assert "Remaining: pending=1, in_progress=1" in out
