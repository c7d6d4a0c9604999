"""Markdown reports for reviews and tasks.

Every function here is a pure projection: it never touches the store.
Findings are rendered in stored order; callers pre-sort if they want
severity order.
"""

from __future__ import annotations

import re
from typing import Iterable

from revtrack_store.models import Category, Finding, Review, Severity, Task, TaskStatus

SEVERITY_LABELS = {
    Severity.SUGGESTION: "Suggestion",
    Severity.RECOMMENDATION: "Recommendation",
    Severity.IMPROVEMENT: "Improvement",
    Severity.REQUIRED: "Required",
    Severity.NEEDS_CONFIRMATION: "Needs confirmation",
}

CATEGORY_LABELS = {
    Category.READABILITY: "Readability",
    Category.PREDICTABILITY: "Predictability",
    Category.COHESION: "Cohesion",
    Category.COUPLING: "Coupling",
    Category.MICRO_PERSPECTIVE: "Micro perspective",
    Category.INTENT_CLARITY: "Intent clarity",
}

STATUS_MARKERS = {
    TaskStatus.PENDING: "[ ]",
    TaskStatus.IN_PROGRESS: "[~]",
    TaskStatus.COMPLETED: "[x]",
    TaskStatus.CANCELLED: "[-]",
}

# Most severe first; needs_confirmation is off the scale and goes last.
SEVERITY_DISPLAY_ORDER = (
    Severity.REQUIRED,
    Severity.IMPROVEMENT,
    Severity.RECOMMENDATION,
    Severity.SUGGESTION,
    Severity.NEEDS_CONFIRMATION,
)

_OPENING_FENCE = re.compile(r"^\s*```diff[ \t]*\n?", re.IGNORECASE)
_CLOSING_FENCE = re.compile(r"\n?```\s*$")


def normalize_patch(patch: str) -> str:
    """Strip one leading ```diff fence and one trailing ``` fence, if present."""
    patch = _OPENING_FENCE.sub("", patch, count=1)
    patch = _CLOSING_FENCE.sub("", patch, count=1)
    return patch.strip()


def _patch_block(patch: str) -> list[str]:
    return ["```diff", normalize_patch(patch), "```"]


def _category_label(category: str | Category | None) -> str | None:
    if category is None:
        return None
    try:
        return CATEGORY_LABELS[Category(category)]
    except ValueError:
        # Manually created tasks may carry free-form categories.
        return str(category)


def format_location(file: str | None, start_line: int | None, end_line: int | None) -> str | None:
    """``path``, ``path:12``, ``path:12-18`` or ``path:-18``; None when there is no file."""
    if not file:
        return None
    if start_line is None:
        return f"{file}:-{end_line}" if end_line is not None else file
    if end_line is not None and end_line != start_line:
        return f"{file}:{start_line}-{end_line}"
    return f"{file}:{start_line}"


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------


def _finding_totals(findings: list[Finding]) -> str:
    counts = {s: 0 for s in SEVERITY_DISPLAY_ORDER}
    for f in findings:
        counts[f.severity] += 1
    parts = " | ".join(f"{SEVERITY_LABELS[s]}: {counts[s]}" for s in SEVERITY_DISPLAY_ORDER)
    with_patch = sum(1 for f in findings if f.suggestion_patch_diff)
    return f"> **{len(findings)}** finding(s) ({parts}) · suggested patches: {with_patch}"


def _finding_section(index: int, finding: Finding) -> list[str]:
    where = format_location(finding.file, finding.start_line, finding.end_line) or "(no file)"
    lines = [
        f"### {index + 1}. [{SEVERITY_LABELS[finding.severity]}] {finding.title}",
        "",
        f"- **Location**: `{where}`",
    ]
    category = _category_label(finding.category)
    if category:
        lines.append(f"- **Category**: {category}")
    lines += ["", "**Description:**", "", finding.detail.strip(), ""]
    if finding.suggestion_patch_diff:
        lines += ["**Suggested patch:**", "", *_patch_block(finding.suggestion_patch_diff)]
    else:
        lines.append("**Suggested patch:** none, review manually.")
    lines += ["", "---", ""]
    return lines


def review_to_markdown(review: Review) -> str:
    lines = [
        f"# Code review ({review.id})",
        "",
        f"- Created: {review.created_at}",
        f"- Target: `{review.target.base}...{review.target.head}`",
    ]
    if review.risk is not None:
        lines.append(f"- Risk: **{review.risk.value}**")
    lines += ["", "## Summary", "", review.summary.strip(), ""]

    if review.criteria_feedback is not None:
        sections = list(review.criteria_feedback.items())
        if sections:
            lines += ["## Feedback by quality dimension", ""]
        for category, item in sections:
            label = f" [{SEVERITY_LABELS[item.label]}]" if item.label is not None else ""
            lines += [f"### {CATEGORY_LABELS[category]}{label}", ""]
            if item.improve:
                lines += [f"- {note}" for note in item.improve]
            else:
                lines.append("- (no notes)")
            lines.append("")

    if not review.findings:
        lines += ["## Findings", "", "- (none)"]
        return "\n".join(lines)

    lines += ["## Findings", "", _finding_totals(review.findings), ""]
    lines.append("| Label | File | Issue |")
    lines.append("|-------|------|-------|")
    for f in review.findings:
        file_name = f.file.rsplit("/", 1)[-1] if f.file else "-"
        lines.append(f"| **{SEVERITY_LABELS[f.severity]}** | `{file_name}` | {f.title} |")
    lines += ["", "---", "", "## Details", ""]

    for index, finding in enumerate(review.findings):
        lines += _finding_section(index, finding)

    return "\n".join(lines)


def review_index_line(review: Review) -> str:
    line = (
        f"- {review.id} | {review.created_at} | {review.target.base}...{review.target.head}"
        f" | findings={len(review.findings)}"
    )
    if review.risk is not None:
        line += f" | risk={review.risk.value}"
    return line


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


def task_to_markdown(task: Task) -> str:
    lines = [
        f"# Task: {task.title}",
        "",
        f"- **ID**: {task.id}",
        f"- **Status**: {task.status.value}",
        f"- **Severity**: {SEVERITY_LABELS[task.severity]}",
    ]
    category = _category_label(task.category)
    if category:
        lines.append(f"- **Category**: {category}")
    location = format_location(task.file, task.start_line, task.end_line)
    if location:
        lines.append(f"- **Location**: `{location}`")
    lines.append(f"- **Created**: {task.created_at}")
    lines.append(f"- **Updated**: {task.updated_at}")
    if task.source_review_id:
        lines.append(f"- **Source review**: {task.source_review_id} (finding #{(task.source_finding_index or 0) + 1})")
    lines += ["", "## Description", "", task.description, ""]

    if task.suggestion_patch_diff:
        lines += ["## Suggested patch", "", *_patch_block(task.suggestion_patch_diff), ""]

    if task.completed_at:
        lines += ["## Completion", "", f"- **Completed**: {task.completed_at}"]
        if task.verification_note:
            lines.append(f"- **Verification note**: {task.verification_note}")
        lines.append("")

    return "\n".join(lines)


def stats_line(stats) -> str:
    return (
        f"Stats: total={stats.total} | pending={stats.pending} | in_progress={stats.in_progress}"
        f" | completed={stats.completed} | cancelled={stats.cancelled}"
    )


def task_index(tasks: Iterable[Task], stats=None, title: str = "Tasks") -> str:
    """One entry per task, as shown by task listings."""
    lines = [f"# {title}", ""]
    if stats is not None:
        lines += [stats_line(stats), ""]
    for t in tasks:
        location = format_location(t.file, t.start_line, None)
        where = f" @ {location}" if location else ""
        lines.append(f"{STATUS_MARKERS[t.status]} [{t.severity.value}] **{t.id}**")
        lines.append(f"    {t.title}{where}")
    return "\n".join(lines)


def execution_guide(task: Task) -> str:
    """Instructions shown when work on a task starts."""
    lines = [f"Started task {task.id}", "", "---", "", f"## {task.title}", ""]
    lines.append(f"**Severity**: {SEVERITY_LABELS[task.severity]}")
    category = _category_label(task.category)
    if category:
        lines.append(f"**Category**: {category}")
    location = format_location(task.file, task.start_line, task.end_line)
    if location:
        lines.append(f"**Location**: `{location}`")
    lines += ["", "### What to do", "", task.description, ""]
    if task.suggestion_patch_diff:
        lines += [
            "### Suggested patch",
            "",
            "Use the diff below as a reference:",
            "",
            *_patch_block(task.suggestion_patch_diff),
            "",
        ]
    lines += [
        "---",
        "",
        "### Next steps",
        "",
        "1. Change the code as described above.",
        "2. Run `task verify` to get the verification checklist.",
        "3. Run `task complete` once the change is verified.",
    ]
    return "\n".join(lines)


def verification_checklist(task: Task) -> str:
    lines = [f"Verification for task {task.id}", "", f"## {task.title}", "", "### Original request", ""]
    lines += [task.description, ""]
    location = format_location(task.file, task.start_line, task.end_line)
    if location:
        lines += ["### Target", "", f"`{location}`", ""]
    if task.suggestion_patch_diff:
        lines += ["### Suggested patch", "", *_patch_block(task.suggestion_patch_diff), ""]
    lines += [
        "---",
        "",
        "### Checklist",
        "",
        "1. [ ] Does the change address the request?",
        "2. [ ] Did it introduce new bugs?",
        "3. [ ] Does it follow the project's style and conventions?",
        "4. [ ] Were tests added where they are needed?",
        "",
        "Run `task complete` when verified; otherwise keep working and verify again.",
    ]
    return "\n".join(lines)


def completion_summary(task: Task, stats=None) -> str:
    lines = [f"Completed task {task.id}", "", f"- Title: {task.title}", f"- Completed: {task.completed_at}"]
    if task.verification_note:
        lines.append(f"- Verification note: {task.verification_note}")
    if stats is not None:
        lines += ["", f"Remaining: pending={stats.pending}, in_progress={stats.in_progress}"]
    return "\n".join(lines)
