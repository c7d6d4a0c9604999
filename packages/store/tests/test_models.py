"""Tests for record parsing and serialisation."""

from __future__ import annotations

import pytest

from revtrack_store.models import (
    Category,
    CriteriaFeedback,
    CriteriaFeedbackItem,
    Severity,
    Task,
    TaskStatus,
    finding_from_dict,
    review_from_dict,
    review_to_dict,
    task_from_dict,
    task_to_dict,
)


def _payload(**overrides):
    payload = {
        "target": {"base": "origin/main", "head": "HEAD"},
        "summary": "Adds retry logic",
        "findings": [
            {
                "severity": "required",
                "category": "coupling",
                "file": "src/net.py",
                "startLine": 10,
                "endLine": 12,
                "title": "Retry loop never ends",
                "detail": "No max attempts",
                "suggestion_patch_diff": "```diff\n-a\n+b\n```",
            }
        ],
    }
    payload.update(overrides)
    return payload


class TestReviewParsing:
    def test_full_payload(self):
        review = review_from_dict(_payload(risk="high"))
        finding = review.findings[0]

        assert review.id == ""
        assert review.risk.value == "high"
        assert finding.severity is Severity.REQUIRED
        assert finding.category is Category.COUPLING
        assert (finding.start_line, finding.end_line) == (10, 12)

    def test_findings_default_to_empty(self):
        payload = _payload()
        del payload["findings"]
        assert review_from_dict(payload).findings == []

    @pytest.mark.parametrize(
        "overrides",
        [
            {"summary": ""},
            {"summary": "   "},
            {"target": {"base": "main"}},
            {"target": {"base": "", "head": "HEAD"}},
            {"risk": "extreme"},
            {"findings": "not a list"},
            {"criteria_feedback": {"style": {"improve": []}}},
            {"criteria_feedback": {"readability": {"label": "bad"}}},
        ],
    )
    def test_invalid_payloads_raise_value_error(self, overrides):
        with pytest.raises(ValueError):
            review_from_dict(_payload(**overrides))

    def test_review_must_be_an_object(self):
        with pytest.raises(ValueError):
            review_from_dict([])

    def test_to_dict_omits_unset_optionals(self):
        data = review_to_dict(review_from_dict(_payload()))
        assert "risk" not in data
        assert "criteria_feedback" not in data
        assert data["findings"][0]["startLine"] == 10


class TestFindingParsing:
    @pytest.mark.parametrize("line", [0, -3, "4", 1.5, True])
    def test_rejects_non_positive_or_non_int_lines(self, line):
        with pytest.raises(ValueError):
            finding_from_dict({"severity": "suggestion", "title": "t", "detail": "d", "startLine": line})

    def test_unknown_category_rejected(self):
        with pytest.raises(ValueError):
            finding_from_dict({"severity": "suggestion", "title": "t", "detail": "d", "category": "security"})

    def test_missing_title_rejected(self):
        with pytest.raises(ValueError):
            finding_from_dict({"severity": "suggestion", "detail": "d"})


class TestCriteriaFeedback:
    def test_items_follow_canonical_order(self):
        feedback = CriteriaFeedback(
            intent_clarity=CriteriaFeedbackItem(improve=["c"]),
            readability=CriteriaFeedbackItem(improve=["a"]),
            cohesion=CriteriaFeedbackItem(improve=["b"]),
        )
        assert [c for c, _ in feedback.items()] == [Category.READABILITY, Category.COHESION, Category.INTENT_CLARITY]

    def test_null_slots_are_skipped(self):
        review = review_from_dict(_payload(criteria_feedback={"readability": None, "coupling": {"improve": ["x"]}}))
        assert [c for c, _ in review.criteria_feedback.items()] == [Category.COUPLING]
        assert review.criteria_feedback.coupling.label is None


class TestTaskSerialisation:
    def test_defaults(self):
        task = task_from_dict({"id": "task_x", "title": "t", "description": "d"})
        assert task.status is TaskStatus.PENDING
        assert task.severity is Severity.IMPROVEMENT

    def test_to_dict_uses_camel_case_lines_and_enum_values(self):
        data = task_to_dict(Task(title="t", description="d", start_line=1, end_line=2, severity=Severity.REQUIRED))
        assert data["startLine"] == 1
        assert data["endLine"] == 2
        assert data["severity"] == "required"
        assert "source_review_id" not in data

    def test_negative_finding_index_rejected(self):
        with pytest.raises(ValueError):
            task_from_dict({"title": "t", "description": "d", "source_finding_index": -1})
