"""Tests for baseline comparison."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from app.pitch_analyzer.baseline import compare_with_baseline, event_label, format_timestamp
from app.pitch_analyzer.issues import NONE_ISSUE, select_primary_issue
from app.pitch_analyzer.models import BaselineRecord, DetectedEvent


def _event(category: str, status: str, timestamp: float = -1.0) -> DetectedEvent:
    return DetectedEvent(
        type=category,
        timestamp=timestamp if status != "missing" else -1.0,
        quote="" if status == "missing" else "quote",
        confidence=0.0 if status == "missing" else 0.85,
        status=status,
    )


def _baseline(key: str | None, **events: DetectedEvent) -> BaselineRecord:
    return BaselineRecord(
        events={category: event.model_dump() for category, event in events.items()},
        primary_issue_key=key,
    )


class TestFormatTimestamp:
    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [(-1, "not mentioned"), (0, "00:00"), (8, "00:08"), (59.6, "01:00"), (125.4, "02:05"), (600, "10:00")],
    )
    def test_format(self, seconds: float, expected: str) -> None:
        assert format_timestamp(seconds) == expected

    def test_labels(self) -> None:
        assert event_label("technical") == "Technical approach"
        assert event_label("other") == "other"


class TestCompareWithBaseline:
    def test_missing_problem_now_present(self) -> None:
        current = {"problem": _event("problem", "found", 8.0)}
        summary = compare_with_baseline(
            _baseline("problem_missing", problem=_event("problem", "missing")),
            current,
            NONE_ISSUE,
        )

        assert summary is not None
        assert summary.issue_key == "problem_missing"
        assert summary.improved is True
        assert summary.before == "Problem statement was missing"
        assert summary.after == "Problem statement explained at 00:08"
        assert summary.before_timestamp is None
        assert summary.after_timestamp == 8.0

    def test_regression_to_missing(self) -> None:
        summary = compare_with_baseline(
            _baseline("problem_late", problem=_event("problem", "late", 31.0)),
            {"problem": _event("problem", "missing")},
            NONE_ISSUE,
        )

        assert summary.improved is False
        assert summary.before == "Problem statement explained at 00:31"
        assert summary.after == "Problem statement is now missing"
        assert summary.after_timestamp is None

    def test_late_to_on_time(self) -> None:
        summary = compare_with_baseline(
            _baseline("problem_late", problem=_event("problem", "late", 45.0)),
            {"problem": _event("problem", "found", 10.0)},
            NONE_ISSUE,
        )

        assert summary.improved is True
        assert summary.before == "Problem statement explained at 00:45"
        assert summary.after == "Problem statement explained at 00:10"

    def test_both_late_but_later_is_regression(self) -> None:
        summary = compare_with_baseline(
            _baseline("problem_late", problem=_event("problem", "late", 30.0)),
            {"problem": _event("problem", "late", 50.0)},
            NONE_ISSUE,
        )

        assert summary.improved is False

    def test_both_late_but_earlier_is_improvement(self) -> None:
        summary = compare_with_baseline(
            _baseline("problem_late", problem=_event("problem", "late", 50.0)),
            {"problem": _event("problem", "late", 25.0)},
            NONE_ISSUE,
        )

        assert summary.improved is True
        assert summary.before_timestamp == 50.0
        assert summary.after_timestamp == 25.0

    def test_equal_timestamps_count_as_improved(self) -> None:
        summary = compare_with_baseline(
            _baseline("structure_out_of_order", solution=_event("solution", "found", 3.0)),
            {"solution": _event("solution", "found", 3.0)},
            NONE_ISSUE,
        )

        assert summary.improved is True
        assert summary.before == "Solution explained at 00:03"

    def test_both_missing_gives_no_summary(self) -> None:
        summary = compare_with_baseline(
            _baseline("innovation_missing", innovation=_event("innovation", "missing")),
            {"innovation": _event("innovation", "missing")},
            NONE_ISSUE,
        )

        assert summary is None

    def test_only_tracked_category_is_compared(self) -> None:
        summary = compare_with_baseline(
            _baseline(
                "technical_feasibility_missing",
                problem=_event("problem", "found", 2.0),
                technical=_event("technical", "missing"),
            ),
            {"problem": _event("problem", "missing"), "technical": _event("technical", "found", 70.0)},
            NONE_ISSUE,
        )

        assert summary.issue_key == "technical_feasibility_missing"
        assert summary.improved is True
        assert summary.after == "Technical approach explained at 01:10"

    def test_falls_back_to_current_issue_key(self) -> None:
        current = {"problem": _event("problem", "missing"), "innovation": _event("innovation", "missing")}
        primary = select_primary_issue(
            {
                "problem": _event("problem", "found", 4.0),
                "innovation": _event("innovation", "missing"),
                "technical": _event("technical", "found", 5.0),
                "business_model": _event("business_model", "found", 6.0),
                "solution": _event("solution", "found", 7.0),
            }
        )
        summary = compare_with_baseline(
            _baseline(None, innovation=_event("innovation", "found", 12.0)),
            current,
            primary,
        )

        assert summary.issue_key == "innovation_missing"
        assert summary.improved is False

    def test_none_key_compares_problem(self) -> None:
        summary = compare_with_baseline(
            _baseline("none", problem=_event("problem", "found", 9.0)),
            {"problem": _event("problem", "found", 4.0)},
            NONE_ISSUE,
        )

        assert summary.issue_key == "none"
        assert summary.improved is True

    def test_missing_baseline_data(self) -> None:
        current = {"problem": _event("problem", "found", 8.0)}

        assert compare_with_baseline(None, current, NONE_ISSUE) is None
        assert compare_with_baseline(BaselineRecord(events=None, primary_issue_key="problem_missing"), current, NONE_ISSUE) is None
        assert compare_with_baseline(_baseline("innovation_missing"), current, NONE_ISSUE) is None

    def test_malformed_stored_event_gives_no_summary(self) -> None:
        baseline = BaselineRecord(events={"problem": {"status": "found"}}, primary_issue_key="problem_late")

        assert compare_with_baseline(baseline, {"problem": _event("problem", "found", 8.0)}, NONE_ISSUE) is None


class TestStoredEventConsistency:
    @pytest.mark.parametrize(
        "payload",
        [
            {"type": "problem", "timestamp": -1, "quote": "q", "confidence": 0.85, "status": "found"},
            {"type": "problem", "timestamp": 4.0, "quote": "", "confidence": 0.0, "status": "missing"},
            {"type": "problem", "timestamp": 4.0, "quote": "q", "confidence": 1.5, "status": "found"},
        ],
    )
    def test_corrupt_event_is_rejected(self, payload: dict) -> None:
        with pytest.raises(ValidationError):
            DetectedEvent.model_validate(payload)

    def test_corrupt_baseline_event_gives_no_summary(self) -> None:
        baseline = BaselineRecord(
            events={"problem": {"type": "problem", "timestamp": -1, "quote": "q", "confidence": 0.85, "status": "found"}},
            primary_issue_key="problem_late",
        )

        assert compare_with_baseline(baseline, {"problem": _event("problem", "found", 8.0)}, NONE_ISSUE) is None
