from __future__ import annotations

import logging
import math
from typing import Mapping, Optional

from pydantic import ValidationError

from .issues import ISSUE_CATEGORY_BY_KEY
from .models import BaselineRecord, DetectedEvent, ImprovementSummary, PrimaryIssue


logger = logging.getLogger("uvicorn.error")

DEFAULT_CATEGORY = "problem"
EVENT_LABELS = {
    "problem": "Problem statement",
    "innovation": "Innovation",
    "technical": "Technical approach",
    "business_model": "Business model",
    "solution": "Solution",
}


def format_timestamp(seconds: float) -> str:
    if seconds < 0:
        return "not mentioned"
    total = int(math.floor(seconds + 0.5))
    minutes, secs = divmod(total, 60)
    return f"{minutes:02d}:{secs:02d}"


def event_label(category: str) -> str:
    return EVENT_LABELS.get(category, category)


def _coerce_event(value) -> Optional[DetectedEvent]:
    if isinstance(value, DetectedEvent):
        return value
    if not isinstance(value, dict):
        return None
    try:
        return DetectedEvent.model_validate(value)
    except ValidationError:
        logger.warning("baseline_event_invalid payload=%s", value)
        return None


def _valid_timestamp(value: float) -> Optional[float]:
    return value if value >= 0 else None


def compare_with_baseline(
    baseline: Optional[BaselineRecord],
    current_events: Mapping[str, DetectedEvent],
    current_primary_issue: PrimaryIssue,
) -> Optional[ImprovementSummary]:
    """Describe how the tracked issue changed since the baseline attempt.

    Only the event category behind the baseline's primary issue is compared.
    Returns None when the baseline has no usable events or the two events
    are not in a comparable state.
    """
    if baseline is None or not isinstance(baseline.events, dict) or not baseline.events:
        return None

    issue_key = baseline.primary_issue_key or current_primary_issue.key
    category = ISSUE_CATEGORY_BY_KEY.get(issue_key, DEFAULT_CATEGORY)
    before_event = _coerce_event(baseline.events.get(category))
    after_event = current_events.get(category)
    if before_event is None or after_event is None:
        return None

    label = event_label(category)
    before_ts = before_event.timestamp
    after_ts = after_event.timestamp
    explained_before = f"{label} explained at {format_timestamp(before_ts)}"
    explained_after = f"{label} explained at {format_timestamp(after_ts)}"

    if before_event.status == "missing" and after_event.status != "missing":
        improved = True
        before = f"{label} was missing"
        after = explained_after
    elif before_event.status != "missing" and after_event.status == "missing":
        improved = False
        before = explained_before
        after = f"{label} is now missing"
    elif before_event.status == "late" and after_event.status == "found":
        improved = True
        before = explained_before
        after = explained_after
    elif before_ts >= 0 and after_ts >= 0:
        improved = after_ts <= before_ts
        before = explained_before
        after = explained_after
    else:
        return None

    return ImprovementSummary(
        issue_key=issue_key,
        before=before,
        after=after,
        improved=improved,
        before_timestamp=_valid_timestamp(before_ts),
        after_timestamp=_valid_timestamp(after_ts),
    )
