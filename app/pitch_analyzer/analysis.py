from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from .baseline import compare_with_baseline
from .coach_feedback import generate_coach_feedback
from .constants import DEFAULT_DURATION_SECONDS
from .detectors import detect_events
from .issues import NONE_ISSUE_KEY, select_primary_issue
from .llm_gptsapi import truncate
from .models import (
    AnalysisResponse,
    BaselineRecord,
    CoachFeedback,
    PrimaryIssue,
    Segment,
    StructureAnalysis,
)
from .segmenter import coerce_segments, parse_into_sentences
from .storage import SessionStore


logger = logging.getLogger("uvicorn.error")

CoachFn = Callable[[PrimaryIssue, float, str], CoachFeedback]


def analyze_segments(segments: list[Segment]) -> StructureAnalysis:
    """Run the deterministic part of the analysis over a validated transcript."""
    sentences = parse_into_sentences(segments)
    events = detect_events(sentences)
    return StructureAnalysis(events=events, primary_issue=select_primary_issue(events))


def analyze_transcript(raw_segments: Any) -> StructureAnalysis:
    return analyze_segments(coerce_segments(raw_segments))


def transcript_text(segments: list[Segment]) -> str:
    return " ".join(segment.text.strip() for segment in segments if segment.text.strip())


def _load_baseline(session_store: SessionStore, baseline_session_id: str) -> Optional[BaselineRecord]:
    try:
        baseline = session_store.get_baseline(baseline_session_id)
    except Exception:
        logger.warning("baseline_session_id=%s baseline_fetch_failed", baseline_session_id, exc_info=True)
        return None
    if baseline is None or not baseline.events:
        logger.info("baseline_session_id=%s baseline_unavailable", baseline_session_id)
        return None
    return baseline


def _safe_coach_feedback(
    coach: CoachFn,
    primary_issue: PrimaryIssue,
    duration_seconds: float,
    track: str,
    session_id: str,
) -> Optional[CoachFeedback]:
    if primary_issue.key == NONE_ISSUE_KEY:
        return None
    try:
        return coach(primary_issue, duration_seconds, track)
    except Exception as exc:
        logger.warning("session_id=%s coach_feedback_skipped error=%s", session_id, truncate(str(exc)))
        return None


def run_session_analysis(
    session_store: SessionStore,
    session_id: str,
    raw_segments: Any,
    *,
    track: str,
    duration_seconds: Optional[float] = None,
    baseline_session_id: Optional[str] = None,
    coach: Optional[CoachFn] = None,
) -> AnalysisResponse:
    """Analyze one practice session and persist the outcome in a single update.

    Invalid segments raise InvalidSegmentError before anything is computed or
    stored. Baseline lookup and coach feedback failures only drop their part
    of the result.
    """
    coach = coach or generate_coach_feedback
    segments = coerce_segments(raw_segments)

    baseline = _load_baseline(session_store, baseline_session_id) if baseline_session_id else None

    analysis = analyze_segments(segments)
    primary_issue = analysis.primary_issue
    logger.info(
        "session_id=%s analysis_done segments=%s primary_issue=%s",
        session_id,
        len(segments),
        primary_issue.key,
    )

    duration = duration_seconds or DEFAULT_DURATION_SECONDS
    coach_feedback = _safe_coach_feedback(coach, primary_issue, duration, track, session_id)

    improvement_summary = None
    if baseline_session_id:
        improvement_summary = compare_with_baseline(baseline, analysis.events, primary_issue)
        logger.info(
            "session_id=%s baseline_compared baseline_session_id=%s improved=%s",
            session_id,
            baseline_session_id,
            improvement_summary.improved if improvement_summary else None,
        )

    primary_issue_payload = primary_issue.model_dump()
    primary_issue_payload["coach_feedback"] = coach_feedback.model_dump() if coach_feedback else None

    session_store.update_session(
        session_id,
        status="analyzed",
        track=track,
        transcript_full_text=transcript_text(segments),
        duration_seconds=duration,
        events={category: event.model_dump() for category, event in analysis.events.items()},
        primary_issue_key=primary_issue.key,
        primary_issue=primary_issue_payload,
        baseline_session_id=baseline_session_id or None,
        improvement_summary=improvement_summary.model_dump() if improvement_summary else None,
        error=None,
    )

    return AnalysisResponse(
        session_id=session_id,
        events=analysis.events,
        primary_issue=primary_issue,
        coach_feedback=coach_feedback,
        improvement_summary=improvement_summary,
    )
