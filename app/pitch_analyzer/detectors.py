from __future__ import annotations

from typing import Callable, Dict, Optional, Sequence

from .constants import NOT_FOUND_TIMESTAMP, PROBLEM_LATE_AFTER_SECONDS
from .models import DetectedEvent, Sentence
from .vocabulary import (
    BUSINESS_TOKENS,
    COMPARISON_TOKENS,
    IMPACT_TOKENS,
    INNOVATION_TOKENS,
    PAIN_TOKENS,
    SOLUTION_TOKENS,
    TECHNICAL_TOKENS,
    WHO_TOKENS,
    count_tokens,
    has_token,
)


PROBLEM_THRESHOLD = 0.55
PROBLEM_PAIN_WEIGHT = 0.55
PROBLEM_WHO_WEIGHT = 0.30
PROBLEM_IMPACT_WEIGHT = 0.15
LONG_SENTENCE_WORDS = 30
LONG_SENTENCE_PENALTY = 0.1
INNOVATION_EXPLANATION_CHARS = 50
MIN_BUSINESS_MATCHES = 2

Detector = Callable[[Sequence[Sentence]], DetectedEvent]


def _clamp_confidence(value: float) -> float:
    return round(min(1.0, max(0.0, value)), 4)


def _missing(event_type: str) -> DetectedEvent:
    return DetectedEvent(
        type=event_type,
        timestamp=NOT_FOUND_TIMESTAMP,
        quote="",
        confidence=0.0,
        status="missing",
    )


def _found(event_type: str, sentence: Sentence, confidence: float) -> DetectedEvent:
    return DetectedEvent(
        type=event_type,
        timestamp=sentence.start,
        quote=sentence.text,
        confidence=_clamp_confidence(confidence),
        status="found",
    )


def problem_confidence(sentence: Sentence) -> float:
    text = sentence.normalized
    pain_hit = 1 if has_token(text, PAIN_TOKENS) else 0
    who_hit = 1 if has_token(text, WHO_TOKENS) else 0
    impact_hit = 1 if has_token(text, IMPACT_TOKENS) else 0
    penalty = LONG_SENTENCE_PENALTY if len(text.split()) > LONG_SENTENCE_WORDS else 0.0
    raw = (
        PROBLEM_PAIN_WEIGHT * pain_hit
        + PROBLEM_WHO_WEIGHT * who_hit
        + PROBLEM_IMPACT_WEIGHT * impact_hit
        - penalty
    )
    return _clamp_confidence(raw)


def detect_problem(sentences: Sequence[Sentence]) -> DetectedEvent:
    best: Optional[Sentence] = None
    best_confidence = 0.0
    for sentence in sentences:
        confidence = problem_confidence(sentence)
        if confidence < PROBLEM_THRESHOLD:
            continue
        # Strict comparison: on equal starts the earlier sentence in input order stays.
        if best is None or sentence.start < best.start:
            best = sentence
            best_confidence = confidence

    if best is None:
        return _missing("problem")

    return DetectedEvent(
        type="problem",
        timestamp=best.start,
        quote=best.text,
        confidence=best_confidence,
        status="late" if best.start > PROBLEM_LATE_AFTER_SECONDS else "found",
    )


def detect_innovation(sentences: Sequence[Sentence]) -> DetectedEvent:
    for sentence in sentences:
        text = sentence.normalized
        if not has_token(text, INNOVATION_TOKENS):
            continue
        has_comparison = has_token(text, COMPARISON_TOKENS)
        if has_comparison or len(text) > INNOVATION_EXPLANATION_CHARS:
            return _found("innovation", sentence, 0.9 if has_comparison else 0.7)
    return _missing("innovation")


def detect_technical(sentences: Sequence[Sentence]) -> DetectedEvent:
    for sentence in sentences:
        if has_token(sentence.normalized, TECHNICAL_TOKENS):
            return _found("technical", sentence, 0.85)
    return _missing("technical")


def detect_business_model(sentences: Sequence[Sentence]) -> DetectedEvent:
    for sentence in sentences:
        matches = count_tokens(sentence.normalized, BUSINESS_TOKENS)
        if matches >= MIN_BUSINESS_MATCHES:
            return _found("business_model", sentence, min(0.95, 0.5 + 0.15 * matches))
    return _missing("business_model")


def detect_solution(sentences: Sequence[Sentence]) -> DetectedEvent:
    for sentence in sentences:
        if has_token(sentence.normalized, SOLUTION_TOKENS):
            return _found("solution", sentence, 0.9)
    return _missing("solution")


DETECTORS: Dict[str, Detector] = {
    "problem": detect_problem,
    "innovation": detect_innovation,
    "technical": detect_technical,
    "business_model": detect_business_model,
    "solution": detect_solution,
}


def detect_events(sentences: Sequence[Sentence]) -> Dict[str, DetectedEvent]:
    return {category: detector(sentences) for category, detector in DETECTORS.items()}
