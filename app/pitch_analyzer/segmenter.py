from __future__ import annotations

import math
import re
from typing import Any, Iterable

from .models import Segment, Sentence


SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")


class InvalidSegmentError(ValueError):
    pass


def _to_time(value: Any, field: str, index: int) -> float:
    if isinstance(value, bool):
        raise InvalidSegmentError(f"invalid segment at index {index}: {field} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidSegmentError(f"invalid segment at index {index}: {field} must be a number") from exc
    if not math.isfinite(number):
        raise InvalidSegmentError(f"invalid segment at index {index}: {field} must be finite")
    return number


def coerce_segments(raw_segments: Any) -> list[Segment]:
    """Validate a transcript payload from the speech-to-text collaborator.

    A payload that is not a list, and entries that are not objects, are
    treated as absent speech. Entries whose timing is impossible are rejected
    so the segmenter never sees negative durations.
    """
    if not isinstance(raw_segments, list):
        return []

    segments: list[Segment] = []
    for index, item in enumerate(raw_segments):
        if isinstance(item, Segment):
            item = item.model_dump()
        if not isinstance(item, dict):
            continue
        start = _to_time(item.get("start"), "start", index)
        end = _to_time(item.get("end"), "end", index)
        if start < 0:
            raise InvalidSegmentError(f"invalid segment at index {index}: start must be >= 0 (got {start})")
        if end <= start:
            raise InvalidSegmentError(
                f"invalid segment at index {index}: end ({end}) must be greater than start ({start})"
            )
        segments.append(Segment(start=start, end=end, text=str(item.get("text") or "")))
    return segments


def _word_count(text: str) -> int:
    return len(text.split())


def split_segment(segment: Segment) -> list[Sentence]:
    total_words = _word_count(segment.text)
    if total_words == 0:
        return []

    fragments = [part.strip() for part in SENTENCE_BOUNDARY.split(segment.text)]
    fragments = [part for part in fragments if part]
    duration = segment.end - segment.start

    sentences: list[Sentence] = []
    current = segment.start
    for position, fragment in enumerate(fragments):
        share = _word_count(fragment) / total_words
        if position == len(fragments) - 1:
            end = segment.end
        else:
            end = min(segment.end, current + share * duration)
        sentences.append(
            Sentence(
                start=current,
                end=end,
                text=fragment,
                normalized=fragment.lower(),
            )
        )
        current = end
    return sentences


def parse_into_sentences(segments: Iterable[Segment]) -> list[Sentence]:
    sentences: list[Sentence] = []
    for segment in segments:
        sentences.extend(split_segment(segment))
    # sorted() is stable, so equal starts keep transcript order.
    return sorted(sentences, key=lambda sentence: sentence.start)
