"""Tests for the five structure detectors."""

from __future__ import annotations

import pytest

from app.pitch_analyzer.detectors import (
    DETECTORS,
    detect_business_model,
    detect_events,
    detect_innovation,
    detect_problem,
    detect_solution,
    detect_technical,
    problem_confidence,
)
from app.pitch_analyzer.models import Sentence


def _sentence(text: str, start: float = 0.0, end: float | None = None) -> Sentence:
    return Sentence(
        start=start,
        end=start + 1.0 if end is None else end,
        text=text,
        normalized=text.lower().strip(),
    )


class TestProblemDetector:
    def test_late_problem_statement(self) -> None:
        event = detect_problem([_sentence("Users struggle to find parking.", start=25.0)])

        assert event.type == "problem"
        assert event.status == "late"
        assert event.timestamp == 25.0
        assert event.confidence == pytest.approx(0.85)
        assert event.quote == "Users struggle to find parking."

    def test_early_problem_statement(self) -> None:
        event = detect_problem([_sentence("Users struggle to find parking.", start=10.0)])

        assert event.status == "found"
        assert event.timestamp == 10.0

    def test_exactly_twenty_seconds_is_not_late(self) -> None:
        event = detect_problem([_sentence("Users struggle to find parking.", start=20.0)])

        assert event.status == "found"

    def test_all_signals_reach_full_confidence(self) -> None:
        sentence = _sentence("Users struggle and waste hours.")

        assert problem_confidence(sentence) == pytest.approx(1.0)

    def test_pain_alone_clears_threshold(self) -> None:
        event = detect_problem([_sentence("The process is painful.")])

        assert event.status == "found"
        assert event.confidence == pytest.approx(0.55)

    def test_who_and_impact_without_pain_is_missing(self) -> None:
        event = detect_problem([_sentence("Students spend money.")])

        assert event.status == "missing"
        assert event.timestamp == -1
        assert event.quote == ""
        assert event.confidence == 0.0

    def test_long_sentence_is_penalized(self) -> None:
        text = "Users struggle" + " a" * 30
        assert problem_confidence(_sentence(text)) == pytest.approx(0.75)

    def test_penalty_can_drop_below_threshold(self) -> None:
        text = "It is painful" + " a" * 30
        assert detect_problem([_sentence(text)]).status == "missing"

    def test_earliest_qualifying_sentence_wins(self) -> None:
        event = detect_problem(
            [
                _sentence("Users struggle with billing.", start=5.0),
                _sentence("Teams waste hours on it.", start=2.0),
            ]
        )

        assert event.timestamp == 2.0
        assert event.quote == "Teams waste hours on it."

    def test_equal_start_keeps_first_sentence(self) -> None:
        event = detect_problem(
            [
                _sentence("Users struggle with billing.", start=3.0),
                _sentence("Teams waste hours on it.", start=3.0),
            ]
        )

        assert event.quote == "Users struggle with billing."

    def test_lower_confidence_earlier_sentence_still_wins(self) -> None:
        event = detect_problem(
            [
                _sentence("It is painful.", start=1.0),
                _sentence("Users struggle and waste hours.", start=4.0),
            ]
        )

        assert event.timestamp == 1.0
        assert event.confidence == pytest.approx(0.55)


class TestInnovationDetector:
    def test_comparison_gives_high_confidence(self) -> None:
        event = detect_innovation([_sentence("Unlike existing tools, we match drivers.", start=7.0)])

        assert event.status == "found"
        assert event.timestamp == 7.0
        assert event.confidence == pytest.approx(0.9)

    def test_long_explanation_without_comparison(self) -> None:
        event = detect_innovation(
            [_sentence("Our approach is a novel way to route delivery vans across the city.")]
        )

        assert event.status == "found"
        assert event.confidence == pytest.approx(0.7)

    def test_short_claim_without_comparison_is_missing(self) -> None:
        event = detect_innovation([_sentence("It is new.")])

        assert event.status == "missing"
        assert event.timestamp == -1

    def test_first_match_wins(self) -> None:
        event = detect_innovation(
            [
                _sentence("Unlike existing tools, we match drivers.", start=1.0),
                _sentence("This is the first breakthrough versus legacy systems.", start=3.0),
            ]
        )

        assert event.timestamp == 1.0
        assert event.quote == "Unlike existing tools, we match drivers."


class TestTechnicalDetector:
    def test_technical_token_found(self) -> None:
        event = detect_technical(
            [
                _sentence("Thank you.", start=0.0),
                _sentence("We trained a model on traffic data.", start=4.0),
            ]
        )

        assert event.status == "found"
        assert event.timestamp == 4.0
        assert event.confidence == pytest.approx(0.85)

    def test_substring_match_counts(self) -> None:
        # "ai" inside "said" is a known substring false positive.
        event = detect_technical([_sentence("She said yes.")])

        assert event.status == "found"

    def test_missing(self) -> None:
        assert detect_technical([_sentence("Thank you.")]).status == "missing"


class TestBusinessModelDetector:
    def test_two_tokens_required(self) -> None:
        event = detect_business_model([_sentence("Customers get real value.")])

        assert event.status == "found"
        assert event.confidence == pytest.approx(0.8)

    def test_confidence_is_capped(self) -> None:
        event = detect_business_model([_sentence("This will reduce cost and grow revenue.")])

        assert event.confidence == pytest.approx(0.95)

    def test_single_token_is_missing(self) -> None:
        assert detect_business_model([_sentence("We have a market.")]).status == "missing"

    def test_multi_word_token_matches_as_phrase(self) -> None:
        event = detect_business_model([_sentence("Our business model has strong growth.")])

        assert event.status == "found"


class TestSolutionDetector:
    def test_solution_intro(self) -> None:
        event = detect_solution([_sentence("Introducing ParkPal, our solution for drivers.", start=12.0)])

        assert event.status == "found"
        assert event.timestamp == 12.0
        assert event.confidence == pytest.approx(0.9)

    def test_missing(self) -> None:
        assert detect_solution([_sentence("Thank you.")]).status == "missing"


class TestDetectEvents:
    def test_one_event_per_category(self) -> None:
        events = detect_events([])

        assert list(events) == list(DETECTORS)
        assert set(events) == {"problem", "innovation", "technical", "business_model", "solution"}
        for category, event in events.items():
            assert event.type == category
            assert event.status == "missing"
            assert event.timestamp == -1
