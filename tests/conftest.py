"""Shared fixtures for analyzer tests."""

from __future__ import annotations

import pytest

from app.pitch_analyzer.storage import InMemorySessionStore


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def full_pitch_segments() -> list[dict]:
    """A pitch that covers every structure element in a sensible order."""
    return [
        {"start": 0.0, "end": 6.0, "text": "Hi, we are team ParkPal."},
        {"start": 6.0, "end": 14.0, "text": "Many users struggle to find parking and waste hours every week."},
        {
            "start": 14.0,
            "end": 24.0,
            "text": "Our solution is an app that books spots instantly. Unlike existing parking apps, it predicts open spots.",
        },
        {"start": 24.0, "end": 32.0, "text": "We trained a machine learning model on city sensor data."},
        {"start": 32.0, "end": 40.0, "text": "Cities can monetize parking revenue and reduce traffic for customers."},
    ]


@pytest.fixture
def silent_segments() -> list[dict]:
    return [{"start": 0.0, "end": 4.0, "text": "Thank you."}]
