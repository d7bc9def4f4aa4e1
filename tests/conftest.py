import os
from datetime import datetime, timedelta, timezone

import pytest

from recall.application.config import RecallConfig
from recall.domain.scheduling.models import Card, CardState, MemoryState, Rating, ReviewLog


@pytest.fixture(autouse=True)
def mock_home(tmp_path, monkeypatch):
    """Isolate every test from the user's config files and RECALL_* variables."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))

    for key in list(os.environ):
        if key.startswith("RECALL_"):
            monkeypatch.delenv(key)
    return home


@pytest.fixture
def now():
    return datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def config():
    """Deterministic scheduling: fuzz off."""
    return RecallConfig(enable_fuzz=False)


@pytest.fixture
def review_card(now):
    """A mature card last reviewed 10 days ago with stability 10."""
    return Card(
        card_id="c1",
        state=CardState.REVIEW,
        due=now,
        memory=MemoryState(stability=10.0, difficulty=5.0),
        last_review=now - timedelta(days=10),
        reps=3,
        lapses=0,
        elapsed_days=4.0,
        scheduled_days=10,
    )


@pytest.fixture
def make_log():
    def _make(
        review: datetime,
        rating: int = Rating.GOOD,
        state: CardState = CardState.REVIEW,
        card_id: str = "c1",
        duration_ms: int = 5000,
        elapsed_days: float = 1.0,
    ) -> ReviewLog:
        return ReviewLog(
            card_id=card_id,
            rating=rating,
            state=state,
            due=review + timedelta(days=3),
            stability=5.0,
            difficulty=5.0,
            elapsed_days=elapsed_days,
            last_elapsed_days=0.0,
            scheduled_days=3,
            review=review,
            duration_ms=duration_ms,
        )

    return _make


@pytest.fixture
def make_card(now):
    def _make(
        card_id: str,
        state: CardState = CardState.REVIEW,
        due: datetime | None = None,
        stability: float = 10.0,
        difficulty: float = 5.0,
        last_review: datetime | None = None,
        reps: int = 3,
        lapses: int = 0,
    ) -> Card:
        if state is CardState.NEW:
            return Card.new(card_id, due or now)
        return Card(
            card_id=card_id,
            state=state,
            due=due or now,
            memory=MemoryState(stability=stability, difficulty=difficulty),
            last_review=last_review or now - timedelta(days=1),
            reps=reps,
            lapses=lapses,
        )

    return _make
