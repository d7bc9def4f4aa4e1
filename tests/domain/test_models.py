from datetime import datetime, timedelta

import pytest

from recall.domain.errors import InvalidCardState, InvalidRating
from recall.domain.scheduling.models import (
    Card,
    CardState,
    MemoryState,
    Rating,
    ReviewLog,
    ReviewResult,
)


class TestRating:
    @pytest.mark.parametrize("value, expected", [(1, Rating.AGAIN), (4, Rating.EASY)])
    def test_parse_accepts_grades(self, value, expected):
        assert Rating.parse(value) is expected

    @pytest.mark.parametrize("value", [0, 5, -1, "good", None, 2.5, True])
    def test_parse_rejects_everything_else(self, value):
        with pytest.raises(InvalidRating):
            Rating.parse(value)

    def test_invalid_rating_is_a_value_error(self):
        with pytest.raises(ValueError, match="expected one of 1, 2, 3, 4"):
            Rating.parse(9)

    def test_only_again_is_a_failure(self):
        assert not Rating.AGAIN.is_success
        assert all(r.is_success for r in (Rating.HARD, Rating.GOOD, Rating.EASY))


class TestCardState:
    def test_parse_is_case_insensitive(self):
        assert CardState.parse("Review") is CardState.REVIEW

    def test_parse_unknown(self):
        with pytest.raises(InvalidCardState):
            CardState.parse("suspended")


class TestMemoryState:
    def test_stability_must_be_positive(self):
        with pytest.raises(InvalidCardState):
            MemoryState(stability=0.0, difficulty=5.0)

    @pytest.mark.parametrize("difficulty", [0.5, 10.5])
    def test_difficulty_bounds(self, difficulty):
        with pytest.raises(InvalidCardState):
            MemoryState(stability=1.0, difficulty=difficulty)


class TestCard:
    def test_new_card_has_no_memory(self, now):
        card = Card.new("c1", now)

        assert card.state is CardState.NEW
        assert card.is_new
        assert card.memory is None
        assert card.stability is None
        assert card.difficulty is None
        assert card.due == now
        assert card.reps == 0

    def test_new_card_cannot_carry_memory(self, now):
        with pytest.raises(InvalidCardState):
            Card(
                card_id="c1",
                state=CardState.NEW,
                due=now,
                memory=MemoryState(stability=1.0, difficulty=5.0),
            )

    def test_reviewed_card_requires_memory_and_last_review(self, now):
        with pytest.raises(InvalidCardState, match="no memory state"):
            Card(card_id="c1", state=CardState.REVIEW, due=now, last_review=now)
        with pytest.raises(InvalidCardState, match="no last review"):
            Card(
                card_id="c1",
                state=CardState.REVIEW,
                due=now,
                memory=MemoryState(stability=1.0, difficulty=5.0),
            )

    def test_state_string_is_coerced(self, now):
        card = Card(card_id="c1", state="new", due=now)
        assert card.state is CardState.NEW

    def test_naive_datetimes_rejected(self):
        with pytest.raises(InvalidCardState, match="timezone-aware"):
            Card.new("c1", datetime(2024, 1, 1))

    def test_negative_counters_rejected(self, now):
        with pytest.raises(InvalidCardState):
            Card(card_id="c1", state=CardState.NEW, due=now, lapses=-1)

    def test_is_leech(self, review_card):
        assert not review_card.is_leech(8)
        assert review_card.is_leech(0)

    def test_cards_are_immutable(self, review_card):
        with pytest.raises(AttributeError):
            review_card.reps = 10


class TestReviewResult:
    def _log(self, now, state):
        return ReviewLog(
            card_id="c1",
            rating=3,
            state=state,
            due=now + timedelta(days=3),
            stability=3.0,
            difficulty=5.0,
            elapsed_days=0.0,
            last_elapsed_days=0.0,
            scheduled_days=3,
            review=now,
            duration_ms=4200,
        )

    def test_log_coerces_rating(self, now):
        log = self._log(now, CardState.NEW)
        assert log.rating is Rating.GOOD
        assert log.passed

    def test_outcome_for_first_review(self, now, review_card):
        result = ReviewResult(card=review_card, log=self._log(now, CardState.NEW))
        outcome = result.outcome()

        assert outcome.card_id == "c1"
        assert outcome.rating is Rating.GOOD
        assert outcome.is_new_card
        assert outcome.duration_ms == 4200
        assert outcome.card_difficulty == 5.0

    def test_outcome_for_repeat_review(self, now, review_card):
        result = ReviewResult(card=review_card, log=self._log(now, CardState.REVIEW))
        assert not result.outcome().is_new_card
