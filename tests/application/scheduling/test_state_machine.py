import logging
import math
from dataclasses import replace
from datetime import datetime, timedelta

import pytest

from recall.application.config import RecallConfig
from recall.application.scheduling.state_machine import (
    CardStateMachine,
    clamp_difficulty,
    initial_difficulty,
    next_difficulty,
    next_forget_stability,
    next_recall_stability,
)
from recall.domain.constants import DEFAULT_WEIGHTS
from recall.domain.errors import InvalidRating, NonMonotonicReviewTime
from recall.domain.scheduling.models import Card, CardState, Rating

W = list(DEFAULT_WEIGHTS)


@pytest.fixture
def machine(config):
    return CardStateMachine(config)


@pytest.fixture
def new_card(now):
    return Card.new("c1", now)


class TestFirstReview:
    def test_good_graduates_to_review(self, machine, new_card, now):
        result = machine.apply_review(new_card, Rating.GOOD, now)
        card = result.card

        assert card.state is CardState.REVIEW
        assert card.reps == 1
        assert card.lapses == 0
        assert card.stability == pytest.approx(3.1262)
        assert card.difficulty == pytest.approx(5.3146, abs=1e-3)
        assert card.scheduled_days == 3
        assert card.due == now + timedelta(days=3)
        assert card.last_review == now
        assert card.elapsed_days == 0.0
        assert result.retrievability is None

    def test_easy_graduates_with_long_interval(self, machine, new_card, now):
        card = machine.apply_review(new_card, Rating.EASY, now).card

        assert card.state is CardState.REVIEW
        assert card.scheduled_days == 15
        assert card.difficulty == pytest.approx(3.2829, abs=1e-3)

    @pytest.mark.parametrize("rating", [Rating.AGAIN, Rating.HARD])
    def test_again_and_hard_enter_learning(self, machine, new_card, now, rating):
        card = machine.apply_review(new_card, rating, now).card

        assert card.state is CardState.LEARNING
        assert card.scheduled_days == 1

    def test_again_counts_a_lapse(self, machine, new_card, now):
        assert machine.apply_review(new_card, Rating.AGAIN, now).card.lapses == 1
        assert machine.apply_review(new_card, Rating.HARD, now).card.lapses == 0

    def test_log_records_pre_review_state(self, machine, new_card, now):
        log = machine.apply_review(new_card, 3, now, duration_ms=4500).log

        assert log.state is CardState.NEW
        assert log.rating is Rating.GOOD
        assert log.review == now
        assert log.elapsed_days == 0.0
        assert log.scheduled_days == 3
        assert log.stability == pytest.approx(3.1262)
        assert log.duration_ms == 4500

    def test_input_card_is_not_modified(self, machine, new_card, now):
        machine.apply_review(new_card, Rating.GOOD, now)
        assert new_card == Card.new("c1", now)


class TestRepeatReview:
    def test_success_on_time_increases_stability(self, machine, review_card, now):
        result = machine.apply_review(review_card, Rating.GOOD, now)

        assert result.card.state is CardState.REVIEW
        assert result.card.stability > review_card.stability
        assert result.retrievability == pytest.approx(0.9)
        assert result.card.elapsed_days == pytest.approx(10.0)
        assert result.card.reps == review_card.reps + 1

    def test_same_day_success_keeps_stability(self, machine, review_card):
        same_moment = review_card.last_review
        result = machine.apply_review(review_card, Rating.GOOD, same_moment)
        assert result.card.stability == pytest.approx(review_card.stability)

    def test_again_lowers_stability_and_relearns(self, machine, review_card, now):
        card = machine.apply_review(review_card, Rating.AGAIN, now).card

        assert card.state is CardState.RELEARNING
        assert card.stability < review_card.stability
        assert card.lapses == review_card.lapses + 1

    def test_relearning_recovers_on_success(self, machine, review_card, now):
        lapsed = machine.apply_review(review_card, Rating.AGAIN, now).card
        recovered = machine.apply_review(lapsed, Rating.GOOD, now + timedelta(days=1)).card

        assert recovered.state is CardState.REVIEW
        assert recovered.lapses == 1

    def test_learning_graduates_on_success(self, machine, new_card, now):
        learning = machine.apply_review(new_card, Rating.HARD, now).card
        graduated = machine.apply_review(learning, Rating.GOOD, now + timedelta(days=1)).card
        assert graduated.state is CardState.REVIEW

    def test_log_carries_previous_elapsed_days(self, machine, review_card, now):
        log = machine.apply_review(review_card, Rating.GOOD, now).log

        assert log.state is CardState.REVIEW
        assert log.elapsed_days == pytest.approx(10.0)
        assert log.last_elapsed_days == review_card.elapsed_days

    def test_hard_raises_and_easy_lowers_difficulty(self, machine, review_card, now):
        hard = machine.apply_review(review_card, Rating.HARD, now).card
        easy = machine.apply_review(review_card, Rating.EASY, now).card

        assert hard.difficulty > review_card.difficulty
        assert easy.difficulty < review_card.difficulty

    def test_difficulty_stays_in_bounds(self, machine, review_card, now):
        card = review_card
        for day in range(1, 30):
            card = machine.apply_review(card, Rating.AGAIN, now + timedelta(days=day)).card
            assert 1.0 <= card.difficulty <= 10.0
        assert card.difficulty == pytest.approx(10.0, abs=0.5)

    def test_stability_stays_positive_under_repeated_lapses(self, machine, review_card, now):
        card = review_card
        for day in range(1, 30):
            card = machine.apply_review(card, Rating.AGAIN, now + timedelta(days=day)).card
            assert card.stability > 0


class TestRatingOrder:
    def test_intervals_ordered_with_fuzz(self, review_card, now):
        machine = CardStateMachine(RecallConfig(enable_fuzz=True))
        options = machine.preview(review_card, now)
        days = [options[r].card.scheduled_days for r in (Rating.HARD, Rating.GOOD, Rating.EASY)]

        assert days == sorted(days)

    def test_stabilities_ordered(self, machine, review_card, now):
        options = machine.preview(review_card, now)
        s = [options[r].card.stability for r in Rating]

        assert s[0] < review_card.stability <= s[1] <= s[2] <= s[3]

    def test_preview_covers_every_rating(self, machine, new_card, now):
        options = machine.preview(new_card, now)

        assert set(options) == set(Rating)
        assert options[Rating.AGAIN].card.state is CardState.LEARNING
        assert options[Rating.GOOD].card.state is CardState.REVIEW


class TestLeech:
    def test_reaching_threshold_flags_leech(self, machine, review_card, now, caplog):
        card = replace(review_card, lapses=7)

        with caplog.at_level(logging.WARNING):
            result = machine.apply_review(card, Rating.AGAIN, now)

        assert result.card.lapses == 8
        assert result.became_leech
        assert result.card.is_leech(8)
        assert "became a leech" in caplog.text

    def test_flag_only_on_crossing(self, machine, review_card, now):
        card = replace(review_card, lapses=8)
        assert not machine.apply_review(card, Rating.AGAIN, now).became_leech

    def test_success_never_flags(self, machine, review_card, now):
        card = replace(review_card, lapses=7)
        assert not machine.apply_review(card, Rating.GOOD, now).became_leech

    def test_custom_threshold(self, review_card, now):
        machine = CardStateMachine(RecallConfig(enable_fuzz=False, leech_threshold=1))
        assert machine.apply_review(review_card, Rating.AGAIN, now).became_leech


class TestValidation:
    @pytest.mark.parametrize("rating", [0, 5, "good", None])
    def test_invalid_rating(self, machine, new_card, now, rating):
        with pytest.raises(InvalidRating):
            machine.apply_review(new_card, rating, now)

    def test_review_before_last_review(self, machine, review_card):
        earlier = review_card.last_review - timedelta(hours=1)
        with pytest.raises(NonMonotonicReviewTime) as exc:
            machine.apply_review(review_card, Rating.GOOD, earlier)
        assert exc.value.card_id == "c1"

    def test_naive_review_time(self, machine, new_card):
        with pytest.raises(ValueError, match="timezone-aware"):
            machine.apply_review(new_card, Rating.GOOD, datetime(2024, 3, 10))


class TestFormulas:
    def test_initial_difficulty_decreases_with_grade(self):
        values = [initial_difficulty(r, W) for r in Rating]
        assert values == sorted(values, reverse=True)
        assert values[0] == pytest.approx(7.2102)

    def test_clamp_difficulty(self):
        assert clamp_difficulty(-3) == 1.0
        assert clamp_difficulty(42) == 10.0
        assert clamp_difficulty(4.2) == 4.2

    def test_good_reverts_towards_initial_difficulty(self):
        d0 = initial_difficulty(Rating.GOOD, W)
        assert d0 < next_difficulty(9.0, Rating.GOOD, W) < 9.0
        assert 1.5 < next_difficulty(1.5, Rating.GOOD, W) < d0

    def test_forget_stability_strictly_below_current(self):
        for s in (0.2, 1.0, 10.0, 365.0):
            for r in (0.3, 0.9, 1.0):
                assert next_forget_stability(5.0, s, r, W) < s

    def test_forget_stability_capped_by_short_term_weights(self):
        s = 0.2
        cap = s / math.exp(W[17] * W[18])
        # A fragile memory hits the cap rather than the long-term estimate
        assert next_forget_stability(1.0, s, 0.5, W) == pytest.approx(cap)

    def test_recall_stability_never_decreases(self):
        for rating in (Rating.HARD, Rating.GOOD, Rating.EASY):
            assert next_recall_stability(9.5, 50.0, 0.99, rating, W) >= 50.0
