"""
Card state machine.

Applies a rating to a card and produces its next scheduling state plus an
immutable review log. Difficulty and stability follow the FSRS v5 update
rules on top of the forgetting curve in ``forgetting_curve``.

State transitions:
    New        --Again/Hard--> Learning
    New        --Good/Easy---> Review
    any        --Again-------> Relearning   (not New)
    any        --Hard+-------> Review       (not New)

Not thread-safe per card: callers must serialize reviews of the same card.
"""

import logging
import math
from dataclasses import replace
from datetime import datetime, timedelta

from recall.application.config import RecallConfig
from recall.domain.constants import (
    MAX_DIFFICULTY,
    MIN_DIFFICULTY,
    MIN_INITIAL_STABILITY,
)
from recall.domain.errors import NonMonotonicReviewTime
from recall.domain.scheduling.models import (
    Card,
    CardState,
    MemoryState,
    Rating,
    ReviewLog,
    ReviewResult,
)

from .forgetting_curve import elapsed_days_between, retrievability
from .interval_scheduler import IntervalScheduler, fuzz_seed_for

logger = logging.getLogger(__name__)


def clamp_difficulty(d: float) -> float:
    return max(MIN_DIFFICULTY, min(MAX_DIFFICULTY, d))


def initial_difficulty(rating: Rating, w: list[float]) -> float:
    """D0(G) = w4 - e^(w5 * (G - 1)) + 1"""
    return clamp_difficulty(w[4] - math.exp(w[5] * (rating - 1)) + 1)


def initial_stability(rating: Rating, w: list[float]) -> float:
    """S0(G) = w[G-1]"""
    return max(MIN_INITIAL_STABILITY, w[rating - 1])


def next_difficulty(d: float, rating: Rating, w: list[float]) -> float:
    """
    Linear step by grade, then mean reversion toward D0(Good).

    Again and Hard push difficulty up, Easy pulls it down.
    """
    stepped = d - w[6] * (rating - 3)
    reverted = w[7] * initial_difficulty(Rating.GOOD, w) + (1 - w[7]) * stepped
    return clamp_difficulty(reverted)


def next_recall_stability(
    d: float, s: float, r: float, rating: Rating, w: list[float]
) -> float:
    """
    Stability after a successful recall.

    The increase grows with the grade, shrinks with difficulty and with the
    current stability, and vanishes as pre-review retrievability approaches 1.
    """
    hard_penalty = w[15] if rating == Rating.HARD else 1.0
    easy_bonus = w[16] if rating == Rating.EASY else 1.0
    increase = (
        math.exp(w[8])
        * (11 - d)
        * s ** (-w[9])
        * (math.exp(w[10] * (1 - r)) - 1)
        * hard_penalty
        * easy_bonus
    )
    return max(s, s * (1 + increase))


def next_forget_stability(d: float, s: float, r: float, w: list[float]) -> float:
    """
    Stability after a lapse. Always strictly below ``s``.

    The long-term FSRS estimate is capped at ``s / e^(w17 * w18)``. The
    short-term weights double as the minimum shrink factor; both are bounded
    above zero, so the cap itself is below ``s``.
    """
    long_term = (
        w[11]
        * d ** (-w[12])
        * ((s + 1) ** w[13] - 1)
        * math.exp(w[14] * (1 - r))
    )
    ceiling = s / math.exp(w[17] * w[18])
    return min(long_term, ceiling)


class CardStateMachine:
    """
    Applies ratings to cards.

    Stateless apart from configuration; every call returns new records.
    """

    def __init__(
        self,
        config: RecallConfig | None = None,
        scheduler: IntervalScheduler | None = None,
    ):
        """
        Args:
            config: Weights, retention target and leech threshold.
            scheduler: Optional custom scheduler; built from config if not provided.
        """
        self.config = config or RecallConfig()
        self.scheduler = scheduler or IntervalScheduler(self.config)

    @property
    def weights(self) -> list[float]:
        return self.config.weights

    def apply_review(
        self,
        card: Card,
        rating: int,
        now: datetime,
        duration_ms: int = 0,
    ) -> ReviewResult:
        """
        Apply one rating to a card.

        Args:
            card: Current card state.
            rating: 1=Again, 2=Hard, 3=Good, 4=Easy.
            now: Timezone-aware review time, not earlier than the last review.
            duration_ms: Answer time, recorded on the log.

        Returns:
            ReviewResult with the next card state and the log to append.

        Raises:
            InvalidRating: rating is not 1-4.
            NonMonotonicReviewTime: now precedes card.last_review.
        """
        grade = Rating.parse(rating)
        if now.tzinfo is None:
            raise ValueError("review time must be timezone-aware")
        if card.last_review is not None and now < card.last_review:
            raise NonMonotonicReviewTime(card.card_id, card.last_review, now)

        w = self.weights
        r: float | None = None
        lapses = card.lapses

        if card.memory is None:
            elapsed = 0.0
            memory = MemoryState(
                stability=initial_stability(grade, w),
                difficulty=initial_difficulty(grade, w),
            )
            state = CardState.REVIEW if grade >= Rating.GOOD else CardState.LEARNING
            if grade == Rating.AGAIN:
                lapses += 1
        else:
            elapsed = elapsed_days_between(card.last_review, now)
            s = card.memory.stability
            d = card.memory.difficulty
            r = retrievability(elapsed, s)

            if grade.is_success:
                stability = next_recall_stability(d, s, r, grade, w)
                state = CardState.REVIEW
            else:
                stability = next_forget_stability(d, s, r, w)
                state = CardState.RELEARNING
                lapses += 1

            memory = MemoryState(stability=stability, difficulty=next_difficulty(d, grade, w))

        fuzz_seed = fuzz_seed_for(card.card_id, card.reps)
        interval = self.scheduler.next_interval(memory.stability, fuzz_seed=fuzz_seed)
        due = now + timedelta(days=interval)

        updated = replace(
            card,
            state=state,
            due=due,
            memory=memory,
            last_review=now,
            reps=card.reps + 1,
            lapses=lapses,
            elapsed_days=elapsed,
            scheduled_days=interval,
        )
        log = ReviewLog(
            card_id=card.card_id,
            rating=grade,
            state=card.state,
            due=due,
            stability=memory.stability,
            difficulty=memory.difficulty,
            elapsed_days=elapsed,
            last_elapsed_days=card.elapsed_days,
            scheduled_days=interval,
            review=now,
            duration_ms=duration_ms,
        )

        threshold = self.config.leech_threshold
        became_leech = card.lapses < threshold <= lapses
        if became_leech:
            logger.warning(f"Card {card.card_id} became a leech ({lapses} lapses)")

        logger.debug(
            f"Card {card.card_id}: {card.state.value} -> {state.value} "
            f"rating={grade.value} S={memory.stability:.3f} D={memory.difficulty:.3f} "
            f"interval={interval}d"
        )

        return ReviewResult(card=updated, log=log, retrievability=r, became_leech=became_leech)

    def preview(self, card: Card, now: datetime) -> dict[Rating, ReviewResult]:
        """Outcome of every possible rating, for showing intervals on answer buttons."""
        return {grade: self.apply_review(card, grade, now) for grade in Rating}
