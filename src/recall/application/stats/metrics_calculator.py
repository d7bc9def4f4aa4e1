"""
Metrics calculator for deriving per-card insights and card-state counts.

This is a pure computation module with no I/O.
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from recall.application.scheduling.forgetting_curve import (
    card_retrievability,
    elapsed_days_between,
)
from recall.domain.constants import DEFAULT_LEECH_THRESHOLD, DEFAULT_MATURE_STABILITY
from recall.domain.scheduling.models import Card, CardState
from recall.domain.stats.models import CardStats


@dataclass
class EnrichedCard:
    """
    Card enriched with computed metrics.
    """

    card_id: str
    state: CardState
    reps: int
    lapses: int
    due: datetime

    # Memory state (None for never-reviewed cards)
    stability: float | None
    difficulty: float | None

    # Computed metrics
    current_retrievability: float | None
    lapse_rate: float | None  # lapses / reps
    days_overdue: int | None  # Negative if not yet due
    is_leech: bool
    is_mature: bool


class MetricsCalculator:
    """
    Computes derived metrics from Card snapshots.

    Stateless and side-effect free.
    """

    def __init__(
        self,
        leech_threshold: int = DEFAULT_LEECH_THRESHOLD,
        mature_stability: float = DEFAULT_MATURE_STABILITY,
    ):
        self.leech_threshold = leech_threshold
        self.mature_stability = mature_stability

    def enrich(self, card: Card, now: datetime) -> EnrichedCard:
        """
        Enrich a card with computed metrics as of ``now``.
        """
        return EnrichedCard(
            card_id=card.card_id,
            state=card.state,
            reps=card.reps,
            lapses=card.lapses,
            due=card.due,
            stability=card.stability,
            difficulty=card.difficulty,
            current_retrievability=None if card.is_new else card_retrievability(card, now),
            lapse_rate=self._compute_lapse_rate(card),
            days_overdue=self._compute_days_overdue(card, now),
            is_leech=card.is_leech(self.leech_threshold),
            is_mature=self._is_mature(card),
        )

    def _compute_lapse_rate(self, card: Card) -> float | None:
        """
        Compute lapse rate as lapses / total reviews.
        """
        if card.reps == 0:
            return None
        return card.lapses / card.reps

    def _compute_days_overdue(self, card: Card, now: datetime) -> int | None:
        """
        Whole days past due (negative if not yet due). None for new cards.
        """
        if card.is_new:
            return None
        return math.floor(elapsed_days_between(card.due, now))

    def _is_mature(self, card: Card) -> bool:
        return card.stability is not None and card.stability >= self.mature_stability

    def card_stats(self, cards: Iterable[Card]) -> CardStats:
        """Counts by state, maturity and leech status."""
        stats = CardStats()
        for card in cards:
            stats.total += 1
            if card.state is CardState.NEW:
                stats.new += 1
            elif card.state is CardState.LEARNING:
                stats.learning += 1
            elif card.state is CardState.REVIEW:
                stats.review += 1
            elif card.state is CardState.RELEARNING:
                stats.relearning += 1

            if self._is_mature(card):
                stats.mature += 1
            elif not card.is_new:
                stats.young += 1

            if card.is_leech(self.leech_threshold):
                stats.leeches += 1
        return stats
