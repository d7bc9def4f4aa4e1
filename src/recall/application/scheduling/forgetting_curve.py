"""
Forgetting-curve model.

R(t, S) = (1 + t / (9 * S)) ** -1

With this scale, retrievability is exactly 0.9 after ``stability`` days.
This is a pure computation module with no I/O.
"""

from datetime import datetime

from recall.domain.constants import CURVE_DECAY, CURVE_SCALE, SECONDS_PER_DAY
from recall.domain.errors import UninitializedCardAccess
from recall.domain.scheduling.models import Card


def retrievability(elapsed_days: float, stability: float) -> float:
    """
    Probability of recall ``elapsed_days`` after the last review.

    Args:
        elapsed_days: Days since last review, >= 0.
        stability: Memory stability in days, > 0.

    Returns:
        A value in (0, 1]; exactly 1.0 at ``elapsed_days == 0``.
    """
    if not stability > 0:
        raise ValueError(f"stability must be > 0, got {stability}")
    if elapsed_days < 0:
        raise ValueError(f"elapsed_days must be >= 0, got {elapsed_days}")
    return (1.0 + elapsed_days / (CURVE_SCALE * stability)) ** CURVE_DECAY


def interval_for_retention(stability: float, requested_retention: float) -> float:
    """
    Inverse of the curve: days until retrievability falls to ``requested_retention``.

    t = 9 * S * (1/R - 1). Unrounded.
    """
    if not stability > 0:
        raise ValueError(f"stability must be > 0, got {stability}")
    if not 0.0 < requested_retention < 1.0:
        raise ValueError(
            f"requested_retention must be strictly between 0 and 1, got {requested_retention}"
        )
    return CURVE_SCALE * stability * (requested_retention ** (1.0 / CURVE_DECAY) - 1.0)


def elapsed_days_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / SECONDS_PER_DAY


def card_retrievability(card: Card, now: datetime) -> float:
    """
    Current recall probability of a reviewed card.

    Raises:
        UninitializedCardAccess: The card has never been reviewed.
    """
    if card.memory is None or card.last_review is None:
        raise UninitializedCardAccess(card.card_id)
    elapsed = max(0.0, elapsed_days_between(card.last_review, now))
    return retrievability(elapsed, card.memory.stability)


def forgetting_curve(
    stability: float, days: float = 30, points: int = 100
) -> list[tuple[float, float]]:
    """(day, retention) samples from day 0 to ``days`` inclusive, for plotting."""
    if points < 1:
        raise ValueError("points must be >= 1")
    return [
        (day, retrievability(day, stability))
        for day in (i / points * days for i in range(points + 1))
    ]
