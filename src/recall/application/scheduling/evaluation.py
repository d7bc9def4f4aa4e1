"""
Scoring FSRS weights against recorded review history.

Replays every card's logs under a candidate set of weights and compares the
predicted retrievability at each review with what actually happened. Lower
log loss means the weights describe this learner's memory better.
"""

import logging
import math
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from recall.domain.constants import WEIGHT_BOUNDS, WEIGHT_COUNT
from recall.domain.scheduling.models import ReviewLog

from .forgetting_curve import retrievability
from .state_machine import (
    initial_difficulty,
    initial_stability,
    next_difficulty,
    next_forget_stability,
    next_recall_stability,
)

logger = logging.getLogger(__name__)

_EPS = 1e-6


@dataclass(frozen=True)
class EvaluationResult:
    log_loss: float
    rmse: float
    sample_size: int


def validate_weights(weights: Sequence[float]) -> bool:
    """True if there are 19 finite weights, each within its plausible range."""
    if len(weights) != WEIGHT_COUNT:
        return False
    return all(
        math.isfinite(w) and lo <= w <= hi for w, (lo, hi) in zip(weights, WEIGHT_BOUNDS)
    )


def _group_by_card(logs: Iterable[ReviewLog]) -> dict[str, list[ReviewLog]]:
    grouped: dict[str, list[ReviewLog]] = defaultdict(list)
    for log in logs:
        grouped[log.card_id].append(log)
    for history in grouped.values():
        history.sort(key=lambda entry: entry.review)
    return grouped


def predict_outcomes(
    logs: Iterable[ReviewLog], weights: Sequence[float]
) -> list[tuple[float, bool]]:
    """
    (predicted retrievability, recalled) for every review after a card's first.

    The first log of each card only seeds its memory state.
    """
    w = list(weights)
    samples: list[tuple[float, bool]] = []

    for history in _group_by_card(logs).values():
        first = history[0]
        s = initial_stability(first.rating, w)
        d = initial_difficulty(first.rating, w)

        for log in history[1:]:
            r = retrievability(max(0.0, log.elapsed_days), s)
            samples.append((r, log.passed))
            if log.passed:
                s = next_recall_stability(d, s, r, log.rating, w)
            else:
                s = next_forget_stability(d, s, r, w)
            d = next_difficulty(d, log.rating, w)

    return samples


def evaluate_weights(logs: Iterable[ReviewLog], weights: Sequence[float]) -> EvaluationResult:
    """
    Binary cross-entropy and RMSE of the weights' predictions.

    A history with nothing to predict scores 0.0 on both measures.
    """
    samples = predict_outcomes(logs, weights)
    if not samples:
        logger.debug("No repeat reviews to evaluate; returning neutral scores")
        return EvaluationResult(log_loss=0.0, rmse=0.0, sample_size=0)

    loss = 0.0
    squared = 0.0
    for p, recalled in samples:
        p = min(max(p, _EPS), 1 - _EPS)
        y = 1.0 if recalled else 0.0
        loss -= y * math.log(p) + (1 - y) * math.log(1 - p)
        squared += (p - y) ** 2

    n = len(samples)
    return EvaluationResult(log_loss=loss / n, rmse=math.sqrt(squared / n), sample_size=n)


def compare_weights(
    logs: Sequence[ReviewLog],
    baseline: Sequence[float],
    candidate: Sequence[float],
) -> float:
    """
    Relative log-loss improvement of ``candidate`` over ``baseline``.

    Positive means the candidate fits the history better.
    """
    base = evaluate_weights(logs, baseline)
    cand = evaluate_weights(logs, candidate)
    if base.log_loss == 0:
        return 0.0
    return (base.log_loss - cand.log_loss) / base.log_loss
