"""
Retention metrics derived from review logs and card snapshots.

Pure functions. Empty input never raises: every metric has a defined
neutral value (0.0 or empty buckets).
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import date, datetime, timedelta, timezone, tzinfo

from recall.application.scheduling.forgetting_curve import card_retrievability
from recall.domain.constants import RETENTION_HISTORY_DAYS, RETENTION_TREND_WINDOW
from recall.domain.scheduling.models import Card, CardState, ReviewLog
from recall.domain.stats.models import HourlyBucket, RetentionMetrics

logger = logging.getLogger(__name__)


def _pass_rate(logs: Sequence[ReviewLog]) -> float:
    if not logs:
        return 0.0
    return sum(1 for log in logs if log.passed) / len(logs)


def true_retention(logs: Iterable[ReviewLog]) -> float:
    """
    Pass rate over reviews of mature cards (pre-review state Review).

    Returns 0.0 when there are no such reviews.
    """
    mature = [log for log in logs if log.state is CardState.REVIEW]
    if not mature:
        logger.debug("true_retention: no review-state logs")
    return _pass_rate(mature)


def average_retrievability(cards: Iterable[Card], now: datetime) -> float:
    """
    Mean current retrievability over cards reviewed at least once.

    Never-reviewed cards are excluded, not counted as zero. Returns 0.0 when
    no card has been reviewed.
    """
    values = [card_retrievability(card, now) for card in cards if not card.is_new]
    if not values:
        logger.debug("average_retrievability: no reviewed cards")
        return 0.0
    return sum(values) / len(values)


def hourly_breakdown(
    logs: Iterable[ReviewLog], tz: tzinfo = timezone.utc
) -> list[HourlyBucket]:
    """
    Review count and retention per hour of day (0-23) in ``tz``.

    Always returns 24 buckets; empty buckets report retention 0.0.
    """
    totals = [0] * 24
    passed = [0] * 24
    for log in logs:
        hour = log.review.astimezone(tz).hour
        totals[hour] += 1
        if log.passed:
            passed[hour] += 1

    return [
        HourlyBucket(
            hour=hour,
            count=totals[hour],
            retention=passed[hour] / totals[hour] if totals[hour] else 0.0,
        )
        for hour in range(24)
    ]


def retention_history(
    logs: Iterable[ReviewLog],
    today: date,
    days: int = RETENTION_HISTORY_DAYS,
    tz: tzinfo = timezone.utc,
    default: float = 0.0,
) -> list[float]:
    """
    Daily mature-card retention for the ``days`` days ending ``today``, oldest first.

    A day without mature reviews repeats the previous day's value; leading
    empty days use ``default``.
    """
    start = today - timedelta(days=days - 1)
    by_day: dict[date, list[ReviewLog]] = {}
    for log in logs:
        if log.state is not CardState.REVIEW:
            continue
        day = log.review.astimezone(tz).date()
        if start <= day <= today:
            by_day.setdefault(day, []).append(log)

    history: list[float] = []
    previous = default
    for offset in range(days):
        day_logs = by_day.get(start + timedelta(days=offset))
        if day_logs:
            previous = _pass_rate(day_logs)
        history.append(previous)
    return history


def retention_metrics(
    logs: Sequence[ReviewLog],
    cards: Sequence[Card],
    now: datetime,
    desired_retention: float,
    tz: tzinfo = timezone.utc,
) -> RetentionMetrics:
    """
    Retention overview for dashboards.

    Averages of stability and difficulty cover cards in the Review state only.
    """
    review_cards = [c for c in cards if c.state is CardState.REVIEW and c.memory]
    if review_cards:
        avg_stability = sum(c.memory.stability for c in review_cards) / len(review_cards)
        avg_difficulty = sum(c.memory.difficulty for c in review_cards) / len(review_cards)
    else:
        avg_stability = 0.0
        avg_difficulty = None

    history = retention_history(
        logs, now.astimezone(tz).date(), tz=tz, default=desired_retention
    )
    recent = history[-RETENTION_TREND_WINDOW:]
    previous = history[-2 * RETENTION_TREND_WINDOW : -RETENTION_TREND_WINDOW]
    trend = (sum(recent) / len(recent) - sum(previous) / len(previous)) if previous else 0.0

    return RetentionMetrics(
        true_retention=true_retention(logs),
        desired_retention=desired_retention,
        avg_retrievability=average_retrievability(cards, now),
        avg_stability=avg_stability,
        avg_difficulty=avg_difficulty,
        trend=trend,
        history=history,
    )
