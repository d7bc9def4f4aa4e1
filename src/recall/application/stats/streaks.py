"""
Daily activity, study streaks and the activity heatmap.
"""

import math
from collections import defaultdict
from collections.abc import Iterable, Mapping
from datetime import date, timedelta, timezone, tzinfo

from recall.domain.constants import (
    DEFAULT_ACTIVITY_THRESHOLD,
    DEFAULT_HEATMAP_PERCENTILE,
    DEFAULT_HEATMAP_WEEKS,
    DEFAULT_STREAK_FREEZES,
    HEATMAP_LEVELS,
)
from recall.domain.scheduling.models import CardState, Rating, ReviewLog
from recall.domain.stats.models import DailyActivity, HeatmapCell, StreakData


def daily_activity(
    logs: Iterable[ReviewLog], tz: tzinfo = timezone.utc
) -> dict[date, DailyActivity]:
    """Bucket review logs by calendar day in ``tz``."""
    buckets: dict[date, list[ReviewLog]] = defaultdict(list)
    for log in logs:
        buckets[log.review.astimezone(tz).date()].append(log)

    activity = {}
    for day, day_logs in sorted(buckets.items()):
        total = len(day_logs)
        activity[day] = DailyActivity(
            date=day,
            total_reviews=total,
            lapses=sum(1 for log in day_logs if log.rating == Rating.AGAIN),
            avg_time_ms=sum(log.duration_ms for log in day_logs) / total,
            retention_rate=sum(1 for log in day_logs if log.passed) / total,
            new_cards=sum(1 for log in day_logs if log.state is CardState.NEW),
            mature_reviews=sum(1 for log in day_logs if log.state is CardState.REVIEW),
        )
    return activity


def daily_counts(activity: Mapping[date, DailyActivity]) -> dict[date, int]:
    return {day: a.total_reviews for day, a in activity.items()}


def calculate_streak(
    counts: Mapping[date, int],
    today: date,
    activity_threshold: int = DEFAULT_ACTIVITY_THRESHOLD,
    freezes: int = DEFAULT_STREAK_FREEZES,
) -> StreakData:
    """
    Current and longest streak of active days.

    A day is active when its review count exceeds ``activity_threshold``.
    Inside a running streak each inactive day spends one freeze token and
    leaves the streak intact; with no tokens left the streak resets to 0 and
    the tokens are replenished. ``longest`` survives resets. Today not yet
    being active never breaks the streak.

    Args:
        counts: Reviews per calendar day. Days after ``today`` are ignored.
        today: The reference day.
        activity_threshold: A day needs strictly more reviews than this.
        freezes: Gap days tolerated per streak.
    """
    active_days = sorted(d for d, n in counts.items() if n > activity_threshold and d <= today)
    if not active_days:
        return StreakData(
            current=0,
            longest=0,
            last_active_date=None,
            freezes_available=freezes,
            freezes_used=0,
        )

    run = longest = used = 0
    tokens = freezes
    active = set(active_days)
    day = active_days[0]
    while day <= today:
        if day in active:
            run += 1
            longest = max(longest, run)
        elif day != today and run > 0:
            if tokens > 0:
                tokens -= 1
                used += 1
            else:
                run = 0
                tokens = freezes
                used = 0
        day += timedelta(days=1)

    return StreakData(
        current=run,
        longest=longest,
        last_active_date=active_days[-1],
        freezes_available=tokens,
        freezes_used=used,
    )


def heatmap(
    counts: Mapping[date, int],
    today: date,
    weeks: int = DEFAULT_HEATMAP_WEEKS,
    percentile: float = DEFAULT_HEATMAP_PERCENTILE,
) -> list[HeatmapCell]:
    """
    One cell per day for ``weeks`` weeks ending ``today``, oldest first.

    Levels 1-4 are quarters of the ``percentile`` count among active days in
    the window, so a few outlier days do not flatten the scale. Days above
    the percentile are level 4; inactive days are level 0.
    """
    days = [today - timedelta(days=offset) for offset in range(weeks * 7 - 1, -1, -1)]
    window = [counts.get(day, 0) for day in days]

    active = sorted(n for n in window if n > 0)
    if active:
        # Nearest rank; rounding keeps n * p from overshooting an exact integer
        rank = math.ceil(round(len(active) * percentile, 9))
        idx = min(len(active) - 1, max(0, rank - 1))
        scale = active[idx]
    else:
        scale = 1

    cells = []
    for day, count in zip(days, window):
        level = 0
        if count > 0:
            ratio = count / scale
            level = min(HEATMAP_LEVELS, max(1, math.ceil(ratio * HEATMAP_LEVELS)))
        cells.append(HeatmapCell(date=day, count=count, level=level))
    return cells
