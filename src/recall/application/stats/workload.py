"""
Future workload forecasting.

``simulate_future_workload`` is a pure function of the cards' current due
dates: calling it twice on the same snapshot gives identical output.
Backlog is a separate accumulation pass so missed days compound.
"""

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import datetime, timedelta, timezone, tzinfo

from recall.domain.constants import DEFAULT_FORECAST_DAYS, DEFAULT_NEW_CARDS_PER_DAY
from recall.domain.scheduling.models import Card
from recall.domain.stats.models import WorkloadDay


def simulate_future_workload(
    cards: Sequence[Card],
    days: int = DEFAULT_FORECAST_DAYS,
    now: datetime | None = None,
    new_cards_per_day: int = DEFAULT_NEW_CARDS_PER_DAY,
    tz: tzinfo = timezone.utc,
) -> list[WorkloadDay]:
    """
    Due-card volume for each day from tomorrow through ``days`` days ahead.

    Args:
        cards: Snapshot of all cards. Not modified.
        days: Number of days to forecast.
        now: Reference time; defaults to the current time.
        new_cards_per_day: Daily intake cap for never-reviewed cards.
        tz: Time zone that defines calendar days.

    Returns:
        One WorkloadDay per day, in date order, with backlog 0.
    """
    if days < 0:
        raise ValueError(f"days must be >= 0, got {days}")
    if new_cards_per_day < 0:
        raise ValueError(f"new_cards_per_day must be >= 0, got {new_cards_per_day}")

    now = now or datetime.now(timezone.utc)
    today = now.astimezone(tz).date()

    due_by_date = Counter(card.due.astimezone(tz).date() for card in cards if not card.is_new)
    unseen = sum(1 for card in cards if card.is_new)

    workload: list[WorkloadDay] = []
    for offset in range(1, days + 1):
        day = today + timedelta(days=offset)
        intake = min(new_cards_per_day, unseen)
        unseen -= intake
        reviews = due_by_date.get(day, 0)
        workload.append(
            WorkloadDay(date=day, new_cards=intake, reviews=reviews, total=intake + reviews)
        )
    return workload


def accumulate_backlog(
    workload: Iterable[WorkloadDay], initial_backlog: int = 0
) -> list[WorkloadDay]:
    """
    Carry each day's unreviewed total into the next day's backlog.

    Models a learner who does not study: day N's backlog is everything due
    up to and including day N.
    """
    backlog = initial_backlog
    result = []
    for day in workload:
        backlog += day.total
        result.append(replace(day, backlog=backlog))
    return result


def overdue_count(cards: Iterable[Card], now: datetime, tz: tzinfo = timezone.utc) -> int:
    """Reviewed cards due today or earlier."""
    today = now.astimezone(tz).date()
    return sum(1 for card in cards if not card.is_new and card.due.astimezone(tz).date() <= today)


def workload_forecast(
    cards: Sequence[Card],
    days: int = DEFAULT_FORECAST_DAYS,
    now: datetime | None = None,
    new_cards_per_day: int = DEFAULT_NEW_CARDS_PER_DAY,
    tz: tzinfo = timezone.utc,
) -> list[WorkloadDay]:
    """Forecast with backlog, seeded by the cards already overdue."""
    now = now or datetime.now(timezone.utc)
    workload = simulate_future_workload(cards, days, now, new_cards_per_day, tz)
    return accumulate_backlog(workload, initial_backlog=overdue_count(cards, now, tz))
