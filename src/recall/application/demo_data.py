"""
Seeded demo data for dashboards and manual testing.

Every generator takes an explicit ``random.Random``; the same seed always
yields the same data and no module-level state is touched.
"""

import random
from datetime import date, datetime, timedelta

from recall.domain.scheduling.models import Card, CardState, MemoryState, Rating, ReviewLog
from recall.domain.stats.models import DailyActivity

# Rating mix of a typical learner: mostly Good.
_RATING_CUTOFFS = ((0.08, Rating.AGAIN), (0.18, Rating.HARD), (0.85, Rating.GOOD))


def _pick_rating(rng: random.Random) -> Rating:
    roll = rng.random()
    for cutoff, rating in _RATING_CUTOFFS:
        if roll < cutoff:
            return rating
    return Rating.EASY


def generate_cards(rng: random.Random, count: int, now: datetime) -> list[Card]:
    """
    Cards in a 10% new / 20% learning / 70% review mix, some overdue.
    """
    cards = []
    for i in range(count):
        card_id = f"card_{i}"
        roll = rng.random()
        if roll < 0.1:
            cards.append(Card.new(card_id, now))
            continue

        if roll < 0.3:
            state = CardState.LEARNING
            stability = rng.uniform(1, 21)
            reps = rng.randint(1, 5)
        else:
            state = CardState.REVIEW
            stability = rng.uniform(21, 221)
            reps = rng.randint(5, 24)

        last_review = now - timedelta(days=rng.uniform(0, 30))
        due = max(last_review, now + timedelta(days=rng.uniform(-2, 12)))
        cards.append(
            Card(
                card_id=card_id,
                state=state,
                due=due,
                memory=MemoryState(stability=stability, difficulty=rng.uniform(3, 7)),
                last_review=last_review,
                reps=reps,
                lapses=int(reps * 0.15),
                scheduled_days=max(1, (due - last_review).days),
            )
        )
    return cards


def generate_review_logs(
    rng: random.Random, count: int, now: datetime, card_count: int = 500
) -> list[ReviewLog]:
    """
    Logs spread over the last 90 days, sorted by review time ascending.
    """
    logs = []
    for _ in range(count):
        review = now - timedelta(days=rng.uniform(0, 90))
        scheduled = rng.randint(1, 60)
        logs.append(
            ReviewLog(
                card_id=f"card_{rng.randrange(card_count)}",
                rating=_pick_rating(rng),
                state=CardState.REVIEW if rng.random() < 0.7 else CardState.LEARNING,
                due=review + timedelta(days=scheduled),
                stability=rng.uniform(5, 105),
                difficulty=rng.uniform(3, 7),
                elapsed_days=rng.uniform(0, 30),
                last_elapsed_days=rng.uniform(0, 20),
                scheduled_days=scheduled,
                review=review,
                duration_ms=rng.randint(2000, 10000),
            )
        )
    logs.sort(key=lambda log: log.review)
    return logs


def generate_daily_activity(
    rng: random.Random, days: int, today: date
) -> dict[date, DailyActivity]:
    """
    ``days`` days of activity ending ``today``: weekdays busier than
    weekends, with an occasional quiet "vacation" week.
    """
    activity = {}
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        weekend = day.weekday() >= 5
        study_prob = 0.6 if weekend else 0.85
        if (offset // 7) % 8 == 0:
            study_prob *= 0.3

        if rng.random() >= study_prob:
            activity[day] = DailyActivity(date=day)
            continue

        total = int((30 if weekend else 50) * rng.uniform(0.75, 1.25))
        retention = rng.uniform(0.85, 0.97)
        activity[day] = DailyActivity(
            date=day,
            total_reviews=total,
            lapses=int(total * (1 - retention)),
            avg_time_ms=rng.uniform(3000, 5000),
            retention_rate=retention,
            new_cards=rng.randrange(10),
            mature_reviews=int(total * 0.7),
        )
    return activity
