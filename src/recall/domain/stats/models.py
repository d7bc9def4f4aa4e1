"""
Domain models for retention and workload analytics.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, field
from datetime import date


@dataclass(frozen=True)
class HourlyBucket:
    """
    Reviews grouped by hour of day.

    Attributes:
        hour: 0-23 in the reporting time zone.
        count: Number of reviews in the bucket.
        retention: Fraction of reviews rated above Again (0.0 for an empty bucket).
    """

    hour: int
    count: int
    retention: float


@dataclass(frozen=True)
class WorkloadDay:
    """
    Forecast volume for one future day.

    ``backlog`` is only filled in by the accumulation pass; a plain simulation
    leaves it at 0.
    """

    date: date
    new_cards: int
    reviews: int
    total: int
    backlog: int = 0


@dataclass(frozen=True)
class DailyActivity:
    """Review activity on one calendar day."""

    date: date
    total_reviews: int = 0
    lapses: int = 0
    avg_time_ms: float = 0.0
    retention_rate: float = 0.0
    new_cards: int = 0
    mature_reviews: int = 0


@dataclass(frozen=True)
class StreakData:
    current: int
    longest: int
    last_active_date: date | None
    freezes_available: int
    freezes_used: int


@dataclass(frozen=True)
class HeatmapCell:
    date: date
    count: int
    level: int  # 0-4


@dataclass
class RetentionMetrics:
    """
    Retention overview. All rates are fractions in [0, 1].

    Attributes:
        trend: Mean retention of the last 7 days minus the 7 days before.
        history: Daily mature retention for the last 30 days, oldest first.
    """

    true_retention: float
    desired_retention: float
    avg_retrievability: float
    avg_stability: float
    avg_difficulty: float | None
    trend: float
    history: list[float] = field(default_factory=list)


@dataclass
class CardStats:
    total: int = 0
    new: int = 0
    learning: int = 0
    review: int = 0
    relearning: int = 0
    mature: int = 0  # stability >= mature threshold
    young: int = 0
    leeches: int = 0


@dataclass(frozen=True)
class TodayStats:
    reviewed: int
    correct: int
    time_spent_minutes: int
    new_learned: int


@dataclass(frozen=True)
class WeekStats:
    total_reviews: int
    avg_retention: float
    avg_minutes_per_day: int
    active_days: int


@dataclass
class AnalyticsSummary:
    """Aggregate consumed by dashboards."""

    streak: StreakData
    retention: RetentionMetrics
    cards: CardStats
    today: TodayStats
    week: WeekStats
    workload: list[WorkloadDay] = field(default_factory=list)
