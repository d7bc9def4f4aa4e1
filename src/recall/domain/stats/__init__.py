# Domain Stats Package
from .models import (
    AnalyticsSummary,
    CardStats,
    DailyActivity,
    HeatmapCell,
    HourlyBucket,
    RetentionMetrics,
    StreakData,
    TodayStats,
    WeekStats,
    WorkloadDay,
)

__all__ = [
    "AnalyticsSummary",
    "CardStats",
    "DailyActivity",
    "HeatmapCell",
    "HourlyBucket",
    "RetentionMetrics",
    "StreakData",
    "TodayStats",
    "WeekStats",
    "WorkloadDay",
]
