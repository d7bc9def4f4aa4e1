# Application Stats Package
from .metrics_calculator import EnrichedCard, MetricsCalculator
from .review_log_aggregator import (
    average_retrievability,
    hourly_breakdown,
    retention_history,
    retention_metrics,
    true_retention,
)
from .service import AnalyticsService
from .streaks import calculate_streak, daily_activity, daily_counts, heatmap
from .workload import accumulate_backlog, simulate_future_workload, workload_forecast

__all__ = [
    "AnalyticsService",
    "EnrichedCard",
    "MetricsCalculator",
    "accumulate_backlog",
    "average_retrievability",
    "calculate_streak",
    "daily_activity",
    "daily_counts",
    "heatmap",
    "hourly_breakdown",
    "retention_history",
    "retention_metrics",
    "simulate_future_workload",
    "true_retention",
    "workload_forecast",
]
