"""
Analytics Service — Application layer orchestrator.

Reads one snapshot of cards and logs from the repository and turns it into
dashboard aggregates.
"""

import logging
from datetime import date, datetime, timedelta, timezone

from recall.application.config import RecallConfig
from recall.domain.constants import DEFAULT_FORECAST_DAYS, DEFAULT_HEATMAP_WEEKS
from recall.domain.scheduling.models import Card, ReviewLog
from recall.domain.scheduling.ports import StudyRepository
from recall.domain.stats.models import (
    AnalyticsSummary,
    DailyActivity,
    HeatmapCell,
    HourlyBucket,
    TodayStats,
    WeekStats,
    WorkloadDay,
)

from .metrics_calculator import MetricsCalculator
from .review_log_aggregator import hourly_breakdown, retention_metrics
from .streaks import calculate_streak, daily_activity, daily_counts, heatmap
from .workload import workload_forecast

logger = logging.getLogger(__name__)


class AnalyticsService:
    """
    Application service for dashboard analytics.

    Follows Dependency Inversion: depends on the StudyRepository abstraction,
    not a concrete store.
    """

    def __init__(
        self,
        repo: StudyRepository,
        config: RecallConfig | None = None,
        calculator: MetricsCalculator | None = None,
    ):
        """
        Args:
            repo: The repository (port) for fetching cards and logs.
            config: Retention target, thresholds and time zone.
            calculator: Optional custom calculator; built from config if not provided.
        """
        self._repo = repo
        self._config = config or RecallConfig()
        self._calc = calculator or MetricsCalculator(
            leech_threshold=self._config.leech_threshold,
            mature_stability=self._config.mature_stability,
        )

    async def _snapshot(self) -> tuple[list[Card], list[ReviewLog]]:
        cards = await self._repo.list_cards()
        logs = await self._repo.list_logs()
        logger.debug(f"Analytics snapshot: {len(cards)} cards, {len(logs)} logs")
        return cards, logs

    def _today(self, now: datetime) -> date:
        return now.astimezone(self._config.tzinfo).date()

    async def get_summary(self, now: datetime | None = None) -> AnalyticsSummary:
        """
        Build the full dashboard summary as of ``now``.
        """
        now = now or datetime.now(timezone.utc)
        tz = self._config.tzinfo
        today = self._today(now)
        cards, logs = await self._snapshot()

        activity = daily_activity(logs, tz)
        streak = calculate_streak(
            daily_counts(activity),
            today,
            activity_threshold=self._config.activity_threshold,
            freezes=self._config.streak_freezes,
        )

        return AnalyticsSummary(
            streak=streak,
            retention=retention_metrics(
                logs, cards, now, self._config.requested_retention, tz
            ),
            cards=self._calc.card_stats(cards),
            today=self._today_stats(activity.get(today), logs, today),
            week=self._week_stats(activity, today),
            workload=workload_forecast(
                cards,
                DEFAULT_FORECAST_DAYS,
                now,
                self._config.new_cards_per_day,
                tz,
            ),
        )

    def _today_stats(
        self, day: DailyActivity | None, logs: list[ReviewLog], today: date
    ) -> TodayStats:
        if day is None:
            return TodayStats(reviewed=0, correct=0, time_spent_minutes=0, new_learned=0)

        tz = self._config.tzinfo
        today_logs = [log for log in logs if log.review.astimezone(tz).date() == today]
        return TodayStats(
            reviewed=day.total_reviews,
            correct=sum(1 for log in today_logs if log.passed),
            time_spent_minutes=round(sum(log.duration_ms for log in today_logs) / 60000),
            new_learned=day.new_cards,
        )

    def _week_stats(self, activity: dict[date, DailyActivity], today: date) -> WeekStats:
        week = [activity[d] for d in (today - timedelta(days=i) for i in range(7)) if d in activity]
        active = [d for d in week if d.total_reviews > 0]
        total_ms = sum(d.avg_time_ms * d.total_reviews for d in week)

        return WeekStats(
            total_reviews=sum(d.total_reviews for d in week),
            avg_retention=(
                sum(d.retention_rate for d in active) / len(active) if active else 0.0
            ),
            avg_minutes_per_day=round(total_ms / max(len(active), 1) / 60000),
            active_days=len(active),
        )

    async def get_heatmap(
        self, now: datetime | None = None, weeks: int = DEFAULT_HEATMAP_WEEKS
    ) -> list[HeatmapCell]:
        now = now or datetime.now(timezone.utc)
        _, logs = await self._snapshot()
        counts = daily_counts(daily_activity(logs, self._config.tzinfo))
        return heatmap(counts, self._today(now), weeks, self._config.heatmap_percentile)

    async def get_hourly_stats(self) -> list[HourlyBucket]:
        _, logs = await self._snapshot()
        return hourly_breakdown(logs, self._config.tzinfo)

    async def get_workload_forecast(
        self, now: datetime | None = None, days: int = DEFAULT_FORECAST_DAYS
    ) -> list[WorkloadDay]:
        now = now or datetime.now(timezone.utc)
        cards = await self._repo.list_cards()
        return workload_forecast(
            cards, days, now, self._config.new_cards_per_day, self._config.tzinfo
        )
