from datetime import date, timedelta

import pytest

from recall.application.stats.streaks import (
    calculate_streak,
    daily_activity,
    daily_counts,
    heatmap,
)
from recall.domain.scheduling.models import CardState, Rating

TODAY = date(2024, 3, 10)


def active(start: date, end: date, count: int = 5) -> dict[date, int]:
    days = (end - start).days + 1
    return {start + timedelta(days=i): count for i in range(days)}


class TestDailyActivity:
    def test_buckets_by_day(self, now, make_log):
        yesterday = now - timedelta(days=1)
        logs = [
            make_log(yesterday, Rating.GOOD, duration_ms=4000),
            make_log(yesterday, Rating.AGAIN, state=CardState.NEW, duration_ms=6000),
            make_log(now, Rating.GOOD, state=CardState.LEARNING),
        ]

        activity = daily_activity(logs)
        day = activity[date(2024, 3, 9)]

        assert list(activity) == [date(2024, 3, 9), date(2024, 3, 10)]
        assert day.total_reviews == 2
        assert day.lapses == 1
        assert day.avg_time_ms == 5000
        assert day.retention_rate == 0.5
        assert day.new_cards == 1
        assert day.mature_reviews == 1
        assert daily_counts(activity) == {date(2024, 3, 9): 2, date(2024, 3, 10): 1}

    def test_empty(self):
        assert daily_activity([]) == {}


class TestCalculateStreak:
    def test_consecutive_days(self):
        data = calculate_streak(active(date(2024, 3, 6), TODAY), TODAY)

        assert data.current == 5
        assert data.longest == 5
        assert data.last_active_date == TODAY
        assert data.freezes_available == 3
        assert data.freezes_used == 0

    def test_today_not_yet_active_keeps_streak(self):
        data = calculate_streak(active(date(2024, 3, 6), date(2024, 3, 9)), TODAY)

        assert data.current == 4
        assert data.freezes_used == 0

    def test_gap_spends_a_freeze(self):
        counts = active(date(2024, 3, 1), date(2024, 3, 3)) | active(date(2024, 3, 5), TODAY)

        data = calculate_streak(counts, TODAY, freezes=1)

        assert data.current == 9
        assert data.longest == 9
        assert data.freezes_used == 1
        assert data.freezes_available == 0

    def test_gap_without_freezes_resets(self):
        today = date(2024, 2, 15)
        counts = active(date(2024, 2, 1), date(2024, 2, 10)) | active(date(2024, 2, 13), today)

        data = calculate_streak(counts, today, freezes=1)

        assert data.current == 3
        assert data.longest == 10
        assert data.freezes_available == 1
        assert data.freezes_used == 0

    def test_streak_lapses_after_long_absence(self):
        data = calculate_streak({date(2024, 3, 1): 10}, TODAY, freezes=3)

        assert data.current == 0
        assert data.longest == 1
        assert data.last_active_date == date(2024, 3, 1)

    def test_threshold_is_exclusive(self):
        counts = {date(2024, 3, 9): 5, TODAY: 3}

        data = calculate_streak(counts, TODAY, activity_threshold=3)

        assert data.current == 1
        assert data.last_active_date == date(2024, 3, 9)

    def test_future_days_ignored(self):
        counts = active(TODAY, TODAY + timedelta(days=5))
        assert calculate_streak(counts, TODAY).current == 1

    def test_no_activity(self):
        data = calculate_streak({}, TODAY, freezes=2)

        assert (data.current, data.longest) == (0, 0)
        assert data.last_active_date is None
        assert data.freezes_available == 2


class TestHeatmap:
    def test_shape(self):
        cells = heatmap({}, TODAY, weeks=3)

        assert len(cells) == 21
        assert cells[-1].date == TODAY
        assert cells[0].date == TODAY - timedelta(days=20)
        assert all(c.level == 0 for c in cells)

    def test_levels_scale_to_percentile_not_max(self):
        values = [0, 2, 5, 7] + [10] * 9 + [1000]
        start = TODAY - timedelta(days=13)
        counts = {start + timedelta(days=i): n for i, n in enumerate(values)}

        levels = [c.level for c in heatmap(counts, TODAY, weeks=2, percentile=0.9)]

        assert levels == [0, 1, 2, 3] + [4] * 9 + [4]

    def test_one_outlier_among_few_active_days(self):
        counts = {TODAY - timedelta(days=d): 10 for d in range(1, 10)}
        counts[TODAY] = 1000

        levels = [c.level for c in heatmap(counts, TODAY, weeks=2, percentile=0.9)]

        assert levels[-10:] == [4] * 10
        assert levels[:4] == [0] * 4

    def test_percentile_rank_with_small_sample(self):
        counts = {TODAY - timedelta(days=d): n for d, n in enumerate([8, 4, 2, 1])}

        # Nearest rank of p=0.5 over four active days is the second smallest
        levels = [c.level for c in heatmap(counts, TODAY, weeks=1, percentile=0.5)]

        assert levels[-4:] == [2, 4, 4, 4]

    def test_active_days_are_never_level_zero(self):
        counts = {TODAY: 1, TODAY - timedelta(days=1): 400}
        cells = heatmap(counts, TODAY, weeks=1, percentile=1.0)

        assert cells[-1].level == 1
        assert cells[-2].level == 4

    @pytest.mark.parametrize("count", [1, 50, 10_000])
    def test_single_active_day_is_full_scale(self, count):
        assert heatmap({TODAY: count}, TODAY, weeks=1)[-1].level == 4
