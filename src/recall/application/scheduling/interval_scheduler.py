"""
Interval scheduler.

Turns a stability into a whole number of days by inverting the forgetting
curve for the requested retention, then clamps and optionally fuzzes it.
"""

import math
import random
import zlib

from recall.application.config import RecallConfig
from recall.domain.constants import FUZZ_FLOOR, FUZZ_MIN_INTERVAL

from .forgetting_curve import interval_for_retention


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def fuzz_seed_for(card_id: str, reps: int) -> int:
    """
    Stable fuzz seed for a card at a given review count.

    Independent of PYTHONHASHSEED, so a card is fuzzed identically across
    processes and for every rating previewed at the same review.
    """
    return zlib.crc32(f"{card_id}:{reps}".encode("utf-8"))


class IntervalScheduler:
    """Chooses the next interval, in days, for a target retention."""

    def __init__(self, config: RecallConfig | None = None):
        self.config = config or RecallConfig()

    def _clamp(self, days: int) -> int:
        lo = self.config.minimum_interval
        hi = self.config.maximum_interval
        return max(lo, min(days, hi))

    def next_interval(
        self,
        stability: float,
        requested_retention: float | None = None,
        fuzz_seed: int | None = None,
    ) -> int:
        """
        Days until the card should be shown again.

        Args:
            stability: Memory stability after the review.
            requested_retention: Target recall probability; defaults to config.
            fuzz_seed: Seed for the per-card fuzz. No fuzz is applied without one
                or when fuzz is disabled.

        Returns:
            An integer within [minimum_interval, maximum_interval].
        """
        retention = (
            requested_retention
            if requested_retention is not None
            else self.config.requested_retention
        )
        interval = self._clamp(round_half_up(interval_for_retention(stability, retention)))

        if fuzz_seed is not None and self.config.enable_fuzz:
            interval = self.fuzz(interval, fuzz_seed)
        return interval

    def fuzz_range(self, interval: int) -> tuple[int, int]:
        """Inclusive (min, max) a fuzzed interval can land on."""
        if not self.config.enable_fuzz or interval < FUZZ_MIN_INTERVAL:
            return interval, interval

        delta = max(1, round_half_up(interval * self.config.fuzz_factor))
        low = self._clamp(max(FUZZ_FLOOR, interval - delta))
        high = self._clamp(interval + delta)
        return low, high

    def fuzz(self, interval: int, seed: int) -> int:
        low, high = self.fuzz_range(interval)
        if low == high:
            return interval
        r = random.Random(seed).random()
        return self._clamp(round_half_up(low + r * (high - low)))


def format_interval(days: float) -> str:
    """Compact label for an interval: 10m, 3h, 5d, 2mo, 1.5y."""
    if days < 1 / 24:
        return f"{max(1, round_half_up(days * 24 * 60))}m"
    if days < 1:
        return f"{round_half_up(days * 24)}h"
    if days < 30:
        return f"{round_half_up(days)}d"
    if days < 365:
        return f"{round_half_up(days / 30)}mo"
    years = days / 365
    return f"{years:.1f}y" if years < 2 else f"{round_half_up(years)}y"
