"""
Review Service — applies review events against the card store.

Reviews of the same card are serialized with a per-card lock because
stability and difficulty updates do not commute. Different cards proceed
independently.
"""

import asyncio
import logging

from recall.application.scheduling.state_machine import CardStateMachine
from recall.domain.errors import CardNotFound
from recall.domain.scheduling.models import ReviewEvent, ReviewResult
from recall.domain.scheduling.ports import ReviewOutcomeSink, StudyRepository

logger = logging.getLogger(__name__)


class ReviewService:
    """
    Loads a card, applies the rating, then persists the card and its log.

    Errors from the state machine or repository propagate to the caller;
    nothing is retried here.
    """

    def __init__(
        self,
        repo: StudyRepository,
        state_machine: CardStateMachine | None = None,
        outcome_sink: ReviewOutcomeSink | None = None,
    ):
        self._repo = repo
        self._machine = state_machine or CardStateMachine()
        self._sink = outcome_sink
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    async def submit(self, event: ReviewEvent) -> ReviewResult:
        """
        Apply one review event.

        Raises:
            CardNotFound: The repository has no such card.
            InvalidRating, NonMonotonicReviewTime: Propagated from the state machine.
        """
        card_id = event.card_id
        lock = self._locks.setdefault(card_id, asyncio.Lock())
        self._waiters[card_id] = self._waiters.get(card_id, 0) + 1
        try:
            async with lock:
                card = await self._repo.get_card(card_id)
                if card is None:
                    raise CardNotFound(card_id)

                result = self._machine.apply_review(
                    card, event.rating, event.timestamp, duration_ms=event.duration_ms
                )
                await self._repo.save_card(result.card)
                await self._repo.append_log(result.log)
        finally:
            # Drop the lock once no review of this card is pending
            self._waiters[card_id] -= 1
            if not self._waiters[card_id]:
                del self._waiters[card_id]
                del self._locks[card_id]

        logger.info(
            f"Reviewed {event.card_id}: rating={result.log.rating.value} "
            f"next due in {result.card.scheduled_days}d"
        )

        if self._sink is not None:
            await self._sink.publish(result.outcome())
        return result

    async def submit_many(self, events: list[ReviewEvent]) -> list[ReviewResult]:
        """
        Apply a batch of events concurrently.

        Events for the same card are applied in list order.
        """
        return list(await asyncio.gather(*(self.submit(e) for e in events)))
