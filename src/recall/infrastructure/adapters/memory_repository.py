"""
In-Memory Study Repository — Infrastructure adapter for demos and tests.

Implements StudyRepository over plain dicts. Reads return copies, so
analytics always see a consistent point-in-time snapshot.
"""

import logging

from recall.domain.scheduling.models import Card, ReviewLog
from recall.domain.scheduling.ports import StudyRepository

logger = logging.getLogger(__name__)


class InMemoryStudyRepository(StudyRepository):
    """
    Keeps cards keyed by id and logs in review order.
    """

    def __init__(self, cards: list[Card] | None = None, logs: list[ReviewLog] | None = None):
        self._cards: dict[str, Card] = {card.card_id: card for card in cards or []}
        self._logs: list[ReviewLog] = sorted(logs or [], key=lambda log: log.review)

    async def get_card(self, card_id: str) -> Card | None:
        return self._cards.get(card_id)

    async def save_card(self, card: Card) -> None:
        self._cards[card.card_id] = card

    async def append_log(self, log: ReviewLog) -> None:
        if self._logs and log.review < self._logs[-1].review:
            logger.debug(f"Out-of-order log for {log.card_id}; re-sorting history")
            self._logs.append(log)
            self._logs.sort(key=lambda entry: entry.review)
            return
        self._logs.append(log)

    async def list_cards(self) -> list[Card]:
        return list(self._cards.values())

    async def list_logs(self) -> list[ReviewLog]:
        return list(self._logs)
