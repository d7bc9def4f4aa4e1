"""
Ports (interfaces) for the collaborators around the scheduling core.

Persistence and reward systems live outside this package; application
services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod

from .models import Card, ReviewLog, ReviewOutcome


class StudyRepository(ABC):
    """
    Port for loading and persisting cards and review logs.

    Reads used by analytics must come from one consistent snapshot
    (a point-in-time copy or a transactional read).
    """

    @abstractmethod
    async def get_card(self, card_id: str) -> Card | None:
        """
        Fetch a single card.

        Returns:
            The card, or None if the store has no such card.
        """
        pass

    @abstractmethod
    async def save_card(self, card: Card) -> None:
        """Persist the card's new scheduling state."""
        pass

    @abstractmethod
    async def append_log(self, log: ReviewLog) -> None:
        """Append a review log. Logs are never updated or deleted."""
        pass

    @abstractmethod
    async def list_cards(self) -> list[Card]:
        pass

    @abstractmethod
    async def list_logs(self) -> list[ReviewLog]:
        """
        Fetch the review history.

        Returns:
            ReviewLog entries sorted by review time ascending.
        """
        pass


class ReviewOutcomeSink(ABC):
    """Port for the external XP / streak-reward system."""

    @abstractmethod
    async def publish(self, outcome: ReviewOutcome) -> None:
        pass
