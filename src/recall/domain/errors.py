"""Exceptions raised by the scheduling core.

Analytics never raise on empty input; they fall back to neutral values.
Only state mutations reject bad input.
"""

from datetime import datetime


class RecallError(Exception):
    """Base class for all scheduling errors."""


class InvalidRating(RecallError, ValueError):
    """Rating outside Again/Hard/Good/Easy (1-4)."""

    def __init__(self, rating: object):
        self.rating = rating
        super().__init__(f"Invalid rating {rating!r}: expected one of 1, 2, 3, 4")


class NonMonotonicReviewTime(RecallError):
    """A review timestamp precedes the card's last review."""

    def __init__(self, card_id: str, last_review: datetime, now: datetime):
        self.card_id = card_id
        self.last_review = last_review
        self.now = now
        super().__init__(
            f"Review of card {card_id} at {now.isoformat()} precedes "
            f"its last review at {last_review.isoformat()}"
        )


class UninitializedCardAccess(RecallError):
    """Memory state requested for a card that has never been reviewed."""

    def __init__(self, card_id: str):
        self.card_id = card_id
        super().__init__(f"Card {card_id} has never been reviewed")


class InvalidCardState(RecallError, ValueError):
    """A card or log record violates its construction invariants."""


class CardNotFound(RecallError):
    """The repository has no card with the requested id."""

    def __init__(self, card_id: str):
        self.card_id = card_id
        super().__init__(f"Card {card_id} not found")
