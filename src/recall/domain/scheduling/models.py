"""
Domain models for card scheduling.

These are closed, immutable records with no I/O. A card that has never been
reviewed carries no memory state at all (``memory is None``); it is never
represented with zeroed stability or difficulty.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, IntEnum

from recall.domain.constants import MAX_DIFFICULTY, MIN_DIFFICULTY
from recall.domain.errors import InvalidCardState, InvalidRating


class Rating(IntEnum):
    """Answer button pressed by the learner."""

    AGAIN = 1
    HARD = 2
    GOOD = 3
    EASY = 4

    @classmethod
    def parse(cls, value: object) -> "Rating":
        """Coerce ``value`` to a Rating, raising InvalidRating otherwise."""
        if isinstance(value, bool):
            raise InvalidRating(value)
        try:
            return cls(value)
        except (ValueError, TypeError):
            raise InvalidRating(value) from None

    @property
    def is_success(self) -> bool:
        return self is not Rating.AGAIN


class CardState(str, Enum):
    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    RELEARNING = "relearning"

    @classmethod
    def parse(cls, value: object) -> "CardState":
        if isinstance(value, CardState):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidCardState(f"Unknown card state {value!r}") from None


def _require_aware(name: str, value: datetime | None) -> None:
    if value is not None and value.tzinfo is None:
        raise InvalidCardState(f"{name} must be timezone-aware, got naive {value!r}")


@dataclass(frozen=True)
class MemoryState:
    """
    FSRS memory state of a card that has been reviewed at least once.

    Attributes:
        stability: Days until recall probability decays to 90%. Always > 0.
        difficulty: Intrinsic difficulty on the 1-10 scale.
    """

    stability: float
    difficulty: float

    def __post_init__(self):
        if not self.stability > 0:
            raise InvalidCardState(f"stability must be > 0, got {self.stability}")
        if not MIN_DIFFICULTY <= self.difficulty <= MAX_DIFFICULTY:
            raise InvalidCardState(
                f"difficulty must be within [{MIN_DIFFICULTY}, {MAX_DIFFICULTY}], "
                f"got {self.difficulty}"
            )


@dataclass(frozen=True)
class Card:
    """
    Scheduling state of a single flashcard.

    Owned by the state machine; persisted by an external store. Retrievability
    is deliberately absent: it is recomputed from ``last_review`` and
    ``memory.stability`` whenever it is needed.
    """

    card_id: str
    state: CardState
    due: datetime
    memory: MemoryState | None = None
    last_review: datetime | None = None
    reps: int = 0
    lapses: int = 0
    elapsed_days: float = 0.0  # Days between the two most recent reviews
    scheduled_days: int = 0  # Interval chosen at the most recent review

    def __post_init__(self):
        object.__setattr__(self, "state", CardState.parse(self.state))
        _require_aware("due", self.due)
        _require_aware("last_review", self.last_review)

        if self.reps < 0 or self.lapses < 0:
            raise InvalidCardState("reps and lapses must be non-negative")

        if self.state is CardState.NEW:
            if self.memory is not None:
                raise InvalidCardState(f"New card {self.card_id} cannot carry a memory state")
        else:
            if self.memory is None:
                raise InvalidCardState(
                    f"Card {self.card_id} in state {self.state.value} has no memory state"
                )
            if self.last_review is None:
                raise InvalidCardState(
                    f"Card {self.card_id} in state {self.state.value} has no last review"
                )

    @classmethod
    def new(cls, card_id: str, now: datetime) -> "Card":
        """A never-reviewed card, due immediately."""
        return cls(card_id=card_id, state=CardState.NEW, due=now)

    @property
    def is_new(self) -> bool:
        return self.memory is None

    @property
    def stability(self) -> float | None:
        return self.memory.stability if self.memory else None

    @property
    def difficulty(self) -> float | None:
        return self.memory.difficulty if self.memory else None

    def is_leech(self, threshold: int) -> bool:
        return self.lapses >= threshold


@dataclass(frozen=True)
class ReviewLog:
    """
    Immutable record of one review event. The sole input to all analytics.

    Attributes:
        state: State the card was in *before* this review.
        due, stability, difficulty: Values *after* this review.
        elapsed_days: Days since the previous review (0 for a first review).
        last_elapsed_days: The card's elapsed_days before this review.
        scheduled_days: Interval assigned by this review.
        duration_ms: Time the learner spent answering.
    """

    card_id: str
    rating: Rating
    state: CardState
    due: datetime
    stability: float
    difficulty: float
    elapsed_days: float
    last_elapsed_days: float
    scheduled_days: int
    review: datetime
    duration_ms: int = 0

    def __post_init__(self):
        object.__setattr__(self, "rating", Rating.parse(self.rating))
        object.__setattr__(self, "state", CardState.parse(self.state))
        _require_aware("review", self.review)
        _require_aware("due", self.due)

    @property
    def passed(self) -> bool:
        return self.rating.is_success


@dataclass(frozen=True)
class ReviewEvent:
    """A rating submitted by a study session."""

    card_id: str
    rating: int
    timestamp: datetime
    duration_ms: int = 0


@dataclass(frozen=True)
class ReviewOutcome:
    """Per-review payload handed to the external XP / reward system."""

    card_id: str
    rating: Rating
    is_new_card: bool
    duration_ms: int
    card_difficulty: float


@dataclass(frozen=True)
class ReviewResult:
    """
    Output of applying one rating to a card.

    Attributes:
        card: The card's next state.
        log: The log entry to append.
        retrievability: Recall probability at the moment of review,
            or None for a card that had never been reviewed.
        became_leech: True when this review moved lapses onto the leech threshold.
    """

    card: Card
    log: ReviewLog
    retrievability: float | None = None
    became_leech: bool = False

    def outcome(self) -> ReviewOutcome:
        return ReviewOutcome(
            card_id=self.card.card_id,
            rating=self.log.rating,
            is_new_card=self.log.state is CardState.NEW,
            duration_ms=self.log.duration_ms,
            card_difficulty=self.log.difficulty,
        )
