# Domain Scheduling Package
from .models import (
    Card,
    CardState,
    MemoryState,
    Rating,
    ReviewEvent,
    ReviewLog,
    ReviewOutcome,
    ReviewResult,
)
from .ports import ReviewOutcomeSink, StudyRepository

__all__ = [
    "Card",
    "CardState",
    "MemoryState",
    "Rating",
    "ReviewEvent",
    "ReviewLog",
    "ReviewOutcome",
    "ReviewResult",
    "ReviewOutcomeSink",
    "StudyRepository",
]
