# Application Scheduling Package
from .evaluation import EvaluationResult, evaluate_weights, validate_weights
from .forgetting_curve import (
    card_retrievability,
    forgetting_curve,
    interval_for_retention,
    retrievability,
)
from .interval_scheduler import IntervalScheduler, format_interval, fuzz_seed_for
from .state_machine import CardStateMachine

__all__ = [
    "CardStateMachine",
    "EvaluationResult",
    "IntervalScheduler",
    "card_retrievability",
    "evaluate_weights",
    "forgetting_curve",
    "format_interval",
    "fuzz_seed_for",
    "interval_for_retention",
    "retrievability",
    "validate_weights",
]
