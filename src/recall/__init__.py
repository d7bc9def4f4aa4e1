"""recall: FSRS-style spaced-repetition scheduling and retention analytics."""

__version__ = "0.4.0"
