import math
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from recall.domain.constants import (
    DEFAULT_ACTIVITY_THRESHOLD,
    DEFAULT_FUZZ_FACTOR,
    DEFAULT_HEATMAP_PERCENTILE,
    DEFAULT_LEECH_THRESHOLD,
    DEFAULT_MATURE_STABILITY,
    DEFAULT_MAXIMUM_INTERVAL,
    DEFAULT_MINIMUM_INTERVAL,
    DEFAULT_NEW_CARDS_PER_DAY,
    DEFAULT_REQUESTED_RETENTION,
    DEFAULT_STREAK_FREEZES,
    DEFAULT_WEIGHTS,
    WEIGHT_BOUNDS,
    WEIGHT_COUNT,
)


def config_files() -> list[Path]:
    """Candidate TOML files, in priority order."""
    return [
        Path.home() / ".config/recall/config.toml",
        Path.home() / ".recall.toml",
    ]


class RecallConfig(BaseSettings):
    """
    Scheduler and analytics configuration.
    Supports loading from:
    1. Environment variables (RECALL_*)
    2. Config file (~/.config/recall/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="RECALL_",
        extra="ignore",
    )

    # Scheduling
    requested_retention: float = DEFAULT_REQUESTED_RETENTION
    minimum_interval: int = DEFAULT_MINIMUM_INTERVAL
    maximum_interval: int = DEFAULT_MAXIMUM_INTERVAL
    enable_fuzz: bool = True
    fuzz_factor: float = Field(default=DEFAULT_FUZZ_FACTOR, ge=0.0, le=0.25)
    weights: list[float] = Field(default_factory=lambda: list(DEFAULT_WEIGHTS))

    # Card classification
    leech_threshold: int = Field(default=DEFAULT_LEECH_THRESHOLD, ge=1)
    mature_stability: float = Field(default=DEFAULT_MATURE_STABILITY, gt=0)

    # Analytics
    new_cards_per_day: int = Field(default=DEFAULT_NEW_CARDS_PER_DAY, ge=0)
    activity_threshold: int = Field(default=DEFAULT_ACTIVITY_THRESHOLD, ge=0)
    streak_freezes: int = Field(default=DEFAULT_STREAK_FREEZES, ge=0)
    heatmap_percentile: float = Field(default=DEFAULT_HEATMAP_PERCENTILE, gt=0.0, le=1.0)
    timezone: str = "UTC"

    verbose: int = 1

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # First existing file wins; init (CLI) beats env beats file.
        toml_file = next((f for f in config_files() if f.exists()), None)

        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    @field_validator("requested_retention")
    @classmethod
    def check_retention(cls, v: float) -> float:
        if not 0.0 < v < 1.0:
            raise ValueError("requested_retention must be strictly between 0 and 1")
        return v

    @field_validator("minimum_interval")
    @classmethod
    def check_minimum_interval(cls, v: int) -> int:
        if v < 1:
            raise ValueError("minimum_interval must be at least 1 day")
        return v

    @field_validator("weights")
    @classmethod
    def check_weights(cls, v: list[float]) -> list[float]:
        if len(v) != WEIGHT_COUNT:
            raise ValueError(f"expected {WEIGHT_COUNT} weights, got {len(v)}")
        if not all(math.isfinite(w) for w in v):
            raise ValueError("weights must be finite numbers")
        for i, (w, (lo, hi)) in enumerate(zip(v, WEIGHT_BOUNDS)):
            if not lo <= w <= hi:
                raise ValueError(f"weight w{i}={w} outside [{lo}, {hi}]")
        return v

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"unknown time zone {v!r}") from e
        return v

    @model_validator(mode="after")
    def check_interval_bounds(self) -> "RecallConfig":
        if self.maximum_interval < self.minimum_interval:
            raise ValueError("maximum_interval must be >= minimum_interval")
        return self

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> RecallConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in RecallConfig
    2. ~/.config/recall/config.toml (if exists)
    3. Environment variables (RECALL_*)
    4. cli_overrides (passed from Typer)
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return RecallConfig(**overrides)
