"""Shared helpers for CLI commands: config resolution and JSON conversion."""

import dataclasses
import json
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any

from recall.application.config import RecallConfig, resolve_config
from recall.domain.scheduling.models import Card, MemoryState


def _resolve_with_overrides(**overrides: Any) -> RecallConfig:
    """Resolve config, letting non-None CLI values take precedence."""
    return resolve_config({k: v for k, v in overrides.items() if v is not None})


def to_jsonable(obj: Any) -> Any:
    """Recursively convert records, enums and dates into JSON-friendly values."""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_jsonable(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, dict):
        return {str(to_jsonable(k)): to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(v) for v in obj]
    return obj


def dumps(obj: Any) -> str:
    return json.dumps(to_jsonable(obj), indent=2)


def parse_time(value: str, config: RecallConfig) -> datetime:
    """ISO-8601 timestamp; naive values are taken to be in the configured zone."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=config.tzinfo)
    return parsed


def card_from_dict(data: dict[str, Any]) -> Card:
    """Inverse of ``to_jsonable`` for a Card."""
    memory = data.get("memory")
    last_review = data.get("last_review")
    return Card(
        card_id=data["card_id"],
        state=data["state"],
        due=datetime.fromisoformat(data["due"]),
        memory=MemoryState(**memory) if memory else None,
        last_review=datetime.fromisoformat(last_review) if last_review else None,
        reps=data.get("reps", 0),
        lapses=data.get("lapses", 0),
        elapsed_days=data.get("elapsed_days", 0.0),
        scheduled_days=data.get("scheduled_days", 0),
    )


def load_card(path: Path) -> Card:
    """Read a card, or the ``card`` of a printed review result, from JSON."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data.get("card"), dict):
        data = data["card"]
    return card_from_dict(data)
