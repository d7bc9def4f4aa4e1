"""recall CLI — scheduling calculators, single-card reviews and demo analytics."""

import json
import logging
import random
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated

import typer

from recall.application.config import resolve_config
from recall.domain.errors import RecallError
from recall.domain.scheduling.models import Card
from recall.interface._common import _resolve_with_overrides, dumps, load_card, parse_time

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="recall: spaced-repetition scheduling and retention analytics.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage recall configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

_LEVELS = {0: logging.ERROR, 1: logging.WARNING, 2: logging.INFO}


def humanize_error(error: Exception) -> str:
    """One-line, user-facing description of a failure."""
    if isinstance(error, json.JSONDecodeError):
        return f"Card file is not valid JSON: {error.msg} (line {error.lineno})"
    if isinstance(error, KeyError):
        return f"Card file is missing field {error.args[0]!r}"
    return str(error)


def _fail(error: Exception) -> None:
    typer.secho(f"Error: {humanize_error(error)}", fg="red", err=True)
    raise typer.Exit(1)


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 1,
):
    """Global settings for recall."""
    ctx.ensure_object(dict)
    ctx.obj["verbose_bonus"] = verbose
    logging.getLogger().setLevel(_LEVELS.get(verbose, logging.DEBUG))


# ---------------------------------------------------------------------------
# Calculators
# ---------------------------------------------------------------------------


@app.command()
def retrievability(
    stability: Annotated[float, typer.Option(help="Memory stability in days.")],
    elapsed: Annotated[float, typer.Option(help="Days since the last review.")],
):
    """Recall probability after ELAPSED days at the given stability."""
    from recall.application.scheduling.forgetting_curve import retrievability as curve

    try:
        typer.echo(f"{curve(elapsed, stability):.4f}")
    except ValueError as e:
        _fail(e)


@app.command()
def interval(
    stability: Annotated[float, typer.Option(help="Memory stability in days.")],
    retention: Annotated[
        float | None, typer.Option(help="Requested retention. Defaults to config.")
    ] = None,
    maximum_interval: Annotated[int | None, typer.Option(help="Upper clamp in days.")] = None,
):
    """Days until recall probability falls to the requested retention."""
    from recall.application.scheduling.interval_scheduler import IntervalScheduler

    try:
        config = _resolve_with_overrides(maximum_interval=maximum_interval)
        typer.echo(str(IntervalScheduler(config).next_interval(stability, retention)))
    except ValueError as e:
        _fail(e)


# ---------------------------------------------------------------------------
# Single-card operations
# ---------------------------------------------------------------------------


def _load_or_new(card_file: Path | None, card_id: str, now: datetime) -> Card:
    if card_file is None:
        return Card.new(card_id, now)
    return load_card(card_file)


@app.command()
def review(
    rating: Annotated[int, typer.Argument(help="1=Again, 2=Hard, 3=Good, 4=Easy.")],
    card_file: Annotated[
        Path | None,
        typer.Option(
            "--card",
            exists=True,
            dir_okay=False,
            help="Card or review-result JSON, e.g. this command's output. New card if omitted.",
        ),
    ] = None,
    card_id: Annotated[str, typer.Option(help="Id for a new card.")] = "card",
    now: Annotated[str | None, typer.Option(help="Review time, ISO-8601. Defaults to now.")] = None,
    duration_ms: Annotated[int, typer.Option(help="Answer time in milliseconds.")] = 0,
    retention: Annotated[float | None, typer.Option(help="Requested retention.")] = None,
    no_fuzz: Annotated[bool, typer.Option("--no-fuzz", help="Disable interval fuzz.")] = False,
):
    """Apply a rating to a card and print the next card state and its review log."""
    from recall.application.scheduling.state_machine import CardStateMachine

    try:
        config = _resolve_with_overrides(
            requested_retention=retention, enable_fuzz=False if no_fuzz else None
        )
        review_time = parse_time(now, config) if now else datetime.now(timezone.utc)
        card = _load_or_new(card_file, card_id, review_time)
        result = CardStateMachine(config).apply_review(card, rating, review_time, duration_ms)
    except (RecallError, ValueError, KeyError) as e:
        _fail(e)

    typer.echo(dumps(result))


@app.command()
def preview(
    card_file: Annotated[
        Path | None,
        typer.Option("--card", exists=True, dir_okay=False, help="Card JSON. New card if omitted."),
    ] = None,
    now: Annotated[str | None, typer.Option(help="Review time, ISO-8601.")] = None,
):
    """Show the interval each rating would schedule."""
    from recall.application.scheduling.interval_scheduler import format_interval
    from recall.application.scheduling.state_machine import CardStateMachine

    try:
        config = resolve_config()
        review_time = parse_time(now, config) if now else datetime.now(timezone.utc)
        card = _load_or_new(card_file, "card", review_time)
        options = CardStateMachine(config).preview(card, review_time)
    except (RecallError, ValueError, KeyError) as e:
        _fail(e)

    for grade, result in options.items():
        label = format_interval(result.card.scheduled_days)
        typer.echo(f"{grade.name.title():<6} {label:>6}  ({result.card.state.value})")


# ---------------------------------------------------------------------------
# Demo analytics
# ---------------------------------------------------------------------------


@app.command()
def demo(
    seed: Annotated[int, typer.Option(help="Random seed for the demo data.")] = 42,
    cards: Annotated[int, typer.Option(help="Number of demo cards.")] = 800,
    logs: Annotated[int, typer.Option(help="Number of demo review logs.")] = 2000,
):
    """Print an analytics summary computed over seeded demo data."""
    import asyncio

    from recall.application.demo_data import generate_cards, generate_review_logs
    from recall.application.stats.service import AnalyticsService
    from recall.infrastructure.adapters.memory_repository import InMemoryStudyRepository

    config = resolve_config()
    now = datetime.now(timezone.utc)
    rng = random.Random(seed)
    repo = InMemoryStudyRepository(
        cards=generate_cards(rng, cards, now),
        logs=generate_review_logs(rng, logs, now, card_count=max(cards, 1)),
    )

    summary = asyncio.run(AnalyticsService(repo, config).get_summary(now))
    typer.echo(dumps(summary))


@app.command()
def forecast(
    seed: Annotated[int, typer.Option(help="Random seed for the demo cards.")] = 42,
    cards: Annotated[int, typer.Option(help="Number of demo cards.")] = 800,
    days: Annotated[int, typer.Option(help="Days to forecast.")] = 14,
    new_per_day: Annotated[
        int | None, typer.Option(help="Daily new-card intake. Defaults to config.")
    ] = None,
):
    """Daily due counts and accumulated backlog for seeded demo cards."""
    from recall.application.demo_data import generate_cards
    from recall.application.stats.workload import workload_forecast

    try:
        config = _resolve_with_overrides(new_cards_per_day=new_per_day)
        now = datetime.now(timezone.utc)
        deck = generate_cards(random.Random(seed), cards, now)
        workload = workload_forecast(deck, days, now, config.new_cards_per_day, config.tzinfo)
    except ValueError as e:
        _fail(e)

    for day in workload:
        typer.echo(
            f"{day.date.isoformat()}  new {day.new_cards:>4}  reviews {day.reviews:>4}  "
            f"total {day.total:>4}  backlog {day.backlog:>5}"
        )


@app.command()
def streak(
    seed: Annotated[int, typer.Option(help="Random seed for the demo activity.")] = 42,
    days: Annotated[int, typer.Option(help="Days of demo activity.")] = 365,
    weeks: Annotated[int, typer.Option(help="Heatmap width in weeks.")] = 12,
    freezes: Annotated[int | None, typer.Option(help="Streak freeze tokens.")] = None,
):
    """Streak and heatmap levels for seeded demo activity."""
    from recall.application.demo_data import generate_daily_activity
    from recall.application.stats.streaks import calculate_streak, daily_counts, heatmap

    config = _resolve_with_overrides(streak_freezes=freezes)
    today = datetime.now(config.tzinfo).date()
    counts = daily_counts(generate_daily_activity(random.Random(seed), days, today))

    data = calculate_streak(
        counts,
        today,
        activity_threshold=config.activity_threshold,
        freezes=config.streak_freezes,
    )
    typer.echo(f"Current streak: {data.current}  Longest: {data.longest}")
    typer.echo(f"Freezes used: {data.freezes_used}  Available: {data.freezes_available}")

    cells = heatmap(counts, today, weeks, config.heatmap_percentile)
    shades = " .:*#"
    for start in range(0, len(cells), 7):
        week = cells[start : start + 7]
        typer.echo(f"{week[0].date.isoformat()} " + "".join(shades[c.level] for c in week))


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show():
    """Display final resolved configuration."""
    config = resolve_config()
    typer.echo(json.dumps(config.model_dump(), indent=2))


def main():
    app()


if __name__ == "__main__":
    main()
