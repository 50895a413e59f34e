"""deckwise CLI: review, queue, streak and statistics commands over a YAML data file."""

import asyncio
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Annotated, Any, Literal

import typer

from deckwise.application.config import AppConfig, resolve_config
from deckwise.application.scheduler import interval_labels
from deckwise.application.stats import MetricsCalculator, StatisticsService
from deckwise.application.study_service import StudyService
from deckwise.domain.errors import CardNotFound, InvalidRating, StaleCardVersion
from deckwise.domain.memory_model import QUALITY_DESCRIPTIONS, RATING_BUTTONS
from deckwise.infrastructure.store import YamlStore
from deckwise.interface.schemas import (
    QueueResponse,
    ScheduleResponse,
    StatisticsResponse,
    StreakResponse,
)

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="deckwise: spaced-repetition scheduling for flashcard decks.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage deckwise configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

DataOption = Annotated[
    Path | None, typer.Option("--data", help="YAML data file. Defaults to 'data_file' in config.")
]
JsonOption = Annotated[bool, typer.Option("--json", help="Output as JSON.")]
AtOption = Annotated[
    datetime | None, typer.Option("--at", help="Reference time (ISO 8601). Defaults to now.")
]


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Increase verbosity (-v for debug)."),
    ] = 0,
):
    """Global settings for deckwise."""
    logging.getLogger("deckwise").setLevel(logging.DEBUG if verbose else logging.INFO)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _resolve_with_overrides(**overrides: Any) -> AppConfig:
    try:
        return resolve_config(overrides)
    except ValueError as e:
        typer.secho(f"Invalid configuration: {e}", fg="red")
        raise typer.Exit(2) from e


def _study_service(config: AppConfig, store: YamlStore) -> StudyService:
    return StudyService(
        store.cards,
        store.reviews,
        store.sessions,
        new_card_limit=config.new_card_limit,
        shuffle=config.shuffle,
        time_zone=config.time_zone,
    )


def _stats_service(config: AppConfig, store: YamlStore) -> StatisticsService:
    calc = MetricsCalculator(
        retention_window_days=config.retention_window_days,
        weighted_retention=config.weighted_retention,
    )
    return StatisticsService(
        store.cards,
        store.reviews,
        store.sessions,
        calculator=calc,
        time_zone=config.time_zone,
    )


def _dump(model: Any) -> None:
    typer.echo(json.dumps(model.model_dump(mode="json", by_alias=True), indent=2))


def _fmt(value: float | None, suffix: str = "") -> str:
    return "no data" if value is None else f"{value:.1f}{suffix}"


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def review(
    card_id: Annotated[str, typer.Argument(help="Card to review.")],
    rating: Annotated[int, typer.Argument(help="Quality rating 0-5 (below 3 is a lapse).")],
    at: AtOption = None,
    data: DataOption = None,
    json_output: JsonOption = False,
):
    """[bold green]Review[/bold green] a card and schedule its next due date."""
    config = _resolve_with_overrides(data_file=data)
    store = YamlStore.load(config.data_file)
    service = _study_service(config, store)

    try:
        result = asyncio.run(service.review_card(card_id, rating, now=at))
    except InvalidRating as e:
        typer.secho(str(e), fg="red")
        raise typer.Exit(1) from e
    except CardNotFound as e:
        typer.secho(str(e), fg="red")
        raise typer.Exit(1) from e
    except StaleCardVersion as e:
        typer.secho(f"{e}. Please retry.", fg="yellow")
        raise typer.Exit(1) from e

    store.save()

    if json_output:
        _dump(ScheduleResponse.model_validate(result))
        return

    card = result.card
    typer.echo(
        f"{card.id}: repetition={card.repetition} interval={card.interval}d "
        f"ease={card.ease_factor:.2f} due={card.due_date.isoformat()}"  # type: ignore[union-attr]
    )


@app.command()
def queue(
    deck_id: Annotated[str, typer.Argument(help="Deck to study.")],
    limit: Annotated[int | None, typer.Option("--limit", help="Session size.")] = None,
    seed: Annotated[
        str | None, typer.Option("--seed", help="Session seed; reuse it to keep the order.")
    ] = None,
    at: AtOption = None,
    data: DataOption = None,
    json_output: JsonOption = False,
):
    """Show the study queue for a deck (due cards first, then new cards)."""
    config = _resolve_with_overrides(data_file=data, session_limit=limit)
    store = YamlStore.load(config.data_file)
    service = _study_service(config, store)

    result = asyncio.run(
        service.select_queue(deck_id, now=at, session_limit=config.session_limit, seed=seed)
    )

    if json_output:
        _dump(QueueResponse.model_validate(result))
        return

    if result.status == "empty_deck":
        typer.secho(f"Deck {deck_id} has no cards.", fg="yellow")
        return
    if result.status == "empty_queue":
        typer.secho("Nothing to study right now.", fg="green")
        return

    typer.echo(f"Due: {result.due_count}  New: {result.new_count}  Deck: {result.total_cards}")
    for i, card in enumerate(result.cards, start=1):
        labels = "  ".join(
            f"{RATING_BUTTONS[r]}={label}" for r, label in interval_labels(card).items()
        )
        typer.echo(f"  [{i}] {card.id}  {card.front}  ({labels})")


@app.command()
def classify(
    card_id: Annotated[str, typer.Argument(help="Card to classify.")],
    at: AtOption = None,
    data: DataOption = None,
):
    """Print the learning stage of a card (new, learning, review, due, mastered)."""
    config = _resolve_with_overrides(data_file=data)
    store = YamlStore.load(config.data_file)
    service = _study_service(config, store)

    try:
        stage = asyncio.run(service.classify(card_id, now=at))
    except CardNotFound as e:
        typer.secho(str(e), fg="red")
        raise typer.Exit(1) from e

    typer.echo(stage.value)


@app.command()
def streak(
    user_id: Annotated[str, typer.Argument(help="User whose streak to compute.")],
    tz: Annotated[str | None, typer.Option("--tz", help="IANA time zone.")] = None,
    at: AtOption = None,
    data: DataOption = None,
    json_output: JsonOption = False,
):
    """Show current and longest study streak."""
    config = _resolve_with_overrides(data_file=data, time_zone=tz)
    store = YamlStore.load(config.data_file)
    state = asyncio.run(_stats_service(config, store).compute_streak(user_id, now=at))

    if json_output:
        _dump(StreakResponse.model_validate(state))
        return

    typer.echo(f"Current streak: {state.current} days")
    typer.echo(f"Longest streak: {state.longest} days")
    if state.milestones_reached:
        typer.echo(f"Milestones: {', '.join(str(m) for m in state.milestones_reached)}")


@app.command()
def stats(
    user_id: Annotated[str, typer.Argument(help="User to summarize.")],
    date_range: Annotated[
        Literal["7d", "30d", "90d", "all"],
        typer.Option("--range", help="Activity window."),
    ] = "30d",
    tz: Annotated[str | None, typer.Option("--tz", help="IANA time zone.")] = None,
    at: AtOption = None,
    data: DataOption = None,
    json_output: JsonOption = False,
):
    """Show card distribution, retention and activity."""
    config = _resolve_with_overrides(data_file=data, time_zone=tz)
    store = YamlStore.load(config.data_file)
    snapshot = asyncio.run(
        _stats_service(config, store).aggregate_statistics(user_id, date_range, now=at)
    )

    if json_output:
        _dump(StatisticsResponse.model_validate(snapshot))
        return

    counts = "  ".join(f"{cls.value}={n}" for cls, n in snapshot.classification_counts.items())
    typer.echo(f"Cards: {snapshot.total_cards}  ({counts})")
    typer.echo(f"Reviews: {snapshot.total_reviews}")
    typer.echo(f"Retention: {_fmt(snapshot.retention_rate, '%')}")
    typer.echo(f"Average interval: {_fmt(snapshot.average_interval, 'd')}")
    active = [day for day in snapshot.activity if day.cards_studied or day.sessions]
    typer.echo(f"Active days ({date_range}): {len(active)}")


@app.command()
def session(
    user_id: Annotated[str, typer.Argument(help="User who studied.")],
    deck_id: Annotated[str, typer.Argument(help="Deck that was studied.")],
    cards_studied: Annotated[int, typer.Argument(help="Cards studied in the session.")],
    minutes: Annotated[float | None, typer.Option(help="Session length in minutes.")] = None,
    mode: Annotated[
        Literal["basic", "spaced-repetition"], typer.Option(help="Study mode.")
    ] = "spaced-repetition",
    at: AtOption = None,
    data: DataOption = None,
):
    """Record a finished study session for the activity charts."""
    config = _resolve_with_overrides(data_file=data)
    store = YamlStore.load(config.data_file)
    recorded = asyncio.run(
        _study_service(config, store).record_session(
            user_id,
            deck_id,
            cards_studied,
            duration_seconds=minutes * 60 if minutes is not None else None,
            study_mode=mode,
            now=at,
        )
    )
    store.save()
    typer.echo(f"{recorded.session_date}: {recorded.cards_studied} cards in {deck_id}")


@app.command()
def ratings():
    """List the rating scale and the study buttons."""
    for rating, description in QUALITY_DESCRIPTIONS.items():
        button = RATING_BUTTONS.get(rating)
        suffix = f"  [{button}]" if button else ""
        typer.echo(f"{rating}: {description}{suffix}")


@app.command()
def serve(
    host: Annotated[str | None, typer.Option(help="Host to bind the server to.")] = None,
    port: Annotated[int | None, typer.Option(help="Port to bind the server to.")] = None,
    reload: Annotated[bool, typer.Option(help="Enable auto-reload.")] = False,
):
    """Run the HTTP API."""
    import uvicorn

    config = _resolve_with_overrides(host=host, port=port)
    logger.info(f"Serving deckwise API on http://{config.host}:{config.port}")
    uvicorn.run("deckwise.server:app", host=config.host, port=config.port, reload=reload)


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show():
    """Display final resolved configuration."""
    config = resolve_config()
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))


if __name__ == "__main__":
    app()
