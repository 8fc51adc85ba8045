"""coachsync developer CLI.

Scores parameter sets offline and runs the API server.
"""

from __future__ import annotations

import random

import typer
import uvicorn
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from coachsync.config.settings import settings
from coachsync.core.errors import ValidationError
from coachsync.core.logger import setup_logger
from coachsync.matches.service import preview_score
from coachsync.scoring.parameters import SPORT_PARAMETER_LABELS, SUPPORTED_SPORTS, parameter_range

console = Console()

app = typer.Typer(
    name="coachsync",
    help="coachsync CLI - score matches offline and run the API",
    add_completion=False,
)

PRIORITY_STYLES = {"high": "bold red", "medium": "yellow", "low": "green"}


@app.callback()
def configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
) -> None:
    """Configure logging before any command runs."""
    setup_logger(settings, level="DEBUG" if verbose else None)


def _parse_parameters(pairs: list[str]) -> dict[str, float]:
    parameters: dict[str, float] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected key=value, got '{pair}'")
        try:
            value = float(raw)
        except ValueError as e:
            raise typer.BadParameter(f"Value for '{key}' must be a number, got '{raw}'") from e
        parameters[key] = int(value) if value.is_integer() else value
    return parameters


def _parse_recent(recent: str | None) -> list[float]:
    if not recent:
        return []
    try:
        return [float(score) for score in recent.split(",") if score.strip()]
    except ValueError as e:
        raise typer.BadParameter(f"Recent scores must be comma-separated numbers, got '{recent}'") from e


@app.command()
def score(
    sport: str = typer.Argument(..., help="cricket, football or basketball"),
    params: list[str] = typer.Argument(None, help="Parameters as key=value (camelCase keys)"),
    recent: str | None = typer.Option(None, "--recent", "-r", help="Prior scores, oldest first, comma-separated"),
    seed: int | None = typer.Option(None, "--seed", help="Seed for the rest-hour draw"),
) -> None:
    """Score a parameter set and print the recommendations."""
    parameters = _parse_parameters(params or [])
    recent_scores = _parse_recent(recent)
    rng = random.Random(seed) if seed is not None else None

    try:
        preview = preview_score(sport, parameters, recent_scores, rng=rng)
    except ValidationError as e:
        console.print(Panel(Text("Invalid parameters", style="bold red"), border_style="red"))
        for field, message in e.errors.items():
            console.print(f"  [red]{field}[/red]: {message}")
        raise typer.Exit(1) from e

    logger.debug(f"CLI score for {preview.sport}: {preview.score}")
    console.print(
        Panel(
            Text(f"Score: {preview.score}/100 ({preview.category})", style="bold green"),
            subtitle=preview.motivational_message,
            border_style="green",
        )
    )
    console.print(f"[cyan]Rest:[/cyan] {preview.rest_recommendation.hours} hours")
    console.print(f"  {preview.rest_recommendation.description}")

    table = Table(title="Suggestions")
    table.add_column("Priority")
    table.add_column("Type")
    table.add_column("Message")
    for suggestion in preview.suggestions:
        table.add_row(
            Text(suggestion.priority, style=PRIORITY_STYLES[suggestion.priority]),
            suggestion.type,
            suggestion.message,
        )
    console.print(table)


@app.command()
def sports() -> None:
    """List supported sports and their parameter ranges."""
    for sport in SUPPORTED_SPORTS:
        table = Table(title=sport)
        table.add_column("Parameter")
        table.add_column("Label")
        table.add_column("Range")
        for field, label in SPORT_PARAMETER_LABELS[sport].items():
            low, high = parameter_range(sport, field)
            table.add_row(field, label, f"{low:g}-{high:g}")
        console.print(table)


@app.command()
def serve(
    host: str = typer.Option(settings.api_host, "--host", "-h", help="Host to bind to"),
    port: int = typer.Option(settings.api_port, "--port", "-p", help="Port to bind to"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload"),
) -> None:
    """Run the FastAPI server."""
    logger.info(f"Starting FastAPI server on {host}:{port} (reload={reload})")
    uvicorn.run("coachsync.api.app:create_app", host=host, port=port, reload=reload, factory=True)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
