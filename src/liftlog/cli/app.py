"""Shared Typer app object, shared option types, and engine utility."""

import warnings
from pathlib import Path
from typing import Annotated, Optional

import typer

from ..core.models import Exercise
from ..core.session_engine import WorkoutEngine
from ..io.serializers import ValidationError
from ..io.store import WorkoutStore, get_default_store_path
from . import views

# Shared --store-path option type used across all commands
StorePathOption = Annotated[
    Optional[Path],
    typer.Option("--store-path", "-p", help="Path to the liftlog JSON store"),
]

JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

app = typer.Typer(
    name="liftlog",
    help="Strength workout log: sessions, sets, super sets, PRs and progress.",
    no_args_is_help=True,
)


def _show_warning(message, category, filename, lineno, file=None, line=None) -> None:
    views.print_warning(str(message))


@app.callback()
def main_callback() -> None:
    """
    Strength workout log. Run 'liftlog init' once, then 'liftlog log'.
    """
    # Library warnings (failed saves, ignored user catalog) go through rich
    warnings.showwarning = _show_warning


def get_store(store_path: Path | None) -> WorkoutStore:
    """Get the store from path or the default location."""
    return WorkoutStore(store_path if store_path is not None else get_default_store_path())


def get_engine(store_path: Path | None) -> WorkoutEngine:
    """
    Open the store and build an engine over it.

    Exits with an error if the store is missing or corrupt.
    """
    store = get_store(store_path)
    if not store.exists():
        views.print_error(f"Store not found: {store.path}")
        views.print_info("Run 'liftlog init' first.")
        raise typer.Exit(1)

    try:
        store.load()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    return WorkoutEngine(store)


def require_exercise(engine: WorkoutEngine, name: str) -> Exercise:
    """Look up an exercise by name (case-insensitive fallback) or exit."""
    exercise = engine.find_exercise(name.strip())
    if exercise is None:
        wanted = name.strip().lower()
        matches = [e for e in engine.exercises() if e.name.lower() == wanted]
        exercise = matches[0] if matches else None
    if exercise is None:
        views.print_error(f"Unknown exercise: {name}")
        views.print_info("See 'liftlog exercises' or add one with 'liftlog add-exercise'.")
        raise typer.Exit(1)
    return exercise
