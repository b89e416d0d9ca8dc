"""Library commands: exercises, add-exercise, templates, apply-template, save-template."""

import json
from typing import Annotated, Optional

import typer

from ...core.models import MUSCLE_GROUPS
from .. import views
from ..app import JsonOption, StorePathOption, app, get_engine


def _check_group(group: str) -> str:
    key = group.strip().lower().replace(" ", "_")
    if key not in MUSCLE_GROUPS:
        views.print_error(f"Unknown muscle group: {group}. Use one of {', '.join(MUSCLE_GROUPS)}")
        raise typer.Exit(1)
    return key


@app.command()
def exercises(
    group: Annotated[
        Optional[str],
        typer.Option("--group", "-g", help="Only this muscle group"),
    ] = None,
    custom: Annotated[
        bool,
        typer.Option("--custom", "-c", help="Only exercises you added"),
    ] = False,
    store_path: StorePathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    List the exercise library by muscle group.
    """
    engine = get_engine(store_path)
    rows = engine.exercises(_check_group(group) if group else None)
    if custom:
        rows = [e for e in rows if e.is_custom]

    if json_out:
        print(json.dumps(
            [{"name": e.name, "muscle_group": e.muscle_group, "is_custom": e.is_custom} for e in rows],
            indent=2,
        ))
        return

    views.print_exercises(rows)


@app.command("add-exercise")
def add_exercise(
    name: Annotated[str, typer.Argument(help="Exercise name")],
    group: Annotated[str, typer.Argument(help="Muscle group, e.g. chest or lower_back")],
    store_path: StorePathOption = None,
) -> None:
    """
    Add a custom exercise to the library.
    """
    engine = get_engine(store_path)
    exercise = engine.create_custom_exercise(name, _check_group(group), select=False)
    if exercise is None:
        views.print_error(f"Cannot add {name!r}: the name is blank or already exists.")
        raise typer.Exit(1)
    views.print_success(f"Added {exercise.name} ({exercise.muscle_group_name}).")


@app.command()
def templates(
    store_path: StorePathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    List session templates (presets first).
    """
    engine = get_engine(store_path)
    rows = engine.list_templates()

    if json_out:
        print(json.dumps(
            [{"name": t.name, "is_preset": t.is_preset, "exercises": t.exercise_names} for t in rows],
            indent=2,
        ))
        return

    views.print_templates(rows)


@app.command("apply-template")
def apply_template(
    name: Annotated[str, typer.Argument(help="Template name")],
    store_path: StorePathOption = None,
) -> None:
    """
    Load a template's exercises and select the first (starts a session if needed).
    """
    engine = get_engine(store_path)
    template = engine.find_template(name)
    if template is None:
        views.print_error(f"Unknown template: {name}")
        raise typer.Exit(1)

    loaded = engine.apply_template(template)
    if not loaded:
        views.print_error(f"None of the exercises in {template.name} could be found.")
        raise typer.Exit(1)

    views.print_success(f"Loaded {template.name}: " + ", ".join(e.name for e in loaded))
    skipped = len(template.exercise_names) - len(loaded)
    if skipped:
        views.print_warning(f"{skipped} unknown exercise(s) skipped.")
    views.print_comparison(loaded[0].name, engine.comparison)


@app.command("save-template")
def save_template(
    name: Annotated[str, typer.Argument(help="Name for the new template")],
    exercise_names: Annotated[
        Optional[str],
        typer.Option(
            "--exercises", "-e",
            help="Comma-separated exercise names (default: the last completed session)",
        ),
    ] = None,
    store_path: StorePathOption = None,
) -> None:
    """
    Save a template from the last completed session or an explicit list.
    """
    engine = get_engine(store_path)
    if engine.find_template(name) is not None:
        views.print_error(f"A template named {name!r} already exists.")
        raise typer.Exit(1)

    if exercise_names is not None:
        template = engine.create_template(name, exercise_names.split(","))
    else:
        done = engine.completed_sessions()
        if not done:
            views.print_error("No completed sessions to save from. Use --exercises.")
            raise typer.Exit(1)
        template = engine.save_template_from_session(done[0], name)

    if template is None:
        views.print_error("A template needs a name and at least one exercise.")
        raise typer.Exit(1)
    views.print_success(f"Saved {template.name}: " + ", ".join(template.exercise_names))


@app.command("delete-template")
def delete_template(
    name: Annotated[str, typer.Argument(help="Template name")],
    store_path: StorePathOption = None,
) -> None:
    """
    Delete a session template.
    """
    engine = get_engine(store_path)
    template = engine.find_template(name)
    if template is None:
        views.print_error(f"Unknown template: {name}")
        raise typer.Exit(1)
    engine.delete_template(template)
    views.print_success(f"Deleted {template.name}.")
