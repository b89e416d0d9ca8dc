"""Session commands: init, start, end, select, log, delete-set, superset, show, compare, summary."""

import json
import re
from typing import Annotated, Optional

import typer

from ...core.analytics import sets_by_exercise, summary_text
from ...core.metrics import format_duration, format_set
from ...core.models import INTENSITY_TECHNIQUES, Session, SetEntry
from ...core.records import PR_LABELS
from ...core.session_engine import WorkoutEngine
from ...io.serializers import ValidationError, set_entry_to_dict
from .. import views
from ..app import JsonOption, StorePathOption, app, get_engine, get_store, require_exercise

_MEMBER_RE = re.compile(r"^(?P<name>.+?)\s*[:=]\s*(?P<weight>[0-9.]+)\s*[xX×]\s*(?P<reps>\d+)$")


def _announce_pr(engine: WorkoutEngine, label: str) -> str | None:
    pr = engine.consume_new_pr()
    if pr is not None:
        views.print_success(f"New PR on {label}: {PR_LABELS[pr]}!")
    return pr


def _find_set(engine: WorkoutEngine, exercise_name: str, set_number: int) -> SetEntry:
    """Set of the active session by exercise and set number, or exit."""
    if engine.active_session is None:
        views.print_error("No active session.")
        raise typer.Exit(1)
    exercise = require_exercise(engine, exercise_name)
    for entry in engine.session_sets(engine.active_session):
        if entry.exercise_name == exercise.name and entry.set_number == set_number:
            return entry
    views.print_error(f"No set {set_number} of {exercise.name} in the active session.")
    raise typer.Exit(1)


def _pick_completed(engine: WorkoutEngine, index: int) -> Session:
    """Completed session by 1-based index, newest first, or exit."""
    sessions = engine.completed_sessions()
    if not sessions:
        views.print_error("No completed sessions yet.")
        raise typer.Exit(1)
    if index < 1 or index > len(sessions):
        views.print_error(f"Session index must be between 1 and {len(sessions)}")
        raise typer.Exit(1)
    return sessions[index - 1]


@app.command()
def init(store_path: StorePathOption = None) -> None:
    """
    Create the store and seed the exercise catalog and preset templates.
    """
    store = get_store(store_path)
    existed = store.exists()
    try:
        store.init()
        store.load()
    except (OSError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    engine = WorkoutEngine(store)
    if existed:
        views.print_info(f"Store already exists: {store.path}")
    else:
        views.print_success(f"Created store: {store.path}")
    views.print_info(
        f"{len(engine.exercises())} exercises, {len(engine.list_templates())} templates available."
    )


@app.command()
def start(store_path: StorePathOption = None) -> None:
    """
    Start a new workout session (ends any session still in progress).
    """
    engine = get_engine(store_path)
    if engine.active_session is not None:
        views.print_warning("Ending the session that was still in progress.")
    session = engine.start_session()
    views.print_success(f"Session started at {session.start_date:%H:%M}.")


@app.command()
def end(
    notes: Annotated[
        Optional[str],
        typer.Option("--notes", "-n", help="Notes to attach to the session"),
    ] = None,
    store_path: StorePathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    End the active session and print its summary.
    """
    engine = get_engine(store_path)
    session = engine.end_session(notes)
    if session is None:
        views.print_error("No active session.")
        raise typer.Exit(1)

    sets = engine.session_sets(session)
    if json_out:
        print(json.dumps({
            "start_date": session.start_date.isoformat(),
            "end_date": session.end_date.isoformat() if session.end_date else None,
            "duration_s": int(session.duration_seconds()),
            "notes": session.notes,
            "calories": engine.workout_calories(session),
            "sets": [set_entry_to_dict(e) for e in sets],
        }, indent=2))
        return

    views.print_success(f"Session complete: {format_duration(session.duration_seconds())}")
    views.console.print(summary_text(session, sets, engine.exercises()))
    views.print_info(f"~{engine.workout_calories(session)} kcal burned")


@app.command()
def select(
    exercise_name: Annotated[str, typer.Argument(help="Exercise name")],
    store_path: StorePathOption = None,
) -> None:
    """
    Select an exercise (starts a session if none is active) and show last time.
    """
    engine = get_engine(store_path)
    exercise = require_exercise(engine, exercise_name)
    engine.select_exercise(exercise)
    views.print_success(f"Selected {exercise.name}.")
    views.print_comparison(exercise.name, engine.comparison)
    views.print_recent(engine.recent_exercises)


@app.command()
def log(
    exercise_name: Annotated[str, typer.Argument(help="Exercise name")],
    weight: Annotated[str, typer.Argument(help="Weight in your preferred unit")],
    reps: Annotated[str, typer.Argument(help="Reps performed")],
    warm_up: Annotated[
        bool,
        typer.Option("--warm-up", "-w", help="Mark as a warm-up set (no PR check)"),
    ] = False,
    failure: Annotated[
        bool,
        typer.Option("--failure", "-f", help="Set taken to failure"),
    ] = False,
    technique: Annotated[
        Optional[str],
        typer.Option("--technique", "-t", help=f"One of: {', '.join(INTENSITY_TECHNIQUES)}"),
    ] = None,
    store_path: StorePathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Log one set (starts a session if none is active).
    """
    engine = get_engine(store_path)
    exercise = require_exercise(engine, exercise_name)

    if technique is not None and technique not in INTENSITY_TECHNIQUES:
        views.print_error(f"Invalid technique: {technique}. Use one of {INTENSITY_TECHNIQUES}")
        raise typer.Exit(1)

    engine.select_exercise(exercise)
    if not engine.log_set(weight, reps, is_warm_up=warm_up, to_failure=failure, technique=technique):
        views.print_error("Weight and reps must be positive numbers (reps a whole number).")
        raise typer.Exit(1)

    entry = engine.current_exercise_sets()[-1]
    if json_out:
        pr = engine.consume_new_pr()
        print(json.dumps({**set_entry_to_dict(entry), "new_pr": pr}, indent=2))
        return

    views.print_success(f"{exercise.name} set {entry.set_number}: {format_set(entry)}")
    _announce_pr(engine, exercise.name)


@app.command("delete-set")
def delete_set(
    exercise_name: Annotated[str, typer.Argument(help="Exercise name")],
    set_number: Annotated[int, typer.Argument(help="Set number within the active session")],
    store_path: StorePathOption = None,
) -> None:
    """
    Delete a set from the active session; later sets are renumbered.
    """
    engine = get_engine(store_path)
    entry = _find_set(engine, exercise_name, set_number)
    if not engine.delete_set(entry):
        views.print_error("Only sets of the active session can be deleted.")
        raise typer.Exit(1)
    views.print_success(f"Deleted {entry.exercise_name} set {set_number}.")


@app.command()
def superset(
    members: Annotated[
        list[str],
        typer.Argument(help='Members as "Exercise:WEIGHTxREPS", e.g. "Bench Press:135x10"'),
    ],
    store_path: StorePathOption = None,
) -> None:
    """
    Log one round of a super set (2 to 5 exercises logged together).
    """
    parsed = []
    for raw in members:
        m = _MEMBER_RE.match(raw.strip())
        if m is None:
            views.print_error(f'Invalid member: {raw!r}. Use "Exercise:WEIGHTxREPS".')
            raise typer.Exit(1)
        parsed.append((m.group("name"), m.group("weight"), m.group("reps")))

    engine = get_engine(store_path)
    exercises = [require_exercise(engine, name) for name, _, _ in parsed]

    engine.select_exercise(exercises[0])
    engine.enter_superset_mode()
    for exercise in exercises[1:]:
        if not engine.toggle_superset_member(exercise):
            views.print_error(f"Cannot add {exercise.name}: duplicate or more than 5 members.")
            raise typer.Exit(1)
    for exercise, (_, weight, reps) in zip(exercises, parsed):
        engine.set_superset_input(exercise, weight, reps)

    if not engine.commit_superset():
        views.print_error("Every member needs a positive weight and rep count.")
        raise typer.Exit(1)

    views.print_success("Logged super set: " + " + ".join(e.name for e in exercises))
    _announce_pr(engine, " + ".join(e.name for e in exercises))


@app.command("delete-superset")
def delete_superset(
    exercise_name: Annotated[str, typer.Argument(help="Any member exercise of the group")],
    set_number: Annotated[int, typer.Argument(help="That member's set number")],
    store_path: StorePathOption = None,
) -> None:
    """
    Delete a whole super set round from the active session.
    """
    engine = get_engine(store_path)
    entry = _find_set(engine, exercise_name, set_number)
    if entry.superset_group_id is None:
        views.print_error("That set is not part of a super set. Use 'delete-set'.")
        raise typer.Exit(1)
    engine.delete_superset_group(entry.superset_group_id)
    views.print_success("Deleted super set round.")


@app.command()
def show(
    last: Annotated[
        bool,
        typer.Option("--last", "-l", help="Show the last completed session instead"),
    ] = False,
    store_path: StorePathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show the sets of the active session (or the last completed one).
    """
    engine = get_engine(store_path)
    session = _pick_completed(engine, 1) if last else engine.active_session
    if session is None:
        views.print_error("No active session. Use --last for the previous one.")
        raise typer.Exit(1)

    sets = engine.session_sets(session)
    if json_out:
        print(json.dumps([set_entry_to_dict(e) for e in sets], indent=2))
        return

    views.print_session_sets(session, sets_by_exercise(session.id, sets))
    if not last and engine.selected_exercise is not None:
        views.console.print(
            views.format_display_rows(engine.selected_exercise.name, engine.current_display_rows())
        )


@app.command()
def history(
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-l", help="Limit number of sessions to show"),
    ] = None,
    store_path: StorePathOption = None,
) -> None:
    """
    List completed sessions, newest first.
    """
    engine = get_engine(store_path)
    sessions = engine.completed_sessions()
    if limit is not None:
        sessions = sessions[:limit]
    if not sessions:
        views.print_info("No completed sessions yet.")
        return

    counts: dict[str, int] = {}
    for entry in engine.all_sets():
        counts[entry.session_id] = counts.get(entry.session_id, 0) + 1
    views.console.print(views.format_session_table(sessions, counts))


@app.command()
def compare(
    exercise_name: Annotated[str, typer.Argument(help="Exercise name")],
    store_path: StorePathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show what you did for an exercise in its most recent completed session.
    """
    engine = get_engine(store_path)
    exercise = require_exercise(engine, exercise_name)
    comparison = engine.load_comparison(exercise)

    if json_out:
        print(json.dumps({
            "exercise": exercise.name,
            "session_date": comparison.session_date.isoformat() if comparison.session_date else None,
            "sets": [set_entry_to_dict(e) for e in comparison.sets],
        }, indent=2))
        return

    views.print_comparison(exercise.name, comparison)


@app.command()
def summary(
    index: Annotated[
        int,
        typer.Option("--index", "-i", help="Completed session # (1 = most recent)"),
    ] = 1,
    store_path: StorePathOption = None,
) -> None:
    """
    Print a shareable plain-text summary of a completed session.
    """
    engine = get_engine(store_path)
    session = _pick_completed(engine, index)
    print(summary_text(session, engine.session_sets(session), engine.exercises()))
