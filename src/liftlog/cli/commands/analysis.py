"""Analysis commands: prs, progress, volume, stats."""

import json
from typing import Annotated, Optional

import typer

from ...core.analytics import (
    aggregate_stats,
    all_time_records,
    progression_series,
    weekly_volume_trend,
)
from ...core.config import WEEKLY_VOLUME_WEEKS
from .. import views
from ..app import JsonOption, StorePathOption, app, get_engine, require_exercise


def _iso(value) -> str | None:
    return value.isoformat() if value is not None else None


@app.command()
def prs(
    group: Annotated[
        Optional[str],
        typer.Option("--group", "-g", help="Only this muscle group (e.g. chest, quads)"),
    ] = None,
    store_path: StorePathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show all-time personal records for every exercise performed.
    """
    engine = get_engine(store_path)
    records = all_time_records(engine.sessions(), engine.all_sets(), engine.exercises())
    if group is not None:
        records = [r for r in records if r.muscle_group == group]

    if json_out:
        print(json.dumps([
            {
                "exercise": r.exercise_name,
                "muscle_group": r.muscle_group,
                "heaviest_weight": r.heaviest_weight,
                "heaviest_weight_date": _iso(r.heaviest_weight_date),
                "best_volume": r.best_volume,
                "best_volume_date": _iso(r.best_volume_date),
                "most_reps": r.most_reps,
                "most_reps_date": _iso(r.most_reps_date),
                "estimated_1rm": round(r.estimated_1rm, 1),
                "estimated_1rm_date": _iso(r.estimated_1rm_date),
            }
            for r in records
        ], indent=2))
        return

    views.print_records(records, engine.profile.preferred_unit)


@app.command()
def progress(
    exercise_name: Annotated[str, typer.Argument(help="Exercise name")],
    store_path: StorePathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Plot max weight per session day for one exercise.
    """
    engine = get_engine(store_path)
    exercise = require_exercise(engine, exercise_name)
    points = progression_series(exercise.name, engine.sessions(), engine.all_sets())

    if json_out:
        print(json.dumps(
            [{"date": p.date.isoformat(), "max_weight": p.max_weight} for p in points],
            indent=2,
        ))
        return

    views.print_progression(points, exercise.name, engine.profile.preferred_unit)


@app.command()
def volume(
    weeks: Annotated[
        int,
        typer.Option("--weeks", "-w", help="Number of weeks to show", min=1),
    ] = WEEKLY_VOLUME_WEEKS,
    store_path: StorePathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show total volume (weight × reps) per week.
    """
    engine = get_engine(store_path)
    trend = weekly_volume_trend(
        engine.sessions(), engine.all_sets(), engine.clock().date(), weeks
    )

    if json_out:
        print(json.dumps(
            [{"week_start": w.week_start.isoformat(), "total_volume": w.total_volume} for w in trend],
            indent=2,
        ))
        return

    views.print_volume_chart(trend, engine.profile.preferred_unit)


@app.command()
def stats(
    store_path: StorePathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show workout counts, average duration and total sets.
    """
    engine = get_engine(store_path)
    result = aggregate_stats(engine.sessions(), engine.all_sets(), engine.clock())
    calories = engine.weekly_workout_calories()

    if json_out:
        print(json.dumps({
            "total_sessions": result.total_sessions,
            "sessions_this_week": result.sessions_this_week,
            "average_duration_minutes": result.average_duration_minutes,
            "total_sets": result.total_sets,
            "weekly_calories": calories,
        }, indent=2))
        return

    views.console.print(views.format_stats_display(result, calories))
