"""Profile commands: profile, weight, energy."""

import json
from typing import Annotated, Any, Optional

import typer

from ...core.config import (
    ACTIVITY_DESCRIPTIONS,
    ACTIVITY_MULTIPLIERS,
    BODY_WEIGHT_WINDOW_DAYS,
    REST_DURATION_PRESETS,
)
from ...core.metrics import format_weight
from ...core.physiology import body_weight_kg, height_cm, profile_rmr, profile_tdee
from .. import views
from ..app import JsonOption, StorePathOption, app, get_engine


@app.command()
def profile(
    name: Annotated[Optional[str], typer.Option("--name", help="Your name")] = None,
    age: Annotated[Optional[int], typer.Option("--age", help="Age in years", min=0)] = None,
    sex: Annotated[
        Optional[str],
        typer.Option("--sex", help="male or female (selects the RMR formula)"),
    ] = None,
    height_inches: Annotated[
        Optional[float],
        typer.Option("--height-in", help="Height in inches", min=0),
    ] = None,
    body_weight: Annotated[
        Optional[float],
        typer.Option("--body-weight", help="Body weight in your preferred unit", min=0),
    ] = None,
    waist_inches: Annotated[
        Optional[float],
        typer.Option("--waist-in", help="Waist in inches", min=0),
    ] = None,
    unit: Annotated[Optional[str], typer.Option("--unit", help="lbs or kg")] = None,
    activity: Annotated[
        Optional[str],
        typer.Option("--activity", help=f"One of: {', '.join(ACTIVITY_MULTIPLIERS)}"),
    ] = None,
    rest_seconds: Annotated[
        Optional[int],
        typer.Option(
            "--rest",
            help=f"Default rest timer in seconds (presets: {', '.join(map(str, REST_DURATION_PRESETS))})",
            min=0,
        ),
    ] = None,
    store_path: StorePathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show the profile, or update any field given as an option.
    """
    engine = get_engine(store_path)

    changes: dict[str, Any] = {
        key: value
        for key, value in (
            ("name", name),
            ("age", age),
            ("sex", sex),
            ("height_inches", height_inches),
            ("body_weight", body_weight),
            ("waist_inches", waist_inches),
            ("preferred_unit", unit),
            ("activity_level", activity),
            ("default_rest_seconds", rest_seconds),
        )
        if value is not None
    }

    current = engine.profile
    if changes:
        updated = engine.update_profile(**changes)
        if updated is None:
            views.print_error(
                "Invalid profile value. sex: male/female, unit: lbs/kg, "
                f"activity: {', '.join(ACTIVITY_MULTIPLIERS)}"
            )
            raise typer.Exit(1)
        current = updated
        if not json_out:
            views.print_success("Profile updated.")

    if json_out:
        print(json.dumps({
            "name": current.name,
            "age": current.age,
            "sex": current.sex,
            "height_inches": current.height_inches,
            "height_cm": round(height_cm(current), 1),
            "body_weight": current.body_weight,
            "body_weight_kg": round(body_weight_kg(current), 2),
            "waist_inches": current.waist_inches,
            "preferred_unit": current.preferred_unit,
            "activity_level": current.activity_level,
            "default_rest_seconds": current.default_rest_seconds,
            "rmr": profile_rmr(current),
            "tdee": profile_tdee(current),
        }, indent=2))
        return

    views.print_profile(current, profile_rmr(current), profile_tdee(current))
    views.print_info(ACTIVITY_DESCRIPTIONS[current.activity_level])


@app.command()
def weight(
    value: Annotated[
        Optional[str],
        typer.Argument(help="New weigh-in; omit to list recent weigh-ins"),
    ] = None,
    days: Annotated[
        int,
        typer.Option("--days", "-d", help="Window for the listing, in days", min=1),
    ] = BODY_WEIGHT_WINDOW_DAYS,
    store_path: StorePathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Log a body weight weigh-in, or list recent ones.
    """
    engine = get_engine(store_path)
    unit = engine.profile.preferred_unit

    if value is not None:
        sample = engine.log_body_weight(value)
        if sample is None:
            views.print_error(f"Weight must be a positive number, got {value!r}")
            raise typer.Exit(1)
        views.print_success(f"Logged {format_weight(sample.weight)} {unit}.")
        return

    samples = engine.body_weight_samples(days)
    if json_out:
        print(json.dumps(
            [{"date": s.date.isoformat(), "weight": s.weight} for s in samples],
            indent=2,
        ))
        return

    views.print_body_weights(samples, unit)
    latest = engine.latest_body_weight()
    if latest is not None:
        views.print_info(f"Latest: {format_weight(latest.weight)} {unit} on {latest.date:%Y-%m-%d}")


@app.command()
def energy(
    store_path: StorePathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show RMR, TDEE and estimated workout calories this week.
    """
    engine = get_engine(store_path)
    current = engine.profile
    rmr = profile_rmr(current)
    tdee = profile_tdee(current)
    weekly = engine.weekly_workout_calories()

    if json_out:
        print(json.dumps({"rmr": rmr, "tdee": tdee, "weekly_workout_calories": weekly}, indent=2))
        return

    views.console.print(
        "\n".join([
            "Energy estimates",
            f"- Resting metabolic rate: {rmr} kcal/day",
            f"- Daily expenditure (TDEE): {tdee} kcal/day",
            f"- Workouts this week: ~{weekly} kcal",
        ])
    )
