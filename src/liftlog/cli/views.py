"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of workout data.
"""

from datetime import datetime
from typing import Sequence

from rich.console import Console
from rich.table import Table

from ..core.analytics import ProgressionPoint, WeeklyVolume, WorkoutStats
from ..core.ascii_plot import create_progression_plot, create_weekly_volume_chart
from ..core.comparison import Comparison
from ..core.metrics import format_duration, format_set, format_weight
from ..core.models import (
    MUSCLE_GROUP_NAMES,
    BodyWeightSample,
    Exercise,
    Profile,
    Session,
    SessionTemplate,
    SetEntry,
)
from ..core.physiology import formatted_height
from ..core.records import PR_LABELS, PersonalRecord
from ..core.session_engine import DisplayRow

console = Console()


def _fmt_date(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d") if value is not None else "-"


def format_display_rows(exercise_name: str, rows: Sequence[DisplayRow]) -> Table:
    """
    Create a Rich table of the selected exercise's sets in the active session.

    Super set rows list every member of the group on one line.
    """
    table = Table(title=f"{exercise_name}: this session")
    table.add_column("Set", justify="right", style="dim", width=4)
    table.add_column("Performed", style="bold")
    table.add_column("Super set", style="magenta")

    for row in rows:
        if row.kind == "regular":
            table.add_row(str(row.set_number), format_set(row.sets[0]), "")
        else:
            members = " + ".join(f"{e.exercise_name} {format_set(e)}" for e in row.sets)
            own = next(e for e in row.sets if e.exercise_name == exercise_name)
            table.add_row(str(row.set_number), format_set(own), members)
    return table


def print_session_sets(session: Session, grouped: Sequence[tuple[str, list[SetEntry]]]) -> None:
    """
    Print every set of a session, grouped by exercise.

    Args:
        session: Session to show
        grouped: (exercise name, sets) pairs in first-performed order
    """
    state = "in progress" if session.is_active else "completed"
    console.print(f"[bold]Session {session.start_date:%Y-%m-%d %H:%M}[/bold] ({state})")
    if not grouped:
        console.print("[yellow]No sets logged yet.[/yellow]")
        return

    table = Table(show_header=True, header_style="dim")
    table.add_column("Exercise", style="cyan")
    table.add_column("Set", justify="right")
    table.add_column("Performed", style="bold")
    table.add_column("Group", style="magenta")
    table.add_column("ID", style="dim")

    for name, sets in grouped:
        for entry in sets:
            table.add_row(
                name,
                str(entry.set_number),
                format_set(entry),
                f"SS{entry.superset_order + 1}" if entry.superset_order is not None else "",
                entry.id[:8],
            )
    console.print(table)


def print_comparison(exercise_name: str, comparison: Comparison) -> None:
    """Print the sets from the last completed session with this exercise."""
    if comparison.is_empty:
        console.print(f"[yellow]No previous sessions with {exercise_name}.[/yellow]")
        return

    console.print(f"[bold]Last time ({_fmt_date(comparison.session_date)})[/bold]")
    for entry in comparison.sets:
        console.print(f"  Set {entry.set_number}: {format_set(entry)}")


def format_session_table(sessions: Sequence[Session], set_counts: dict[str, int]) -> Table:
    """
    Create a Rich table displaying session history.

    Args:
        sessions: Sessions to display, newest first
        set_counts: Session id → number of sets

    Returns:
        Rich Table object
    """
    table = Table(title="Workout History")
    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Date", style="cyan")
    table.add_column("Duration", justify="right")
    table.add_column("Sets", justify="right", style="bold")
    table.add_column("Notes")

    for i, session in enumerate(sessions, 1):
        table.add_row(
            str(i),
            session.start_date.strftime("%Y-%m-%d %H:%M"),
            format_duration(session.duration_seconds()),
            str(set_counts.get(session.id, 0)),
            session.notes or "",
        )
    return table


def print_exercises(exercises: Sequence[Exercise]) -> None:
    """Print the exercise library grouped by muscle group."""
    table = Table(title="Exercises")
    table.add_column("Muscle group", style="magenta")
    table.add_column("Exercise", style="cyan")
    table.add_column("Custom", justify="center")
    table.add_column("Last used", style="dim")

    for exercise in exercises:
        table.add_row(
            exercise.muscle_group_name,
            exercise.name,
            "✓" if exercise.is_custom else "",
            _fmt_date(exercise.last_used_date),
        )
    console.print(table)


def print_records(records: Sequence[PersonalRecord], unit: str) -> None:
    """Print all-time personal records, one row per exercise."""
    if not records:
        console.print("[yellow]No completed sessions yet.[/yellow]")
        return

    table = Table(title="Personal Records")
    table.add_column("Group", style="magenta")
    table.add_column("Exercise", style="cyan")
    table.add_column(f"{PR_LABELS['heaviest_weight']} ({unit})", justify="right")
    table.add_column(PR_LABELS["best_volume"], justify="right")
    table.add_column(PR_LABELS["most_reps"], justify="right")
    table.add_column(PR_LABELS["estimated_1rm"], justify="right", style="bold")

    for pr in records:
        table.add_row(
            MUSCLE_GROUP_NAMES[pr.muscle_group],
            pr.exercise_name,
            format_weight(pr.heaviest_weight),
            f"{pr.best_volume:,.0f}",
            str(pr.most_reps),
            f"{pr.estimated_1rm:.1f}",
        )
    console.print(table)


def print_progression(points: Sequence[ProgressionPoint], exercise_name: str, unit: str) -> None:
    console.print(create_progression_plot(points, exercise_name, unit))


def print_volume_chart(weeks: Sequence[WeeklyVolume], unit: str) -> None:
    """Print weekly volume chart."""
    console.print(create_weekly_volume_chart(weeks, unit))


def format_stats_display(stats: WorkoutStats, weekly_calories: int | None = None) -> str:
    """
    Format aggregate workout stats as a text block.

    Args:
        stats: Aggregate stats
        weekly_calories: Estimated calories this week, if known

    Returns:
        Formatted string
    """
    lines = [
        "Workout stats",
        f"- Total workouts: {stats.total_sessions}",
        f"- This week: {stats.sessions_this_week}",
        f"- Avg duration: {stats.average_duration_minutes} min",
        f"- Total sets: {stats.total_sets}",
    ]
    if weekly_calories is not None:
        lines.append(f"- Calories this week: ~{weekly_calories} kcal")
    return "\n".join(lines)


def print_profile(profile: Profile, rmr: int, tdee: int) -> None:
    """Print the profile and its derived energy values."""
    table = Table(show_header=False, title="Profile")
    table.add_column("Field", style="dim")
    table.add_column("Value", style="bold")

    table.add_row("Name", profile.name or "-")
    table.add_row("Age", str(profile.age))
    table.add_row("Sex", profile.sex)
    table.add_row("Height", formatted_height(profile.height_inches))
    table.add_row("Body weight", f"{format_weight(profile.body_weight)} {profile.preferred_unit}")
    table.add_row("Waist", f"{format_weight(profile.waist_inches)} in")
    table.add_row("Activity", profile.activity_level.replace("_", " "))
    table.add_row("Rest timer", f"{profile.default_rest_seconds} s")
    table.add_row("RMR", f"{rmr} kcal/day")
    table.add_row("TDEE", f"{tdee} kcal/day")
    console.print(table)


def print_body_weights(samples: Sequence[BodyWeightSample], unit: str) -> None:
    """Print weigh-ins, oldest first."""
    if not samples:
        console.print("[yellow]No weigh-ins in this window.[/yellow]")
        return
    table = Table(title="Body Weight")
    table.add_column("Date", style="cyan")
    table.add_column(f"Weight ({unit})", justify="right", style="bold")
    for sample in samples:
        table.add_row(sample.date.strftime("%Y-%m-%d %H:%M"), format_weight(sample.weight))
    console.print(table)


def print_templates(templates: Sequence[SessionTemplate]) -> None:
    """Print templates with their exercise lists."""
    table = Table(title="Templates")
    table.add_column("Name", style="cyan")
    table.add_column("Preset", justify="center")
    table.add_column("Exercises")
    for template in templates:
        table.add_row(
            template.name,
            "✓" if template.is_preset else "",
            ", ".join(template.exercise_names),
        )
    console.print(table)


def print_recent(exercises: Sequence[Exercise]) -> None:
    """Print the recent-exercises ring, front first."""
    if not exercises:
        return
    console.print("[dim]Recent:[/dim] " + " · ".join(e.name for e in exercises))


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} [y/N]: ")
    return response.lower() in ("y", "yes")
