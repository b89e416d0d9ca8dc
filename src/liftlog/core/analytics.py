"""
Derived analytics over the full workout history.

Every query is a pure function over the sessions and sets handed in and
is recomputed on each call; nothing is cached between calls. Only sets
from completed sessions are counted.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Sequence

from .config import WEEKLY_VOLUME_WEEKS
from .metrics import format_duration, format_set, set_volume
from .models import MUSCLE_GROUPS, Exercise, Profile, Session, SetEntry
from .physiology import body_weight_kg, workout_calories
from .records import PersonalRecord, completed_sets, compute_record


@dataclass
class ProgressionPoint:
    """Max weight lifted for one exercise on one session day."""

    date: date
    max_weight: float


@dataclass
class WeeklyVolume:
    """Total volume (Σ weight × reps) for one Monday-start week."""

    week_start: date
    total_volume: float


@dataclass
class WorkoutStats:
    """Headline counters for the progress dashboard."""

    total_sessions: int
    sessions_this_week: int
    average_duration_minutes: int
    total_sets: int


def week_start(day: date) -> date:
    """Monday of the ISO week containing *day*."""
    return day - timedelta(days=day.weekday())


def all_time_records(
    sessions: Sequence[Session],
    sets: Sequence[SetEntry],
    exercises: Sequence[Exercise],
) -> list[PersonalRecord]:
    """
    Personal records for every exercise ever performed in a completed session.

    Args:
        sessions: All sessions
        sets: All sets
        exercises: All known exercises (for the muscle group of each name)

    Returns:
        One PersonalRecord per exercise, sorted by muscle group display
        order then exercise name
    """
    groups = {e.name: e.muscle_group for e in exercises}
    by_exercise: dict[str, list[SetEntry]] = defaultdict(list)
    for entry in completed_sets(sessions, sets):
        by_exercise[entry.exercise_name].append(entry)

    records = [
        compute_record(name, groups[name], history)
        for name, history in by_exercise.items()
        if name in groups
    ]
    order = {g: i for i, g in enumerate(MUSCLE_GROUPS)}
    records.sort(key=lambda r: (order[r.muscle_group], r.exercise_name))
    return records


def progression_series(
    exercise_name: str,
    sessions: Sequence[Session],
    sets: Sequence[SetEntry],
) -> list[ProgressionPoint]:
    """
    Max weight per session day for one exercise.

    Sets are keyed by the calendar day of their session's start date, not
    their own timestamp, so one workout collapses to one point.

    Returns:
        Points ascending by date
    """
    starts = {s.id: s.start_date.date() for s in sessions if s.is_completed}
    per_day: dict[date, float] = {}
    for entry in sets:
        if entry.exercise_name != exercise_name or entry.session_id not in starts:
            continue
        day = starts[entry.session_id]
        per_day[day] = max(per_day.get(day, 0.0), entry.weight)

    return [ProgressionPoint(date=d, max_weight=w) for d, w in sorted(per_day.items())]


def weekly_volume_trend(
    sessions: Sequence[Session],
    sets: Sequence[SetEntry],
    today: date,
    weeks: int = WEEKLY_VOLUME_WEEKS,
) -> list[WeeklyVolume]:
    """
    Total volume for each of the most recent ISO weeks, oldest first.

    The last entry is the week containing *today*. Weeks without sets
    report zero.

    Args:
        sessions: All sessions
        sets: All sets
        today: Reference day
        weeks: Number of weeks to report

    Returns:
        Exactly *weeks* WeeklyVolume entries
    """
    current = week_start(today)
    starts = [current - timedelta(weeks=i) for i in range(weeks - 1, -1, -1)]
    totals: dict[date, float] = {s: 0.0 for s in starts}

    for entry in completed_sets(sessions, sets):
        key = week_start(entry.timestamp.date())
        if key in totals:
            totals[key] += set_volume(entry.weight, entry.reps)

    return [WeeklyVolume(week_start=s, total_volume=totals[s]) for s in starts]


def sessions_in_week(sessions: Sequence[Session], now: datetime) -> list[Session]:
    """Completed sessions that started in the calendar week containing *now*."""
    monday = datetime.combine(week_start(now.date()), datetime.min.time())
    next_monday = monday + timedelta(weeks=1)
    return [s for s in sessions if s.is_completed and monday <= s.start_date < next_monday]


def aggregate_stats(
    sessions: Sequence[Session],
    sets: Sequence[SetEntry],
    now: datetime,
) -> WorkoutStats:
    """
    Session counts, average duration and total set count.

    Average duration is end − start over completed sessions, in whole
    minutes (truncated).
    """
    done = [s for s in sessions if s.is_completed]
    if done:
        total_seconds = sum(s.duration_seconds(now) for s in done)
        average = int(total_seconds / len(done) / 60.0)
    else:
        average = 0

    return WorkoutStats(
        total_sessions=len(done),
        sessions_this_week=len(sessions_in_week(sessions, now)),
        average_duration_minutes=average,
        total_sets=len(completed_sets(sessions, sets)),
    )


def session_calories(session: Session, profile: Profile, now: datetime | None = None) -> int:
    """Estimated calories for one session at the profile's body weight."""
    return workout_calories(body_weight_kg(profile), session.duration_seconds(now))


def weekly_workout_calories(sessions: Sequence[Session], profile: Profile, now: datetime) -> int:
    """Estimated calories over sessions completed this calendar week."""
    return sum(session_calories(s, profile, now) for s in sessions_in_week(sessions, now))


def sets_by_exercise(session_id: str, sets: Sequence[SetEntry]) -> list[tuple[str, list[SetEntry]]]:
    """
    Group one session's sets by exercise.

    Exercises appear in the order they were first performed; each group
    is sorted by set number.
    """
    own = sorted((e for e in sets if e.session_id == session_id), key=lambda e: e.timestamp)
    grouped: dict[str, list[SetEntry]] = {}
    for entry in own:
        grouped.setdefault(entry.exercise_name, []).append(entry)
    return [
        (name, sorted(group, key=lambda e: e.set_number)) for name, group in grouped.items()
    ]


def summary_text(
    session: Session,
    sets: Sequence[SetEntry],
    exercises: Sequence[Exercise],
    now: datetime | None = None,
) -> str:
    """Plain-text workout summary suitable for sharing."""
    groups = {e.name: e.muscle_group_name for e in exercises}
    grouped = sets_by_exercise(session.id, sets)
    total_sets = sum(len(g) for _, g in grouped)

    lines = [
        "Workout Summary",
        "━" * 27,
        session.start_date.strftime("%A, %B %d, %Y"),
        f"Duration: {format_duration(session.duration_seconds(now))}",
        f"{len(grouped)} exercises · {total_sets} total sets",
    ]
    if session.notes:
        lines.append(f"Notes: {session.notes}")
    lines.append("")

    for name, group in grouped:
        lines.append(f"▸ {name} ({groups.get(name, '?')})")
        for entry in group:
            lines.append(f"   Set {entry.set_number}: {format_set(entry)}")
        lines.append("")

    lines.append("━" * 27)
    return "\n".join(lines)
