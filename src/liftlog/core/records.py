"""
Personal record computation and detection.

Four categories are tracked independently per exercise: heaviest weight,
best single-set volume, most reps in a set and best estimated 1RM. Only
sets from completed sessions count as history; the set being logged in
the active session is compared against that history but is not part of
it until its session ends.

Ties keep the earliest set: sets are scanned in ascending timestamp order
and a record only moves on a strictly greater value.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Literal, Sequence

from .metrics import epley_1rm, set_volume
from .models import Session, SetEntry

PRType = Literal["estimated_1rm", "heaviest_weight", "best_volume", "most_reps"]

# Reporting priority when several categories are beaten by one set.
PR_PRIORITY: tuple[str, ...] = ("estimated_1rm", "heaviest_weight", "best_volume", "most_reps")

PR_LABELS: dict[str, str] = {
    "estimated_1rm": "Est. 1RM",
    "heaviest_weight": "Heaviest Set",
    "best_volume": "Best Volume",
    "most_reps": "Most Reps",
}


@dataclass
class PersonalRecord:
    """All-time bests for one exercise, each with the date it was set."""

    exercise_name: str
    muscle_group: str
    heaviest_weight: float = 0.0
    heaviest_weight_date: datetime | None = None
    best_volume: float = 0.0
    best_volume_date: datetime | None = None
    most_reps: int = 0
    most_reps_date: datetime | None = None
    estimated_1rm: float = 0.0
    estimated_1rm_date: datetime | None = None


def completed_sets(sessions: Iterable[Session], sets: Iterable[SetEntry]) -> list[SetEntry]:
    """
    Filter sets down to those whose owning session has ended.

    Args:
        sessions: All known sessions
        sets: Sets to filter

    Returns:
        Sets belonging to completed sessions, ascending by timestamp
    """
    done = {s.id for s in sessions if s.is_completed}
    result = [e for e in sets if e.session_id in done]
    result.sort(key=lambda e: e.timestamp)
    return result


def compute_record(
    exercise_name: str,
    muscle_group: str,
    history: Sequence[SetEntry],
) -> PersonalRecord:
    """
    Compute the four running maxima over one exercise's history.

    Args:
        exercise_name: Exercise the sets belong to
        muscle_group: Muscle group of the exercise (carried for sorting)
        history: Completed-session sets for the exercise

    Returns:
        PersonalRecord with values and the timestamps that set them
    """
    pr = PersonalRecord(exercise_name=exercise_name, muscle_group=muscle_group)

    for entry in sorted(history, key=lambda e: e.timestamp):
        if entry.weight > pr.heaviest_weight:
            pr.heaviest_weight = entry.weight
            pr.heaviest_weight_date = entry.timestamp

        volume = set_volume(entry.weight, entry.reps)
        if volume > pr.best_volume:
            pr.best_volume = volume
            pr.best_volume_date = entry.timestamp

        if entry.reps > pr.most_reps:
            pr.most_reps = entry.reps
            pr.most_reps_date = entry.timestamp

        estimate = epley_1rm(entry.weight, entry.reps)
        if estimate > pr.estimated_1rm:
            pr.estimated_1rm = estimate
            pr.estimated_1rm_date = entry.timestamp

    return pr


def detect_new_pr(weight: float, reps: int, history: Sequence[SetEntry]) -> PRType | None:
    """
    Check whether a just-logged set beats the exercise's history.

    The first ever set for an exercise is a baseline, never a record.
    When several categories are beaten only the most impressive one is
    reported: 1RM > heaviest weight > best volume > most reps.

    Args:
        weight: Weight of the new set
        reps: Reps of the new set
        history: Completed-session sets for the same exercise

    Returns:
        The beaten category, or None
    """
    if not history:
        return None

    max_weight = max(e.weight for e in history)
    max_volume = max(set_volume(e.weight, e.reps) for e in history)
    max_reps = max(e.reps for e in history)
    max_1rm = max(epley_1rm(e.weight, e.reps) for e in history)

    if epley_1rm(weight, reps) > max_1rm:
        return "estimated_1rm"
    if weight > max_weight:
        return "heaviest_weight"
    if set_volume(weight, reps) > max_volume:
        return "best_volume"
    if reps > max_reps:
        return "most_reps"
    return None
