"""
"Last time" lookup for an exercise.

The comparison for an exercise is every set of that exercise from the one
most recent completed session that contains it. Sets from two different
prior sessions are never mixed.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Sequence

from .models import Session, SetEntry
from .records import completed_sets


@dataclass
class Comparison:
    """Sets of one prior session for one exercise, with that session's date."""

    sets: list[SetEntry] = field(default_factory=list)
    session_date: datetime | None = None

    @property
    def is_empty(self) -> bool:
        return not self.sets


def load_comparison(
    exercise_name: str,
    sessions: Sequence[Session],
    sets: Sequence[SetEntry],
) -> Comparison:
    """
    Find the most recent completed session containing *exercise_name*.

    Args:
        exercise_name: Exercise to look up
        sessions: All sessions
        sets: All sets

    Returns:
        Comparison with that session's sets of the exercise sorted by set
        number, or an empty Comparison if the exercise has never been
        logged in a completed session
    """
    history = [e for e in completed_sets(sessions, sets) if e.exercise_name == exercise_name]
    if not history:
        return Comparison()

    latest = history[-1]
    owner = next(s for s in sessions if s.id == latest.session_id)
    same_session = [e for e in history if e.session_id == owner.id]
    same_session.sort(key=lambda e: e.set_number)
    return Comparison(sets=same_session, session_date=owner.start_date)
