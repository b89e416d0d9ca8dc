"""
Workout session engine.

The central state machine: session lifecycle, set logging and deletion
with per-(session, exercise) numbering, super set building, the bounded
recent-exercises ring and template application.

Mutators never raise for bad input or unmet preconditions; they return
False or None and leave the store untouched. Each successful mutation ends
with exactly one ``store.save()``. A failed save is reported as a
PersistenceWarning and the in-memory state stays authoritative.
"""

import warnings
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Any, Callable, Literal

from ..io.serializers import ValidationError, parse_reps, parse_weight
from .analytics import session_calories, weekly_workout_calories
from .catalog import CATALOG, PRESET_TEMPLATES, find_muscle_group
from .comparison import Comparison, load_comparison
from .config import BODY_WEIGHT_WINDOW_DAYS, MAX_RECENT_EXERCISES, MAX_SUPERSET_MEMBERS
from .metrics import format_weight
from .models import (
    INTENSITY_TECHNIQUES,
    MUSCLE_GROUPS,
    BodyWeightSample,
    Exercise,
    Profile,
    Session,
    SessionTemplate,
    SetEntry,
    new_id,
)
from .records import PRType, completed_sets, detect_new_pr
from .templates import clean_names, exercise_names_from_sets, resolve_template, sort_templates


class PersistenceWarning(UserWarning):
    """Emitted when the store could not be saved."""


@dataclass
class DisplayRow:
    """
    One row of the current exercise's set table.

    A regular row holds a single set. A super set row holds every member
    set of one group, ordered by position in the group.
    """

    kind: Literal["regular", "superset"]
    set_number: int
    sets: list[SetEntry]
    group_id: str | None = None


@dataclass
class SupersetDraft:
    """Uncommitted super set: members in order and their typed inputs."""

    members: list[Exercise] = field(default_factory=list)
    weights: dict[str, str] = field(default_factory=dict)
    reps: dict[str, str] = field(default_factory=dict)

    def index_of(self, exercise: Exercise) -> int | None:
        for i, member in enumerate(self.members):
            if member.name == exercise.name:
                return i
        return None


class WorkoutEngine:
    """
    Single-user workout engine over a WorkoutStore.

    Transient UI-facing state lives on the instance: the active session,
    the selected exercise, typed weight/reps input, the recent-exercises
    ring, the comparison for the selected exercise, the super set draft
    and the single-shot ``new_pr`` signal.
    """

    def __init__(self, store: Any, clock: Callable[[], datetime] | None = None):
        """
        Initialize the engine and restore state from the store.

        Args:
            store: WorkoutStore (or anything with the same interface)
            clock: Returns "now"; defaults to datetime.now
        """
        self.store = store
        self.clock: Callable[[], datetime] = clock or datetime.now

        self.active_session: Session | None = None
        self.selected_exercise: Exercise | None = None
        self.recent_exercises: list[Exercise] = []
        self.comparison = Comparison()
        self.weight_input = ""
        self.reps_input = ""
        self.new_pr: PRType | None = None
        self.superset_mode = False
        self.superset = SupersetDraft()

        self.setup()

    # =========================================================================
    # Setup
    # =========================================================================

    def setup(self) -> None:
        """Seed a new store, then resume the active session and recent ring."""
        changed = self._seed_exercises()
        changed = self._seed_templates() or changed

        self.active_session = self.store.first(
            "sessions", where=lambda s: s.is_active, order_by="start_date", reverse=True
        )
        self.recent_exercises = self.store.query(
            "exercises",
            where=lambda e: e.last_used_date is not None,
            order_by="last_used_date",
            reverse=True,
            limit=MAX_RECENT_EXERCISES,
        )

        if self.active_session is not None:
            session_id = self.active_session.id
            newest = self.store.first(
                "sets",
                where=lambda e: e.session_id == session_id,
                order_by="timestamp",
                reverse=True,
            )
            if newest is not None:
                self.selected_exercise = self.find_exercise(newest.exercise_name)
                if self.selected_exercise is not None:
                    self.comparison = self.load_comparison(self.selected_exercise)
                    self.weight_input = format_weight(newest.weight)

        if self.store.first("profiles") is None:
            self.store.insert(Profile(start_date=self.clock()))
            changed = True

        if changed:
            self._save()

    def _seed_exercises(self) -> bool:
        if self.store.count("exercises") > 0:
            return False
        now = self.clock()
        for group, names in CATALOG.items():
            for name in names:
                self.store.insert(
                    Exercise(name=name, muscle_group=group, is_custom=False, date_created=now)
                )
        return True

    def _seed_templates(self) -> bool:
        if self.store.count("templates") > 0:
            return False
        now = self.clock()
        for name, exercise_names in PRESET_TEMPLATES.items():
            self.store.insert(
                SessionTemplate(
                    name=name,
                    exercise_names=list(exercise_names),
                    date_created=now,
                    is_preset=True,
                )
            )
        return True

    def _save(self) -> None:
        try:
            self.store.save()
        except OSError as e:
            warnings.warn(f"Could not save workout data: {e}", PersistenceWarning, stacklevel=3)

    def _clear_input(self) -> None:
        self.selected_exercise = None
        self.weight_input = ""
        self.reps_input = ""
        self.comparison = Comparison()

    # =========================================================================
    # Lookups
    # =========================================================================

    def find_exercise(self, name: str) -> Exercise | None:
        """Stored exercise with exactly this name, or None."""
        return self.store.first("exercises", where=lambda e: e.name == name)

    def exercises(self, muscle_group: str | None = None) -> list[Exercise]:
        """All exercises, ordered by muscle group then name."""
        order = {g: i for i, g in enumerate(MUSCLE_GROUPS)}
        return self.store.query(
            "exercises",
            where=(lambda e: e.muscle_group == muscle_group) if muscle_group else None,
            order_by=lambda e: (order[e.muscle_group], e.name.lower()),
        )

    def sessions(self) -> list[Session]:
        return self.store.query("sessions", order_by="start_date")

    def completed_sessions(self) -> list[Session]:
        """Completed sessions, newest first."""
        return self.store.query(
            "sessions", where=lambda s: not s.is_active, order_by="start_date", reverse=True
        )

    def all_sets(self) -> list[SetEntry]:
        return self.store.query("sets", order_by="timestamp")

    def session_sets(self, session: Session) -> list[SetEntry]:
        """Sets of one session in logging order."""
        return self.store.query(
            "sets", where=lambda e: e.session_id == session.id, order_by="timestamp"
        )

    def _exercise_history(self, exercise_name: str) -> list[SetEntry]:
        return [
            e
            for e in completed_sets(self.sessions(), self.all_sets())
            if e.exercise_name == exercise_name
        ]

    def _next_set_number(self, session_id: str, exercise_name: str) -> int:
        return (
            self.store.count(
                "sets",
                where=lambda e: e.session_id == session_id and e.exercise_name == exercise_name,
            )
            + 1
        )

    def _renumber(self, session_id: str, exercise_name: str) -> None:
        siblings = self.store.query(
            "sets",
            where=lambda e: e.session_id == session_id and e.exercise_name == exercise_name,
            order_by=lambda e: (e.timestamp, e.set_number),
        )
        for number, entry in enumerate(siblings, start=1):
            entry.set_number = number

    # =========================================================================
    # Session lifecycle
    # =========================================================================

    def start_session(self) -> Session:
        """
        Start a new session, ending any session still active.

        Returns:
            The new active session
        """
        now = self.clock()
        for stale in self.store.query("sessions", where=lambda s: s.is_active):
            stale.is_active = False
            stale.end_date = now

        session = Session(start_date=now)
        self.store.insert(session)
        self.active_session = session
        self._leave_superset_mode()
        self._clear_input()
        self._save()
        return session

    def end_session(self, notes: str | None = None) -> Session | None:
        """
        End the active session.

        Args:
            notes: Optional notes; blank notes are stored as None

        Returns:
            The completed session, or None if no session was active
        """
        session = self.active_session
        if session is None:
            return None

        trimmed = notes.strip() if notes else ""
        session.is_active = False
        session.end_date = self.clock()
        session.notes = trimmed or None

        self.active_session = None
        self._leave_superset_mode()
        self._clear_input()
        self._save()
        return session

    # =========================================================================
    # Exercise selection
    # =========================================================================

    def _add_to_recent(self, exercise: Exercise) -> None:
        if any(e.name == exercise.name for e in self.recent_exercises):
            return
        self.recent_exercises.insert(0, exercise)
        del self.recent_exercises[MAX_RECENT_EXERCISES:]

    def select_exercise(self, exercise: Exercise) -> None:
        """
        Make *exercise* the input target, starting a session if needed.

        In super set mode this toggles draft membership instead.
        """
        if self.active_session is None:
            self.start_session()

        if self.superset_mode:
            self.toggle_superset_member(exercise)
            return

        self.selected_exercise = exercise
        self.comparison = self.load_comparison(exercise)
        self._add_to_recent(exercise)
        exercise.last_used_date = self.clock()
        self._save()

    def load_comparison(self, exercise: Exercise) -> Comparison:
        """Sets from the most recent completed session containing *exercise*."""
        return load_comparison(exercise.name, self.sessions(), self.all_sets())

    def create_custom_exercise(
        self, name: str, muscle_group: str, select: bool = True
    ) -> Exercise | None:
        """
        Add a user-defined exercise.

        Args:
            name: Exercise name (trimmed)
            muscle_group: Muscle group key
            select: Select the new exercise afterwards

        Returns:
            The new exercise, or None for a blank, duplicate or badly
            grouped name
        """
        trimmed = (name or "").strip()
        if not trimmed or muscle_group not in MUSCLE_GROUPS:
            return None
        if self.find_exercise(trimmed) is not None or find_muscle_group(trimmed) is not None:
            return None

        exercise = Exercise(
            name=trimmed, muscle_group=muscle_group, is_custom=True, date_created=self.clock()
        )
        self.store.insert(exercise)
        self._save()
        if select:
            self.select_exercise(exercise)
        return exercise

    # =========================================================================
    # Set logging
    # =========================================================================

    def _create_set(
        self,
        session_id: str,
        exercise: Exercise,
        weight: float,
        reps: int,
        now: datetime,
        **flags: Any,
    ) -> SetEntry:
        entry = SetEntry(
            session_id=session_id,
            exercise_name=exercise.name,
            weight=weight,
            reps=reps,
            set_number=self._next_set_number(session_id, exercise.name),
            timestamp=now,
            **flags,
        )
        self.store.insert(entry)
        exercise.last_used_date = now
        return entry

    def log_set(
        self,
        weight: str | float | None = None,
        reps: str | int | None = None,
        is_warm_up: bool = False,
        to_failure: bool = False,
        technique: str | None = None,
    ) -> bool:
        """
        Log one set of the selected exercise in the active session.

        Args:
            weight: Weight input; defaults to ``weight_input``
            reps: Reps input; defaults to ``reps_input``
            is_warm_up: Warm-up sets never trigger PR detection
            to_failure: Set taken to failure
            technique: Optional intensity technique key

        Returns:
            True if the set was logged
        """
        exercise = self.selected_exercise
        if self.active_session is None or exercise is None:
            return False
        if technique is not None and technique not in INTENSITY_TECHNIQUES:
            return False
        try:
            w = parse_weight(self.weight_input if weight is None else weight)
            r = parse_reps(self.reps_input if reps is None else reps)
        except ValidationError:
            return False

        history = self._exercise_history(exercise.name)
        self._create_set(
            self.active_session.id,
            exercise,
            w,
            r,
            self.clock(),
            is_warm_up=is_warm_up,
            to_failure=to_failure,
            technique=technique,
        )
        if not is_warm_up:
            pr = detect_new_pr(w, r, history)
            if pr is not None:
                self.new_pr = pr

        self.weight_input = format_weight(w)
        self.reps_input = ""
        self._save()
        return True

    def delete_set(self, entry: SetEntry) -> bool:
        """
        Delete a set of the active session and compact its siblings' numbers.

        Returns:
            False if the set is not part of the active session or was
            already deleted
        """
        if self.active_session is None or entry.session_id != self.active_session.id:
            return False
        if self.store.get("sets", entry.id) is None:
            return False

        self.store.delete(entry)
        self._renumber(entry.session_id, entry.exercise_name)
        self._save()
        return True

    def consume_new_pr(self) -> PRType | None:
        """Return the pending new-PR signal and clear it."""
        pr, self.new_pr = self.new_pr, None
        return pr

    def current_exercise_sets(self) -> list[SetEntry]:
        """Sets of the selected exercise in the active session, by set number."""
        if self.active_session is None or self.selected_exercise is None:
            return []
        session_id = self.active_session.id
        name = self.selected_exercise.name
        return self.store.query(
            "sets",
            where=lambda e: e.session_id == session_id and e.exercise_name == name,
            order_by="set_number",
        )

    def current_display_rows(self) -> list[DisplayRow]:
        """
        Rows for the selected exercise's set table.

        Each super set group the exercise took part in collapses into one
        row holding every member set of the group.
        """
        rows: list[DisplayRow] = []
        seen: set[str] = set()
        for entry in self.current_exercise_sets():
            group_id = entry.superset_group_id
            if group_id is None:
                rows.append(DisplayRow("regular", entry.set_number, [entry]))
                continue
            if group_id in seen:
                continue
            seen.add(group_id)
            members = self.store.query(
                "sets",
                where=lambda e: e.superset_group_id == group_id,
                order_by="superset_order",
            )
            rows.append(DisplayRow("superset", entry.set_number, members, group_id))
        return rows

    # =========================================================================
    # Super sets
    # =========================================================================

    def enter_superset_mode(self) -> None:
        """Start building a super set seeded with the selected exercise."""
        self.superset_mode = True
        self.superset = SupersetDraft()
        if self.selected_exercise is not None:
            self.superset.members.append(self.selected_exercise)
            if self.weight_input:
                self.superset.weights[self.selected_exercise.name] = self.weight_input

    def _leave_superset_mode(self) -> None:
        self.superset_mode = False
        self.superset = SupersetDraft()

    def exit_superset_mode(self) -> None:
        """Stop building and discard the draft."""
        self._leave_superset_mode()

    def toggle_superset_member(self, exercise: Exercise) -> bool:
        """
        Add *exercise* to the draft or remove it.

        The last remaining member cannot be removed and the draft holds at
        most five members.

        Returns:
            True if the exercise is a member afterwards
        """
        if not self.superset_mode:
            return False

        draft = self.superset
        index = draft.index_of(exercise)
        if index is not None:
            if len(draft.members) > 1:
                del draft.members[index]
                draft.weights.pop(exercise.name, None)
                draft.reps.pop(exercise.name, None)
                return False
            return True

        if len(draft.members) >= MAX_SUPERSET_MEMBERS:
            return False
        draft.members.append(exercise)
        self._add_to_recent(exercise)
        return True

    def is_in_superset(self, exercise: Exercise) -> bool:
        return self.superset.index_of(exercise) is not None

    def superset_index(self, exercise: Exercise) -> int | None:
        """1-based position of *exercise* in the draft, or None."""
        index = self.superset.index_of(exercise)
        return index + 1 if index is not None else None

    def set_superset_input(
        self,
        exercise: Exercise,
        weight: str | float | None = None,
        reps: str | int | None = None,
    ) -> bool:
        """Record typed weight and/or reps for one draft member."""
        if not self.superset_mode or not self.is_in_superset(exercise):
            return False
        if weight is not None:
            self.superset.weights[exercise.name] = str(weight)
        if reps is not None:
            self.superset.reps[exercise.name] = str(reps)
        return True

    def commit_superset(self) -> bool:
        """
        Log one round of the draft as a super set.

        All members must have a valid weight and rep count; otherwise
        nothing is logged. A single-member draft is logged as a regular
        set. The engine stays in building mode with reps cleared and
        weights kept for the next round.

        Returns:
            True if the round was logged
        """
        draft = self.superset
        if not self.superset_mode or self.active_session is None or not draft.members:
            return False

        if len(draft.members) == 1:
            member = draft.members[0]
            self.selected_exercise = member
            logged = self.log_set(
                draft.weights.get(member.name, self.weight_input),
                draft.reps.get(member.name, self.reps_input),
            )
            if logged:
                draft.weights[member.name] = self.weight_input
                draft.reps[member.name] = ""
            return logged

        parsed: list[tuple[Exercise, float, int]] = []
        for member in draft.members:
            try:
                w = parse_weight(draft.weights.get(member.name))
                r = parse_reps(draft.reps.get(member.name))
            except ValidationError:
                return False
            parsed.append((member, w, r))

        histories = {m.name: self._exercise_history(m.name) for m, _, _ in parsed}
        group_id = new_id()
        session_id = self.active_session.id
        now = self.clock()
        for order, (member, w, r) in enumerate(parsed):
            self._create_set(
                session_id, member, w, r, now, superset_group_id=group_id, superset_order=order
            )
            pr = detect_new_pr(w, r, histories[member.name])
            if pr is not None:
                self.new_pr = pr

        for member in draft.members:
            draft.reps[member.name] = ""
        self._save()
        return True

    def delete_superset_group(self, group_id: str) -> bool:
        """
        Delete every set of one super set group in the active session.

        Remaining sets of each affected exercise are renumbered.

        Returns:
            False if there is no active session or no such group in it
        """
        if self.active_session is None:
            return False
        session_id = self.active_session.id
        members = self.store.query(
            "sets",
            where=lambda e: e.session_id == session_id and e.superset_group_id == group_id,
        )
        if not members:
            return False

        for entry in members:
            self.store.delete(entry)
        for name in {e.exercise_name for e in members}:
            self._renumber(session_id, name)
        self._save()
        return True

    # =========================================================================
    # Templates
    # =========================================================================

    def list_templates(self) -> list[SessionTemplate]:
        """Presets first, then alphabetically."""
        return sort_templates(self.store.query("templates"))

    def find_template(self, name: str) -> SessionTemplate | None:
        """Template by name, ignoring case and surrounding spaces."""
        wanted = name.strip().lower()
        return self.store.first("templates", where=lambda t: t.name.lower() == wanted)

    def create_template(self, name: str, exercise_names: list[str]) -> SessionTemplate | None:
        """
        Save a template from an explicit ordered list of exercise names.

        Returns:
            The new template, or None for a blank name or empty list
        """
        trimmed = (name or "").strip()
        names = clean_names(exercise_names)
        if not trimmed or not names:
            return None
        template = SessionTemplate(name=trimmed, exercise_names=names, date_created=self.clock())
        self.store.insert(template)
        self._save()
        return template

    def delete_template(self, template: SessionTemplate) -> None:
        self.store.delete(template)
        self._save()

    def save_template_from_session(self, session: Session, name: str) -> SessionTemplate | None:
        """
        Save the exercises of *session*, in first-performed order, as a template.

        Returns:
            The new template, or None if the name is blank or the session
            has no sets
        """
        names = exercise_names_from_sets(session.id, self.session_sets(session))
        return self.create_template(name, names)

    def apply_template(self, template: SessionTemplate) -> list[Exercise]:
        """
        Load a template's exercises into the recent ring and select the first.

        Names not found among stored exercises are materialized from the
        catalog; names found nowhere are skipped.

        Returns:
            The resolved exercises in template order
        """
        now = self.clock()
        resolved: list[Exercise] = []
        for name, existing, group in resolve_template(template, self.find_exercise):
            if existing is None:
                existing = Exercise(name=name, muscle_group=group, is_custom=False, date_created=now)
                self.store.insert(existing)
            resolved.append(existing)

        if not resolved:
            return []

        self._leave_superset_mode()
        for exercise in reversed(resolved):
            self._add_to_recent(exercise)
        self.select_exercise(resolved[0])
        return resolved

    # =========================================================================
    # Profile and body tracking
    # =========================================================================

    @property
    def profile(self) -> Profile:
        """The single profile, created with defaults if missing."""
        profile = self.store.first("profiles")
        if profile is None:
            profile = Profile(start_date=self.clock())
            self.store.insert(profile)
            self._save()
        return profile

    def update_profile(self, **changes: Any) -> Profile | None:
        """
        Update profile fields.

        Returns:
            The updated profile, or None if a value is invalid
        """
        current = self.profile
        try:
            updated = replace(current, **changes)
        except (TypeError, ValueError):
            return None
        self.store.delete(current)
        self.store.insert(updated)
        self._save()
        return updated

    def log_body_weight(self, weight: str | float) -> BodyWeightSample | None:
        """
        Record a weigh-in in the profile's unit.

        Returns:
            The new sample, or None if the weight is not a positive number
        """
        try:
            w = parse_weight(weight)
        except ValidationError:
            return None
        sample = BodyWeightSample(weight=w, date=self.clock())
        self.store.insert(sample)
        self._save()
        return sample

    def body_weight_samples(self, days: int = BODY_WEIGHT_WINDOW_DAYS) -> list[BodyWeightSample]:
        """Weigh-ins from the last *days* days, oldest first."""
        since = self.clock() - timedelta(days=days)
        return self.store.query("body_weights", where=lambda s: s.date >= since, order_by="date")

    def latest_body_weight(self) -> BodyWeightSample | None:
        return self.store.first("body_weights", order_by="date", reverse=True)

    def workout_calories(self, session: Session) -> int:
        """Estimated calories for one session at the profile's body weight."""
        return session_calories(session, self.profile, self.clock())

    def weekly_workout_calories(self) -> int:
        """Estimated calories over sessions completed this calendar week."""
        return weekly_workout_calories(self.sessions(), self.profile, self.clock())
