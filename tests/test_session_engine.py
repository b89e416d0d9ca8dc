"""
Behavioral tests for the workout session engine.

Covers session lifecycle, per-(session, exercise) set numbering, deletion
compaction, the recent-exercises ring, PR signalling, super sets, custom
exercises, body tracking and save-failure handling.
"""

import pytest

from liftlog.core.catalog import PRESET_TEMPLATES, catalog_size
from liftlog.core.session_engine import PersistenceWarning, WorkoutEngine

BENCH = "Flat Barbell Bench Press"
INCLINE = "Incline Barbell Bench Press"
SQUAT = "Barbell Back Squat"
ROW = "Barbell Bent-Over Row"


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _ex(engine, name):
    exercise = engine.find_exercise(name)
    assert exercise is not None, name
    return exercise


def _log(engine, clock, name, weight, reps, **kwargs):
    engine.select_exercise(_ex(engine, name))
    ok = engine.log_set(weight, reps, **kwargs)
    clock.advance(minutes=2)
    return ok


def _numbers(engine, name):
    return [e.set_number for e in engine.all_sets() if e.exercise_name == name]


def _active_count(engine):
    return sum(1 for s in engine.sessions() if s.is_active)


# ---------------------------------------------------------------------------
# Setup and resume
# ---------------------------------------------------------------------------

class TestSetup:
    def test_seeds_catalog_and_presets(self, engine):
        """A new store gets every catalog exercise and the preset templates."""
        exercises = engine.exercises()
        assert len(exercises) == catalog_size()
        assert not any(e.is_custom for e in exercises)

        templates = engine.list_templates()
        assert {t.name for t in templates} == set(PRESET_TEMPLATES)
        assert all(t.is_preset for t in templates)

    def test_profile_created_with_defaults(self, engine):
        """Exactly one profile exists after setup."""
        assert engine.store.count("profiles") == 1
        assert engine.profile.preferred_unit == "lbs"

    def test_second_engine_does_not_reseed(self, store, clock, engine):
        """Seeding only happens on an empty store."""
        WorkoutEngine(store, clock=clock)
        assert store.count("exercises") == catalog_size()
        assert store.count("templates") == len(PRESET_TEMPLATES)
        assert store.count("profiles") == 1

    def test_resume_restores_active_session_and_selection(self, store, clock, engine):
        """A fresh engine picks up the active session and last-logged exercise."""
        _log(engine, clock, BENCH, "135", "10")
        _log(engine, clock, SQUAT, "185", "5")

        resumed = WorkoutEngine(store, clock=clock)
        assert resumed.active_session is not None
        assert resumed.active_session.id == engine.active_session.id
        assert resumed.selected_exercise.name == SQUAT
        assert resumed.weight_input == "185"

    def test_resume_rebuilds_recent_ring_by_last_use(self, store, clock, engine):
        """The ring is rebuilt most-recently-used first."""
        for name in (BENCH, SQUAT, ROW):
            engine.select_exercise(_ex(engine, name))
            clock.advance(minutes=1)

        resumed = WorkoutEngine(store, clock=clock)
        assert [e.name for e in resumed.recent_exercises] == [ROW, SQUAT, BENCH]


# ---------------------------------------------------------------------------
# Session lifecycle
# ---------------------------------------------------------------------------

class TestSessionLifecycle:
    def test_start_creates_active_session(self, engine, clock):
        """start_session returns an active session stamped with now."""
        session = engine.start_session()
        assert session.is_active
        assert session.start_date == clock.now
        assert engine.active_session is session

    def test_single_active_session(self, engine, clock):
        """Any sequence of starts and ends leaves at most one active session."""
        for action in ("start", "start", "end", "start", "start", "end", "end", "start"):
            if action == "start":
                engine.start_session()
            else:
                engine.end_session()
            clock.advance(minutes=1)
            assert _active_count(engine) <= 1

    def test_start_ends_previous_session(self, engine, clock):
        """Starting again completes the session that was running."""
        first = engine.start_session()
        clock.advance(minutes=30)
        engine.start_session()
        assert not first.is_active
        assert first.end_date == clock.now

    def test_end_trims_notes(self, engine):
        """Notes are trimmed; blank notes become None."""
        engine.start_session()
        session = engine.end_session("  great pump  ")
        assert session.notes == "great pump"

        engine.start_session()
        assert engine.end_session("   ").notes is None

    def test_end_without_active_session(self, engine):
        """Ending with nothing active is a no-op returning None."""
        assert engine.end_session("notes") is None

    def test_end_clears_input_and_superset_mode(self, engine, clock):
        """Ending leaves no selection, no input and no super set draft."""
        _log(engine, clock, BENCH, "135", "10")
        engine.enter_superset_mode()
        session = engine.end_session()

        assert session.is_completed
        assert session.end_date == clock.now
        assert engine.active_session is None
        assert engine.selected_exercise is None
        assert engine.weight_input == ""
        assert not engine.superset_mode


# ---------------------------------------------------------------------------
# Exercise selection and the recent ring
# ---------------------------------------------------------------------------

class TestSelectExercise:
    def test_select_starts_session_lazily(self, engine):
        """Selecting with no active session starts one."""
        assert engine.active_session is None
        engine.select_exercise(_ex(engine, BENCH))
        assert engine.active_session is not None
        assert engine.selected_exercise.name == BENCH

    def test_select_updates_last_used(self, engine, clock):
        """Selection stamps last_used_date."""
        bench = _ex(engine, BENCH)
        engine.select_exercise(bench)
        assert bench.last_used_date == clock.now

    def test_new_entries_go_to_front(self, engine):
        """Newly selected exercises are pushed to the front of the ring."""
        engine.select_exercise(_ex(engine, BENCH))
        engine.select_exercise(_ex(engine, SQUAT))
        assert [e.name for e in engine.recent_exercises] == [SQUAT, BENCH]

    def test_reselect_does_not_reorder(self, engine):
        """Selecting an exercise already in the ring leaves its position alone."""
        engine.select_exercise(_ex(engine, BENCH))
        engine.select_exercise(_ex(engine, SQUAT))
        engine.select_exercise(_ex(engine, BENCH))
        assert [e.name for e in engine.recent_exercises] == [SQUAT, BENCH]

    def test_ring_is_bounded(self, engine):
        """The ring holds at most ten exercises, dropping the oldest."""
        names = [e.name for e in engine.exercises()[:12]]
        for name in names:
            engine.select_exercise(_ex(engine, name))

        ring = [e.name for e in engine.recent_exercises]
        assert len(ring) == 10
        assert ring[0] == names[-1]
        assert names[0] not in ring
        assert names[1] not in ring

    def test_select_loads_comparison(self, engine, clock):
        """Selection populates the comparison from the last completed session."""
        _log(engine, clock, BENCH, "135", "10")
        engine.end_session()

        engine.select_exercise(_ex(engine, BENCH))
        assert [e.weight for e in engine.comparison.sets] == [135.0]


# ---------------------------------------------------------------------------
# Set logging and deletion
# ---------------------------------------------------------------------------

class TestLogSet:
    def test_sequential_set_numbers(self, engine, clock):
        """Bench 135Ã10 then 145Ã8 are sets 1 and 2 of the same session."""
        engine.start_session()
        assert _log(engine, clock, BENCH, "135", "10")
        assert _log(engine, clock, BENCH, "145", "8")

        sets = engine.current_exercise_sets()
        assert [(e.set_number, e.weight, e.reps) for e in sets] == [(1, 135.0, 10), (2, 145.0, 8)]
        assert len({e.session_id for e in sets}) == 1

    def test_numbering_is_per_exercise(self, engine, clock):
        """Each exercise counts its own sets."""
        _log(engine, clock, BENCH, "135", "10")
        _log(engine, clock, SQUAT, "185", "5")
        _log(engine, clock, BENCH, "135", "9")
        _log(engine, clock, SQUAT, "185", "5")

        assert _numbers(engine, BENCH) == [1, 2]
        assert _numbers(engine, SQUAT) == [1, 2]

    def test_numbering_restarts_each_session(self, engine, clock):
        """Set numbers are scoped to the session."""
        _log(engine, clock, BENCH, "135", "10")
        engine.end_session()
        _log(engine, clock, BENCH, "135", "10")
        assert [e.set_number for e in engine.current_exercise_sets()] == [1]

    @pytest.mark.parametrize(
        "weight, reps",
        [
            ("abc", "10"),
            ("135", "ten"),
            ("0", "10"),
            ("135", "0"),
            ("-5", "10"),
            ("135", "8.5"),
            ("", ""),
            ("135", "²"),
            ("135", "٣"),
            ("١٣٥", "10"),
            (float("nan"), 5),
            (float("inf"), 5),
            ("9" * 400, "5"),
        ],
    )
    def test_invalid_input_is_rejected(self, engine, weight, reps):
        """Non-numeric, non-ASCII, non-finite or non-positive input logs nothing."""
        engine.select_exercise(_ex(engine, BENCH))
        assert engine.log_set(weight, reps) is False
        assert engine.store.count("sets") == 0

    def test_requires_selected_exercise(self, engine):
        """Logging with no selection fails."""
        engine.start_session()
        assert engine.log_set("135", "10") is False

    def test_invalid_technique_rejected(self, engine):
        engine.select_exercise(_ex(engine, BENCH))
        assert engine.log_set("135", "10", technique="cheat_reps") is False

    def test_flags_are_stored(self, engine):
        """Warm-up, failure and technique flags land on the set."""
        engine.select_exercise(_ex(engine, BENCH))
        engine.log_set("95", "10", is_warm_up=True)
        engine.log_set("185", "6", to_failure=True, technique="drop_set")

        warm, hard = engine.current_exercise_sets()
        assert warm.is_warm_up and not warm.to_failure
        assert hard.to_failure and hard.technique == "drop_set"

    def test_clears_reps_keeps_weight(self, engine):
        """After logging, reps input clears and weight input stays."""
        engine.select_exercise(_ex(engine, BENCH))
        engine.reps_input = "10"
        engine.weight_input = "135"
        assert engine.log_set()
        assert engine.reps_input == ""
        assert engine.weight_input == "135"


class TestDeleteSet:
    def test_delete_renumbers_remaining(self, engine, clock):
        """Deleting set 1 of two makes the survivor set 1."""
        _log(engine, clock, BENCH, "135", "10")
        _log(engine, clock, BENCH, "145", "8")
        first = engine.current_exercise_sets()[0]

        assert engine.delete_set(first)
        remaining = engine.current_exercise_sets()
        assert [(e.set_number, e.weight) for e in remaining] == [(1, 145.0)]

    def test_numbers_stay_dense(self, engine, clock):
        """Any mix of logs and deletes leaves set numbers exactly 1..N."""
        for w in ("100", "110", "120", "130", "140"):
            _log(engine, clock, BENCH, w, "5")
        sets = engine.current_exercise_sets()
        engine.delete_set(sets[1])
        engine.delete_set(sets[3])
        _log(engine, clock, BENCH, "150", "5")

        remaining = engine.current_exercise_sets()
        assert [e.set_number for e in remaining] == [1, 2, 3, 4]
        assert [e.weight for e in remaining] == [100.0, 120.0, 140.0, 150.0]

    def test_other_exercises_untouched(self, engine, clock):
        _log(engine, clock, BENCH, "135", "10")
        _log(engine, clock, SQUAT, "185", "5")
        _log(engine, clock, SQUAT, "195", "5")
        bench = [e for e in engine.all_sets() if e.exercise_name == BENCH][0]
        engine.delete_set(bench)
        assert _numbers(engine, SQUAT) == [1, 2]

    def test_cannot_delete_from_completed_session(self, engine, clock):
        """Only sets of the active session can be deleted."""
        _log(engine, clock, BENCH, "135", "10")
        entry = engine.current_exercise_sets()[0]
        engine.end_session()
        engine.start_session()

        assert engine.delete_set(entry) is False
        assert engine.store.count("sets") == 1

    def test_second_delete_is_a_no_op(self, engine, clock):
        """A set that is already gone cannot be deleted again."""
        _log(engine, clock, BENCH, "135", "10")
        _log(engine, clock, BENCH, "145", "8")
        first = engine.current_exercise_sets()[0]

        assert engine.delete_set(first)
        assert engine.delete_set(first) is False
        assert [(e.set_number, e.weight) for e in engine.current_exercise_sets()] == [(1, 145.0)]


# ---------------------------------------------------------------------------
# PR signalling
# ---------------------------------------------------------------------------

class TestNewPRSignal:
    def test_first_set_is_baseline(self, engine, clock):
        """A first-ever set is never a PR."""
        _log(engine, clock, SQUAT, "225", "5")
        assert engine.new_pr is None

    def test_heavier_set_reports_1rm(self, engine, clock):
        """Squat 225Ã5 then 235Ã5 next session reports estimated 1RM."""
        _log(engine, clock, SQUAT, "225", "5")
        engine.end_session()
        engine.start_session()
        _log(engine, clock, SQUAT, "235", "5")

        assert engine.consume_new_pr() == "estimated_1rm"
        assert engine.new_pr is None

    def test_active_session_sets_are_not_history(self, engine, clock):
        """Sets in the running session do not count as prior history."""
        _log(engine, clock, SQUAT, "225", "5")
        _log(engine, clock, SQUAT, "235", "5")
        assert engine.new_pr is None

    def test_warm_up_never_flags(self, engine, clock):
        _log(engine, clock, SQUAT, "225", "5")
        engine.end_session()
        _log(engine, clock, SQUAT, "315", "5", is_warm_up=True)
        assert engine.new_pr is None


# ---------------------------------------------------------------------------
# Super sets
# ---------------------------------------------------------------------------

class TestSuperSet:
    def _build(self, engine, *names):
        engine.select_exercise(_ex(engine, names[0]))
        engine.enter_superset_mode()
        for name in names[1:]:
            assert engine.toggle_superset_member(_ex(engine, name))

    def test_commit_two_members(self, engine):
        """Two members commit as two sets sharing one group, ordered 0 and 1."""
        self._build(engine, BENCH, INCLINE)
        engine.set_superset_input(_ex(engine, BENCH), "135", "10")
        engine.set_superset_input(_ex(engine, INCLINE), "95", "12")

        assert engine.commit_superset()
        sets = engine.all_sets()
        assert len(sets) == 2
        assert len({e.superset_group_id for e in sets}) == 1
        assert sets[0].superset_group_id is not None
        by_name = {e.exercise_name: e for e in sets}
        assert by_name[BENCH].superset_order == 0
        assert by_name[INCLINE].superset_order == 1
        assert by_name[BENCH].set_number == 1
        assert by_name[INCLINE].set_number == 1

    def test_member_numbers_continue_per_exercise(self, engine, clock):
        """A member's set number counts that exercise's earlier sets."""
        _log(engine, clock, BENCH, "135", "10")
        self._build(engine, BENCH, INCLINE)
        engine.set_superset_input(_ex(engine, BENCH), "135", "8")
        engine.set_superset_input(_ex(engine, INCLINE), "95", "12")
        engine.commit_superset()

        assert _numbers(engine, BENCH) == [1, 2]
        assert _numbers(engine, INCLINE) == [1]

    def test_seeded_with_selection(self, engine):
        """Entering the mode seeds the draft with the selected exercise."""
        engine.select_exercise(_ex(engine, BENCH))
        engine.enter_superset_mode()
        assert engine.superset_index(_ex(engine, BENCH)) == 1
        assert engine.is_in_superset(_ex(engine, BENCH))

    def test_select_toggles_membership_in_mode(self, engine):
        """In building mode select_exercise adds to the draft, not the selection."""
        self._build(engine, BENCH)
        engine.select_exercise(_ex(engine, INCLINE))
        assert engine.selected_exercise.name == BENCH
        assert engine.superset_index(_ex(engine, INCLINE)) == 2

    def test_at_most_five_members(self, engine):
        names = [e.name for e in engine.exercises("chest")[:6]]
        self._build(engine, *names[:5])
        assert engine.toggle_superset_member(_ex(engine, names[5])) is False
        assert len(engine.superset.members) == 5

    def test_last_member_cannot_be_removed(self, engine):
        self._build(engine, BENCH, INCLINE)
        assert engine.toggle_superset_member(_ex(engine, INCLINE)) is False
        assert engine.toggle_superset_member(_ex(engine, BENCH)) is True
        assert [m.name for m in engine.superset.members] == [BENCH]

    def test_toggle_adds_to_ring(self, engine):
        self._build(engine, BENCH, INCLINE)
        assert engine.recent_exercises[0].name == INCLINE

    def test_commit_is_all_or_nothing(self, engine):
        """One invalid member means nothing is logged."""
        self._build(engine, BENCH, INCLINE)
        engine.set_superset_input(_ex(engine, BENCH), "135", "10")
        engine.set_superset_input(_ex(engine, INCLINE), "95", "abc")

        assert engine.commit_superset() is False
        assert engine.store.count("sets") == 0

    def test_missing_input_fails(self, engine):
        self._build(engine, BENCH, INCLINE)
        engine.set_superset_input(_ex(engine, BENCH), "135", "10")
        assert engine.commit_superset() is False

    def test_single_member_logs_regular_set(self, engine):
        """A one-member draft degrades to a regular set."""
        self._build(engine, BENCH)
        engine.set_superset_input(_ex(engine, BENCH), "135", "8")

        assert engine.commit_superset()
        (entry,) = engine.all_sets()
        assert entry.superset_group_id is None
        assert entry.superset_order is None
        assert entry.set_number == 1

    def test_stays_building_after_commit(self, engine):
        """After a round, reps clear and weights stay for the next round."""
        self._build(engine, BENCH, INCLINE)
        engine.set_superset_input(_ex(engine, BENCH), "135", "10")
        engine.set_superset_input(_ex(engine, INCLINE), "95", "12")
        engine.commit_superset()

        assert engine.superset_mode
        assert engine.superset.reps == {BENCH: "", INCLINE: ""}
        assert engine.superset.weights == {BENCH: "135", INCLINE: "95"}

        engine.set_superset_input(_ex(engine, BENCH), reps="9")
        engine.set_superset_input(_ex(engine, INCLINE), reps="11")
        assert engine.commit_superset()
        assert _numbers(engine, BENCH) == [1, 2]
        assert len({e.superset_group_id for e in engine.all_sets()}) == 2

    def test_exit_discards_draft(self, engine):
        self._build(engine, BENCH, INCLINE)
        engine.set_superset_input(_ex(engine, BENCH), "135", "10")
        engine.exit_superset_mode()
        assert not engine.superset_mode
        assert engine.superset.members == []
        assert engine.store.count("sets") == 0

    def test_commit_flags_pr_per_member(self, engine, clock):
        """PR detection runs for each member."""
        _log(engine, clock, INCLINE, "95", "12")
        engine.end_session()

        self._build(engine, BENCH, INCLINE)
        engine.set_superset_input(_ex(engine, BENCH), "135", "10")
        engine.set_superset_input(_ex(engine, INCLINE), "105", "12")
        engine.commit_superset()
        assert engine.consume_new_pr() == "estimated_1rm"

    def test_delete_group_renumbers(self, engine, clock):
        """Deleting a round removes every member and compacts each exercise."""
        _log(engine, clock, BENCH, "135", "10")
        self._build(engine, BENCH, INCLINE)
        engine.set_superset_input(_ex(engine, BENCH), "135", "8")
        engine.set_superset_input(_ex(engine, INCLINE), "95", "12")
        engine.commit_superset()
        clock.advance(minutes=2)
        engine.exit_superset_mode()
        _log(engine, clock, BENCH, "135", "6")
        assert _numbers(engine, BENCH) == [1, 2, 3]

        group_id = next(e.superset_group_id for e in engine.all_sets() if e.superset_group_id)
        assert engine.delete_superset_group(group_id)

        assert [(e.set_number, e.reps) for e in engine.current_exercise_sets()] == [(1, 10), (2, 6)]
        assert _numbers(engine, INCLINE) == []

    def test_delete_unknown_group(self, engine):
        engine.start_session()
        assert engine.delete_superset_group("nope") is False

    def test_display_rows_group_supersets(self, engine, clock):
        """Regular sets get their own row; a round is one row with all members."""
        _log(engine, clock, BENCH, "135", "10")
        self._build(engine, BENCH, INCLINE)
        engine.set_superset_input(_ex(engine, BENCH), "135", "8")
        engine.set_superset_input(_ex(engine, INCLINE), "95", "12")
        engine.commit_superset()

        rows = engine.current_display_rows()
        assert [(r.kind, r.set_number) for r in rows] == [("regular", 1), ("superset", 2)]
        assert [e.exercise_name for e in rows[1].sets] == [BENCH, INCLINE]


# ---------------------------------------------------------------------------
# Custom exercises, profile, body tracking
# ---------------------------------------------------------------------------

class TestCustomExercise:
    def test_create_trims_and_selects(self, engine):
        exercise = engine.create_custom_exercise("  Landmine Press  ", "shoulders")
        assert exercise.name == "Landmine Press"
        assert exercise.is_custom
        assert engine.selected_exercise is exercise

    @pytest.mark.parametrize("name", ["", "   ", BENCH])
    def test_blank_or_duplicate_rejected(self, engine, name):
        assert engine.create_custom_exercise(name, "chest") is None

    def test_unknown_group_rejected(self, engine):
        assert engine.create_custom_exercise("Landmine Press", "forearms") is None


class TestProfileAndBody:
    def test_update_profile(self, engine):
        updated = engine.update_profile(age=30, preferred_unit="kg")
        assert updated.age == 30
        assert engine.profile.preferred_unit == "kg"
        assert engine.store.count("profiles") == 1

    def test_invalid_update_rejected(self, engine):
        assert engine.update_profile(sex="other") is None
        assert engine.profile.sex == "male"

    def test_body_weight_log_and_window(self, engine, clock):
        engine.log_body_weight("182.5")
        clock.advance(days=20)
        engine.log_body_weight(181)
        clock.advance(days=15)
        engine.log_body_weight("180")

        assert [s.weight for s in engine.body_weight_samples()] == [181.0, 180.0]
        assert len(engine.body_weight_samples(days=60)) == 3
        assert engine.latest_body_weight().weight == 180.0

    @pytest.mark.parametrize("value", ["heavy", "0", "-3"])
    def test_invalid_body_weight(self, engine, value):
        assert engine.log_body_weight(value) is None
        assert engine.latest_body_weight() is None

    def test_workout_calories(self, engine, clock):
        """One hour at the default 180 lb profile is 449 kcal."""
        session = engine.start_session()
        clock.advance(hours=1)
        engine.end_session()
        assert engine.workout_calories(session) == 449
        assert engine.weekly_workout_calories() == 449


# ---------------------------------------------------------------------------
# Persistence failures
# ---------------------------------------------------------------------------

class TestPersistenceFailure:
    def test_failed_save_warns_and_keeps_state(self, engine, store, monkeypatch):
        """A failing save is a warning; in-memory state stays authoritative."""
        def _fail():
            raise OSError("disk full")

        monkeypatch.setattr(store, "save", _fail)
        with pytest.warns(PersistenceWarning, match="disk full"):
            session = engine.start_session()

        assert engine.active_session is session
        assert store.count("sessions") == 1
