"""
Data models for liftlog.

All core dataclasses representing exercises, sessions, logged sets, the
user profile, body weight samples and session templates. Enumerated values
are plain strings checked against the tuples below, so the stored form and
the in-memory form are the same.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from .config import (
    ACTIVITY_MULTIPLIERS,
    DEFAULT_ACTIVITY_LEVEL,
    DEFAULT_AGE,
    DEFAULT_BODY_WEIGHT,
    DEFAULT_HEIGHT_INCHES,
    DEFAULT_REST_SECONDS,
    DEFAULT_SEX,
    DEFAULT_UNIT,
    DEFAULT_WAIST_INCHES,
)

MuscleGroup = Literal[
    "chest",
    "lats",
    "lower_back",
    "traps",
    "neck",
    "shoulders",
    "abs",
    "quads",
    "hamstrings",
    "glutes",
    "calves",
    "biceps",
    "triceps",
    "cardio",
    "stretching",
]
IntensityTechnique = Literal[
    "drop_set", "forced_reps", "rest_pause", "negatives", "partial_reps"
]
Sex = Literal["male", "female"]
WeightUnit = Literal["lbs", "kg"]
ActivityLevel = Literal["sedentary", "light", "moderate", "active", "very_active"]

# Declaration order doubles as display order.
MUSCLE_GROUPS: tuple[str, ...] = (
    "chest",
    "lats",
    "lower_back",
    "traps",
    "neck",
    "shoulders",
    "abs",
    "quads",
    "hamstrings",
    "glutes",
    "calves",
    "biceps",
    "triceps",
    "cardio",
    "stretching",
)

MUSCLE_GROUP_NAMES: dict[str, str] = {
    "chest": "Chest",
    "lats": "Lats",
    "lower_back": "Lower Back",
    "traps": "Traps",
    "neck": "Neck",
    "shoulders": "Shoulders",
    "abs": "Abs",
    "quads": "Quads",
    "hamstrings": "Hamstrings",
    "glutes": "Glutes",
    "calves": "Calves",
    "biceps": "Biceps",
    "triceps": "Triceps",
    "cardio": "Cardio",
    "stretching": "Stretching",
}

INTENSITY_TECHNIQUES: tuple[str, ...] = (
    "drop_set",
    "forced_reps",
    "rest_pause",
    "negatives",
    "partial_reps",
)

TECHNIQUE_LABELS: dict[str, str] = {
    "drop_set": "DS",
    "forced_reps": "FR",
    "rest_pause": "RP",
    "negatives": "NEG",
    "partial_reps": "PR",
}


def new_id() -> str:
    """Return a fresh opaque identifier."""
    return uuid.uuid4().hex


@dataclass
class Exercise:
    """
    A named movement tagged with a muscle group.

    Names are unique across catalog and custom exercises; sets and
    templates refer to an exercise by its name.
    """

    name: str
    muscle_group: MuscleGroup
    is_custom: bool = True
    date_created: datetime = field(default_factory=datetime.now)
    last_used_date: datetime | None = None
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        """Validate exercise data."""
        if not self.name or not self.name.strip():
            raise ValueError("Exercise name must be non-empty")
        if self.muscle_group not in MUSCLE_GROUPS:
            raise ValueError(f"Invalid muscle_group: {self.muscle_group}")

    @property
    def muscle_group_name(self) -> str:
        return MUSCLE_GROUP_NAMES[self.muscle_group]


@dataclass
class Session:
    """
    One workout occurrence.

    ``end_date`` is None while the session is in progress. At most one
    session is active at a time; the engine enforces this, not the model.
    """

    start_date: datetime = field(default_factory=datetime.now)
    end_date: datetime | None = None
    notes: str | None = None
    is_active: bool = True
    id: str = field(default_factory=new_id)

    def duration_seconds(self, now: datetime | None = None) -> float:
        """Elapsed seconds; an unfinished session is measured up to *now*."""
        end = self.end_date or now or datetime.now()
        return (end - self.start_date).total_seconds()

    @property
    def is_completed(self) -> bool:
        return not self.is_active


@dataclass
class SetEntry:
    """
    One logged (weight, reps) performance of one exercise within one session.

    ``set_number`` is 1-based and scoped to the (session, exercise) pair.
    Super set members share ``superset_group_id`` and carry their 0-based
    position in ``superset_order``.
    """

    session_id: str
    exercise_name: str
    weight: float
    reps: int
    set_number: int
    timestamp: datetime = field(default_factory=datetime.now)
    is_warm_up: bool = False
    to_failure: bool = False
    technique: IntensityTechnique | None = None
    superset_group_id: str | None = None
    superset_order: int | None = None
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        """Validate set data."""
        if self.weight <= 0:
            raise ValueError("weight must be positive")
        if self.reps <= 0:
            raise ValueError("reps must be positive")
        if self.set_number < 1:
            raise ValueError("set_number must be at least 1")
        if self.technique is not None and self.technique not in INTENSITY_TECHNIQUES:
            raise ValueError(f"Invalid technique: {self.technique}")
        if (self.superset_group_id is None) != (self.superset_order is None):
            raise ValueError("superset_group_id and superset_order go together")
        if self.superset_order is not None and self.superset_order < 0:
            raise ValueError("superset_order must be non-negative")

    @property
    def volume(self) -> float:
        return self.weight * self.reps

    @property
    def is_superset(self) -> bool:
        return self.superset_group_id is not None


@dataclass
class Profile:
    """
    The single user's personal info, measurements and preferences.

    Height and waist are in inches; ``body_weight`` is in ``preferred_unit``.
    ``use_wheel_input`` is a presentation preference stored alongside.
    """

    name: str = ""
    age: int = DEFAULT_AGE
    sex: Sex = DEFAULT_SEX  # type: ignore[assignment]
    height_inches: float = DEFAULT_HEIGHT_INCHES
    body_weight: float = DEFAULT_BODY_WEIGHT
    waist_inches: float = DEFAULT_WAIST_INCHES
    preferred_unit: WeightUnit = DEFAULT_UNIT  # type: ignore[assignment]
    activity_level: ActivityLevel = DEFAULT_ACTIVITY_LEVEL  # type: ignore[assignment]
    use_wheel_input: bool = True
    default_rest_seconds: int = DEFAULT_REST_SECONDS
    photo: bytes | None = None
    start_date: datetime | None = field(default_factory=datetime.now)
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        """Validate profile data."""
        if self.sex not in ("male", "female"):
            raise ValueError(f"Invalid sex: {self.sex}")
        if self.preferred_unit not in ("lbs", "kg"):
            raise ValueError(f"Invalid preferred_unit: {self.preferred_unit}")
        if self.activity_level not in ACTIVITY_MULTIPLIERS:
            raise ValueError(f"Invalid activity_level: {self.activity_level}")
        if self.age < 0:
            raise ValueError("age must be non-negative")
        if self.height_inches < 0 or self.body_weight < 0 or self.waist_inches < 0:
            raise ValueError("measurements must be non-negative")
        if self.default_rest_seconds < 0:
            raise ValueError("default_rest_seconds must be non-negative")


@dataclass
class BodyWeightSample:
    """A single weigh-in, in the profile's preferred unit."""

    weight: float
    date: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        if self.weight <= 0:
            raise ValueError("weight must be positive")


@dataclass
class SessionTemplate:
    """
    A named, ordered list of exercise names (a "split").

    Exercises are referenced by name so a template can list catalog
    exercises that have not been materialized yet.
    """

    name: str
    exercise_names: list[str] = field(default_factory=list)
    date_created: datetime = field(default_factory=datetime.now)
    is_preset: bool = False
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Template name must be non-empty")

    @property
    def exercise_count(self) -> int:
        return len(self.exercise_names)
