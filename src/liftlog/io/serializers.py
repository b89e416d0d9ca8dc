"""
JSON serialization for workout data models.

Handles conversion between dataclasses and JSON-compatible dicts, and the
parsing of user-typed weight and rep strings.
"""

import base64
import binascii
import math
import re
from datetime import datetime
from typing import Any, Callable

from ..core.config import ACTIVITY_MULTIPLIERS
from ..core.models import (
    INTENSITY_TECHNIQUES,
    MUSCLE_GROUPS,
    BodyWeightSample,
    Exercise,
    Profile,
    Session,
    SessionTemplate,
    SetEntry,
)


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


def validate_datetime(value: Any, name: str) -> datetime:
    """
    Parse an ISO-8601 timestamp.

    Args:
        value: Stored string
        name: Field name for the error message

    Returns:
        Parsed datetime

    Raises:
        ValidationError: If the value is not an ISO timestamp
    """
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be an ISO timestamp, got {value!r}")
    try:
        return datetime.fromisoformat(value)
    except ValueError as e:
        raise ValidationError(f"Invalid {name}: {value}") from e


def _optional_datetime(value: Any, name: str) -> datetime | None:
    if value is None:
        return None
    return validate_datetime(value, name)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def validate_positive(value: int | float, name: str) -> int | float:
    """
    Validate that a value is positive.

    Args:
        value: Value to validate
        name: Name for error message

    Returns:
        The value if valid

    Raises:
        ValidationError: If value is not positive
    """
    if value <= 0:
        raise ValidationError(f"{name} must be positive, got {value}")
    return value


def validate_choice(value: Any, choices: tuple[str, ...] | dict[str, Any], name: str) -> str:
    """
    Validate an enumerated string field.

    Raises:
        ValidationError: If value is not one of choices
    """
    if value not in choices:
        raise ValidationError(f"Invalid {name}: {value!r}. Must be one of {tuple(choices)}")
    return value


# =============================================================================
# User input
# =============================================================================

_NUMBER_RE = re.compile(r"^\d+(\.\d+)?$|^\.\d+$", re.ASCII)


def parse_weight(text: str | float | int | None) -> float:
    """
    Parse a weight typed by the user.

    Args:
        text: Raw input, e.g. "135" or "102.5"

    Returns:
        Weight as a float

    Raises:
        ValidationError: If the input is empty, non-numeric or not positive
    """
    if text is None:
        raise ValidationError("Weight is required")
    if isinstance(text, (int, float)) and not isinstance(text, bool):
        try:
            value = float(text)
        except OverflowError as e:
            raise ValidationError(f"Invalid weight: {text!r}") from e
    else:
        raw = str(text).strip()
        if not _NUMBER_RE.match(raw):
            raise ValidationError(f"Invalid weight: {text!r}")
        value = float(raw)

    if not math.isfinite(value):
        raise ValidationError(f"Invalid weight: {text!r}")
    return float(validate_positive(value, "weight"))


def parse_reps(text: str | int | None) -> int:
    """
    Parse a rep count typed by the user.

    Args:
        text: Raw input, e.g. "8"

    Returns:
        Reps as an int

    Raises:
        ValidationError: If the input is empty, not a whole number or not positive
    """
    if text is None:
        raise ValidationError("Reps are required")
    if isinstance(text, int) and not isinstance(text, bool):
        return int(validate_positive(text, "reps"))

    raw = str(text).strip()
    if not (raw.isascii() and raw.isdigit()):
        raise ValidationError(f"Invalid reps: {text!r}")
    return int(validate_positive(int(raw), "reps"))


# =============================================================================
# Entities
# =============================================================================


def exercise_to_dict(exercise: Exercise) -> dict[str, Any]:
    """Convert Exercise to JSON-compatible dict."""
    return {
        "id": exercise.id,
        "name": exercise.name,
        "muscle_group": exercise.muscle_group,
        "is_custom": exercise.is_custom,
        "date_created": _iso(exercise.date_created),
        "last_used_date": _iso(exercise.last_used_date),
    }


def dict_to_exercise(data: dict[str, Any]) -> Exercise:
    """
    Convert dict to Exercise.

    Raises:
        ValidationError: If data is invalid
    """
    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(f"Invalid exercise name: {name!r}")
    validate_choice(data.get("muscle_group"), MUSCLE_GROUPS, "muscle_group")

    return Exercise(
        id=str(data["id"]),
        name=name,
        muscle_group=data["muscle_group"],
        is_custom=bool(data.get("is_custom", True)),
        date_created=validate_datetime(data["date_created"], "date_created"),
        last_used_date=_optional_datetime(data.get("last_used_date"), "last_used_date"),
    )


def session_to_dict(session: Session) -> dict[str, Any]:
    """Convert Session to JSON-compatible dict."""
    return {
        "id": session.id,
        "start_date": _iso(session.start_date),
        "end_date": _iso(session.end_date),
        "notes": session.notes,
        "is_active": session.is_active,
    }


def dict_to_session(data: dict[str, Any]) -> Session:
    """
    Convert dict to Session.

    Raises:
        ValidationError: If data is invalid
    """
    return Session(
        id=str(data["id"]),
        start_date=validate_datetime(data["start_date"], "start_date"),
        end_date=_optional_datetime(data.get("end_date"), "end_date"),
        notes=data.get("notes"),
        is_active=bool(data.get("is_active", False)),
    )


def set_entry_to_dict(entry: SetEntry) -> dict[str, Any]:
    """
    Convert SetEntry to JSON-compatible dict.

    Optional flags are written only when set, to keep the document compact.
    """
    d: dict[str, Any] = {
        "id": entry.id,
        "session_id": entry.session_id,
        "exercise_name": entry.exercise_name,
        "weight": entry.weight,
        "reps": entry.reps,
        "set_number": entry.set_number,
        "timestamp": _iso(entry.timestamp),
    }
    if entry.is_warm_up:
        d["is_warm_up"] = True
    if entry.to_failure:
        d["to_failure"] = True
    if entry.technique is not None:
        d["technique"] = entry.technique
    if entry.superset_group_id is not None:
        d["superset_group_id"] = entry.superset_group_id
        d["superset_order"] = entry.superset_order
    return d


def dict_to_set_entry(data: dict[str, Any]) -> SetEntry:
    """
    Convert dict to SetEntry.

    Raises:
        ValidationError: If data is invalid
    """
    validate_positive(data.get("weight", 0), "weight")
    validate_positive(data.get("reps", 0), "reps")
    validate_positive(data.get("set_number", 0), "set_number")
    technique = data.get("technique")
    if technique is not None:
        validate_choice(technique, INTENSITY_TECHNIQUES, "technique")

    group_id = data.get("superset_group_id")
    order = data.get("superset_order")
    if (group_id is None) != (order is None):
        raise ValidationError("superset_group_id and superset_order must both be set")

    return SetEntry(
        id=str(data["id"]),
        session_id=str(data["session_id"]),
        exercise_name=str(data["exercise_name"]),
        weight=float(data["weight"]),
        reps=int(data["reps"]),
        set_number=int(data["set_number"]),
        timestamp=validate_datetime(data["timestamp"], "timestamp"),
        is_warm_up=bool(data.get("is_warm_up", False)),
        to_failure=bool(data.get("to_failure", False)),
        technique=technique,
        superset_group_id=group_id,
        superset_order=int(order) if order is not None else None,
    )


def profile_to_dict(profile: Profile) -> dict[str, Any]:
    """
    Convert Profile to JSON-compatible dict.

    The photo blob is stored base64-encoded.
    """
    return {
        "id": profile.id,
        "name": profile.name,
        "age": profile.age,
        "sex": profile.sex,
        "height_inches": profile.height_inches,
        "body_weight": profile.body_weight,
        "waist_inches": profile.waist_inches,
        "preferred_unit": profile.preferred_unit,
        "activity_level": profile.activity_level,
        "use_wheel_input": profile.use_wheel_input,
        "default_rest_seconds": profile.default_rest_seconds,
        "photo": base64.b64encode(profile.photo).decode("ascii") if profile.photo else None,
        "start_date": _iso(profile.start_date),
    }


def dict_to_profile(data: dict[str, Any]) -> Profile:
    """
    Convert dict to Profile.

    Missing fields fall back to the model defaults.

    Raises:
        ValidationError: If data is invalid
    """
    defaults = Profile()
    validate_choice(data.get("sex", defaults.sex), ("male", "female"), "sex")
    validate_choice(data.get("preferred_unit", defaults.preferred_unit), ("lbs", "kg"), "preferred_unit")
    validate_choice(
        data.get("activity_level", defaults.activity_level), ACTIVITY_MULTIPLIERS, "activity_level"
    )

    photo = None
    if data.get("photo"):
        try:
            photo = base64.b64decode(data["photo"], validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValidationError("Invalid profile photo encoding") from e

    try:
        return Profile(
            id=str(data.get("id", defaults.id)),
            name=str(data.get("name", "")),
            age=int(data.get("age", defaults.age)),
            sex=data.get("sex", defaults.sex),
            height_inches=float(data.get("height_inches", defaults.height_inches)),
            body_weight=float(data.get("body_weight", defaults.body_weight)),
            waist_inches=float(data.get("waist_inches", defaults.waist_inches)),
            preferred_unit=data.get("preferred_unit", defaults.preferred_unit),
            activity_level=data.get("activity_level", defaults.activity_level),
            use_wheel_input=bool(data.get("use_wheel_input", True)),
            default_rest_seconds=int(data.get("default_rest_seconds", defaults.default_rest_seconds)),
            photo=photo,
            start_date=_optional_datetime(data.get("start_date"), "start_date"),
        )
    except ValueError as e:
        raise ValidationError(str(e)) from e


def body_weight_to_dict(sample: BodyWeightSample) -> dict[str, Any]:
    """Convert BodyWeightSample to JSON-compatible dict."""
    return {"id": sample.id, "weight": sample.weight, "date": _iso(sample.date)}


def dict_to_body_weight(data: dict[str, Any]) -> BodyWeightSample:
    """
    Convert dict to BodyWeightSample.

    Raises:
        ValidationError: If data is invalid
    """
    validate_positive(data.get("weight", 0), "weight")
    return BodyWeightSample(
        id=str(data["id"]),
        weight=float(data["weight"]),
        date=validate_datetime(data["date"], "date"),
    )


def template_to_dict(template: SessionTemplate) -> dict[str, Any]:
    """Convert SessionTemplate to JSON-compatible dict."""
    return {
        "id": template.id,
        "name": template.name,
        "exercise_names": list(template.exercise_names),
        "date_created": _iso(template.date_created),
        "is_preset": template.is_preset,
    }


def dict_to_template(data: dict[str, Any]) -> SessionTemplate:
    """
    Convert dict to SessionTemplate.

    Raises:
        ValidationError: If data is invalid
    """
    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(f"Invalid template name: {name!r}")
    names = data.get("exercise_names", [])
    if not isinstance(names, list):
        raise ValidationError("exercise_names must be a list")

    return SessionTemplate(
        id=str(data["id"]),
        name=name,
        exercise_names=[str(n) for n in names],
        date_created=validate_datetime(data["date_created"], "date_created"),
        is_preset=bool(data.get("is_preset", False)),
    )


# Document section → (entity type, encoder, decoder)
ENTITY_CODECS: dict[str, tuple[type, Callable[[Any], dict[str, Any]], Callable[[dict[str, Any]], Any]]] = {
    "exercises": (Exercise, exercise_to_dict, dict_to_exercise),
    "sessions": (Session, session_to_dict, dict_to_session),
    "sets": (SetEntry, set_entry_to_dict, dict_to_set_entry),
    "profiles": (Profile, profile_to_dict, dict_to_profile),
    "body_weights": (BodyWeightSample, body_weight_to_dict, dict_to_body_weight),
    "templates": (SessionTemplate, template_to_dict, dict_to_template),
}


def kind_of(entity: Any) -> str:
    """
    Document section name for an entity instance.

    Raises:
        TypeError: If the object is not a stored entity type
    """
    for kind, (cls, _, _) in ENTITY_CODECS.items():
        if isinstance(entity, cls):
            return kind
    raise TypeError(f"Not a storable entity: {type(entity).__name__}")
