"""
Session template helpers.

Templates name their exercises by string so they can list catalog
exercises that do not exist in the store yet. Resolution against the
store lives in the session engine; the functions here are pure.
"""

from typing import Callable, Iterable, Sequence

from .catalog import find_muscle_group
from .models import Exercise, SessionTemplate, SetEntry


def exercise_names_from_sets(session_id: str, sets: Iterable[SetEntry]) -> list[str]:
    """
    Distinct exercise names of a session in first-performed order.

    Args:
        session_id: Session to read
        sets: All sets (other sessions are ignored)

    Returns:
        Exercise names, each once
    """
    own = sorted(
        (e for e in sets if e.session_id == session_id),
        key=lambda e: (e.timestamp, e.set_number),
    )
    names: list[str] = []
    for entry in own:
        if entry.exercise_name not in names:
            names.append(entry.exercise_name)
    return names


def resolve_template(
    template: SessionTemplate,
    lookup: Callable[[str], Exercise | None],
) -> list[tuple[str, Exercise | None, str]]:
    """
    Resolve each template name against existing exercises and the catalog.

    Args:
        template: Template to resolve
        lookup: Returns the stored Exercise with an exact name, or None

    Returns:
        One (name, existing exercise, muscle group) triple per
        resolvable name, in template order. The exercise is None when the
        name comes from the catalog only. Names found nowhere are dropped.
    """
    resolved: list[tuple[str, Exercise | None, str]] = []
    for name in template.exercise_names:
        existing = lookup(name)
        if existing is not None:
            resolved.append((name, existing, existing.muscle_group))
            continue
        group = find_muscle_group(name)
        if group is not None:
            resolved.append((name, None, group))
    return resolved


def clean_names(names: Iterable[str]) -> list[str]:
    """Trim names and drop blanks, keeping order."""
    return [n.strip() for n in names if n and n.strip()]


def sort_templates(templates: Sequence[SessionTemplate]) -> list[SessionTemplate]:
    """Presets first, then alphabetically by name."""
    return sorted(templates, key=lambda t: (not t.is_preset, t.name.lower()))
