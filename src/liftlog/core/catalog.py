"""
Exercise catalog.

Fixed mapping of muscle group → exercise names, plus the preset session
templates. Both are loaded from the bundled ``catalog.yaml`` at import
time (merged with ``~/.liftlog/catalog.yaml`` when present). The catalog
is only consulted when seeding a new store and when a template names an
exercise that has not been materialized yet.
"""

from typing import Any

from .engine.config_loader import load_catalog_config
from .models import MUSCLE_GROUPS


def build_catalog(config: dict[str, Any]) -> dict[str, list[str]]:
    """
    Validate the "catalog" section of a loaded config.

    Args:
        config: Merged YAML config

    Returns:
        Muscle group → ordered exercise names, in muscle group display order

    Raises:
        ValueError: On an unknown muscle group or a name listed twice
    """
    raw = config.get("catalog") or {}
    unknown = set(raw) - set(MUSCLE_GROUPS)
    if unknown:
        raise ValueError(f"Unknown muscle groups in catalog: {sorted(unknown)}")

    catalog: dict[str, list[str]] = {}
    seen: set[str] = set()
    for group in MUSCLE_GROUPS:
        names = [str(n).strip() for n in raw.get(group) or []]
        for name in names:
            if name in seen:
                raise ValueError(f"Exercise listed twice in catalog: {name!r}")
            seen.add(name)
        if names:
            catalog[group] = names
    return catalog


def build_preset_templates(config: dict[str, Any]) -> dict[str, list[str]]:
    """Return template name → exercise names from the "templates" section."""
    raw = config.get("templates") or {}
    return {str(name): [str(n) for n in names] for name, names in raw.items()}


def _build() -> tuple[dict[str, list[str]], dict[str, list[str]]]:
    config = load_catalog_config()
    catalog = build_catalog(config)
    if not catalog:
        raise RuntimeError(
            "liftlog: the exercise catalog is empty. "
            "Check src/liftlog/catalog.yaml and ~/.liftlog/catalog.yaml."
        )
    return catalog, build_preset_templates(config)


CATALOG, PRESET_TEMPLATES = _build()


def find_muscle_group(name: str) -> str | None:
    """
    Look up the muscle group of a catalog exercise by exact name.

    Args:
        name: Exercise name

    Returns:
        Muscle group key, or None if the name is not in the catalog
    """
    for group, names in CATALOG.items():
        if name in names:
            return group
    return None


def catalog_size() -> int:
    """Total number of exercises in the catalog."""
    return sum(len(names) for names in CATALOG.values())
