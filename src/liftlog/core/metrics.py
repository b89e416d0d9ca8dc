"""
Pure metric computation functions.

Per-set formulas (volume, estimated one-rep max) and the small display
helpers that turn sets and durations into text. All functions are pure.
"""

from .config import EPLEY_DIVISOR
from .models import TECHNIQUE_LABELS, SetEntry


def set_volume(weight: float, reps: int) -> float:
    """
    Volume of a single set.

    volume = weight × reps

    Args:
        weight: Load lifted
        reps: Reps performed

    Returns:
        Volume in the same unit as weight
    """
    return weight * reps


def epley_1rm(weight: float, reps: int) -> float:
    """
    Estimate 1RM using the Epley formula.

    1RM = weight * (1 + reps/30), except a single rep is its own 1RM.

    Args:
        weight: Load lifted
        reps: Reps performed

    Returns:
        Estimated one-rep max, or 0.0 for a non-positive rep count
    """
    if reps <= 0:
        return 0.0
    if reps == 1:
        return weight
    return weight * (1 + reps / EPLEY_DIVISOR)


def format_weight(weight: float) -> str:
    """Whole weights print without decimals, others with one."""
    if weight == int(weight):
        return f"{weight:.0f}"
    return f"{weight:.1f}"


def format_set(entry: SetEntry) -> str:
    """
    Compact display of a logged set.

    Examples: "185 × 8", "W 135 × 10", "185 × 8 F DS".
    """
    parts: list[str] = []
    if entry.is_warm_up:
        parts.append("W")
    parts.append(f"{format_weight(entry.weight)} × {entry.reps}")
    if entry.to_failure:
        parts.append("F")
    if entry.technique is not None:
        parts.append(TECHNIQUE_LABELS[entry.technique])
    return " ".join(parts)


def format_duration(seconds: float) -> str:
    """Format a duration as "1h 23m" or "45m"."""
    total = int(seconds)
    hours = total // 3600
    minutes = (total % 3600) // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"
