"""
Physiological estimates derived from the user profile.

Resting metabolic rate (Mifflin-St Jeor), total daily energy expenditure
and a MET-based calorie estimate for a resistance-training session.
Results are truncated to whole calories, never rounded.
"""

from .config import (
    ACTIVITY_MULTIPLIERS,
    INCH_TO_CM,
    LB_TO_KG,
    MET_RESISTANCE_TRAINING,
    RMR_AGE_COEF,
    RMR_FEMALE_OFFSET,
    RMR_HEIGHT_COEF,
    RMR_MALE_OFFSET,
    RMR_WEIGHT_COEF,
)
from .models import Profile


def to_kg(weight: float, unit: str) -> float:
    """
    Convert a weight in *unit* ("lbs" or "kg") to kilograms.

    Raises:
        ValueError: If the unit is unknown
    """
    if unit == "kg":
        return weight
    if unit == "lbs":
        return weight * LB_TO_KG
    raise ValueError(f"Unknown weight unit: {unit}")


def inches_to_cm(inches: float) -> float:
    """Convert inches to centimeters."""
    return inches * INCH_TO_CM


def body_weight_kg(profile: Profile) -> float:
    """Profile body weight in kilograms."""
    return to_kg(profile.body_weight, profile.preferred_unit)


def height_cm(profile: Profile) -> float:
    """Profile height in centimeters."""
    return inches_to_cm(profile.height_inches)


def formatted_height(height_inches: float) -> str:
    """Height as feet and inches, e.g. 5'10"."""
    whole = int(height_inches)
    return f"{whole // 12}'{whole % 12}\""


def resting_metabolic_rate(weight_kg: float, height_cm: float, age: int, sex: str) -> int:
    """
    Resting metabolic rate using the Mifflin-St Jeor equation.

    base   = 10 × weight_kg + 6.25 × height_cm − 5 × age
    male   = base + 5
    female = base − 161

    Args:
        weight_kg: Body weight in kg
        height_cm: Height in cm
        age: Age in years
        sex: "male" or "female"

    Returns:
        Calories per day at rest, truncated

    Raises:
        ValueError: If sex is not "male" or "female"
    """
    base = RMR_WEIGHT_COEF * weight_kg + RMR_HEIGHT_COEF * height_cm - RMR_AGE_COEF * age
    if sex == "male":
        return int(base + RMR_MALE_OFFSET)
    if sex == "female":
        return int(base + RMR_FEMALE_OFFSET)
    raise ValueError(f"Invalid sex: {sex}")


def total_daily_energy_expenditure(rmr: int, activity_level: str) -> int:
    """
    TDEE = RMR × activity multiplier, truncated.

    Raises:
        ValueError: If the activity level is unknown
    """
    if activity_level not in ACTIVITY_MULTIPLIERS:
        raise ValueError(f"Invalid activity_level: {activity_level}")
    return int(rmr * ACTIVITY_MULTIPLIERS[activity_level])


def profile_rmr(profile: Profile) -> int:
    """Resting metabolic rate for a stored profile."""
    return resting_metabolic_rate(
        body_weight_kg(profile), height_cm(profile), profile.age, profile.sex
    )


def profile_tdee(profile: Profile) -> int:
    """Total daily energy expenditure for a stored profile."""
    return total_daily_energy_expenditure(profile_rmr(profile), profile.activity_level)


def workout_calories(weight_kg: float, duration_seconds: float) -> int:
    """
    Calories burned during a resistance-training session.

    kcal = MET × body_weight_kg × duration_hours, with MET = 5.5

    Args:
        weight_kg: Body weight in kg
        duration_seconds: Session duration in seconds

    Returns:
        Estimated calories, truncated
    """
    return int(MET_RESISTANCE_TRAINING * weight_kg * (duration_seconds / 3600.0))
