"""
Configuration constants for the workout engine.

All adjustable parameters are centralized here for easy tuning.
"""

from typing import Final

# =============================================================================
# SESSION ENGINE
# =============================================================================

MAX_RECENT_EXERCISES: Final[int] = 10  # Size of the recent-exercises ring
MAX_SUPERSET_MEMBERS: Final[int] = 5  # Max exercises in one super set draft

# =============================================================================
# ESTIMATION FORMULAS
# =============================================================================

EPLEY_DIVISOR: Final[float] = 30.0  # 1RM = w * (1 + r / 30)

MET_RESISTANCE_TRAINING: Final[float] = 5.5  # Moderate-to-vigorous lifting

# Mifflin-St Jeor coefficients
RMR_WEIGHT_COEF: Final[float] = 10.0
RMR_HEIGHT_COEF: Final[float] = 6.25
RMR_AGE_COEF: Final[float] = 5.0
RMR_MALE_OFFSET: Final[float] = 5.0
RMR_FEMALE_OFFSET: Final[float] = -161.0

# =============================================================================
# UNIT CONVERSION
# =============================================================================

LB_TO_KG: Final[float] = 0.453592
INCH_TO_CM: Final[float] = 2.54

# =============================================================================
# ACTIVITY LEVELS (Harris-Benedict activity factors)
# =============================================================================

ACTIVITY_MULTIPLIERS: Final[dict[str, float]] = {
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "active": 1.725,
    "very_active": 1.9,
}

ACTIVITY_DESCRIPTIONS: Final[dict[str, str]] = {
    "sedentary": "Little or no exercise",
    "light": "1-3 days/week",
    "moderate": "3-5 days/week",
    "active": "6-7 days/week",
    "very_active": "Athlete / physical job",
}

# =============================================================================
# ANALYTICS WINDOWS
# =============================================================================

WEEKLY_VOLUME_WEEKS: Final[int] = 8  # ISO weeks shown in the volume trend
BODY_WEIGHT_WINDOW_DAYS: Final[int] = 30  # Default body weight chart window

# =============================================================================
# PROFILE DEFAULTS
# =============================================================================

DEFAULT_AGE: Final[int] = 25
DEFAULT_SEX: Final[str] = "male"
DEFAULT_HEIGHT_INCHES: Final[float] = 70.0  # 5'10"
DEFAULT_BODY_WEIGHT: Final[float] = 180.0
DEFAULT_WAIST_INCHES: Final[float] = 34.0
DEFAULT_UNIT: Final[str] = "lbs"
DEFAULT_ACTIVITY_LEVEL: Final[str] = "moderate"
DEFAULT_REST_SECONDS: Final[int] = 90

# Rest timer presets offered by the presentation layer
REST_DURATION_PRESETS: Final[list[int]] = [30, 60, 90, 120, 180, 300]
