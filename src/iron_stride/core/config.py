"""
Configuration constants for the iron-stride workout-state engine.

All adjustable parameters are centralized here for easy tuning.
"""

from typing import Final

# =============================================================================
# SCHEMA VERSIONS
# =============================================================================

LOCAL_STATE_VERSION: Final[int] = 4  # Version tag of the persisted local blob
USER_DATA_SCHEMA_VERSION: Final[int] = 2  # schemaVersion of exported/synced documents
GENERATOR_VERSION: Final[int] = 2  # First version built by the slot-based generator

STORAGE_NAME: Final[str] = "iron-stride-storage"
ANONYMOUS_IDENTITY: Final[str] = "anonymous"

# =============================================================================
# HISTORY RETENTION
# =============================================================================

MAX_HISTORY_DAYS: Final[int] = 30  # Rolling retention window for completed days

# =============================================================================
# REMOTE SYNC
# =============================================================================

PUSH_DEBOUNCE_SECONDS: Final[float] = 1.0  # Quiet period before a remote push
HTTP_TIMEOUT_SECONDS: Final[float] = 10.0
USER_DATA_API_PATH: Final[str] = "/api/user-data"

# =============================================================================
# PROFILE
# =============================================================================

GOAL_TYPES: Final[tuple[str, ...]] = (
    "strength",
    "hypertrophy",
    "endurance",
    "fat_loss",
    "balanced",
)
UNIT_SYSTEMS: Final[tuple[str, ...]] = ("imperial", "metric")

# =============================================================================
# SET / REP SCHEMES (goal type × tier)
# =============================================================================

TIERS: Final[tuple[str, ...]] = ("compound", "accessory", "core")

SET_SCHEMES: Final[dict[str, dict[str, tuple[int, str]]]] = {
    "strength": {
        "compound": (4, "4-6"),
        "accessory": (3, "6-8"),
        "core": (3, "30-45s"),
    },
    "hypertrophy": {
        "compound": (4, "8-12"),
        "accessory": (3, "10-15"),
        "core": (3, "40-60s"),
    },
    "endurance": {
        "compound": (3, "12-15"),
        "accessory": (3, "15-20"),
        "core": (3, "45-60s"),
    },
    "fat_loss": {
        "compound": (3, "10-12"),
        "accessory": (3, "12-15"),
        "core": (3, "45s"),
    },
    "balanced": {
        "compound": (4, "6-10"),
        "accessory": (3, "10-12"),
        "core": (3, "45s"),
    },
}

# =============================================================================
# CARDIO DAYS
# =============================================================================

# Scales profile.daily_run_target for run/recovery days
RUN_DISTANCE_MULTIPLIERS: Final[dict[str, float]] = {
    "strength": 0.75,
    "hypertrophy": 0.85,
    "endurance": 1.5,
    "fat_loss": 1.25,
    "balanced": 1.0,
}

# Recovery days cover a fraction of the run-day distance
RECOVERY_DISTANCE_FRACTION: Final[float] = 0.5

# =============================================================================
# LEGACY PLAN DETECTION
# =============================================================================

# Titles of the hardcoded 7-day template shipped before the slot generator
LEGACY_DEFAULT_DAY_TITLES: Final[frozenset[str]] = frozenset(
    {
        "Push Day",
        "Leg Day",
        "Pull Day",
        "Shoulders & Abs",
        "Full Body Metabolic",
        "Active Recovery Run",
        "Long Run / Rest",
    }
)

# =============================================================================
# PLAN METRICS
# =============================================================================

MINUTES_PER_LIFT_SET: Final[float] = 2.5
MIN_LIFT_MINUTES: Final[int] = 20
MINUTES_PER_DISTANCE_UNIT: Final[float] = 10.0
MIN_CARDIO_MINUTES: Final[int] = 15

# Calendar weekday (Monday=0) → plan dayNumber
WEEKDAY_TO_DAY_NUMBER: Final[dict[int, int]] = {0: 1, 1: 2, 2: 3, 3: 4, 4: 5}
