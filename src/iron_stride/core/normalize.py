"""
Normalization rules applied whenever profile or day data enters the store.

Every function here is idempotent: normalizing already-normalized data
returns an equal value.
"""

from dataclasses import replace

from .models import DayType, GoalType, UserProfile, WorkoutDay


def infer_goal_type(goal: str) -> GoalType:
    """Derive a goal type from the free-text goal by keyword."""
    normalized = goal.lower()
    if "strength" in normalized:
        return "strength"
    if "endurance" in normalized:
        return "endurance"
    if "fat" in normalized or "cut" in normalized:
        return "fat_loss"
    if "muscle" in normalized or "hypertrophy" in normalized:
        return "hypertrophy"
    return "balanced"


def ensure_equipment(equipment: list[str] | None) -> list[str]:
    """
    Return a de-duplicated equipment list that always contains "bodyweight".

    An empty or missing list becomes ["bodyweight"].
    """
    result: list[str] = []
    for item in equipment or []:
        if item not in result:
            result.append(item)
    if "bodyweight" not in result:
        result.append("bodyweight")
    return result


def normalize_profile(profile: UserProfile) -> UserProfile:
    """Fill in goal_type and guarantee the equipment invariant."""
    return replace(
        profile,
        goal_type=profile.goal_type or infer_goal_type(profile.goal),
        equipment=ensure_equipment(profile.equipment),
    )


def infer_day_type(title: str, kind: str) -> DayType:
    """
    Classify a day for display from its title and kind.

    Titles naming push/pull/legs map directly; other non-lift days are
    cardio; everything else is a full-body day.
    """
    normalized = title.lower()
    if "push" in normalized:
        return "push"
    if "pull" in normalized:
        return "pull"
    if "leg" in normalized:
        return "legs"
    if kind != "lift":
        return "cardio"
    return "full"


def normalize_day(day: WorkoutDay) -> WorkoutDay:
    """Backfill day_type when absent."""
    if day.day_type is not None:
        return day
    return replace(day, day_type=infer_day_type(day.title, day.type))
