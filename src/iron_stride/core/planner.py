"""
Plan generation for iron-stride.

Generates a deterministic weekly plan from the user's goal type and
equipment.  The week layout comes from the YAML weekly template; set and
rep counts come from a fixed (goal type, tier) table; cardio distances
scale the profile's daily run baseline.

Ids are derived from positions (lift days and exercises) or are fixed
template literals (cardio days), so generating twice for the same profile
yields identical plans.
"""

from .config import RECOVERY_DISTANCE_FRACTION, RUN_DISTANCE_MULTIPLIERS, SET_SCHEMES
from .equipment import build_alternatives, pick_candidate
from .exercises.base import DayTemplate, ExerciseSlot, WeeklyTemplate
from .exercises.registry import get_weekly_template
from .models import (
    CardioDay,
    Exercise,
    ExerciseSet,
    GoalType,
    LiftDay,
    RunTarget,
    UserProfile,
    WorkoutDay,
)
from .normalize import normalize_profile


def get_set_scheme(goal_type: GoalType, tier: str) -> tuple[int, str]:
    """
    Look up (set count, target reps) for a goal type and slot tier.

    Args:
        goal_type: Normalized goal type
        tier: "compound" | "accessory" | "core"

    Returns:
        (sets, target_reps) e.g. (4, "4-6") for strength/compound
    """
    return SET_SCHEMES[goal_type][tier]


def build_sets(count: int, target_reps: str) -> list[ExerciseSet]:
    """Fresh, unlogged sets with ids s-1..s-N."""
    return [ExerciseSet(id=f"s-{i + 1}", target_reps=target_reps) for i in range(count)]


def round_distance(value: float) -> float:
    """Round a distance to one decimal place."""
    return round(value * 10) / 10


def run_distance(profile: UserProfile, kind: str) -> float:
    """
    Target distance for a cardio day.

    daily_run_target × goal multiplier, halved again for recovery days,
    rounded to one decimal.
    """
    goal_type = profile.goal_type or "balanced"
    distance = profile.daily_run_target * RUN_DISTANCE_MULTIPLIERS[goal_type]
    if kind == "recovery":
        distance *= RECOVERY_DISTANCE_FRACTION
    return round_distance(distance)


def _build_exercise(
    day_number: int,
    index: int,
    slot: ExerciseSlot,
    profile: UserProfile,
) -> Exercise:
    choice = pick_candidate(slot, profile.equipment)
    set_count, target_reps = get_set_scheme(profile.goal_type, slot.tier)
    alternatives = build_alternatives(slot, choice)
    return Exercise(
        id=f"d{day_number}-e{index + 1}",
        name=choice.name,
        muscle_group=slot.muscle_group,
        sets=build_sets(set_count, target_reps),
        alternatives=alternatives or None,
    )


def build_day(day_number: int, template: DayTemplate, profile: UserProfile) -> WorkoutDay:
    """
    Build one plan day from its template.

    Args:
        day_number: 1-based position in the week
        template: Day template from the weekly template
        profile: Normalized user profile

    Returns:
        LiftDay or CardioDay
    """
    if template.kind == "lift":
        return LiftDay(
            id=template.id or f"day-{day_number}",
            day_number=day_number,
            title=template.title,
            day_type=template.day_type or "full",
            exercises=[
                _build_exercise(day_number, index, slot, profile)
                for index, slot in enumerate(template.slots)
            ],
        )

    return CardioDay(
        id=template.id or f"day-{day_number}",
        day_number=day_number,
        title=template.title,
        day_type=template.day_type or "cardio",
        kind=template.kind,
        run_target=RunTarget(
            distance=run_distance(profile, template.kind),
            description=template.description,
        ),
    )


def generate_plan(
    profile: UserProfile,
    template: WeeklyTemplate | None = None,
) -> list[WorkoutDay]:
    """
    Generate the weekly plan for a profile.

    Pure and deterministic: the result depends only on the profile's goal
    type, equipment and run baseline, plus the template.

    Args:
        profile: User profile (normalized here if needed)
        template: Weekly template (default: the loaded registry template)

    Returns:
        Ordered list of WorkoutDay, dayNumber 1..N
    """
    if template is None:
        template = get_weekly_template()
    profile = normalize_profile(profile)
    return [
        build_day(day_number, day_template, profile)
        for day_number, day_template in enumerate(template.days, 1)
    ]
