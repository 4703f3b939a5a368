"""
Pure plan metrics: set counts, duration estimates and the weekday schedule.

All functions are pure and typed for testability.
"""

import math
from datetime import date
from typing import Sequence

from .config import (
    MIN_CARDIO_MINUTES,
    MIN_LIFT_MINUTES,
    MINUTES_PER_DISTANCE_UNIT,
    MINUTES_PER_LIFT_SET,
    WEEKDAY_TO_DAY_NUMBER,
)
from .models import CardioDay, LiftDay, WorkoutDay


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def planned_sets_for_day(day: WorkoutDay) -> int:
    """Number of sets in a day (0 for cardio days)."""
    if not isinstance(day, LiftDay):
        return 0
    return sum(len(exercise.sets) for exercise in day.exercises)


def completed_sets_for_day(day: WorkoutDay) -> int:
    """Number of completed sets in a day."""
    if not isinstance(day, LiftDay):
        return 0
    return sum(1 for exercise in day.exercises for s in exercise.sets if s.completed)


def weekly_stats(plan: Sequence[WorkoutDay]) -> dict[str, int]:
    """
    Planned and completed set totals over a plan.

    Returns:
        {"planned_sets": int, "completed_sets": int, "completed_days": int}
    """
    return {
        "planned_sets": sum(planned_sets_for_day(day) for day in plan),
        "completed_sets": sum(completed_sets_for_day(day) for day in plan),
        "completed_days": sum(1 for day in plan if day.completed),
    }


def estimate_day_minutes(day: WorkoutDay) -> int:
    """
    Rough session length in minutes.

    Lift days: 2.5 min per set including rest, at least 20.
    Cardio days: 10 min per distance unit (easy pace), at least 15.

    Args:
        day: Plan day

    Returns:
        Estimated minutes
    """
    if isinstance(day, LiftDay):
        return max(MIN_LIFT_MINUTES, _round_half_up(planned_sets_for_day(day) * MINUTES_PER_LIFT_SET))
    if isinstance(day, CardioDay) and day.run_target is not None and day.run_target.distance:
        return max(MIN_CARDIO_MINUTES, _round_half_up(day.run_target.distance * MINUTES_PER_DISTANCE_UNIT))
    return MIN_CARDIO_MINUTES


def scheduled_day_for_date(plan: Sequence[WorkoutDay], on: date) -> WorkoutDay | None:
    """
    Plan day scheduled for a calendar date.

    Monday..Friday map to day numbers 1..5; weekends have no fixed day.
    Falls back to the plan position when no day carries that number.
    """
    day_number = WEEKDAY_TO_DAY_NUMBER.get(on.weekday())
    if day_number is None:
        return None
    for day in plan:
        if day.day_number == day_number:
            return day
    if len(plan) >= day_number:
        return plan[day_number - 1]
    return None
