"""
Progression lookups over completed history and the set audit log.

Used to suggest a starting weight: the best set of last calendar week, or
failing that the weight most recently quick-logged for the exercise.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Sequence

from .models import LiftDay, LoggedSet, WorkoutDay
from .retention import parse_timestamp, utc_now


@dataclass(frozen=True)
class ExerciseWeekBest:
    """Heaviest completed set of an exercise within one week."""

    weight: float
    reps: int | None
    date: str


def parse_target_reps(value: str | None) -> int | None:
    """First integer in a free-form target ("8-12" → 8, "45s" → 45)."""
    if not value:
        return None
    match = re.search(r"\d+", value)
    return int(match.group(0)) if match else None


def _rep_rank(reps: int | None) -> int:
    return reps if reps is not None else -1


def previous_week_window(week_starts_on: int = 1, now: datetime | None = None) -> tuple[datetime, datetime]:
    """
    Start (inclusive) and end (exclusive) of last calendar week, in UTC.

    Args:
        week_starts_on: 0=Sunday .. 6=Saturday; out-of-range values are clamped
        now: Reference time (default: current UTC time)
    """
    if now is None:
        now = utc_now()
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)
    week_starts_on = min(6, max(0, week_starts_on))

    sunday_based = (now.weekday() + 1) % 7
    days_back = (sunday_based - week_starts_on) % 7
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    current_start = midnight - timedelta(days=days_back)
    return current_start - timedelta(weeks=1), current_start


def last_week_best_for_exercise(
    history: Sequence[WorkoutDay],
    exercise_name: str,
    week_starts_on: int = 1,
    now: datetime | None = None,
) -> ExerciseWeekBest | None:
    """
    Heaviest weighted, completed set of *exercise_name* last week.

    Equal weights are broken by reps; a set without actual reps counts its
    target's first number.  Days completed outside the window, or with an
    unparsable timestamp, are ignored.

    Returns:
        ExerciseWeekBest or None when nothing qualifies
    """
    if not exercise_name:
        return None
    start, end = previous_week_window(week_starts_on, now)

    best: ExerciseWeekBest | None = None
    for day in history:
        if not isinstance(day, LiftDay):
            continue
        completed_at = parse_timestamp(day.date_completed)
        if completed_at is None or not start <= completed_at < end:
            continue
        exercise = next((e for e in day.exercises if e.name == exercise_name), None)
        if exercise is None:
            continue

        for s in exercise.sets:
            if not s.completed or s.weight is None:
                continue
            reps = s.actual_reps if s.actual_reps is not None else parse_target_reps(s.target_reps)
            if best is None or (s.weight, _rep_rank(reps)) > (best.weight, _rep_rank(best.reps)):
                best = ExerciseWeekBest(weight=s.weight, reps=reps, date=day.date_completed)
    return best


def last_logged_weight(set_logs: Sequence[LoggedSet], exercise_name: str) -> float | None:
    """Weight of the newest quick-logged set for an exercise, if any had one."""
    for entry in sorted(set_logs, key=lambda log: log.timestamp, reverse=True):
        if entry.exercise_name == exercise_name and entry.weight is not None:
            return entry.weight
    return None
