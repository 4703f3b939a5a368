"""
Base types for the weekly plan template.

A WeeklyTemplate is an ordered list of day templates.  Lift days are made
of ExerciseSlots; each slot ranks CandidateExercises by preference and
tags them with the equipment they require.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CandidateExercise:
    """One ranked option for an exercise slot."""

    name: str
    requires: tuple[str, ...]  # Equipment tags that must all be available


@dataclass(frozen=True)
class ExerciseSlot:
    """A position in a lift day that needs one exercise picked for it."""

    tier: str                  # "compound" | "accessory" | "core"
    muscle_group: str          # Display label, e.g. "Chest"
    candidates: tuple[CandidateExercise, ...]


@dataclass(frozen=True)
class DayTemplate:
    """
    One day of the weekly template.

    Lift days (kind="lift") use ``slots``; run/recovery days use
    ``description`` and must carry a fixed ``id``.
    """

    title: str
    kind: str                  # "lift" | "run" | "recovery"
    day_type: str | None = None
    id: str | None = None
    description: str = ""
    slots: tuple[ExerciseSlot, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class WeeklyTemplate:
    """Ordered day templates; position + 1 is the plan dayNumber."""

    days: tuple[DayTemplate, ...]
