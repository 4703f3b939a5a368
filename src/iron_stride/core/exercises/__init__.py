"""
Exercise-slot content for the iron-stride plan generator.

The weekly template is loaded from YAML and exposed through the registry.
"""

from .base import CandidateExercise, DayTemplate, ExerciseSlot, WeeklyTemplate
from .registry import WEEKLY_TEMPLATE, get_weekly_template

__all__ = [
    "CandidateExercise",
    "DayTemplate",
    "ExerciseSlot",
    "WeeklyTemplate",
    "WEEKLY_TEMPLATE",
    "get_weekly_template",
]
