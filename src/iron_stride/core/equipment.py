"""
Equipment-aware exercise selection.

Every candidate exercise in a template slot lists the equipment tags it
requires.  The planner picks the first candidate the user can perform with
their equipment, and offers the remaining candidates as alternatives with a
short reason derived from what the primary pick needs that the alternative
does not.

Selection rule
--------------
  pick = first candidate c with c.requires ⊆ profile.equipment
  fallback = last candidate (always bodyweight-only by template convention)
"""

from __future__ import annotations

import re

from .exercises.base import CandidateExercise, ExerciseSlot
from .models import ExerciseAlternative


# ---------------------------------------------------------------------------
# Equipment catalog
# Each tag: {label, reason}
#   label  → shown when asking the user what they own
#   reason → shown on an alternative when the primary needs this tag
# ---------------------------------------------------------------------------

EQUIPMENT_CATALOG: dict[str, dict[str, str]] = {
    "bodyweight": {"label": "Bodyweight only", "reason": "No equipment"},
    "dumbbell": {"label": "Dumbbells", "reason": "No dumbbells"},
    "barbell": {"label": "Barbell and plates", "reason": "No barbell"},
    "bench": {"label": "Flat / incline bench", "reason": "No bench"},
    "rack": {"label": "Squat rack", "reason": "No rack"},
    "bands": {"label": "Resistance bands", "reason": "No bands"},
    "kettlebell": {"label": "Kettlebell", "reason": "No kettlebell"},
}

# Used when the primary needs nothing the alternative lacks
GENERIC_SWAP_REASON = "Busy gym"


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------

def slugify(value: str) -> str:
    """Lower-case, collapse non-alphanumerics to '-', trim dashes."""
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")


def exercise_id_for(name: str, prefix: str = "ex") -> str:
    """Stable exercise id derived from its name, e.g. 'ex-goblet-squat'."""
    return f"{prefix}-{slugify(name)}"


def is_available(candidate: CandidateExercise, equipment: list[str]) -> bool:
    """True when every tag the candidate requires is in *equipment*."""
    owned = set(equipment)
    return all(tag in owned for tag in candidate.requires)


def pick_candidate(slot: ExerciseSlot, equipment: list[str]) -> CandidateExercise:
    """
    Return the first candidate the equipment allows, else the last one.

    Args:
        slot: Template slot with candidates in preference order
        equipment: Normalized equipment tags of the user

    Returns:
        The selected CandidateExercise
    """
    for candidate in slot.candidates:
        if is_available(candidate, equipment):
            return candidate
    return slot.candidates[-1]


def alternative_reason(primary: CandidateExercise, alternative: CandidateExercise) -> str:
    """
    Explain why *alternative* is offered instead of *primary*.

    The reason names the first tag the primary requires that the
    alternative does not, e.g. "No barbell".
    """
    for tag in primary.requires:
        if tag not in alternative.requires:
            return EQUIPMENT_CATALOG.get(tag, {}).get("reason", GENERIC_SWAP_REASON)
    return GENERIC_SWAP_REASON


def build_alternatives(
    slot: ExerciseSlot,
    primary: CandidateExercise,
) -> list[ExerciseAlternative]:
    """Every other candidate in the slot, annotated with a swap reason."""
    return [
        ExerciseAlternative(
            id=exercise_id_for(candidate.name),
            name=candidate.name,
            reason=alternative_reason(primary, candidate),
            muscle_group=slot.muscle_group,
        )
        for candidate in slot.candidates
        if candidate.name != primary.name
    ]


def describe_equipment(equipment: list[str]) -> str:
    """Human-readable list of equipment labels."""
    return ", ".join(EQUIPMENT_CATALOG.get(tag, {}).get("label", tag) for tag in equipment)
