"""
YAML → WeeklyTemplate loader.

Loads the weekly plan template from the bundled
``src/iron_stride/templates/weekly_plan.yaml``.

User overrides: ``~/.iron-stride/weekly_plan.yaml`` (or the directory named
by IRON_STRIDE_HOME) is deep-merged over the bundled file.  Because
``days`` is a list, an override that sets it replaces the whole week.

Usage (internal, called by registry.py):
    from .loader import load_weekly_template
    template = load_weekly_template()   # WeeklyTemplate or None on failure
"""

from __future__ import annotations

import warnings
from pathlib import Path

import yaml

from ..models import EQUIPMENT_TAGS
from ..settings import deep_merge, get_app_home
from .base import CandidateExercise, DayTemplate, ExerciseSlot, WeeklyTemplate

TEMPLATE_FILENAME = "weekly_plan.yaml"

_TIERS: frozenset[str] = frozenset({"compound", "accessory", "core"})
_KINDS: frozenset[str] = frozenset({"lift", "run", "recovery"})
_DAY_TYPES: frozenset[str] = frozenset({"push", "pull", "legs", "cardio", "full"})


def _candidate_from_dict(d: dict) -> CandidateExercise:
    if "name" not in d:
        raise ValueError("candidate missing 'name'")
    requires = tuple(str(tag) for tag in d.get("requires") or ("bodyweight",))
    unknown = [tag for tag in requires if tag not in EQUIPMENT_TAGS]
    if unknown:
        raise ValueError(f"candidate {d['name']!r} requires unknown equipment {unknown}")
    return CandidateExercise(name=str(d["name"]), requires=requires)


def _slot_from_dict(d: dict) -> ExerciseSlot:
    tier = d.get("tier")
    if tier not in _TIERS:
        raise ValueError(f"slot tier must be one of {sorted(_TIERS)}, got {tier!r}")
    candidates = tuple(_candidate_from_dict(c) for c in d.get("candidates") or [])
    if not candidates:
        raise ValueError("slot has no candidates")
    if set(candidates[-1].requires) - {"bodyweight"}:
        raise ValueError(
            f"last candidate of a slot must be bodyweight-only, got {candidates[-1].name!r}"
        )
    return ExerciseSlot(
        tier=str(tier),
        muscle_group=str(d.get("muscle_group", "")),
        candidates=candidates,
    )


def day_from_dict(d: dict) -> DayTemplate:
    """Convert a raw dict (from YAML) to a DayTemplate.

    Raises ValueError on any structural problem.
    """
    if "title" not in d:
        raise ValueError("day template missing 'title'")
    kind = d.get("kind", "lift")
    if kind not in _KINDS:
        raise ValueError(f"day kind must be one of {sorted(_KINDS)}, got {kind!r}")
    day_type = d.get("day_type")
    if day_type is not None and day_type not in _DAY_TYPES:
        raise ValueError(f"invalid day_type {day_type!r}")

    if kind == "lift":
        slots = tuple(_slot_from_dict(s) for s in d.get("slots") or [])
        if not slots:
            raise ValueError(f"lift day {d['title']!r} has no slots")
        return DayTemplate(
            title=str(d["title"]),
            kind=kind,
            day_type=day_type,
            id=str(d["id"]) if d.get("id") else None,
            slots=slots,
        )

    if not d.get("id"):
        raise ValueError(f"{kind} day {d['title']!r} needs a fixed 'id'")
    return DayTemplate(
        title=str(d["title"]),
        kind=kind,
        day_type=day_type or "cardio",
        id=str(d["id"]),
        description=str(d.get("description", "")),
    )


def template_from_dict(d: dict) -> WeeklyTemplate:
    """Convert the top-level template dict; raises ValueError if invalid."""
    raw_days = d.get("days")
    if not isinstance(raw_days, list) or not raw_days:
        raise ValueError("template needs a non-empty 'days' list")
    days = tuple(day_from_dict(day) for day in raw_days)
    seen: set[str] = set()
    for day in days:
        if day.id is None:
            continue
        if day.id in seen:
            raise ValueError(f"duplicate day id {day.id!r}")
        seen.add(day.id)
    return WeeklyTemplate(days=days)


def _load_yaml_file(path: Path) -> dict:
    """Load a YAML file; return {} on any error."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
            return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return {}


def _get_bundled_template_path() -> Path | None:
    # loader.py lives at src/iron_stride/core/exercises/loader.py
    candidate = Path(__file__).parent.parent.parent / "templates" / TEMPLATE_FILENAME
    return candidate if candidate.is_file() else None


def _get_user_template_path() -> Path | None:
    p = get_app_home() / TEMPLATE_FILENAME
    return p if p.is_file() else None


def load_weekly_template() -> WeeklyTemplate | None:
    """Return the WeeklyTemplate built from the bundled YAML (+ user override).

    A user override that does not produce a valid template is ignored with
    a warning.  Returns None (rather than raising) when the bundled file
    itself is missing or invalid so the registry can report it.
    """
    bundled_path = _get_bundled_template_path()
    if bundled_path is None:
        return None
    raw = _load_yaml_file(bundled_path)
    if not raw:
        return None

    user_path = _get_user_template_path()
    if user_path is not None:
        user_raw = _load_yaml_file(user_path)
        if user_raw:
            try:
                return template_from_dict(deep_merge(raw, user_raw))
            except ValueError as exc:
                warnings.warn(
                    f"iron-stride: ignoring user template '{user_path}' ({exc})",
                    stacklevel=2,
                )

    try:
        return template_from_dict(raw)
    except ValueError as exc:
        warnings.warn(
            f"iron-stride: bundled template is invalid ({exc})",
            stacklevel=2,
        )
        return None
