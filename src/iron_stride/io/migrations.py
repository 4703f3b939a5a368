"""
Schema migrations for persisted iron-stride state.

The persisted blob is ``{"version": int, "state": {...}}``.  Each entry of
MIGRATIONS upgrades the raw ``state`` dict to the version it is keyed by;
steps are pure ``dict -> dict`` functions applied in order for every
version newer than the stored one.  After the chain, finalize_state()
always runs: it normalizes the profile and days, prunes history and makes
sure a plan exists.  Running the whole pipeline on current data changes
nothing.

Version history
---------------
  1  profile merged over defaults; goalType + equipment normalized
  2  slot-based plan generator; legacy hardcoded plans regenerated
  3  dayType classification on every day
  4  exerciseName on logged sets
"""

from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Sequence

from ..core.config import GENERATOR_VERSION, LEGACY_DEFAULT_DAY_TITLES, LOCAL_STATE_VERSION
from ..core.models import AppState, UserProfile, WorkoutDay
from ..core.normalize import ensure_equipment, infer_day_type, infer_goal_type, normalize_day, normalize_profile
from ..core.planner import generate_plan
from ..core.retention import prune_history
from .serializers import dict_to_app_state, dict_to_user_profile, user_profile_to_dict, workout_day_to_dict

MigrationStep = Callable[[dict[str, Any]], dict[str, Any]]

DEFAULT_LOGGED_EXERCISE_NAME = "Exercise"


def looks_like_legacy_default_plan(titles: Sequence[str]) -> bool:
    """True when any day title belongs to the old hardcoded template."""
    return any(title in LEGACY_DEFAULT_DAY_TITLES for title in titles)


def _stored_plan_titles(plan: Any) -> list[str]:
    # Malformed days are left for validation to reject
    if not isinstance(plan, list):
        return []
    return [str(day.get("title", "")) for day in plan if isinstance(day, dict)]


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------

def _merge_profile_defaults(state: dict[str, Any]) -> dict[str, Any]:
    """v1: stored profile over defaults, goalType inferred, bodyweight ensured."""
    stored = state.get("profile")
    profile = user_profile_to_dict(UserProfile())
    if isinstance(stored, dict) and stored:
        # A stored profile without goalType gets it inferred from its own goal
        del profile["goalType"]
        profile.update(stored)
    if not profile.get("goalType"):
        profile["goalType"] = infer_goal_type(str(profile.get("goal", "")))
    equipment = profile.get("equipment")
    profile["equipment"] = ensure_equipment(equipment if isinstance(equipment, list) else None)
    return {**state, "profile": profile}


def _replace_legacy_default_plan(state: dict[str, Any]) -> dict[str, Any]:
    """v2: regenerate a stored plan that is the old hardcoded default."""
    plan = state.get("currentPlan") or []
    if not looks_like_legacy_default_plan(_stored_plan_titles(plan)):
        return state
    profile = normalize_profile(dict_to_user_profile(_merge_profile_defaults(state)["profile"]))
    return {**state, "currentPlan": [workout_day_to_dict(d) for d in generate_plan(profile)]}


def _with_day_type(day: Any) -> Any:
    if not isinstance(day, dict) or day.get("dayType"):
        return day
    return {**day, "dayType": infer_day_type(str(day.get("title", "")), str(day.get("type", "lift")))}


def _map_stored_list(value: Any, fn: Callable[[Any], Any]) -> Any:
    # Non-list values pass through untouched for validation to reject
    if value is None:
        return []
    if not isinstance(value, list):
        return value
    return [fn(item) for item in value]


def _backfill_day_types(state: dict[str, Any]) -> dict[str, Any]:
    """v3: classify every plan and history day."""
    return {
        **state,
        "currentPlan": _map_stored_list(state.get("currentPlan"), _with_day_type),
        "history": _map_stored_list(state.get("history"), _with_day_type),
    }


def _with_logged_name(entry: Any) -> Any:
    if isinstance(entry, dict) and not entry.get("exerciseName"):
        return {**entry, "exerciseName": DEFAULT_LOGGED_EXERCISE_NAME}
    return entry


def _backfill_logged_set_names(state: dict[str, Any]) -> dict[str, Any]:
    """v4: logged sets recorded before exerciseName existed get a placeholder."""
    return {**state, "setLogs": _map_stored_list(state.get("setLogs"), _with_logged_name)}


MIGRATIONS: list[tuple[int, MigrationStep]] = [
    (1, _merge_profile_defaults),
    (2, _replace_legacy_default_plan),
    (3, _backfill_day_types),
    (4, _backfill_logged_set_names),
]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def run_migrations(version: int, state: dict[str, Any]) -> dict[str, Any]:
    """
    Apply every step newer than *version* to the raw state dict.

    Args:
        version: Version tag stored with the blob (0 when unknown)
        state: Raw persisted ``state`` object

    Returns:
        Raw state dict in the LOCAL_STATE_VERSION shape
    """
    for target, step in MIGRATIONS:
        if version < target <= LOCAL_STATE_VERSION:
            state = step(state)
    return state


def finalize_state(state: AppState, now: datetime | None = None) -> AppState:
    """
    Normalize a parsed state: profile invariants, day types, retention
    window, and a generated plan when none is stored.
    """
    profile = normalize_profile(state.profile)
    plan = [normalize_day(d) for d in state.current_plan]
    history = prune_history([normalize_day(d) for d in state.history], now)
    if not plan:
        plan = generate_plan(profile)
    return replace(state, profile=profile, current_plan=plan, history=history)


def migrate_state(
    version: int,
    raw_state: dict[str, Any],
    now: datetime | None = None,
) -> AppState:
    """
    Upgrade a persisted ``(version, state)`` pair to a current AppState.

    Raises:
        ValidationError: If the migrated state still fails validation
    """
    if not isinstance(raw_state, dict):
        raw_state = {}
    migrated = run_migrations(version, raw_state)
    # Profile defaults are re-applied even on current data; the step is idempotent
    migrated = _merge_profile_defaults(migrated)
    return finalize_state(dict_to_app_state(migrated), now)


def resolve_incoming_plan(
    plan: list[WorkoutDay],
    profile: UserProfile,
    schema_version: int | None,
) -> list[WorkoutDay]:
    """
    Plan to keep when adopting an imported or remote document.

    Documents older than the generator whose plan is the legacy default get
    a fresh plan; an empty plan is generated; anything else is kept.
    """
    normalized = [normalize_day(d) for d in plan]
    if (schema_version or 0) < GENERATOR_VERSION and looks_like_legacy_default_plan(
        [day.title for day in normalized]
    ):
        return generate_plan(profile)
    if not normalized:
        return generate_plan(profile)
    return normalized
