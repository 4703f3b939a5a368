"""
JSON serialization for iron-stride data models.

Handles conversion between dataclasses and the JSON-compatible dicts used
by the local state blob, the remote user-data document and the
export/import file.  Wire names are camelCase; optional fields are omitted
when unset.
"""

import json
import math
from typing import Any

from ..core.models import (
    CARDIO_KINDS,
    DAY_TYPES,
    EQUIPMENT_TAGS,
    AppState,
    CardioDay,
    Exercise,
    ExerciseAlternative,
    ExerciseSet,
    LiftDay,
    LoggedSet,
    PrimaryExercise,
    RunActual,
    RunTarget,
    UserData,
    UserProfile,
    WorkoutDay,
)


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


# ---------------------------------------------------------------------------
# Field validators
# ---------------------------------------------------------------------------

def _object(data: Any, where: str) -> dict:
    if not isinstance(data, dict):
        raise ValidationError(f"{where} must be an object, got {type(data).__name__}")
    return data


def _require(data: Any, key: str, where: str) -> Any:
    if not isinstance(data, dict):
        raise ValidationError(f"{where} must be an object, got {type(data).__name__}")
    if key not in data or data[key] is None:
        raise ValidationError(f"{where}.{key} is required")
    return data[key]


def validate_str(value: Any, name: str) -> str:
    """
    Validate that a value is a string.

    Raises:
        ValidationError: If value is not a str
    """
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be a string, got {value!r}")
    return value


def validate_number(value: Any, name: str) -> float:
    """
    Validate that a value is a finite real number (bools, NaN and infinities
    rejected).

    Raises:
        ValidationError: If value is not a finite int or float
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ValidationError(f"{name} must be finite, got {value!r}")
    return value


def validate_int(value: Any, name: str) -> int:
    """
    Validate that a value is a whole number; 3.0 is accepted, 2.5 is not.

    Raises:
        ValidationError: If value is not a finite integral number
    """
    number = validate_number(value, name)
    if isinstance(number, float) and not number.is_integer():
        raise ValidationError(f"{name} must be a whole number, got {value!r}")
    return int(number)


def validate_bool(value: Any, name: str) -> bool:
    """
    Validate that a value is a boolean.

    Raises:
        ValidationError: If value is not a bool
    """
    if not isinstance(value, bool):
        raise ValidationError(f"{name} must be a boolean, got {value!r}")
    return value


def validate_choice(value: Any, choices: tuple[str, ...], name: str) -> str:
    """
    Validate that a value is one of the allowed strings.

    Raises:
        ValidationError: If value is not in choices
    """
    if value not in choices:
        raise ValidationError(f"Invalid {name}: {value!r}. Must be one of {choices}")
    return value


def _optional_str(data: dict, key: str, where: str) -> str | None:
    value = data.get(key)
    return None if value is None else validate_str(value, f"{where}.{key}")


def _optional_number(data: dict, key: str, where: str) -> float | None:
    value = data.get(key)
    return None if value is None else validate_number(value, f"{where}.{key}")


def _optional_int(data: dict, key: str, where: str) -> int | None:
    value = data.get(key)
    return None if value is None else validate_int(value, f"{where}.{key}")


def _list(data: dict, key: str, where: str, required: bool = True) -> list:
    value = data.get(key)
    if value is None:
        if required:
            raise ValidationError(f"{where}.{key} is required")
        return []
    if not isinstance(value, list):
        raise ValidationError(f"{where}.{key} must be a list")
    return value


def _drop_none(d: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in d.items() if v is not None}


def _build(cls, where: str, **kwargs):
    """Construct a dataclass, turning its __post_init__ errors into ValidationError."""
    try:
        return cls(**kwargs)
    except ValueError as e:
        raise ValidationError(f"{where}: {e}") from e


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------

def user_profile_to_dict(profile: UserProfile) -> dict[str, Any]:
    """
    Convert UserProfile to JSON-compatible dict.

    Args:
        profile: UserProfile to convert

    Returns:
        Dict representation
    """
    return _drop_none(
        {
            "name": profile.name,
            "height": profile.height,
            "weight": profile.weight,
            "goal": profile.goal,
            "goalType": profile.goal_type,
            "units": profile.units,
            "dailyRunTarget": profile.daily_run_target,
            "nutritionTarget": profile.nutrition_target,
            "onboardingCompleted": profile.onboarding_completed,
            "startOfWeek": profile.start_of_week,
            "equipment": list(profile.equipment),
        }
    )


def dict_to_user_profile(data: dict[str, Any]) -> UserProfile:
    """
    Convert dict to UserProfile.

    ``goalType`` may be absent (left as None for normalization to infer);
    ``equipment`` defaults to ["bodyweight"].

    Raises:
        ValidationError: If data is invalid
    """
    where = "profile"
    _object(data, where)
    goal_type = data.get("goalType")
    if goal_type is not None:
        validate_choice(goal_type, ("strength", "hypertrophy", "endurance", "fat_loss", "balanced"), "goalType")

    equipment = _list(data, "equipment", where, required=False)
    for tag in equipment:
        validate_choice(tag, EQUIPMENT_TAGS, "equipment")

    start_of_week = validate_int(_require(data, "startOfWeek", where), "startOfWeek")

    return _build(
        UserProfile,
        where,
        name=validate_str(_require(data, "name", where), "name"),
        height=float(validate_number(_require(data, "height", where), "height")),
        weight=float(validate_number(_require(data, "weight", where), "weight")),
        goal=validate_str(_require(data, "goal", where), "goal"),
        goal_type=goal_type,
        units=validate_choice(_require(data, "units", where), ("imperial", "metric"), "units"),
        daily_run_target=float(validate_number(_require(data, "dailyRunTarget", where), "dailyRunTarget")),
        nutrition_target=validate_str(_require(data, "nutritionTarget", where), "nutritionTarget"),
        onboarding_completed=validate_bool(_require(data, "onboardingCompleted", where), "onboardingCompleted"),
        start_of_week=start_of_week,
        equipment=list(equipment) if equipment else ["bodyweight"],
    )


# ---------------------------------------------------------------------------
# Sets and exercises
# ---------------------------------------------------------------------------

def exercise_set_to_dict(s: ExerciseSet) -> dict[str, Any]:
    """Convert ExerciseSet to dict (actualReps/weight kept as explicit nulls)."""
    return {
        "id": s.id,
        "targetReps": s.target_reps,
        "actualReps": s.actual_reps,
        "weight": s.weight,
        "completed": s.completed,
        "perfectForm": s.perfect_form,
    }


def dict_to_exercise_set(data: dict[str, Any]) -> ExerciseSet:
    """
    Convert dict to ExerciseSet.

    Raises:
        ValidationError: If data is invalid
    """
    where = "set"
    _object(data, where)
    actual = data.get("actualReps")
    weight = data.get("weight")
    if actual is not None:
        actual = validate_int(actual, "actualReps")
    if weight is not None:
        validate_number(weight, "weight")
    return _build(
        ExerciseSet,
        where,
        id=validate_str(_require(data, "id", where), "set.id"),
        target_reps=validate_str(_require(data, "targetReps", where), "targetReps"),
        actual_reps=actual,
        weight=float(weight) if weight is not None else None,
        completed=validate_bool(_require(data, "completed", where), "completed"),
        perfect_form=validate_bool(_require(data, "perfectForm", where), "perfectForm"),
    )


def _alternative_to_dict(alt: ExerciseAlternative) -> dict[str, Any]:
    return _drop_none(
        {"id": alt.id, "name": alt.name, "reason": alt.reason, "muscleGroup": alt.muscle_group}
    )


def _dict_to_alternative(data: dict[str, Any]) -> ExerciseAlternative:
    where = "alternative"
    _object(data, where)
    return ExerciseAlternative(
        id=validate_str(_require(data, "id", where), "alternative.id"),
        name=validate_str(_require(data, "name", where), "alternative.name"),
        reason=_optional_str(data, "reason", where),
        muscle_group=_optional_str(data, "muscleGroup", where),
    )


def exercise_to_dict(exercise: Exercise) -> dict[str, Any]:
    """
    Convert Exercise to JSON-compatible dict.

    Args:
        exercise: Exercise to convert

    Returns:
        Dict representation
    """
    primary = None
    if exercise.primary is not None:
        primary = _drop_none(
            {
                "id": exercise.primary.id,
                "name": exercise.primary.name,
                "muscleGroup": exercise.primary.muscle_group,
            }
        )
    return _drop_none(
        {
            "id": exercise.id,
            "name": exercise.name,
            "muscleGroup": exercise.muscle_group,
            "sets": [exercise_set_to_dict(s) for s in exercise.sets],
            "alternatives": (
                [_alternative_to_dict(a) for a in exercise.alternatives]
                if exercise.alternatives is not None
                else None
            ),
            "primary": primary,
            "swapReason": exercise.swap_reason,
            "notes": exercise.notes,
            "restTimerSeconds": exercise.rest_timer_seconds,
            "videoUrl": exercise.video_url,
        }
    )


def dict_to_exercise(data: dict[str, Any]) -> Exercise:
    """
    Convert dict to Exercise.

    Raises:
        ValidationError: If data is invalid
    """
    where = "exercise"
    _object(data, where)
    raw_alternatives = data.get("alternatives")
    if raw_alternatives is not None and not isinstance(raw_alternatives, list):
        raise ValidationError("exercise.alternatives must be a list")

    primary = None
    raw_primary = data.get("primary")
    if raw_primary is not None:
        primary = PrimaryExercise(
            id=validate_str(_require(raw_primary, "id", "primary"), "primary.id"),
            name=validate_str(_require(raw_primary, "name", "primary"), "primary.name"),
            muscle_group=_optional_str(raw_primary, "muscleGroup", "primary"),
        )

    rest = _optional_int(data, "restTimerSeconds", where)
    return Exercise(
        id=validate_str(_require(data, "id", where), "exercise.id"),
        name=validate_str(_require(data, "name", where), "exercise.name"),
        muscle_group=_optional_str(data, "muscleGroup", where),
        sets=[dict_to_exercise_set(s) for s in _list(data, "sets", where)],
        alternatives=(
            [_dict_to_alternative(a) for a in raw_alternatives]
            if raw_alternatives is not None
            else None
        ),
        primary=primary,
        swap_reason=_optional_str(data, "swapReason", where),
        notes=_optional_str(data, "notes", where),
        rest_timer_seconds=rest,
        video_url=_optional_str(data, "videoUrl", where),
    )


# ---------------------------------------------------------------------------
# Workout days
# ---------------------------------------------------------------------------

def workout_day_to_dict(day: WorkoutDay) -> dict[str, Any]:
    """
    Convert a LiftDay or CardioDay to the flat wire shape.

    Cardio days are written with an empty exercise list; lift days never
    carry a runTarget.
    """
    d: dict[str, Any] = {
        "id": day.id,
        "dayNumber": day.day_number,
        "title": day.title,
        "type": day.type,
        "dayType": day.day_type,
        "exercises": [],
        "completed": day.completed,
        "dateCompleted": day.date_completed,
        "notes": day.notes,
        "calvesStretched": day.calves_stretched,
    }
    if isinstance(day, LiftDay):
        d["exercises"] = [exercise_to_dict(e) for e in day.exercises]
    elif day.run_target is not None:
        d["runTarget"] = {"distance": day.run_target.distance, "description": day.run_target.description}
    if day.run_actual is not None:
        d["runActual"] = {"distance": day.run_actual.distance, "timeSeconds": day.run_actual.time_seconds}
    return _drop_none(d)


def dict_to_workout_day(data: dict[str, Any]) -> WorkoutDay:
    """
    Convert a wire-shape day dict to LiftDay or CardioDay by its ``type``.

    A run/recovery day's exercise list is not kept; a lift day's runTarget
    is not kept.

    Raises:
        ValidationError: If data is invalid
    """
    where = "day"
    _object(data, where)
    kind = validate_choice(_require(data, "type", where), ("lift",) + CARDIO_KINDS, "day type")
    day_type = data.get("dayType")
    if day_type is not None:
        validate_choice(day_type, DAY_TYPES, "dayType")

    run_actual = None
    raw_actual = data.get("runActual")
    if raw_actual is not None:
        run_actual = _build(
            RunActual,
            "runActual",
            distance=float(validate_number(_require(raw_actual, "distance", "runActual"), "runActual.distance")),
            time_seconds=float(
                validate_number(_require(raw_actual, "timeSeconds", "runActual"), "runActual.timeSeconds")
            ),
        )

    calves = data.get("calvesStretched")
    common = dict(
        id=validate_str(_require(data, "id", where), "day.id"),
        day_number=validate_int(_require(data, "dayNumber", where), "dayNumber"),
        title=validate_str(_require(data, "title", where), "title"),
        day_type=day_type,
        completed=validate_bool(_require(data, "completed", where), "completed"),
        date_completed=_optional_str(data, "dateCompleted", where),
        notes=_optional_str(data, "notes", where),
        run_actual=run_actual,
        calves_stretched=validate_bool(calves, "calvesStretched") if calves is not None else None,
    )
    exercises = [dict_to_exercise(e) for e in _list(data, "exercises", where)]

    if kind == "lift":
        return _build(LiftDay, where, exercises=exercises, **common)

    run_target = None
    raw_target = data.get("runTarget")
    if raw_target is not None:
        run_target = RunTarget(
            distance=float(validate_number(_require(raw_target, "distance", "runTarget"), "runTarget.distance")),
            description=validate_str(_require(raw_target, "description", "runTarget"), "runTarget.description"),
        )
    return _build(CardioDay, where, kind=kind, run_target=run_target, **common)


def _days(data: dict, key: str, where: str, required: bool = True) -> list[WorkoutDay]:
    return [dict_to_workout_day(d) for d in _list(data, key, where, required)]


# ---------------------------------------------------------------------------
# Logged sets
# ---------------------------------------------------------------------------

def logged_set_to_dict(log: LoggedSet) -> dict[str, Any]:
    """Convert LoggedSet to dict."""
    return {
        "id": log.id,
        "dayId": log.day_id,
        "exerciseId": log.exercise_id,
        "exerciseName": log.exercise_name,
        "weight": log.weight,
        "reps": log.reps,
        "timestamp": log.timestamp,
    }


def dict_to_logged_set(data: dict[str, Any]) -> LoggedSet:
    """
    Convert dict to LoggedSet.

    Raises:
        ValidationError: If data is invalid
    """
    where = "setLog"
    _object(data, where)
    weight = _optional_number(data, "weight", where)
    reps = _optional_int(data, "reps", where)
    return LoggedSet(
        id=validate_str(_require(data, "id", where), "setLog.id"),
        day_id=validate_str(_require(data, "dayId", where), "dayId"),
        exercise_id=validate_str(_require(data, "exerciseId", where), "exerciseId"),
        exercise_name=validate_str(_require(data, "exerciseName", where), "exerciseName"),
        weight=float(weight) if weight is not None else None,
        reps=reps,
        timestamp=validate_int(_require(data, "timestamp", where), "timestamp"),
    )


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------

def user_data_to_dict(data: UserData) -> dict[str, Any]:
    """
    Convert UserData to the document shape shared by export and sync.

    Args:
        data: UserData to convert

    Returns:
        Dict representation
    """
    return _drop_none(
        {
            "schemaVersion": data.schema_version,
            "profile": user_profile_to_dict(data.profile),
            "history": [workout_day_to_dict(d) for d in data.history],
            "currentPlan": [workout_day_to_dict(d) for d in data.current_plan],
            "updatedAt": data.updated_at,
        }
    )


def dict_to_user_data(data: Any) -> UserData:
    """
    Validate and convert a user-data document.

    Raises:
        ValidationError: If data is invalid
    """
    where = "userData"
    if not isinstance(data, dict):
        raise ValidationError("user data must be a JSON object")
    schema_version = _optional_int(data, "schemaVersion", where)
    updated_at = _optional_int(data, "updatedAt", where)
    return UserData(
        profile=dict_to_user_profile(_require(data, "profile", where)),
        history=_days(data, "history", where),
        current_plan=_days(data, "currentPlan", where),
        schema_version=schema_version,
        updated_at=updated_at,
    )


def app_state_to_dict(state: AppState) -> dict[str, Any]:
    """Convert AppState to the persisted ``state`` object."""
    return {
        "profile": user_profile_to_dict(state.profile),
        "history": [workout_day_to_dict(d) for d in state.history],
        "currentPlan": [workout_day_to_dict(d) for d in state.current_plan],
        "setLogs": [logged_set_to_dict(log) for log in state.set_logs],
    }


def dict_to_app_state(data: dict[str, Any]) -> AppState:
    """
    Convert a (migrated) persisted ``state`` object to AppState.

    Raises:
        ValidationError: If data is invalid
    """
    where = "state"
    if not isinstance(data, dict):
        raise ValidationError("state must be a JSON object")
    return AppState(
        profile=dict_to_user_profile(_require(data, "profile", where)),
        history=_days(data, "history", where, required=False),
        current_plan=_days(data, "currentPlan", where, required=False),
        set_logs=[dict_to_logged_set(s) for s in _list(data, "setLogs", where, required=False)],
    )


def user_data_to_json(data: UserData) -> str:
    """Serialize UserData to a single JSON document."""
    return json.dumps(user_data_to_dict(data), separators=(",", ":"))


def json_to_user_data(text: str) -> UserData:
    """
    Parse and validate a user-data JSON document.

    Raises:
        ValidationError: If JSON is invalid or data validation fails
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON: {e}") from e
    return dict_to_user_data(data)
