"""
Data models for iron-stride.

All core dataclasses representing the profile, the weekly plan, completed
history and the set audit log.  Workout days are a tagged union: a LiftDay
carries exercises, a CardioDay (run or recovery) carries a run target.
"""

from dataclasses import dataclass, field
from typing import Literal, Union

GoalType = Literal["strength", "hypertrophy", "endurance", "fat_loss", "balanced"]
UnitSystem = Literal["imperial", "metric"]
DayKind = Literal["lift", "run", "recovery"]
DayType = Literal["push", "pull", "legs", "cardio", "full"]
Tier = Literal["compound", "accessory", "core"]
Equipment = Literal[
    "bodyweight",
    "dumbbell",
    "barbell",
    "bench",
    "rack",
    "bands",
    "kettlebell",
]

EQUIPMENT_TAGS: tuple[str, ...] = (
    "bodyweight",
    "dumbbell",
    "barbell",
    "bench",
    "rack",
    "bands",
    "kettlebell",
)
DAY_TYPES: tuple[str, ...] = ("push", "pull", "legs", "cardio", "full")
CARDIO_KINDS: tuple[str, ...] = ("run", "recovery")


@dataclass
class UserProfile:
    """
    User profile with physical characteristics and training preferences.

    ``goal_type`` may be None on freshly parsed data; normalization infers it
    from the free-text ``goal``.  ``equipment`` always ends up containing
    "bodyweight" once normalized.
    """

    name: str = ""
    height: float = 0.0
    weight: float = 0.0
    goal: str = "Build Muscle & Endurance"
    goal_type: GoalType | None = "balanced"
    units: UnitSystem = "imperial"
    daily_run_target: float = 2.0
    nutrition_target: str = ""
    onboarding_completed: bool = False
    start_of_week: int = 1  # 0=Sunday .. 6=Saturday
    equipment: list[str] = field(default_factory=lambda: ["bodyweight"])

    def __post_init__(self) -> None:
        """Validate profile data."""
        if self.height < 0:
            raise ValueError("height must be non-negative")
        if self.weight < 0:
            raise ValueError("weight must be non-negative")
        if self.daily_run_target < 0:
            raise ValueError("daily_run_target must be non-negative")
        if self.units not in ("imperial", "metric"):
            raise ValueError(f"Invalid units: {self.units!r}")
        if self.goal_type is not None and self.goal_type not in (
            "strength", "hypertrophy", "endurance", "fat_loss", "balanced"
        ):
            raise ValueError(f"Invalid goal_type: {self.goal_type!r}")
        if not 0 <= self.start_of_week <= 6:
            raise ValueError("start_of_week must be between 0 and 6")
        for item in self.equipment:
            if item not in EQUIPMENT_TAGS:
                raise ValueError(f"Unknown equipment tag: {item!r}")


@dataclass
class ExerciseSet:
    """
    One set of an exercise.

    Created by the planner with nothing logged; filled in field by field as
    the user trains.  ``target_reps`` is free-form ("8-12", "45s").
    """

    id: str
    target_reps: str
    actual_reps: int | None = None
    weight: float | None = None
    completed: bool = False
    perfect_form: bool = False

    def __post_init__(self) -> None:
        if self.actual_reps is not None and self.actual_reps < 0:
            raise ValueError("actual_reps must be non-negative")
        if self.weight is not None and self.weight < 0:
            raise ValueError("weight must be non-negative")


@dataclass
class ExerciseAlternative:
    """A swap candidate offered for an exercise slot."""

    id: str
    name: str
    reason: str | None = None
    muscle_group: str | None = None


@dataclass
class PrimaryExercise:
    """The pre-swap identity of an exercise."""

    id: str
    name: str
    muscle_group: str | None = None


@dataclass
class Exercise:
    """
    An exercise inside a lift day.

    When ``primary`` is set the exercise is currently showing a swapped-in
    alternative; ``primary`` remembers the original.
    """

    id: str
    name: str
    muscle_group: str | None = None
    sets: list[ExerciseSet] = field(default_factory=list)
    alternatives: list[ExerciseAlternative] | None = None
    primary: PrimaryExercise | None = None
    swap_reason: str | None = None
    notes: str | None = None
    rest_timer_seconds: int | None = None
    video_url: str | None = None

    @property
    def is_swapped(self) -> bool:
        return self.primary is not None


@dataclass
class RunTarget:
    """Planned distance for a cardio day (in the profile's units)."""

    distance: float
    description: str


@dataclass
class RunActual:
    """Distance and duration actually performed."""

    distance: float
    time_seconds: float

    def __post_init__(self) -> None:
        if self.distance < 0:
            raise ValueError("distance must be non-negative")
        if self.time_seconds < 0:
            raise ValueError("time_seconds must be non-negative")


@dataclass
class _WorkoutDayBase:
    """Fields shared by every day kind."""

    id: str
    day_number: int
    title: str
    day_type: DayType | None = None
    completed: bool = False
    date_completed: str | None = None  # ISO timestamp; with id forms the history identity
    notes: str | None = None
    run_actual: RunActual | None = None
    calves_stretched: bool | None = None

    def __post_init__(self) -> None:
        if self.day_number < 1:
            raise ValueError("day_number must be >= 1")
        if self.day_type is not None and self.day_type not in DAY_TYPES:
            raise ValueError(f"Invalid day_type: {self.day_type!r}")


@dataclass
class LiftDay(_WorkoutDayBase):
    """A strength day made of exercises."""

    exercises: list[Exercise] = field(default_factory=list)

    @property
    def type(self) -> DayKind:
        return "lift"


@dataclass
class CardioDay(_WorkoutDayBase):
    """A run or recovery day; it has a run target and no exercises."""

    kind: Literal["run", "recovery"] = "run"
    run_target: RunTarget | None = None

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.kind not in CARDIO_KINDS:
            raise ValueError(f"Invalid cardio kind: {self.kind!r}")

    @property
    def type(self) -> DayKind:
        return self.kind


WorkoutDay = Union[LiftDay, CardioDay]


@dataclass
class LoggedSet:
    """
    Append-only audit record written by every quick-log action.

    Never mutated; used to look up the last weight used for an exercise.
    """

    id: str
    day_id: str
    exercise_id: str
    exercise_name: str
    weight: float | None
    reps: int | None
    timestamp: int  # epoch milliseconds


@dataclass
class AppState:
    """
    The aggregate root owned by the workout-state store.
    """

    profile: UserProfile
    current_plan: list[WorkoutDay] = field(default_factory=list)
    history: list[WorkoutDay] = field(default_factory=list)
    set_logs: list[LoggedSet] = field(default_factory=list)


@dataclass
class UserData:
    """
    Exportable / syncable snapshot: the remote document and the backup file.
    """

    profile: UserProfile
    history: list[WorkoutDay] = field(default_factory=list)
    current_plan: list[WorkoutDay] = field(default_factory=list)
    schema_version: int | None = None
    updated_at: int | None = None  # epoch milliseconds, stamped by the server
