"""
Workout-state store: the single owner of AppState.

Every mutation goes through a WorkoutStore method.  Methods never mutate
dataclasses in place; each builds the changed slices with
``dataclasses.replace`` and commits them in one step, so listeners always
see a consistent before/after pair.  After a commit the store persists to
its LocalStateStorage (when attached) and notifies subscribers with the
names of the slices that changed.

Operations that reference an unknown day, exercise or set id are no-ops.
"""

import logging
from dataclasses import fields, replace
from datetime import datetime, timezone
from typing import Callable

from .core.config import USER_DATA_SCHEMA_VERSION
from .core.models import (
    AppState,
    Exercise,
    ExerciseAlternative,
    ExerciseSet,
    LiftDay,
    LoggedSet,
    PrimaryExercise,
    RunActual,
    UserData,
    UserProfile,
    WorkoutDay,
)
from .core.normalize import normalize_day, normalize_profile
from .core.planner import generate_plan
from .core.retention import format_timestamp, parse_timestamp, prune_history, utc_now
from .io.migrations import DEFAULT_LOGGED_EXERCISE_NAME, migrate_state, resolve_incoming_plan
from .io.serializers import ValidationError, json_to_user_data, user_data_to_json
from .io.state_storage import LocalStateStorage

log = logging.getLogger(__name__)

Listener = Callable[[AppState, frozenset[str]], None]

_STATE_SLICES = tuple(f.name for f in fields(AppState))
_UNSET = object()


def default_state() -> AppState:
    """Fresh state: default profile, generated plan, no history or logs."""
    profile = normalize_profile(UserProfile())
    return AppState(profile=profile, current_plan=generate_plan(profile))


def _mirror_into_history(history: list[WorkoutDay], day: WorkoutDay) -> list[WorkoutDay]:
    """Replace the history entry for a completed day's (id, dateCompleted)."""
    if not day.completed:
        return history
    return [
        day if entry.id == day.id and entry.date_completed == day.date_completed else entry
        for entry in history
    ]


def _next_set_id(sets: list[ExerciseSet]) -> str:
    taken = {s.id for s in sets}
    n = len(sets) + 1
    while f"s-{n}" in taken:
        n += 1
    return f"s-{n}"


class WorkoutStore:
    """
    Holds profile, current plan, history and the set audit log.

    Construct one per running process and hand it to whatever needs it.
    """

    def __init__(
        self,
        storage: LocalStateStorage | None = None,
        state: AppState | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Args:
            storage: Where to persist after each commit (None = memory only)
            state: Initial state (default: default_state())
            clock: Returns the current aware UTC time
        """
        self.storage = storage
        self._clock = clock
        self._state = state if state is not None else default_state()
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def profile(self) -> UserProfile:
        return self._state.profile

    @property
    def current_plan(self) -> list[WorkoutDay]:
        return self._state.current_plan

    @property
    def history(self) -> list[WorkoutDay]:
        return self._state.history

    @property
    def set_logs(self) -> list[LoggedSet]:
        return self._state.set_logs

    def find_day(self, day_id: str) -> WorkoutDay | None:
        """Plan day by id, or None."""
        for day in self._state.current_plan:
            if day.id == day_id:
                return day
        return None

    def find_exercise(self, day_id: str, exercise_id: str) -> Exercise | None:
        """Exercise of a lift day by id, or None."""
        day = self.find_day(day_id)
        if not isinstance(day, LiftDay):
            return None
        for exercise in day.exercises:
            if exercise.id == exercise_id:
                return exercise
        return None

    # ------------------------------------------------------------------
    # Subscription and commit
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Call *listener(state, changed_slices)* after every commit.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, new_state: AppState) -> None:
        previous = self._state
        changed = frozenset(
            name for name in _STATE_SLICES if getattr(new_state, name) is not getattr(previous, name)
        )
        if not changed:
            return
        self._state = new_state
        self._persist()
        for listener in list(self._listeners):
            listener(new_state, changed)

    def _set(self, **slices) -> None:
        self._commit(replace(self._state, **slices))

    def _persist(self) -> None:
        if self.storage is None:
            return
        try:
            self.storage.save(self._state)
        except OSError as e:
            log.error("Could not persist state to %s: %s", self.storage.path, e)

    def _now(self) -> datetime:
        return self._clock()

    def rehydrate(self) -> None:
        """
        Replace the in-memory state with the storage's blob, migrated.

        A missing or invalid blob yields default_state() so one identity's
        data never carries over to another.
        """
        loaded = self.storage.load() if self.storage is not None else None
        state = None
        if loaded is not None:
            version, raw_state = loaded
            try:
                state = migrate_state(version, raw_state, self._now())
            except ValidationError as e:
                log.warning("Discarding persisted state that failed validation: %s", e)
        if state is None:
            state = default_state()
        self._commit(state)

    # ------------------------------------------------------------------
    # Internal plan helpers
    # ------------------------------------------------------------------

    def _replace_day(self, day: WorkoutDay) -> list[WorkoutDay]:
        return [day if d.id == day.id else d for d in self._state.current_plan]

    def _update_exercise(
        self,
        day_id: str,
        exercise_id: str,
        update: Callable[[Exercise], Exercise],
        mirror: bool = False,
    ) -> LiftDay | None:
        day = self.find_day(day_id)
        exercise = self.find_exercise(day_id, exercise_id)
        if exercise is None:
            return None
        updated = replace(
            day,
            exercises=[update(e) if e.id == exercise_id else e for e in day.exercises],
        )
        changes = {"current_plan": self._replace_day(updated)}
        if mirror:
            changes["history"] = _mirror_into_history(self._state.history, updated)
        self._set(**changes)
        return updated

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    def update_profile(self, **changes) -> None:
        """
        Merge fields into the profile and re-normalize it.

        The plan is left alone.

        Raises:
            ValueError: If a merged value is invalid
        """
        self._set(profile=normalize_profile(replace(self._state.profile, **changes)))

    def complete_onboarding(self, profile: UserProfile) -> None:
        """Store the finished profile and generate its plan."""
        normalized = normalize_profile(replace(profile, onboarding_completed=True))
        self._set(profile=normalized, current_plan=generate_plan(normalized))

    # ------------------------------------------------------------------
    # Set logging
    # ------------------------------------------------------------------

    def log_set(self, day_id: str, exercise_id: str, set_id: str, **changes) -> None:
        """
        Merge fields into one set of the live plan.

        If the day is already completed, its history entry with the same
        (id, dateCompleted) is updated to match.
        """
        exercise = self.find_exercise(day_id, exercise_id)
        if exercise is None or not any(s.id == set_id for s in exercise.sets):
            return

        def update(ex: Exercise) -> Exercise:
            return replace(
                ex,
                sets=[replace(s, **changes) if s.id == set_id else s for s in ex.sets],
            )

        self._update_exercise(day_id, exercise_id, update, mirror=True)

    def log_workout_set(
        self,
        day_id: str,
        exercise_id: str,
        weight: float | None = None,
        reps: int | None = None,
    ) -> LoggedSet | None:
        """
        Quick-log the next set of an exercise.

        Appends a LoggedSet, then fills and completes the first set that is
        not completed yet.  When every set is already completed only the
        audit record is added.

        Returns:
            The appended LoggedSet, or None for an unknown day/exercise
        """
        exercise = self.find_exercise(day_id, exercise_id)
        if exercise is None:
            return None

        timestamp = int(self._now().timestamp() * 1000)
        entry = LoggedSet(
            id=f"{day_id}-{exercise_id}-{timestamp}",
            day_id=day_id,
            exercise_id=exercise_id,
            exercise_name=exercise.name or DEFAULT_LOGGED_EXERCISE_NAME,
            weight=weight,
            reps=reps,
            timestamp=timestamp,
        )
        set_logs = [*self._state.set_logs, entry]

        next_index = next((i for i, s in enumerate(exercise.sets) if not s.completed), None)
        if next_index is None:
            self._set(set_logs=set_logs)
            return entry

        target = exercise.sets[next_index]
        filled = replace(
            target,
            weight=weight if weight is not None else target.weight,
            actual_reps=reps if reps is not None else target.actual_reps,
            completed=True,
        )
        day = self.find_day(day_id)
        updated = replace(
            day,
            exercises=[
                replace(e, sets=[filled if s is target else s for s in e.sets])
                if e.id == exercise_id
                else e
                for e in day.exercises
            ],
        )
        self._set(
            set_logs=set_logs,
            current_plan=self._replace_day(updated),
            history=_mirror_into_history(self._state.history, updated),
        )
        return entry

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------

    def complete_workout(
        self,
        day_id: str,
        notes: str | None = None,
        run_actual: RunActual | None = None,
        calves_stretched: bool | None = None,
    ) -> str | None:
        """
        Mark a plan day completed and upsert it into history.

        dateCompleted is stamped only the first time, so finishing an
        already-completed day edits its history entry instead of adding one.

        Returns:
            The day's dateCompleted, or None for an unknown day
        """
        day = self.find_day(day_id)
        if day is None:
            return None

        completed = replace(
            day,
            completed=True,
            date_completed=day.date_completed or format_timestamp(self._now()),
            notes=notes if notes is not None else day.notes,
            run_actual=run_actual if run_actual is not None else day.run_actual,
            calves_stretched=calves_stretched if calves_stretched is not None else day.calves_stretched,
        )

        history = list(self._state.history)
        for index, entry in enumerate(history):
            if entry.id == completed.id and entry.date_completed == completed.date_completed:
                history[index] = completed
                break
        else:
            history.append(completed)

        self._set(
            current_plan=self._replace_day(completed),
            history=prune_history(history, self._now()),
        )
        return completed.date_completed

    def undo_complete_workout(self, day_id: str, date_completed: str | None = None) -> None:
        """
        Reopen a plan day and drop one history entry for it.

        With *date_completed* the entry with exactly that (id, dateCompleted)
        is removed.  Without it, the most recent completion of the day is
        removed: latest parsed dateCompleted, ties and unparsable stamps
        resolved by list position (last wins).
        """
        history = self._state.history
        if date_completed is not None:
            drop = next(
                (
                    i for i, e in enumerate(history)
                    if e.id == day_id and e.date_completed == date_completed
                ),
                None,
            )
        else:
            floor = datetime.min.replace(tzinfo=timezone.utc)
            matches = [
                (parse_timestamp(e.date_completed) or floor, i)
                for i, e in enumerate(history)
                if e.id == day_id
            ]
            drop = max(matches)[1] if matches else None

        changes: dict = {}
        if drop is not None:
            changes["history"] = [e for i, e in enumerate(history) if i != drop]

        day = self.find_day(day_id)
        if day is not None and (day.completed or day.date_completed is not None):
            changes["current_plan"] = self._replace_day(
                replace(
                    day,
                    completed=False,
                    date_completed=None,
                    run_actual=None,
                    calves_stretched=None,
                )
            )
        if changes:
            self._set(**changes)

    # ------------------------------------------------------------------
    # Live-plan edits
    # ------------------------------------------------------------------

    def update_workout_notes(self, day_id: str, notes: str | None) -> None:
        day = self.find_day(day_id)
        if day is not None:
            self._set(current_plan=self._replace_day(replace(day, notes=notes)))

    def update_run_draft(self, day_id: str, distance=_UNSET, time_seconds=_UNSET) -> None:
        """
        Edit the in-progress run of a day.

        Omitted arguments keep the current value; None counts as zero.  When
        both end up zero the draft is cleared.
        """
        day = self.find_day(day_id)
        if day is None:
            return
        current = day.run_actual
        if distance is _UNSET:
            distance = current.distance if current else 0.0
        if time_seconds is _UNSET:
            time_seconds = current.time_seconds if current else 0.0
        distance = distance or 0.0
        time_seconds = time_seconds or 0.0

        run_actual = None
        if distance > 0 or time_seconds > 0:
            run_actual = RunActual(distance=distance, time_seconds=time_seconds)
        self._set(current_plan=self._replace_day(replace(day, run_actual=run_actual)))

    def update_exercise_notes(self, day_id: str, exercise_id: str, notes: str | None) -> None:
        self._update_exercise(day_id, exercise_id, lambda ex: replace(ex, notes=notes))

    def swap_exercise(
        self,
        day_id: str,
        exercise_id: str,
        candidate: ExerciseAlternative | PrimaryExercise,
    ) -> None:
        """
        Show *candidate* in place of an exercise, or swap back.

        Picking the recorded primary (by id or name) restores it.  Otherwise
        the pre-swap identity is remembered the first time only, so repeated
        swaps always revert to the true original.
        """

        def update(ex: Exercise) -> Exercise:
            if ex.primary is not None and (
                candidate.id == ex.primary.id or candidate.name == ex.primary.name
            ):
                return replace(
                    ex,
                    name=ex.primary.name,
                    muscle_group=ex.primary.muscle_group,
                    primary=None,
                    swap_reason=None,
                )
            primary = ex.primary or PrimaryExercise(
                id=ex.id, name=ex.name, muscle_group=ex.muscle_group
            )
            return replace(
                ex,
                name=candidate.name,
                muscle_group=candidate.muscle_group or ex.muscle_group,
                primary=primary,
                swap_reason=getattr(candidate, "reason", None),
            )

        self._update_exercise(day_id, exercise_id, update)

    def add_exercise_to_day(self, day_id: str, exercise: Exercise) -> None:
        """Append an exercise to a lift day."""
        day = self.find_day(day_id)
        if isinstance(day, LiftDay):
            self._set(
                current_plan=self._replace_day(replace(day, exercises=[*day.exercises, exercise]))
            )

    def remove_exercise_from_day(self, day_id: str, exercise_id: str) -> None:
        day = self.find_day(day_id)
        if self.find_exercise(day_id, exercise_id) is None:
            return
        self._set(
            current_plan=self._replace_day(
                replace(day, exercises=[e for e in day.exercises if e.id != exercise_id])
            )
        )

    def update_exercise_targets(
        self,
        day_id: str,
        exercise_id: str,
        target_reps: str | None = None,
        set_count: int | None = None,
    ) -> None:
        """
        Change the rep target of every set and optionally the number of sets.

        Growing adds fresh sets; shrinking drops sets from the end.
        """

        def update(ex: Exercise) -> Exercise:
            sets = [
                replace(s, target_reps=target_reps) if target_reps is not None else s
                for s in ex.sets
            ]
            if set_count is not None and set_count >= 1:
                reps = target_reps or (sets[-1].target_reps if sets else "8-12")
                while len(sets) < set_count:
                    sets.append(ExerciseSet(id=_next_set_id(sets), target_reps=reps))
                sets = sets[:set_count]
            return replace(ex, sets=sets)

        self._update_exercise(day_id, exercise_id, update)

    def reset_plan(self) -> None:
        """Regenerate the plan from the profile; history is kept."""
        self._set(current_plan=generate_plan(normalize_profile(self._state.profile)))

    def restore_plan(self, plan: list[WorkoutDay]) -> None:
        self._set(current_plan=list(plan))

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    def get_user_data(self) -> UserData:
        """Exportable snapshot with a pruned history."""
        return UserData(
            schema_version=USER_DATA_SCHEMA_VERSION,
            profile=normalize_profile(self._state.profile),
            history=prune_history(self._state.history, self._now()),
            current_plan=list(self._state.current_plan),
        )

    def export_data(self) -> str:
        return user_data_to_json(self.get_user_data())

    def apply_user_data(self, data: UserData) -> None:
        """
        Adopt an already-validated document wholesale.

        Profile is normalized, history pruned, and a legacy default plan
        from an old document is regenerated.
        """
        profile = normalize_profile(data.profile)
        self._set(
            profile=profile,
            history=prune_history([normalize_day(d) for d in data.history], self._now()),
            current_plan=resolve_incoming_plan(data.current_plan, profile, data.schema_version),
        )

    def import_data(self, text: str) -> bool:
        """
        Replace profile, history and plan from an exported JSON document.

        Returns:
            True on success; False (state untouched) if the document is invalid
        """
        try:
            data = json_to_user_data(text)
        except ValidationError as e:
            log.info("Rejected import: %s", e)
            return False
        self.apply_user_data(data)
        return True

    def reset_user_data(self) -> None:
        """Back to defaults: fresh profile and plan, no history, no logs."""
        self._commit(default_state())
