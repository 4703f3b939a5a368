"""Tests for progression lookups and plan metrics."""

from datetime import date, datetime, timezone

from iron_stride.core.metrics import (
    completed_sets_for_day,
    estimate_day_minutes,
    planned_sets_for_day,
    scheduled_day_for_date,
    weekly_stats,
)
from iron_stride.core.models import CardioDay, Exercise, ExerciseSet, LiftDay, LoggedSet, RunTarget
from iron_stride.core.progression import (
    ExerciseWeekBest,
    last_logged_weight,
    last_week_best_for_exercise,
    parse_target_reps,
    previous_week_window,
)
from iron_stride.store import default_state

# A Monday
NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def _day_with_sets(date_completed: str, sets: list[ExerciseSet], name: str = "Goblet Squat") -> LiftDay:
    return LiftDay(
        id="day-3",
        day_number=3,
        title="Legs & Core",
        completed=True,
        date_completed=date_completed,
        exercises=[Exercise(id="d3-e1", name=name, sets=sets)],
    )


def _done(weight, reps=None, target="8-12") -> ExerciseSet:
    return ExerciseSet(id="s-1", target_reps=target, actual_reps=reps, weight=weight, completed=True)


class TestWeekWindow:
    def test_monday_start(self):
        start, end = previous_week_window(1, NOW)
        assert start == datetime(2026, 10, 12, tzinfo=timezone.utc)
        assert end == datetime(2026, 10, 19, tzinfo=timezone.utc)

    def test_sunday_start(self):
        start, end = previous_week_window(0, NOW)
        assert start == datetime(2026, 10, 11, tzinfo=timezone.utc)
        assert end == datetime(2026, 10, 18, tzinfo=timezone.utc)

    def test_out_of_range_clamped(self):
        assert previous_week_window(9, NOW) == previous_week_window(6, NOW)


class TestLastWeekBest:
    def test_heaviest_set_wins(self):
        history = [
            _day_with_sets("2026-10-14T10:00:00.000Z", [_done(50, 10), _done(60, 6)]),
            _day_with_sets("2026-10-16T10:00:00.000Z", [_done(55, 12)]),
        ]
        best = last_week_best_for_exercise(history, "Goblet Squat", 1, NOW)
        assert best == ExerciseWeekBest(weight=60, reps=6, date="2026-10-14T10:00:00.000Z")

    def test_tie_broken_by_reps(self):
        history = [_day_with_sets("2026-10-14T10:00:00.000Z", [_done(60, 6), _done(60, 8)])]
        assert last_week_best_for_exercise(history, "Goblet Squat", 1, NOW).reps == 8

    def test_target_reps_used_when_actual_missing(self):
        history = [_day_with_sets("2026-10-14T10:00:00.000Z", [_done(60, None, "6-10")])]
        assert last_week_best_for_exercise(history, "Goblet Squat", 1, NOW).reps == 6

    def test_outside_window_ignored(self):
        history = [
            _day_with_sets("2026-10-19T08:00:00.000Z", [_done(80, 5)]),
            _day_with_sets("2026-10-05T08:00:00.000Z", [_done(90, 5)]),
            _day_with_sets("not a date", [_done(100, 5)]),
        ]
        assert last_week_best_for_exercise(history, "Goblet Squat", 1, NOW) is None

    def test_unweighted_and_incomplete_ignored(self):
        open_set = ExerciseSet(id="s-2", target_reps="8", weight=70, completed=False)
        history = [_day_with_sets("2026-10-14T10:00:00.000Z", [_done(None, 12), open_set])]
        assert last_week_best_for_exercise(history, "Goblet Squat", 1, NOW) is None

    def test_other_exercise_ignored(self):
        history = [_day_with_sets("2026-10-14T10:00:00.000Z", [_done(60, 6)], name="Lunge")]
        assert last_week_best_for_exercise(history, "Goblet Squat", 1, NOW) is None


class TestLastLoggedWeight:
    def _log(self, ts, name="Push-Ups", weight=None):
        return LoggedSet(id=str(ts), day_id="day-1", exercise_id="d1-e1", exercise_name=name,
                         weight=weight, reps=8, timestamp=ts)

    def test_newest_weighted_entry(self):
        logs = [self._log(3, weight=None), self._log(1, weight=20), self._log(2, weight=25)]
        assert last_logged_weight(logs, "Push-Ups") == 25

    def test_none_when_missing(self):
        assert last_logged_weight([self._log(1, name="Dips", weight=10)], "Push-Ups") is None


class TestParseTargetReps:
    def test_values(self):
        assert parse_target_reps("8-12") == 8
        assert parse_target_reps("45s") == 45
        assert parse_target_reps("AMRAP") is None
        assert parse_target_reps(None) is None


class TestPlanMetrics:
    def test_default_plan_stats(self):
        plan = default_state().current_plan
        stats = weekly_stats(plan)
        assert stats == {"planned_sets": 85, "completed_sets": 0, "completed_days": 0}

    def test_completed_sets(self):
        day = _day_with_sets("2026-10-14T10:00:00.000Z", [_done(10, 10), ExerciseSet("s-2", "8")])
        assert planned_sets_for_day(day) == 2
        assert completed_sets_for_day(day) == 1

    def test_cardio_has_no_sets(self):
        run = CardioDay(id="day-4-run", day_number=4, title="Easy Run", run_target=RunTarget(2.0, "easy"))
        assert planned_sets_for_day(run) == 0
        assert estimate_day_minutes(run) == 20

    def test_minute_estimates(self):
        plan = default_state().current_plan
        assert estimate_day_minutes(plan[0]) == 43
        assert estimate_day_minutes(plan[6]) == 15
        short = _day_with_sets("x", [_done(1, 1)])
        assert estimate_day_minutes(short) == 20

    def test_schedule(self):
        plan = default_state().current_plan
        assert scheduled_day_for_date(plan, date(2026, 10, 19)).id == "day-1"
        assert scheduled_day_for_date(plan, date(2026, 10, 22)).id == "day-4-run"
        assert scheduled_day_for_date(plan, date(2026, 10, 24)) is None
