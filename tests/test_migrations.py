"""Tests for the persisted-state migration chain and incoming-plan resolution."""

from datetime import datetime, timezone

import pytest

from iron_stride.core.config import LOCAL_STATE_VERSION
from iron_stride.core.models import LiftDay, UserProfile
from iron_stride.io.migrations import (
    DEFAULT_LOGGED_EXERCISE_NAME,
    looks_like_legacy_default_plan,
    migrate_state,
    resolve_incoming_plan,
    run_migrations,
)
from iron_stride.io.serializers import ValidationError, app_state_to_dict, dict_to_workout_day
from iron_stride.store import default_state

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

LEGACY_TITLES = ["Push Day", "Leg Day", "Pull Day", "Active Recovery Run"]


def _raw_day(title: str, number: int, kind: str = "lift", **extra) -> dict:
    """A day dict in the stored wire shape."""
    day = {
        "id": f"day-{number}",
        "dayNumber": number,
        "title": title,
        "type": kind,
        "exercises": [],
        "completed": False,
    }
    day.update(extra)
    return day


def _legacy_plan() -> list[dict]:
    kinds = ["lift", "lift", "lift", "recovery"]
    return [_raw_day(t, i + 1, k) for i, (t, k) in enumerate(zip(LEGACY_TITLES, kinds))]


def _logged_set(**extra) -> dict:
    log = {
        "id": "day-1-d1-e1-1",
        "dayId": "day-1",
        "exerciseId": "d1-e1",
        "weight": 100,
        "reps": 5,
        "timestamp": 1,
    }
    log.update(extra)
    return log


class TestLegacyDetection:
    def test_any_title_matches(self):
        assert looks_like_legacy_default_plan(["My Day", "Leg Day"])

    def test_new_titles_do_not_match(self):
        assert not looks_like_legacy_default_plan(["Push Strength", "Easy Run"])
        assert not looks_like_legacy_default_plan([])


class TestMigrationChain:
    """Old blobs come out in the current shape."""

    def test_version_1_legacy_plan_regenerated(self):
        raw = {"profile": {"name": "Old", "goal": "Get strength up"}, "currentPlan": _legacy_plan()}
        state = migrate_state(1, raw, NOW)
        assert state.profile.name == "Old"
        assert state.profile.goal_type == "strength"
        assert state.profile.equipment == ["bodyweight"]
        assert len(state.current_plan) == 7
        assert state.current_plan[0].title == "Push Strength"
        assert state.current_plan[0].exercises[0].sets[0].target_reps == "4-6"

    def test_version_0_treated_as_oldest(self):
        state = migrate_state(0, {"currentPlan": _legacy_plan()}, NOW)
        assert state.current_plan[0].title == "Push Strength"

    def test_migrated_legacy_plan_kept_at_version_2(self):
        state = migrate_state(2, {"profile": {}, "currentPlan": _legacy_plan()}, NOW)
        assert [d.title for d in state.current_plan] == LEGACY_TITLES

    def test_day_type_backfill(self):
        raw = {
            "profile": {},
            "currentPlan": [_raw_day("Morning Pull", 1), _raw_day("Shakeout", 2, "run")],
            "history": [_raw_day("Leg Blast", 3, completed=True, dateCompleted="2026-10-18T10:00:00.000Z")],
        }
        state = migrate_state(2, raw, NOW)
        assert [d.day_type for d in state.current_plan] == ["pull", "cardio"]
        assert state.history[0].day_type == "legs"

    def test_explicit_day_type_kept(self):
        raw = {"profile": {}, "currentPlan": [_raw_day("Morning Pull", 1, dayType="full")]}
        state = migrate_state(2, raw, NOW)
        assert state.current_plan[0].day_type == "full"

    def test_logged_set_name_backfill(self):
        raw = {"profile": {}, "setLogs": [_logged_set(), _logged_set(id="b", exerciseName="Squat")]}
        state = migrate_state(3, raw, NOW)
        assert [s.exercise_name for s in state.set_logs] == [DEFAULT_LOGGED_EXERCISE_NAME, "Squat"]

    def test_run_migrations_skips_applied_steps(self):
        raw = {"setLogs": [_logged_set()]}
        assert run_migrations(LOCAL_STATE_VERSION, raw) is raw

    def test_missing_plan_generated(self):
        state = migrate_state(LOCAL_STATE_VERSION, {"profile": {"goalType": "endurance"}}, NOW)
        assert len(state.current_plan) == 7
        assert state.current_plan[0].exercises[0].sets[0].target_reps == "12-15"

    def test_history_pruned(self):
        old = _raw_day("Push Strength", 1, completed=True, dateCompleted="2026-08-01T00:00:00.000Z")
        state = migrate_state(LOCAL_STATE_VERSION, {"profile": {}, "history": [old]}, NOW)
        assert state.history == []

    def test_stored_goal_type_wins(self):
        raw = {"profile": {"goal": "strength", "goalType": "hypertrophy"}}
        assert migrate_state(1, raw, NOW).profile.goal_type == "hypertrophy"


class TestIdempotence:
    def test_current_state_unchanged(self):
        state = default_state()
        assert migrate_state(LOCAL_STATE_VERSION, app_state_to_dict(state), NOW) == state

    def test_running_twice(self):
        raw = {"profile": {"goal": "Endurance"}, "currentPlan": _legacy_plan()}
        once = migrate_state(1, raw, NOW)
        twice = migrate_state(LOCAL_STATE_VERSION, app_state_to_dict(once), NOW)
        assert twice == once


class TestInvalidState:
    def test_bad_profile_raises(self):
        with pytest.raises(ValidationError):
            migrate_state(LOCAL_STATE_VERSION, {"profile": {"name": 5}}, NOW)

    def test_bad_day_raises(self):
        with pytest.raises(ValidationError):
            migrate_state(LOCAL_STATE_VERSION, {"profile": {}, "currentPlan": [{"id": "x"}]}, NOW)

    @pytest.mark.parametrize("version", [0, 1])
    @pytest.mark.parametrize("plan", [[1], ["Push Day"], [None], 5])
    def test_malformed_old_plan_raises_validation_error(self, version, plan):
        with pytest.raises(ValidationError):
            migrate_state(version, {"profile": {}, "currentPlan": plan}, NOW)

    @pytest.mark.parametrize("key", ["history", "setLogs"])
    def test_malformed_old_lists_raise_validation_error(self, key):
        with pytest.raises(ValidationError):
            migrate_state(0, {"profile": {}, key: 7}, NOW)

    def test_non_dict_state_becomes_default(self):
        state = migrate_state(LOCAL_STATE_VERSION, "garbage", NOW)
        assert state.profile == UserProfile(goal_type="balanced")
        assert len(state.current_plan) == 7


class TestResolveIncomingPlan:
    """Which plan to keep when adopting an imported or remote document."""

    PROFILE = UserProfile()

    def _plan(self, titles):
        return [dict_to_workout_day(_raw_day(t, i + 1)) for i, t in enumerate(titles)]

    def test_old_legacy_document_regenerated(self):
        plan = resolve_incoming_plan(self._plan(LEGACY_TITLES[:2]), self.PROFILE, 1)
        assert plan[0].title == "Push Strength"

    def test_missing_schema_version_is_old(self):
        plan = resolve_incoming_plan(self._plan(["Push Day"]), self.PROFILE, None)
        assert len(plan) == 7

    def test_current_document_kept(self):
        plan = resolve_incoming_plan(self._plan(["Push Day"]), self.PROFILE, 2)
        assert [d.title for d in plan] == ["Push Day"]
        assert plan[0].day_type == "push"

    def test_custom_plan_kept(self):
        plan = resolve_incoming_plan(self._plan(["My Own Day"]), self.PROFILE, 1)
        assert isinstance(plan[0], LiftDay)
        assert plan[0].title == "My Own Day"

    def test_empty_plan_generated(self):
        assert len(resolve_incoming_plan([], self.PROFILE, 2)) == 7
