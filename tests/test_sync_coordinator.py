"""
Tests for SyncCoordinator bootstrap and debounced pushes.

Each test drives the coordinator with asyncio.run() against a fake client
that records calls; the debounce delay is shortened to keep tests fast.
"""

import asyncio
import json
import threading

from iron_stride.core.models import UserData, UserProfile
from iron_stride.io.state_storage import LocalStateStorage
from iron_stride.store import WorkoutStore, default_state
from iron_stride.sync.coordinator import BootstrapGate, SyncCoordinator
from iron_stride.sync.remote import Identity, RemoteError

DEBOUNCE = 0.02
USER = Identity.with_token("user-1", "token-1")


class FakeClient:
    """Stands in for RemoteClient; fetch/push run on a worker thread."""

    def __init__(self, remote=None, fail_fetch=False, fail_push=False, gate=None, release=None):
        self.remote = remote
        self.fail_fetch = fail_fetch
        self.fail_push = fail_push
        self.gate = gate
        self.release = release
        self.fetches = []
        self.pushes = []
        self.pushed_for = []
        self.gate_during_fetch = None

    def fetch(self, identity):
        self.fetches.append(identity.user_id)
        if self.gate is not None:
            self.gate_during_fetch = self.gate.bootstrapping
        if self.release is not None:
            self.release.wait(timeout=5)
        if self.fail_fetch:
            raise RemoteError("fetch: HTTP 500")
        return self.remote

    def push(self, identity, data):
        if self.fail_push:
            raise RemoteError("push: HTTP 503")
        self.pushes.append(data)
        self.pushed_for.append(identity.user_id)


def _remote_doc(name: str = "Remote") -> UserData:
    state = default_state()
    return UserData(
        profile=UserProfile(name=name, onboarding_completed=True),
        current_plan=state.current_plan,
        schema_version=2,
    )


def _make_coordinator(client, tmp_path=None, gate=None):
    storage = LocalStateStorage(tmp_path) if tmp_path is not None else None
    store = WorkoutStore(storage=storage)
    return SyncCoordinator(store, client, debounce_seconds=DEBOUNCE, gate=gate)


# ===========================================================================
# Bootstrap
# ===========================================================================

class TestBootstrap:
    def test_signed_out_is_local(self, tmp_path):
        client = FakeClient()
        coord = _make_coordinator(client, tmp_path)
        asyncio.run(coord.start(None))
        assert coord.ready
        assert coord.outcome == "local"
        assert coord.active_identity is None
        assert client.fetches == []

    def test_remote_document_adopted(self, tmp_path):
        client = FakeClient(remote=_remote_doc())
        coord = _make_coordinator(client, tmp_path)
        asyncio.run(coord.start(USER))
        assert coord.outcome == "adopted"
        assert coord.ready
        assert coord.store.profile.name == "Remote"
        assert client.pushes == []

    def test_adopted_document_persisted_under_identity(self, tmp_path):
        coord = _make_coordinator(FakeClient(remote=_remote_doc()), tmp_path)
        asyncio.run(coord.start(USER))
        assert coord.active_identity == "user-1"
        assert coord.store.storage.path.name == "iron-stride-storage.user-1.json"
        assert coord.store.storage.path.exists()

    def test_missing_document_seeded(self, tmp_path):
        client = FakeClient(remote=None)
        coord = _make_coordinator(client, tmp_path)
        asyncio.run(coord.start(USER))
        assert coord.outcome == "seeded"
        assert len(client.pushes) == 1
        assert client.pushes[0].schema_version == 2
        assert len(client.pushes[0].current_plan) == 7

    def test_fetch_failure_still_ready(self, tmp_path):
        coord = _make_coordinator(FakeClient(fail_fetch=True), tmp_path)
        asyncio.run(coord.start(USER))
        assert coord.ready
        assert coord.outcome == "failed"
        assert not coord.gate.bootstrapping

    def test_malformed_local_file_still_ready(self, tmp_path):
        storage = LocalStateStorage(tmp_path, active_identity="user-1")
        storage.path.write_text(json.dumps({"version": 1, "state": {"currentPlan": [1]}}))
        coord = _make_coordinator(FakeClient(fail_fetch=True), tmp_path)
        asyncio.run(coord.start(USER))
        assert coord.ready
        assert len(coord.store.current_plan) == 7

    def test_no_client_is_local(self, tmp_path):
        coord = _make_coordinator(None, tmp_path)
        asyncio.run(coord.start(USER))
        assert coord.outcome == "local"
        assert coord.ready

    def test_gate_held_during_fetch(self):
        gate = BootstrapGate()
        client = FakeClient(remote=_remote_doc(), gate=gate)
        coord = _make_coordinator(client, gate=gate)
        asyncio.run(coord.start(USER))
        assert client.gate_during_fetch is True
        assert gate.bootstrapping is False

    def test_switching_identity_does_not_leak_data(self, tmp_path):
        coord = _make_coordinator(FakeClient(remote=_remote_doc("First")), tmp_path)
        asyncio.run(coord.start(USER))
        assert coord.store.profile.name == "First"

        coord.client = FakeClient(fail_fetch=True)
        asyncio.run(coord.start(Identity.with_token("user-2", "token-2")))
        assert coord.store.profile.name == ""

    def test_stale_bootstrap_is_ignored(self):
        release = threading.Event()
        client = FakeClient(remote=_remote_doc(), release=release)
        coord = _make_coordinator(client)

        async def scenario():
            task = asyncio.create_task(coord.start(USER))
            while not client.fetches:
                await asyncio.sleep(0.001)
            coord.stop()
            release.set()
            await task

        asyncio.run(scenario())
        assert coord.store.profile.name == ""
        assert not coord.ready
        assert coord.outcome is None
        assert not coord.gate.bootstrapping


# ===========================================================================
# Debounced push
# ===========================================================================

class TestDebouncedPush:
    def test_burst_collapses_into_one_push(self):
        client = FakeClient(remote=_remote_doc())
        coord = _make_coordinator(client)

        async def scenario():
            await coord.start(USER)
            coord.store.update_profile(name="A")
            coord.store.update_profile(name="B")
            coord.store.complete_workout("day-1")
            assert coord.push_pending
            await coord.flush()

        asyncio.run(scenario())
        assert len(client.pushes) == 1
        assert client.pushes[0].profile.name == "B"
        assert len(client.pushes[0].history) == 1

    def test_timer_fires_on_its_own(self):
        client = FakeClient(remote=_remote_doc())
        coord = _make_coordinator(client)

        async def scenario():
            await coord.start(USER)
            coord.store.update_workout_notes("day-1", "heavy")
            await asyncio.sleep(DEBOUNCE * 10)
            await coord.flush()

        asyncio.run(scenario())
        assert len(client.pushes) == 1
        assert not coord.push_pending

    def test_bootstrap_changes_not_pushed(self):
        client = FakeClient(remote=_remote_doc())
        coord = _make_coordinator(client)

        async def scenario():
            await coord.start(USER)
            assert not coord.push_pending
            await asyncio.sleep(DEBOUNCE * 5)

        asyncio.run(scenario())
        assert client.pushes == []

    def test_set_logs_not_synced(self):
        client = FakeClient(remote=_remote_doc())
        coord = _make_coordinator(client)

        async def scenario():
            await coord.start(USER)
            coord._on_change(coord.store.state, frozenset({"set_logs"}))
            return coord.push_pending

        assert asyncio.run(scenario()) is False

    def test_stop_cancels_pending_push(self):
        client = FakeClient(remote=_remote_doc())
        coord = _make_coordinator(client)

        async def scenario():
            await coord.start(USER)
            coord.store.update_profile(name="A")
            coord.stop()
            coord.store.update_profile(name="B")
            await asyncio.sleep(DEBOUNCE * 5)
            return coord.push_pending

        assert asyncio.run(scenario()) is False
        assert client.pushes == []

    def test_push_failure_swallowed(self):
        client = FakeClient(remote=_remote_doc(), fail_push=True)
        coord = _make_coordinator(client)

        async def scenario():
            await coord.start(USER)
            coord.store.update_profile(name="A")
            await coord.flush()

        asyncio.run(scenario())
        assert client.pushes == []
        assert coord.store.profile.name == "A"

    def test_signed_out_changes_not_pushed(self):
        client = FakeClient()
        coord = _make_coordinator(client)

        async def scenario():
            await coord.start(None)
            coord.store.update_profile(name="A")
            return coord.push_pending

        assert asyncio.run(scenario()) is False

    def test_armed_push_dropped_when_identity_switches(self):
        client = FakeClient(remote=_remote_doc("A-remote"))
        coord = _make_coordinator(client)

        async def scenario():
            await coord.start(USER)
            coord.store.update_profile(name="A-edit")
            # Timer fires: the push task exists but has not run yet
            coord._timer.cancel()
            coord._schedule_push()
            client.remote = _remote_doc("B-remote")
            await coord.start(Identity.with_token("user-2", "token-2"))
            await coord.flush()

        asyncio.run(scenario())
        assert client.pushed_for == []
        assert coord.store.profile.name == "B-remote"
        assert coord.outcome == "adopted"

    def test_push_skipped_while_bootstrapping(self):
        client = FakeClient(remote=_remote_doc())
        coord = _make_coordinator(client)

        async def scenario():
            await coord.start(USER)
            coord.gate.bootstrapping = True
            await coord._push_now(coord.identity, coord._attempt)

        asyncio.run(scenario())
        assert client.pushes == []

    def test_push_from_superseded_cycle_dropped(self):
        client = FakeClient(remote=_remote_doc())
        coord = _make_coordinator(client)

        async def scenario():
            await coord.start(USER)
            stale = coord._attempt
            await coord.start(USER)
            await coord._push_now(USER, stale)
            await coord._push_now(USER, coord._attempt)

        asyncio.run(scenario())
        assert client.pushed_for == ["user-1"]
