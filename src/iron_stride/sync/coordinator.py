"""
Keeps the local workout store and the remote user-data document in step.

On every identity change, start() runs one bootstrap cycle:

    no identity       → local storage only, ready
    identity present  → switch local storage to that user, rehydrate,
                        fetch the remote document:
                          absent  → seed it with the local snapshot
                          present → adopt it into the store (remote wins)
                        ready, whether or not the remote calls worked

Afterwards every change to profile, history or plan re-arms a debounce
timer; when it fires the current snapshot is pushed.  Changes made while
the bootstrap is in flight are not pushed, and a bootstrap that has been
superseded by a newer start() or stop() leaves the store alone.

Everything runs on one asyncio loop; the blocking HTTP calls are moved to
a worker thread with ``asyncio.to_thread``.
"""

import asyncio
import logging
from dataclasses import dataclass

from ..core.config import PUSH_DEBOUNCE_SECONDS
from ..io.serializers import ValidationError
from ..store import WorkoutStore
from .remote import Identity, RemoteClient, RemoteError
from .timer import DebounceTimer

log = logging.getLogger(__name__)

# Store slices mirrored to the remote document; set logs stay local
SYNCED_SLICES: frozenset[str] = frozenset({"profile", "history", "current_plan"})


@dataclass
class BootstrapGate:
    """Shared flag: True while a bootstrap cycle owns the store."""

    bootstrapping: bool = False


class SyncCoordinator:
    """
    Drives bootstrap and debounced pushes for one WorkoutStore.

    Attributes:
        active_identity: User id the local storage is namespaced to (None
            when signed out)
        ready: True once the current cycle finished, successful or not
        outcome: How the current cycle ended: "local", "adopted", "seeded"
            or "failed"
    """

    def __init__(
        self,
        store: WorkoutStore,
        client: RemoteClient | None,
        debounce_seconds: float = PUSH_DEBOUNCE_SECONDS,
        gate: BootstrapGate | None = None,
    ):
        self.store = store
        self.client = client
        self.gate = gate or BootstrapGate()
        self.identity: Identity | None = None
        self.active_identity: str | None = None
        self.ready = False
        self.outcome: str | None = None
        self._attempt = 0
        self._unsubscribe = None
        self._timer = DebounceTimer(debounce_seconds, self._schedule_push)
        self._push_tasks: set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _set_active_identity(self, user_id: str | None) -> None:
        self.active_identity = user_id
        if self.store.storage is not None:
            self.store.storage.active_identity = user_id

    async def start(self, identity: Identity | None) -> None:
        """
        Run a bootstrap cycle for *identity* (None = signed out).

        Never raises for remote or validation failures; they are logged and
        the store keeps working locally.
        """
        self.stop()
        self._attempt += 1
        attempt = self._attempt
        self.ready = False
        self.outcome = None
        self.identity = identity

        if identity is None:
            self._set_active_identity(None)
            self.store.rehydrate()
            self.outcome = "local"
            self.ready = True
            return

        self._set_active_identity(identity.user_id)
        self.gate.bootstrapping = True
        self._unsubscribe = self.store.subscribe(self._on_change)
        try:
            self.store.rehydrate()
            if self.client is None:
                self.outcome = "local"
            else:
                await self._bootstrap(identity, attempt)
        except (RemoteError, ValidationError) as exc:
            if attempt == self._attempt:
                self.outcome = "failed"
            log.warning("sync: bootstrap for %s failed, continuing locally: %s", identity.user_id, exc)
        finally:
            if attempt == self._attempt:
                self.gate.bootstrapping = False
        if attempt == self._attempt:
            self.ready = True

    async def _bootstrap(self, identity: Identity, attempt: int) -> None:
        remote = await asyncio.to_thread(self.client.fetch, identity)
        if attempt != self._attempt:
            log.debug("sync: dropping stale bootstrap for %s", identity.user_id)
            return
        if remote is None:
            log.info("sync: no remote document for %s, seeding it", identity.user_id)
            await asyncio.to_thread(self.client.push, identity, self.store.get_user_data())
            self.outcome = "seeded"
        else:
            log.info("sync: adopting remote document for %s", identity.user_id)
            self.store.apply_user_data(remote)
            self.outcome = "adopted"

    def stop(self) -> None:
        """Cancel pending pushes, unsubscribe, and invalidate in-flight work."""
        self._timer.cancel()
        for task in list(self._push_tasks):
            task.cancel()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._attempt += 1
        self.gate.bootstrapping = False

    # ------------------------------------------------------------------
    # Debounced push
    # ------------------------------------------------------------------

    @property
    def push_pending(self) -> bool:
        return self._timer.pending

    def _on_change(self, state, changed: frozenset[str]) -> None:
        if not changed & SYNCED_SLICES or self.gate.bootstrapping:
            return
        self._timer.trigger()

    def _schedule_push(self) -> None:
        # The push belongs to the cycle that armed it; a later start() or stop() voids it
        task = asyncio.get_running_loop().create_task(self._push_now(self.identity, self._attempt))
        self._push_tasks.add(task)
        task.add_done_callback(self._push_tasks.discard)

    async def _push_now(self, identity: Identity | None, attempt: int) -> None:
        if identity is None or self.client is None:
            return
        if attempt != self._attempt or self.gate.bootstrapping:
            log.debug("sync: dropping stale push for %s", identity.user_id)
            return
        try:
            await asyncio.to_thread(self.client.push, identity, self.store.get_user_data())
        except RemoteError as exc:
            log.debug("sync: push for %s failed: %s", identity.user_id, exc)

    async def flush(self) -> None:
        """Push a pending change now and wait for pushes in flight."""
        if self._timer.pending:
            self._timer.cancel()
            await self._push_now(self.identity, self._attempt)
        if self._push_tasks:
            await asyncio.gather(*self._push_tasks, return_exceptions=True)
