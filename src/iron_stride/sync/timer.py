"""Cancelable debounce timer on an asyncio event loop."""

import asyncio
from typing import Callable


class DebounceTimer:
    """
    Run a callback once the timer has not been re-armed for *delay* seconds.

    Every trigger() cancels the pending call and schedules a new one, so a
    burst of triggers collapses into a single call.
    """

    def __init__(self, delay: float, callback: Callable[[], None]):
        self.delay = delay
        self.callback = callback
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self) -> None:
        """(Re)start the quiet period.  Must be called on the running loop."""
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self.callback()
