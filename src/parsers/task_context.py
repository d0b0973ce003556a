"""Cancellable context for one fetch cycle.

A cycle polls ``ctx.cancelled`` at every loop head and after every await.
Once cancelled, in-flight requests may still finish but their results are
dropped instead of being merged into visible state.
"""

import asyncio


class CycleCancelled(Exception):
    """Raised by ``TaskContext.check()`` when a superseded cycle should stop."""


class TaskContext:
    def __init__(self, label: str = "") -> None:
        self.label = label
        self._cancelled = False

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else "active"
        return f"TaskContext({self.label!r}, {state})"

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def check(self) -> None:
        if self._cancelled:
            raise CycleCancelled(self.label)

    async def sleep(self, seconds: float) -> None:
        """Sleep, then fail fast if the cycle was cancelled meanwhile."""
        if seconds > 0:
            await asyncio.sleep(seconds)
        self.check()
