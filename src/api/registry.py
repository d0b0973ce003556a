"""Runtime services shared between the entrypoint and the API routers.

Populated once at startup by ``src.main`` (or by tests). Everything runs in
one asyncio event loop, so plain attribute access is safe.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.parsers.profile import ProfileFetcher
    from src.parsers.rpc.pool import RpcPool
    from src.parsers.token_board import TokenBoard


class ServiceRegistry:
    """Holds references to the RPC pool and the services built on it."""

    pool: RpcPool | None = None
    profiles: ProfileFetcher | None = None
    board: TokenBoard | None = None
    started_at: float = 0.0

    def bind(self, pool: RpcPool, profiles: ProfileFetcher, board: TokenBoard) -> None:
        self.pool = pool
        self.profiles = profiles
        self.board = board
        self.started_at = time.monotonic()

    def clear(self) -> None:
        self.pool = None
        self.profiles = None
        self.board = None
        self.started_at = 0.0

    @property
    def uptime_sec(self) -> int:
        if not self.started_at:
            return 0
        return int(time.monotonic() - self.started_at)


registry = ServiceRegistry()
