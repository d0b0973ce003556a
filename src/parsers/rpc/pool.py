"""Round-robin pool of RPC endpoints bound to different credentials.

Spreading calls over several API keys multiplies the request budget. The
rotation counter is the only state shared by concurrent callers, so the
read-and-increment happens under one lock.
"""

import threading
from collections.abc import Sequence

from loguru import logger

from config.settings import Settings
from src.parsers.rpc.client import SolanaRpcClient


class RpcPool:
    """Hands out clients in fixed cyclic order: N calls visit each of N once."""

    def __init__(
        self,
        clients: Sequence[SolanaRpcClient],
        *,
        fallback: SolanaRpcClient | None = None,
    ) -> None:
        if clients:
            self._clients = list(clients)
        elif fallback is not None:
            self._clients = [fallback]
        else:
            raise ValueError("RpcPool needs at least one client or a fallback")
        self._counter = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._clients)

    @property
    def clients(self) -> list[SolanaRpcClient]:
        return list(self._clients)

    def next(self) -> SolanaRpcClient:
        with self._lock:
            idx = self._counter % len(self._clients)
            self._counter += 1
        return self._clients[idx]

    @classmethod
    def from_settings(cls, settings: Settings) -> "RpcPool":
        def _client(url: str, label: str = "") -> SolanaRpcClient:
            return SolanaRpcClient(
                url,
                max_rps=settings.rpc_max_rps,
                timeout=settings.rpc_timeout_sec,
                max_retries=settings.rpc_max_retries,
                label=label,
            )

        clients = [
            _client(url, label=f"helius#{i + 1}")
            for i, url in enumerate(settings.rpc_endpoints)
        ]
        if clients:
            logger.info(f"[RPC] Pool: {len(clients)} Helius endpoints (round-robin)")
            return cls(clients)

        logger.warning("[RPC] No Helius keys configured, using single fallback endpoint")
        return cls([], fallback=_client(settings.solana_rpc_url))

    async def close(self) -> None:
        for client in self._clients:
            await client.close()
