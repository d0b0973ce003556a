class RpcError(Exception):
    """Base error for Solana JSON-RPC calls."""


class RpcHttpError(RpcError):
    def __init__(self, status_code: int, method: str) -> None:
        super().__init__(f"HTTP {status_code} for {method}")
        self.status_code = status_code
        self.method = method


class RpcRateLimitError(RpcHttpError):
    def __init__(self, method: str) -> None:
        super().__init__(429, method)


class RpcResponseError(RpcError):
    """JSON-RPC level error object (``{"error": {...}}``)."""

    def __init__(self, code: int, message: str, method: str) -> None:
        super().__init__(f"{method} failed ({code}): {message}")
        self.code = code
        self.message = message
        self.method = method


class RpcTransportError(RpcError):
    """Timeout, dropped connection or protocol failure before a full response arrived."""
