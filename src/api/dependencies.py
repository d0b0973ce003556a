"""FastAPI dependency injection: services from the registry, address validation."""

from __future__ import annotations

from fastapi import HTTPException, Path, status

from src.api.registry import ServiceRegistry, registry
from src.parsers.launchpad.pda import is_valid_address
from src.parsers.profile import ProfileFetcher
from src.parsers.rpc.pool import RpcPool
from src.parsers.token_board import TokenBoard


def get_registry() -> ServiceRegistry:
    """Return the global service registry."""
    return registry


def _unavailable(name: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=f"{name} not initialized",
    )


def get_pool() -> RpcPool:
    if registry.pool is None:
        raise _unavailable("RPC pool")
    return registry.pool


def get_profiles() -> ProfileFetcher:
    if registry.profiles is None:
        raise _unavailable("Profile fetcher")
    return registry.profiles


def get_board() -> TokenBoard:
    if registry.board is None:
        raise _unavailable("Token board")
    return registry.board


def valid_address(address: str = Path(..., min_length=32, max_length=44)) -> str:
    """Path parameter that must parse as a base58 public key."""
    if not is_valid_address(address):
        raise HTTPException(
            status_code=422,
            detail=f"Invalid address: {address}",
        )
    return address
