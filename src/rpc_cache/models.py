"""Shared types for the caching RPC pipeline."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from typing import Any, Protocol, TypeAlias

from src.helpers.rpc_models import JsonRpcRequest


class Transport(Protocol):
    """Performs the actual network call for a JSON-RPC method."""

    async def execute(self, method: str, params: list[Any] | None = None) -> Any: ...


class BlockTracker(Protocol):
    """Supplies the chain's latest block number as a hex string."""

    async def get_latest_block(self) -> str: ...


RequestHandler: TypeAlias = Callable[[JsonRpcRequest], Awaitable[Any]]


@dataclass(frozen=True, slots=True)
class NormalizedRequest:
    """A request after block reference resolution.

    Attributes:
        forward: Request to send downstream (a rewritten copy when the block
            reference was resolved from "latest" or left out)
        block: Block component of the cache key, or None when the cache
            should key the entry on the tracker's latest block
        cacheable: Whether the response may be read from or stored in the cache
        pinned: True when ``block`` is a literal historical block whose
            content can never change
    """

    forward: JsonRpcRequest
    block: str | None
    cacheable: bool
    pinned: bool = False


@dataclass(frozen=True, slots=True)
class CacheKey:
    """Identity of a cached response."""

    method: str
    params: str
    block: str
    pinned: bool


__all__ = [
    "BlockTracker",
    "CacheKey",
    "NormalizedRequest",
    "RequestHandler",
    "Transport",
]
