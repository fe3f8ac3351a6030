"""Block reference resolution for methods that take a block argument.

Methods such as eth_getBalance or eth_call accept an optional trailing
block reference: a tag ("latest", "earliest", "pending") or an explicit
hex block number. Before a request reaches the response cache, "latest"
(or a missing argument, which means the same thing) is replaced with the
tracker's current block number so the cache key and the network call both
refer to a concrete block. "pending" requests are never cached, and
historical references ("earliest", explicit numbers) are passed through
as-is and cached until evicted.
"""

from collections.abc import Awaitable, Callable
from enum import StrEnum

from typing import Any

from src.helpers.logging import get_logger
from src.helpers.parsers import canonical_hex, is_hex_quantity
from src.helpers.rpc_models import JsonRpcRequest
from src.rpc_cache.methods import CacheStrategy, block_param_index, strategy_for
from src.rpc_cache.models import BlockTracker, NormalizedRequest


logger = get_logger(__name__)

EARLIEST_BLOCK = "0x0"


class BlockRefKind(StrEnum):
    """Kinds of block reference a request can carry."""

    LATEST = "latest"
    PENDING = "pending"
    EARLIEST = "earliest"
    NUMBER = "number"
    UNKNOWN = "unknown"


def parse_block_ref(value: Any) -> tuple[BlockRefKind, str | None]:
    """Classify a block reference argument.

    Args:
        value: The argument found in the block slot, None when it is absent

    Returns:
        The kind of reference and, for historical references, the canonical
        hex block number ("earliest" and "0x00" both give "0x0")

    Example:
        >>> parse_block_ref("0x0100")
        (<BlockRefKind.NUMBER: 'number'>, '0x100')
        >>> parse_block_ref(None)
        (<BlockRefKind.LATEST: 'latest'>, None)
    """
    if value is None or value == "latest":
        return BlockRefKind.LATEST, None
    if value == "pending":
        return BlockRefKind.PENDING, None
    if value == "earliest":
        return BlockRefKind.EARLIEST, EARLIEST_BLOCK
    if is_hex_quantity(value):
        return BlockRefKind.NUMBER, canonical_hex(value)
    return BlockRefKind.UNKNOWN, None


def block_ref_of(request: JsonRpcRequest) -> Any:
    """Value of the block argument of a request, None if absent or not applicable."""
    index = block_param_index(request.method)
    if index is None or len(request.params) <= index:
        return None
    return request.params[index]


def needs_latest_block(request: JsonRpcRequest) -> bool:
    """Whether normalizing this request requires the tracker's latest block."""
    if strategy_for(request.method) is not CacheStrategy.BLOCK_PARAM:
        return False
    kind, _ = parse_block_ref(block_ref_of(request))
    return kind is BlockRefKind.LATEST


def replace_block_ref(
    request: JsonRpcRequest, index: int, block: str
) -> JsonRpcRequest:
    """Copy a request with its block argument set to ``block``.

    Missing positions before the block slot are filled with None.
    """
    params = list(request.params)
    if len(params) <= index:
        params.extend([None] * (index + 1 - len(params)))
    params[index] = block
    return request.with_params(params)


def normalize(
    request: JsonRpcRequest, latest_block: str | None = None
) -> NormalizedRequest:
    """Resolve the block reference of a request.

    Pure function: the caller's request is never modified.

    Args:
        request: Incoming request
        latest_block: Tracker's latest block, required when the request
            refers to "latest" or leaves its block argument out

    Returns:
        The request to forward together with its cache key block component
        and cacheability

    Raises:
        ValueError: If the latest block is needed but not supplied
    """
    strategy = strategy_for(request.method)
    if strategy in {CacheStrategy.FIXED, CacheStrategy.NEVER}:
        return NormalizedRequest(forward=request, block=None, cacheable=False)

    index = block_param_index(request.method)
    if index is None:
        return NormalizedRequest(forward=request, block=None, cacheable=True)

    kind, canonical = parse_block_ref(block_ref_of(request))

    if kind is BlockRefKind.LATEST:
        if latest_block is None:
            msg = f"Latest block is required to normalize {request.method}"
            raise ValueError(msg)
        return NormalizedRequest(
            forward=replace_block_ref(request, index, latest_block),
            block=latest_block,
            cacheable=True,
        )

    if kind in {BlockRefKind.EARLIEST, BlockRefKind.NUMBER}:
        return NormalizedRequest(
            forward=request, block=canonical, cacheable=True, pinned=True
        )

    # "pending" and tags we do not understand skip the cache entirely
    return NormalizedRequest(forward=request, block=None, cacheable=False)


class BlockRefNormalizer:
    """Pipeline stage resolving "latest" block references before the cache."""

    def __init__(
        self,
        block_tracker: BlockTracker,
        next_handler: Callable[[NormalizedRequest], Awaitable[Any]],
    ) -> None:
        self.block_tracker = block_tracker
        self.next_handler = next_handler

    async def __call__(self, request: JsonRpcRequest) -> Any:
        latest_block = None
        if needs_latest_block(request):
            # Tracker failures propagate: there is no safe default block
            latest_block = await self.block_tracker.get_latest_block()
            logger.debug(
                "Resolved latest block of %s to %s", request.method, latest_block
            )
        return await self.next_handler(normalize(request, latest_block))


__all__ = [
    "EARLIEST_BLOCK",
    "BlockRefKind",
    "BlockRefNormalizer",
    "block_ref_of",
    "needs_latest_block",
    "normalize",
    "parse_block_ref",
    "replace_block_ref",
]
