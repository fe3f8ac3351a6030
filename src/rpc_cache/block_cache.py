"""Block-number-aware response cache."""

import copy
import json
import threading

from dataclasses import dataclass

from typing import Any

from cachetools import LRUCache

from src.helpers.constants import DEFAULT_CACHE_MAX_ENTRIES, EMPTY_RESULT_PLACEHOLDER
from src.helpers.logging import get_logger
from src.helpers.parsers import is_zero_hash
from src.rpc_cache.methods import TX_HASH_METHODS, block_param_index
from src.rpc_cache.models import BlockTracker, CacheKey, NormalizedRequest, Transport


logger = get_logger(__name__)


def is_empty_result(method: str, result: Any) -> bool:
    """Check whether a result signals data the node does not have yet.

    Empty results are returned to the caller but never cached: None and the
    geth "<nil>" placeholder for every method, plus, for transaction lookups,
    any result without a real blockHash (the transaction is not mined yet).

    Example:
        >>> is_empty_result("eth_getBalance", "<nil>")
        True
        >>> is_empty_result("eth_getTransactionReceipt", {"blockHash": None})
        True
    """
    if result is None or result == EMPTY_RESULT_PLACEHOLDER:
        return True

    if method in TX_HASH_METHODS:
        if not isinstance(result, dict):
            return True
        block_hash = result.get("blockHash")
        return not block_hash or is_zero_hash(block_hash)

    return False


def serialize_params(params: list[Any]) -> str:
    """Canonical JSON encoding of params, independent of dict key order.

    Raises:
        TypeError: If a param is not JSON serializable
    """
    return json.dumps(params, sort_keys=True, separators=(",", ":"))


def cache_key(normalized: NormalizedRequest, block: str) -> CacheKey:
    """Build the cache key of a normalized request.

    The block argument, if the method has one, is left out of the params
    part: it is represented by ``block`` instead.
    """
    request = normalized.forward
    params = list(request.params)
    index = block_param_index(request.method)
    if index is not None and index < len(params):
        del params[index]
    return CacheKey(
        method=request.method,
        params=serialize_params(params),
        block=block,
        pinned=normalized.pinned,
    )


@dataclass
class CacheStats:
    """Counters describing cache effectiveness."""

    hits: int = 0
    misses: int = 0
    stores: int = 0
    skipped_empty: int = 0
    bypassed: int = 0


class ResponseCache:
    """Pipeline stage caching responses per block.

    Entries keyed by the tracker's latest block belong to the epoch in which
    that block was reported. Any change of the reported block, up or down,
    starts a new epoch and drops them. Entries keyed by an explicit
    historical block (pinned) are kept until evicted by the LRU bound.

    Stored values are deep copies, so callers may mutate what they receive.
    """

    def __init__(
        self,
        transport: Transport,
        block_tracker: BlockTracker,
        *,
        max_entries: int = DEFAULT_CACHE_MAX_ENTRIES,
    ) -> None:
        """Initialize the cache.

        Args:
            transport: Transport invoked on cache misses
            block_tracker: Source of the latest block for keys that need it
            max_entries: Maximum number of stored responses
        """
        self.transport = transport
        self.block_tracker = block_tracker
        self.max_entries = max_entries
        self.stats = CacheStats()
        self._entries: LRUCache[CacheKey, Any] = LRUCache(maxsize=max_entries)
        self._lock = threading.Lock()
        self._latest_block: str | None = None
        self._epoch = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def latest_block(self) -> str | None:
        """Latest block reported in the current epoch."""
        return self._latest_block

    @property
    def epoch(self) -> int:
        """Number of latest block changes observed so far."""
        return self._epoch

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _observe_block(self, block: str) -> int:
        """Record a latest block, starting a new epoch if it changed.

        Returns:
            The epoch the block belongs to
        """
        with self._lock:
            if block == self._latest_block:
                return self._epoch
            stale = [key for key in self._entries if not key.pinned]
            for key in stale:
                del self._entries[key]
            previous = self._latest_block
            self._latest_block = block
            self._epoch += 1
            epoch = self._epoch
        logger.debug(
            "Latest block %s -> %s, dropped %d entries", previous, block, len(stale)
        )
        return epoch

    def _is_current(self, key: CacheKey, epoch: int | None = None) -> bool:
        if key.pinned:
            return True
        if epoch is not None and epoch != self._epoch:
            return False
        return key.block == self._latest_block

    def get(self, key: CacheKey) -> tuple[bool, Any]:
        """Look up a key.

        Returns:
            A (found, value) pair; the value is a copy of the stored one and
            unpinned entries from an earlier epoch are never found
        """
        with self._lock:
            if not self._is_current(key) or key not in self._entries:
                return False, None
            value = self._entries[key]
        return True, copy.deepcopy(value)

    def set(self, key: CacheKey, value: Any, epoch: int | None = None) -> bool:
        """Store a copy of a value, unless its epoch is over.

        Args:
            key: Cache key
            value: Result to store
            epoch: Epoch the request was made in, checked for unpinned keys

        Returns:
            Whether the value was stored
        """
        value = copy.deepcopy(value)
        with self._lock:
            if not self._is_current(key, epoch):
                return False
            self._entries[key] = value
            return True

    async def __call__(self, normalized: NormalizedRequest) -> Any:
        request = normalized.forward

        if not normalized.cacheable:
            self.stats.bypassed += 1
            return await self.transport.execute(request.method, request.params)

        block = normalized.block
        if block is None:
            block = await self.block_tracker.get_latest_block()
        epoch = None if normalized.pinned else self._observe_block(block)

        key = cache_key(normalized, block)
        found, value = self.get(key)
        if found:
            self.stats.hits += 1
            logger.debug("Cache hit for %s at block %s", request.method, block)
            return value

        self.stats.misses += 1
        logger.debug("Cache miss for %s at block %s", request.method, block)

        # Errors propagate to the caller and leave the cache untouched
        result = await self.transport.execute(request.method, request.params)

        if is_empty_result(request.method, result):
            self.stats.skipped_empty += 1
            logger.debug("Not caching empty result of %s", request.method)
            return result

        if self.set(key, result, epoch):
            self.stats.stores += 1
        return result


__all__ = [
    "CacheStats",
    "ResponseCache",
    "cache_key",
    "is_empty_result",
    "serialize_params",
]
