"""Polling tracker for the chain's latest block number."""

import asyncio
import time

from collections.abc import Callable

from src.helpers.constants import DEFAULT_POLL_INTERVAL
from src.helpers.logging import get_logger
from src.helpers.parsers import canonical_hex, is_hex_quantity
from src.rpc_cache.models import Transport


logger = get_logger(__name__)


class BlockTrackerError(RuntimeError):
    """Raised when the provider reports an unusable latest block number."""


class PollingBlockTracker:
    """Latest block number, fetched with eth_blockNumber and reused between polls.

    A fetched block number is served for ``poll_interval`` seconds. After
    that the next caller triggers a refresh; callers arriving while a
    refresh is in flight wait for it instead of issuing their own.

    Example:
        ```python
        tracker = PollingBlockTracker(RPCClient(rpc_url), poll_interval=12.0)
        latest = await tracker.get_latest_block()  # "0x12a05f2"
        ```
    """

    def __init__(
        self,
        transport: Transport,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the tracker.

        Args:
            transport: Transport used for eth_blockNumber calls
            poll_interval: Seconds a fetched block number stays current
            clock: Monotonic time source, replaceable in tests

        Raises:
            ValueError: If poll_interval is not positive
        """
        if poll_interval <= 0:
            msg = f"poll_interval must be positive, got {poll_interval}"
            raise ValueError(msg)

        self.transport = transport
        self.poll_interval = poll_interval
        self._clock = clock
        self._current_block: str | None = None
        self._fetched_at: float | None = None
        self._refresh_lock = asyncio.Lock()

    @property
    def current_block(self) -> str | None:
        """Last fetched block number, without polling."""
        return self._current_block

    def is_stale(self) -> bool:
        if self._current_block is None or self._fetched_at is None:
            return True
        return self._clock() - self._fetched_at >= self.poll_interval

    async def get_latest_block(self) -> str:
        """Return the latest block number, polling if the last one expired.

        Raises:
            BlockTrackerError: If the provider returns a malformed block number
        """
        if not self.is_stale():
            return self._current_block  # type: ignore[return-value]

        async with self._refresh_lock:
            # Another caller may have refreshed while we waited
            if not self.is_stale():
                return self._current_block  # type: ignore[return-value]
            return await self._fetch_latest_block()

    async def _fetch_latest_block(self) -> str:
        result = await self.transport.execute("eth_blockNumber", [])
        if not is_hex_quantity(result):
            msg = f"Invalid block number from eth_blockNumber: {result!r}"
            raise BlockTrackerError(msg)

        block = canonical_hex(result)
        if block != self._current_block:
            logger.info(
                "Latest block changed from %s to %s", self._current_block, block
            )
        self._current_block = block
        self._fetched_at = self._clock()
        return block


__all__ = [
    "BlockTrackerError",
    "PollingBlockTracker",
]
