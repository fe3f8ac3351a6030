"""Caching JSON-RPC client assembled from the pipeline stages."""

from types import TracebackType

from typing import Any

from src.helpers.config import CacheSettings, get_eth_rpc_url
from src.helpers.constants import DEFAULT_CACHE_MAX_ENTRIES
from src.helpers.logging import get_logger
from src.helpers.rpc import RPCClient
from src.helpers.rpc_models import JsonRpcRequest
from src.rpc_cache.block_cache import ResponseCache
from src.rpc_cache.block_ref import BlockRefNormalizer
from src.rpc_cache.block_tracker import PollingBlockTracker
from src.rpc_cache.fixed import FixedResponseResolver, chain_id_for_network
from src.rpc_cache.models import BlockTracker, Transport


logger = get_logger(__name__)


class CachingRPCClient:
    """JSON-RPC client that avoids redundant calls to the remote provider.

    Requests flow through four stages, each wrapping the next:

    1. FixedResponseResolver answers eth_chainId and net_version locally
    2. BlockRefNormalizer replaces "latest" block arguments with the
       tracker's current block number
    3. ResponseCache serves or stores results keyed by method, params and
       block
    4. The transport performs the network call

    Example:
        ```python
        async with create_cached_client("mainnet", rpc_url) as client:
            balance = await client.request("eth_getBalance", [address])
            # Served from the cache until a new block is mined
            balance = await client.request("eth_getBalance", [address])
        ```
    """

    def __init__(
        self,
        transport: Transport,
        block_tracker: BlockTracker,
        chain_id: str,
        *,
        max_entries: int = DEFAULT_CACHE_MAX_ENTRIES,
    ) -> None:
        """Initialize the pipeline.

        Args:
            transport: Remote transport for cache misses and uncached methods
            block_tracker: Source of the chain's latest block number
            chain_id: Hex chain ID reported for eth_chainId and net_version
            max_entries: Maximum number of cached responses
        """
        self.transport = transport
        self.block_tracker = block_tracker
        self.cache = ResponseCache(transport, block_tracker, max_entries=max_entries)
        self.normalizer = BlockRefNormalizer(block_tracker, self.cache)
        self.resolver = FixedResponseResolver(chain_id, self.normalizer)

    async def send(self, request: JsonRpcRequest) -> Any:
        """Send a request through the pipeline and return its result.

        Raises:
            httpx.HTTPError: If the transport fails
            RPCError: If the provider answers with an error
        """
        return await self.resolver(request)

    async def request(self, method: str, params: list[Any] | None = None) -> Any:
        """Call a JSON-RPC method through the pipeline."""
        return await self.send(JsonRpcRequest(method=method, params=params or []))

    async def aclose(self) -> None:
        close = getattr(self.transport, "aclose", None)
        if close is not None:
            await close()

    async def __aenter__(self) -> "CachingRPCClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


def create_cached_client(
    network: str | None = None,
    rpc_url: str | None = None,
    *,
    settings: CacheSettings | None = None,
) -> CachingRPCClient:
    """Build a caching client backed by an HTTP JSON-RPC provider.

    Args:
        network: Network name (e.g. "mainnet"), defaults to settings.network
        rpc_url: Provider URL, defaults to the ETH_RPC_URL environment variable
        settings: Tuning values, read from the environment when omitted

    Returns:
        Ready-to-use client; close it with ``aclose`` or ``async with``

    Raises:
        ValueError: If the network is unknown or no RPC URL is available
    """
    settings = settings or CacheSettings.from_env()
    network = network or settings.network
    chain_id = chain_id_for_network(network)

    transport = RPCClient(
        get_eth_rpc_url(rpc_url),
        timeout=settings.timeout,
        max_retries=settings.max_retries,
    )
    block_tracker = PollingBlockTracker(
        transport, poll_interval=settings.poll_interval
    )
    logger.info(
        "Created caching RPC client for %s (chain %s, poll interval %.1fs)",
        network,
        chain_id,
        settings.poll_interval,
    )
    return CachingRPCClient(
        transport, block_tracker, chain_id, max_entries=settings.max_entries
    )


__all__ = [
    "CachingRPCClient",
    "create_cached_client",
]
