"""Static classification of JSON-RPC methods for the response cache."""

from enum import StrEnum


class CacheStrategy(StrEnum):
    """How the pipeline treats a method."""

    FIXED = "fixed"
    """Answered from configured network identity, never cached"""

    BLOCK = "block"
    """Cached per latest block, no block argument in params"""

    BLOCK_TX_HASH = "block_tx_hash"
    """Like BLOCK, but results without a mined blockHash are not cached"""

    BLOCK_PARAM = "block_param"
    """Cached per block reference found at a fixed index in params"""

    NEVER = "never"
    """Always forwarded to the transport"""


FIXED_RESPONSE_METHODS: frozenset[str] = frozenset({
    "eth_chainId",
    "net_version",
})

BLOCK_CACHED_METHODS: frozenset[str] = frozenset({
    "eth_blockNumber",
    "eth_compileLLL",
    "eth_compileSerpent",
    "eth_compileSolidity",
    "eth_estimateGas",
    "eth_gasPrice",
    "eth_getBlockByHash",
    "eth_getBlockTransactionCountByHash",
    "eth_getBlockTransactionCountByNumber",
    "eth_getCompilers",
    "eth_getFilterLogs",
    "eth_getLogs",
    "eth_getTransactionByBlockHashAndIndex",
    "eth_getTransactionByBlockNumberAndIndex",
    "eth_getUncleByBlockHashAndIndex",
    "eth_getUncleByBlockNumberAndIndex",
    "eth_getUncleCountByBlockHash",
    "eth_getUncleCountByBlockNumber",
    "eth_protocolVersion",
    "shh_version",
    "test_blockCache",
    "test_forkCache",
    "test_permaCache",
    "web3_clientVersion",
    "web3_sha3",
})

TX_HASH_METHODS: frozenset[str] = frozenset({
    "eth_getTransactionByHash",
    "eth_getTransactionReceipt",
})

BLOCK_PARAM_INDEX: dict[str, int] = {
    "eth_getBlockByNumber": 0,
    "eth_getBalance": 1,
    "eth_getCode": 1,
    "eth_getTransactionCount": 1,
    "eth_call": 1,
    "eth_getStorageAt": 2,
}

METHOD_STRATEGIES: dict[str, CacheStrategy] = {
    **dict.fromkeys(FIXED_RESPONSE_METHODS, CacheStrategy.FIXED),
    **dict.fromkeys(BLOCK_CACHED_METHODS, CacheStrategy.BLOCK),
    **dict.fromkeys(TX_HASH_METHODS, CacheStrategy.BLOCK_TX_HASH),
    **dict.fromkeys(BLOCK_PARAM_INDEX, CacheStrategy.BLOCK_PARAM),
}


def strategy_for(method: str) -> CacheStrategy:
    """Look up the cache strategy of a method.

    Methods missing from every table are never cached.
    """
    return METHOD_STRATEGIES.get(method, CacheStrategy.NEVER)


def block_param_index(method: str) -> int | None:
    """Index of the block reference argument, or None if the method has none."""
    return BLOCK_PARAM_INDEX.get(method)


def is_cacheable(method: str) -> bool:
    return strategy_for(method) in {
        CacheStrategy.BLOCK,
        CacheStrategy.BLOCK_TX_HASH,
        CacheStrategy.BLOCK_PARAM,
    }


__all__ = [
    "BLOCK_CACHED_METHODS",
    "BLOCK_PARAM_INDEX",
    "FIXED_RESPONSE_METHODS",
    "METHOD_STRATEGIES",
    "TX_HASH_METHODS",
    "CacheStrategy",
    "block_param_index",
    "is_cacheable",
    "strategy_for",
]
