"""Common configuration constants used across the RPC cache."""

# Timeouts
DEFAULT_TIMEOUT = 30.0
"""Default HTTP request timeout in seconds"""

CONNECTION_TIMEOUT = 10.0
"""Timeout for establishing a connection to the provider in seconds"""

# Retry Configuration
MAX_RETRIES = 3
"""Default maximum number of transport attempts per RPC call"""

RETRY_BASE_DELAY = 1.0
"""Base delay for exponential backoff in seconds"""

RETRY_MAX_DELAY = 60.0
"""Maximum delay between retries in seconds"""

# HTTP Connection Pooling
MAX_KEEPALIVE_CONNECTIONS = 5
"""Maximum number of keepalive connections in pool"""

MAX_CONNECTIONS = 10
"""Maximum total number of connections"""

# Block Tracker
DEFAULT_POLL_INTERVAL = 20.0
"""Seconds a fetched latest block number is reused before polling again"""

# Response Cache
DEFAULT_CACHE_MAX_ENTRIES = 10_000
"""Upper bound on cached responses before least-recently-used eviction"""

EMPTY_RESULT_PLACEHOLDER = "<nil>"
"""Placeholder some geth versions return for data that is not available yet"""

# Network
DEFAULT_NETWORK = "mainnet"
"""Network assumed when none is configured"""


__all__ = [
    "CONNECTION_TIMEOUT",
    "DEFAULT_CACHE_MAX_ENTRIES",
    "DEFAULT_NETWORK",
    "DEFAULT_POLL_INTERVAL",
    "DEFAULT_TIMEOUT",
    "EMPTY_RESULT_PLACEHOLDER",
    "MAX_CONNECTIONS",
    "MAX_KEEPALIVE_CONNECTIONS",
    "MAX_RETRIES",
    "RETRY_BASE_DELAY",
    "RETRY_MAX_DELAY",
]
