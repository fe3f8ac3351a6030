"""Configuration management and environment variable utilities."""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from src.helpers.constants import (
    DEFAULT_CACHE_MAX_ENTRIES,
    DEFAULT_NETWORK,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_TIMEOUT,
    MAX_RETRIES,
)


# Load environment variables from .env file
load_dotenv()


def get_required_env(key: str) -> str:
    """Get a required environment variable.

    Args:
        key: Environment variable name

    Returns:
        Environment variable value

    Raises:
        ValueError: If the environment variable is not set

    Example:
        ```python
        from src.helpers.config import get_required_env

        rpc_url = get_required_env("ETH_RPC_URL")
        ```
    """
    value = os.getenv(key)
    if not value:
        msg = f"{key} environment variable is not set"
        raise ValueError(msg)
    return value


def get_optional_env(key: str, default: str | None = None) -> str | None:
    """Get an optional environment variable with a default value.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        Environment variable value or default
    """
    return os.getenv(key, default)


def get_float_env(key: str, default: float) -> float:
    """Get a numeric environment variable as a float.

    Args:
        key: Environment variable name
        default: Value used when the variable is unset or empty

    Returns:
        Parsed float value

    Raises:
        ValueError: If the variable is set but is not a number
    """
    value = os.getenv(key)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        msg = f"{key} must be a number, got {value!r}"
        raise ValueError(msg) from None


def get_int_env(key: str, default: int) -> int:
    """Get an integer environment variable.

    Raises:
        ValueError: If the variable is set but is not an integer
    """
    value = os.getenv(key)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        msg = f"{key} must be an integer, got {value!r}"
        raise ValueError(msg) from None


def get_eth_rpc_url(rpc_url: str | None = None) -> str:
    """Get Ethereum RPC URL from parameter or environment.

    Args:
        rpc_url: Optional RPC URL to use directly

    Returns:
        Ethereum RPC URL

    Raises:
        ValueError: If RPC URL is not provided and ETH_RPC_URL env var is not set

    Example:
        ```python
        from src.helpers.config import get_eth_rpc_url

        # Get from environment
        rpc_url = get_eth_rpc_url()

        # Or provide explicitly
        rpc_url = get_eth_rpc_url("https://mainnet.infura.io/v3/<key>")
        ```
    """
    if rpc_url:
        return rpc_url

    return get_required_env("ETH_RPC_URL")


class CacheSettings(BaseModel):
    """Runtime settings for the caching RPC client."""

    network: str = Field(default=DEFAULT_NETWORK, description="Network name")
    poll_interval: float = Field(
        default=DEFAULT_POLL_INTERVAL,
        gt=0,
        description="Seconds between block tracker polls",
    )
    max_entries: int = Field(
        default=DEFAULT_CACHE_MAX_ENTRIES,
        gt=0,
        description="Maximum number of cached responses",
    )
    timeout: float = Field(
        default=DEFAULT_TIMEOUT, gt=0, description="RPC request timeout in seconds"
    )
    max_retries: int = Field(
        default=MAX_RETRIES, ge=1, description="Transport attempts per RPC call"
    )

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_env(cls) -> "CacheSettings":
        """Build settings from environment variables.

        Reads ETH_NETWORK, BLOCK_TRACKER_POLL_INTERVAL, RPC_CACHE_MAX_ENTRIES,
        RPC_TIMEOUT and RPC_MAX_RETRIES, falling back to the defaults in
        src.helpers.constants.

        Raises:
            ValueError: If a numeric variable cannot be parsed
        """
        return cls(
            network=get_optional_env("ETH_NETWORK") or DEFAULT_NETWORK,
            poll_interval=get_float_env(
                "BLOCK_TRACKER_POLL_INTERVAL", DEFAULT_POLL_INTERVAL
            ),
            max_entries=get_int_env("RPC_CACHE_MAX_ENTRIES", DEFAULT_CACHE_MAX_ENTRIES),
            timeout=get_float_env("RPC_TIMEOUT", DEFAULT_TIMEOUT),
            max_retries=get_int_env("RPC_MAX_RETRIES", MAX_RETRIES),
        )


__all__ = [
    "CacheSettings",
    "get_eth_rpc_url",
    "get_float_env",
    "get_int_env",
    "get_optional_env",
    "get_required_env",
]
