"""Ethereum JSON-RPC client utilities."""

from typing import Any

import httpx

from pydantic import ValidationError

from src.helpers.constants import DEFAULT_TIMEOUT, MAX_RETRIES, RETRY_BASE_DELAY
from src.helpers.http import create_http_client, retry_with_backoff
from src.helpers.logging import get_logger
from src.helpers.rpc_models import JsonRpcErrorDetail, JsonRpcRequest, JsonRpcResponse


logger = get_logger(__name__)


class RPCError(ValueError):
    """Error object returned by the JSON-RPC provider."""

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        super().__init__(f"RPC error {code}: {message}")
        self.code = code
        self.message = message
        self.data = data

    @classmethod
    def from_detail(cls, detail: JsonRpcErrorDetail) -> "RPCError":
        return cls(detail.code, detail.message, detail.data)


class RPCClient:
    """Ethereum JSON-RPC client used as the remote transport of the cache."""

    def __init__(
        self,
        rpc_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        *,
        max_retries: int = MAX_RETRIES,
        retry_base_delay: float = RETRY_BASE_DELAY,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize RPC client.

        Args:
            rpc_url: Ethereum JSON-RPC endpoint URL
            timeout: Default timeout for requests in seconds
            max_retries: Attempts per call in ``execute`` on transport errors
            retry_base_delay: Initial backoff delay between attempts
            client: Optional HTTP client to use instead of an owned one

        Raises:
            ValueError: If rpc_url is empty or None
        """
        if not rpc_url:
            msg = "RPC URL cannot be empty"
            raise ValueError(msg)

        self.rpc_url = rpc_url
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self._client = client
        self._owns_client = client is None
        self._next_id = 0

    def _request_id(self) -> int:
        self._next_id += 1
        return self._next_id

    def _http_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = create_http_client(timeout=self.timeout)
        return self._client

    async def call(
        self,
        client: httpx.AsyncClient,
        method: str,
        params: list[Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Make a single JSON-RPC call.

        Args:
            client: HTTP client instance
            method: RPC method name (e.g., "eth_blockNumber")
            params: Method parameters list
            timeout: Optional timeout override

        Returns:
            RPC result value, None for an explicit null result

        Raises:
            httpx.HTTPError: If the HTTP request fails
            RPCError: If the RPC response contains an error
            ValueError: If the response body is not a JSON-RPC response or
                carries neither a result nor an error
        """
        payload = JsonRpcRequest(
            method=method, params=params or [], id=self._request_id()
        )

        response = await client.post(
            self.rpc_url,
            json=payload.model_dump(),
            timeout=timeout or self.timeout,
        )
        response.raise_for_status()

        try:
            parsed = JsonRpcResponse.model_validate(response.json())
        except ValidationError as e:
            msg = f"Malformed JSON-RPC response for {method}: {e}"
            raise ValueError(msg) from e

        if parsed.error is not None:
            raise RPCError.from_detail(parsed.error)

        if not parsed.has_result:
            msg = f"Malformed JSON-RPC response for {method}: no result or error"
            raise ValueError(msg)

        return parsed.result

    async def execute(self, method: str, params: list[Any] | None = None) -> Any:
        """Run a JSON-RPC call on the owned HTTP client.

        Transport failures (``httpx.HTTPError``) are retried with exponential
        backoff; provider errors are raised straight away.

        Args:
            method: RPC method name
            params: Method parameters list

        Returns:
            RPC result value
        """

        @retry_with_backoff(
            max_retries=self.max_retries, base_delay=self.retry_base_delay
        )
        async def rpc_call() -> Any:
            return await self.call(self._http_client(), method, params)

        logger.debug("Sending %s %s to %s", method, params or [], self.rpc_url)
        return await rpc_call()

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None


__all__ = [
    "RPCClient",
    "RPCError",
]
