"""Answers for methods whose result only depends on the configured network."""

from typing import Any

from src.helpers.parsers import is_hex_quantity, parse_hex_int
from src.helpers.rpc_models import JsonRpcRequest
from src.rpc_cache.models import RequestHandler


NETWORK_CHAIN_IDS: dict[str, str] = {
    "mainnet": "0x1",
    "ropsten": "0x3",
    "rinkeby": "0x4",
    "goerli": "0x5",
    "kovan": "0x2a",
    "sepolia": "0xaa36a7",
}
"""Chain ID, as a hex string, of each supported network"""


def chain_id_for_network(network: str) -> str:
    """Look up the hex chain ID of a network.

    Raises:
        ValueError: If the network is not supported
    """
    try:
        return NETWORK_CHAIN_IDS[network]
    except KeyError:
        supported = ", ".join(sorted(NETWORK_CHAIN_IDS))
        msg = f"Unknown network {network!r}, expected one of: {supported}"
        raise ValueError(msg) from None


class FixedResponseResolver:
    """Pipeline stage answering eth_chainId and net_version locally."""

    def __init__(self, chain_id: str, next_handler: RequestHandler) -> None:
        if not is_hex_quantity(chain_id):
            msg = f"Chain ID must be a hex string, got {chain_id!r}"
            raise ValueError(msg)
        self.chain_id = chain_id
        self.next_handler = next_handler

    @property
    def net_version(self) -> str:
        return str(parse_hex_int(self.chain_id))

    async def __call__(self, request: JsonRpcRequest) -> Any:
        if request.method == "eth_chainId":
            return self.chain_id
        if request.method == "net_version":
            return self.net_version
        return await self.next_handler(request)


__all__ = [
    "NETWORK_CHAIN_IDS",
    "FixedResponseResolver",
    "chain_id_for_network",
]
