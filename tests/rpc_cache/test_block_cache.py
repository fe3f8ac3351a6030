"""Tests for the block-aware response cache."""

import asyncio

import pytest

from src.helpers.rpc_models import JsonRpcRequest
from src.rpc_cache.block_cache import (
    ResponseCache,
    cache_key,
    is_empty_result,
    serialize_params,
)
from src.rpc_cache.block_ref import normalize
from src.rpc_cache.models import NormalizedRequest
from tests.fakes import FakeBlockTracker, FakeTransport


ZERO_HASH = "0x" + "0" * 64


def block_request(method: str, params: list | None = None) -> NormalizedRequest:
    return normalize(JsonRpcRequest(method=method, params=params or []))


class TestIsEmptyResult:
    """Tests for is_empty_result function."""

    @pytest.mark.parametrize("value", [None, "<nil>"])
    def test_default_empty_values(self, value: object) -> None:
        """Test None and the geth placeholder are empty for any method."""
        assert is_empty_result("eth_getBalance", value)
        assert is_empty_result("eth_getTransactionReceipt", value)

    @pytest.mark.parametrize("value", ["0x0", "", 0, False, [], {}])
    def test_falsy_values_are_not_empty(self, value: object) -> None:
        """Test ordinary falsy results are still cached."""
        assert not is_empty_result("eth_getBalance", value)

    @pytest.mark.parametrize(
        "result",
        [
            {"blockHash": None},
            {"hash": "0xabc"},
            {"blockHash": ZERO_HASH},
            {"blockHash": "0x" + "0" * 66},
            {"blockHash": "0x0"},
        ],
    )
    def test_transaction_without_block_hash(self, result: dict) -> None:
        """Test unmined transactions are empty."""
        assert is_empty_result("eth_getTransactionByHash", result)
        assert is_empty_result("eth_getTransactionReceipt", result)

    def test_transaction_with_block_hash(self) -> None:
        """Test mined transactions are not empty."""
        assert not is_empty_result("eth_getTransactionReceipt", {"blockHash": "0x100"})

    def test_transaction_non_object_result(self) -> None:
        """Test transaction results that are not objects carry no blockHash."""
        assert is_empty_result("eth_getTransactionByHash", "some result")

    def test_block_hash_rule_only_for_transactions(self) -> None:
        """Test other methods ignore blockHash."""
        assert not is_empty_result("eth_getBlockByHash", {"blockHash": None})


class TestCacheKey:
    """Tests for cache_key and serialize_params."""

    def test_serialize_params_sorts_keys(self) -> None:
        """Test dict key order does not change the serialization."""
        assert serialize_params([{"b": 1, "a": 2}]) == serialize_params(
            [{"a": 2, "b": 1}]
        )

    def test_serialize_params_rejects_non_json(self) -> None:
        """Test params without a JSON form raise instead of sharing a key."""
        with pytest.raises(TypeError):
            serialize_params([object()])

    def test_block_argument_is_excluded(self) -> None:
        """Test the block slot is represented by the block component only."""
        normalized = normalize(
            JsonRpcRequest(method="eth_getStorageAt", params=["0xabc", "0x0", "0x10"])
        )

        key = cache_key(normalized, "0x10")

        assert key.params == '["0xabc","0x0"]'
        assert key.block == "0x10"
        assert key.pinned

    def test_latest_and_absent_share_a_key(self) -> None:
        """Test "latest" and a missing block give the same key."""
        latest = normalize(
            JsonRpcRequest(method="eth_getBalance", params=["0xabc", "latest"]), "0x100"
        )
        absent = normalize(
            JsonRpcRequest(method="eth_getBalance", params=["0xabc"]), "0x100"
        )

        assert cache_key(latest, "0x100") == cache_key(absent, "0x100")

    def test_methods_never_collide(self) -> None:
        """Test identical params for different methods give different keys."""
        code = normalize(JsonRpcRequest(method="eth_getCode", params=["0xabc", "0x1"]))
        balance = normalize(
            JsonRpcRequest(method="eth_getBalance", params=["0xabc", "0x1"])
        )

        assert cache_key(code, "0x1") != cache_key(balance, "0x1")


class TestResponseCache:
    """Tests for ResponseCache stage."""

    @pytest.mark.asyncio
    async def test_hit_after_store(self) -> None:
        """Test identical requests at the same block hit the transport once."""
        transport = FakeTransport(["first result", "second result"])
        cache = ResponseCache(transport, FakeBlockTracker("0x1"))

        first = await cache(block_request("eth_gasPrice"))
        second = await cache(block_request("eth_gasPrice"))

        assert first == second == "first result"
        assert len(transport.calls) == 1
        assert cache.stats.hits == 1
        assert cache.stats.misses == 1
        assert cache.stats.stores == 1

    @pytest.mark.asyncio
    async def test_new_block_invalidates_latest_entries(self) -> None:
        """Test a new latest block forces a new transport call."""
        transport = FakeTransport(["first result", "second result"])
        tracker = FakeBlockTracker("0x1")
        cache = ResponseCache(transport, tracker)

        first = await cache(block_request("eth_gasPrice"))
        tracker.block = "0x2"
        second = await cache(block_request("eth_gasPrice"))

        assert [first, second] == ["first result", "second result"]
        assert len(transport.calls) == 2
        # Only the entry for the current block remains
        assert len(cache) == 1
        assert cache.latest_block == "0x2"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("empty", [None, "<nil>"])
    async def test_empty_results_are_not_stored(self, empty: object) -> None:
        """Test empty results are returned but requested again next time."""
        transport = FakeTransport([empty, "some result"])
        cache = ResponseCache(transport, FakeBlockTracker("0x1"))

        first = await cache(block_request("eth_getLogs", [{"address": "0xabc"}]))
        second = await cache(block_request("eth_getLogs", [{"address": "0xabc"}]))

        assert [first, second] == [empty, "some result"]
        assert len(transport.calls) == 2
        assert cache.stats.skipped_empty == 1

    @pytest.mark.asyncio
    async def test_pinned_entries_survive_new_blocks(self) -> None:
        """Test historical entries are reused after the latest block changes."""
        transport = FakeTransport(["first result", "latest result"])
        tracker = FakeBlockTracker("0x1")
        cache = ResponseCache(transport, tracker)
        historical = normalize(
            JsonRpcRequest(method="eth_getBalance", params=["0xabc", "0x1"])
        )

        first = await cache(historical)
        tracker.block = "0x2"
        await cache(block_request("eth_gasPrice"))
        second = await cache(historical)

        assert first == second == "first result"
        assert len(transport.calls) == 2

    @pytest.mark.asyncio
    async def test_not_cacheable_bypasses_cache(self) -> None:
        """Test uncacheable requests always reach the transport."""
        transport = FakeTransport(["0x1", "0x2"])
        tracker = FakeBlockTracker("0x1")
        cache = ResponseCache(transport, tracker)
        pending = normalize(
            JsonRpcRequest(method="eth_getBalance", params=["0xabc", "pending"])
        )

        results = [await cache(pending), await cache(pending)]

        assert results == ["0x1", "0x2"]
        assert len(cache) == 0
        assert tracker.calls == 0
        assert cache.stats.bypassed == 2

    @pytest.mark.asyncio
    async def test_transport_error_is_not_cached(self) -> None:
        """Test transport errors propagate and leave nothing behind."""
        transport = FakeTransport([ConnectionError("boom"), "some result"])
        cache = ResponseCache(transport, FakeBlockTracker("0x1"))

        with pytest.raises(ConnectionError, match="boom"):
            await cache(block_request("eth_gasPrice"))
        result = await cache(block_request("eth_gasPrice"))

        assert result == "some result"
        assert len(transport.calls) == 2

    @pytest.mark.asyncio
    async def test_lower_block_starts_new_epoch(self) -> None:
        """Test a block that drops and comes back never serves the earlier result."""
        transport = FakeTransport(["r1", "r2", "r3"])
        tracker = FakeBlockTracker("0x100")
        cache = ResponseCache(transport, tracker)

        results = []
        for block in ("0x100", "0xff", "0x100"):
            tracker.block = block
            results.append(await cache(block_request("eth_gasPrice")))

        assert results == ["r1", "r2", "r3"]
        assert len(transport.calls) == 3
        assert cache.epoch == 3
        assert cache.latest_block == "0x100"

    @pytest.mark.asyncio
    async def test_result_from_finished_epoch_is_not_stored(self) -> None:
        """Test a response is not stored once its epoch has ended."""
        transport = FakeTransport(["old", "lower", "current"])
        transport.delay = 0.01
        cache = ResponseCache(transport, FakeBlockTracker("0x100"))

        def at_block(block: str) -> NormalizedRequest:
            return NormalizedRequest(
                forward=JsonRpcRequest(method="eth_gasPrice"),
                block=block,
                cacheable=True,
            )

        # The height moves away and back while the first call is in flight
        results = await asyncio.gather(
            cache(at_block("0x100")),
            cache(at_block("0xff")),
            cache(at_block("0x100")),
        )
        later = await cache(at_block("0x100"))

        assert results == ["old", "lower", "current"]
        assert cache.stats.stores == 1
        assert later == "current"
        assert len(transport.calls) == 3

    @pytest.mark.asyncio
    async def test_mutating_result_does_not_change_cache(self) -> None:
        """Test callers get their own copy of cached objects."""
        transport = FakeTransport([{"number": "0x1", "hash": "0xab"}])
        cache = ResponseCache(transport, FakeBlockTracker("0x1"))
        request = block_request("eth_getBlockByHash", ["0xab", False])

        first = await cache(request)
        first["hash"] = "0xchanged"
        second = await cache(request)
        second["number"] = "0x2"
        third = await cache(request)

        assert second == {"number": "0x1", "hash": "0xab"}
        assert third == {"number": "0x1", "hash": "0xab"}
        assert len(transport.calls) == 1

    @pytest.mark.asyncio
    async def test_lru_bound(self) -> None:
        """Test the least recently used entry is evicted past max_entries."""
        transport = FakeTransport(["a", "b", "c", "a again"])
        cache = ResponseCache(transport, FakeBlockTracker("0x1"), max_entries=2)

        for address in ("0xa", "0xb", "0xc"):
            await cache(
                normalize(JsonRpcRequest(method="eth_getCode", params=[address, "0x1"]))
            )
        result = await cache(
            normalize(JsonRpcRequest(method="eth_getCode", params=["0xa", "0x1"]))
        )

        assert len(cache) == 2
        assert result == "a again"

    @pytest.mark.asyncio
    async def test_concurrent_misses_then_hit(self) -> None:
        """Test overlapping misses both reach the transport, later calls hit."""
        transport = FakeTransport(["first", "second"])
        transport.delay = 0.01
        cache = ResponseCache(transport, FakeBlockTracker("0x1"))

        results = await asyncio.gather(
            cache(block_request("eth_gasPrice")),
            cache(block_request("eth_gasPrice")),
        )
        later = await cache(block_request("eth_gasPrice"))

        assert sorted(results) == ["first", "second"]
        assert len(transport.calls) == 2
        assert later in {"first", "second"}

    @pytest.mark.asyncio
    async def test_clear(self) -> None:
        """Test clear removes all entries."""
        transport = FakeTransport(["0x1"])
        cache = ResponseCache(transport, FakeBlockTracker("0x1"))
        await cache(block_request("eth_gasPrice"))

        cache.clear()

        assert len(cache) == 0
