"""Tests for the throttled, cancellable enrichment scheduler."""

import asyncio

import pytest

from src.parsers.enrichment import EnrichmentScheduler, merge_positional
from src.parsers.rpc.exceptions import RpcHttpError
from src.parsers.rpc.pool import RpcPool
from src.parsers.task_context import CycleCancelled, TaskContext


def _scheduler(fake_client, n_clients: int = 1) -> EnrichmentScheduler:
    clients = [fake_client.clone(f"k{i}") for i in range(n_clients)]
    return EnrichmentScheduler(RpcPool(clients), warmup_sec=0, item_delay_sec=0)


def _merge(item: dict, result: int) -> dict:
    return {**item, "value": result}


class TestMergePositional:
    def test_none_keeps_previous(self) -> None:
        items = [{"id": 1, "value": 0}, {"id": 2, "value": 0}, {"id": 3, "value": 0}]
        merged = merge_positional(items, [10, None, 30], _merge)
        assert [m["value"] for m in merged] == [10, 0, 30]

    def test_short_results(self) -> None:
        merged = merge_positional([{"value": 1}, {"value": 2}], [5], _merge)
        assert [m["value"] for m in merged] == [5, 2]


class TestEnrichmentScheduler:
    @pytest.mark.asyncio
    async def test_sequential_with_rotation(self, fake_client) -> None:
        scheduler = _scheduler(fake_client, n_clients=3)
        active = 0
        max_active = 0
        labels: list[str] = []

        async def fetch(client, item):
            nonlocal active, max_active
            active += 1
            max_active = max(max_active, active)
            labels.append(client.label)
            await asyncio.sleep(0)
            active -= 1
            return item["id"] * 10

        items = [{"id": i} for i in range(4)]
        merged = await scheduler.run(items, fetch, _merge, TaskContext())

        assert merged is not None
        assert [m["value"] for m in merged] == [0, 10, 20, 30]
        assert max_active == 1
        assert labels == ["k0", "k1", "k2", "k0"]

    @pytest.mark.asyncio
    async def test_item_failure_yields_none(self, fake_client) -> None:
        scheduler = _scheduler(fake_client)

        async def fetch(client, item):
            if item["id"] == 1:
                raise RpcHttpError(500, "getTransaction")
            return item["id"]

        items = [{"id": 0, "value": -1}, {"id": 1, "value": -1}, {"id": 2, "value": -1}]
        results = await scheduler.enrich(items, fetch, TaskContext())
        assert results == [0, None, 2]

        merged = await scheduler.run(items, fetch, _merge, TaskContext())
        assert [m["value"] for m in merged] == [0, -1, 2]

    @pytest.mark.asyncio
    async def test_cancel_mid_pass_merges_nothing(self, fake_client) -> None:
        scheduler = _scheduler(fake_client)
        ctx = TaskContext()
        fetched: list[int] = []

        async def fetch(client, item):
            fetched.append(item["id"])
            if item["id"] == 1:
                ctx.cancel()
            return item["id"]

        items = [{"id": i} for i in range(5)]
        assert await scheduler.run(items, fetch, _merge, ctx) is None
        assert fetched == [0, 1]

    @pytest.mark.asyncio
    async def test_cancel_during_warmup(self, fake_client) -> None:
        scheduler = EnrichmentScheduler(RpcPool([fake_client]), warmup_sec=0.05, item_delay_sec=0)
        ctx = TaskContext()
        calls: list[int] = []

        async def fetch(client, item):
            calls.append(item)
            return item

        task = asyncio.create_task(scheduler.run([1, 2], fetch, lambda a, b: b, ctx))
        await asyncio.sleep(0)
        ctx.cancel()

        assert await task is None
        assert calls == []

    @pytest.mark.asyncio
    async def test_item_delay_between_items_only(self, fake_client) -> None:
        scheduler = EnrichmentScheduler(RpcPool([fake_client]), warmup_sec=0, item_delay_sec=0.02)

        async def fetch(client, item):
            return item

        loop = asyncio.get_running_loop()
        start = loop.time()
        assert await scheduler.enrich([1, 2, 3], fetch, TaskContext()) == [1, 2, 3]
        elapsed = loop.time() - start
        assert elapsed >= 0.035
        assert elapsed < 1.0


class TestTaskContext:
    @pytest.mark.asyncio
    async def test_check_and_sleep(self) -> None:
        ctx = TaskContext(label="cycle")
        ctx.check()
        await ctx.sleep(0)
        ctx.cancel()
        assert ctx.cancelled
        with pytest.raises(CycleCancelled):
            ctx.check()
        with pytest.raises(CycleCancelled):
            await ctx.sleep(0)
        assert "cancelled" in repr(ctx)
