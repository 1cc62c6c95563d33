"""Integration tests - whole pipelines built from several node kinds."""

import asyncio
from typing import Any

import pytest

from conftest import Collector
from pushpipe import (
    Backpressure,
    ManualScheduler,
    batch,
    branch,
    filter,
    for_each,
    map,
    map_async,
    merge,
    source,
    split,
    spread,
)


@pytest.mark.integration
class TestComposition:
    """Test chains mixing stateless and stateful nodes."""

    def test_filter_double_batch(self) -> None:
        head = source()
        out = (
            head
            >> filter(lambda x: x % 7 != 0)
            >> map(lambda x: x * 2)
            >> batch(max_items=3)
        ).pipe(Collector())

        head.feed([1, 2, 3, 4, 5, 6])

        assert out.items == [[2, 4, 6], [8, 10, 12]]

    def test_multiples_of_seven_dropped(self) -> None:
        head = source()
        tail = head.pipe(filter(lambda x: x % 7 != 0)).pipe(map(lambda x: x * 2)).pipe(batch(max_items=3))
        out = tail.pipe(Collector())

        head.feed(range(8))

        assert out.items == [[2, 4, 6], [8, 10, 12]]

    def test_fan_out_to_two_branches(self) -> None:
        head = source()
        evens = head.pipe(filter(lambda x: x % 2 == 0)).pipe(Collector())
        odds = head.pipe(filter(lambda x: x % 2 == 1)).pipe(Collector())

        head.feed(range(6))

        assert evens.items == [0, 2, 4]
        assert odds.items == [1, 3, 5]

    def test_branch_then_merge(self) -> None:
        head = source()
        rejects = source()
        kept = head.pipe(branch(lambda x: x is None, rejects))
        tagged = rejects.pipe(map(lambda _: "missing"))
        out = merge(kept, tagged).pipe(Collector())

        head.feed(["a", None, "b"])

        assert out.items == ["a", "missing", "b"]

    def test_batch_spread_round_trip_with_timer(self) -> None:
        sched = ManualScheduler()
        head = source()
        batched = head.pipe(batch(delay_timeout=1.0, scheduler=sched))
        sizes = batched.pipe(map(len)).pipe(Collector())
        flat = batched.pipe(spread()).pipe(Collector())

        head.feed("abc")
        sched.advance(1.0)
        head.feed("de")
        sched.advance(1.0)

        assert sizes.items == [3, 2]
        assert flat.items == list("abcde")

    def test_split_after_batch(self) -> None:
        head = source()
        out = head.pipe(batch(max_items=5)).pipe(split(2)).pipe(Collector())

        head.feed(range(5))

        assert out.items == [[0, 1], [2, 3], [4]]

    def test_for_each_side_effects_in_order(self) -> None:
        seen: list[int] = []
        head = source()
        head.pipe(for_each(seen.append)).pipe(map(lambda x: -x)).pipe(for_each(seen.append))

        head.feed([1, 2])

        assert seen == [1, -1, 2, -2]


@pytest.mark.integration
class TestAsyncComposition:
    """Test pipelines whose nodes suspend."""

    @pytest.mark.asyncio
    async def test_backpressure_around_async_map_into_batch(self) -> None:
        in_flight = 0
        peak = 0

        async def lookup(x: int) -> int:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.001 * (5 - x))
            in_flight -= 1
            return x * 100

        inner = map_async(lookup)
        head = source()
        out = head.pipe(Backpressure(inner)).pipe(batch()).pipe(Collector())

        head.feed(range(5))
        await inner.join()
        await asyncio.sleep(0.01)

        assert peak == 1
        flat: list[Any] = [x for chunk in out.items for x in chunk]
        assert flat == [0, 100, 200, 300, 400]

    @pytest.mark.asyncio
    async def test_zero_idle_batch_collects_async_burst(self) -> None:
        head = source()
        out = head.pipe(batch()).pipe(Collector())

        async def produce() -> Any:
            for i in range(4):
                yield i

        await head.afeed(produce())
        await asyncio.sleep(0.01)

        assert out.items == [[0, 1, 2, 3]]
