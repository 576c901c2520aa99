"""Tests for size-or-time batching."""

from __future__ import annotations

import asyncio

import pytest

from devstack.batching import BatchManager


class Recorder:
    def __init__(self, fail: bool = False):
        self.batches = []
        self.fail = fail

    async def __call__(self, items):
        self.batches.append(list(items))
        if self.fail:
            raise ConnectionError("upstream down")


@pytest.mark.asyncio
async def test_flushes_on_size_threshold_before_timer():
    recorder = Recorder()
    manager = BatchManager[int](batch_size=3, batch_time_seconds=60, process_batch=recorder, name="size")

    for item in range(7):
        await manager.add_item(item)

    assert recorder.batches == [[0, 1, 2], [3, 4, 5]]
    assert manager.pending == 1
    await manager.close()
    assert recorder.batches[-1] == [6]


@pytest.mark.asyncio
async def test_weighted_items_trigger_size_flush():
    recorder = Recorder()
    manager = BatchManager[str](batch_size=10, batch_time_seconds=60, process_batch=recorder, name="weighted", weight=len)

    await manager.add_item("abc")
    assert recorder.batches == []
    await manager.add_item("x" * 12)

    assert recorder.batches == [["abc", "x" * 12]]
    assert manager.pending == 0
    await manager.close()


@pytest.mark.asyncio
async def test_flushes_on_time_threshold_before_size():
    recorder = Recorder()
    manager = BatchManager[str](batch_size=1000, batch_time_seconds=0.05, process_batch=recorder, name="time")

    await manager.add_item("a")
    await manager.add_item("b")
    await asyncio.sleep(0.2)

    assert recorder.batches == [["a", "b"]]
    assert manager.pending == 0


@pytest.mark.asyncio
async def test_timer_restarts_for_next_batch():
    recorder = Recorder()
    manager = BatchManager[str](batch_size=1000, batch_time_seconds=0.05, process_batch=recorder)

    await manager.add_item("first")
    await asyncio.sleep(0.2)
    await manager.add_item("second")
    await asyncio.sleep(0.2)

    assert recorder.batches == [["first"], ["second"]]
    assert manager.batches_processed == 2


@pytest.mark.asyncio
async def test_processing_error_drops_batch_and_continues():
    recorder = Recorder(fail=True)
    manager = BatchManager[int](batch_size=2, batch_time_seconds=60, process_batch=recorder)

    await manager.add_items([1, 2, 3])

    assert recorder.batches == [[1, 2]]
    assert manager.pending == 1
    await manager.close()


@pytest.mark.asyncio
async def test_context_manager_flushes_on_exit():
    recorder = Recorder()

    async with BatchManager[int](batch_size=10, batch_time_seconds=60, process_batch=recorder) as manager:
        await manager.add_item(1)

    assert recorder.batches == [[1]]


def test_rejects_non_positive_batch_size():
    async def noop(_items):
        return None

    with pytest.raises(ValueError):
        BatchManager[int](batch_size=0, batch_time_seconds=1, process_batch=noop)
