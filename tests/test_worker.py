"""Unit tests for the single-worker request queue (appgen.worker).

Tests cover:
- start / stop lifecycle and context-manager use
- Results and exceptions delivered to the submitter
- At most one request in flight, submission order preserved
"""

from __future__ import annotations

import asyncio

import pytest

from appgen.worker import RequestWorker


class TestLifecycle:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_submit_before_start_raises(self):
        worker = RequestWorker(lambda request: asyncio.sleep(0, result=request))
        with pytest.raises(RuntimeError, match="not running"):
            await worker.submit("x")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_start_stop(self):
        async def echo(request: str) -> str:
            return request.upper()

        worker = RequestWorker(echo)
        await worker.start()
        assert worker.running is True
        assert await worker.submit("abc") == "ABC"
        await worker.stop()
        assert worker.running is False
        assert worker.processed == 1

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_start_twice_is_noop(self):
        async def echo(request: str) -> str:
            return request

        worker = RequestWorker(echo)
        await worker.start()
        task = worker._task
        await worker.start()
        assert worker._task is task
        await worker.stop()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_stop_without_start(self):
        async def echo(request: str) -> str:
            return request

        await RequestWorker(echo).stop()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_context_manager(self):
        async def echo(request: str) -> str:
            return request * 2

        async with RequestWorker(echo) as worker:
            assert await worker.submit("ab") == "abab"
        assert worker.running is False


class TestProcessing:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_handler_exception_reaches_submitter(self):
        async def boom(request: str) -> str:
            raise ValueError(f"bad {request}")

        async with RequestWorker(boom) as worker:
            with pytest.raises(ValueError, match="bad x"):
                await worker.submit("x")
            # the worker survives the failure
            with pytest.raises(ValueError, match="bad y"):
                await worker.submit("y")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_one_in_flight_and_ordered(self):
        in_flight = 0
        peak = 0
        order: list[str] = []

        async def slow(request: str) -> str:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            order.append(request)
            in_flight -= 1
            return request

        async with RequestWorker(slow) as worker:
            results = await asyncio.gather(*(worker.submit(r) for r in ["a", "b", "c", "d"]))

        assert results == ["a", "b", "c", "d"]
        assert order == ["a", "b", "c", "d"]
        assert peak == 1
        assert worker.processed == 4
