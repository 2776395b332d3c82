"""Tests for the periodic task runner."""

import asyncio

import pytest

from radar_app.services import run_periodic


class TestRunPeriodic:
    """Tests for run_periodic."""

    @pytest.mark.asyncio
    async def test_ticks_repeatedly(self):
        """Test the tick runs more than once."""
        calls = 0
        done = asyncio.Event()

        async def tick():
            nonlocal calls
            calls += 1
            if calls == 3:
                done.set()

        task = asyncio.create_task(run_periodic("test", 0.01, tick))
        await asyncio.wait_for(done.wait(), timeout=2)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert calls >= 3

    @pytest.mark.asyncio
    async def test_continues_after_error(self):
        """Test a failing tick does not stop the schedule."""
        calls = 0
        done = asyncio.Event()

        async def tick():
            nonlocal calls
            calls += 1
            if calls == 1:
                raise RuntimeError("boom")
            done.set()

        task = asyncio.create_task(run_periodic("test", 0.01, tick))
        await asyncio.wait_for(done.wait(), timeout=2)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert calls >= 2

    @pytest.mark.asyncio
    async def test_initial_delay(self):
        """Test no tick runs before the initial delay."""
        calls = 0

        async def tick():
            nonlocal calls
            calls += 1

        task = asyncio.create_task(run_periodic("test", 0.01, tick, initial_delay=10))
        await asyncio.sleep(0.05)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert calls == 0

    @pytest.mark.asyncio
    async def test_ticks_do_not_overlap(self):
        """Test a slow tick delays the next one instead of overlapping."""
        running = 0
        max_running = 0
        calls = 0
        done = asyncio.Event()

        async def tick():
            nonlocal running, max_running, calls
            running += 1
            max_running = max(max_running, running)
            await asyncio.sleep(0.03)
            running -= 1
            calls += 1
            if calls == 3:
                done.set()

        task = asyncio.create_task(run_periodic("test", 0.01, tick))
        await asyncio.wait_for(done.wait(), timeout=2)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert max_running == 1
