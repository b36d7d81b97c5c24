"""Tests for CancellableTimer."""

import asyncio

import pytest

from slideplay.infra.timers import CancellableTimer


class TestCancellableTimer:
    """Test cases for one-shot timers."""

    @pytest.mark.asyncio
    async def test_fires_once(self):
        calls = []
        timer = CancellableTimer(0.01, calls.append, "x").start()
        assert timer.active
        await asyncio.sleep(0.03)
        assert calls == ["x"]
        assert timer.fired
        assert not timer.active

    @pytest.mark.asyncio
    async def test_cancel_before_firing(self):
        calls = []
        timer = CancellableTimer(0.01, calls.append, "x").start()
        assert timer.cancel() is True
        await asyncio.sleep(0.03)
        assert calls == []
        assert timer.cancel() is False

    @pytest.mark.asyncio
    async def test_coroutine_callback_runs_as_task(self):
        done = asyncio.Event()

        async def callback():
            done.set()

        timer = CancellableTimer(0.0, callback).start()
        await asyncio.wait_for(done.wait(), timeout=1)
        assert timer.task is not None

    @pytest.mark.asyncio
    async def test_cannot_start_twice(self):
        timer = CancellableTimer(1, lambda: None).start()
        with pytest.raises(RuntimeError):
            timer.start()
        timer.cancel()
