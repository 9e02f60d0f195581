"""
Tests for the call duration timer.
"""

import pytest

from lingualink.call.timer import DurationTimer, format_duration


def test_format_duration():
    assert format_duration(0) == "00:00"
    assert format_duration(5) == "00:05"
    assert format_duration(65) == "01:05"
    assert format_duration(3600) == "60:00"
    assert format_duration(-3) == "00:00"


@pytest.mark.asyncio
async def test_elapsed_follows_clock(clock):
    timer = DurationTimer(clock)
    assert timer.elapsed_seconds == 0

    timer.start()
    await clock.advance(2.5)
    assert timer.elapsed_seconds == 2

    await clock.advance(1)
    assert timer.elapsed_seconds == 3

    await timer.stop()
    await clock.advance(10)
    assert timer.elapsed_seconds == 3
    assert not timer.is_running


@pytest.mark.asyncio
async def test_ticks_once_per_second(clock):
    ticks = []
    timer = DurationTimer(clock)
    timer.on_tick(ticks.append)

    timer.start()
    for _ in range(3):
        await clock.advance(1)
    await timer.stop()

    assert ticks == [1, 2, 3]


@pytest.mark.asyncio
async def test_restart_resets_to_zero(clock):
    timer = DurationTimer(clock)
    timer.start()
    await clock.advance(5)

    timer.start()
    assert timer.elapsed_seconds == 0
    await clock.advance(1)
    assert timer.elapsed_seconds == 1
    await timer.stop()


@pytest.mark.asyncio
async def test_failing_listener_does_not_stop_timer(clock):
    ticks = []

    def broken(elapsed):
        raise RuntimeError("listener failed")

    timer = DurationTimer(clock)
    timer.on_tick(broken)
    timer.on_tick(ticks.append)

    async with timer:
        await clock.advance(1)
        await clock.advance(1)
        assert timer.is_running

    assert ticks == [1, 2]
    assert not timer.is_running


@pytest.mark.asyncio
async def test_reset(clock):
    timer = DurationTimer(clock)
    timer.start()
    await clock.advance(4)
    await timer.stop()

    timer.reset()

    assert timer.elapsed_seconds == 0
