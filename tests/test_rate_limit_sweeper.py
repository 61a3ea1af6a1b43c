"""Tests for the background rate limit sweeper."""

import asyncio
from unittest.mock import MagicMock, Mock

import pytest

from app.adapters.rate_limit.in_memory import InMemoryBlockingRateLimiter
from app.adapters.rate_limit.sweeper import RateLimitSweeper


def test_run_once_removes_stale_records() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryBlockingRateLimiter(window_seconds=60, block_seconds=60, clock=clock)
    limiter.check("1.2.3.4")
    clock.return_value = 1000.0 + 121

    sweeper = RateLimitSweeper(limiter, interval_seconds=600)

    assert sweeper.run_once() == 1
    assert len(limiter) == 0


def test_run_once_logs_and_survives_sweep_failure() -> None:
    limiter = MagicMock()
    limiter.sweep.side_effect = RuntimeError("boom")

    sweeper = RateLimitSweeper(limiter, interval_seconds=600)

    assert sweeper.run_once() == 0


def test_rejects_non_positive_interval() -> None:
    with pytest.raises(ValueError):
        RateLimitSweeper(MagicMock(), interval_seconds=0)


@pytest.mark.asyncio
async def test_background_task_sweeps_periodically() -> None:
    limiter = MagicMock()
    limiter.sweep.return_value = 0
    limiter.__len__.return_value = 0
    sweeper = RateLimitSweeper(limiter, interval_seconds=0.01)

    sweeper.start()
    assert sweeper.running is True
    await asyncio.sleep(0.1)
    await sweeper.stop()

    assert sweeper.running is False
    assert limiter.sweep.call_count >= 2


@pytest.mark.asyncio
async def test_start_is_idempotent_and_stop_without_start_is_safe() -> None:
    limiter = MagicMock()
    sweeper = RateLimitSweeper(limiter, interval_seconds=60)

    await sweeper.stop()

    sweeper.start()
    first_task = sweeper._task
    sweeper.start()
    assert sweeper._task is first_task

    await sweeper.stop()
    assert sweeper.running is False
