"""Tests for the PeriodicTask background loop."""

import asyncio
from unittest.mock import patch

import pytest

from admin_api.utils.periodic import PeriodicTask


@pytest.mark.asyncio
async def test_runs_repeatedly_until_stopped() -> None:
    calls: list[int] = []
    task = PeriodicTask("test.tick", 0.01, lambda: calls.append(1))

    task.start()
    assert task.running is True
    await asyncio.sleep(0.1)
    await task.stop()

    assert task.running is False
    assert len(calls) >= 2

    seen = len(calls)
    await asyncio.sleep(0.05)
    assert len(calls) == seen


@pytest.mark.asyncio
async def test_failing_tick_is_logged_and_loop_continues() -> None:
    calls: list[int] = []

    def flaky() -> None:
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("sweep failed")

    task = PeriodicTask("test.flaky", 0.01, flaky)
    with patch("admin_api.utils.periodic.logger") as mock_logger:
        task.start()
        await asyncio.sleep(0.1)
        await task.stop()

    assert len(calls) >= 2
    mock_logger.exception.assert_called_once()
    assert mock_logger.exception.call_args.args[0] == "periodic_task.failed"


@pytest.mark.asyncio
async def test_start_twice_keeps_single_loop() -> None:
    task = PeriodicTask("test.once", 10, lambda: None)

    task.start()
    first = task._task
    task.start()

    assert task._task is first
    await task.stop()


@pytest.mark.asyncio
async def test_stop_without_start_is_noop() -> None:
    task = PeriodicTask("test.idle", 10, lambda: None)

    await task.stop()

    assert task.running is False


def test_rejects_non_positive_interval() -> None:
    with pytest.raises(ValueError):
        PeriodicTask("test.bad", 0, lambda: None)
