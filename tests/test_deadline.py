from __future__ import annotations

import threading
import time

import pytest

from agent.deadline import GuardResult, call_with_deadline, run_with_deadline
from agent.errors import OperationTimeout


def test_returns_value_when_call_settles_in_time() -> None:
    result = run_with_deadline(lambda: 42, 1.0, name="fast")

    assert result == GuardResult(completed=True, value=42)
    assert not result.deadline_exceeded


def test_reports_deadline_exceeded_for_call_that_never_settles() -> None:
    release = threading.Event()
    try:
        start = time.monotonic()
        result = run_with_deadline(release.wait, 0.1, name="stuck")
        elapsed = time.monotonic() - start
    finally:
        release.set()

    assert result.completed is False
    assert result.deadline_exceeded
    assert result.value is None
    assert elapsed < 2.0


def test_propagates_the_calls_own_exception() -> None:
    def boom() -> None:
        raise KeyError("missing")

    with pytest.raises(KeyError):
        run_with_deadline(boom, 1.0, name="boom")


def test_call_with_deadline_raises_operation_timeout() -> None:
    release = threading.Event()
    try:
        with pytest.raises(OperationTimeout) as info:
            call_with_deadline(release.wait, 0.05, name="nft_info")
    finally:
        release.set()

    assert info.value.operation == "nft_info"
    assert info.value.timeout_s == 0.05
    assert info.value.timed_out


def test_own_failure_is_not_reported_as_timeout() -> None:
    def fail() -> None:
        raise ConnectionError("refused")

    with pytest.raises(ConnectionError):
        call_with_deadline(fail, 1.0)


@pytest.mark.parametrize("timeout", [0, -1])
def test_rejects_non_positive_deadline(timeout: float) -> None:
    with pytest.raises(ValueError):
        run_with_deadline(lambda: None, timeout)
