"""
Deadline guard for blocking calls (RPC queries, completions, broadcasts).

The wrapped callable runs on a daemon worker thread while the caller waits on a
Future with a timeout. If the deadline passes first the caller gets a
"deadline exceeded" result and moves on; the worker is abandoned and, being a
daemon, never holds up process exit.

Usage:
    from agent.deadline import run_with_deadline, call_with_deadline

    result = run_with_deadline(lambda: slow(), 5, name="slow")
    if result.completed:
        print(result.value)

    value = call_with_deadline(lambda: slow(), 5, name="slow")  # raises OperationTimeout
"""

from __future__ import annotations

import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

from agent.errors import OperationTimeout

T = TypeVar("T")


@dataclass(frozen=True)
class GuardResult(Generic[T]):
    """Tagged outcome: completed with a value, or deadline exceeded."""

    completed: bool
    value: Optional[T] = None

    @property
    def deadline_exceeded(self) -> bool:
        return not self.completed


def _run_into(future: Future, fn: Callable[[], T]) -> None:
    if not future.set_running_or_notify_cancel():
        return
    try:
        result = fn()
    except BaseException as exc:
        future.set_exception(exc)
    else:
        future.set_result(result)


def run_with_deadline(fn: Callable[[], T], timeout_s: float, name: str = "operation") -> GuardResult[T]:
    """
    Run fn() with a deadline.
    Returns GuardResult(completed=True, value=...) if fn settles in time,
    GuardResult(completed=False) if the deadline passes first.
    An exception raised by fn before the deadline propagates unchanged.
    """
    if timeout_s <= 0:
        raise ValueError(f"timeout for {name} must be positive, got {timeout_s!r}")

    future: Future = Future()
    worker = threading.Thread(target=_run_into, args=(future, fn), name=f"deadline-{name}", daemon=True)
    worker.start()
    try:
        value = future.result(timeout=timeout_s)
    except FutureTimeout:
        return GuardResult(completed=False)
    finally:
        # no-op once settled; otherwise marks the abandoned call so nobody waits on it
        future.cancel()
    return GuardResult(completed=True, value=value)


def call_with_deadline(fn: Callable[[], T], timeout_s: float, name: str = "operation") -> T:
    """Raising form of run_with_deadline: returns the value or raises OperationTimeout."""
    result = run_with_deadline(fn, timeout_s, name=name)
    if not result.completed:
        raise OperationTimeout(name, timeout_s)
    return result.value  # type: ignore[return-value]
