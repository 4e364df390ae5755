"""
Failure kinds raised by the bot components.

Every error the poll loop is expected to catch derives from BotError. Facades
wrap lower-level exceptions (cosmpy, openai, deadline expiry) with `raise ... from`
so the original cause stays attached for logging.
"""

from __future__ import annotations

from typing import Iterable


class BotError(Exception):
    """Base class for expected bot failures."""

    def __init__(self, operation: str, detail: str = "") -> None:
        self.operation = operation
        self.detail = detail
        super().__init__(f"{operation}: {detail}" if detail else operation)

    @property
    def timed_out(self) -> bool:
        """True when this failure was caused by a missed deadline."""
        return isinstance(self, OperationTimeout) or isinstance(self.__cause__, OperationTimeout)


class OperationTimeout(BotError):
    def __init__(self, operation: str, timeout_s: float) -> None:
        self.timeout_s = timeout_s
        super().__init__(operation, f"no result after {timeout_s:g}s")


class QueryFailed(BotError):
    pass


class CompletionFailed(BotError):
    pass


class SubmissionFailed(BotError):
    pass


class ConfigMissing(BotError):
    def __init__(self, names: Iterable[str]) -> None:
        self.names = tuple(names)
        super().__init__("config", "missing required setting(s): " + ", ".join(self.names))
