"""Logging setup for the bot process."""

from __future__ import annotations

import logging

LOGGER_NAME = "nft_answer_bot"


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """Configure the root logger and return the application logger."""

    resolved_level = _coerce_level(level)
    logging.basicConfig(
        level=resolved_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolved_level)
    # HTTP client chatter at DEBUG drowns the per-item lines
    for noisy in ("urllib3", "httpx", "httpcore", "openai"):
        logging.getLogger(noisy).setLevel(max(resolved_level, logging.WARNING))
    return logger


def _coerce_level(level: str | int | None) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        resolved = getattr(logging, level.upper(), None)
        if isinstance(resolved, int):
            return resolved
    return logging.INFO


__all__ = ["configure_logging", "LOGGER_NAME"]
