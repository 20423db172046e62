"""Logging helpers shared by the kotoba package and its CLI."""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DEFAULT_LEVEL = logging.INFO
_LOGGING_CONFIGURED = False
_MANAGED_HANDLERS: list[logging.Handler] = []


def _resolve_level(level: str | int | None) -> int:
    """Resolves an explicit level, then LOG_LEVEL, then INFO."""
    candidate: str | int | None = level
    if candidate is None:
        candidate = os.getenv("LOG_LEVEL")
    if candidate is None:
        return _DEFAULT_LEVEL
    if isinstance(candidate, int):
        return candidate
    normalized = candidate.strip().upper()
    if normalized.isdigit():
        return int(normalized)
    resolved = logging.getLevelName(normalized)
    if isinstance(resolved, int):
        return resolved
    return _DEFAULT_LEVEL


def configure_logging(level: str | int | None = None) -> int:
    """Configures root logging once and returns the applied numeric level."""
    global _LOGGING_CONFIGURED
    resolved_level = _resolve_level(level)
    root_logger = logging.getLogger()
    if not _LOGGING_CONFIGURED and not root_logger.handlers:
        logging.basicConfig(format=LOG_FORMAT, level=resolved_level)
        _MANAGED_HANDLERS[:] = root_logger.handlers
    # Handlers installed here follow every later level change.
    for handler in _MANAGED_HANDLERS:
        handler.setLevel(resolved_level)
    root_logger.setLevel(resolved_level)
    _LOGGING_CONFIGURED = True
    return resolved_level


def get_logger(name: str) -> logging.Logger:
    """Returns a module logger, configuring defaults on first use."""
    if not _LOGGING_CONFIGURED:
        configure_logging()
    return logging.getLogger(name)
