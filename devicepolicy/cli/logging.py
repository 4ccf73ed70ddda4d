"""
CLI logging setup.

SDK modules log under the ``devicepolicy`` logger; the CLI routes those records
to stderr through rich, with the API token masked out of every message.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from rich.console import Console
from rich.logging import RichHandler

_ROOT_LOGGER = "devicepolicy"
_REDACTED = "***"

_redaction_token: str | None = None


def set_redaction_api_token(token: str | None) -> None:
    global _redaction_token
    _redaction_token = token or None


class _RedactingFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        token = _redaction_token
        if token:
            message = record.getMessage()
            if token in message:
                record.msg = message.replace(token, _REDACTED)
                record.args = None
        return True


@dataclass(frozen=True, slots=True)
class PreviousLoggingState:
    level: int
    handlers: list[logging.Handler]
    propagate: bool


def _level_for(verbosity: int) -> int:
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


def configure_logging(*, verbosity: int, quiet: bool = False) -> PreviousLoggingState:
    """Attach a stderr rich handler to the SDK logger; returns the state to restore."""
    logger = logging.getLogger(_ROOT_LOGGER)
    previous = PreviousLoggingState(
        level=logger.level,
        handlers=list(logger.handlers),
        propagate=logger.propagate,
    )

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=verbosity >= 2,
    )
    handler.addFilter(_RedactingFilter())
    logger.handlers = [handler]
    logger.setLevel(logging.ERROR if quiet else _level_for(verbosity))
    logger.propagate = False
    return previous


def restore_logging(previous: PreviousLoggingState) -> None:
    logger = logging.getLogger(_ROOT_LOGGER)
    logger.handlers = previous.handlers
    logger.setLevel(previous.level)
    logger.propagate = previous.propagate
