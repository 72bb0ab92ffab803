from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

_SET_UP_LOGGERS: dict[str, logging.Logger] = {}
"""Loggers created by `get_logger`, by name."""
_FILE_HANDLERS: dict[logging.Handler, str] = {}
"""Active file handlers and the logger name prefix they collect."""

logging.TRACE = 5  # type: ignore
logging.addLevelName(logging.TRACE, "TRACE")  # type: ignore


def _interpret_level(level: int | str | None, *, default: int) -> int:
    if not level:
        return default
    if isinstance(level, int):
        return level
    if level.isnumeric():
        return int(level)
    return getattr(logging, level.upper())


_STREAM_LEVEL = _interpret_level(os.environ.get("BUILDKEEPER_LOG_STREAM_LEVEL"), default=logging.INFO)
_FILE_LEVEL = _interpret_level(os.environ.get("BUILDKEEPER_LOG_FILE_LEVEL"), default=logging.INFO)


class _RichHandlerWithEmoji(RichHandler):
    def __init__(self, emoji: str, *args, **kwargs):
        """RichHandler that prefixes the level with an emoji naming the component."""
        super().__init__(*args, **kwargs)
        if emoji and not emoji.endswith(" "):
            emoji += " "
        self.emoji = emoji

    def get_level_text(self, record: logging.LogRecord) -> Text:
        level_name = record.levelname.replace("WARNING", "WARN")
        return Text.styled((self.emoji + level_name).ljust(10), f"logging.level.{level_name.lower()}")


def get_logger(name: str, *, emoji: str = "") -> logging.Logger:
    """Get logger. Use this instead of `logging.getLogger`.

    Messages go to stderr (stdout is reserved for command output, e.g., the
    logins printed by `list-readers`) and never propagate to the root logger,
    so a host application's logging configuration does not swallow them.
    """
    if name in _SET_UP_LOGGERS:
        return _SET_UP_LOGGERS[name]
    logger = logging.getLogger(name)
    handler = _RichHandlerWithEmoji(
        emoji=emoji,
        show_time=bool(os.environ.get("BUILDKEEPER_LOG_TIME", False)),
        show_path=False,
        console=Console(stderr=True),
    )
    handler.setLevel(_STREAM_LEVEL)
    logger.setLevel(min(_STREAM_LEVEL, _FILE_LEVEL, logging.TRACE))  # type: ignore
    logger.addHandler(handler)
    logger.propagate = False
    _SET_UP_LOGGERS[name] = logger
    for file_handler, prefix in _FILE_HANDLERS.items():
        if name.startswith(prefix):
            logger.addHandler(file_handler)
    return logger


@contextmanager
def log_to_file(path: Path, *, prefix: str = "bk-", level: int | str | None = None) -> Iterator[logging.Handler]:
    """Copy the messages of all loggers whose name starts with `prefix` to `path`
    while the context is active. This includes loggers created inside the context.
    """
    handler = logging.FileHandler(path)
    handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s"))
    handler.setLevel(_interpret_level(level, default=_FILE_LEVEL))
    _FILE_HANDLERS[handler] = prefix
    for name, logger in _SET_UP_LOGGERS.items():
        if name.startswith(prefix):
            logger.addHandler(handler)
    try:
        yield handler
    finally:
        del _FILE_HANDLERS[handler]
        for logger in _SET_UP_LOGGERS.values():
            logger.removeHandler(handler)
        handler.close()
