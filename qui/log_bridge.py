"""Forward native toolkit log messages into Python logging.

`log_callback` is handed to the toolkit once, when the application is
created. The toolkit may call it from any of its threads, and nothing raised
inside it may travel back into the toolkit's call stack.
"""

from __future__ import annotations

import contextlib
import logging
import sys
from typing import Any

from qui.logger import TRACE, get_logger
from qui.native import LogLevel, decode_native_text

_native_logger = get_logger("native")

_LEVELS: dict[int, int] = {
    LogLevel.ERROR: logging.ERROR,
    LogLevel.WARN: logging.WARNING,
    LogLevel.INFO: logging.INFO,
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.TRACE: TRACE,
}


def to_logging_level(level: Any) -> int:
    try:
        return _LEVELS.get(int(level), logging.INFO)
    except (TypeError, ValueError):
        return logging.INFO


def native_logger(category: str) -> logging.Logger:
    return _native_logger.getChild(category or "default")


def forward_log(level: Any, message: Any, file: Any, line: Any, category: Any) -> None:
    # Copy every borrowed view before doing anything else with it.
    msg = decode_native_text(message)
    src = decode_native_text(file)
    target = decode_native_text(category)
    native_logger(target).log(to_logging_level(level), "[%s:%s] %s", src, line, msg)


def log_callback(level: Any, message: Any, file: Any, line: Any, category: Any) -> None:
    """Entry point registered with the native toolkit. Never raises."""
    try:
        forward_log(level, message, file, line, category)
    except BaseException as e:
        with contextlib.suppress(Exception):
            fallback = sys.__stderr__
            if fallback is not None:
                fallback.write(f"qui: dropped native log record: {e!r}\n")
