"""Native toolkit surface.

The toolkit is reached only through the function table described by
`Toolkit`. `qui.qt_toolkit.QtToolkit` implements it on top of PySide6; tests
plug in an in-memory implementation.

Text coming back from the toolkit is treated as borrowed: callers copy it
into an owned `str` with `decode_native_text` before keeping it.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import IntEnum
from typing import Any, Protocol

NativeText = str | bytes | bytearray | memoryview | None


class LogLevel(IntEnum):
    ERROR = 1
    WARN = 2
    INFO = 3
    DEBUG = 4
    TRACE = 5


# (level, message, file, line, category)
LogCallback = Callable[[Any, NativeText, NativeText, int, NativeText], None]


def decode_native_text(value: Any) -> str:
    """Copy a native string view into an owned `str`.

    Bytes-like values are decoded as UTF-8 with invalid sequences replaced;
    `None` becomes an empty string.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    # QByteArray and friends expose .data()
    data = getattr(value, "data", None)
    if callable(data):
        raw = data()
        if isinstance(raw, (bytes, bytearray, memoryview)):
            return bytes(raw).decode("utf-8", errors="replace")
    return str(value)


class Toolkit(Protocol):
    def app_new(self, argv: list[str], log_callback: LogCallback) -> Any: ...

    def app_delete(self, handle: Any) -> None: ...

    def app_exec(self, handle: Any) -> int: ...

    def app_name(self, handle: Any) -> NativeText: ...

    def app_set_name(self, handle: Any, name: str) -> None: ...

    def app_set_style(self, handle: Any, style: str) -> None: ...

    def app_schedule_quit(self, handle: Any, delay_ms: int, exit_code: int) -> None: ...

    def quick_view_new(self) -> Any: ...

    def quick_view_delete(self, view: Any) -> None: ...

    def quick_view_set_source(self, view: Any, url: str) -> None: ...

    def quick_view_show(self, view: Any) -> None: ...
