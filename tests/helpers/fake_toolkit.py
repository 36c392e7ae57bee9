"""In-memory toolkit used by unit tests.

Implements the same call surface as `qui.qt_toolkit.QtToolkit` and records
every call so tests can assert on the sequence of native operations.
"""

from __future__ import annotations

from typing import Any


class FakeAppHandle:
    def __init__(self, argv: list[str], log_callback: Any) -> None:
        self.argv = argv
        self.log_callback = log_callback
        self.name: str | bytes = ""
        self.style = ""
        self.quit_code: int | None = None
        self.deleted = False


class FakeViewHandle:
    def __init__(self) -> None:
        self.source: str | None = None
        self.show_calls = 0
        self.deleted = False


class FakeToolkit:
    def __init__(self, exit_code: int = 0) -> None:
        self.calls: list[tuple] = []
        self.apps: list[FakeAppHandle] = []
        self.views: list[FakeViewHandle] = []
        self.exit_code = exit_code
        # When set, app_name() returns these bytes instead of the stored name.
        self.raw_name: bytes | None = None
        # Called from inside app_exec(), i.e. while the event loop "runs".
        self.on_exec: Any = None

    def app_new(self, argv: list[str], log_callback: Any) -> FakeAppHandle:
        self.calls.append(("app_new", list(argv)))
        handle = FakeAppHandle(argv, log_callback)
        self.apps.append(handle)
        return handle

    def app_delete(self, handle: FakeAppHandle) -> None:
        self.calls.append(("app_delete",))
        handle.deleted = True

    def app_exec(self, handle: FakeAppHandle) -> int:
        self.calls.append(("app_exec",))
        if self.on_exec is not None:
            self.on_exec(handle)
        return handle.quit_code if handle.quit_code is not None else self.exit_code

    def app_name(self, handle: FakeAppHandle) -> str | bytes:
        if self.raw_name is not None:
            return self.raw_name
        return handle.name

    def app_set_name(self, handle: FakeAppHandle, name: str) -> None:
        self.calls.append(("app_set_name", name))
        handle.name = name

    def app_set_style(self, handle: FakeAppHandle, style: str) -> None:
        self.calls.append(("app_set_style", style))
        handle.style = style

    def app_schedule_quit(self, handle: FakeAppHandle, delay_ms: int, exit_code: int) -> None:
        self.calls.append(("app_schedule_quit", delay_ms, exit_code))
        handle.quit_code = exit_code

    def quick_view_new(self) -> FakeViewHandle:
        self.calls.append(("quick_view_new",))
        view = FakeViewHandle()
        self.views.append(view)
        return view

    def quick_view_delete(self, view: FakeViewHandle) -> None:
        self.calls.append(("quick_view_delete",))
        view.deleted = True

    def quick_view_set_source(self, view: FakeViewHandle, url: str) -> None:
        self.calls.append(("quick_view_set_source", url))
        view.source = url

    def quick_view_show(self, view: FakeViewHandle) -> None:
        self.calls.append(("quick_view_show",))
        view.show_calls += 1

    def call_names(self) -> list[str]:
        return [c[0] for c in self.calls]
