"""QML application lifecycle.

`App` owns the single Qt application of the process. It is confined to the
thread that created it but hands out `AppRef` references, which can be cloned
and used from any thread. Every `AppRef` must be released before the `App`
is closed.

A process-wide slot keeps a weak reference to the live application so that
`AppRef.get()` can find it without holding one already.
"""

from __future__ import annotations

import contextlib
import sys
import threading
import weakref
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from qui.errors import UsageError
from qui.log_bridge import log_callback
from qui.logger import get_logger
from qui.native import Toolkit, decode_native_text

_logger = get_logger("app")


class RWLock:
    """Reader/writer lock. Waiting writers block new readers."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self, blocking: bool = True) -> bool:
        with self._cond:
            if self._writer or self._writers_waiting:
                if not blocking:
                    return False
                while self._writer or self._writers_waiting:
                    self._cond.wait()
            self._readers += 1
            return True

    def release_read(self) -> None:
        with self._cond:
            if self._readers <= 0:
                raise RuntimeError("release_read() without a matching acquire")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            if not self._writer:
                raise RuntimeError("release_write() without a matching acquire")
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


class _AppState:
    """State shared by an `App` and all its `AppRef` references."""

    def __init__(self, toolkit: Toolkit, argv: list[str]) -> None:
        self.toolkit = toolkit
        # Owned copy; must stay valid for the native application's lifetime.
        self.args: list[str] = [str(a) for a in argv]
        self.handle: Any = None
        self.deleted = False
        self.leaked = False
        self.lock = threading.RLock()
        self._refs = 0
        self._refs_lock = threading.Lock()

    def incref(self) -> None:
        with self._refs_lock:
            self._refs += 1

    def decref(self) -> None:
        with self._refs_lock:
            self._refs -= 1

    @property
    def ref_count(self) -> int:
        with self._refs_lock:
            return self._refs


class AppSlot:
    """Lock-guarded weak reference to the live application state."""

    def __init__(self) -> None:
        self._lock = RWLock()
        self._ref: weakref.ref[_AppState] | None = None

    def _resolve(self) -> _AppState | None:
        state = self._ref() if self._ref is not None else None
        if state is None or state.deleted:
            return None
        return state

    @contextmanager
    def try_read(self) -> Iterator[_AppState | None]:
        """Yield the live state, or None if there is none or a writer is active.

        The read lock is held for the body of the `with` block.
        """
        if not self._lock.acquire_read(blocking=False):
            yield None
            return
        try:
            yield self._resolve()
        finally:
            self._lock.release_read()

    @contextmanager
    def writing(self) -> Iterator[AppSlot]:
        with self._lock.write_locked():
            yield self

    def peek(self) -> _AppState | None:
        """Resolve the slot; caller must hold the write lock."""
        return self._resolve()

    def publish(self, state: _AppState) -> None:
        self._ref = weakref.ref(state)

    def clear(self) -> None:
        self._ref = None


_SLOT = AppSlot()

# References deliberately kept alive when an App is closed while still in use.
_LEAKED: list[AppRef] = []


class AppRef:
    """Shared reference to the `App` instance.

    Safe to clone, pass and release from any thread. All references must be
    released before the `App` is closed.
    """

    def __init__(self, state: _AppState) -> None:
        state.incref()
        self._state = state
        self._released = False
        self._release_lock = threading.Lock()

    @staticmethod
    def get() -> AppRef | None:
        """Return a new reference to the live `App`, if any.

        Does not wait: returns None when the application is being created or
        destroyed on another thread.
        """
        with _SLOT.try_read() as state:
            return AppRef(state) if state is not None else None

    def clone(self) -> AppRef:
        return AppRef(self._state)

    def release(self) -> None:
        with self._release_lock:
            if self._released:
                return
            self._released = True
        self._state.decref()

    @property
    def released(self) -> bool:
        return self._released

    @property
    def strong_count(self) -> int:
        return self._state.ref_count

    def _live_state(self) -> _AppState:
        if self._released:
            raise UsageError("AppRef used after release().")
        state = self._state
        if state.deleted:
            raise UsageError("The QML application has been deleted.")
        return state

    def name(self) -> str:
        """Returns the QML application name."""
        state = self._live_state()
        with state.lock:
            raw = state.toolkit.app_name(state.handle)
        return decode_native_text(raw)

    def set_name(self, name: str) -> None:
        """Sets the QML application name."""
        state = self._live_state()
        with state.lock:
            state.toolkit.app_set_name(state.handle, name)

    def set_style(self, style: str) -> None:
        """Sets the Qt Quick Controls 2 style.

        The style must be set before loading QML components and cannot be
        changed afterwards.
        """
        state = self._live_state()
        with state.lock:
            state.toolkit.app_set_style(state.handle, style)

    def __enter__(self) -> AppRef:
        return self

    def __exit__(self, *exc: object) -> None:
        self.release()

    def __del__(self) -> None:
        with contextlib.suppress(Exception):
            self.release()

    def __repr__(self) -> str:
        status = "released" if self._released else f"refs={self._state.ref_count}"
        return f"<AppRef {status}>"


class App:
    """QML application.

    Only one instance can exist at any given time. The application is bound
    to the thread that created it; use `new_ref()` to reach it from other
    threads. Close it with `close()` or by using it as a context manager; an
    App dropped without either is torn down when it is garbage-collected.

    The type of application created is currently a `QGuiApplication`, but
    this may change and should not be relied on.
    """

    def __init__(self, argv: list[str] | None = None, toolkit: Toolkit | None = None) -> None:
        if toolkit is None:
            from qui.qt_toolkit import QtToolkit  # noqa: PLC0415

            toolkit = QtToolkit()
        with _SLOT.writing() as slot:
            if slot.peek() is not None:
                raise UsageError("There can be only one instance of a QML application.")
            state = _AppState(toolkit, list(sys.argv) if argv is None else argv)
            state.handle = toolkit.app_new(state.args, log_callback)
            self._ref = AppRef(state)
            slot.publish(state)
        self._slot = slot
        self._thread_id = threading.get_ident()
        self._running = False
        self._closed = False
        # Tears down an App that goes out of scope without close().
        self._finalizer = weakref.finalize(self, _finalize_app, self._ref, slot, self._thread_id)
        _logger.debug("application created (argv=%s)", state.args)

    def _check_thread(self, op: str) -> None:
        if threading.get_ident() != self._thread_id:
            raise UsageError(f"App.{op}() must be called from the thread that created the App.")

    def _live_ref(self) -> AppRef:
        if self._closed:
            raise UsageError("The QML application has been closed.")
        return self._ref

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def toolkit(self) -> Toolkit:
        return self._live_ref()._state.toolkit

    def new_ref(self) -> AppRef:
        """Gets a new reference to the application instance."""
        return self._live_ref().clone()

    def name(self) -> str:
        return self._live_ref().name()

    def set_name(self, name: str) -> None:
        self._live_ref().set_name(name)

    def set_style(self, style: str) -> None:
        self._live_ref().set_style(style)

    def quit_after(self, delay_ms: int = 0, exit_code: int = 0) -> None:
        """Asks the event loop to exit with `exit_code` after `delay_ms`."""
        self._check_thread("quit_after")
        state = self._live_ref()._live_state()
        state.toolkit.app_schedule_quit(state.handle, delay_ms, exit_code)

    def exec(self) -> int:
        """Runs the application event loop and returns its exit code."""
        self._check_thread("exec")
        if self._running:
            raise UsageError("App.exec() is not re-entrant.")
        state = self._live_ref()._live_state()
        self._running = True
        try:
            code = state.toolkit.app_exec(state.handle)
        finally:
            self._running = False
        _logger.debug("event loop exited with code %s", code)
        return code

    def close(self) -> None:
        """Deletes the QML application.

        Raises UsageError if `AppRef` references are still outstanding. In
        that case the native application is leaked on purpose: it must be
        destroyed on the thread that created it, and other threads can still
        reach it.
        """
        if self._closed:
            return
        self._check_thread("close")
        if not _teardown(self._ref, self._slot):
            raise UsageError("Cannot delete QML application while it is still referenced.")
        self._finalizer.detach()
        self._closed = True

    def __enter__(self) -> App:
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc: BaseException | None, tb: object) -> None:
        if exc_type is None:
            self.close()
            return
        # Let the exception from the body through; the failed close is logged.
        try:
            self.close()
        except UsageError as e:
            _logger.error("App not closed while handling %s: %s", exc_type.__name__, e)


def _teardown(ref: AppRef, slot: AppSlot) -> bool:
    """Delete the native application owned through `ref`.

    Returns False, leaving the application alive, when other references are
    still outstanding. The first such attempt leaks one reference so the
    count can never drop to zero.
    """
    state = ref._state
    with slot.writing():
        rc = ref.strong_count
        if rc > 1:
            if not state.leaked:
                state.leaked = True
                _LEAKED.append(ref.clone())
            _logger.error("QML application closed while still referenced; leaking it")
            return False
        slot.clear()
        state.toolkit.app_delete(state.handle)
        state.deleted = True
    ref.release()
    _logger.debug("application deleted")
    return True


def _finalize_app(ref: AppRef, slot: AppSlot, thread_id: int) -> None:
    # Runs when an App is garbage-collected without close().
    if threading.get_ident() != thread_id:
        state = ref._state
        if not state.leaked:
            state.leaked = True
            _LEAKED.append(ref.clone())
        _logger.error("QML application dropped on a foreign thread; leaking it")
        return
    _teardown(ref, slot)
