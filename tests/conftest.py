"""Pytest configuration.

Only one Qt application may exist per process, and `qui.App` creates it
itself, so this suite never creates a session-wide QApplication. Unit tests
run against `tests.helpers.fake_toolkit.FakeToolkit`; the live Qt smoke test
runs the launcher in a subprocess.

Each test gets its own application slot so a deliberately leaked App in one
test cannot block creation in the next.
"""

from __future__ import annotations

import logging
import os

import pytest

from qui import app as app_mod
from qui.logger import TRACE, get_logger
from tests.helpers.fake_toolkit import FakeToolkit


def pytest_configure(config) -> None:  # noqa: ARG001
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(autouse=True)
def fresh_slot(monkeypatch):
    monkeypatch.setattr(app_mod, "_SLOT", app_mod.AppSlot())
    monkeypatch.setattr(app_mod, "_LEAKED", [])


@pytest.fixture
def toolkit() -> FakeToolkit:
    return FakeToolkit()


class _Collector(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.NOTSET)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


def _collect(name: str):
    base = get_logger()
    old_level = base.level
    base.setLevel(TRACE)
    collector = _Collector()
    target = logging.getLogger(name)
    target.addHandler(collector)
    try:
        yield collector.records
    finally:
        target.removeHandler(collector)
        base.setLevel(old_level)


@pytest.fixture
def native_records():
    """Collect records emitted under the `qui.native` logger at any level."""
    yield from _collect("qui.native")


@pytest.fixture
def app_records():
    yield from _collect("qui.app")
