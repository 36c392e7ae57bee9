from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

import qui.main as main_mod
from qui import AppRef
from tests.helpers.fake_toolkit import FakeToolkit


@pytest.fixture
def fake(monkeypatch) -> FakeToolkit:
    tk = FakeToolkit()
    monkeypatch.setattr("qui.main._default_toolkit", lambda: tk)
    monkeypatch.setenv("QUI_LOG_LEVEL", "")
    monkeypatch.setenv("QUI_LOG_CATS", "")
    return tk


def test_run_shows_bundled_scene_by_default(fake):
    code = main_mod.run(["qui"])

    assert code == 0
    assert fake.apps[0].name == "qui"
    assert fake.views[0].source == main_mod.DEFAULT_SCENE.as_uri()
    assert fake.views[0].show_calls == 1
    assert fake.views[0].deleted
    assert fake.apps[0].deleted
    assert AppRef.get() is None


def test_bundled_scene_ships_with_package():
    assert main_mod.DEFAULT_SCENE.is_file()


def test_run_applies_cli_options(fake, tmp_path: Path):
    scene = tmp_path / "main.qml"
    scene.write_text("import QtQuick\nItem {}\n", encoding="utf-8")

    code = main_mod.run(
        ["qui", str(scene), "--name", "Hello world", "--style", "Material", "--quit-after", "5"]
    )

    assert code == 0
    handle = fake.apps[0]
    assert handle.name == "Hello world"
    assert handle.style == "Material"
    assert ("app_schedule_quit", 5, 0) in fake.calls
    assert fake.views[0].source == scene.resolve().as_uri()
    # Style must reach the toolkit before the scene is loaded.
    names = fake.call_names()
    assert names.index("app_set_style") < names.index("quick_view_set_source")


def test_run_passes_remaining_args_to_toolkit(fake):
    main_mod.run(["qui", "-reverse", "--log-level", "debug"])
    assert fake.apps[0].argv == ["qui", "-reverse"]
    assert os.environ["QUI_LOG_LEVEL"] == "debug"


def test_run_reads_settings_file(fake, tmp_path: Path):
    scene = tmp_path / "from_settings.qml"
    scene.write_text("import QtQuick\nItem {}\n", encoding="utf-8")
    settings_file = tmp_path / "settings.json"
    settings_file.write_text(
        json.dumps({"app_name": "Configured", "style": "Fusion", "scene": str(scene)}), encoding="utf-8"
    )

    main_mod.run(["qui", "--settings", str(settings_file), "--style", "Material"])

    handle = fake.apps[0]
    assert handle.name == "Configured"
    # CLI wins over the settings file.
    assert handle.style == "Material"
    assert fake.views[0].source == scene.resolve().as_uri()


def test_run_returns_exit_code_unchanged(fake):
    fake.exit_code = 9
    assert main_mod.run(["qui"]) == 9


def test_run_missing_scene_returns_2(fake, tmp_path: Path):
    code = main_mod.run(["qui", str(tmp_path / "missing.qml")])
    assert code == 2
    assert fake.calls == []


def test_run_accepts_url_scene_without_file(fake):
    assert main_mod.run(["qui", "qrc:/missing/main.qml", "--quit-after", "0"]) == 0
    assert fake.views[0].source == "qrc:/missing/main.qml"
