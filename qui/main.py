"""Command-line launcher: show a QML scene in a `QuickView`."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from qui.app import App
from qui.logger import get_logger, setup_logger
from qui.native import Toolkit
from qui.quick_view import QuickView, is_url
from qui.settings_manager import SettingsManager

DEFAULT_SCENE = Path(__file__).resolve().parent / "qml" / "hello_world.qml"

# --- CLI logging options -----------------------------------------------------
# Qt rejects some unknown options, so our logging options are parsed first,
# reflected in environment variables (QUI_LOG_LEVEL, QUI_LOG_CATS), and
# removed from the argument list before Qt sees it.


def _apply_cli_logging_options(argv: list[str]) -> list[str]:
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--log-level", help="Set log level")
    parser.add_argument("--log-cats", help="Set log categories")
    args, remaining = parser.parse_known_args(argv[1:])
    if args.log_level:
        os.environ["QUI_LOG_LEVEL"] = args.log_level
    if args.log_cats:
        os.environ["QUI_LOG_CATS"] = args.log_cats
    return [argv[0] if argv else "qui", *remaining]


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="qui", description="Show a QML scene.")
    parser.add_argument("scene", nargs="?", help="QML file or URL (default: bundled hello world)")
    parser.add_argument("--name", help="Application name")
    parser.add_argument("--style", help="Qt Quick Controls style, e.g. Material")
    parser.add_argument("--settings", help="Path to a JSON settings file")
    parser.add_argument(
        "--quit-after", type=int, metavar="MS", help="Quit the event loop after MS milliseconds"
    )
    return parser


def _default_toolkit() -> Toolkit:
    from qui.qt_toolkit import QtToolkit  # noqa: PLC0415

    return QtToolkit()


def _scene_exists(scene: str) -> bool:
    return is_url(scene) or Path(scene).is_file()


def run(argv: list[str] | None = None) -> int:
    """Application entrypoint (packaging-friendly)."""
    if argv is None:
        argv = sys.argv
    argv = _apply_cli_logging_options(list(argv))
    args, qt_args = _build_parser().parse_known_args(argv[1:])

    settings = SettingsManager(args.settings) if args.settings else None
    # --log-level and an existing QUI_LOG_LEVEL win over the settings file.
    if settings is not None and settings.has("log_level") and not os.getenv("QUI_LOG_LEVEL"):
        os.environ["QUI_LOG_LEVEL"] = settings.log_level
    setup_logger()
    logger = get_logger("main")

    name = args.name or (settings.app_name if settings else SettingsManager.DEFAULTS["app_name"])
    style = args.style if args.style is not None else (settings.style if settings else "")
    scene = args.scene or (settings.scene if settings else None) or str(DEFAULT_SCENE)

    if not _scene_exists(scene):
        logger.error("scene not found: %s", scene)
        return 2

    with App([argv[0], *qt_args], toolkit=_default_toolkit()) as app:
        app.set_name(name)
        if style:
            app.set_style(style)
        with QuickView(app) as view:
            view.set_source(scene)
            view.show()
            if args.quit_after is not None:
                app.quit_after(args.quit_after)
            code = app.exec()
    logger.info("%s exited with code %d", name, code)
    return code


if __name__ == "__main__":
    raise SystemExit(run())
