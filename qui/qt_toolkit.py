"""PySide6 implementation of the native toolkit surface."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import shiboken6
from PySide6.QtCore import QMessageLogContext, QtMsgType, QTimer, QUrl, qInstallMessageHandler
from PySide6.QtGui import QGuiApplication
from PySide6.QtQuick import QQuickView
from PySide6.QtQuickControls2 import QQuickStyle

from qui.native import LogCallback, LogLevel

_MSG_LEVELS = {
    QtMsgType.QtFatalMsg: LogLevel.ERROR,
    QtMsgType.QtCriticalMsg: LogLevel.ERROR,
    QtMsgType.QtWarningMsg: LogLevel.WARN,
    QtMsgType.QtInfoMsg: LogLevel.INFO,
    QtMsgType.QtDebugMsg: LogLevel.DEBUG,
}


@dataclass
class QtAppHandle:
    app: QGuiApplication
    # Qt keeps pointers into argv for the application's lifetime.
    argv: list[str] = field(default_factory=list)
    previous_handler: Any = None


def _make_message_handler(log_callback: LogCallback):
    def _handler(mode: QtMsgType, context: QMessageLogContext, message: str) -> None:
        level = _MSG_LEVELS.get(mode, LogLevel.INFO)
        log_callback(level, message, context.file, int(context.line or 0), context.category)

    return _handler


class QtToolkit:
    """Qt Quick application and view calls routed through PySide6."""

    def app_new(self, argv: list[str], log_callback: LogCallback) -> QtAppHandle:
        args = list(argv)
        previous = qInstallMessageHandler(_make_message_handler(log_callback))
        app = QGuiApplication(args)
        return QtAppHandle(app=app, argv=args, previous_handler=previous)

    def app_delete(self, handle: QtAppHandle) -> None:
        qInstallMessageHandler(handle.previous_handler)
        if shiboken6.isValid(handle.app):
            shiboken6.delete(handle.app)

    def app_exec(self, handle: QtAppHandle) -> int:
        return int(handle.app.exec())

    def app_name(self, handle: QtAppHandle) -> str:
        return QGuiApplication.applicationName()

    def app_set_name(self, handle: QtAppHandle, name: str) -> None:
        QGuiApplication.setApplicationName(name)

    def app_set_style(self, handle: QtAppHandle, style: str) -> None:
        QQuickStyle.setStyle(style)

    def app_schedule_quit(self, handle: QtAppHandle, delay_ms: int, exit_code: int) -> None:
        QTimer.singleShot(max(0, int(delay_ms)), lambda: QGuiApplication.exit(int(exit_code)))

    def quick_view_new(self) -> QQuickView:
        view = QQuickView()
        view.setResizeMode(QQuickView.ResizeMode.SizeRootObjectToView)
        return view

    def quick_view_delete(self, view: QQuickView) -> None:
        if shiboken6.isValid(view):
            shiboken6.delete(view)

    def quick_view_set_source(self, view: QQuickView, url: str) -> None:
        view.setSource(QUrl(url))

    def quick_view_show(self, view: QQuickView) -> None:
        view.show()
