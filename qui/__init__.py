"""GUI library using QML.

Usage:
    from qui import App, QuickView

    with App() as app:
        app.set_name("Hello world")
        app.set_style("Material")
        with QuickView(app) as view:
            view.set_source("hello_world.qml")
            view.show()
            code = app.exec()
"""

from .app import App, AppRef
from .errors import UsageError
from .native import LogLevel
from .quick_view import QuickView

__all__ = ["App", "AppRef", "LogLevel", "QuickView", "UsageError"]
