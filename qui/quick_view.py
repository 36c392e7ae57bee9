"""QML view: wraps `QQuickView`."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

from qui.app import App
from qui.errors import UsageError
from qui.logger import get_logger

_logger = get_logger("quick_view")


def is_url(text: str) -> bool:
    # A one-letter scheme is a Windows drive, not a URL.
    return len(urlsplit(text).scheme) > 1


def to_scene_url(source: str | os.PathLike[str]) -> str:
    """Turn a URL or filesystem path into an absolute URL string.

    Strings with a scheme (``file:``, ``qrc:``, ``http:``...) are kept as-is;
    anything else is treated as a local path and made absolute.
    """
    if isinstance(source, os.PathLike):
        return Path(source).resolve().as_uri()
    text = str(source).strip()
    if not text:
        raise ValueError("empty scene source")
    if is_url(text):
        return text
    return Path(text).resolve().as_uri()


class QuickView:
    """View to load a QML scene.

    The view does not own `app`, but `app` must stay open for as long as the
    view exists.
    """

    def __init__(self, app: App) -> None:
        if app.closed:
            raise UsageError("QuickView requires an open App.")
        self._toolkit = app.toolkit
        self._view: Any = self._toolkit.quick_view_new()
        self._source: str | None = None
        self._visible = False

    @property
    def source(self) -> str | None:
        return self._source

    @property
    def visible(self) -> bool:
        return self._visible

    @property
    def closed(self) -> bool:
        return self._view is None

    def _native(self) -> Any:
        if self._view is None:
            raise UsageError("QuickView used after close().")
        return self._view

    def set_source(self, source: str | os.PathLike[str]) -> None:
        """Loads a QML file into the view.

        Load errors are reported by Qt through the log bridge, not raised.
        """
        view = self._native()
        url = to_scene_url(source)
        _logger.debug("loading scene %s", url)
        self._toolkit.quick_view_set_source(view, url)
        self._source = url

    def show(self) -> None:
        """Makes the view visible."""
        view = self._native()
        if self._visible:
            return
        self._toolkit.quick_view_show(view)
        self._visible = True

    def close(self) -> None:
        if self._view is None:
            return
        view, self._view = self._view, None
        self._visible = False
        self._toolkit.quick_view_delete(view)

    def __enter__(self) -> QuickView:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
