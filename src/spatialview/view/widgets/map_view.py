"""
Map View
========
Shows a folium map inside a QWebEngineView.

Small documents are passed to `setHtml` directly. Qt caps that call at about
2 MB, so larger ones are written to a temporary file and loaded by URL.
"""
from __future__ import annotations

import logging
import os
import tempfile
from typing import Optional

from PySide6.QtCore import QUrl
from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import QVBoxLayout, QWidget

from spatialview.model.geojson import FeatureCollection
from spatialview.model.viewport import DEFAULT_VIEWPORT, Viewport
from spatialview.view.map_builder import build_feature_map, render_html

logger = logging.getLogger(__name__)

SET_HTML_LIMIT = 1_500_000


class MapView(QWidget):
    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.web_view = QWebEngineView(self)
        layout.addWidget(self.web_view)

        self._temp_path: Optional[str] = None
        self.show_collection(FeatureCollection(), DEFAULT_VIEWPORT)

    def show_collection(self, collection: FeatureCollection, viewport: Viewport) -> None:
        html = render_html(build_feature_map(collection, viewport))
        self._cleanup_temp()
        if len(html.encode("utf-8")) < SET_HTML_LIMIT:
            self.web_view.setHtml(html, QUrl("https://localhost/"))
            return

        fd, path = tempfile.mkstemp(suffix=".html", prefix="spatialview_map_")
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(html)
        self._temp_path = path
        logger.debug(f"Map document written to {path}")
        self.web_view.setUrl(QUrl.fromLocalFile(path))

    def clear(self) -> None:
        self.show_collection(FeatureCollection(), DEFAULT_VIEWPORT)

    def _cleanup_temp(self) -> None:
        if self._temp_path is None:
            return
        try:
            os.remove(self._temp_path)
        except OSError as e:
            logger.warning(f"Could not delete temp file '{self._temp_path}': {e}")
        self._temp_path = None

    def closeEvent(self, event) -> None:
        self._cleanup_temp()
        super().closeEvent(event)
