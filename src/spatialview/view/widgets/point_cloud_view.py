"""
Point-Cloud View (PyVista Wrapper)
==================================
Hosts the render session of the active point-cloud file.

A fresh QtInteractor is created for every session and removed from the layout
when the session is released, so nothing from a previous file survives a file
switch. The overlay row offers the point size and a uniform color override.
"""
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QCloseEvent, QColor, QResizeEvent
from PySide6.QtWidgets import (
    QColorDialog, QDoubleSpinBox, QHBoxLayout, QLabel, QPushButton, QVBoxLayout, QWidget
)
from pyvistaqt import QtInteractor

from spatialview.config import DEFAULT_POINT_SIZE, POINT_SIZE_RANGE
from spatialview.view.render_session import RenderSession, SessionHost

logger = logging.getLogger(__name__)


class PointCloudView(QWidget):
    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)

        self.layout_box: QVBoxLayout = QVBoxLayout(self)
        self.layout_box.setContentsMargins(0, 0, 0, 0)

        self._setup_controls()

        self.placeholder = QLabel("No point cloud loaded.")
        self.placeholder.setAlignment(Qt.AlignCenter)
        self.layout_box.addWidget(self.placeholder, stretch=1)

        self._interactor: Optional[QtInteractor] = None
        self.host = SessionHost(self._create_plotter, on_release=self._release_plotter)

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    @property
    def session(self) -> Optional[RenderSession]:
        return self.host.session

    def begin_session(self) -> int:
        """Dispose the current session, open a new one and return its generation."""
        session = self.host.open(self.width(), self.height())
        session.set_point_size(self.spin_size.value())
        if self._uniform_color is not None:
            session.set_point_color(self._uniform_color)
        return session.generation

    def close_session(self) -> None:
        self.host.close()

    # ------------------------------------------------------------------------------
    # Plotter ownership
    # ------------------------------------------------------------------------------

    def _create_plotter(self) -> QtInteractor:
        self.placeholder.hide()
        self._interactor = QtInteractor(self)
        self.layout_box.addWidget(self._interactor, stretch=1)
        return self._interactor

    def _release_plotter(self, session: RenderSession) -> None:
        if self._interactor is not None:
            self.layout_box.removeWidget(self._interactor)
            self._interactor.deleteLater()
            self._interactor = None
        self.placeholder.show()
        logger.debug(f"Released plotter of session {session.generation}.")

    # ------------------------------------------------------------------------------
    # Overlay controls
    # ------------------------------------------------------------------------------

    def _setup_controls(self) -> None:
        row = QHBoxLayout()
        row.setContentsMargins(4, 4, 4, 4)

        row.addWidget(QLabel("Point size:"))
        self.spin_size = QDoubleSpinBox()
        self.spin_size.setRange(*POINT_SIZE_RANGE)
        self.spin_size.setSingleStep(0.5)
        self.spin_size.setValue(DEFAULT_POINT_SIZE)
        self.spin_size.valueChanged.connect(self.on_point_size_changed)
        row.addWidget(self.spin_size)

        self.btn_color = QPushButton("Color...")
        self.btn_color.clicked.connect(self.on_pick_color)
        row.addWidget(self.btn_color)

        self.btn_reset_color = QPushButton("Height colors")
        self.btn_reset_color.clicked.connect(self.on_reset_color)
        row.addWidget(self.btn_reset_color)

        row.addStretch()
        self.layout_box.addLayout(row)
        self._uniform_color: Optional[str] = None

    def on_point_size_changed(self, value: float) -> None:
        if self.session is not None:
            self.session.set_point_size(value)

    def on_pick_color(self) -> None:
        initial = QColor(self._uniform_color or "#ffffff")
        color = QColorDialog.getColor(initial, self, "Point color")
        if not color.isValid():
            return
        self._uniform_color = color.name()
        if self.session is not None:
            self.session.set_point_color(self._uniform_color)

    def on_reset_color(self) -> None:
        self._uniform_color = None
        if self.session is not None:
            self.session.set_point_color(None)

    # ------------------------------------------------------------------------------
    # Qt events
    # ------------------------------------------------------------------------------

    def resizeEvent(self, event: QResizeEvent) -> None:
        super().resizeEvent(event)
        if self.session is not None:
            self.session.resize(event.size().width(), event.size().height())

    def closeEvent(self, event: QCloseEvent) -> None:
        self.host.close()
        event.accept()
