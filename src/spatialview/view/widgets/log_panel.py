"""
Log Panel
=========
Scrolling list of LogEvents, newest at the bottom, with the level colored.
"""
from __future__ import annotations

from typing import Optional

from PySide6.QtGui import QBrush, QColor
from PySide6.QtWidgets import QLabel, QListWidget, QListWidgetItem, QVBoxLayout, QWidget

from spatialview.model.log import LogEvent, LogLevel

LEVEL_COLORS: dict[LogLevel, str] = {
    LogLevel.INFO: "#6b7280",
    LogLevel.SUCCESS: "#22c55e",
    LogLevel.WARNING: "#eab308",
    LogLevel.ERROR: "#ef4444",
}


class LogPanel(QWidget):
    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)

        title = QLabel("<b>Logs</b>")
        layout.addWidget(title)

        self.list_widget = QListWidget()
        self.list_widget.setWordWrap(True)
        self.list_widget.setStyleSheet("QListWidget { font-family: monospace; }")
        layout.addWidget(self.list_widget)

    def append_event(self, event: LogEvent) -> None:
        item = QListWidgetItem(event.format())
        item.setForeground(QBrush(QColor(LEVEL_COLORS[event.level])))
        self.list_widget.addItem(item)
        self.list_widget.scrollToBottom()

    def clear(self) -> None:
        self.list_widget.clear()
