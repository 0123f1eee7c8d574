"""
Main Application Window
=======================
The primary GUI container: file list on the left, the active file's view on
the right and the log panel below.

Why is this file needed?
------------------------
1. Layout: It organizes the high-level visual structure of the application.
2. Routing: It turns file selection into pipeline runs. Point clouds are
   decoded by a PointCloudWorker against a fresh render session; GeoJSON is
   decoded on the GUI thread and shown in the map view.
"""
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QCloseEvent
from PySide6.QtWidgets import (
    QFileDialog, QHBoxLayout, QLabel, QListWidget, QListWidgetItem, QMainWindow,
    QPushButton, QSplitter, QStackedWidget, QVBoxLayout, QWidget
)

from spatialview.config import POINT_CLOUD_EXTENSIONS, VECTOR_EXTENSIONS
from spatialview.controller.pipeline import PointCloudLoad, PreparedCloud, announce_upload, load_vector
from spatialview.controller.workers import PointCloudWorker
from spatialview.model.files import SourceFile
from spatialview.model.formats import dialog_filter
from spatialview.model.log import LogBook, LogLevel, emit
from spatialview.model.state import ViewerState
from spatialview.view.widgets.log_panel import LogPanel
from spatialview.view.widgets.map_view import MapView
from spatialview.view.widgets.point_cloud_view import PointCloudView

logger = logging.getLogger(__name__)

VISIBLE_APP_NAME = "Spatial Viewer"

PAGE_WELCOME = 0
PAGE_POINT_CLOUD = 1
PAGE_MAP = 2


class MainWindow(QMainWindow):
    def __init__(self, state: ViewerState, log_book: LogBook) -> None:
        super().__init__()
        self.state: ViewerState = state
        self.log_book: LogBook = log_book

        # In-flight point-cloud loads by session generation
        self._loads: dict[int, PointCloudLoad] = {}
        self._workers: dict[int, PointCloudWorker] = {}

        self.setWindowTitle(VISIBLE_APP_NAME)
        self.resize(1400, 900)

        # --- MAIN CONTAINER ---
        main_widget = QWidget()
        self.setCentralWidget(main_widget)
        main_layout = QHBoxLayout(main_widget)
        main_layout.setContentsMargins(0, 0, 0, 0)

        splitter = QSplitter(Qt.Horizontal)
        main_layout.addWidget(splitter)

        # --- LEFT SIDE: File list ---
        sidebar = QWidget()
        side_layout = QVBoxLayout(sidebar)
        side_layout.addWidget(QLabel("<b>Files</b>"))
        self.file_list = QListWidget()
        side_layout.addWidget(self.file_list)

        buttons = QHBoxLayout()
        self.btn_open = QPushButton("Open...")
        self.btn_remove = QPushButton("Remove")
        buttons.addWidget(self.btn_open)
        buttons.addWidget(self.btn_remove)
        side_layout.addLayout(buttons)
        splitter.addWidget(sidebar)

        # --- RIGHT SIDE: Active view over the log panel ---
        right = QSplitter(Qt.Vertical)
        self.view_stack = QStackedWidget()
        self.view_stack.addWidget(self._build_welcome_page())  # Index 0
        self.point_view = PointCloudView()
        self.view_stack.addWidget(self.point_view)  # Index 1
        self.map_view = MapView()
        self.view_stack.addWidget(self.map_view)  # Index 2
        right.addWidget(self.view_stack)

        self.log_panel = LogPanel()
        right.addWidget(self.log_panel)
        right.setSizes([720, 180])
        splitter.addWidget(right)
        splitter.setSizes([280, 1120])

        # --- SIGNAL CONNECTIONS ---
        self.log_book.subscribe(self.log_panel.append_event)
        self.btn_open.clicked.connect(self.on_file_open)
        self.btn_remove.clicked.connect(self.on_remove_selected)
        self.file_list.currentItemChanged.connect(self.on_current_item_changed)

        self._create_actions()
        self._create_menus()

    # --- UI SETUP ---

    def _build_welcome_page(self) -> QWidget:
        page = QLabel(
            "<h2>Spatial Viewer</h2>"
            "<p>Open a point cloud or a GeoJSON file to begin.</p>"
            f"<p>Point clouds: {', '.join(e.upper() for e in POINT_CLOUD_EXTENSIONS)}<br/>"
            f"Vector data: {', '.join(e.upper() for e in VECTOR_EXTENSIONS)}</p>"
        )
        page.setAlignment(Qt.AlignCenter)
        return page

    def _create_actions(self) -> None:
        self.act_open = QAction("Open...", self)
        self.act_open.setShortcut("Ctrl+O")
        self.act_open.triggered.connect(self.on_file_open)

        self.act_remove = QAction("Remove File", self)
        self.act_remove.setShortcut("Del")
        self.act_remove.triggered.connect(self.on_remove_selected)

        self.act_clear_log = QAction("Clear Log View", self)
        self.act_clear_log.triggered.connect(self.log_panel.clear)

        self.act_exit = QAction("Exit", self)
        self.act_exit.triggered.connect(self.close)

    def _create_menus(self) -> None:
        file_menu = self.menuBar().addMenu("&File")
        file_menu.addAction(self.act_open)
        file_menu.addAction(self.act_remove)
        file_menu.addSeparator()
        file_menu.addAction(self.act_clear_log)
        file_menu.addSeparator()
        file_menu.addAction(self.act_exit)

    # --- FILE HANDLING ---

    def on_file_open(self) -> None:
        paths, _ = QFileDialog.getOpenFileNames(self, "Open Files", "", dialog_filter())
        if paths:
            self.add_files(paths)

    def add_files(self, paths: list[str]) -> None:
        added: list[SourceFile] = []
        for path in paths:
            try:
                source = SourceFile.from_path(path)
            except OSError as e:
                logger.error(f"Failed to read {path}: {e}")
                emit(self.log_book, LogLevel.ERROR, f"Failed to read file {path}: {e}")
                continue
            self.state.add(source)
            item = QListWidgetItem(source.name)
            item.setData(Qt.UserRole, source.id)
            item.setToolTip(source.meta.describe())
            self.file_list.addItem(item)
            added.append(source)

        announce_upload(added, self.log_book)
        if added:
            self._select(added[0].id)

    def on_remove_selected(self) -> None:
        item = self.file_list.currentItem()
        if item is None:
            return
        file_id = item.data(Qt.UserRole)
        was_active = self.state.active_id == file_id
        source = self.state.remove(file_id)
        self.file_list.takeItem(self.file_list.row(item))
        if source is not None and was_active:
            # currentItemChanged may already have switched to a neighbour
            if self.state.active is None:
                self._show_active()

    def on_current_item_changed(self, current: Optional[QListWidgetItem], _previous) -> None:
        file_id = current.data(Qt.UserRole) if current is not None else None
        if file_id == self.state.active_id and file_id is not None:
            return
        self.state.activate(file_id)
        self._show_active()

    def _select(self, file_id: str) -> None:
        for row in range(self.file_list.count()):
            item = self.file_list.item(row)
            if item.data(Qt.UserRole) == file_id:
                self.file_list.setCurrentItem(item)
                return

    # --- ACTIVE VIEW ---

    def _show_active(self) -> None:
        source = self.state.active
        if source is None:
            self.point_view.close_session()
            self.view_stack.setCurrentIndex(PAGE_WELCOME)
            return

        if source.is_point_cloud:
            self.view_stack.setCurrentIndex(PAGE_POINT_CLOUD)
            self._start_point_cloud_load(source)
        elif source.is_vector:
            self.point_view.close_session()
            self.view_stack.setCurrentIndex(PAGE_MAP)
            prepared = load_vector(source, self.log_book)
            if prepared is not None:
                self.map_view.show_collection(prepared.collection, prepared.viewport)
            else:
                self.map_view.clear()
        else:
            self.point_view.close_session()
            self.view_stack.setCurrentIndex(PAGE_WELCOME)
            emit(self.log_book, LogLevel.ERROR, f"Unsupported file format: {source.name}")

    def _start_point_cloud_load(self, source: SourceFile) -> None:
        generation = self.point_view.begin_session()
        load = PointCloudLoad(source, generation, self.log_book)
        worker = PointCloudWorker(load, self)

        worker.progress_updated.connect(self.on_load_progress)
        worker.load_finished.connect(self.on_load_finished)
        worker.error_occurred.connect(self.on_load_error)
        worker.finished.connect(lambda gen=generation: self._forget_worker(gen))

        self._loads[generation] = load
        self._workers[generation] = worker
        logger.info(f"Loading '{source.name}' for session {generation}.")
        worker.start()

    def on_load_progress(self, generation: int, fraction: float) -> None:
        load = self._loads.get(generation)
        if load is not None:
            load.report_progress(fraction)

    def on_load_finished(self, generation: int, prepared: PreparedCloud) -> None:
        load = self._loads.get(generation)
        if load is not None:
            load.complete(prepared, self.point_view.host)

    def on_load_error(self, generation: int, message: str) -> None:
        load = self._loads.get(generation)
        if load is not None:
            load.fail(message)

    def _forget_worker(self, generation: int) -> None:
        self._loads.pop(generation, None)
        worker = self._workers.pop(generation, None)
        if worker is not None:
            worker.deleteLater()

    # --- SHUTDOWN ---

    def closeEvent(self, event: QCloseEvent) -> None:
        for worker in list(self._workers.values()):
            worker.wait()
        self.point_view.close_session()
        event.accept()
