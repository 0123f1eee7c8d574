"""
Background Workers (Threading)
==============================
This module contains QThread subclasses for handling long-running tasks.

Why is this file needed?
------------------------
1. Responsiveness: Decoding a large point cloud on the main thread freezes
   the GUI. The worker runs `PointCloudLoad.prepare()` in the background.
2. Signals: Progress, results and errors travel back to the GUI thread as Qt
   Signals (queued connections), where the load is completed against the
   live render session.

Every signal carries the generation the load was issued for, so receivers can
tell stale results apart.

Classes:
    PointCloudWorker: Decodes, normalizes and colours one point-cloud file.
"""
import logging

from PySide6.QtCore import QThread, Signal

from spatialview.controller.pipeline import PointCloudLoad
from spatialview.model.errors import PipelineError

logger = logging.getLogger(__name__)


class PointCloudWorker(QThread):
    # Signals to update the UI from the background
    progress_updated = Signal(int, float)  # (generation, fraction)
    load_finished = Signal(int, object)  # (generation, PreparedCloud)
    error_occurred = Signal(int, str)  # (generation, message)

    def __init__(self, load: PointCloudLoad, parent=None):
        super().__init__(parent)
        self.load = load

    def run(self):
        generation = self.load.generation
        try:
            logger.info(f"Decoding '{self.load.source.name}' in background thread...")

            def progress_callback(fraction: float) -> None:
                self.progress_updated.emit(generation, fraction)

            prepared = self.load.prepare(progress_callback)
            self.load_finished.emit(generation, prepared)

        except PipelineError as e:
            logger.error(f"Error in PointCloudWorker: {e}")
            self.error_occurred.emit(generation, str(e))
        except Exception as e:
            logger.exception(f"Unexpected error in PointCloudWorker: {e}")
            self.error_occurred.emit(generation, f"Unexpected error: {e}")
