"""
Load Pipeline
=============
Orchestrates the ingestion of one selected file and reports what happened as
LogEvents.

Why is this file needed?
------------------------
1. Split of work: `PointCloudLoad.prepare()` does decode, normalization and
   colorization and is safe to run off the GUI thread. `complete()` and
   `fail()` touch the render session and the log and must run on the GUI
   thread.
2. Staleness: A load captures the session generation it was issued for. If
   that session is no longer live when the result arrives, the result is
   dropped and a WARNING is logged instead of a SUCCESS.
3. Exactly one terminal event: after `complete()` or `fail()` the load
   ignores further results and progress.

This module has no Qt dependency; `spatialview.controller.workers` drives it
from a QThread.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Iterable, Optional, TYPE_CHECKING, Union

import numpy as np

from spatialview.model.colorize import colorize
from spatialview.model.decoders import ProgressCallback, get_decoder
from spatialview.model.errors import DecodeError, PipelineError, UnsupportedFormatError
from spatialview.model.files import SourceFile
from spatialview.model.geojson import FeatureCollection, decode_feature_collection
from spatialview.model.geometry import BoundingBox, CameraFrame
from spatialview.model.log import LogLevel, LogSink, emit
from spatialview.model.normalize import normalize
from spatialview.model.viewport import DEFAULT_VIEWPORT, Viewport, fit
from spatialview.utils import format_byte_size, format_duration

if TYPE_CHECKING:
    import numpy.typing as npt
    from spatialview.view.render_session import SessionHost

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedCloud:
    """Display-ready point cloud produced off the GUI thread."""
    positions: npt.NDArray[np.float32]
    colors: npt.NDArray[np.float32]
    bbox: BoundingBox
    frame: CameraFrame
    native_colors: bool
    dropped: int = 0

    @property
    def n_points(self) -> int:
        return int(self.positions.shape[0])


@dataclass(frozen=True)
class PreparedVector:
    collection: FeatureCollection
    viewport: Viewport
    fitted: bool


def prepare_point_cloud(source: SourceFile, progress: Optional[ProgressCallback] = None) -> PreparedCloud:
    """
    Decode, clean and colour a point-cloud file.

    Raises:
        UnsupportedFormatError: If the file is not a point cloud.
        DecodeError: If no point has finite coordinates.
        PipelineError: Any decode failure.
    """
    if not source.is_point_cloud or source.subformat is None:
        raise UnsupportedFormatError(source.name)

    buffer = get_decoder(source.subformat, source.name).decode(source.data, progress)
    cloud = normalize(buffer.positions)
    if cloud.n_points == 0:
        raise DecodeError(f"{source.name} contains no finite points.")

    if buffer.colors is not None:
        colors = buffer.colors[cloud.kept]
    else:
        colors = colorize(cloud.positions)

    return PreparedCloud(
        positions=cloud.positions,
        colors=colors,
        bbox=cloud.bbox,
        frame=cloud.frame,
        native_colors=buffer.colors is not None,
        dropped=cloud.dropped,
    )


class PointCloudLoad:
    """One load attempt of one point-cloud file for one session generation."""

    def __init__(self, source: SourceFile, generation: int, sink: LogSink) -> None:
        self.source = source
        self.generation = generation
        self._sink = sink
        self._started = time.perf_counter()
        self._last_progress = -1.0
        self.done = False

    def __repr__(self) -> str:
        return f"PointCloudLoad({self.source.name!r}, generation={self.generation})"

    # --- Worker side ---

    def prepare(self, progress: Optional[ProgressCallback] = None) -> PreparedCloud:
        return prepare_point_cloud(self.source, progress)

    # --- GUI side ---

    def report_progress(self, fraction: float) -> None:
        if self.done or fraction <= self._last_progress:
            return
        self._last_progress = fraction
        emit(self._sink, LogLevel.INFO, f"Loading progress: {fraction * 100:.2f}%")

    def complete(self, prepared: PreparedCloud, host: SessionHost) -> bool:
        """
        Attach the result to the live session.

        Returns:
            True if the points were displayed.
        """
        if self.done:
            logger.debug(f"{self!r}: result after terminal event ignored.")
            return False
        self.done = True

        if not host.is_live(self.generation):
            emit(
                self._sink,
                LogLevel.WARNING,
                f"Discarded point cloud {self.source.name}: the active file changed before loading finished.",
            )
            return False

        host.session.display(prepared.positions, prepared.colors, prepared.frame)
        elapsed = time.perf_counter() - self._started
        if prepared.dropped:
            logger.info(f"{self.source.name}: dropped {prepared.dropped} non-finite points.")
        info = (
            f"File name: {self.source.name}, Total Points: {prepared.n_points}, "
            f"{format_byte_size(self.source.size)}, Load Time: {format_duration(elapsed)}"
        )
        emit(self._sink, LogLevel.SUCCESS, f"Successfully loaded point cloud: {info}")
        return True

    def fail(self, error: Union[BaseException, str]) -> None:
        if self.done:
            logger.debug(f"{self!r}: error after terminal event ignored: {error}")
            return
        self.done = True
        emit(self._sink, LogLevel.ERROR, f"Error loading point cloud: {error}")

    def run(self, host: SessionHost) -> bool:
        """Prepare and complete synchronously on the calling thread."""
        try:
            prepared = self.prepare(self.report_progress)
        except PipelineError as e:
            self.fail(e)
            return False
        return self.complete(prepared, host)


def load_vector(source: SourceFile, sink: LogSink) -> Optional[PreparedVector]:
    """
    Decode a GeoJSON file and fit the initial viewport.

    Returns None (after an ERROR event) when the document cannot be decoded.
    """
    try:
        if not source.is_vector:
            raise UnsupportedFormatError(source.name)
        collection = decode_feature_collection(source.data)
    except PipelineError as e:
        emit(sink, LogLevel.ERROR, f"Failed to load GeoJSON: {e}")
        return None

    viewport = fit(collection)
    prepared = PreparedVector(
        collection=collection,
        viewport=viewport if viewport is not None else DEFAULT_VIEWPORT,
        fitted=viewport is not None,
    )
    emit(sink, LogLevel.SUCCESS, f"Successfully loaded GeoJSON: {source.name}")
    return prepared


def announce_upload(sources: Iterable[SourceFile], sink: LogSink) -> None:
    """One SUCCESS event listing every newly added file and its size."""
    sources = list(sources)
    if not sources:
        return
    listing = ", ".join(f"{s.name}, {format_byte_size(s.size)}" for s in sources)
    emit(sink, LogLevel.SUCCESS, f"Uploaded file: {listing}")
    for source in sources:
        if source.meta.features is None and source.is_vector:
            emit(sink, LogLevel.WARNING, f"Error parsing GIS file metadata: {source.name}")
