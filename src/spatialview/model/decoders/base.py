"""
Point-Cloud Decoder Interface
=============================
Every point-cloud grammar (header/record PCD, line-based XYZ, mesh-based PLY)
sits behind the same capability: `decode(data, progress) -> PointBuffer`.

Decoder instances are cheap and hold no state between calls; the registry in
`spatialview.model.decoders` builds a fresh one per decode.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, ClassVar, Optional

from spatialview.model.errors import DecodeError, EmptyInputError
from spatialview.model.formats import PointCloudFormat
from spatialview.model.geometry import PointBuffer

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]

# How many progress notifications a record loop aims for
PROGRESS_STEPS = 10


class ProgressReporter:
    """Forwards only increasing fractions in [0, 1] to the callback."""

    def __init__(self, callback: Optional[ProgressCallback]) -> None:
        self._callback = callback
        self._last = -1.0

    def __call__(self, fraction: float) -> None:
        fraction = min(max(float(fraction), 0.0), 1.0)
        if fraction <= self._last:
            return
        self._last = fraction
        if self._callback is not None:
            self._callback(fraction)

    @property
    def last(self) -> float:
        return max(self._last, 0.0)


class PointCloudDecoder(ABC):
    FORMAT: ClassVar[PointCloudFormat]

    def decode(self, data: bytes, progress: Optional[ProgressCallback] = None) -> PointBuffer:
        """
        Decode raw file bytes.

        Args:
            data: Complete file content.
            progress: Optional callback receiving increasing fractions, ending at 1.0.

        Raises:
            EmptyInputError: If `data` is empty (checked before any parsing).
            DecodeError: If the content is malformed, truncated or unsupported.
        """
        if not data:
            raise EmptyInputError()

        reporter = ProgressReporter(progress)
        reporter(0.0)
        buffer = self._decode(bytes(data), reporter)
        if buffer.n_points == 0:
            raise DecodeError(f"{self.FORMAT.value.upper()} file contains no points.")
        reporter(1.0)
        logger.debug(f"Decoded {buffer.n_points} points from {self.FORMAT.value.upper()} data.")
        return buffer

    @abstractmethod
    def _decode(self, data: bytes, report: ProgressReporter) -> PointBuffer:
        ...

    def estimate_points(self, data: bytes) -> Optional[int]:
        """Cheap point count from the header, None when it cannot be told."""
        return None


def chunk_bounds(total: int, steps: int = PROGRESS_STEPS) -> list[tuple[int, int]]:
    """Split range(total) into at most `steps` contiguous (start, stop) chunks."""
    if total <= 0:
        return []
    size = max(1, -(-total // steps))
    return [(start, min(start + size, total)) for start in range(0, total, size)]
