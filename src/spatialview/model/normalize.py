"""
Geometry Normalizer
===================
Cleans a raw position buffer and derives the camera framing for it.

Steps:
    1. Drop every triple holding a NaN/Inf value (surviving order unchanged).
    2. Bounding box over the cleaned buffer (vectorised min/max, one pass each).
    3. Center = midpoint, size = max - min, max_dim = largest size component.
    4. Camera at center + (0, 0, max_dim * CAMERA_DISTANCE_MULTIPLIER), looking
       at the center. A degenerate cloud (max_dim == 0) uses MIN_EXTENT instead
       so the camera never sits on its target.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from spatialview.config import CAMERA_DISTANCE_MULTIPLIER, MIN_EXTENT
from spatialview.model.geometry import BoundingBox, CameraFrame, as_points

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NormalizedCloud:
    positions: npt.NDArray[np.float32]
    bbox: BoundingBox
    frame: CameraFrame
    kept: npt.NDArray[np.bool_]

    @property
    def dropped(self) -> int:
        return int(self.kept.size - np.count_nonzero(self.kept))

    @property
    def n_points(self) -> int:
        return int(self.positions.shape[0])


def finite_mask(points: npt.NDArray[np.float32]) -> npt.NDArray[np.bool_]:
    """True for every row whose three coordinates are finite."""
    return np.isfinite(points).all(axis=1)


def bounding_box(points: npt.NDArray[np.float32]) -> BoundingBox:
    if points.shape[0] == 0:
        return BoundingBox.empty()
    lo = points.min(axis=0)
    hi = points.max(axis=0)
    return BoundingBox(
        minimum=(float(lo[0]), float(lo[1]), float(lo[2])),
        maximum=(float(hi[0]), float(hi[1]), float(hi[2])),
    )


def camera_frame(bbox: BoundingBox) -> CameraFrame:
    cx, cy, cz = bbox.center
    extent = bbox.max_dim
    if extent <= 0.0:
        extent = MIN_EXTENT
    return CameraFrame(
        position=(cx, cy, cz + extent * CAMERA_DISTANCE_MULTIPLIER),
        target=(cx, cy, cz),
    )


def normalize(raw_positions: npt.ArrayLike) -> NormalizedCloud:
    """
    Filter non-finite samples, compute the bounding box and the camera frame.

    Args:
        raw_positions: Flat buffer (length multiple of 3) or (N, 3) array.

    Returns:
        NormalizedCloud with the cleaned (M, 3) positions, M <= N, and the
        boolean row mask used, so parallel buffers can be filtered alike.
    """
    points = as_points(raw_positions)
    kept = finite_mask(points)
    clean = points[kept] if not kept.all() else points

    if clean.shape[0] < points.shape[0]:
        logger.debug(f"Dropped {points.shape[0] - clean.shape[0]} non-finite points.")

    bbox = bounding_box(clean)
    return NormalizedCloud(positions=clean, bbox=bbox, frame=camera_frame(bbox), kept=kept)
