"""
Point Cloud Data Types
======================
Buffers and derived geometry shared by the decoders, the normalizer and the
render session.

Classes:
    PointBuffer: Positions plus optional per-point colors and normals.
    BoundingBox: Axis-aligned box with center / size / max extent.
    CameraFrame: Camera position and look-at target framing a box.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt


def as_points(values: npt.ArrayLike, name: str = "positions") -> npt.NDArray[np.float32]:
    """
    Coerce a flat buffer (length multiple of 3) or an (N, 3) array to (N, 3) float32.

    Raises:
        ValueError: If the input cannot be viewed as coordinate triples.
    """
    arr = np.asarray(values, dtype=np.float32)
    if arr.ndim == 1:
        if arr.size % 3 != 0:
            raise ValueError(f"Flat {name} buffer length {arr.size} is not a multiple of 3.")
        arr = arr.reshape(-1, 3)
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise ValueError(f"Expected {name} of shape (N, 3), got {arr.shape}.")
    return arr


@dataclass(frozen=True)
class PointBuffer:
    """
    Decoded point cloud.

    `colors` and `normals`, when present, carry exactly one triple per point.
    Colors are RGB in [0, 1].
    """
    positions: npt.NDArray[np.float32]
    colors: Optional[npt.NDArray[np.float32]] = None
    normals: Optional[npt.NDArray[np.float32]] = None

    def __post_init__(self) -> None:
        positions = as_points(self.positions)
        object.__setattr__(self, "positions", positions)
        for name in ("colors", "normals"):
            value = getattr(self, name)
            if value is None:
                continue
            arr = as_points(value, name)
            if arr.shape[0] != positions.shape[0]:
                raise ValueError(
                    f"{name} has {arr.shape[0]} triples for {positions.shape[0]} points."
                )
            object.__setattr__(self, name, arr)

    @property
    def n_points(self) -> int:
        return int(self.positions.shape[0])


@dataclass(frozen=True)
class BoundingBox:
    minimum: tuple[float, float, float]
    maximum: tuple[float, float, float]
    is_empty: bool = False

    @classmethod
    def empty(cls) -> BoundingBox:
        """Box at the origin used when no finite point survives."""
        return cls((0.0, 0.0, 0.0), (0.0, 0.0, 0.0), is_empty=True)

    @property
    def center(self) -> tuple[float, float, float]:
        return tuple((lo + hi) / 2.0 for lo, hi in zip(self.minimum, self.maximum))

    @property
    def size(self) -> tuple[float, float, float]:
        return tuple(hi - lo for lo, hi in zip(self.minimum, self.maximum))

    @property
    def max_dim(self) -> float:
        return max(self.size)


@dataclass(frozen=True)
class CameraFrame:
    position: tuple[float, float, float]
    target: tuple[float, float, float]

    @property
    def distance(self) -> float:
        return float(np.linalg.norm(np.subtract(self.position, self.target)))
