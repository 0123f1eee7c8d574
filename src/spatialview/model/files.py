"""
Source Files
============
Immutable records for user-selected files and their cheap metadata.

Classes:
    FileMeta: Size plus a header-peek point count or a feature count.
    SourceFile: Name, raw bytes and classification of one selected file.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from spatialview.model.decoders import get_decoder
from spatialview.model.errors import DecodeError
from spatialview.model.formats import FileFamily, PointCloudFormat, classify
from spatialview.model.geojson import decode_feature_collection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileMeta:
    size: int
    points: Optional[int] = None
    features: Optional[int] = None

    def describe(self) -> str:
        parts = [f"{self.size} bytes"]
        if self.points is not None:
            parts.append(f"{self.points} points")
        if self.features is not None:
            parts.append(f"{self.features} features")
        return ", ".join(parts)


def inspect(name: str, data: bytes, family: FileFamily, subformat: Optional[PointCloudFormat]) -> FileMeta:
    """Metadata for a file. Failures are logged and leave the counts unset."""
    meta = FileMeta(size=len(data))
    if family is FileFamily.POINT_CLOUD and subformat is not None:
        points = get_decoder(subformat, name).estimate_points(data)
        if points is None:
            logger.debug(f"No point count in header of '{name}'.")
        return FileMeta(size=meta.size, points=points)
    if family is FileFamily.VECTOR:
        try:
            features = len(decode_feature_collection(data))
        except DecodeError as e:
            logger.warning(f"Could not count features of '{name}': {e}")
            return meta
        return FileMeta(size=meta.size, features=features)
    return meta


@dataclass(frozen=True)
class SourceFile:
    name: str
    data: bytes = field(repr=False)
    family: FileFamily
    subformat: Optional[PointCloudFormat]
    meta: FileMeta
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def is_point_cloud(self) -> bool:
        return self.family is FileFamily.POINT_CLOUD

    @property
    def is_vector(self) -> bool:
        return self.family is FileFamily.VECTOR

    @classmethod
    def from_bytes(cls, name: str, data: bytes) -> SourceFile:
        fmt = classify(name)
        data = bytes(data)
        return cls(
            name=name,
            data=data,
            family=fmt.family,
            subformat=fmt.subformat,
            meta=inspect(name, data, fmt.family, fmt.subformat),
        )

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> SourceFile:
        """
        Read a file from disk.

        Raises:
            OSError: If the file cannot be read.
        """
        path = Path(path)
        logger.debug(f"Reading {path}")
        return cls.from_bytes(path.name, path.read_bytes())
