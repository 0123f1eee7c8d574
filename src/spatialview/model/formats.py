"""
Format Classifier
=================
Maps a file name to the content family the pipeline knows how to decode.

The decision is made on the last extension only, case-insensitively. There is
no I/O and no failure mode: anything unrecognised is UNKNOWN.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import PurePath
from typing import Optional

from spatialview.config import POINT_CLOUD_EXTENSIONS, VECTOR_EXTENSIONS


class FileFamily(StrEnum):
    POINT_CLOUD = "point-cloud"
    VECTOR = "gis"
    UNKNOWN = "unknown"


class PointCloudFormat(StrEnum):
    PCD = "pcd"
    TXT = "txt"
    XYZ = "xyz"
    PLY = "ply"


@dataclass(frozen=True)
class FormatClass:
    """Result of classifying a file name."""
    family: FileFamily
    subformat: Optional[PointCloudFormat] = None

    @property
    def is_point_cloud(self) -> bool:
        return self.family is FileFamily.POINT_CLOUD

    @property
    def is_vector(self) -> bool:
        return self.family is FileFamily.VECTOR


UNKNOWN = FormatClass(FileFamily.UNKNOWN)


def extension_of(file_name: str) -> str:
    """Lower-cased last suffix without the dot ('' when there is none)."""
    return PurePath(file_name).suffix.lstrip(".").lower()


def classify(file_name: str) -> FormatClass:
    ext = extension_of(file_name)
    if ext in POINT_CLOUD_EXTENSIONS:
        return FormatClass(FileFamily.POINT_CLOUD, PointCloudFormat(ext))
    if ext in VECTOR_EXTENSIONS:
        return FormatClass(FileFamily.VECTOR)
    return UNKNOWN


def dialog_filter() -> str:
    """Filter string for file dialogs listing every supported extension."""
    patterns = " ".join(f"*.{ext}" for ext in POINT_CLOUD_EXTENSIONS + VECTOR_EXTENSIONS)
    return f"Supported Files ({patterns});;All Files (*)"
