"""
PCD Decoder
===========
Point Cloud Library (.pcd) files, also used for .txt exports written with a
PCD header.

Layout:
    A textual header of `KEY value...` lines (VERSION, FIELDS, SIZE, TYPE,
    COUNT, WIDTH, HEIGHT, VIEWPOINT, POINTS) ending with
    `DATA ascii|binary|binary_compressed`, followed by POINTS records.

Why is this file needed?
------------------------
1. Reading: The body is decoded by open3d (`o3d.io.read_point_cloud`), which
   handles every DATA layout, packed rgb/rgba colors and normal_x/y/z.
2. Validation: open3d reports unreadable bodies only as console warnings and
   leaves zero-filled points behind. The header is therefore parsed here and
   the body checked against it, so truncated or malformed files raise a
   DecodeError instead of rendering garbage.
"""
from __future__ import annotations

import logging
import os
import struct
import tempfile
from dataclasses import dataclass
from typing import Optional

import numpy as np
import open3d as o3d

from spatialview.model.decoders.registry import register_decoder
from spatialview.model.decoders.base import PointCloudDecoder, ProgressReporter
from spatialview.model.errors import DecodeError
from spatialview.model.formats import PointCloudFormat
from spatialview.model.geometry import PointBuffer

logger = logging.getLogger(__name__)

_MAX_HEADER_LINES = 64
_LAYOUTS = ("ascii", "binary", "binary_compressed")


@dataclass
class PCDHeader:
    fields: list[str]
    sizes: list[int]
    types: list[str]
    counts: list[int]
    points: int
    data: str
    body_offset: int

    @property
    def n_columns(self) -> int:
        """Values per ascii record."""
        return int(sum(self.counts))

    @property
    def point_size(self) -> int:
        """Bytes per binary record."""
        return int(sum(s * c for s, c in zip(self.sizes, self.counts)))


def _ints(key: str, values: list[str]) -> list[int]:
    try:
        return [int(v) for v in values]
    except ValueError as e:
        raise DecodeError(f"Malformed PCD header: {key} expects integers, got {' '.join(values)}.") from e


def parse_header(data: bytes) -> PCDHeader:
    """
    Parse the textual header up to and including the DATA line.

    Raises:
        DecodeError: If the header is malformed or ends before DATA.
    """
    entries: dict[str, list[str]] = {}
    pos = 0
    for _ in range(_MAX_HEADER_LINES):
        if pos >= len(data):
            break
        nl = data.find(b"\n", pos)
        end = len(data) if nl == -1 else nl
        raw = data[pos:end]
        pos = end + 1
        try:
            line = raw.decode("ascii").strip()
        except UnicodeDecodeError as e:
            raise DecodeError("Malformed PCD header: non-ASCII bytes before DATA line.") from e
        if not line or line.startswith("#"):
            continue
        key, *values = line.split()
        entries[key.upper()] = values
        if key.upper() == "DATA":
            return _build_header(entries, body_offset=min(pos, len(data)))
    raise DecodeError("Malformed PCD header: missing DATA line (truncated header).")


def _build_header(entries: dict[str, list[str]], body_offset: int) -> PCDHeader:
    fields = entries.get("FIELDS")
    if not fields:
        raise DecodeError("Malformed PCD header: missing FIELDS line.")
    n = len(fields)

    sizes = _ints("SIZE", entries.get("SIZE", ["4"] * n))
    types = [t.upper() for t in entries.get("TYPE", ["F"] * n)]
    counts = _ints("COUNT", entries.get("COUNT", ["1"] * n))
    for key, values in (("SIZE", sizes), ("TYPE", types), ("COUNT", counts)):
        if len(values) != n:
            raise DecodeError(f"Malformed PCD header: {key} lists {len(values)} entries for {n} fields.")

    width = _ints("WIDTH", entries.get("WIDTH", ["0"]))[0]
    height = _ints("HEIGHT", entries.get("HEIGHT", ["1"]))[0]
    points = _ints("POINTS", entries.get("POINTS", [str(width * height)]))[0]
    if points < 0:
        raise DecodeError(f"Malformed PCD header: negative point count {points}.")

    data_kind = (entries.get("DATA") or [""])[0].lower()
    if data_kind not in _LAYOUTS:
        raise DecodeError(f"Unsupported PCD field layout: DATA {data_kind or '(none)'}.")

    for axis in ("x", "y", "z"):
        if axis not in fields:
            raise DecodeError(f"Unsupported PCD field layout: no '{axis}' field in FIELDS {' '.join(fields)}.")

    return PCDHeader(
        fields=fields,
        sizes=sizes,
        types=types,
        counts=counts,
        points=points,
        data=data_kind,
        body_offset=body_offset,
    )


# --- Body checks ---

def _check_ascii(body: bytes, header: PCDHeader) -> None:
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"Malformed PCD ascii body: {e}") from e

    records = [ln.split() for ln in text.splitlines() if ln.strip()]
    if len(records) < header.points:
        raise DecodeError(
            f"Truncated PCD data: header declares {header.points} points, found {len(records)} records."
        )
    records = records[:header.points]
    for number, tokens in enumerate(records, start=1):
        if len(tokens) != header.n_columns:
            raise DecodeError(
                f"Malformed PCD record {number}: expected {header.n_columns} values, got {len(tokens)}."
            )
    try:
        np.asarray([t for tokens in records for t in tokens], dtype=np.float64)
    except ValueError as e:
        raise DecodeError(f"Malformed PCD record: {e}") from e


def _check_binary(body: bytes, header: PCDHeader) -> None:
    expected = header.points * header.point_size
    if len(body) < expected:
        raise DecodeError(
            f"Truncated PCD data: expected {expected} bytes for {header.points} points, got {len(body)}."
        )


def _check_compressed(body: bytes, header: PCDHeader) -> None:
    if len(body) < 8:
        raise DecodeError("Truncated PCD data: binary_compressed body has no size block.")
    compressed, uncompressed = struct.unpack("<II", body[:8])
    expected = header.points * header.point_size
    if uncompressed != expected:
        raise DecodeError(
            f"Malformed PCD data: binary_compressed block holds {uncompressed} bytes, expected {expected}."
        )
    if len(body) < 8 + compressed:
        raise DecodeError(
            f"Truncated PCD data: binary_compressed block needs {compressed} bytes, got {len(body) - 8}."
        )


_CHECKS = {
    "ascii": _check_ascii,
    "binary": _check_binary,
    "binary_compressed": _check_compressed,
}


def read_point_cloud(data: bytes) -> o3d.geometry.PointCloud:
    """Decode PCD bytes with open3d. open3d only reads from paths, so the bytes go through a temp file."""
    fd, path = tempfile.mkstemp(suffix=".pcd", prefix="spatialview_")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        with o3d.utility.VerbosityContextManager(o3d.utility.VerbosityLevel.Error):
            return o3d.io.read_point_cloud(
                path, format="pcd", remove_nan_points=False, remove_infinite_points=False
            )
    finally:
        try:
            os.remove(path)
        except OSError as e:
            logger.warning(f"Could not delete temp file '{path}': {e}")


@register_decoder
class PCDDecoder(PointCloudDecoder):
    FORMAT = PointCloudFormat.PCD
    FORMATS = (PointCloudFormat.PCD, PointCloudFormat.TXT)

    def estimate_points(self, data: bytes) -> Optional[int]:
        try:
            return parse_header(data).points
        except DecodeError:
            return None

    def _decode(self, data: bytes, report: ProgressReporter) -> PointBuffer:
        header = parse_header(data)
        logger.debug(
            f"PCD header: fields={header.fields}, points={header.points}, data={header.data}"
        )
        report(0.1)
        if header.points == 0:
            return PointBuffer(positions=np.empty((0, 3), dtype=np.float32))

        _CHECKS[header.data](data[header.body_offset:], header)
        report(0.4)

        cloud = read_point_cloud(data)
        positions = np.asarray(cloud.points, dtype=np.float32)
        if positions.shape[0] != header.points:
            raise DecodeError(
                f"Unreadable PCD data: header declares {header.points} points, decoded {positions.shape[0]}."
            )
        report(0.9)

        colors = np.asarray(cloud.colors, dtype=np.float32) if cloud.has_colors() else None
        normals = np.asarray(cloud.normals, dtype=np.float32) if cloud.has_normals() else None
        return PointBuffer(positions=positions, colors=colors, normals=normals)
