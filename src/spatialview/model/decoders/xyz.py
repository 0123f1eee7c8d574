"""
XYZ Decoder
===========
Plain text, one point per line: `x y z` or `x y z r g b` with 0-255 colors.

Blank lines, lines starting with "#" and lines of any other arity are
skipped. Colors are kept only when every accepted record carries them.
"""
from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from spatialview.model.decoders.base import PointCloudDecoder, ProgressReporter, chunk_bounds
from spatialview.model.decoders.registry import register_decoder
from spatialview.model.errors import DecodeError
from spatialview.model.formats import PointCloudFormat
from spatialview.model.geometry import PointBuffer

logger = logging.getLogger(__name__)

_POSITION_COLUMNS = 3
_COLOR_COLUMNS = 6


def _records(data: bytes) -> list[tuple[int, list[str]]]:
    """(line number, tokens) for every `x y z` or `x y z r g b` line."""
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"Malformed XYZ data: {e}") from e
    records = []
    for number, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        tokens = line.split()
        if len(tokens) in (_POSITION_COLUMNS, _COLOR_COLUMNS):
            records.append((number, tokens))
    return records


@register_decoder
class XYZDecoder(PointCloudDecoder):
    FORMAT = PointCloudFormat.XYZ

    def estimate_points(self, data: bytes) -> Optional[int]:
        try:
            return len(_records(data))
        except DecodeError:
            return None

    def _decode(self, data: bytes, report: ProgressReporter) -> PointBuffer:
        records = _records(data)
        total = len(records)
        report(0.1)

        positions = np.empty((total, 3), dtype=np.float32)
        colors = np.empty((total, 3), dtype=np.float32)
        all_colored = total > 0

        for start, stop in chunk_bounds(total):
            for i in range(start, stop):
                number, tokens = records[i]
                try:
                    positions[i] = [float(t) for t in tokens[:3]]
                    if len(tokens) == _COLOR_COLUMNS:
                        colors[i] = [float(t) for t in tokens[3:6]]
                    else:
                        all_colored = False
                except ValueError as e:
                    raise DecodeError(f"Malformed XYZ record on line {number}: {e}") from e
            report(0.1 + 0.9 * stop / total)

        if all_colored:
            rgb = np.clip(colors / 255.0, 0.0, 1.0)
        else:
            rgb = None
            logger.debug("XYZ records carry no (or partial) color; height colors will be used.")
        return PointBuffer(positions=positions, colors=rgb)
