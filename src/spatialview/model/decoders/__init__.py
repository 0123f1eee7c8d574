"""
Point-cloud decoders, one per grammar.

Importing this package registers every decoder; use `get_decoder` to obtain a
fresh instance for a classified file.
"""
from __future__ import annotations

from spatialview.model.decoders.base import PointCloudDecoder, ProgressCallback
from spatialview.model.decoders.registry import create_decoder, list_formats, register_decoder
from spatialview.model.decoders import pcd, ply, xyz  # noqa: F401  (registration)
from spatialview.model.errors import UnsupportedFormatError
from spatialview.model.formats import FormatClass, PointCloudFormat


def get_decoder(fmt: PointCloudFormat | FormatClass, file_name: str = "") -> PointCloudDecoder:
    """
    Decoder for a point-cloud sub-format.

    Raises:
        UnsupportedFormatError: If `fmt` is not a registered point-cloud format.
    """
    if isinstance(fmt, FormatClass):
        fmt = fmt.subformat
    try:
        return create_decoder(fmt)
    except KeyError as e:
        raise UnsupportedFormatError(file_name or str(fmt)) from e


__all__ = [
    "PointCloudDecoder",
    "ProgressCallback",
    "get_decoder",
    "list_formats",
    "register_decoder",
]
