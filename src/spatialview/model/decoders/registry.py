from __future__ import annotations

from spatialview.model.decoders.base import PointCloudDecoder
from spatialview.model.formats import PointCloudFormat

_REGISTRY: dict[PointCloudFormat, type[PointCloudDecoder]] = {}


def register_decoder(cls: type[PointCloudDecoder]) -> type[PointCloudDecoder]:
    """Class decorator to register a decoder for every format in its FORMATS."""
    formats = getattr(cls, "FORMATS", None) or (getattr(cls, "FORMAT", None),)
    if not all(formats):
        raise ValueError(f"{cls.__name__} must define FORMAT")
    for fmt in formats:
        _REGISTRY[fmt] = cls
    return cls


def create_decoder(fmt: PointCloudFormat) -> PointCloudDecoder:
    cls = _REGISTRY.get(fmt)
    if not cls:
        raise KeyError(f"No decoder registered for format '{fmt}'")
    return cls()


def list_formats() -> list[PointCloudFormat]:
    return list(_REGISTRY.keys())
