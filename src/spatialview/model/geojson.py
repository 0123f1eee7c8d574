"""
Vector Feature Decoder
======================
Parses GeoJSON text into an ordered FeatureCollection.

Why is this file needed?
------------------------
1. Validation: The map builder and the viewport fit assume a well-formed
   structure (object root, `features` list, object geometries). Everything
   else is rejected here with a DecodeError carrying the parser message.
2. Decoupling: Downstream code works with typed `Feature` / `Geometry`
   objects instead of raw dictionaries.

A bare `Feature` document is accepted and wrapped in a one-feature
collection. Features with a `null` geometry are kept with `geometry=None`.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from spatialview.model.errors import DecodeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Geometry:
    kind: str
    coordinates: Any = None
    # member geometry objects of a GeometryCollection, kept as parsed
    geometries: Optional[list[Any]] = None

    def to_dict(self) -> dict[str, Any]:
        if self.kind == "GeometryCollection":
            return {"type": self.kind, "geometries": list(self.geometries or [])}
        return {"type": self.kind, "coordinates": self.coordinates}


@dataclass(frozen=True)
class Feature:
    geometry: Optional[Geometry]
    properties: dict[str, Any] = field(default_factory=dict)

    @property
    def kind(self) -> Optional[str]:
        return self.geometry.kind if self.geometry is not None else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "Feature",
            "geometry": self.geometry.to_dict() if self.geometry is not None else None,
            "properties": dict(self.properties),
        }


@dataclass(frozen=True)
class FeatureCollection:
    features: tuple[Feature, ...] = ()

    def __len__(self) -> int:
        return len(self.features)

    def __iter__(self):
        return iter(self.features)

    def kinds(self) -> set[str]:
        return {f.kind for f in self.features if f.kind is not None}

    def to_dict(self) -> dict[str, Any]:
        return {"type": "FeatureCollection", "features": [f.to_dict() for f in self.features]}


def _parse_geometry(raw: Any, index: int) -> Optional[Geometry]:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise DecodeError(f"Feature {index}: geometry must be an object, got {type(raw).__name__}.")
    kind = raw.get("type")
    if not isinstance(kind, str):
        raise DecodeError(f"Feature {index}: geometry has no 'type'.")
    if kind == "GeometryCollection":
        members = raw.get("geometries", [])
        if not isinstance(members, list):
            raise DecodeError(f"Feature {index}: GeometryCollection 'geometries' must be a list.")
        return Geometry(kind, geometries=members)
    return Geometry(kind, coordinates=raw.get("coordinates"))


def _parse_feature(raw: Any, index: int) -> Feature:
    if not isinstance(raw, dict):
        raise DecodeError(f"Feature {index} must be an object, got {type(raw).__name__}.")
    properties = raw.get("properties") or {}
    if not isinstance(properties, dict):
        raise DecodeError(f"Feature {index}: properties must be an object.")
    return Feature(geometry=_parse_geometry(raw.get("geometry"), index), properties=properties)


def decode_feature_collection(text: Union[str, bytes]) -> FeatureCollection:
    """
    Parse a GeoJSON document.

    Args:
        text: Document content; bytes are decoded as UTF-8 (BOM tolerated).

    Returns:
        FeatureCollection preserving feature order. Zero features is valid.

    Raises:
        DecodeError: On malformed JSON or an invalid document structure.
    """
    if isinstance(text, (bytes, bytearray)):
        try:
            text = bytes(text).decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise DecodeError(str(e)) from e
    else:
        text = text.lstrip("\ufeff")

    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise DecodeError(str(e)) from e

    if not isinstance(document, dict):
        raise DecodeError(f"GeoJSON root must be an object, got {type(document).__name__}.")

    if document.get("type") == "Feature":
        return FeatureCollection((_parse_feature(document, 0),))

    features = document.get("features")
    if not isinstance(features, list):
        raise DecodeError("GeoJSON document has no 'features' list.")

    collection = FeatureCollection(tuple(_parse_feature(f, i) for i, f in enumerate(features)))
    logger.debug(f"Decoded {len(collection)} features ({', '.join(sorted(collection.kinds())) or 'none'}).")
    return collection
