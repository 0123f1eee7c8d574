"""
Viewport Auto-Fit
=================
Derives the initial map view for a feature collection.

Coordinates contributing to the bounds:
    Point       -> its coordinate
    LineString  -> every coordinate
    Polygon     -> every coordinate of the first (outer) ring
    others      -> nothing

The fitted view is centered on the bounds with a fixed zoom (FIT_ZOOM). The
zoom does not depend on the extent of the data.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Optional

from spatialview.config import DEFAULT_VIEWPORT as _DEFAULT, FIT_ZOOM
from spatialview.model.geojson import FeatureCollection, Geometry


@dataclass(frozen=True)
class Viewport:
    longitude: float
    latitude: float
    zoom: float

    @property
    def location(self) -> tuple[float, float]:
        """(lat, lon) as expected by map widgets."""
        return self.latitude, self.longitude


DEFAULT_VIEWPORT = Viewport(*_DEFAULT)


@dataclass
class GeoBounds:
    west: float = math.inf
    south: float = math.inf
    east: float = -math.inf
    north: float = -math.inf

    @property
    def is_empty(self) -> bool:
        return self.west > self.east

    def extend(self, lon: float, lat: float) -> None:
        self.west = min(self.west, lon)
        self.east = max(self.east, lon)
        self.south = min(self.south, lat)
        self.north = max(self.north, lat)

    @property
    def center(self) -> tuple[float, float]:
        return (self.west + self.east) / 2.0, (self.south + self.north) / 2.0


def _as_position(value: Any) -> Optional[tuple[float, float]]:
    if not isinstance(value, (list, tuple)) or len(value) < 2:
        return None
    lon, lat = value[0], value[1]
    if isinstance(lon, bool) or isinstance(lat, bool):
        return None
    if not isinstance(lon, (int, float)) or not isinstance(lat, (int, float)):
        return None
    if not (math.isfinite(lon) and math.isfinite(lat)):
        return None
    return float(lon), float(lat)


def _candidates(geometry: Geometry) -> Iterable[Any]:
    coords = geometry.coordinates
    if geometry.kind == "Point":
        return (coords,)
    if geometry.kind == "LineString" and isinstance(coords, list):
        return coords
    if geometry.kind == "Polygon" and isinstance(coords, list) and coords and isinstance(coords[0], list):
        return coords[0]
    return ()


def positions(collection: FeatureCollection) -> Iterator[tuple[float, float]]:
    """Every usable (lon, lat) pair; malformed entries are skipped."""
    for feature in collection:
        if feature.geometry is None:
            continue
        for candidate in _candidates(feature.geometry):
            pos = _as_position(candidate)
            if pos is not None:
                yield pos


def bounds_of(collection: FeatureCollection) -> GeoBounds:
    bounds = GeoBounds()
    for lon, lat in positions(collection):
        bounds.extend(lon, lat)
    return bounds


def fit(collection: FeatureCollection) -> Optional[Viewport]:
    """
    Viewport centered on the collection, or None when no coordinate
    contributed (the caller keeps DEFAULT_VIEWPORT).
    """
    bounds = bounds_of(collection)
    if bounds.is_empty:
        return None
    lon, lat = bounds.center
    return Viewport(longitude=lon, latitude=lat, zoom=FIT_ZOOM)
