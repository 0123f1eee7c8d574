"""
Map Document Builder
====================
Turns a decoded FeatureCollection into a folium (Leaflet) map.

Point features become circle markers with a popup listing their properties;
every other geometry is added as a GeoJSON layer styled by its kind. The map
is centered on the given viewport and carries fullscreen and locate-me
controls.

No Qt here: `MapView` feeds the rendered HTML into a QWebEngineView.
"""
from __future__ import annotations

import html
import logging
from typing import Any

import folium
from folium.plugins import Fullscreen, LocateControl

from spatialview.config import MAP_TILES
from spatialview.model.geojson import Feature, FeatureCollection
from spatialview.model.styles import LayerKind, LayerStyle, layer_style
from spatialview.model.viewport import DEFAULT_VIEWPORT, Viewport

logger = logging.getLogger(__name__)

POPUP_MAX_WIDTH = 300


def popup_html(feature: Feature) -> str:
    """'Feature Info' block with coordinates and one line per property."""
    coords = (feature.geometry.coordinates if feature.geometry is not None else None) or []
    lines = [
        "<h3>Feature Info</h3>",
        f"<p>Coordinates: [{html.escape(', '.join(str(c) for c in coords))}]</p>",
    ]
    if feature.properties:
        rows = "".join(
            f"<span>{html.escape(str(key))}: {html.escape(str(value))}</span><br/>"
            for key, value in feature.properties.items()
        )
        lines.append(f"<p>{rows}</p>")
    return "".join(lines)


def _circle_marker(location: list[float], style: LayerStyle, popup: Any = None) -> folium.CircleMarker:
    options = style.leaflet_options()
    return folium.CircleMarker(
        location=location,
        radius=options["radius"],
        color=options["color"],
        weight=options["weight"],
        stroke=options["stroke"],
        fill=True,
        fill_color=options["fillColor"],
        fill_opacity=options["fillOpacity"],
        popup=popup,
    )


def _add_point(fmap: folium.Map, feature: Feature) -> bool:
    coords = feature.geometry.coordinates
    try:
        lon, lat = float(coords[0]), float(coords[1])
    except (TypeError, ValueError, IndexError):
        logger.warning(f"Skipping Point feature with invalid coordinates: {coords!r}")
        return False
    popup = folium.Popup(popup_html(feature), max_width=POPUP_MAX_WIDTH)
    _circle_marker([lat, lon], layer_style("Point"), popup).add_to(fmap)
    return True


def _add_layer(fmap: folium.Map, feature: Feature, index: int) -> None:
    style = layer_style(feature.kind)
    options = style.leaflet_options()
    kwargs: dict[str, Any] = {}
    if style.kind is LayerKind.CIRCLE:
        # point-like geometries other than Point (MultiPoint, ...)
        kwargs["marker"] = _circle_marker([0.0, 0.0], style)
    folium.GeoJson(
        feature.to_dict(),
        name=f"{style.layer_id}-{index}",
        style_function=lambda _feature, opts=options: dict(opts),
        **kwargs,
    ).add_to(fmap)


def build_feature_map(collection: FeatureCollection, viewport: Viewport = DEFAULT_VIEWPORT) -> folium.Map:
    """
    Create a folium map showing every feature of `collection`.

    Args:
        collection: Decoded features; features without geometry are skipped.
        viewport: Initial center and zoom.
    """
    fmap = folium.Map(
        location=list(viewport.location),
        zoom_start=viewport.zoom,
        tiles=MAP_TILES,
        control_scale=True,
    )
    Fullscreen(position="topleft").add_to(fmap)
    LocateControl(auto_start=False, position="topleft").add_to(fmap)

    skipped = 0
    for index, feature in enumerate(collection):
        if feature.geometry is None:
            skipped += 1
            continue
        if feature.kind == "Point":
            if not _add_point(fmap, feature):
                skipped += 1
        else:
            _add_layer(fmap, feature, index)

    logger.debug(f"Built map with {len(collection) - skipped} features ({skipped} skipped).")
    return fmap


def render_html(fmap: folium.Map) -> str:
    """Full standalone HTML document for a map."""
    return fmap.get_root().render()
