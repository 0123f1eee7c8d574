"""
Vector feature styling: geometry kind -> paint description.

The map builder translates a LayerStyle into folium/Leaflet options; nothing
here depends on a rendering library.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Optional

from spatialview.config import FEATURE_COLOR

OUTLINE_COLOR = "#ffffff"


class LayerKind(StrEnum):
    CIRCLE = "circle"
    FILL = "fill"
    LINE = "line"


@dataclass(frozen=True)
class LayerStyle:
    layer_id: str
    kind: LayerKind
    color: str = FEATURE_COLOR
    radius: Optional[float] = None
    stroke_color: Optional[str] = None
    stroke_width: float = 0.0
    fill_opacity: float = 1.0
    line_width: Optional[float] = None

    def leaflet_options(self) -> dict[str, Any]:
        """Path options for Leaflet vector layers."""
        if self.kind is LayerKind.LINE:
            return {"color": self.color, "weight": self.line_width, "fill": False}
        if self.kind is LayerKind.FILL:
            return {
                "fillColor": self.color,
                "fillOpacity": self.fill_opacity,
                "color": self.stroke_color,
                "weight": self.stroke_width,
            }
        return {
            "radius": self.radius,
            "fillColor": self.color,
            "fillOpacity": self.fill_opacity,
            "color": self.stroke_color or self.color,
            "weight": self.stroke_width,
            "stroke": self.stroke_width > 0,
        }


POINT_STYLE = LayerStyle(
    "point-layer", LayerKind.CIRCLE, radius=6, stroke_color=OUTLINE_COLOR, stroke_width=1
)
POLYGON_STYLE = LayerStyle(
    "polygon-layer", LayerKind.FILL, fill_opacity=0.4, stroke_color=OUTLINE_COLOR, stroke_width=1
)
LINE_STYLE = LayerStyle("line-layer", LayerKind.LINE, line_width=2)
DEFAULT_STYLE = LayerStyle("default-layer", LayerKind.CIRCLE, radius=6)

_STYLES = {
    "Point": POINT_STYLE,
    "Polygon": POLYGON_STYLE,
    "LineString": LINE_STYLE,
}


def layer_style(kind: Optional[str]) -> LayerStyle:
    """Style for a geometry kind; unknown or missing kinds get the default circle."""
    return _STYLES.get(kind, DEFAULT_STYLE)
