"""Tests for spatialview.model.styles - per-geometry paint."""
import pytest

from spatialview.config import FEATURE_COLOR
from spatialview.model.styles import LayerKind, layer_style


def test_point_style():
    style = layer_style("Point")
    assert style.kind is LayerKind.CIRCLE
    assert style.radius == 6
    assert style.color == FEATURE_COLOR
    assert style.stroke_color == "#ffffff"
    assert style.stroke_width == 1


def test_polygon_style():
    style = layer_style("Polygon")
    assert style.kind is LayerKind.FILL
    assert style.fill_opacity == 0.4
    assert style.stroke_color == "#ffffff"


def test_line_style():
    style = layer_style("LineString")
    assert style.kind is LayerKind.LINE
    assert style.line_width == 2


@pytest.mark.parametrize("kind", ["MultiPolygon", "GeometryCollection", "", None])
def test_fallback_circle(kind):
    style = layer_style(kind)
    assert style.layer_id == "default-layer"
    assert style.kind is LayerKind.CIRCLE
    assert style.radius == 6


def test_leaflet_options():
    assert layer_style("LineString").leaflet_options() == {"color": FEATURE_COLOR, "weight": 2, "fill": False}
    polygon = layer_style("Polygon").leaflet_options()
    assert polygon["fillOpacity"] == 0.4
    assert polygon["fillColor"] == FEATURE_COLOR
    assert layer_style(None).leaflet_options()["stroke"] is False
