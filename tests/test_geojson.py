"""Tests for spatialview.model.geojson - feature collection decoding."""
import json

import pytest

from spatialview.model.errors import DecodeError
from spatialview.model.geojson import decode_feature_collection


def test_polygon_collection(polygon_geojson):
    collection = decode_feature_collection(polygon_geojson)
    assert len(collection) == 1
    feature = collection.features[0]
    assert feature.kind == "Polygon"
    assert feature.properties == {"name": "square"}
    assert feature.geometry.coordinates[0][2] == [2, 2]


def test_bytes_with_bom(polygon_geojson):
    data = b"\xef\xbb\xbf" + polygon_geojson.encode("utf-8")
    assert len(decode_feature_collection(data)) == 1


def test_zero_features_is_valid():
    collection = decode_feature_collection('{"type": "FeatureCollection", "features": []}')
    assert len(collection) == 0


def test_feature_order_preserved():
    doc = {"type": "FeatureCollection", "features": [
        {"type": "Feature", "geometry": {"type": "Point", "coordinates": [i, i]}, "properties": {"i": i}}
        for i in range(5)
    ]}
    collection = decode_feature_collection(json.dumps(doc))
    assert [f.properties["i"] for f in collection] == [0, 1, 2, 3, 4]


def test_bare_feature_accepted():
    doc = {"type": "Feature", "geometry": {"type": "Point", "coordinates": [1, 2]}, "properties": None}
    collection = decode_feature_collection(json.dumps(doc))
    assert len(collection) == 1
    assert collection.features[0].properties == {}


def test_null_geometry_kept():
    doc = {"type": "FeatureCollection", "features": [{"type": "Feature", "geometry": None, "properties": {}}]}
    collection = decode_feature_collection(json.dumps(doc))
    assert collection.features[0].geometry is None
    assert collection.kinds() == set()


def test_malformed_json_carries_parser_message():
    with pytest.raises(DecodeError) as exc_info:
        decode_feature_collection('{"type": "FeatureCollection", "features": [')
    assert "Expecting" in str(exc_info.value)


@pytest.mark.parametrize("text", [
    "[]",
    '"just a string"',
    '{"type": "FeatureCollection"}',
    '{"type": "FeatureCollection", "features": {}}',
    '{"type": "FeatureCollection", "features": [1]}',
    '{"type": "FeatureCollection", "features": [{"geometry": [1, 2]}]}',
])
def test_invalid_structure(text):
    with pytest.raises(DecodeError):
        decode_feature_collection(text)


def test_round_trip_dict(polygon_geojson):
    collection = decode_feature_collection(polygon_geojson)
    assert collection.to_dict() == json.loads(polygon_geojson)


def test_geometry_collection_keeps_members():
    members = [{"type": "Point", "coordinates": [1, 2]}]
    doc = {"type": "Feature", "geometry": {"type": "GeometryCollection", "geometries": members}}
    geometry = decode_feature_collection(json.dumps(doc)).features[0].geometry
    assert geometry.coordinates is None
    assert geometry.to_dict() == {"type": "GeometryCollection", "geometries": members}


def test_geometry_collection_members_must_be_list():
    doc = {"type": "Feature", "geometry": {"type": "GeometryCollection", "geometries": {}}}
    with pytest.raises(DecodeError, match="must be a list"):
        decode_feature_collection(json.dumps(doc))
