"""Tests for spatialview.model.files and spatialview.model.state."""
import pytest

from spatialview.model.files import FileMeta, SourceFile
from spatialview.model.formats import FileFamily, PointCloudFormat
from spatialview.model.state import ViewerState


class TestSourceFile:
    def test_point_cloud_meta(self, make_source, pcd_ascii_bytes):
        source = make_source("scan.pcd", pcd_ascii_bytes)
        assert source.is_point_cloud
        assert source.subformat is PointCloudFormat.PCD
        assert source.meta.points == 4
        assert source.meta.features is None
        assert source.size == len(pcd_ascii_bytes)

    def test_vector_meta(self, make_source, polygon_geojson):
        source = make_source("area.geojson", polygon_geojson.encode())
        assert source.is_vector
        assert source.meta.features == 1

    def test_broken_vector_meta(self, make_source):
        source = make_source("area.json", b"{not json")
        assert source.is_vector
        assert source.meta.features is None

    def test_unknown_file(self, make_source):
        source = make_source("photo.png", b"\x89PNG")
        assert source.family is FileFamily.UNKNOWN
        assert source.meta == FileMeta(size=4)

    def test_unique_ids(self, make_source, xyz_bytes):
        assert make_source("a.xyz", xyz_bytes).id != make_source("a.xyz", xyz_bytes).id

    def test_from_path(self, tmp_path, ply_ascii_bytes):
        path = tmp_path / "mesh.ply"
        path.write_bytes(ply_ascii_bytes)
        source = SourceFile.from_path(path)
        assert source.name == "mesh.ply"
        assert source.meta.points == 3

    def test_from_missing_path(self, tmp_path):
        with pytest.raises(OSError):
            SourceFile.from_path(tmp_path / "missing.pcd")

    def test_describe(self):
        assert FileMeta(size=10, points=3).describe() == "10 bytes, 3 points"


class TestViewerState:
    def test_activate_and_remove(self, make_source, xyz_bytes):
        state = ViewerState()
        first = make_source("a.xyz", xyz_bytes)
        second = make_source("b.xyz", xyz_bytes)
        state.add(first)
        state.add(second)

        assert state.activate(second.id) is second
        assert state.active is second

        assert state.remove(second.id) is second
        assert state.active_id is None
        assert state.files == [first]

    def test_remove_inactive_keeps_active(self, make_source, xyz_bytes):
        state = ViewerState()
        first = make_source("a.xyz", xyz_bytes)
        second = make_source("b.xyz", xyz_bytes)
        state.add(first)
        state.add(second)
        state.activate(first.id)
        state.remove(second.id)
        assert state.active is first

    def test_unknown_ids(self, make_source, xyz_bytes):
        state = ViewerState()
        state.add(make_source("a.xyz", xyz_bytes))
        assert state.activate("nope") is None
        assert state.active is None
        assert state.remove("nope") is None

    def test_reset(self, make_source, xyz_bytes):
        state = ViewerState()
        source = make_source("a.xyz", xyz_bytes)
        state.add(source)
        state.activate(source.id)
        state.reset()
        assert state.files == []
        assert state.active is None
