import os
import sys
from types import SimpleNamespace

import numpy as np
import pytest

# Add the src directory to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from spatialview.model.files import SourceFile  # noqa: E402
from spatialview.model.log import LogBook  # noqa: E402


# --- Headless plotter ---

class FakeActor:
    def __init__(self, mesh, kwargs):
        self.mesh = mesh
        self.kwargs = kwargs
        self.prop = SimpleNamespace(point_size=kwargs.get("point_size"), color=None)
        self.mapper = SimpleNamespace(scalar_visibility=True)


class FakeInteractor:
    def __init__(self):
        self.observers = {}
        self._next_id = 1

    def add_observer(self, event, callback):
        observer_id = self._next_id
        self._next_id += 1
        self.observers[observer_id] = (event, callback)
        return observer_id

    def remove_observer(self, observer_id):
        self.observers.pop(observer_id, None)

    def fire(self, event):
        for name, callback in list(self.observers.values()):
            if name == event:
                callback(None, event)


class FakePlotter:
    """Records what a RenderSession does to a pyvista plotter."""

    def __init__(self):
        self.camera = SimpleNamespace(
            position=(0.0, 0.0, 1.0),
            focal_point=(0.0, 0.0, 0.0),
            up=(0.0, 1.0, 0.0),
            view_angle=30.0,
            clipping_range=(0.01, 1000.0),
        )
        self.iren = FakeInteractor()
        self.actors = []
        self.lights = []
        self.background = None
        self.parallel_projection = True
        self.style = None
        self.has_axes = False
        self.render_count = 0
        self.closed = False

    def set_background(self, color):
        self.background = color

    def disable_parallel_projection(self):
        self.parallel_projection = False

    def remove_all_lights(self):
        self.lights = []

    def add_light(self, light):
        self.lights.append(light)

    def enable_trackball_style(self):
        self.style = "trackball"

    def add_axes(self):
        self.has_axes = True

    def add_points(self, mesh, **kwargs):
        actor = FakeActor(mesh, kwargs)
        self.actors.append(actor)
        return actor

    def remove_actor(self, actor, reset_camera=False, render=True):
        self.actors.remove(actor)
        return True

    def render(self):
        self.render_count += 1

    def close(self):
        self.closed = True


@pytest.fixture
def plotter_factory():
    """Factory producing FakePlotters; created instances are kept in `.created`."""
    created = []

    def factory():
        plotter = FakePlotter()
        created.append(plotter)
        return plotter

    factory.created = created
    return factory


@pytest.fixture
def log_book():
    return LogBook()


# --- Sample files ---

PCD_HEADER = (
    "# .PCD v0.7 - Point Cloud Data file format\n"
    "VERSION 0.7\n"
    "FIELDS {fields}\n"
    "SIZE {sizes}\n"
    "TYPE {types}\n"
    "COUNT {counts}\n"
    "WIDTH {n}\n"
    "HEIGHT 1\n"
    "VIEWPOINT 0 0 0 1 0 0 0\n"
    "POINTS {n}\n"
    "DATA {data}\n"
)


def pcd_header(n, data="ascii", fields="x y z", sizes="4 4 4", types="F F F", counts="1 1 1"):
    return PCD_HEADER.format(n=n, data=data, fields=fields, sizes=sizes, types=types, counts=counts)


@pytest.fixture
def pcd_ascii_bytes():
    """Four points spanning 1 x 2 x 4."""
    body = "0 0 0\n1 0 0\n0 2 0\n0 0 4\n"
    return (pcd_header(4) + body).encode("ascii")


@pytest.fixture
def pcd_binary_bytes():
    """Three points with packed float rgb (red, green, blue)."""
    dtype = np.dtype([("x", "<f4"), ("y", "<f4"), ("z", "<f4"), ("rgb", "<f4")])
    records = np.zeros(3, dtype=dtype)
    records["x"] = [0.0, 1.0, 2.0]
    records["y"] = [0.0, 1.0, 2.0]
    records["z"] = [0.0, 0.5, 1.0]
    records["rgb"] = np.array([0xFF0000, 0x00FF00, 0x0000FF], dtype=np.uint32).view(np.float32)
    header = pcd_header(3, data="binary", fields="x y z rgb", sizes="4 4 4 4", types="F F F F", counts="1 1 1 1")
    return header.encode("ascii") + records.tobytes()


@pytest.fixture
def xyz_bytes():
    return b"# exported scan\n0 0 0\n\n1 1 1\n2 2 2\n"


@pytest.fixture
def xyz_color_bytes():
    return b"0 0 0 255 0 0\n1 1 1 0 255 0\n"


PLY_ASCII = """ply
format ascii 1.0
comment single triangle
element vertex 3
property float x
property float y
property float z
property uchar red
property uchar green
property uchar blue
element face 1
property list uchar int vertex_indices
end_header
0 0 0 255 0 0
1 0 0 0 255 0
0 1 0 0 0 255
3 0 1 2
"""


@pytest.fixture
def ply_ascii_bytes():
    return PLY_ASCII.encode("ascii")


@pytest.fixture
def ply_binary_bytes():
    """Binary little endian triangle without colors or normals."""
    header = (
        "ply\n"
        "format binary_little_endian 1.0\n"
        "element vertex 3\n"
        "property float x\n"
        "property float y\n"
        "property float z\n"
        "element face 1\n"
        "property list uchar int vertex_indices\n"
        "end_header\n"
    ).encode("ascii")
    vertices = np.array([[0, 0, 0], [1, 0, 0], [0, 1, 0]], dtype="<f4").tobytes()
    face = np.array([3], dtype="u1").tobytes() + np.array([0, 1, 2], dtype="<i4").tobytes()
    return header + vertices + face


@pytest.fixture
def polygon_geojson():
    return (
        '{"type": "FeatureCollection", "features": [{"type": "Feature", '
        '"geometry": {"type": "Polygon", "coordinates": [[[0, 0], [0, 2], [2, 2], [2, 0], [0, 0]]]}, '
        '"properties": {"name": "square"}}]}'
    )


@pytest.fixture
def make_source():
    """Build a SourceFile from a name and bytes."""
    def _make(name, data):
        return SourceFile.from_bytes(name, data)
    return _make
