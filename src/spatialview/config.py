"""
Configuration & Constants
=========================
This module serves as the central registry for the viewer's policy constants.

Why is this file needed?
------------------------
1. Framing policy: The camera distance multiplier and the fitted map zoom
   level change what the user sees first. They live here, not inline in the
   algorithms, so tests and views read the same values.
2. One place for render defaults: camera angle, clipping range, lights and
   point size are shared by the render session and the point cloud view.

Exports:
    CAMERA_DISTANCE_MULTIPLIER (float): Camera offset in units of the largest extent.
    MIN_EXTENT (float): Extent substituted for degenerate (zero-size) clouds.
    FIT_ZOOM (float): Map zoom applied after fitting to feature bounds.
    DEFAULT_VIEWPORT (tuple): (longitude, latitude, zoom) before any fit.
"""


# --- File families ---
POINT_CLOUD_EXTENSIONS: tuple[str, ...] = ("pcd", "txt", "xyz", "ply")
VECTOR_EXTENSIONS: tuple[str, ...] = ("geojson", "json")

# --- Point cloud framing ---
CAMERA_DISTANCE_MULTIPLIER: float = 2.0
MIN_EXTENT: float = 1e-3

# --- Height colour ramp (HSL) ---
HUE_SPAN: float = 0.6
RAMP_SATURATION: float = 1.0
RAMP_LIGHTNESS: float = 0.5

# --- Render session ---
CAMERA_VIEW_ANGLE: float = 75.0
CAMERA_CLIPPING_RANGE: tuple[float, float] = (0.1, 1000.0)
AMBIENT_INTENSITY: float = 0.5
DIRECTIONAL_LIGHT_POSITION: tuple[float, float, float] = (0.0, 1.0, 0.0)
DIRECTIONAL_LIGHT_INTENSITY: float = 0.5
DEFAULT_POINT_SIZE: float = 2.0
POINT_SIZE_RANGE: tuple[float, float] = (1.0, 20.0)
BACKGROUND_COLOR: str = "black"

# --- Map viewport ---
FIT_ZOOM: float = 8.0
DEFAULT_VIEWPORT: tuple[float, float, float] = (-100.0, 40.0, 3.5)
MAP_TILES: str = "OpenStreetMap"
FEATURE_COLOR: str = "#007cbf"
