"""spatialview - interactive viewer for point clouds and GeoJSON feature collections."""
from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("spatialview")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"
