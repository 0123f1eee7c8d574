"""
PLY Decoder
===========
Polygon File Format meshes (ascii, binary_little_endian, binary_big_endian),
read with plyfile.

Vertex properties:
    x y z                      -> positions (required)
    red green blue             -> colors (integer types scaled by 1/255)
    nx ny nz                   -> normals

When the file has faces but no normals, per-vertex normals are computed from
the mesh with pyvista. They are not used for point rendering but are part of
the decoded buffer.
"""
from __future__ import annotations

import io
import logging
from typing import Optional, TYPE_CHECKING

import numpy as np
import pyvista as pv
from plyfile import PlyData, PlyElementParseError, PlyHeaderParseError, PlyListProperty, PlyParseError

from spatialview.model.decoders.base import PointCloudDecoder, ProgressReporter
from spatialview.model.decoders.registry import register_decoder
from spatialview.model.errors import DecodeError
from spatialview.model.formats import PointCloudFormat
from spatialview.model.geometry import PointBuffer

if TYPE_CHECKING:
    import numpy.typing as npt
    from plyfile import PlyElement

logger = logging.getLogger(__name__)


def read_ply(data: bytes) -> PlyData:
    """
    Parse a whole PLY document.

    Raises:
        DecodeError: With the plyfile message, for header or body errors.
    """
    try:
        return PlyData.read(io.BytesIO(data))
    except PlyHeaderParseError as e:
        raise DecodeError(f"Malformed PLY header: {e}") from e
    except PlyElementParseError as e:
        raise DecodeError(f"Truncated or malformed PLY data: {e}") from e
    except (PlyParseError, ValueError) as e:
        raise DecodeError(f"Malformed PLY data: {e}") from e


def declared_vertices(data: bytes) -> Optional[int]:
    """Vertex count from the `element vertex N` header line, without reading the body."""
    end = data.find(b"end_header")
    if not data.startswith(b"ply") or end == -1:
        return None
    for line in data[:end].splitlines():
        tokens = line.split()
        if len(tokens) == 3 and tokens[0] == b"element" and tokens[1] == b"vertex":
            try:
                return int(tokens[2])
            except ValueError:
                return None
    return None


def _element(ply: PlyData, name: str) -> Optional[PlyElement]:
    for element in ply.elements:
        if element.name == name:
            return element
    return None


def _stack(rows: np.ndarray, names: tuple[str, str, str]) -> npt.NDArray[np.float32]:
    return np.column_stack([rows[name] for name in names]).astype(np.float32)


def _faces_to_vtk(face: PlyElement, n_vertices: int) -> Optional[npt.NDArray[np.int64]]:
    """Flatten face index lists into the pyvista [n, i0, i1, ...] layout."""
    prop = next((p for p in face.properties if isinstance(p, PlyListProperty)), None)
    if prop is None:
        return None
    polygons = [np.asarray(f, dtype=np.int64) for f in face.data[prop.name]]
    polygons = [f for f in polygons if f.size >= 3]
    if not polygons:
        return None
    flat = np.concatenate(polygons)
    if flat.min() < 0 or flat.max() >= n_vertices:
        raise DecodeError(f"Malformed PLY face: vertex index out of range for {n_vertices} vertices.")
    return np.concatenate([np.concatenate(([f.size], f)) for f in polygons])


def compute_normals(positions: npt.NDArray[np.float32], faces: npt.NDArray[np.int64]) -> npt.NDArray[np.float32]:
    """Per-vertex normals of a polygon mesh."""
    mesh = pv.PolyData(positions, faces)
    mesh = mesh.compute_normals(cell_normals=False, point_normals=True, split_vertices=False, auto_orient_normals=False)
    return np.asarray(mesh.point_data["Normals"], dtype=np.float32)


@register_decoder
class PLYDecoder(PointCloudDecoder):
    FORMAT = PointCloudFormat.PLY

    def estimate_points(self, data: bytes) -> Optional[int]:
        return declared_vertices(data)

    def _decode(self, data: bytes, report: ProgressReporter) -> PointBuffer:
        ply = read_ply(data)
        logger.debug(
            f"PLY: text={ply.text}, byte_order={ply.byte_order}, "
            f"elements={[(e.name, e.count) for e in ply.elements]}"
        )
        report(0.8)

        vertex = _element(ply, "vertex")
        if vertex is None:
            raise DecodeError("Malformed PLY header: no vertex element.")
        names = vertex.data.dtype.names or ()
        for axis in ("x", "y", "z"):
            if axis not in names:
                raise DecodeError(f"Unsupported PLY field layout: vertex element has no '{axis}' property.")

        positions = _stack(vertex.data, ("x", "y", "z"))

        colors = None
        if all(name in names for name in ("red", "green", "blue")):
            colors = _stack(vertex.data, ("red", "green", "blue"))
            if vertex.data["red"].dtype.kind in "iu":
                colors = np.clip(colors / 255.0, 0.0, 1.0)

        normals = None
        face = _element(ply, "face")
        if all(name in names for name in ("nx", "ny", "nz")):
            normals = _stack(vertex.data, ("nx", "ny", "nz"))
        elif face is not None and face.count > 0:
            faces = _faces_to_vtk(face, vertex.count)
            if faces is not None:
                normals = compute_normals(positions, faces)
        report(0.9)

        return PointBuffer(positions=positions, colors=colors, normals=normals)
