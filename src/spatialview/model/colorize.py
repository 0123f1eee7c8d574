"""
Height Colorizer
================
Assigns every point a colour from a fixed HSL ramp based on its height (z).

The lowest points get hue 0.6 (blue), the highest hue 0.0 (red); saturation and
lightness are constant. A flat cloud maps every point to the low end. The map
is pure and order-preserving, so identical input gives byte-identical output.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from spatialview.config import HUE_SPAN, RAMP_LIGHTNESS, RAMP_SATURATION
from spatialview.model.geometry import as_points

if TYPE_CHECKING:
    import numpy.typing as npt


def normalized_heights(z: npt.NDArray[np.floating]) -> npt.NDArray[np.float64]:
    """Map z to [0, 1]; all zeros when the range is empty or flat."""
    if z.size == 0:
        return np.zeros(0, dtype=np.float64)
    z = z.astype(np.float64)
    z_min = z.min()
    z_range = z.max() - z_min
    if z_range == 0.0:
        return np.zeros_like(z)
    return (z - z_min) / z_range


def _hue_to_channel(p: npt.NDArray, q: npt.NDArray, t: npt.NDArray) -> npt.NDArray:
    t = np.mod(t, 1.0)
    return np.select(
        [t < 1.0 / 6.0, t < 0.5, t < 2.0 / 3.0],
        [p + (q - p) * 6.0 * t, q, p + (q - p) * 6.0 * (2.0 / 3.0 - t)],
        default=p,
    )


def hsl_to_rgb(
    hue: npt.NDArray[np.float64],
    saturation: float,
    lightness: float
) -> npt.NDArray[np.float64]:
    """
    Vectorised HSL -> RGB.

    Args:
        hue: (N,) hues in [0, 1].
        saturation: Scalar saturation in [0, 1].
        lightness: Scalar lightness in [0, 1].

    Returns:
        (N, 3) RGB values in [0, 1].
    """
    hue = np.asarray(hue, dtype=np.float64)
    if saturation == 0.0:
        return np.repeat(np.full((hue.size, 1), lightness), 3, axis=1)

    if lightness <= 0.5:
        q = lightness * (1.0 + saturation)
    else:
        q = lightness + saturation - lightness * saturation
    p = 2.0 * lightness - q

    p_arr = np.full_like(hue, p)
    q_arr = np.full_like(hue, q)
    return np.column_stack([
        _hue_to_channel(p_arr, q_arr, hue + 1.0 / 3.0),
        _hue_to_channel(p_arr, q_arr, hue),
        _hue_to_channel(p_arr, q_arr, hue - 1.0 / 3.0),
    ])


def height_hues(positions: npt.ArrayLike) -> npt.NDArray[np.float64]:
    points = as_points(positions)
    return (1.0 - normalized_heights(points[:, 2])) * HUE_SPAN


def colorize(positions: npt.ArrayLike) -> npt.NDArray[np.float32]:
    """
    Height-ramp colours for a cleaned position buffer.

    Args:
        positions: (N, 3) array or flat buffer without non-finite values.

    Returns:
        (N, 3) float32 RGB in [0, 1], one triple per point.
    """
    rgb = hsl_to_rgb(height_hues(positions), RAMP_SATURATION, RAMP_LIGHTNESS)
    return rgb.astype(np.float32).reshape(-1, 3)
