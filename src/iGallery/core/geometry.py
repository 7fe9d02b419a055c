"""Affine helpers for the centred rotate/zoom transform of the render surface.

Canvas coordinates follow the raster convention: the origin sits at the
top-left corner, ``x`` grows to the right and ``y`` grows downwards.  With that
orientation a positive angle turns content clockwise on screen.
"""

from __future__ import annotations

import math

import numpy as np

# Quarter turns are by far the most common angles.  ``math.cos(math.pi / 2)`` is not exactly
# zero, so using a table keeps composed matrices free of 1e-17 residue and makes the pixel
# mapping reproducible on every platform.
_EXACT_TRIG: dict[int, tuple[float, float]] = {
    0: (1.0, 0.0),
    90: (0.0, 1.0),
    180: (-1.0, 0.0),
    270: (0.0, -1.0),
}


def rotation_cos_sin(degrees: float) -> tuple[float, float]:
    """Return ``(cos, sin)`` for *degrees*, exact for multiples of 90."""

    wrapped = math.fmod(float(degrees), 360.0)
    if wrapped < 0.0:
        wrapped += 360.0
    if wrapped.is_integer() and int(wrapped) in _EXACT_TRIG:
        return _EXACT_TRIG[int(wrapped)]
    radians = wrapped * math.pi / 180.0
    return math.cos(radians), math.sin(radians)


def translation_matrix(tx: float, ty: float) -> np.ndarray:
    matrix = np.identity(3, dtype=np.float64)
    matrix[0, 2] = tx
    matrix[1, 2] = ty
    return matrix


def rotation_matrix(degrees: float) -> np.ndarray:
    cos_t, sin_t = rotation_cos_sin(degrees)
    return np.array(
        [
            [cos_t, -sin_t, 0.0],
            [sin_t, cos_t, 0.0],
            [0.0, 0.0, 1.0],
        ],
        dtype=np.float64,
    )


def scale_matrix(factor: float) -> np.ndarray:
    return np.diag([float(factor), float(factor), 1.0]).astype(np.float64)


def build_canvas_matrix(width: int, height: int, rotation: float, zoom: float) -> np.ndarray:
    """Return the composed transform mapping source pixels onto the surface.

    The matrix is ``T(c) @ R(rotation) @ S(zoom) @ T(-c)`` where ``c`` is the
    midpoint of a ``width`` x ``height`` canvas, so rotation and zoom always
    pivot around the canvas centre regardless of the image content.
    """

    cx = width / 2.0
    cy = height / 2.0
    return (
        translation_matrix(cx, cy)
        @ rotation_matrix(rotation)
        @ scale_matrix(zoom)
        @ translation_matrix(-cx, -cy)
    )


def invert_affine(matrix: np.ndarray) -> np.ndarray:
    """Return the inverse of the affine *matrix* using the closed form.

    Raises
    ------
    ValueError
        If the linear part of *matrix* is singular.
    """

    a, b, tx = (float(v) for v in matrix[0])
    c, d, ty = (float(v) for v in matrix[1])
    det = a * d - b * c
    if abs(det) < 1e-12:
        raise ValueError("Affine transform is not invertible")
    ia = d / det
    ib = -b / det
    ic = -c / det
    id_ = a / det
    return np.array(
        [
            [ia, ib, -(ia * tx + ib * ty)],
            [ic, id_, -(ic * tx + id_ * ty)],
            [0.0, 0.0, 1.0],
        ],
        dtype=np.float64,
    )


def map_point(matrix: np.ndarray, x: float, y: float) -> tuple[float, float]:
    """Return ``(x, y)`` transformed by the affine *matrix*."""

    return (
        float(matrix[0, 0] * x + matrix[0, 1] * y + matrix[0, 2]),
        float(matrix[1, 0] * x + matrix[1, 1] * y + matrix[1, 2]),
    )


__all__ = [
    "build_canvas_matrix",
    "invert_affine",
    "map_point",
    "rotation_cos_sin",
    "rotation_matrix",
    "scale_matrix",
    "translation_matrix",
]
