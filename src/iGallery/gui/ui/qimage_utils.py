"""Conversions between render surfaces and ``QImage``."""

from __future__ import annotations

import numpy as np
from PySide6.QtGui import QImage


def surface_to_qimage(surface: np.ndarray) -> QImage:
    """Return a detached ``Format_RGBA8888`` copy of an ``H x W x 4`` uint8 surface."""

    if surface.ndim != 3 or surface.shape[2] != 4:
        raise ValueError(f"Expected an H x W x 4 surface, got shape {surface.shape}")
    height, width = surface.shape[:2]
    data = np.ascontiguousarray(surface, dtype=np.uint8).tobytes()
    image = QImage(data, width, height, width * 4, QImage.Format.Format_RGBA8888)
    # ``QImage`` only borrows ``data``; the copy owns its pixels.
    return image.copy()


__all__ = ["surface_to_qimage"]
