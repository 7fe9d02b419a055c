"""NumPy vectorised executor for compositing and sharpening.

It mirrors :mod:`.jit_executor` operation for operation so both paths yield the
same bytes, and serves as the fallback whenever the JIT kernels cannot run.
"""

from __future__ import annotations

import numpy as np

from .algorithms import LUMA_B, LUMA_G, LUMA_R, sharpen_weights


def _np_clamp01(values: np.ndarray) -> np.ndarray:
    return np.clip(values, 0.0, 1.0)


def _np_float_to_uint8(values: np.ndarray) -> np.ndarray:
    """Vectorised equivalent of ``_float_to_uint8`` (round half up)."""

    return np.floor(_np_clamp01(values) * 255.0 + 0.5).astype(np.uint8)


def _np_apply_color_filters(
    rgb: np.ndarray,
    brightness: float,
    contrast: float,
    saturation: float,
) -> np.ndarray:
    """Apply brightness, contrast and saturate to an ``(N, 3)`` float array."""

    r = _np_clamp01(rgb[:, 0] * brightness)
    g = _np_clamp01(rgb[:, 1] * brightness)
    b = _np_clamp01(rgb[:, 2] * brightness)

    intercept = 0.5 - 0.5 * contrast
    r = _np_clamp01(r * contrast + intercept)
    g = _np_clamp01(g * contrast + intercept)
    b = _np_clamp01(b * contrast + intercept)

    s = saturation
    out_r = (LUMA_R + (1.0 - LUMA_R) * s) * r + (LUMA_G - LUMA_G * s) * g + (LUMA_B - LUMA_B * s) * b
    out_g = (LUMA_R - LUMA_R * s) * r + (LUMA_G + (1.0 - LUMA_G) * s) * g + (LUMA_B - LUMA_B * s) * b
    out_b = (LUMA_R - LUMA_R * s) * r + (LUMA_G - LUMA_G * s) * g + (LUMA_B + (1.0 - LUMA_B) * s) * b
    return np.stack([_np_clamp01(out_r), _np_clamp01(out_g), _np_clamp01(out_b)], axis=1)


def composite_numpy(
    source: np.ndarray,
    inverse: np.ndarray,
    brightness: float,
    contrast: float,
    saturation: float,
    apply_color: bool,
) -> np.ndarray:
    """Draw *source* through *inverse* onto a cleared surface of the same size."""

    surface = np.zeros(source.shape, dtype=np.uint8)
    height, width = source.shape[:2]
    if width <= 0 or height <= 0:
        return surface

    py, px = np.mgrid[0:height, 0:width].astype(np.float64)
    px += 0.5
    py += 0.5
    u = inverse[0, 0] * px + inverse[0, 1] * py + inverse[0, 2]
    v = inverse[1, 0] * px + inverse[1, 1] * py + inverse[1, 2]
    sx = np.floor(u).astype(np.int64)
    sy = np.floor(v).astype(np.int64)

    valid = (sx >= 0) & (sy >= 0) & (sx < width) & (sy < height)
    if not valid.any():
        return surface

    samples = source[sy[valid], sx[valid]]
    if apply_color:
        rgb = samples[:, :3].astype(np.float64) / 255.0
        adjusted = _np_apply_color_filters(rgb, brightness, contrast, saturation)
        samples = samples.copy()
        samples[:, :3] = _np_float_to_uint8(adjusted)
    surface[valid] = samples
    return surface


def sharpen_numpy(surface: np.ndarray, amount: float) -> np.ndarray:
    """Return a sharpened copy of *surface*; the outermost ring is copied as-is."""

    output = np.array(surface, dtype=np.uint8, copy=True)
    height, width = surface.shape[:2]
    if amount <= 0.0 or width < 3 or height < 3:
        return output

    centre, edge = sharpen_weights(amount)
    channels = surface[..., :3].astype(np.float64)

    # Same accumulation order as the JIT kernel: top, left, centre, right, bottom.
    total = channels[:-2, 1:-1] * edge
    total = total + channels[1:-1, :-2] * edge
    total = total + channels[1:-1, 1:-1] * centre
    total = total + channels[1:-1, 2:] * edge
    total = total + channels[2:, 1:-1] * edge

    # ``np.rint`` rounds ties to even, matching ``_byte_from_sum``.
    output[1:-1, 1:-1, :3] = np.rint(np.clip(total, 0.0, 255.0)).astype(np.uint8)
    return output


__all__ = ["composite_numpy", "sharpen_numpy"]
