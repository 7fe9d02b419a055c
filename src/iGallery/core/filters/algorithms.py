"""Pure per-sample math shared by every executor.

The helpers are compiled with Numba so the JIT kernels can inline them, while
remaining callable from plain Python for tests and the vectorised executor's
reference checks.

Colour adjustments follow the CSS filter functions a canvas ``filter`` applies
while drawing: ``brightness()``, ``contrast()`` and ``saturate()`` in that
order, evaluated on straight (non-premultiplied) sRGB values in ``[0, 1]``
with every intermediate clamped back into range.
"""

from __future__ import annotations

import math

from numba import jit

# Luminance weights used by the ``saturate()`` colour matrix in the Filter Effects
# specification.  They intentionally differ from Rec.709's four-digit coefficients.
LUMA_R = 0.213
LUMA_G = 0.715
LUMA_B = 0.072


@jit(nopython=True, cache=True)
def _clamp01(value: float) -> float:
    if value < 0.0:
        return 0.0
    if value > 1.0:
        return 1.0
    return value


@jit(nopython=True, cache=True)
def _float_to_uint8(value: float) -> int:
    """Convert a ``[0, 1]`` float into a byte using round-half-up."""

    scaled = _clamp01(value) * 255.0
    return int(math.floor(scaled + 0.5))


@jit(nopython=True, cache=True)
def _byte_from_sum(value: float) -> int:
    """Clamp a convolution sum to ``[0, 255]`` and round ties to even.

    This is the conversion a clamped byte array applies when pixel data is
    written back, so a sum of ``98.5`` stores ``98``.
    """

    if value <= 0.0:
        return 0
    if value >= 255.0:
        return 255
    lower = int(math.floor(value))
    fraction = value - lower
    if fraction > 0.5 or (fraction == 0.5 and lower % 2 == 1):
        lower += 1
    return lower


@jit(nopython=True, cache=True)
def _apply_color_filters(
    r: float,
    g: float,
    b: float,
    brightness: float,
    contrast: float,
    saturation: float,
) -> tuple[float, float, float]:
    """Return ``(r, g, b)`` after the brightness, contrast and saturate filters.

    ``brightness``, ``contrast`` and ``saturation`` are amounts where ``1.0`` is
    the identity (the editor's percentages divided by 100).
    """

    r = _clamp01(r * brightness)
    g = _clamp01(g * brightness)
    b = _clamp01(b * brightness)

    intercept = 0.5 - 0.5 * contrast
    r = _clamp01(r * contrast + intercept)
    g = _clamp01(g * contrast + intercept)
    b = _clamp01(b * contrast + intercept)

    s = saturation
    out_r = (LUMA_R + (1.0 - LUMA_R) * s) * r + (LUMA_G - LUMA_G * s) * g + (LUMA_B - LUMA_B * s) * b
    out_g = (LUMA_R - LUMA_R * s) * r + (LUMA_G + (1.0 - LUMA_G) * s) * g + (LUMA_B - LUMA_B * s) * b
    out_b = (LUMA_R - LUMA_R * s) * r + (LUMA_G - LUMA_G * s) * g + (LUMA_B + (1.0 - LUMA_B) * s) * b
    return _clamp01(out_r), _clamp01(out_g), _clamp01(out_b)


def sharpen_weights(amount: float) -> tuple[float, float]:
    """Return ``(centre, orthogonal)`` weights of the 3x3 sharpen kernel.

    Diagonal neighbours always weigh zero.  The weights sum to one, so flat
    regions pass through unchanged.
    """

    k = float(amount)
    return 1.0 + 4.0 * k, -k


def color_amounts(brightness: float, contrast: float, saturation: float) -> tuple[float, float, float]:
    """Convert editor percentages into filter amounts (``100`` -> ``1.0``)."""

    return brightness / 100.0, contrast / 100.0, saturation / 100.0


__all__ = [
    "LUMA_B",
    "LUMA_G",
    "LUMA_R",
    "color_amounts",
    "sharpen_weights",
]
