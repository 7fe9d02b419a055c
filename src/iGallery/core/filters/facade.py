"""Executor selection for the render pipeline.

The JIT kernels are preferred.  When Numba cannot compile or run them (for
example on an interpreter it does not support yet) the facade switches to the
vectorised NumPy executor for the rest of the session.
"""

from __future__ import annotations

import logging

import numpy as np

from .jit_executor import composite_jit, sharpen_jit
from .numpy_executor import composite_numpy, sharpen_numpy

_LOGGER = logging.getLogger(__name__)

EXECUTORS = ("auto", "jit", "numpy")

_JIT_DISABLED = False


def _disable_jit(exc: Exception) -> None:
    global _JIT_DISABLED
    if not _JIT_DISABLED:
        _LOGGER.warning("JIT executor unavailable, using NumPy executor instead: %s", exc)
    _JIT_DISABLED = True


def select_executor(executor: str = "auto") -> str:
    """Resolve *executor* to the concrete strategy, ``"jit"`` or ``"numpy"``.

    ``"auto"`` resolves to ``"jit"`` until the JIT path has failed once.
    """

    if executor not in EXECUTORS:
        raise ValueError(f"executor must be one of {EXECUTORS}, got {executor!r}")
    if executor == "auto":
        return "numpy" if _JIT_DISABLED else "jit"
    return executor


def composite(
    source: np.ndarray,
    inverse: np.ndarray,
    brightness: float,
    contrast: float,
    saturation: float,
    *,
    apply_color: bool = True,
    executor: str = "auto",
) -> np.ndarray:
    """Draw *source* through the *inverse* transform with the colour filters applied.

    ``brightness``, ``contrast`` and ``saturation`` are filter amounts where
    ``1.0`` is neutral.  The returned surface always has the source's shape.
    """

    chosen = select_executor(executor)
    if chosen == "numpy":
        return composite_numpy(source, inverse, brightness, contrast, saturation, apply_color)
    if executor == "jit":
        return composite_jit(source, inverse, brightness, contrast, saturation, apply_color)
    try:
        return composite_jit(source, inverse, brightness, contrast, saturation, apply_color)
    except Exception as exc:  # numba raises a zoo of error types on compile failures
        _disable_jit(exc)
        return composite_numpy(source, inverse, brightness, contrast, saturation, apply_color)


def sharpen(surface: np.ndarray, amount: float, *, executor: str = "auto") -> np.ndarray:
    """Return *surface* convolved with the sharpen kernel of strength *amount*.

    ``amount`` is the editor's sharpness divided by 100.  Zero returns an
    unmodified copy.
    """

    chosen = select_executor(executor)
    if chosen == "numpy":
        return sharpen_numpy(surface, amount)
    if executor == "jit":
        return sharpen_jit(surface, amount)
    try:
        return sharpen_jit(surface, amount)
    except Exception as exc:
        _disable_jit(exc)
        return sharpen_numpy(surface, amount)


__all__ = ["EXECUTORS", "composite", "select_executor", "sharpen"]
