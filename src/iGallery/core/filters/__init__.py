"""Pixel pipeline for the image editor.

- algorithms: per-sample colour math and kernel weights shared by all executors
- jit_executor / numpy_executor: two implementation strategies of the same passes
- facade: executor selection with automatic fallback
"""

from __future__ import annotations

from .facade import EXECUTORS, composite, select_executor, sharpen

__all__ = ["EXECUTORS", "composite", "select_executor", "sharpen"]
