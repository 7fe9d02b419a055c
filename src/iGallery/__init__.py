"""iGallery: personal media gallery with a client-side image adjustment engine."""

from __future__ import annotations

from .utils.logging import get_logger

__version__ = "0.1.0"

__all__ = ["__version__", "get_logger"]
