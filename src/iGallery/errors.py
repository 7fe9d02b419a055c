"""Exception hierarchy shared by the engine, the stores and the UI shell."""

from __future__ import annotations


class IGalleryError(Exception):
    """Base class for every error raised by iGallery."""


class LoadError(IGalleryError):
    """The source image could not be fetched, decoded or read back."""


class ExportError(IGalleryError):
    """The render surface cannot be encoded (never rendered or tainted)."""


class StoreError(IGalleryError):
    """A media or profile store operation failed."""


__all__ = ["IGalleryError", "LoadError", "ExportError", "StoreError"]
