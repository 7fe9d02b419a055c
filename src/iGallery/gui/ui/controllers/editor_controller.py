"""Controller driving the image editor dialog."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from PySide6.QtCore import QObject, QThreadPool, Signal, Slot
from PySide6.QtGui import QImage

from ....core.engine import EngineState, ImageAdjustmentEngine
from ....core.image_source import SourceImage, fetch_image
from ....errors import ExportError, LoadError
from ....library.gallery import GalleryService, Notice
from ....library.media import MediaItem
from ..qimage_utils import surface_to_qimage
from ..tasks.image_load_worker import ImageLoadWorker

_LOGGER = logging.getLogger(__name__)


class EditorController(QObject):
    """Load an image on the thread pool and publish adjusted previews.

    Every parameter change re-renders synchronously and emits
    :attr:`previewUpdated`.  Opening another image while one is still loading
    supersedes the earlier request.
    """

    imageReady = Signal()
    previewUpdated = Signal(QImage)
    saved = Signal(object, str)
    """Emitted with the encoded bytes and their file extension after a successful export."""
    notice = Signal(str, str, str)
    """Emitted with ``(title, description, variant)`` for toast messages."""

    def __init__(
        self,
        *,
        engine: ImageAdjustmentEngine | None = None,
        gallery: GalleryService | None = None,
        pool: QThreadPool | None = None,
        fetcher: Callable[..., SourceImage] = fetch_image,
        cross_origin: str | None = "anonymous",
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._engine = engine or ImageAdjustmentEngine(cross_origin=cross_origin, fetcher=fetcher)
        self._gallery = gallery
        self._pool = pool or QThreadPool.globalInstance()
        self._fetcher = fetcher
        self._cross_origin = cross_origin
        self._item: MediaItem | None = None

    @property
    def engine(self) -> ImageAdjustmentEngine:
        return self._engine

    @property
    def item(self) -> MediaItem | None:
        return self._item

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def open_item(self, item: MediaItem) -> int:
        self._item = item
        return self.open_url(item.url)

    def open_url(self, url: str) -> int:
        """Start loading *url* in the background and return its ticket."""

        ticket = self._engine.begin_load(url)
        worker = ImageLoadWorker(url, ticket, cross_origin=self._cross_origin, fetcher=self._fetcher)
        worker.signals.loaded.connect(self._handle_loaded)
        worker.signals.failed.connect(self._handle_failed)
        self._pool.start(worker)
        return ticket

    @Slot(object, int)
    def _handle_loaded(self, source: SourceImage, ticket: int) -> None:
        if not self._engine.finish_load(ticket, source):
            return
        self.imageReady.emit()
        self._publish()

    @Slot(str, int)
    def _handle_failed(self, message: str, ticket: int) -> None:
        if self._engine.fail_load(ticket, LoadError(message)):
            self.notice.emit("Error loading image", message, "destructive")

    # ------------------------------------------------------------------
    # Adjustments
    # ------------------------------------------------------------------
    def set_parameter(self, name: str, value: float) -> float:
        stored = self._engine.set_parameter(name, value)
        self._publish()
        return stored

    def rotate_step(self) -> float:
        rotation = self._engine.rotate_step()
        self._publish()
        return rotation

    def zoom_in(self) -> float:
        zoom = self._engine.zoom_in()
        self._publish()
        return zoom

    def zoom_out(self) -> float:
        zoom = self._engine.zoom_out()
        self._publish()
        return zoom

    def reset(self) -> None:
        self._engine.reset()
        self._publish()

    def _publish(self) -> None:
        surface = self._engine.surface
        if self._engine.state is EngineState.READY and surface is not None:
            self.previewUpdated.emit(surface_to_qimage(surface))

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------
    def save(self) -> Notice:
        """Export the edit and, when a gallery is attached, store it as a new object."""

        try:
            blob = self._engine.export()
        except ExportError as exc:
            _LOGGER.error("Export failed: %s", exc)
            result = Notice("Save failed", str(exc), "destructive")
            self.notice.emit(result.title, result.description, result.variant)
            return result

        self.saved.emit(blob.data, blob.suggested_extension)
        if self._gallery is not None and self._item is not None:
            result = self._gallery.save_edited(self._item, blob)
        else:
            result = Notice("Success", "Edited image saved")
        self.notice.emit(result.title, result.description, result.variant)
        return result


__all__ = ["EditorController"]
