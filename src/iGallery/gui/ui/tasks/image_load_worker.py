"""Background worker that fetches and decodes an image for the editor."""

from __future__ import annotations

import logging
from typing import Callable

from PySide6.QtCore import QObject, QRunnable, Signal

from ....core.image_source import SourceImage, fetch_image
from ....errors import LoadError

_LOGGER = logging.getLogger(__name__)


class ImageLoadWorkerSignals(QObject):
    """Signals emitted by :class:`ImageLoadWorker`."""

    loaded = Signal(object, int)
    """Delivers the decoded :class:`SourceImage` together with its load ticket."""

    failed = Signal(str, int)
    """Emitted with an error message when the image cannot be loaded."""

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)


class ImageLoadWorker(QRunnable):
    """Fetch *url* off the GUI thread."""

    def __init__(
        self,
        url: str,
        ticket: int,
        *,
        cross_origin: str | None = "anonymous",
        fetcher: Callable[..., SourceImage] = fetch_image,
    ) -> None:
        super().__init__()
        self.setAutoDelete(True)
        self._url = url
        self._ticket = int(ticket)
        self._cross_origin = cross_origin
        self._fetcher = fetcher
        self.signals = ImageLoadWorkerSignals()

    @property
    def ticket(self) -> int:
        return self._ticket

    def run(self) -> None:  # type: ignore[override]
        try:
            source = self._fetcher(self._url, cross_origin=self._cross_origin)
        except LoadError as exc:
            _LOGGER.warning("Failed to load %s: %s", self._url, exc)
            self.signals.failed.emit(str(exc), self._ticket)
            return
        except Exception as exc:
            _LOGGER.exception("Unexpected error while loading %s", self._url)
            self.signals.failed.emit(f"Unable to load image {self._url}: {exc}", self._ticket)
            return
        self.signals.loaded.emit(source, self._ticket)


__all__ = ["ImageLoadWorker", "ImageLoadWorkerSignals"]
