"""Gallery operations for one signed-in user.

:class:`GalleryService` sits between the Qt shell and a :class:`MediaStore`.
Storage failures stop here: they are logged and reported back as a
destructive :class:`Notice` so the window can show a toast instead of
crashing.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Literal

from ..core.engine import ExportedBlob
from ..errors import StoreError
from .media import MediaItem, generate_upload_name
from .store import MediaStore

_LOGGER = logging.getLogger(__name__)

NoticeVariant = Literal["default", "destructive"]

EDITED_SUFFIX = "_edited"


@dataclass(frozen=True)
class Notice:
    """A user facing toast message."""

    title: str
    description: str = ""
    variant: NoticeVariant = "default"

    @property
    def is_error(self) -> bool:
        return self.variant == "destructive"


def _error_notice(title: str, exc: Exception) -> Notice:
    return Notice(title, str(exc), "destructive")


class GalleryService:
    """List, upload, delete and save edited media in the user's namespace."""

    def __init__(
        self,
        store: MediaStore,
        user_id: str,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not user_id:
            raise ValueError("user_id must not be empty")
        self._store = store
        self._user_id = user_id
        self._clock = clock
        self._last_millis = 0
        self._items: list[MediaItem] = []

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def items(self) -> list[MediaItem]:
        return list(self._items)

    def images(self) -> list[MediaItem]:
        return [item for item in self._items if item.is_image]

    def _next_millis(self) -> int:
        # Names are derived from the clock, so a batch uploaded within one
        # millisecond still has to get distinct names.
        millis = max(int(self._clock() * 1000), self._last_millis + 1)
        self._last_millis = millis
        return millis

    def _path(self, name: str) -> str:
        return f"{self._user_id}/{name}"

    # ------------------------------------------------------------------
    def load_media(self) -> Notice | None:
        """Refresh :attr:`items` from the store; returns a notice on failure."""

        try:
            rows = self._store.list(self._user_id)
        except StoreError as exc:
            _LOGGER.error("Error loading media for %s: %s", self._user_id, exc)
            return _error_notice("Error loading media", exc)
        self._items = [MediaItem.from_listing(row) for row in rows]
        _LOGGER.debug("Loaded %d item(s) for %s", len(self._items), self._user_id)
        return None

    def upload_files(self, files: Iterable[tuple[str, bytes]]) -> Notice:
        """Upload ``(original_name, data)`` pairs and reload the listing.

        The batch stops at the first failure; files stored before it stay.
        """

        count = 0
        try:
            for original, data in files:
                name = generate_upload_name(original, millis=self._next_millis())
                self._store.upload(self._path(name), data)
                count += 1
        except StoreError as exc:
            _LOGGER.error("Upload failed after %d file(s): %s", count, exc)
            if count:
                self.load_media()
            return _error_notice("Upload failed", exc)

        notice = self.load_media()
        if notice is not None:
            return notice
        return Notice("Upload successful", f"{count} file(s) uploaded")

    def upload_paths(self, paths: Iterable[Path | str]) -> Notice:
        """Read files from disk and upload them with :meth:`upload_files`."""

        files = []
        for path in paths:
            path = Path(path)
            try:
                files.append((path.name, path.read_bytes()))
            except OSError as exc:
                _LOGGER.error("Unable to read %s: %s", path, exc)
                return _error_notice("Upload failed", exc)
        return self.upload_files(files)

    def delete(self, item: MediaItem) -> Notice:
        try:
            self._store.remove([item.storage_path(self._user_id)])
        except StoreError as exc:
            _LOGGER.error("Delete of %s failed: %s", item.name, exc)
            return _error_notice("Delete failed", exc)
        self._items = [entry for entry in self._items if entry.id != item.id]
        return Notice("Deleted", "Media deleted successfully")

    def save_edited(self, item: MediaItem, blob: ExportedBlob) -> Notice:
        """Store an exported edit of *item* as a new ``*_edited`` object.

        The object takes the extension of the encoded blob; the original
        object is left untouched.  Videos cannot be edited and are refused.
        """

        if item.is_video:
            _LOGGER.warning("Refusing to save an edit of video %s", item.name)
            return Notice("Save failed", "Only images can be edited", "destructive")
        name = generate_upload_name(
            f"{item.name}{blob.suggested_extension}", millis=self._next_millis(), suffix=EDITED_SUFFIX
        )
        try:
            self._store.upload(self._path(name), blob.data, content_type=blob.mime_type)
        except StoreError as exc:
            _LOGGER.error("Saving edit of %s failed: %s", item.name, exc)
            return _error_notice("Save failed", exc)
        notice = self.load_media()
        if notice is not None:
            return notice
        return Notice("Success", "Edited image saved")


__all__ = ["EDITED_SUFFIX", "GalleryService", "Notice", "NoticeVariant"]
