"""State for the 3D cube carousel."""

from __future__ import annotations

from typing import Iterable

from ..config import CUBE_FACE_COUNT
from .media import MediaItem


class CubeCarousel:
    """Cycle through the image items of a gallery.

    Videos are skipped.  The cube has six faces, filled with the first six
    images; navigation wraps around the full image list.
    """

    def __init__(self, items: Iterable[MediaItem] = ()) -> None:
        self._images: list[MediaItem] = []
        self._index = 0
        self.set_items(items)

    def set_items(self, items: Iterable[MediaItem]) -> None:
        self._images = [item for item in items if item.is_image]
        if self._index >= len(self._images):
            self._index = 0

    @property
    def images(self) -> list[MediaItem]:
        return list(self._images)

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def count(self) -> int:
        return len(self._images)

    @property
    def is_empty(self) -> bool:
        return not self._images

    @property
    def current(self) -> MediaItem | None:
        if not self._images:
            return None
        return self._images[self._index]

    def face_urls(self) -> list[str]:
        return [item.url for item in self._images[:CUBE_FACE_COUNT]]

    def can_navigate(self) -> bool:
        return len(self._images) > 1

    def next(self) -> MediaItem | None:
        if self._images:
            self._index = (self._index + 1) % len(self._images)
        return self.current

    def previous(self) -> MediaItem | None:
        if self._images:
            self._index = (self._index - 1) % len(self._images)
        return self.current

    def position_label(self) -> str:
        if not self._images:
            return "0 / 0"
        return f"{self._index + 1} / {len(self._images)}"


__all__ = ["CubeCarousel"]
