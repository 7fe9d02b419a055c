"""Media item model and file classification helpers."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Literal

from ..config import VIDEO_EXTENSIONS

MediaKind = Literal["image", "video"]


def is_video(name: str) -> bool:
    """Return ``True`` when *name* carries one of the video extensions (any case)."""

    return name.lower().endswith(VIDEO_EXTENSIONS)


def classify_media(name: str) -> MediaKind:
    """Classify *name* as ``"video"`` or ``"image"``.

    Anything that is not a known video container counts as an image; only
    images are eligible for editing and the 3D cube view.
    """

    return "video" if is_video(name) else "image"


def file_extension(name: str) -> str:
    """Return the text after the last dot of *name* (the whole name if it has none)."""

    return name.rsplit(".", 1)[-1]


def generate_upload_name(original: str, *, millis: int | None = None, suffix: str = "") -> str:
    """Return an object name ``<epoch-millis><suffix>.<ext>``.

    *millis* defaults to the current time in milliseconds.  The extension is
    taken from *original*.
    """

    if millis is None:
        millis = int(time.time() * 1000)
    return f"{millis}{suffix}.{file_extension(original)}"


@dataclass(frozen=True)
class MediaItem:
    """A stored object as presented by the gallery grid."""

    id: str
    name: str
    url: str
    kind: MediaKind = "image"

    @classmethod
    def from_listing(cls, entry: dict[str, str]) -> MediaItem:
        name = entry["name"]
        return cls(id=entry["id"], name=name, url=entry["url"], kind=classify_media(name))

    @property
    def is_image(self) -> bool:
        return self.kind == "image"

    @property
    def is_video(self) -> bool:
        return self.kind == "video"

    def storage_path(self, namespace: str) -> str:
        return f"{namespace}/{self.name}"


__all__ = [
    "MediaItem",
    "MediaKind",
    "classify_media",
    "file_extension",
    "generate_upload_name",
    "is_video",
]
