"""Media storage: the bucket interface and a filesystem-backed implementation.

Objects live under ``<root>/<bucket>/<namespace>/<name>`` where the namespace
is the owner's opaque user identifier.  The local store enforces the same
bucket policy as the hosted one: a per-object size limit, a MIME allow-list
and no silent overwrites.
"""

from __future__ import annotations

import logging
import mimetypes
import os
import uuid
from pathlib import Path, PurePosixPath
from typing import Iterable, Protocol, runtime_checkable

from ..config import ALLOWED_MIME_TYPES, LIST_PAGE_SIZE, MAX_UPLOAD_BYTES, MEDIA_BUCKET
from ..errors import StoreError

_LOGGER = logging.getLogger(__name__)

# Formats the bucket accepts; ``mimetypes`` is only consulted for anything else.
_KNOWN_MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".mp4": "video/mp4",
    ".webm": "video/webm",
    ".mov": "video/quicktime",
}


def guess_mime_type(name: str) -> str | None:
    suffix = PurePosixPath(name).suffix.lower()
    if suffix in _KNOWN_MIME_TYPES:
        return _KNOWN_MIME_TYPES[suffix]
    guessed, _ = mimetypes.guess_type(name)
    return guessed


@runtime_checkable
class MediaStore(Protocol):
    """Operations the gallery needs from a storage bucket."""

    def list(self, namespace: str, *, limit: int = LIST_PAGE_SIZE, offset: int = 0) -> list[dict[str, str]]:
        ...

    def upload(self, path: str, data: bytes, *, content_type: str | None = None) -> None:
        ...

    def remove(self, paths: Iterable[str]) -> None:
        ...

    def get_public_url(self, path: str) -> str:
        ...


class LocalMediaStore:
    """Filesystem bucket implementing :class:`MediaStore`."""

    def __init__(
        self,
        root: Path | str,
        bucket: str = MEDIA_BUCKET,
        *,
        max_bytes: int = MAX_UPLOAD_BYTES,
        allowed_mime_types: Iterable[str] = ALLOWED_MIME_TYPES,
    ) -> None:
        self._bucket = bucket
        self._bucket_root = Path(root).expanduser().absolute() / bucket
        self._max_bytes = int(max_bytes)
        self._allowed = frozenset(allowed_mime_types)

    @property
    def bucket_root(self) -> Path:
        return self._bucket_root

    # ------------------------------------------------------------------
    def _parts(self, path: str) -> tuple[str, ...]:
        if not path or not isinstance(path, str):
            raise StoreError("Object path is empty")
        parts = tuple(part for part in path.replace("\\", "/").split("/") if part)
        if not parts or any(part in {".", ".."} for part in parts) or path.startswith("/"):
            raise StoreError(f"Invalid object path: {path!r}")
        return parts

    def _resolve(self, path: str) -> Path:
        return self._bucket_root.joinpath(*self._parts(path))

    def _object_id(self, namespace: str, name: str) -> str:
        return str(uuid.uuid5(uuid.NAMESPACE_URL, f"{self._bucket}/{namespace}/{name}"))

    # ------------------------------------------------------------------
    def list(self, namespace: str, *, limit: int = LIST_PAGE_SIZE, offset: int = 0) -> list[dict[str, str]]:
        """Return ``{id, name, url}`` rows for the objects in *namespace*, sorted by name."""

        folder = self._resolve(namespace)
        if not folder.exists():
            return []
        try:
            names = sorted(
                entry.name
                for entry in folder.iterdir()
                if entry.is_file() and not entry.name.startswith(".")
            )
        except OSError as exc:
            raise StoreError(f"Unable to list {namespace}: {exc}") from exc

        start = max(0, int(offset))
        page = names[start : start + max(0, int(limit))]
        return [
            {
                "id": self._object_id(namespace, name),
                "name": name,
                "url": self.get_public_url(f"{namespace}/{name}"),
            }
            for name in page
        ]

    def upload(self, path: str, data: bytes, *, content_type: str | None = None) -> None:
        """Store *data* at *path*; existing objects are never overwritten."""

        parts = self._parts(path)
        if len(parts) < 2:
            raise StoreError(f"Object path must include a namespace: {path!r}")
        if len(data) > self._max_bytes:
            raise StoreError(
                f"{parts[-1]} is {len(data)} bytes, larger than the {self._max_bytes} byte limit"
            )
        mime = content_type or guess_mime_type(parts[-1])
        if mime not in self._allowed:
            raise StoreError(f"mime type {mime or 'unknown'} is not supported")

        target = self._bucket_root.joinpath(*parts)
        if target.exists():
            raise StoreError(f"The resource already exists: {path}")

        tmp_path = target.with_name(f".{target.name}.{uuid.uuid4().hex}.tmp")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            # ``link`` refuses an existing target, unlike ``replace``.
            os.link(tmp_path, target)
        except FileExistsError as exc:
            raise StoreError(f"The resource already exists: {path}") from exc
        except OSError as exc:
            raise StoreError(f"Unable to upload {path}: {exc}") from exc
        finally:
            tmp_path.unlink(missing_ok=True)
        _LOGGER.info("Uploaded %s (%d bytes, %s)", path, len(data), mime)

    def remove(self, paths: Iterable[str]) -> None:
        """Delete every object in *paths*; objects that do not exist are skipped."""

        targets = [self._resolve(path) for path in paths]
        for target in targets:
            try:
                target.unlink(missing_ok=True)
            except OSError as exc:
                raise StoreError(f"Unable to remove {target.name}: {exc}") from exc
        _LOGGER.info("Removed %d object(s) from %s", len(targets), self._bucket)

    def get_public_url(self, path: str) -> str:
        return self._resolve(path).as_uri()


__all__ = ["LocalMediaStore", "MediaStore", "guess_mime_type"]
