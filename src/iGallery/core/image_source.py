"""Fetch and decode source images for the editor.

Sources are addressed by URL the same way the gallery hands them out: plain
filesystem paths, ``file://`` URIs, ``data:`` URIs and remote ``http(s)``
resources.  Remote images are subject to the same pixel read-back rule a
browser canvas enforces: a cross-origin response may only be exported when the
server opted in through ``Access-Control-Allow-Origin``.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote, unquote_to_bytes, urlparse

import numpy as np
import requests
from PIL import Image, UnidentifiedImageError

from ..config import DOCUMENT_ORIGIN, HTTP_TIMEOUT_SECONDS
from ..errors import LoadError

_LOGGER = logging.getLogger(__name__)

CROSS_ORIGIN_MODES = ("anonymous", "use-credentials", None)


@dataclass(frozen=True)
class SourceImage:
    """Immutable decoded raster: ``pixels`` is a read-only ``H x W x 4`` RGBA array."""

    pixels: np.ndarray
    url: str = ""
    origin_clean: bool = True
    """``False`` when the pixels came from a cross-origin response without permission."""

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @classmethod
    def from_array(cls, pixels: np.ndarray, *, url: str = "", origin_clean: bool = True) -> SourceImage:
        """Wrap an ``H x W x 4`` uint8 array, copying it so later edits cannot leak in."""

        array = np.array(pixels, dtype=np.uint8, copy=True)
        if array.ndim != 3 or array.shape[2] != 4:
            raise ValueError(f"Expected an H x W x 4 RGBA array, got shape {array.shape}")
        array.setflags(write=False)
        return cls(pixels=array, url=url, origin_clean=origin_clean)


def decode_image_bytes(data: bytes, *, url: str = "", origin_clean: bool = True) -> SourceImage:
    """Decode *data* into a :class:`SourceImage` using Pillow.

    Only the first frame of animated formats is used.  EXIF orientation is not
    applied, matching how a canvas draws the raw image.
    """

    if not data:
        raise LoadError(f"Image resource is empty: {url or '<bytes>'}")
    try:
        with Image.open(io.BytesIO(data)) as handle:
            handle.load()
            rgba = handle.convert("RGBA")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise LoadError(f"Unable to decode image {url or '<bytes>'}: {exc}") from exc

    width, height = rgba.size
    if width <= 0 or height <= 0:
        raise LoadError(f"Image has no pixels: {url or '<bytes>'}")
    return SourceImage.from_array(np.asarray(rgba, dtype=np.uint8), url=url, origin_clean=origin_clean)


def _read_local(path: Path, url: str) -> bytes:
    try:
        return path.read_bytes()
    except (OSError, ValueError) as exc:
        raise LoadError(f"Unable to read image {url}: {exc}") from exc


def _read_data_url(url: str) -> bytes:
    header, sep, payload = url.partition(",")
    if not sep:
        raise LoadError("Malformed data URL")
    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise LoadError(f"Malformed base64 payload in data URL: {exc}") from exc
    return unquote_to_bytes(payload)


def _cors_allows(response: requests.Response, origin: str, *, credentials: bool = False) -> bool:
    allowed = response.headers.get("Access-Control-Allow-Origin", "").strip()
    if credentials:
        # Credentialed reads need the exact origin echoed back; "*" does not count.
        approved = response.headers.get("Access-Control-Allow-Credentials", "").strip()
        return allowed == origin and approved.lower() == "true"
    return allowed == "*" or allowed == origin


def _read_remote(
    url: str,
    *,
    cross_origin: str | None,
    timeout: float,
    session: requests.Session | None,
) -> tuple[bytes, bool]:
    headers = {}
    if cross_origin is not None:
        headers["Origin"] = DOCUMENT_ORIGIN
    getter = session.get if session is not None else requests.get
    try:
        response = getter(url, timeout=timeout, headers=headers)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise LoadError(f"Unable to fetch image {url}: {exc}") from exc

    allowed = _cors_allows(
        response, DOCUMENT_ORIGIN, credentials=cross_origin == "use-credentials"
    )
    if cross_origin is not None and not allowed:
        # A CORS request that the server did not approve never reaches the decoder.
        raise LoadError(f"Cross-origin read of {url} was denied by the server")
    return response.content, allowed


def fetch_image(
    url: str,
    *,
    cross_origin: str | None = "anonymous",
    timeout: float = HTTP_TIMEOUT_SECONDS,
    session: requests.Session | None = None,
) -> SourceImage:
    """Fetch *url* and decode it into a :class:`SourceImage`.

    Parameters
    ----------
    url:
        Filesystem path, ``file://``, ``data:`` or ``http(s)://`` URL.
    cross_origin:
        ``"anonymous"`` (default) or ``"use-credentials"`` issue a CORS request
        and fail with :class:`LoadError` when the server does not allow the
        read.  ``None`` loads the image without CORS; the result is marked as
        not origin-clean and cannot be exported.
    """

    if cross_origin not in CROSS_ORIGIN_MODES:
        raise ValueError(f"cross_origin must be one of {CROSS_ORIGIN_MODES}, got {cross_origin!r}")
    if not url or not isinstance(url, str):
        raise LoadError("Image URL is empty")

    lowered = url.lower()
    if lowered.startswith(("http://", "https://")):
        data, allowed = _read_remote(url, cross_origin=cross_origin, timeout=timeout, session=session)
        origin_clean = allowed
    elif lowered.startswith("data:"):
        data = _read_data_url(url)
        origin_clean = True
    elif lowered.startswith("file://"):
        data = _read_local(Path(unquote(urlparse(url).path)), url)
        origin_clean = True
    elif "://" in url:
        raise LoadError(f"Unsupported URL scheme: {url}")
    else:
        data = _read_local(Path(url).expanduser(), url)
        origin_clean = True

    source = decode_image_bytes(data, url=url, origin_clean=origin_clean)
    _LOGGER.debug("Decoded %s (%dx%d, origin_clean=%s)", url, source.width, source.height, origin_clean)
    return source


__all__ = ["CROSS_ORIGIN_MODES", "SourceImage", "decode_image_bytes", "fetch_image"]
