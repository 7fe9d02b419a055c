"""Application wide constants."""

from __future__ import annotations

import os
from pathlib import Path

MEDIA_BUCKET = "media"
"""Name of the storage bucket holding every user's uploads."""

MAX_UPLOAD_BYTES = 52428800  # 50 MiB
ALLOWED_MIME_TYPES = (
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "video/mp4",
    "video/webm",
    "video/quicktime",
)

VIDEO_EXTENSIONS = (".mp4", ".webm", ".mov")
LIST_PAGE_SIZE = 100

EXPORT_MIME_TYPE = "image/png"
EXPORT_FORMAT = "PNG"

DEFAULT_THEME = "dark"
DEFAULT_USERNAME = "User"
PROFILES_FILE_NAME = "profiles.json"

CUBE_FACE_COUNT = 6

HTTP_TIMEOUT_SECONDS = 15.0
DOCUMENT_ORIGIN = "null"
"""Origin presented to remote hosts; ``null`` matches a file based document."""

LIBRARY_ENV_VAR = "IGALLERY_HOME"


def default_library_root() -> Path:
    """Return the directory holding buckets and profiles."""

    override = os.environ.get(LIBRARY_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".igallery"
