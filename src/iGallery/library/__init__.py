"""Media storage, profiles and gallery state."""

from .cube import CubeCarousel
from .gallery import GalleryService, Notice
from .media import MediaItem, classify_media, generate_upload_name, is_video
from .profiles import Profile, ProfileStore, toggle_theme
from .store import LocalMediaStore, MediaStore

__all__ = [
    "CubeCarousel",
    "GalleryService",
    "LocalMediaStore",
    "MediaItem",
    "MediaStore",
    "Notice",
    "Profile",
    "ProfileStore",
    "classify_media",
    "generate_upload_name",
    "is_video",
    "toggle_theme",
]
