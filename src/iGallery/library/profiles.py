"""Per-user profile rows (display name and theme preference)."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from ..config import DEFAULT_THEME, DEFAULT_USERNAME, PROFILES_FILE_NAME, default_library_root
from ..errors import StoreError
from ..utils.jsonio import read_json, write_json

_LOGGER = logging.getLogger(__name__)

THEMES = ("light", "dark")


def toggle_theme(theme: str) -> str:
    """Return the theme the toggle button switches to from *theme*."""

    return "dark" if theme == "light" else "light"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class Profile:
    user_id: str
    username: str = DEFAULT_USERNAME
    theme_preference: str = DEFAULT_THEME
    created_at: str = ""
    updated_at: str = ""


class ProfileStore:
    """JSON-backed profile table keyed by user id.

    The first :meth:`get` for an unknown user creates its row with the default
    username and theme, the way signing up provisions a profile.
    """

    def __init__(self, path: Path | str | None = None) -> None:
        if path is None:
            path = default_library_root() / PROFILES_FILE_NAME
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _read_rows(self) -> dict[str, dict[str, str]]:
        if not self._path.exists():
            return {}
        data = read_json(self._path)
        rows = data.get("profiles", {})
        if not isinstance(rows, dict):
            raise StoreError(f"Malformed profile table in {self._path}")
        return rows

    def _write_rows(self, rows: dict[str, dict[str, str]]) -> None:
        write_json(self._path, {"profiles": rows})

    @staticmethod
    def _to_profile(user_id: str, row: dict[str, str]) -> Profile:
        theme = row.get("theme_preference", DEFAULT_THEME)
        if theme not in THEMES:
            theme = DEFAULT_THEME
        return Profile(
            user_id=user_id,
            username=str(row.get("username") or DEFAULT_USERNAME),
            theme_preference=theme,
            created_at=str(row.get("created_at", "")),
            updated_at=str(row.get("updated_at", "")),
        )

    # ------------------------------------------------------------------
    def ensure(self, user_id: str, username: str | None = None, theme_preference: str | None = None) -> Profile:
        """Return the profile for *user_id*, creating it when missing."""

        if not user_id:
            raise StoreError("User id is empty")
        theme = theme_preference or DEFAULT_THEME
        if theme not in THEMES:
            raise StoreError(f"Unsupported theme {theme!r}; expected one of {THEMES}")

        with self._lock:
            rows = self._read_rows()
            row = rows.get(user_id)
            if row is None:
                stamp = _now_iso()
                row = {
                    "username": username or DEFAULT_USERNAME,
                    "theme_preference": theme,
                    "created_at": stamp,
                    "updated_at": stamp,
                }
                rows[user_id] = row
                self._write_rows(rows)
                _LOGGER.info("Created profile for %s", user_id)
            return self._to_profile(user_id, row)

    def get(self, user_id: str) -> Profile:
        return self.ensure(user_id)

    def update(self, user_id: str, *, theme_preference: str) -> Profile:
        """Persist a new theme preference for *user_id*."""

        if theme_preference not in THEMES:
            raise StoreError(f"Unsupported theme {theme_preference!r}; expected one of {THEMES}")
        self.ensure(user_id)
        with self._lock:
            rows = self._read_rows()
            row = dict(rows[user_id])
            row["theme_preference"] = theme_preference
            row["updated_at"] = _now_iso()
            rows[user_id] = row
            self._write_rows(rows)
        return self._to_profile(user_id, row)


__all__ = ["Profile", "ProfileStore", "THEMES", "toggle_theme"]
