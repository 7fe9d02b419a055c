"""Controller that restores and toggles the user's colour theme."""

from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QObject, Signal

from ....config import DEFAULT_THEME
from ....errors import StoreError
from ....library.profiles import ProfileStore, toggle_theme

_LOGGER = logging.getLogger(__name__)


class ThemeController(QObject):
    """Keep the active theme in sync with the stored profile."""

    themeChanged = Signal(str)

    def __init__(self, profiles: ProfileStore, user_id: str, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._profiles = profiles
        self._user_id = user_id
        self._theme = DEFAULT_THEME

    def theme(self) -> str:
        return self._theme

    def restore(self) -> str:
        """Load the stored preference, falling back to the default theme."""

        try:
            theme = self._profiles.get(self._user_id).theme_preference
        except StoreError as exc:
            _LOGGER.error("Unable to restore theme for %s: %s", self._user_id, exc)
            theme = DEFAULT_THEME
        self._theme = theme
        self.themeChanged.emit(theme)
        return theme

    def toggle(self) -> str:
        """Switch between light and dark and persist the choice."""

        theme = toggle_theme(self._theme)
        self._apply(theme)
        try:
            self._profiles.update(self._user_id, theme_preference=theme)
        except StoreError as exc:
            _LOGGER.error("Unable to persist theme for %s: %s", self._user_id, exc)
        return theme

    def _apply(self, theme: str) -> None:
        if theme != self._theme:
            self._theme = theme
            self.themeChanged.emit(theme)


__all__ = ["ThemeController"]
