"""Controllers coordinating the editor and preferences with the views."""

from .editor_controller import EditorController
from .theme_controller import ThemeController

__all__ = ["EditorController", "ThemeController"]
