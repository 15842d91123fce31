"""Color palette for the teacher console supporting light and dark themes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class Theme(Enum):
    """Application theme options."""
    LIGHT = auto()
    DARK = auto()


@dataclass(frozen=True)
class ThemeColors:
    """Color definitions for a specific theme."""
    light: str
    dark: str

    def get(self, theme: Theme) -> str:
        return self.light if theme == Theme.LIGHT else self.dark


class ColorPalette:
    """Centralized color definitions for the application."""

    TEXT_PRIMARY = ThemeColors(light="#1F2937", dark="#F5F5F5")

    BACKGROUND_PRIMARY = ThemeColors(light="#FFFFFF", dark="#1E1E1E")
    BACKGROUND_SECONDARY = ThemeColors(light="#F5F7FF", dark="#2D2D2D")

    ACCENT_PRIMARY = ThemeColors(light="#4F46E5", dark="#818CF8")
    ACCENT_TEXT = ThemeColors(light="#FFFFFF", dark="#000000")

    SUCCESS = ThemeColors(light="#15803D", dark="#6FCF6F")
    ERROR = ThemeColors(light="#DC2626", dark="#FF6B6B")

    BORDER_PRIMARY = ThemeColors(light="#D1D5DB", dark="#555555")
    BUTTON_HOVER_BG = ThemeColors(light="#EEF2FF", dark="#505050")
