"""Color palette for the quiz player supporting light and dark themes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from quiz_player.core.results import ReviewStatus
from quiz_player.core.timer import TimerUrgency


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
        """Get color value for the specified theme."""
        return self.light if theme == Theme.LIGHT else self.dark


class ColorPalette:
    """Centralized color definitions for the application."""

    TEXT_PRIMARY = ThemeColors(light="#1F2937", dark="#F5F5F5")
    TEXT_SECONDARY = ThemeColors(light="#6B7280", dark="#AAAAAA")
    TEXT_DISABLED = ThemeColors(light="#C4C4C4", dark="#555555")

    BACKGROUND_PRIMARY = ThemeColors(light="#FFFFFF", dark="#1E1E1E")
    BACKGROUND_SECONDARY = ThemeColors(light="#F5F5F5", dark="#2D2D2D")

    ACCENT_PRIMARY = ThemeColors(light="#0078D4", dark="#4A9EFF")

    SUCCESS = ThemeColors(light="#107C10", dark="#6FCF6F")
    SUCCESS_BG = ThemeColors(light="#E6F4E6", dark="#1F3A1F")
    WARNING = ThemeColors(light="#C27C00", dark="#FFC83D")
    ERROR = ThemeColors(light="#D13438", dark="#FF6B6B")
    ERROR_BG = ThemeColors(light="#FBE9E9", dark="#3F1F1F")

    BORDER_PRIMARY = ThemeColors(light="#D1D1D1", dark="#555555")

    BUTTON_PRIMARY_BG = ThemeColors(light="#0078D4", dark="#4A9EFF")
    BUTTON_PRIMARY_TEXT = ThemeColors(light="#FFFFFF", dark="#000000")
    BUTTON_SECONDARY_BG = ThemeColors(light="#F5F5F5", dark="#3A3A3A")
    BUTTON_HOVER_BG = ThemeColors(light="#E8E8E8", dark="#505050")

    # Sidebar markers
    ANSWERED_BG = ThemeColors(light="#D6EAF8", dark="#1D3B53")
    LOCKED_BG = ThemeColors(light="#E5E7EB", dark="#333333")

    @classmethod
    def timer_color(cls, urgency: TimerUrgency, theme: Theme = Theme.LIGHT) -> str:
        if urgency is TimerUrgency.URGENT:
            return cls.ERROR.get(theme)
        if urgency is TimerUrgency.WARNING:
            return cls.WARNING.get(theme)
        return cls.TEXT_PRIMARY.get(theme)

    @classmethod
    def status_color(cls, status: ReviewStatus, theme: Theme = Theme.LIGHT) -> str:
        if status is ReviewStatus.CORRECT:
            return cls.SUCCESS.get(theme)
        if status is ReviewStatus.INCORRECT:
            return cls.ERROR.get(theme)
        return cls.TEXT_SECONDARY.get(theme)
