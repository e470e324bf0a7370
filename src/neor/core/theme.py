"""Light and dark colour schemes selected by the ``theme`` cookie."""

from __future__ import annotations

import enum

THEME_COOKIE_NAME = "theme"

_PALETTES: dict[str, dict[str, str]] = {
    "light": {
        "body_background_color": "white",
        "main_font_color": "black",
        "link_color": "blue",
        "author_font_color": "rgb(92, 92, 92)",
        "tag_background_color": "rgb(38, 38, 38)",
        "tag_color": "white",
        "link_hover_color": "#48c778",
    },
    "dark": {
        "body_background_color": "rgb(38, 38, 38)",
        "main_font_color": "white",
        "link_color": "pink",
        "author_font_color": "#d3d3d3",
        "tag_background_color": "rgba(255, 192, 203, 0.7)",
        "tag_color": "white",
        "link_hover_color": "white",
    },
}


class Theme(str, enum.Enum):
    LIGHT = "light"
    DARK = "dark"

    @classmethod
    def from_cookie(cls, value: str | None) -> Theme:
        """Return the theme stored in the cookie, light when absent or unknown."""
        try:
            return cls(value)
        except ValueError:
            return cls.LIGHT

    def switch(self) -> Theme:
        return Theme.DARK if self is Theme.LIGHT else Theme.LIGHT

    @property
    def palette(self) -> dict[str, str]:
        return _PALETTES[self.value]
