from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Theme:
    """Colors and font families handed to the renderer with every layout."""

    heading_color: str = "#00ffff"
    body_color: str = "#aaccff"
    accent_color: str = "#ffffff"
    code_color: str = "#88ff88"

    heading_font: str = "Orbitron"
    body_font: str = "Revalia"
    code_font: str = "monospace"


DEFAULT_THEME = Theme()
