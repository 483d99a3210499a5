"""
alltz TUI theme definitions.

Each ``ColorTheme`` has two halves: a Textual ``Theme`` for chrome (borders,
panels, notifications) and a ``TimelinePalette`` of Rich colors used when
painting the activity bands and markers.
"""

from dataclasses import dataclass
from typing import Any

from textual.theme import Theme

from alltz.config.preferences import Activity, ColorTheme


@dataclass(frozen=True)
class TimelinePalette:
    night: str
    awake: str
    work: str
    selected: str  # selected row border and sun text
    scrub: str  # ┃ under the scrub instant
    now: str = "red"  # │ at the real current time, identical in every theme
    midnight: str = ""  # ┊ at local midnight, defaults to the night color
    spring_forward: str = "green"
    fall_back: str = "yellow"
    date_label: str = "white on grey30"
    sun_muted: str = "grey50"  # ☀ ☾ on rows other than the selected one

    def activity(self, activity: Activity) -> str:
        return {
            Activity.NIGHT: self.night,
            Activity.AWAKE: self.awake,
            Activity.WORK: self.work,
        }[activity]

    @property
    def midnight_color(self) -> str:
        return self.midnight or self.night


# =============================================================================
# Timeline palettes
# =============================================================================

PALETTES: dict[ColorTheme, TimelinePalette] = {
    ColorTheme.DEFAULT: TimelinePalette(
        night="bright_black",
        awake="grey70",
        work="magenta",
        selected="yellow",
        scrub="magenta",
    ),
    ColorTheme.OCEAN: TimelinePalette(
        night="blue",
        awake="cyan",
        work="bright_cyan",
        selected="bright_cyan",
        scrub="cyan",
    ),
    ColorTheme.FOREST: TimelinePalette(
        night="green",
        awake="bright_green",
        work="bright_yellow",
        selected="bright_green",
        scrub="green",
    ),
    ColorTheme.SUNSET: TimelinePalette(
        night="red",
        awake="yellow",
        work="bright_red",
        selected="bright_yellow",
        scrub="yellow",
    ),
    ColorTheme.CYBERPUNK: TimelinePalette(
        night="magenta",
        awake="bright_blue",
        work="bright_magenta",
        selected="bright_magenta",
        scrub="bright_magenta",
    ),
    ColorTheme.MONOCHROME: TimelinePalette(
        night="grey50",
        awake="white",
        work="bright_white",
        selected="bright_white",
        scrub="white",
    ),
}

# =============================================================================
# Textual themes
# =============================================================================

ALLTZ_DEFAULT = Theme(
    name="alltz-default",
    primary="#0178D4",
    secondary="#004578",
    accent="#E5C07B",       # Yellow - selected zone
    foreground="#e0e0e0",
    background="#121212",
    surface="#1e1e1e",
    panel="#252526",
    success="#4EBF71",
    warning="#ffa62b",
    error="#ba3c5b",
    dark=True,
)

ALLTZ_OCEAN = Theme(
    name="alltz-ocean",
    primary="#0E7490",      # Deep teal
    secondary="#1E3A8A",    # Navy
    accent="#67E8F9",       # Light cyan
    foreground="#E0F2FE",
    background="#0B1724",
    surface="#10233A",
    panel="#15304D",
    success="#34D399",
    warning="#FBBF24",
    error="#F87171",
    dark=True,
)

ALLTZ_FOREST = Theme(
    name="alltz-forest",
    primary="#15803D",      # Pine
    secondary="#3F6212",    # Moss
    accent="#86EFAC",       # Light green
    foreground="#ECFDF5",
    background="#0C1A12",
    surface="#12261A",
    panel="#183222",
    success="#4ADE80",
    warning="#FACC15",
    error="#F87171",
    dark=True,
)

ALLTZ_SUNSET = Theme(
    name="alltz-sunset",
    primary="#C2410C",      # Burnt orange
    secondary="#9D174D",    # Dusk pink
    accent="#FDE68A",       # Pale yellow
    foreground="#FFF7ED",
    background="#1C1012",
    surface="#2A171A",
    panel="#361D21",
    success="#84CC16",
    warning="#FBBF24",
    error="#EF4444",
    dark=True,
)

ALLTZ_CYBERPUNK = Theme(
    name="alltz-cyberpunk",
    primary="#D946EF",      # Neon magenta
    secondary="#2563EB",    # Electric blue
    accent="#F0ABFC",       # Pink highlight
    foreground="#F5F3FF",
    background="#0D0221",
    surface="#1A0B36",
    panel="#261447",
    success="#22D3EE",
    warning="#FDE047",
    error="#FB7185",
    dark=True,
)

ALLTZ_MONOCHROME = Theme(
    name="alltz-monochrome",
    primary="#A3A3A3",
    secondary="#737373",
    accent="#FFFFFF",
    foreground="#E5E5E5",
    background="#0A0A0A",
    surface="#171717",
    panel="#262626",
    success="#D4D4D4",
    warning="#D4D4D4",
    error="#FFFFFF",
    dark=True,
)

# =============================================================================
# Theme Registry
# =============================================================================

ALLTZ_THEMES: dict[ColorTheme, Theme] = {
    ColorTheme.DEFAULT: ALLTZ_DEFAULT,
    ColorTheme.OCEAN: ALLTZ_OCEAN,
    ColorTheme.FOREST: ALLTZ_FOREST,
    ColorTheme.SUNSET: ALLTZ_SUNSET,
    ColorTheme.CYBERPUNK: ALLTZ_CYBERPUNK,
    ColorTheme.MONOCHROME: ALLTZ_MONOCHROME,
}


def register_all_themes(app: Any) -> None:
    """Register every alltz theme with the app."""
    for theme in ALLTZ_THEMES.values():
        app.register_theme(theme)


def theme_name(color_theme: ColorTheme) -> str:
    """Textual theme name for a persisted color theme."""
    return ALLTZ_THEMES[color_theme].name


def palette_for(color_theme: ColorTheme) -> TimelinePalette:
    return PALETTES[color_theme]
