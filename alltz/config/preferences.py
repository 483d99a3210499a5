"""
Display preference value types.

These are persisted in the config file; enum values are the exact strings
written to disk so older files keep loading.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Type, TypeVar

from .constants import DEFAULT_AWAKE_HOURS, DEFAULT_WORK_HOURS

E = TypeVar("E", bound="PersistedEnum")


class PersistedEnum(Enum):
    """Enum whose value is its on-disk spelling."""

    @classmethod
    def parse(cls: Type[E], raw: object) -> Optional[E]:
        """Match a raw config value against values or member names, ignoring case."""
        if not isinstance(raw, str):
            return None
        wanted = raw.strip().lower()
        for member in cls:
            if wanted in (member.value.lower(), member.name.lower()):
                return member
        return None


class TimeFormat(PersistedEnum):
    TWENTY_FOUR = "TwentyFourHour"
    TWELVE = "TwelveHour"

    def toggled(self) -> "TimeFormat":
        return TimeFormat.TWELVE if self is TimeFormat.TWENTY_FOUR else TimeFormat.TWENTY_FOUR


class NameMode(PersistedEnum):
    SHORT = "Short"  # LAX, NYC, LON
    FULL = "Full"  # Los Angeles, New York, London

    def toggled(self) -> "NameMode":
        return NameMode.FULL if self is NameMode.SHORT else NameMode.SHORT


class ColorTheme(PersistedEnum):
    DEFAULT = "Default"
    OCEAN = "Ocean"
    FOREST = "Forest"
    SUNSET = "Sunset"
    CYBERPUNK = "Cyberpunk"
    MONOCHROME = "Monochrome"

    def next(self) -> "ColorTheme":
        members = list(ColorTheme)
        return members[(members.index(self) + 1) % len(members)]


class Activity(Enum):
    """Activity level of an hour in a zone's local time."""

    NIGHT = "night"
    AWAKE = "awake"
    WORK = "work"

    @property
    def glyph(self) -> str:
        return ACTIVITY_GLYPHS[self]


ACTIVITY_GLYPHS = {
    Activity.NIGHT: "░",  # light shade
    Activity.AWAKE: "▒",  # medium shade
    Activity.WORK: "▓",  # dark shade
}


@dataclass(frozen=True)
class TimeDisplayConfig:
    """Work/awake thresholds in local hours; night is the complement."""

    work_hours_start: int = DEFAULT_WORK_HOURS[0]
    work_hours_end: int = DEFAULT_WORK_HOURS[1]
    awake_hours_start: int = DEFAULT_AWAKE_HOURS[0]
    awake_hours_end: int = DEFAULT_AWAKE_HOURS[1]

    def activity_for(self, hour: int) -> Activity:
        hour = hour % 24
        if self.work_hours_start <= hour < self.work_hours_end:
            return Activity.WORK
        if self.awake_hours_start <= hour < self.awake_hours_end:
            return Activity.AWAKE
        return Activity.NIGHT

    @property
    def work_midpoint_hour(self) -> int:
        return (self.work_hours_start + self.work_hours_end) // 2 % 24


@dataclass(frozen=True)
class DisplayPreferences:
    """User-facing display options. Pure value type; use ``with_changes``."""

    time_format: TimeFormat = TimeFormat.TWENTY_FOUR
    name_mode: NameMode = NameMode.SHORT
    theme: ColorTheme = ColorTheme.DEFAULT
    show_date: bool = False
    show_sun_times: bool = True
    show_weather: bool = False
    hours: TimeDisplayConfig = field(default_factory=TimeDisplayConfig)

    def with_changes(self, **changes) -> "DisplayPreferences":
        return replace(self, **changes)

    @property
    def twelve_hour(self) -> bool:
        return self.time_format is TimeFormat.TWELVE
