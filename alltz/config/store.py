"""
alltz preferences file.

Handles persistence of the zone list and display preferences.
Config is stored in ~/.config/alltz/config.json (or $ALLTZ_CONFIG).

Zone slots may be written as a bare city name or as an object carrying a
custom label; both forms can be mixed in one list:

    "zones": ["Los Angeles", {"city_name": "London", "custom_label": "Office"}]

Unlabeled zones are saved back as bare names so files that never used
labels keep their original shape.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from alltz.database.cities import CityDatabase
from alltz.exceptions import PersistError
from alltz.models.zones import ZoneRegistry

from .constants import DEFAULT_ZONES, config_path
from .preferences import (
    ColorTheme,
    DisplayPreferences,
    NameMode,
    PersistedEnum,
    TimeDisplayConfig,
    TimeFormat,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ZoneSlot:
    """One persisted zone: the city key plus an optional custom label."""

    city_name: str
    custom_label: Optional[str] = None

    @classmethod
    def decode(cls, raw: Any) -> Optional["ZoneSlot"]:
        # Bare string first: that is the older, simpler form
        if isinstance(raw, str):
            return cls(raw.strip()) if raw.strip() else None
        if isinstance(raw, dict) and isinstance(raw.get("city_name"), str):
            label = raw.get("custom_label")
            if not isinstance(label, str) or not label.strip():
                label = None
            return cls(raw["city_name"].strip(), label)
        return None

    def encode(self) -> Union[str, Dict[str, str]]:
        if self.custom_label is None:
            return self.city_name
        return {"city_name": self.city_name, "custom_label": self.custom_label}


def _default_slots() -> Tuple[ZoneSlot, ...]:
    return tuple(ZoneSlot(name) for name in DEFAULT_ZONES)


@dataclass(frozen=True)
class AppConfig:
    """Everything that survives a restart."""

    zones: Tuple[ZoneSlot, ...] = field(default_factory=_default_slots)
    selected_zone_index: int = 0
    prefs: DisplayPreferences = field(default_factory=DisplayPreferences)

    @classmethod
    def default(cls) -> "AppConfig":
        return cls()

    @classmethod
    def from_session(
        cls,
        registry: ZoneRegistry,
        prefs: DisplayPreferences,
        selected_index: Optional[int],
        unresolved: Sequence[ZoneSlot] = (),
    ) -> "AppConfig":
        """Snapshot the session. ``unresolved`` slots are written back after the shown zones."""
        zones = tuple(ZoneSlot(entry.city.key, entry.custom_label) for entry in registry)
        zones += tuple(unresolved)
        return cls(zones=zones, selected_zone_index=selected_index or 0, prefs=prefs)

    def to_dict(self) -> Dict[str, Any]:
        prefs = self.prefs
        return {
            "zones": [slot.encode() for slot in self.zones],
            "selected_zone_index": self.selected_zone_index,
            "display_format": prefs.time_format.value,
            "timezone_display_mode": prefs.name_mode.value,
            "color_theme": prefs.theme.value,
            "show_date": prefs.show_date,
            "show_sun_times": prefs.show_sun_times,
            "show_weather": prefs.show_weather,
            "time_config": {
                "work_hours_start": prefs.hours.work_hours_start,
                "work_hours_end": prefs.hours.work_hours_end,
                "awake_hours_start": prefs.hours.awake_hours_start,
                "awake_hours_end": prefs.hours.awake_hours_end,
            },
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "AppConfig":
        """Decode a parsed config document.

        Unknown keys are ignored; a missing or invalid value falls back to
        that key's default on its own, without discarding the rest.
        """
        defaults = DisplayPreferences()

        zones = _default_slots()
        if "zones" in raw:
            if isinstance(raw["zones"], list):
                decoded = [ZoneSlot.decode(item) for item in raw["zones"]]
                for item, slot in zip(raw["zones"], decoded):
                    if slot is None:
                        logger.warning("Ignoring malformed zone entry in config: %r", item)
                zones = tuple(slot for slot in decoded if slot is not None)
            else:
                logger.warning("Config 'zones' is not a list; using default zones")

        prefs = DisplayPreferences(
            time_format=_enum(raw, "display_format", TimeFormat, defaults.time_format),
            name_mode=_enum(raw, "timezone_display_mode", NameMode, defaults.name_mode),
            theme=_enum(raw, "color_theme", ColorTheme, defaults.theme),
            show_date=_bool(raw, "show_date", defaults.show_date),
            show_sun_times=_bool(raw, "show_sun_times", defaults.show_sun_times),
            show_weather=_bool(raw, "show_weather", defaults.show_weather),
            hours=_time_config(raw.get("time_config")),
        )

        return cls(
            zones=zones,
            selected_zone_index=_int(raw, "selected_zone_index", 0, 0, None),
            prefs=prefs,
        )


def _enum(raw: Dict[str, Any], key: str, enum_cls, default: PersistedEnum):
    if key not in raw:
        return default
    value = enum_cls.parse(raw[key])
    if value is None:
        logger.warning("Invalid %s %r in config; using %s", key, raw[key], default.value)
        return default
    return value


def _bool(raw: Dict[str, Any], key: str, default: bool) -> bool:
    if key not in raw:
        return default
    if not isinstance(raw[key], bool):
        logger.warning("Invalid %s %r in config; using %s", key, raw[key], default)
        return default
    return raw[key]


def _int(raw: Dict[str, Any], key: str, default: int, low: int, high: Optional[int]) -> int:
    if key not in raw:
        return default
    value = raw[key]
    valid = isinstance(value, int) and not isinstance(value, bool)
    if valid and (value < low or (high is not None and value > high)):
        valid = False
    if not valid:
        logger.warning("Invalid %s %r in config; using %s", key, value, default)
        return default
    return value


def _time_config(raw: Any) -> TimeDisplayConfig:
    defaults = TimeDisplayConfig()
    if raw is None:
        return defaults
    if not isinstance(raw, dict):
        logger.warning("Config 'time_config' is not an object; using default hours")
        return defaults
    return TimeDisplayConfig(
        work_hours_start=_int(raw, "work_hours_start", defaults.work_hours_start, 0, 23),
        work_hours_end=_int(raw, "work_hours_end", defaults.work_hours_end, 0, 24),
        awake_hours_start=_int(raw, "awake_hours_start", defaults.awake_hours_start, 0, 23),
        awake_hours_end=_int(raw, "awake_hours_end", defaults.awake_hours_end, 0, 24),
    )


@dataclass(frozen=True)
class LoadResult:
    config: AppConfig
    warning: Optional[str] = None


class ConfigStore:
    """Reads and atomically writes the preferences file."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else config_path()

    def load(self) -> LoadResult:
        """Load the config, never raising.

        A missing file is created with defaults. An unreadable or malformed
        file is left untouched and the defaults are used with a warning.
        """
        if not self.path.exists():
            config = AppConfig.default()
            try:
                self.save(config)
            except PersistError as e:
                logger.warning("Could not write default config: %s", e)
                return LoadResult(config, str(e))
            logger.info("Created default config at %s", self.path)
            return LoadResult(config)

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Could not read config %s: %s", self.path, e)
            return LoadResult(AppConfig.default(), f"Config file {self.path} is unreadable; using defaults")

        if not isinstance(raw, dict):
            logger.warning("Config %s is not a JSON object", self.path)
            return LoadResult(AppConfig.default(), f"Config file {self.path} is malformed; using defaults")

        return LoadResult(AppConfig.from_dict(raw))

    def save(self, config: AppConfig) -> None:
        """Write ``config`` via a temp file in the same directory and ``os.replace``.

        Raises:
            PersistError: If the file could not be written
        """
        tmp_name = None
        try:
            payload = json.dumps(config.to_dict(), indent=2) + "\n"
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(payload)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except (OSError, TypeError, ValueError) as e:
            raise PersistError(path=str(self.path), reason=str(e)) from e
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)

    def save_session(
        self,
        registry: ZoneRegistry,
        prefs: DisplayPreferences,
        selected_index: Optional[int],
        unresolved: Sequence[ZoneSlot] = (),
    ) -> AppConfig:
        config = AppConfig.from_session(registry, prefs, selected_index, unresolved)
        self.save(config)
        return config


def build_registry(
    config: AppConfig, database: CityDatabase, now: Optional[datetime] = None
) -> ZoneRegistry:
    """Resolve the config's zone slots against the city database.

    Unknown cities are skipped. If slots were listed but none resolved, the
    default zones are used instead so the dashboard is never empty by accident.
    """
    registry = ZoneRegistry(database, reference_time=now)
    _add_slots(registry, config.zones)

    if config.zones and not len(registry):
        logger.warning("No configured zone could be resolved; using default zones")
        _add_slots(registry, _default_slots())
    return registry


def _add_slots(registry: ZoneRegistry, slots: Sequence[ZoneSlot]) -> None:
    for slot in slots:
        city = registry.find_city(slot.city_name)
        if city is None:
            logger.warning("Unknown city %r in config; skipping", slot.city_name)
            continue
        registry.add(city, slot.custom_label)


def unresolved_slots(config: AppConfig, database: CityDatabase) -> Tuple[ZoneSlot, ...]:
    """Slots naming a city the database does not know.

    They are not shown, but are kept in the file so that a city missing
    from this version of the database is not dropped on the next save.
    """
    return tuple(slot for slot in config.zones if database.find(slot.city_name) is None)
