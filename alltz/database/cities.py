"""
City database for alltz.

The database is an immutable table of ``CityRecord`` loaded from a JSON
document. It is constructed explicitly and handed to the zone registry;
nothing in alltz keeps a process-wide copy.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from alltz.exceptions import DataError

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "code", "timezone", "country", "coordinates")


@dataclass(frozen=True)
class CityRecord:
    """One geographic entry of the city database."""

    name: str
    country: str
    timezone: str
    latitude: float
    longitude: float
    code: str
    aliases: Tuple[str, ...] = ()
    population: int = 0
    key: str = ""

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def display(self) -> str:
        """Name plus country, e.g. ``London, Canada``."""
        return f"{self.name}, {self.country}"

    def coordinates_label(self) -> str:
        """Coordinates with hemisphere letters, e.g. ``51.51°N, 0.13°W``."""
        lat = f"{abs(self.latitude):.2f}°{'N' if self.latitude >= 0 else 'S'}"
        lon = f"{abs(self.longitude):.2f}°{'E' if self.longitude > 0 else 'W'}"
        return f"{lat}, {lon}"


def _parse_record(index: int, raw: Any) -> CityRecord:
    """Validate one raw JSON object and build a record (key assigned later)."""
    if not isinstance(raw, dict):
        raise DataError("City record is not an object", index=index)

    missing = [name for name in REQUIRED_FIELDS if name not in raw]
    if missing:
        raise DataError("City record is missing fields", index=index, missing=missing)

    coordinates = raw["coordinates"]
    try:
        latitude, longitude = (float(value) for value in coordinates)
    except (TypeError, ValueError) as e:
        raise DataError("City record has invalid coordinates", index=index) from e
    if not (-90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0):
        raise DataError("City record coordinates out of range", index=index)

    timezone = str(raw["timezone"])
    try:
        ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        raise DataError("City record has an unknown timezone", index=index, timezone=timezone) from e

    try:
        population = int(raw.get("population") or 0)
    except (TypeError, ValueError) as e:
        raise DataError("City record has an invalid population", index=index) from e

    aliases = raw.get("aliases") or []
    if not isinstance(aliases, list):
        raise DataError("City record aliases must be a list", index=index)

    return CityRecord(
        name=str(raw["name"]),
        country=str(raw["country"]),
        timezone=timezone,
        latitude=latitude,
        longitude=longitude,
        code=str(raw["code"]),
        aliases=tuple(str(alias) for alias in aliases),
        population=population,
    )


def _assign_keys(records: List[CityRecord]) -> List[CityRecord]:
    """Give every record a unique lookup key.

    The most populous city of a shared name keeps the bare name so that
    older config files listing ``"London"`` keep resolving to the same city;
    the others are keyed as ``"Name, Country"``.
    """
    by_name: Dict[str, List[CityRecord]] = {}
    for record in records:
        by_name.setdefault(record.name.lower(), []).append(record)

    primaries = {
        name: max(group, key=lambda r: r.population) for name, group in by_name.items()
    }

    keyed = []
    for record in records:
        is_primary = primaries[record.name.lower()] is record
        key = record.name if is_primary else record.display
        keyed.append(replace(record, key=key))
    return keyed


class CityDatabase:
    """Read-only collection of cities, indexed by key and by name."""

    def __init__(self, records: List[CityRecord]):
        self._records: Tuple[CityRecord, ...] = tuple(_assign_keys(records))
        self._by_key: Dict[str, CityRecord] = {}
        for record in self._records:
            if record.key.lower() in self._by_key:
                raise DataError("City database has two cities with the same key", key=record.key)
            self._by_key[record.key.lower()] = record
        self._by_name: Dict[str, List[CityRecord]] = {}
        for record in self._records:
            self._by_name.setdefault(record.name.lower(), []).append(record)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "CityDatabase":
        """Parse a city database document.

        Args:
            path: JSON file to read; defaults to the bundled ``cities.json``

        Raises:
            DataError: If the file is unreadable or any record is invalid
        """
        source = str(path) if path else "alltz/data/cities.json"
        try:
            if path is not None:
                text = Path(path).read_text(encoding="utf-8")
            else:
                text = resources.files("alltz").joinpath("data", "cities.json").read_text(encoding="utf-8")
        except OSError as e:
            raise DataError("City database is unreadable", path=source) from e

        try:
            payload = json.loads(text)
        except json.JSONDecodeError as e:
            raise DataError("City database is not valid JSON", path=source) from e

        if not isinstance(payload, dict) or not isinstance(payload.get("cities"), list):
            raise DataError("City database must contain a 'cities' list", path=source)

        records = [_parse_record(i, raw) for i, raw in enumerate(payload["cities"])]
        if not records:
            raise DataError("City database is empty", path=source)

        logger.debug("Loaded %d cities from %s", len(records), source)
        return cls(records)

    def __iter__(self) -> Iterator[CityRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> Tuple[CityRecord, ...]:
        return self._records

    def get(self, key: str) -> Optional[CityRecord]:
        """Exact lookup by key (``London`` or ``London, Canada``), ignoring case."""
        return self._by_key.get(key.strip().lower())

    def find(self, name: str) -> Optional[CityRecord]:
        """Resolve a user-typed city name.

        Tries the unique key first, then a case-insensitive name match,
        preferring the most populous city of that name.
        """
        record = self.get(name)
        if record is not None:
            return record
        matches = self._by_name.get(name.strip().lower())
        if not matches:
            return None
        return max(matches, key=lambda r: r.population)

    def same_name(self, record: CityRecord) -> List[CityRecord]:
        """All cities sharing ``record``'s name, including itself."""
        return list(self._by_name.get(record.name.lower(), []))
