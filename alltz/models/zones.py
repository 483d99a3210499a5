"""
Zone registry: the user's chosen cities, ordered by UTC offset.

Ordering is evaluated at the registry's reference time (the real current
instant, refreshed on every tick), never at the scrub instant, so rows do
not jump around while the user scrubs across a DST change.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterator, List, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo

from alltz.config.constants import SEARCH_RESULT_LIMIT
from alltz.config.preferences import NameMode
from alltz.database.cities import CityDatabase, CityRecord
from alltz.exceptions import ZoneIndexError

logger = logging.getLogger(__name__)


def format_offset(offset: timedelta) -> str:
    """Format a UTC offset as ``UTC+9``, ``UTC-4`` or ``UTC+5:30``."""
    total_minutes = int(offset.total_seconds() // 60)
    sign = "+" if total_minutes >= 0 else "-"
    hours, minutes = divmod(abs(total_minutes), 60)
    if minutes:
        return f"UTC{sign}{hours}:{minutes:02d}"
    return f"UTC{sign}{hours}"


@dataclass
class ZoneEntry:
    """A row of the dashboard: a source city plus an optional custom label."""

    city: CityRecord
    custom_label: Optional[str] = None

    @property
    def tz(self) -> ZoneInfo:
        return self.city.tz

    def offset_at(self, instant: datetime) -> timedelta:
        return instant.astimezone(self.tz).utcoffset() or timedelta(0)

    def offset_label(self, instant: datetime) -> str:
        return format_offset(self.offset_at(instant))

    def display_name(self, name_mode: NameMode = NameMode.SHORT) -> str:
        """Label shown in the row title.

        Short mode shows the custom label or the city code; full mode shows
        the city name, with the custom label in front when set.
        """
        if name_mode is NameMode.SHORT:
            return self.custom_label or self.city.code
        if self.custom_label:
            return f"{self.custom_label} ({self.city.name})"
        return self.city.name


@dataclass(frozen=True)
class Candidate:
    """A ranked search hit."""

    city: CityRecord
    tier: int

    @property
    def display(self) -> str:
        # Always carries the country so same-named cities stay distinguishable
        return self.city.display


# Search tiers, best first
TIER_EXACT_NAME = 0
TIER_EXACT_CODE = 1
TIER_NAME_SUBSTRING = 2
TIER_COUNTRY = 3
TIER_ALIAS = 4
TIER_TIMEZONE = 5


def _match_tier(city: CityRecord, query: str) -> Optional[Tuple[int, int]]:
    """Best (tier, sub-rank) for ``city`` against a lower-cased query, or None."""
    name = city.name.lower()
    if name == query:
        return TIER_EXACT_NAME, 0
    if city.code.lower() == query:
        return TIER_EXACT_CODE, 0
    if name.startswith(query):
        return TIER_NAME_SUBSTRING, 0
    if query in name:
        return TIER_NAME_SUBSTRING, 1
    if query in city.country.lower():
        return TIER_COUNTRY, 0

    best_alias = None
    for alias in city.aliases:
        alias = alias.lower()
        if alias == query:
            rank = 0
        elif alias.startswith(query):
            rank = 1
        elif query in alias:
            rank = 2
        else:
            continue
        best_alias = rank if best_alias is None else min(best_alias, rank)
    if best_alias is not None:
        return TIER_ALIAS, best_alias

    if query in city.timezone.lower():
        return TIER_TIMEZONE, 0
    return None


def rank_cities(
    cities: Sequence[CityRecord], query: str, limit: int = SEARCH_RESULT_LIMIT
) -> List[Candidate]:
    """Rank cities against a free-text query. An empty query matches nothing."""
    query = query.strip().lower()
    if not query:
        return []

    scored = []
    for city in cities:
        match = _match_tier(city, query)
        if match is None:
            continue
        tier, sub_rank = match
        scored.append(((tier, sub_rank, -city.population, city.name, city.country), city, tier))

    scored.sort(key=lambda item: item[0])
    return [Candidate(city=city, tier=tier) for _, city, tier in scored[:limit]]


class ZoneRegistry:
    """Ordered list of zone entries backed by a city database."""

    def __init__(self, database: CityDatabase, reference_time: Optional[datetime] = None):
        self.database = database
        self._entries: List[ZoneEntry] = []
        self._reference_time = reference_time or datetime.now(timezone.utc)

    # -- read access ---------------------------------------------------------

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ZoneEntry]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> ZoneEntry:
        self._check_index(index)
        return self._entries[index]

    @property
    def entries(self) -> Tuple[ZoneEntry, ...]:
        return tuple(self._entries)

    @property
    def reference_time(self) -> datetime:
        return self._reference_time

    def index_of(self, entry: ZoneEntry) -> int:
        for i, candidate in enumerate(self._entries):
            if candidate is entry:
                return i
        raise ValueError("Zone entry is not in this registry")

    def index_of_city(self, city: CityRecord) -> Optional[int]:
        for i, entry in enumerate(self._entries):
            if entry.city == city:
                return i
        return None

    # -- resolution ----------------------------------------------------------

    def search(self, query: str, limit: int = SEARCH_RESULT_LIMIT) -> List[Candidate]:
        return rank_cities(self.database.records, query, limit)

    def find_city(self, name: str) -> Optional[CityRecord]:
        return self.database.find(name)

    # -- mutation ------------------------------------------------------------

    def add(self, city: CityRecord, custom_label: Optional[str] = None) -> ZoneEntry:
        entry = ZoneEntry(city=city, custom_label=_clean_label(custom_label))
        self._entries.append(entry)
        self._sort()
        logger.info("Added zone %s (%s)", city.display, city.timezone)
        return entry

    def remove(self, index: int) -> ZoneEntry:
        self._check_index(index)
        entry = self._entries.pop(index)
        logger.info("Removed zone %s", entry.city.display)
        return entry

    def rename(self, index: int, label: Optional[str]) -> None:
        self._check_index(index)
        self._entries[index].custom_label = _clean_label(label)

    def set_reference_time(self, now: datetime) -> None:
        """Move the ordering reference to ``now`` and re-sort."""
        self._reference_time = now
        self._sort()

    def _sort(self) -> None:
        # list.sort is stable: equal offsets keep insertion order
        self._entries.sort(key=lambda entry: entry.offset_at(self._reference_time))

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._entries):
            raise ZoneIndexError(index, len(self._entries))


def _clean_label(label: Optional[str]) -> Optional[str]:
    if label is None:
        return None
    label = label.strip()
    return label or None
