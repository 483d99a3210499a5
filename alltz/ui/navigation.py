"""
Navigation state machine for the dashboard.

The ``Navigator`` owns the session state and is the only thing that mutates
the zone registry while the TUI runs. Every key press is first translated
into a ``Command`` (see ``alltz.ui.keymap``) and applied through
``Navigator.dispatch``; the Textual layer only paints the result.

Modes:
    NormalMode  - scrubbing, selection, zone editing, preference toggles
    SearchMode  - adding a zone; the query is re-ranked on every edit
    RenameMode  - editing the selected zone's custom label
    HelpMode    - overlay wrapping whichever mode was active
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence, Tuple, Union

from alltz.config.preferences import DisplayPreferences
from alltz.config.store import AppConfig, ConfigStore, ZoneSlot, build_registry, unresolved_slots
from alltz.database.cities import CityDatabase, CityRecord
from alltz.exceptions import PersistError
from alltz.models.zones import Candidate, ZoneRegistry
from alltz.timeline.engine import build_render_model
from alltz.timeline.model import RenderModel

logger = logging.getLogger(__name__)


# =============================================================================
# MODES
# =============================================================================


@dataclass(frozen=True)
class NormalMode:
    pass


@dataclass(frozen=True)
class SearchMode:
    query: str = ""
    matches: Tuple[Candidate, ...] = ()
    highlighted: int = 0


@dataclass(frozen=True)
class RenameMode:
    buffer: str = ""
    original: Optional[str] = None


@dataclass(frozen=True)
class HelpMode:
    underlying: "Mode" = field(default_factory=NormalMode)


Mode = Union[NormalMode, SearchMode, RenameMode, HelpMode]


# =============================================================================
# COMMANDS
# =============================================================================


@dataclass(frozen=True)
class Tick:
    now: datetime


@dataclass(frozen=True)
class Scrub:
    minutes: int


@dataclass(frozen=True)
class ResetToNow:
    pass


@dataclass(frozen=True)
class MoveSelection:
    step: int


@dataclass(frozen=True)
class StartSearch:
    pass


@dataclass(frozen=True)
class StartRename:
    pass


@dataclass(frozen=True)
class TypeChar:
    ch: str


@dataclass(frozen=True)
class DeleteChar:
    pass


@dataclass(frozen=True)
class SetText:
    text: str


@dataclass(frozen=True)
class MoveHighlight:
    step: int


@dataclass(frozen=True)
class ChooseCandidate:
    index: int


@dataclass(frozen=True)
class Confirm:
    pass


@dataclass(frozen=True)
class Cancel:
    pass


@dataclass(frozen=True)
class RemoveZone:
    pass


@dataclass(frozen=True)
class ClearLabel:
    pass


@dataclass(frozen=True)
class ToggleHelp:
    pass


@dataclass(frozen=True)
class ToggleTimeFormat:
    pass


@dataclass(frozen=True)
class ToggleNameMode:
    pass


@dataclass(frozen=True)
class ToggleDate:
    pass


@dataclass(frozen=True)
class ToggleSunTimes:
    pass


@dataclass(frozen=True)
class CycleTheme:
    pass


Command = Union[
    Tick, Scrub, ResetToNow, MoveSelection, StartSearch, StartRename, TypeChar,
    DeleteChar, SetText, MoveHighlight, ChooseCandidate, Confirm, Cancel,
    RemoveZone, ClearLabel, ToggleHelp, ToggleTimeFormat, ToggleNameMode,
    ToggleDate, ToggleSunTimes, CycleTheme,
]


# =============================================================================
# SESSION
# =============================================================================


@dataclass
class SessionState:
    """Mutable per-process state. Only ``selected_index`` and ``prefs`` persist."""

    now: datetime
    scrub: datetime
    following_now: bool = True
    selected_index: Optional[int] = None  # None iff there are no zones
    mode: Mode = field(default_factory=NormalMode)
    prefs: DisplayPreferences = field(default_factory=DisplayPreferences)


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


class Navigator:
    """Applies commands to the session and the zone registry.

    ``dispatch`` returns True when persistent state changed; in that case the
    session has already been written through the config store. Save failures
    never propagate: they are logged and queued in ``warnings``.
    """

    def __init__(
        self,
        registry: ZoneRegistry,
        prefs: Optional[DisplayPreferences] = None,
        store: Optional[ConfigStore] = None,
        now: Optional[datetime] = None,
        selected_index: int = 0,
        unresolved: Sequence[ZoneSlot] = (),
    ):
        now = now or datetime.now(timezone.utc)
        self.registry = registry
        self.store = store
        self.unresolved: Tuple[ZoneSlot, ...] = tuple(unresolved)
        self.warnings: List[str] = []

        registry.set_reference_time(now)
        selected = _clamp(selected_index, 0, len(registry) - 1) if len(registry) else None
        self.state = SessionState(
            now=now,
            scrub=now,
            selected_index=selected,
            prefs=prefs or DisplayPreferences(),
        )

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        database: CityDatabase,
        store: Optional[ConfigStore] = None,
        now: Optional[datetime] = None,
    ) -> "Navigator":
        registry = build_registry(config, database, now)
        return cls(
            registry,
            prefs=config.prefs,
            store=store,
            now=now,
            selected_index=config.selected_zone_index,
            unresolved=unresolved_slots(config, database),
        )

    # -- queries -------------------------------------------------------------

    @property
    def mode(self) -> Mode:
        return self.state.mode

    @property
    def prefs(self) -> DisplayPreferences:
        return self.state.prefs

    def render(self, width: int) -> RenderModel:
        return build_render_model(
            self.state.scrub,
            self.state.now,
            width,
            self.registry.entries,
            self.state.prefs,
            self.state.selected_index,
        )

    def pop_warnings(self) -> List[str]:
        warnings, self.warnings = self.warnings, []
        return warnings

    # -- transitions ---------------------------------------------------------

    def dispatch(self, command: Command) -> bool:
        """Apply one command. Returns True when persistent state changed."""
        if isinstance(command, Tick):
            self._tick(command.now)
            return False

        mode = self.state.mode
        if isinstance(mode, HelpMode):
            if isinstance(command, (ToggleHelp, Cancel, Confirm)):
                self.state.mode = mode.underlying
            return False
        if isinstance(command, ToggleHelp):
            self.state.mode = HelpMode(underlying=mode)
            return False

        if isinstance(mode, SearchMode):
            changed = self._handle_search(mode, command)
        elif isinstance(mode, RenameMode):
            changed = self._handle_rename(mode, command)
        else:
            changed = self._handle_normal(command)

        if changed:
            self._persist()
        return changed

    def select_city(self, city: CityRecord) -> int:
        """Select ``city``'s row, adding it first when it is not displayed."""
        index = self.registry.index_of_city(city)
        added = index is None
        if added:
            index = self.registry.index_of(self.registry.add(city))
        self.state.selected_index = index
        if added:
            self._persist()
        return index

    def _tick(self, now: datetime) -> None:
        selected = self._selected_entry()
        self.state.now = now
        self.registry.set_reference_time(now)
        # A re-sort at a real DST change must not move the selection to another city
        if selected is not None:
            self.state.selected_index = self.registry.index_of(selected)
        if self.state.following_now:
            self.state.scrub = now

    def _handle_normal(self, command: Command) -> bool:
        state = self.state

        if isinstance(command, Scrub):
            state.scrub += timedelta(minutes=command.minutes)
            state.following_now = False
            return False
        if isinstance(command, ResetToNow):
            state.scrub = state.now
            state.following_now = True
            return False
        if isinstance(command, MoveSelection):
            return self._move_selection(command.step)
        if isinstance(command, StartSearch):
            state.mode = SearchMode()
            return False
        if isinstance(command, StartRename):
            entry = self._selected_entry()
            if entry is None:
                return False
            state.mode = RenameMode(buffer=entry.custom_label or "", original=entry.custom_label)
            return False
        if isinstance(command, RemoveZone):
            return self._remove_selected()
        if isinstance(command, ClearLabel):
            entry = self._selected_entry()
            if entry is None or entry.custom_label is None:
                return False
            self.registry.rename(state.selected_index, None)
            return True

        prefs = state.prefs
        if isinstance(command, ToggleTimeFormat):
            state.prefs = prefs.with_changes(time_format=prefs.time_format.toggled())
        elif isinstance(command, ToggleNameMode):
            state.prefs = prefs.with_changes(name_mode=prefs.name_mode.toggled())
        elif isinstance(command, ToggleDate):
            state.prefs = prefs.with_changes(show_date=not prefs.show_date)
        elif isinstance(command, ToggleSunTimes):
            state.prefs = prefs.with_changes(show_sun_times=not prefs.show_sun_times)
        elif isinstance(command, CycleTheme):
            state.prefs = prefs.with_changes(theme=prefs.theme.next())
        else:
            return False
        return True

    def _handle_search(self, mode: SearchMode, command: Command) -> bool:
        if isinstance(command, Cancel):
            self.state.mode = NormalMode()
            return False
        if isinstance(command, TypeChar):
            self._set_query(mode.query + command.ch)
        elif isinstance(command, DeleteChar):
            self._set_query(mode.query[:-1])
        elif isinstance(command, SetText):
            self._set_query(command.text)
        elif isinstance(command, MoveHighlight):
            if mode.matches:
                highlighted = _clamp(mode.highlighted + command.step, 0, len(mode.matches) - 1)
                self.state.mode = SearchMode(mode.query, mode.matches, highlighted)
        elif isinstance(command, ChooseCandidate):
            if 0 <= command.index < len(mode.matches):
                return self._add_candidate(mode.matches[command.index])
        elif isinstance(command, Confirm):
            if mode.matches:
                return self._add_candidate(mode.matches[mode.highlighted])
        return False

    def _handle_rename(self, mode: RenameMode, command: Command) -> bool:
        if isinstance(command, Cancel):
            self.state.mode = NormalMode()
            return False
        if isinstance(command, TypeChar):
            self.state.mode = RenameMode(mode.buffer + command.ch, mode.original)
        elif isinstance(command, DeleteChar):
            self.state.mode = RenameMode(mode.buffer[:-1], mode.original)
        elif isinstance(command, SetText):
            self.state.mode = RenameMode(command.text, mode.original)
        elif isinstance(command, Confirm):
            self.state.mode = NormalMode()
            index = self.state.selected_index
            if index is None:
                return False
            self.registry.rename(index, mode.buffer)
            return self.registry[index].custom_label != mode.original
        return False

    # -- helpers -------------------------------------------------------------

    def _selected_entry(self):
        index = self.state.selected_index
        if index is None or index >= len(self.registry):
            return None
        return self.registry[index]

    def _move_selection(self, step: int) -> bool:
        current = self.state.selected_index
        if current is None:
            return False
        target = _clamp(current + step, 0, len(self.registry) - 1)
        if target == current:
            return False
        self.state.selected_index = target
        return True

    def _remove_selected(self) -> bool:
        index = self.state.selected_index
        if index is None:
            return False
        self.registry.remove(index)
        remaining = len(self.registry)
        self.state.selected_index = min(index, remaining - 1) if remaining else None
        return True

    def _set_query(self, query: str) -> None:
        matches = tuple(self.registry.search(query))
        self.state.mode = SearchMode(query=query, matches=matches, highlighted=0)

    def _add_candidate(self, candidate: Candidate) -> bool:
        entry = self.registry.add(candidate.city)
        self.state.selected_index = self.registry.index_of(entry)
        self.state.mode = NormalMode()
        return True

    def _persist(self) -> None:
        if self.store is None:
            return
        try:
            self.store.save_session(
                self.registry, self.state.prefs, self.state.selected_index, self.unresolved
            )
        except PersistError as e:
            logger.warning("Failed to save config: %s", e)
            self.warnings.append(str(e))
