"""
Key press -> navigation command translation.

Printable keys are matched on the character Textual reports (so ``E`` and
``{`` work regardless of how the terminal encodes Shift); named keys such as
arrows, escape and enter are matched on the key name.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Union

from alltz.config.constants import (
    COARSE_SCRUB_MINUTES,
    FINE_SCRUB_MINUTES,
    HOUR_SCRUB_MINUTES,
    QUARTER_SCRUB_MINUTES,
)

from .navigation import (
    Cancel,
    ChooseCandidate,
    ClearLabel,
    Command,
    Confirm,
    CycleTheme,
    DeleteChar,
    HelpMode,
    Mode,
    MoveHighlight,
    MoveSelection,
    RemoveZone,
    RenameMode,
    ResetToNow,
    Scrub,
    SearchMode,
    StartRename,
    StartSearch,
    ToggleDate,
    ToggleHelp,
    ToggleNameMode,
    ToggleSunTimes,
    ToggleTimeFormat,
    TypeChar,
)


@dataclass(frozen=True)
class Quit:
    """Not a navigation command: the app exits."""


Action = Union[Command, Quit]

NORMAL_CHARACTERS: Dict[str, Action] = {
    "q": Quit(),
    "?": ToggleHelp(),
    "a": StartSearch(),
    "r": RemoveZone(),
    "e": StartRename(),
    "E": ClearLabel(),
    "m": ToggleTimeFormat(),
    "n": ToggleNameMode(),
    "d": ToggleDate(),
    "s": ToggleSunTimes(),
    "c": CycleTheme(),
    "t": ResetToNow(),
    "h": Scrub(-COARSE_SCRUB_MINUTES),
    "l": Scrub(COARSE_SCRUB_MINUTES),
    "H": Scrub(-FINE_SCRUB_MINUTES),
    "L": Scrub(FINE_SCRUB_MINUTES),
    "[": Scrub(-QUARTER_SCRUB_MINUTES),
    "]": Scrub(QUARTER_SCRUB_MINUTES),
    "{": Scrub(-HOUR_SCRUB_MINUTES),
    "}": Scrub(HOUR_SCRUB_MINUTES),
    "j": MoveSelection(1),
    "k": MoveSelection(-1),
}

NORMAL_KEYS: Dict[str, Action] = {
    "left": Scrub(-COARSE_SCRUB_MINUTES),
    "right": Scrub(COARSE_SCRUB_MINUTES),
    "shift+left": Scrub(-FINE_SCRUB_MINUTES),
    "shift+right": Scrub(FINE_SCRUB_MINUTES),
    "down": MoveSelection(1),
    "up": MoveSelection(-1),
}


def _printable(character: Optional[str]) -> Optional[str]:
    if character and len(character) == 1 and character.isprintable():
        return character
    return None


def translate(mode: Mode, key: str, character: Optional[str] = None) -> Optional[Action]:
    """Map a key event to an action for the current mode, or None to ignore it."""
    if key == "ctrl+c":
        return Quit()

    character = _printable(character)

    if isinstance(mode, HelpMode):
        if character == "?":
            return ToggleHelp()
        if key == "escape":
            return Cancel()
        if key == "enter":
            return Confirm()
        return None

    if isinstance(mode, (SearchMode, RenameMode)):
        if key == "escape":
            return Cancel()
        if key == "enter":
            return Confirm()
        if key == "backspace":
            return DeleteChar()
        if isinstance(mode, SearchMode):
            if key == "up":
                return MoveHighlight(-1)
            if key == "down":
                return MoveHighlight(1)
            # Digits pick a result only when one is listed under that number
            if character and character.isdigit() and 1 <= int(character) <= len(mode.matches):
                return ChooseCandidate(int(character) - 1)
        if character is not None:
            return TypeChar(character)
        return None

    if key in NORMAL_KEYS:
        return NORMAL_KEYS[key]
    if character is not None:
        return NORMAL_CHARACTERS.get(character)
    return None
