"""
alltz Textual dashboard.

The app is a thin painter: every key press goes through
``keymap.translate`` into a navigation command, ``Navigator.dispatch``
applies it, and the screen is rebuilt from ``Navigator.render``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.widgets import Static

from alltz.config.constants import TICK_INTERVAL_SECONDS
from alltz.config.preferences import ColorTheme, TimeFormat
from alltz.database.cities import CityRecord
from alltz.timeline.model import RenderModel

from .keymap import Quit, translate
from .navigation import HelpMode, Navigator, RenameMode, SearchMode, Tick
from .themes import palette_for, register_all_themes, theme_name
from .timeline_widget import ZoneTimeline

logger = logging.getLogger(__name__)

HELP_TEXT = """\
[b]alltz keys[/b]

  h / ←     scrub back 1 hour       l / →     scrub forward 1 hour
  H / ⇧←    scrub back 1 minute     L / ⇧→    scrub forward 1 minute
  [ / ]     scrub ∓15 minutes       { / }     scrub ∓1 hour
  t         back to now             j k ↑ ↓   select zone

  a         add zone (1-8 picks a result, ↑↓ + Enter also works)
  r         remove selected zone
  e / E     rename selected zone / clear its custom name

  m         12/24 hour time         n         short/full names
  d         dates on timeline       s         sunrise/sunset
  c         cycle color theme       q         quit

  ░ night   ▒ awake   ▓ work   ┊ midnight   ⇈ spring forward   ⇊ fall back

Press ? / Esc / Enter to close"""

STATUS_HINT = "a add · r remove · e rename · ? help · q quit"


def _scrub_offset_text(scrub: datetime, now: datetime, following: bool) -> str:
    if following:
        return "● live"
    minutes = round((scrub - now).total_seconds() / 60)
    sign = "+" if minutes >= 0 else "-"
    hours, mins = divmod(abs(minutes), 60)
    return f"{sign}{hours}h {mins:02d}m from now"


class AlltzApp(App):
    """Timezone dashboard."""

    TITLE = "alltz"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit", show=False, priority=True),
    ]

    CSS = """
    Screen {
        layout: vertical;
    }

    #status {
        height: 1;
        background: $boost;
        padding: 0 1;
    }

    #zones {
        height: 1fr;
        scrollbar-size-vertical: 1;
    }

    .empty {
        padding: 1 2;
        color: $text-muted;
    }

    #prompt {
        height: auto;
        max-height: 12;
        border: round $accent;
        padding: 0 1;
        display: none;
    }

    #help {
        height: auto;
        border: double $accent;
        background: $surface;
        padding: 0 1;
        display: none;
    }

    #hint {
        height: 1;
        color: $text-muted;
        padding: 0 1;
    }
    """

    def __init__(self, navigator: Navigator, ticking: bool = True):
        super().__init__()
        self.navigator = navigator
        self.ticking = ticking
        self._zone_widgets: Optional[List[ZoneTimeline]] = None
        self._view_ready = False

    def compose(self) -> ComposeResult:
        yield Static(id="status")
        yield VerticalScroll(id="zones")
        yield Static(id="prompt")
        yield Static(HELP_TEXT, id="help")
        yield Static(STATUS_HINT, id="hint")

    def on_mount(self) -> None:
        register_all_themes(self)
        # Arrow keys belong to the app, not the scroll container
        self.query_one("#zones", VerticalScroll).can_focus = False
        self._view_ready = True
        if self.ticking:
            self.set_interval(TICK_INTERVAL_SECONDS, self._tick)
        self.refresh_view()

    def on_resize(self, event: events.Resize) -> None:
        self.refresh_view()

    def on_key(self, event: events.Key) -> None:
        action = translate(self.navigator.mode, event.key, event.character)
        if action is None:
            return
        event.stop()
        if isinstance(action, Quit):
            self.exit()
            return
        logger.debug("Key %s -> %s", event.key, action)
        self.navigator.dispatch(action)
        self.refresh_view()

    def _tick(self) -> None:
        self.navigator.dispatch(Tick(datetime.now(timezone.utc)))
        self.refresh_view()

    # -- painting ------------------------------------------------------------

    def timeline_width(self) -> int:
        # Border on both sides of each row plus one column of scrollbar
        return max(self.size.width - 3, 1)

    def refresh_view(self) -> None:
        if not self._view_ready:
            return
        navigator = self.navigator
        model = navigator.render(self.timeline_width())

        wanted = theme_name(navigator.prefs.theme)
        if self.theme != wanted:
            self.theme = wanted

        self._update_status(model)
        self._update_zones(model)
        self._update_prompt()
        self.query_one("#help", Static).display = isinstance(navigator.mode, HelpMode)

        for warning in navigator.pop_warnings():
            self.notify(warning, severity="warning", timeout=5)

    def _update_status(self, model: RenderModel) -> None:
        state = self.navigator.state
        fmt = "%I:%M %p" if state.prefs.twelve_hour else "%H:%M"
        scrub = state.scrub.astimezone(timezone.utc)
        status = Text()
        status.append("alltz", style="bold")
        status.append(f"  {scrub.strftime(fmt)} UTC {scrub.strftime('%a %d %b %Y')}")
        status.append(f"  {_scrub_offset_text(state.scrub, state.now, state.following_now)}")
        status.append(f"  {model.span_hours:g}h window · {state.prefs.theme.value}", style="dim")
        self.query_one("#status", Static).update(status)

    def _update_zones(self, model: RenderModel) -> None:
        container = self.query_one("#zones", VerticalScroll)
        palette = palette_for(self.navigator.prefs.theme)

        if self._zone_widgets is not None and len(self._zone_widgets) == len(model.rows):
            for widget, row in zip(self._zone_widgets, model.rows):
                widget.set_row(row, model, palette)
        else:
            container.remove_children()
            self._zone_widgets = [ZoneTimeline(row, model, palette) for row in model.rows]
            if self._zone_widgets:
                container.mount_all(self._zone_widgets)
            else:
                container.mount(Static("No zones. Press 'a' to add one.", classes="empty"))

        selected = self.navigator.state.selected_index
        if selected is not None and selected < len(self._zone_widgets):
            self.call_after_refresh(
                container.scroll_to_widget, self._zone_widgets[selected], animate=False
            )

    def _update_prompt(self) -> None:
        prompt = self.query_one("#prompt", Static)
        mode = self.navigator.mode
        if isinstance(mode, HelpMode):
            mode = mode.underlying

        if isinstance(mode, SearchMode):
            prompt.border_title = "Add zone"
            lines = Text(f"Search: {mode.query}▏\n")
            if not mode.matches and mode.query.strip():
                lines.append("No matches", style="dim")
            for i, candidate in enumerate(mode.matches):
                style = "reverse" if i == mode.highlighted else ""
                lines.append(f"{i + 1}. {candidate.display}  ", style=style)
                lines.append(f"{candidate.city.timezone}\n", style="dim")
            prompt.update(lines)
            prompt.display = True
        elif isinstance(mode, RenameMode):
            index = self.navigator.state.selected_index
            city = self.navigator.registry[index].city.name if index is not None else ""
            prompt.border_title = f"Rename {city}"
            prompt.update(Text(f"Label: {mode.buffer}▏  (empty clears, Esc cancels)"))
            prompt.display = True
        else:
            prompt.display = False


def apply_startup_options(
    navigator: Navigator,
    city: Optional[CityRecord] = None,
    twelve_hour: bool = False,
    theme: Optional[ColorTheme] = None,
) -> None:
    """Apply command line overrides before the app starts."""
    if city is not None:
        navigator.select_city(city)
    changes = {}
    if twelve_hour:
        changes["time_format"] = TimeFormat.TWELVE
    if theme is not None:
        changes["theme"] = theme
    if changes:
        navigator.state.prefs = navigator.state.prefs.with_changes(**changes)
