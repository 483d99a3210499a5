"""Zone row widget: paints one ``RenderRow`` as a bordered two-line strip."""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from rich.text import Text
from textual.widget import Widget

from alltz.timeline.model import DstKind, RenderModel, RenderRow

from .themes import TimelinePalette

logger = logging.getLogger(__name__)

NOW_CHAR = "│"
SCRUB_CHAR = "┃"
MIDNIGHT_CHAR = "┊"
SUNRISE_CHAR = "☀"
SUNSET_CHAR = "☾"


def _centred(text: str, column: int, width: int) -> int:
    """Start column that centres ``text`` on ``column`` without leaving the row."""
    start = max(column - len(text) // 2, 0)
    return max(min(start, width - len(text)), 0)


def paint_timeline(row: RenderRow, model: RenderModel, palette: TimelinePalette) -> Text:
    """Timeline bar for one row. Later layers overwrite earlier ones."""
    width = model.width
    cells: List[Tuple[str, str]] = [
        (activity.glyph, palette.activity(activity)) for activity in row.activity
    ]

    def put(column: Optional[int], char: str, style: str) -> None:
        if column is not None and 0 <= column < width:
            cells[column] = (char, style)

    if row.sun is not None:
        sun_style = palette.selected if row.sun.emphasized else palette.sun_muted
        put(row.sun.sunrise_column, SUNRISE_CHAR, sun_style)
        put(row.sun.sunset_column, SUNSET_CHAR, sun_style)

    put(model.now_column, NOW_CHAR, palette.now)
    if model.scrub_column != model.now_column:
        put(model.scrub_column, SCRUB_CHAR, palette.scrub)

    for marker in row.dst_markers:
        style = palette.spring_forward if marker.kind is DstKind.SPRING_FORWARD else palette.fall_back
        put(marker.column, marker.kind.symbol, style)

    for column in row.midnight_columns:
        if column not in (model.now_column, model.scrub_column):
            put(column, MIDNIGHT_CHAR, palette.midnight_color)

    for label in row.date_labels:
        start = _centred(label.text, label.column, width)
        for offset, char in enumerate(label.text):
            put(start + offset, char, palette.date_label)

    text = Text()
    for char, style in cells:
        text.append(char, style=style)
    return text


def paint_time_line(row: RenderRow, model: RenderModel) -> Text:
    """Second line: the local time centred under the scrub column, date at the right."""
    start = _centred(row.localized_time, model.scrub_column, model.width)
    text = Text(" " * start + row.localized_time)
    gap = model.width - len(text) - len(row.date)
    if gap >= 2:
        text.append(" " * gap)
        text.append(row.date, style="dim")
    return text


class ZoneTimeline(Widget):
    """One zone of the dashboard."""

    DEFAULT_CSS = """
    ZoneTimeline {
        height: 4;
        border: round $panel;
        border-title-color: $foreground;
        border-subtitle-color: $text-muted;
    }

    ZoneTimeline.selected {
        border: round $accent;
        border-title-style: bold;
        border-subtitle-color: $accent;
    }
    """

    def __init__(self, row: RenderRow, model: RenderModel, palette: TimelinePalette):
        super().__init__()
        self.row = row
        self.model = model
        self.palette = palette
        self._apply_titles()

    def set_row(self, row: RenderRow, model: RenderModel, palette: TimelinePalette) -> None:
        self.row = row
        self.model = model
        self.palette = palette
        self._apply_titles()
        self.refresh()

    def _apply_titles(self) -> None:
        self.border_title = self.row.title
        sun = self.row.sun
        if sun is None:
            self.border_subtitle = ""
        elif sun.emphasized:
            self.border_subtitle = Text(sun.text, style=f"bold {self.palette.selected}")
        else:
            self.border_subtitle = sun.text
        self.set_class(self.row.selected, "selected")

    def render(self) -> Text:
        text = paint_timeline(self.row, self.model, self.palette)
        text.append("\n")
        text.append_text(paint_time_line(self.row, self.model))
        return text
