"""
Render model produced by the timeline engine.

Everything here is a frozen value object. Widgets read these and paint;
they never compute times themselves.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from alltz.config.preferences import Activity


class DstKind(Enum):
    SPRING_FORWARD = "spring_forward"  # offset grows, an hour of wall clock is skipped
    FALL_BACK = "fall_back"  # offset shrinks, an hour of wall clock repeats

    @property
    def symbol(self) -> str:
        return "⇈" if self is DstKind.SPRING_FORWARD else "⇊"


@dataclass(frozen=True)
class DstMarker:
    column: int
    kind: DstKind
    instant: datetime


@dataclass(frozen=True)
class DateLabel:
    column: int
    text: str


@dataclass(frozen=True)
class SunAnnotation:
    """Sunrise/sunset for the local date under the scrub line.

    ``sunrise``/``sunset`` are None on polar days and nights; the columns are
    None when the instant falls outside the visible window.
    """

    text: str
    emphasized: bool
    sunrise: Optional[datetime] = None
    sunset: Optional[datetime] = None
    sunrise_column: Optional[int] = None
    sunset_column: Optional[int] = None


@dataclass(frozen=True)
class RenderRow:
    label: str
    offset_label: str
    localized_time: str
    date: str
    column_times: Tuple[datetime, ...]
    activity: Tuple[Activity, ...]
    midnight_columns: Tuple[int, ...]
    dst_markers: Tuple[DstMarker, ...]
    date_labels: Tuple[DateLabel, ...]
    sun: Optional[SunAnnotation]
    selected: bool

    @property
    def has_dst_transition(self) -> bool:
        return bool(self.dst_markers)

    @property
    def title(self) -> str:
        return f"{self.label} {self.offset_label}"


@dataclass(frozen=True)
class RenderModel:
    start: datetime
    end: datetime
    span_hours: float
    width: int
    scrub_column: int
    now_column: Optional[int]
    rows: Tuple[RenderRow, ...]
