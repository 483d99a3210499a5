"""
Timeline engine.

``build_render_model`` turns (scrub instant, viewport width, zones,
preferences) into a ``RenderModel``. It is a pure function: the real "now"
is passed in, nothing is cached, and equal inputs give equal output.

Geometry: the visible span is ``width / CHARS_PER_HOUR`` hours clamped to
[MIN_TIMELINE_HOURS, MAX_TIMELINE_HOURS], centred on the scrub instant.
Column ``i`` stands for the instant ``start + span * i / width``; each row
maps those instants to its own wall clock, so rows with a DST change show a
jump at the transition column.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional, Sequence, Tuple

from alltz.config.constants import CHARS_PER_HOUR, MAX_TIMELINE_HOURS, MIN_TIMELINE_HOURS
from alltz.config.preferences import DisplayPreferences
from alltz.models.zones import ZoneEntry

from .model import DateLabel, DstKind, DstMarker, RenderModel, RenderRow, SunAnnotation
from .sun import format_sun_times, sun_times

logger = logging.getLogger(__name__)

TIME_FORMAT_24 = "%H:%M %a"
TIME_FORMAT_12 = "%I:%M %p %a"
DATE_FORMAT = "%a %d %b %Y"
DATE_LABEL_FORMAT = "%d %b"


def timeline_hours(width: int) -> float:
    """Visible span in hours for a viewport ``width`` columns wide."""
    return min(max(width / CHARS_PER_HOUR, MIN_TIMELINE_HOURS), MAX_TIMELINE_HOURS)


def window(scrub: datetime, width: int) -> Tuple[datetime, datetime]:
    """Start and end of the visible span, centred on ``scrub``."""
    span = timedelta(hours=timeline_hours(width))
    start = scrub - span / 2
    return start, start + span


def column_instants(start: datetime, end: datetime, width: int) -> List[datetime]:
    span = end - start
    return [start + span * i / width for i in range(width)]


def time_to_column(instant: datetime, start: datetime, end: datetime, width: int) -> Optional[int]:
    """Column showing ``instant``, or None when it is outside the window."""
    if instant < start or instant >= end:
        return None
    column = int((instant - start) / (end - start) * width)
    return min(column, width - 1)


def _dst_markers(instants: Sequence[datetime], local: Sequence[datetime]) -> List[DstMarker]:
    markers = []
    for i in range(1, len(local)):
        before = local[i - 1].utcoffset()
        after = local[i].utcoffset()
        if before == after:
            continue
        kind = DstKind.SPRING_FORWARD if after > before else DstKind.FALL_BACK
        markers.append(DstMarker(column=i, kind=kind, instant=instants[i]))
    return markers


def _midnight_columns(local: Sequence[datetime]) -> List[int]:
    return [i for i in range(1, len(local)) if local[i].date() != local[i - 1].date()]


def _date_labels(
    entry: ZoneEntry, start: datetime, end: datetime, width: int, midpoint_hour: int
) -> List[DateLabel]:
    """One ``15 Jul`` label per visible local date, at the middle of its work hours."""
    tz = entry.tz
    labels = []
    day = start.astimezone(tz).date()
    last_day = end.astimezone(tz).date()
    while day <= last_day:
        middle = datetime.combine(day, time(midpoint_hour), tzinfo=tz).astimezone(timezone.utc)
        column = time_to_column(middle, start, end, width)
        if column is not None:
            labels.append(DateLabel(column=column, text=day.strftime(DATE_LABEL_FORMAT)))
        day += timedelta(days=1)
    return labels


def _sun_annotation(
    entry: ZoneEntry,
    local_day: date,
    start: datetime,
    end: datetime,
    width: int,
    prefs: DisplayPreferences,
    selected: bool,
) -> SunAnnotation:
    city = entry.city
    times = sun_times(local_day, city.latitude, city.longitude, entry.tz)
    text = format_sun_times(times, entry.tz, prefs.twelve_hour)

    def column_of(instant: Optional[datetime]) -> Optional[int]:
        return time_to_column(instant, start, end, width) if instant else None

    return SunAnnotation(
        text=text,
        emphasized=selected,
        sunrise=times.sunrise,
        sunset=times.sunset,
        sunrise_column=column_of(times.sunrise),
        sunset_column=column_of(times.sunset),
    )


def build_row(
    entry: ZoneEntry,
    scrub: datetime,
    start: datetime,
    end: datetime,
    instants: Sequence[datetime],
    prefs: DisplayPreferences,
    selected: bool = False,
) -> RenderRow:
    width = len(instants)
    tz = entry.tz
    local = [instant.astimezone(tz) for instant in instants]
    local_scrub = scrub.astimezone(tz)

    time_format = TIME_FORMAT_12 if prefs.twelve_hour else TIME_FORMAT_24
    date_labels = (
        _date_labels(entry, start, end, width, prefs.hours.work_midpoint_hour)
        if prefs.show_date
        else []
    )
    sun = (
        _sun_annotation(entry, local_scrub.date(), start, end, width, prefs, selected)
        if prefs.show_sun_times
        else None
    )

    return RenderRow(
        label=entry.display_name(prefs.name_mode),
        offset_label=entry.offset_label(scrub),
        localized_time=local_scrub.strftime(time_format),
        date=local_scrub.strftime(DATE_FORMAT),
        column_times=tuple(local),
        activity=tuple(prefs.hours.activity_for(moment.hour) for moment in local),
        midnight_columns=tuple(_midnight_columns(local)),
        dst_markers=tuple(_dst_markers(instants, local)),
        date_labels=tuple(date_labels),
        sun=sun,
        selected=selected,
    )


def build_render_model(
    scrub: datetime,
    now: datetime,
    width: int,
    zones: Sequence[ZoneEntry],
    prefs: DisplayPreferences,
    selected_index: Optional[int] = None,
) -> RenderModel:
    """Compute every row of the dashboard for one frame.

    Args:
        scrub: Instant under the scrub line (timezone-aware)
        now: Real current instant, used only for the "now" column
        width: Number of timeline columns available
        zones: Entries in display order
        prefs: Display preferences
        selected_index: Row to emphasize, if any

    Raises:
        ValueError: If ``width`` is not positive or an instant is naive
    """
    if width < 1:
        raise ValueError(f"Timeline width must be positive, got {width}")
    if scrub.tzinfo is None or now.tzinfo is None:
        raise ValueError("Timeline instants must be timezone-aware")

    start, end = window(scrub, width)
    instants = column_instants(start, end, width)
    rows = tuple(
        build_row(entry, scrub, start, end, instants, prefs, selected=(i == selected_index))
        for i, entry in enumerate(zones)
    )

    return RenderModel(
        start=start,
        end=end,
        span_hours=timeline_hours(width),
        width=width,
        scrub_column=time_to_column(scrub, start, end, width),
        now_column=time_to_column(now, start, end, width),
        rows=rows,
    )
