"""Tests for the timeline engine."""

from datetime import datetime, timedelta, timezone

import pytest

from alltz.config.preferences import Activity, DisplayPreferences, TimeDisplayConfig, TimeFormat
from alltz.models.zones import ZoneEntry
from alltz.timeline.engine import build_render_model, time_to_column, timeline_hours, window
from alltz.timeline.model import DstKind

UTC = timezone.utc

# 2024-03-10 02:00 EST -> 03:00 EDT happens at 07:00 UTC
NY_SPRING_FORWARD = datetime(2024, 3, 10, 7, 0, tzinfo=UTC)
# 2024-11-03 02:00 EDT -> 01:00 EST happens at 06:00 UTC
NY_FALL_BACK = datetime(2024, 11, 3, 6, 0, tzinfo=UTC)
MIDDAY = datetime(2024, 7, 15, 12, 0, tzinfo=UTC)


def _zones(database, *names):
    return [ZoneEntry(database.find(name)) for name in names]


def _model(database, scrub, *names, width=96, prefs=None, now=None, selected_index=None):
    return build_render_model(
        scrub,
        now or scrub,
        width,
        _zones(database, *names),
        prefs or DisplayPreferences(),
        selected_index,
    )


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------


class TestGeometry:
    """Window sizing and column mapping."""

    @pytest.mark.parametrize(
        "width,hours",
        [(1, 48.0), (96, 48.0), (100, 50.0), (200, 100.0), (336, 168.0), (1000, 168.0)],
    )
    def test_timeline_hours(self, width, hours):
        assert timeline_hours(width) == hours

    def test_span_never_shrinks_as_width_grows(self):
        spans = [timeline_hours(width) for width in range(1, 600)]
        assert spans == sorted(spans)
        assert min(spans) >= 48.0

    def test_window_is_centred_on_scrub(self):
        start, end = window(MIDDAY, 96)
        assert start == MIDDAY - timedelta(hours=24)
        assert end == MIDDAY + timedelta(hours=24)

    def test_time_to_column(self):
        start, end = window(MIDDAY, 96)
        assert time_to_column(start, start, end, 96) == 0
        assert time_to_column(MIDDAY, start, end, 96) == 48
        assert time_to_column(end - timedelta(seconds=1), start, end, 96) == 95
        assert time_to_column(end, start, end, 96) is None
        assert time_to_column(start - timedelta(minutes=1), start, end, 96) is None

    def test_scrub_and_now_columns(self, database):
        model = _model(database, MIDDAY, "UTC", now=MIDDAY - timedelta(hours=6))
        assert model.scrub_column == 48
        assert model.now_column == 36

        far = _model(database, MIDDAY, "UTC", now=MIDDAY + timedelta(days=3))
        assert far.now_column is None

    def test_invalid_arguments(self, database):
        with pytest.raises(ValueError):
            _model(database, MIDDAY, "UTC", width=0)
        with pytest.raises(ValueError):
            _model(database, MIDDAY.replace(tzinfo=None), "UTC")


# ---------------------------------------------------------------------------
# DST
# ---------------------------------------------------------------------------


class TestDaylightSaving:
    """Per-column local time jumps at DST transitions."""

    def test_spring_forward_has_single_marker_and_hour_jump(self, database):
        row = _model(database, NY_SPRING_FORWARD, "New York").rows[0]

        assert len(row.dst_markers) == 1
        marker = row.dst_markers[0]
        assert marker.column == 48
        assert marker.kind is DstKind.SPRING_FORWARD
        assert marker.kind.symbol == "⇈"
        assert row.has_dst_transition

        before = row.column_times[47]
        after = row.column_times[48]
        assert (before.hour, before.minute) == (1, 30)
        assert (after.hour, after.minute) == (3, 0)
        # 30 minutes of real time, 90 minutes of wall clock
        wall_clock_step = after.replace(tzinfo=None) - before.replace(tzinfo=None)
        assert wall_clock_step - timedelta(minutes=30) == timedelta(hours=1)

    def test_fall_back(self, database):
        row = _model(database, NY_FALL_BACK, "New York").rows[0]

        assert [(m.column, m.kind) for m in row.dst_markers] == [(48, DstKind.FALL_BACK)]
        assert row.dst_markers[0].kind.symbol == "⇊"
        assert row.column_times[47].hour == 1
        assert row.column_times[48].hour == 1

    def test_fixed_offset_zones_have_no_markers(self, database):
        model = _model(database, NY_SPRING_FORWARD, "UTC", "Tokyo", "Kathmandu")
        assert not any(row.has_dst_transition for row in model.rows)

    def test_offset_label_follows_scrub_instant(self, database):
        before = _model(database, NY_SPRING_FORWARD - timedelta(minutes=1), "New York").rows[0]
        after = _model(database, NY_SPRING_FORWARD, "New York").rows[0]
        assert before.offset_label == "UTC-5"
        assert after.offset_label == "UTC-4"


# ---------------------------------------------------------------------------
# Bands, midnights, labels
# ---------------------------------------------------------------------------


class TestRowContents:
    """Activity, midnight columns, dates and time labels."""

    def test_midnight_columns(self, database):
        row = _model(database, MIDDAY, "UTC").rows[0]
        assert row.midnight_columns == (24, 72)

    def test_midnight_columns_use_local_date(self, database):
        row = _model(database, MIDDAY, "Tokyo").rows[0]
        # Tokyo midnight is 15:00 UTC the previous day
        assert row.midnight_columns == (6, 54)

    def test_activity_uses_local_hours(self, database):
        row = _model(database, MIDDAY, "UTC").rows[0]
        assert row.activity[24] is Activity.NIGHT  # 00:00
        assert row.activity[38] is Activity.AWAKE  # 07:00
        assert row.activity[40] is Activity.WORK  # 08:00
        assert row.activity[59] is Activity.WORK  # 17:30
        assert row.activity[60] is Activity.AWAKE  # 18:00
        assert row.activity[68] is Activity.NIGHT  # 22:00
        assert len(row.activity) == 96

    def test_localized_time_and_date(self, database):
        row = _model(database, MIDDAY, "Tokyo").rows[0]
        assert row.localized_time == "21:00 Mon"
        assert row.date == "Mon 15 Jul 2024"

        prefs = DisplayPreferences(time_format=TimeFormat.TWELVE)
        row = _model(database, MIDDAY, "Tokyo", prefs=prefs).rows[0]
        assert row.localized_time == "09:00 PM Mon"

    def test_date_labels_only_when_enabled(self, database):
        assert _model(database, MIDDAY, "UTC").rows[0].date_labels == ()

        prefs = DisplayPreferences(show_date=True)
        row = _model(database, MIDDAY, "UTC", prefs=prefs).rows[0]
        # Middle of 08-18 work hours is 13:00
        assert [(label.column, label.text) for label in row.date_labels] == [
            (2, "14 Jul"),
            (50, "15 Jul"),
        ]

    def test_date_labels_with_work_hours_ending_at_midnight(self, database):
        hours = TimeDisplayConfig(work_hours_start=24, work_hours_end=24)
        assert hours.work_midpoint_hour == 0

        prefs = DisplayPreferences(show_date=True, hours=hours)
        row = _model(database, MIDDAY, "UTC", prefs=prefs).rows[0]
        assert [label.column for label in row.date_labels] == [24, 72]

    def test_selected_row(self, database):
        model = _model(database, MIDDAY, "UTC", "Tokyo", selected_index=1)
        assert [row.selected for row in model.rows] == [False, True]
        assert model.rows[1].sun.emphasized
        assert not model.rows[0].sun.emphasized

    def test_sun_annotation_toggle(self, database):
        prefs = DisplayPreferences(show_sun_times=False)
        assert _model(database, MIDDAY, "London", prefs=prefs).rows[0].sun is None

        sun = _model(database, MIDDAY, "London").rows[0].sun
        assert sun.text.startswith("☀ ")
        assert sun.sunrise_column is not None
        assert sun.sunset_column is not None

    def test_sun_for_zone_far_from_its_meridian(self, database):
        # Apia is already on 16 Jul at the scrub instant
        sun = _model(database, MIDDAY, "Apia").rows[0].sun
        apia = database.get("Apia").tz
        assert sun.sunrise.astimezone(apia).date() == MIDDAY.astimezone(apia).date()
        assert sun.sunrise_column is not None
        assert sun.sunset_column is not None

    def test_polar_day_has_no_columns(self, database):
        sun = _model(database, datetime(2024, 6, 21, 12, tzinfo=UTC), "Tromso").rows[0].sun
        assert sun.text == "☀ polar day"
        assert sun.sunrise_column is None

    def test_row_labels(self, database):
        row = _model(database, MIDDAY, "Kathmandu").rows[0]
        assert row.label == "KTM"
        assert row.title == "KTM UTC+5:45"

    def test_build_is_deterministic(self, database):
        prefs = DisplayPreferences(show_date=True)
        first = _model(database, NY_SPRING_FORWARD, "New York", "Sydney", prefs=prefs)
        second = _model(database, NY_SPRING_FORWARD, "New York", "Sydney", prefs=prefs)
        assert first == second
