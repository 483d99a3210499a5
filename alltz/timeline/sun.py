"""
Sunrise and sunset from the NOAA solar position approximation.

Accuracy is within a couple of minutes away from the poles, which is more
than a two-columns-per-hour timeline can show.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import List, Optional

# Apparent sunrise: sun centre 0.833° below the horizon (refraction + disc radius)
SUNRISE_ZENITH_DEGREES = 90.833


@dataclass(frozen=True)
class SunTimes:
    sunrise: Optional[datetime]  # UTC
    sunset: Optional[datetime]  # UTC
    polar_day: bool = False
    polar_night: bool = False


def _solar_terms(day_of_year: int):
    """Equation of time (minutes) and solar declination (radians) at noon."""
    gamma = 2.0 * math.pi / 365.0 * (day_of_year - 1)
    eqtime = 229.18 * (
        0.000075
        + 0.001868 * math.cos(gamma)
        - 0.032077 * math.sin(gamma)
        - 0.014615 * math.cos(2 * gamma)
        - 0.040849 * math.sin(2 * gamma)
    )
    declination = (
        0.006918
        - 0.399912 * math.cos(gamma)
        + 0.070257 * math.sin(gamma)
        - 0.006758 * math.cos(2 * gamma)
        + 0.000907 * math.sin(2 * gamma)
        - 0.002697 * math.cos(3 * gamma)
        + 0.00148 * math.sin(3 * gamma)
    )
    return eqtime, declination


def _events(day: date, latitude: float, longitude: float) -> SunTimes:
    """Sunrise and sunset around solar noon of UTC date ``day``."""
    eqtime, declination = _solar_terms(day.timetuple().tm_yday)
    lat = math.radians(latitude)

    cos_hour_angle = (
        math.cos(math.radians(SUNRISE_ZENITH_DEGREES)) / (math.cos(lat) * math.cos(declination))
        - math.tan(lat) * math.tan(declination)
    )
    if cos_hour_angle > 1.0:
        return SunTimes(sunrise=None, sunset=None, polar_night=True)
    if cos_hour_angle < -1.0:
        return SunTimes(sunrise=None, sunset=None, polar_day=True)

    hour_angle = math.degrees(math.acos(cos_hour_angle))
    midnight = datetime.combine(day, time(0), tzinfo=timezone.utc)
    sunrise_minutes = 720.0 - 4.0 * (longitude + hour_angle) - eqtime
    sunset_minutes = 720.0 - 4.0 * (longitude - hour_angle) - eqtime
    return SunTimes(
        sunrise=midnight + timedelta(minutes=sunrise_minutes),
        sunset=midnight + timedelta(minutes=sunset_minutes),
    )


def _on_local_day(instants: List[Optional[datetime]], day: date, tz: tzinfo) -> Optional[datetime]:
    for instant in instants:
        if instant is not None and instant.astimezone(tz).date() == day:
            return instant
    return instants[0]


def sun_times(day: date, latitude: float, longitude: float, tz: tzinfo = timezone.utc) -> SunTimes:
    """Sunrise and sunset on the local calendar date ``day`` in ``tz``, as UTC instants.

    A zone's offset can be far from longitude / 15 (Samoa is UTC+13 at
    172°W), so the events are taken from whichever neighbouring UTC date
    puts them on ``day`` in local time.
    """
    noon = datetime.combine(day, time(12), tzinfo=tz).astimezone(timezone.utc).date()
    candidates = [_events(noon + timedelta(days=shift), latitude, longitude) for shift in (0, -1, 1)]
    primary = candidates[0]
    if primary.polar_day or primary.polar_night:
        return primary
    return SunTimes(
        sunrise=_on_local_day([c.sunrise for c in candidates], day, tz),
        sunset=_on_local_day([c.sunset for c in candidates], day, tz),
    )


def format_sun_times(times: SunTimes, tz: tzinfo, twelve_hour: bool = False) -> str:
    """Render as ``☀ 04:43 ☾ 21:21`` in the zone's local time."""
    if times.polar_day:
        return "☀ polar day"
    if times.polar_night:
        return "☾ polar night"

    fmt = "%I:%M %p" if twelve_hour else "%H:%M"
    sunrise = times.sunrise.astimezone(tz).strftime(fmt)
    sunset = times.sunset.astimezone(tz).strftime(fmt)
    return f"☀ {sunrise} ☾ {sunset}"
