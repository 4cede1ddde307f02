"""
zones.py
========
Time zone specs and the Exif → {{DTZ}} timestamp conversion.

A zone is given either as a number ``[+-]HHMM`` (``1000`` for eastern
Australia, ``-800`` for North American Pacific time, both without daylight
saving) or as a tz database name such as ``Africa/Abidjan``, which follows
daylight saving automatically.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import ConfigError, ParseError

EXIF_FORMAT = "%Y:%m:%d %H:%M:%S"

_NUMERIC_RE = re.compile(r"^(?:UTC)?([+-]?)(\d{1,4})$", re.IGNORECASE)
_EXIF_RE = re.compile(r"^\d{4}:\d{2}:\d{2} \d{2}:\d{2}:\d{2}$")


@dataclass(frozen=True)
class ZoneSpec:
    """Either a fixed offset in minutes east of UTC or a tz database name."""
    offset_minutes: Optional[int] = None
    name: Optional[str] = None

    def tzinfo(self) -> tzinfo:
        if self.name is not None:
            return ZoneInfo(self.name)
        return timezone(timedelta(minutes=self.offset_minutes))

    def __str__(self):
        if self.name is not None:
            return self.name
        sign = "-" if self.offset_minutes < 0 else "+"
        hours, mins = divmod(abs(self.offset_minutes), 60)
        return f"UTC{sign}{hours:02d}{mins:02d}"


def parse_zone(param: str) -> Optional[ZoneSpec]:
    """Parse a zone parameter; an empty string means "not given"."""
    param = param.strip()
    if not param:
        return None
    m = _NUMERIC_RE.match(param)
    if m:
        sign = -1 if m.group(1) == "-" else 1
        hours, mins = divmod(int(m.group(2)), 100)
        if mins >= 60:
            raise ConfigError(f"Invalid timezone offset {param!r}: minutes must be below 60.")
        total = sign * (hours * 60 + mins)
        if abs(total) >= 24 * 60:
            raise ConfigError(f"Invalid timezone offset {param!r}.")
        return ZoneSpec(offset_minutes=total)
    if "/" not in param:
        raise ConfigError("Timezone should be either numeric or a tz database zone name with a slash.")
    try:
        ZoneInfo(param)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigError(f"Unknown timezone {param!r}: {e}") from e
    return ZoneSpec(name=param)


def resolve_zones(camera: Optional[ZoneSpec], location: Optional[ZoneSpec]) -> Tuple[ZoneSpec, ZoneSpec]:
    """Return ``(camera, location)``; a single given zone is used for both."""
    if camera is None:
        camera = location
    if location is None:
        location = camera
    if camera is None:
        raise ConfigError("Please supply at least one time zone.")
    return camera, location


def parse_capture_time(value: str, zone: ZoneSpec) -> datetime:
    """Read an Exif ``YYYY:MM:DD HH:MM:SS`` value as wall time in ``zone``."""
    if not _EXIF_RE.match(value):
        raise ParseError(f"{value!r} does not match {EXIF_FORMAT}")
    try:
        parsed = datetime.strptime(value, EXIF_FORMAT)
    except ValueError as e:
        raise ParseError(f"{value!r}: {e}") from e
    return parsed.replace(tzinfo=zone.tzinfo())


def convert(dt: datetime, zone: ZoneSpec) -> datetime:
    return dt.astimezone(zone.tzinfo())


def format_offset(dt: datetime) -> str:
    """``±HH``, or ``±HH:MM`` for zones that are not a whole hour off UTC."""
    seconds = int(dt.utcoffset().total_seconds())
    sign = "-" if seconds < 0 else "+"
    hours, rem = divmod(abs(seconds), 3600)
    mins = rem // 60
    if mins:
        return f"{sign}{hours:02d}:{mins:02d}"
    return f"{sign}{hours:02d}"


def format_dtz(dt: datetime) -> str:
    wall = dt.replace(tzinfo=None).isoformat(timespec="seconds")
    return "{{DTZ|" + wall + format_offset(dt) + "}}"
