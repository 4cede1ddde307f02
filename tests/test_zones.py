from __future__ import annotations

from datetime import datetime

import pytest

from commons_dtz.errors import ConfigError, ParseError
from commons_dtz.zones import (ZoneSpec, convert, format_dtz, parse_capture_time,
                               parse_zone, resolve_zones)


@pytest.mark.parametrize(
    "param, minutes",
    [("900", 540), ("0900", 540), ("+0900", 540), ("UTC+0900", 540), ("1000", 600),
     ("-800", -480), ("-0500", -300), ("-0930", -570), ("+0530", 330), ("0", 0)],
)
def test_parse_numeric_zone(param: str, minutes: int) -> None:
    assert parse_zone(param) == ZoneSpec(offset_minutes=minutes)


def test_parse_named_zone() -> None:
    assert parse_zone(" Europe/Paris ") == ZoneSpec(name="Europe/Paris")


def test_parse_empty_zone() -> None:
    assert parse_zone("") is None
    assert parse_zone("   ") is None


@pytest.mark.parametrize("param", ["Paris", "1075", "2400", "Nowhere/Zone", "+09:00"])
def test_parse_bad_zone(param: str) -> None:
    with pytest.raises(ConfigError):
        parse_zone(param)


def test_resolve_zones() -> None:
    tokyo = ZoneSpec(offset_minutes=540)
    paris = ZoneSpec(name="Europe/Paris")
    assert resolve_zones(tokyo, paris) == (tokyo, paris)
    assert resolve_zones(tokyo, None) == (tokyo, tokyo)
    assert resolve_zones(None, paris) == (paris, paris)
    with pytest.raises(ConfigError, match="at least one time zone"):
        resolve_zones(None, None)


def test_zone_str() -> None:
    assert str(ZoneSpec(offset_minutes=-570)) == "UTC-0930"
    assert str(ZoneSpec(name="Asia/Tokyo")) == "Asia/Tokyo"


def test_convert_fixed_offsets() -> None:
    parsed = parse_capture_time("2020:06:15 10:00:00", ZoneSpec(offset_minutes=540))
    converted = convert(parsed, ZoneSpec(offset_minutes=-300))
    assert converted.replace(tzinfo=None) == datetime(2020, 6, 14, 20, 0, 0)
    assert format_dtz(converted) == "{{DTZ|2020-06-14T20:00:00-05}}"


def test_convert_named_zone_follows_dst() -> None:
    utc = ZoneSpec(offset_minutes=0)
    paris = ZoneSpec(name="Europe/Paris")
    summer = convert(parse_capture_time("2020:07:01 12:00:00", utc), paris)
    winter = convert(parse_capture_time("2020:01:01 12:00:00", utc), paris)
    assert format_dtz(summer) == "{{DTZ|2020-07-01T14:00:00+02}}"
    assert format_dtz(winter) == "{{DTZ|2020-01-01T13:00:00+01}}"


def test_format_keeps_offset_minutes() -> None:
    dt = parse_capture_time("2020:06:15 10:00:00", ZoneSpec(offset_minutes=330))
    assert format_dtz(dt) == "{{DTZ|2020-06-15T10:00:00+05:30}}"
    utc = parse_capture_time("2020:06:15 10:00:00", ZoneSpec(offset_minutes=0))
    assert format_dtz(utc) == "{{DTZ|2020-06-15T10:00:00+00}}"


@pytest.mark.parametrize(
    "value",
    ["2020-06-15 10:00:00", "2020:6:15 10:00:00", "0000:00:00 00:00:00",
     "2020:06:15 10:00:00 ", "2020:13:01 00:00:00", ""],
)
def test_parse_capture_time_errors(value: str) -> None:
    with pytest.raises(ParseError):
        parse_capture_time(value, ZoneSpec(offset_minutes=0))
