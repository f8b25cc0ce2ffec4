"""
Parser for the BaseStation (SBS-1) comma-separated line protocol.

Fields are positional; there is no header or field naming on the wire.
Decoding is best-effort: a field that is missing or does not parse as its
declared type comes back as None, and parse_message never raises.

Documentation: http://woodair.net/sbs/article/barebones42_socket_data.htm
"""

import re
from typing import Callable, TypeVar

from src.basestation.models import AircraftReport, BaseStationRecord
from src.utils.exceptions import RecordParseError


T = TypeVar("T")

DELIMITER = ","

# Wire field positions
MESSAGE_KIND = 0
TRANSMISSION_SUBTYPE = 1
SESSION_ID = 2
AIRCRAFT_ID = 3
HEX_IDENT = 4
FLIGHT_ID = 5
GENERATED_DATE = 6
GENERATED_TIME = 7
LOGGED_DATE = 8
LOGGED_TIME = 9
CALLSIGN = 10
ALTITUDE = 11
GROUND_SPEED = 12
TRACK = 13
LATITUDE = 14
LONGITUDE = 15
VERTICAL_RATE = 16
SQUAWK = 17
ALERT = 18
EMERGENCY = 19
SPI = 20
IS_ON_GROUND = 21

FIELD_COUNT = 22
RECORD_FIELD_COUNT = 17

_SIGNED = re.compile(r"[+-]?[0-9]+")
_UNSIGNED = re.compile(r"\+?[0-9]+")
_UINT8 = (0, 2**8 - 1)
_UINT32 = (0, 2**32 - 1)
_INT32 = (-(2**31), 2**31 - 1)


def _integer(bounds: tuple[int, int]) -> Callable[[str], int | None]:
    low, high = bounds
    pattern = _UNSIGNED if low >= 0 else _SIGNED

    def decode(value: str) -> int | None:
        if not pattern.fullmatch(value):
            return None
        number = int(value)
        if number < low or number > high:
            return None
        return number

    return decode


def _float(value: str) -> float | None:
    if not value or value != value.strip() or "_" in value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _text(value: str) -> str | None:
    return value or None


def _flag(value: str) -> bool | None:
    """SBS tri-state flag: -1 is set, 0 is clear, anything else is unknown."""
    if value == "-1":
        return True
    if value == "0":
        return False
    return None


_uint8 = _integer(_UINT8)
_uint32 = _integer(_UINT32)
_int32 = _integer(_INT32)


def _field(fields: list[str], index: int, decode: Callable[[str], T | None]) -> T | None:
    if index >= len(fields):
        return None
    return decode(fields[index])


def _required(fields: list[str], index: int) -> str:
    return fields[index] if index < len(fields) else ""


def parse_message(line: str) -> AircraftReport:
    """
    Parse one SBS wire line into an AircraftReport.

    Args:
        line: Raw line without its trailing newline

    Returns:
        AircraftReport; missing or malformed fields are None (or "" for the
        message kind and date/time strings)
    """
    fields = line.split(DELIMITER)

    return AircraftReport(
        message_kind=_required(fields, MESSAGE_KIND),
        transmission_subtype=_field(fields, TRANSMISSION_SUBTYPE, _uint8),
        session_id=_field(fields, SESSION_ID, _uint32),
        aircraft_id=_field(fields, AIRCRAFT_ID, _uint32),
        hex_ident=_field(fields, HEX_IDENT, _text),
        flight_id=_field(fields, FLIGHT_ID, _uint32),
        generated_date=_required(fields, GENERATED_DATE),
        generated_time=_required(fields, GENERATED_TIME),
        logged_date=_required(fields, LOGGED_DATE),
        logged_time=_required(fields, LOGGED_TIME),
        callsign=_field(fields, CALLSIGN, _text),
        altitude=_field(fields, ALTITUDE, _int32),
        ground_speed=_field(fields, GROUND_SPEED, _float),
        track=_field(fields, TRACK, _float),
        latitude=_field(fields, LATITUDE, _float),
        longitude=_field(fields, LONGITUDE, _float),
        vertical_rate=_field(fields, VERTICAL_RATE, _int32),
        squawk=_field(fields, SQUAWK, _text),
        alert=_field(fields, ALERT, _flag),
        emergency=_field(fields, EMERGENCY, _flag),
        spi=_field(fields, SPI, _flag),
        is_on_ground=_field(fields, IS_ON_GROUND, _flag),
    )


def parse_record(line: str) -> BaseStationRecord:
    """
    Parse one row of a BaseStation .bst recording.

    Numeric columns that fail to parse default to zero.

    Raises:
        RecordParseError: If the row has fewer than 17 fields
    """
    fields = line.split(DELIMITER)
    if len(fields) < RECORD_FIELD_COUNT:
        raise RecordParseError(
            f"Expected {RECORD_FIELD_COUNT} fields, got {len(fields)}",
            line=line,
        )

    def number(index: int, decode: Callable[[str], T | None], default: T) -> T:
        value = decode(fields[index])
        return default if value is None else value

    return BaseStationRecord(
        date=fields[0],
        time=fields[1],
        unique_id=fields[2],
        hex_ident=fields[3],
        callsign=fields[4],
        country=fields[5],
        unknown_field=fields[6],
        altitude=number(7, _int32, 0),
        pressure_altitude=number(8, _int32, 0),
        latitude=number(9, _float, 0.0),
        longitude=number(10, _float, 0.0),
        vertical_rate=number(11, _int32, 0),
        heading=number(12, _float, 0.0),
        ground_speed=number(13, _float, 0.0),
        track=number(14, _float, 0.0),
        squawk=fields[15],
        alert_flag=fields[16] == "-1",
    )


__all__ = ["parse_message", "parse_record", "FIELD_COUNT", "RECORD_FIELD_COUNT"]
