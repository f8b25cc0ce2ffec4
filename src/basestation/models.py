"""
Data models for BaseStation (SBS-1) telemetry.

- AircraftReport: one parsed SBS wire message
- BaseStationRecord: one row of a BaseStation .bst file
- HierarchicalKey: year.month.day.hex_ident path inside the stored aggregate
"""

from typing import Any, NamedTuple

from pydantic import BaseModel, ConfigDict

from src.utils.exceptions import MalformedDateError


class AircraftReport(BaseModel):
    """
    Typed aircraft state decoded from one SBS line.

    Every field apart from message_kind and the two date/time pairs is
    optional; a short or malformed line leaves the missing slots as None.
    Dates keep the wire form (YYYY/MM/DD) and are not calendar-checked.
    """

    model_config = ConfigDict(frozen=True)

    message_kind: str = ""
    transmission_subtype: int | None = None
    session_id: int | None = None
    aircraft_id: int | None = None
    hex_ident: str | None = None
    flight_id: int | None = None
    generated_date: str = ""
    generated_time: str = ""
    logged_date: str = ""
    logged_time: str = ""
    callsign: str | None = None
    altitude: int | None = None
    ground_speed: float | None = None
    track: float | None = None
    latitude: float | None = None
    longitude: float | None = None
    vertical_rate: int | None = None
    squawk: str | None = None
    alert: bool | None = None
    emergency: bool | None = None
    spi: bool | None = None
    is_on_ground: bool | None = None

    def to_document(self) -> dict[str, Any]:
        """Mapping appended into the hierarchical aggregate."""
        return self.model_dump()

    def to_json(self) -> str:
        """Pretty-printed JSON form of the report."""
        return self.model_dump_json(indent=2)


class BaseStationRecord(BaseModel):
    """A row from a BaseStation .bst recording."""

    date: str
    time: str
    unique_id: str
    hex_ident: str
    callsign: str
    country: str
    unknown_field: str
    altitude: int = 0
    pressure_altitude: int = 0
    latitude: float = 0.0
    longitude: float = 0.0
    vertical_rate: int = 0
    heading: float = 0.0
    ground_speed: float = 0.0
    track: float = 0.0
    squawk: str = ""
    alert_flag: bool = False

    def to_json(self) -> str:
        return self.model_dump_json(indent=2)


class HierarchicalKey(NamedTuple):
    """Dotted storage path: year.month.day.hex_ident."""
    year: str
    month: str
    day: str
    hex_ident: str

    @classmethod
    def from_report(cls, report: AircraftReport) -> "HierarchicalKey":
        """
        Derive the storage path for a report.

        Raises:
            MalformedDateError: If generated_date is not three '/'-separated parts
        """
        parts = report.generated_date.split("/")
        if len(parts) != 3:
            raise MalformedDateError(report.generated_date)

        year, month, day = parts
        return cls(year=year, month=month, day=day, hex_ident=report.hex_ident or "")

    @property
    def path(self) -> str:
        return f"{self.year}.{self.month}.{self.day}.{self.hex_ident}"

    def __str__(self) -> str:
        return self.path


__all__ = ["AircraftReport", "BaseStationRecord", "HierarchicalKey"]
