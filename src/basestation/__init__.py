"""BaseStation (SBS-1) protocol models and parser."""

from src.basestation.models import AircraftReport, BaseStationRecord, HierarchicalKey
from src.basestation.parser import parse_message, parse_record

__all__ = [
    "AircraftReport",
    "BaseStationRecord",
    "HierarchicalKey",
    "parse_message",
    "parse_record",
]
