from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class ConnectionType(str, Enum):
    SIGNALK = "signalk"
    NMEA2000 = "nmea2000"
    NMEA0183 = "nmea0183"


DEFAULT_CONNECTION_PORTS: dict[ConnectionType, int] = {
    ConnectionType.SIGNALK: 3000,
    ConnectionType.NMEA2000: 10110,
    ConnectionType.NMEA0183: 10110,
}


class DataConnection(BaseModel):
    """A data source linked to a paired display."""

    id: str
    type: ConnectionType
    host: str
    port: int = Field(ge=1, le=65535)
    name: str | None = None
    linked_at: datetime


class PairedDevice(BaseModel):
    """A device that completed onboarding."""

    id: str
    name: str
    ip: str
    port: int
    model: str
    firmware_version: str
    serial: str
    paired_at: datetime
    connections: list[DataConnection] = Field(default_factory=list)


class FirmwareUpdateInfo(BaseModel):
    current_version: str
    available_version: str
    update_available: bool
    release_notes: str = ""
