"""Persisted list of paired devices."""

from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import TypeAdapter, ValidationError

from alamira.models import ConnectionType, DataConnection, PairedDevice

from .database import Database

logger = logging.getLogger(__name__)

STORAGE_KEY = "paired-devices"

_devices_adapter = TypeAdapter(list[PairedDevice])

# Link types that allow at most one connection per device.
SINGLE_LINK_TYPES = frozenset({ConnectionType.SIGNALK, ConnectionType.NMEA2000})


class DeviceRegistry:
    """Read-modify-write access to paired devices stored under one key.

    Writers within a process are serialized; multiple processes writing the
    same store are not supported.
    """

    def __init__(self, db: Database) -> None:
        self._db = db
        self._lock = threading.RLock()

    def _split(self, raw: Any) -> tuple[list[PairedDevice], list[Any]]:
        """Separate valid devices from stored records that fail validation.

        Raises ValueError when the stored value is not a list at all.
        """
        if raw is None:
            return [], []
        if not isinstance(raw, list):
            raise ValueError(f"Stored '{STORAGE_KEY}' is not a list")

        devices: list[PairedDevice] = []
        unreadable: list[Any] = []
        for entry in raw:
            try:
                devices.append(PairedDevice.model_validate(entry))
            except ValidationError as exc:
                logger.error("Skipping unreadable paired device record: %s", exc)
                unreadable.append(entry)
        return devices, unreadable

    def _read(self) -> tuple[list[PairedDevice], list[Any]]:
        return self._split(self._db.get(STORAGE_KEY))

    def _load(self) -> list[PairedDevice]:
        raw = self._db.get(STORAGE_KEY)
        try:
            return self._split(raw)[0]
        except ValueError as exc:
            logger.error("Failed to load paired devices: %s", exc)
            return []

    def _save(self, devices: list[PairedDevice], unreadable: list[Any]) -> None:
        # unreadable records are written back untouched
        stored = _devices_adapter.dump_python(devices, mode="json")
        self._db.set(STORAGE_KEY, [*stored, *unreadable])

    def list(self) -> list[PairedDevice]:
        with self._lock:
            return self._load()

    def get(self, device_id: str) -> PairedDevice | None:
        return next((d for d in self.list() if d.id == device_id), None)

    def add(self, device: PairedDevice) -> None:
        """Append a device, replacing any existing entry with the same id."""
        with self._lock:
            devices, unreadable = self._read()
            replaced = any(d.id == device.id for d in devices)
            devices = [d for d in devices if d.id != device.id]
            devices.append(device)
            self._save(devices, unreadable)
        if replaced:
            logger.info("Re-paired device: %s (%s)", device.name, device.id)
        else:
            logger.info("Added device: %s (%s)", device.name, device.id)

    def update(self, device_id: str, changes: dict[str, Any]) -> PairedDevice | None:
        """Merge ``changes`` into the device with ``device_id``.

        Returns the updated device, or None when no such device exists.
        """
        if "id" in changes and changes["id"] != device_id:
            raise ValueError("Device id cannot be changed")

        with self._lock:
            devices, unreadable = self._read()
            for index, device in enumerate(devices):
                if device.id != device_id:
                    continue
                merged = PairedDevice.model_validate(
                    {**device.model_dump(), **changes}
                )
                devices[index] = merged
                self._save(devices, unreadable)
                logger.info("Updated device %s: %s", device_id, sorted(changes))
                return merged

        logger.debug("Update skipped, unknown device: %s", device_id)
        return None

    def remove(self, device_id: str) -> bool:
        with self._lock:
            devices, unreadable = self._read()
            remaining = [d for d in devices if d.id != device_id]
            if len(remaining) == len(devices):
                return False
            self._save(remaining, unreadable)
        logger.info("Removed device: %s", device_id)
        return True

    def rename(self, device_id: str, name: str) -> PairedDevice | None:
        return self.update(device_id, {"name": name})

    def link_connection(
        self,
        device_id: str,
        connection_type: ConnectionType,
        host: str,
        port: int,
        name: str | None = None,
    ) -> DataConnection | None:
        """Link a data source to a device.

        Signal K and NMEA 2000 links replace an existing link of the same
        type; NMEA 0183 links are added alongside existing ones.
        """
        connection = DataConnection(
            id=uuid.uuid4().hex,
            type=connection_type,
            host=host,
            port=port,
            name=name,
            linked_at=datetime.now(timezone.utc),
        )
        with self._lock:
            device = self.get(device_id)
            if device is None:
                return None
            connections = device.connections
            if connection_type in SINGLE_LINK_TYPES:
                connections = [c for c in connections if c.type != connection_type]
            self.update(device_id, {"connections": [*connections, connection]})
        return connection

    def unlink_connection(self, device_id: str, connection_id: str) -> bool:
        with self._lock:
            device = self.get(device_id)
            if device is None:
                return False
            remaining = [c for c in device.connections if c.id != connection_id]
            if len(remaining) == len(device.connections):
                return False
            self.update(device_id, {"connections": remaining})
        return True
