"""Tests for the paired device registry."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from alamira.models import ConnectionType, PairedDevice
from alamira.storage import STORAGE_KEY, Database, DeviceRegistry


def _device(device_id: str = "ALM-DEMO-001", name: str = "Helm Display"):
    return PairedDevice(
        id=device_id,
        name=name,
        ip="192.168.1.100",
        port=8080,
        model="Alamira MFD-7",
        firmware_version="1.2.0",
        serial="ALM-2026-DEMO-001",
        paired_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )


def test_empty_registry(registry):
    assert registry.list() == []
    assert registry.get("missing") is None


def test_add_and_list_persists(tmp_path):
    db = Database(tmp_path)
    DeviceRegistry(db).add(_device())

    devices = DeviceRegistry(Database(tmp_path)).list()

    assert devices == [_device()]
    assert db.get(STORAGE_KEY)[0]["id"] == "ALM-DEMO-001"


def test_re_adding_same_id_replaces(registry):
    registry.add(_device(name="Old"))
    registry.add(_device("ALM-OTHER", name="Other"))
    registry.add(_device(name="New"))

    devices = registry.list()

    assert [d.id for d in devices] == ["ALM-OTHER", "ALM-DEMO-001"]
    assert registry.get("ALM-DEMO-001").name == "New"


def test_update_then_list_keeps_other_fields(registry):
    original = _device()
    registry.add(original)

    registry.update(original.id, {"name": "X"})
    devices = registry.list()

    assert len(devices) == 1
    assert devices[0].name == "X"
    assert devices[0].model_dump(exclude={"name"}) == original.model_dump(
        exclude={"name"}
    )


def test_update_unknown_id_is_noop(registry):
    registry.add(_device())

    assert registry.update("missing", {"name": "X"}) is None
    assert registry.list() == [_device()]


def test_update_cannot_change_id(registry):
    registry.add(_device())

    with pytest.raises(ValueError):
        registry.update("ALM-DEMO-001", {"id": "ALM-OTHER"})


def test_remove(registry):
    registry.add(_device())
    registry.add(_device("ALM-OTHER"))

    assert registry.remove("ALM-DEMO-001") is True
    assert registry.remove("ALM-DEMO-001") is False
    assert [d.id for d in registry.list()] == ["ALM-OTHER"]


def test_rename(registry):
    registry.add(_device())

    renamed = registry.rename("ALM-DEMO-001", "Chart Table")

    assert renamed is not None
    assert registry.get("ALM-DEMO-001").name == "Chart Table"


def test_signalk_link_replaces_existing(registry):
    registry.add(_device())

    registry.link_connection("ALM-DEMO-001", ConnectionType.SIGNALK, "10.0.0.2", 3000)
    second = registry.link_connection(
        "ALM-DEMO-001", ConnectionType.SIGNALK, "10.0.0.3", 3000, name="Boat"
    )

    connections = registry.get("ALM-DEMO-001").connections
    assert [c.id for c in connections] == [second.id]
    assert connections[0].host == "10.0.0.3"
    assert connections[0].name == "Boat"


def test_nmea0183_links_accumulate(registry):
    registry.add(_device())

    registry.link_connection("ALM-DEMO-001", ConnectionType.NMEA0183, "10.0.0.2", 10110)
    registry.link_connection("ALM-DEMO-001", ConnectionType.NMEA0183, "10.0.0.3", 10110)
    registry.link_connection("ALM-DEMO-001", ConnectionType.NMEA2000, "10.0.0.4", 10110)

    types = [c.type for c in registry.get("ALM-DEMO-001").connections]
    assert types.count(ConnectionType.NMEA0183) == 2
    assert types.count(ConnectionType.NMEA2000) == 1


def test_link_unknown_device(registry):
    assert (
        registry.link_connection("missing", ConnectionType.SIGNALK, "10.0.0.2", 3000)
        is None
    )


def test_unlink(registry):
    registry.add(_device())
    link = registry.link_connection(
        "ALM-DEMO-001", ConnectionType.SIGNALK, "10.0.0.2", 3000
    )

    assert registry.unlink_connection("ALM-DEMO-001", link.id) is True
    assert registry.unlink_connection("ALM-DEMO-001", link.id) is False
    assert registry.get("ALM-DEMO-001").connections == []


def test_malformed_stored_list_reads_as_empty(tmp_path):
    db = Database(tmp_path)
    db.set(STORAGE_KEY, [{"id": "ALM-DEMO-001"}])

    assert DeviceRegistry(db).list() == []


def test_unreadable_record_does_not_erase_others(tmp_path):
    db = Database(tmp_path)
    registry = DeviceRegistry(db)
    registry.add(_device("A"))
    registry.add(_device("B"))

    stored = db.get(STORAGE_KEY)
    del stored[1]["serial"]
    db.set(STORAGE_KEY, stored)

    registry.add(_device("C"))

    assert [d.id for d in registry.list()] == ["A", "C"]
    assert [entry["id"] for entry in db.get(STORAGE_KEY)] == ["A", "C", "B"]


def test_writes_refuse_non_list_value(tmp_path):
    db = Database(tmp_path)
    db.set(STORAGE_KEY, {"A": "not a list"})
    registry = DeviceRegistry(db)

    assert registry.list() == []
    with pytest.raises(ValueError, match="not a list"):
        registry.add(_device("C"))
    assert db.get(STORAGE_KEY) == {"A": "not a list"}


def test_corrupt_store_file_raises(tmp_path):
    db = Database(tmp_path)
    db.ensure_dirs()
    db.store_path.write_text("{not json")

    with pytest.raises(ValueError, match="Invalid JSON"):
        db.get(STORAGE_KEY)
