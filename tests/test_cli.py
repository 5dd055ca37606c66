from __future__ import annotations

import pytest
from typer.testing import CliRunner

from alamira.cli import app
from alamira.config import get_settings
from alamira.models import ConnectionType
from alamira.storage import Database, DeviceRegistry

runner = CliRunner()


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    data = tmp_path / "data"
    config = tmp_path / "config.toml"
    config.write_text(f'[database]\npath = "{data.as_posix()}"\n')
    monkeypatch.setenv("ALAMIRA_CONFIG", str(config))
    monkeypatch.setenv("COLUMNS", "200")
    get_settings.cache_clear()
    return data


def _registry(data_dir) -> DeviceRegistry:
    return DeviceRegistry(Database(data_dir))


def _pair_demo() -> None:
    result = runner.invoke(
        app, ["onboard", "--demo", "--skip-firmware", "--name", "Helm Display"]
    )
    assert result.exit_code == 0, result.output


def test_version():
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert result.output.startswith("alamira version ")


def test_devices_list_empty(data_dir):
    result = runner.invoke(app, ["devices", "list"])

    assert result.exit_code == 0
    assert "No paired devices." in result.output


def test_onboard_demo(data_dir):
    result = runner.invoke(
        app, ["onboard", "--demo", "--skip-firmware", "--name", "Helm Display"]
    )

    assert result.exit_code == 0, result.output
    assert "Firmware update available: v1.2.0" in result.output
    assert "Paired 'Helm Display' (ALM-DEMO-001) at 192.168.1.100:8080" in (
        result.output
    )
    [device] = _registry(data_dir).list()
    assert device.name == "Helm Display"
    assert device.model == "Alamira MFD-7"


def test_onboard_invalid_qr(data_dir):
    result = runner.invoke(app, ["onboard", '{"ap_ssid": 1}'])

    assert result.exit_code == 1
    assert "Invalid QR code" in result.output
    assert _registry(data_dir).list() == []


def test_devices_list_shows_paired(data_dir):
    _pair_demo()

    result = runner.invoke(app, ["devices", "list"])

    assert result.exit_code == 0
    assert "ALM-DEMO-001" in result.output
    assert "Helm Display" in result.output


def test_devices_list_redacted(data_dir):
    _pair_demo()

    result = runner.invoke(app, ["devices", "list", "--redact"])

    assert result.exit_code == 0
    assert "192.168.1.100" not in result.output
    assert "ALM-2026-DEMO-001" not in result.output


def test_rename_and_remove(data_dir):
    _pair_demo()

    renamed = runner.invoke(app, ["devices", "rename", "ALM-DEMO-001", "Nav"])
    assert renamed.exit_code == 0
    assert _registry(data_dir).get("ALM-DEMO-001").name == "Nav"

    removed = runner.invoke(app, ["devices", "remove", "ALM-DEMO-001"])
    assert removed.exit_code == 0
    assert _registry(data_dir).list() == []


def test_remove_unknown_device(data_dir):
    result = runner.invoke(app, ["devices", "remove", "ALM-NOPE"])

    assert result.exit_code == 1
    assert "not found" in result.output


def test_link_uses_default_port(data_dir):
    _pair_demo()

    result = runner.invoke(
        app, ["devices", "link", "ALM-DEMO-001", "signalk", "10.0.0.5"]
    )

    assert result.exit_code == 0, result.output
    [connection] = _registry(data_dir).get("ALM-DEMO-001").connections
    assert connection.type is ConnectionType.SIGNALK
    assert (connection.host, connection.port) == ("10.0.0.5", 3000)


def test_unlink_unknown_connection(data_dir):
    _pair_demo()

    result = runner.invoke(app, ["devices", "unlink", "ALM-DEMO-001", "missing"])

    assert result.exit_code == 1


def test_config_show(data_dir):
    result = runner.invoke(app, ["config", "show"])

    assert result.exit_code == 0
    assert "Config source:" in result.output
    assert 'ap_host = "192.168.4.1"' in result.output
    assert data_dir.as_posix() in result.output


def test_init_creates_store(data_dir):
    result = runner.invoke(app, ["init"])

    assert result.exit_code == 0, result.output
    assert (data_dir / "store.json").exists()
