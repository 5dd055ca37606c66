from __future__ import annotations

import pytest

from alamira.config import (
    DatabaseConfig,
    ProvisioningConfig,
    Settings,
    SimulatorConfig,
    get_settings,
    load_settings,
    write_settings,
)


def test_config_roundtrip(tmp_path):
    path = tmp_path / "config.toml"
    settings = Settings(
        database=DatabaseConfig(path=str(tmp_path / "data")),
        provisioning=ProvisioningConfig(
            ap_host="10.0.0.1",
            request_timeout=2.5,
            latest_firmware_version="1.3.0",
            allow_simulated=False,
        ),
        simulator=SimulatorConfig(port=9090, advertised_ip="10.0.0.9"),
    )
    write_settings(settings, path)

    assert load_settings(path) == settings


def test_defaults():
    settings = Settings()

    assert settings.provisioning.ap_host == "192.168.4.1"
    assert settings.provisioning.request_timeout == 10.0
    assert settings.provisioning.latest_firmware_version is None
    assert settings.simulator.port == 8080


def test_invalid_toml(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("[provisioning\n")

    with pytest.raises(ValueError, match="Invalid TOML"):
        load_settings(path)


def test_unknown_key_rejected(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("[provisioning]\nretries = 3\n")

    with pytest.raises(ValueError, match="Invalid config file"):
        load_settings(path)


def test_env_var_pointing_to_missing_file(tmp_path, monkeypatch):
    monkeypatch.setenv("ALAMIRA_CONFIG", str(tmp_path / "missing.toml"))

    with pytest.raises(FileNotFoundError):
        get_settings()


def test_env_var_config_is_loaded(tmp_path, monkeypatch):
    path = tmp_path / "config.toml"
    path.write_text('[provisioning]\nap_host = "10.1.1.1"\n')
    monkeypatch.setenv("ALAMIRA_CONFIG", str(path))

    assert get_settings().provisioning.ap_host == "10.1.1.1"
