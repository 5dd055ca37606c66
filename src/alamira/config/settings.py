from __future__ import annotations

import json
import os
import tomllib
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

APP_NAME = "alamira"
CONFIG_ENV_VAR = "ALAMIRA_CONFIG"
CONFIG_FILENAME = "config.toml"

DEFAULT_AP_HOST = "192.168.4.1"
DEFAULT_API_PORT = 8080


def expand_path(value: str) -> Path:
    return Path(os.path.expandvars(os.path.expanduser(value)))


def _xdg_home(env_var: str, fallback: Path) -> Path:
    return Path(os.environ.get(env_var) or fallback)


def default_config_path() -> Path:
    config_home = _xdg_home("XDG_CONFIG_HOME", Path.home() / ".config")
    return config_home / APP_NAME / CONFIG_FILENAME


def default_data_dir() -> Path:
    """Where paired devices live unless `[database] path` says otherwise."""
    return _xdg_home("XDG_DATA_HOME", Path.home() / ".local" / "share") / APP_NAME


class DatabaseConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    path: str = Field(default_factory=lambda: str(default_data_dir()))


class ProvisioningConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    ap_host: str = DEFAULT_AP_HOST
    request_timeout: float = Field(default=10.0, gt=0)
    latest_firmware_version: str | None = None
    allow_simulated: bool = True


class SimulatorConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    host: str = "0.0.0.0"
    port: int = Field(default=DEFAULT_API_PORT, ge=1, le=65535)
    device_id: str = "ALM-SIM-001"
    model: str = "Alamira Display Simulator"
    firmware_version: str = "1.0.0"
    serial: str = "SIM-2026-001"
    advertised_ip: str | None = None


class Settings(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    provisioning: ProvisioningConfig = Field(default_factory=ProvisioningConfig)
    simulator: SimulatorConfig = Field(default_factory=SimulatorConfig)


def resolve_config_path(allow_missing: bool = False) -> tuple[Path, bool]:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = expand_path(env_path)
        if not allow_missing and not path.exists():
            raise FileNotFoundError(f"{CONFIG_ENV_VAR} points to missing file: {path}")
        return path, path.exists()

    path = default_config_path()
    return path, path.exists()


def load_settings(path: Path) -> Settings:
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in config file: {path}\n{exc}") from exc

    try:
        return Settings.model_validate(data or {})
    except ValidationError as exc:
        raise ValueError(f"Invalid config file: {path}\n{exc}") from exc


@lru_cache
def get_settings() -> Settings:
    path, exists = resolve_config_path(allow_missing=False)
    if exists:
        return load_settings(path)
    return Settings()


def data_dir_from_settings(settings: Settings) -> Path:
    return expand_path(settings.database.path)


def _toml_string(value: str) -> str:
    return json.dumps(value)


def _toml_bool(value: bool) -> str:
    return "true" if value else "false"


def render_settings_toml(settings: Settings) -> str:
    provisioning = settings.provisioning
    simulator = settings.simulator
    lines = [
        "# Alamira configuration",
        "",
        "[database]",
        f"path = {_toml_string(settings.database.path)}",
        "",
        "[provisioning]",
        f"ap_host = {_toml_string(provisioning.ap_host)}",
        f"request_timeout = {provisioning.request_timeout}",
    ]
    if provisioning.latest_firmware_version is not None:
        lines.append(
            "latest_firmware_version = "
            f"{_toml_string(provisioning.latest_firmware_version)}"
        )
    lines += [
        f"allow_simulated = {_toml_bool(provisioning.allow_simulated)}",
        "",
        "[simulator]",
        f"host = {_toml_string(simulator.host)}",
        f"port = {simulator.port}",
        f"device_id = {_toml_string(simulator.device_id)}",
        f"model = {_toml_string(simulator.model)}",
        f"firmware_version = {_toml_string(simulator.firmware_version)}",
        f"serial = {_toml_string(simulator.serial)}",
    ]
    if simulator.advertised_ip is not None:
        lines.append(f"advertised_ip = {_toml_string(simulator.advertised_ip)}")
    lines.append("")
    return "\n".join(lines)


def write_settings(settings: Settings, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_settings_toml(settings))
