from __future__ import annotations

from pathlib import Path

import typer

from alamira.config import (
    Settings,
    data_dir_from_settings,
    get_settings,
    resolve_config_path,
)
from alamira.core import DeviceTransport, OnboardingFlow, ProvisioningService
from alamira.storage import Database, DeviceRegistry


def load_settings_or_exit() -> Settings:
    try:
        return get_settings()
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def resolve_config_path_or_exit(allow_missing: bool = False) -> tuple[Path, bool]:
    try:
        return resolve_config_path(allow_missing=allow_missing)
    except FileNotFoundError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def build_database(settings: Settings, data_dir: Path | None = None) -> Database:
    path = data_dir or data_dir_from_settings(settings)
    return Database(path)


def build_registry(settings: Settings) -> DeviceRegistry:
    return DeviceRegistry(build_database(settings))


def build_transport(settings: Settings) -> DeviceTransport:
    return DeviceTransport(timeout=settings.provisioning.request_timeout)


def build_flow(settings: Settings, registry: DeviceRegistry) -> OnboardingFlow:
    service = ProvisioningService(
        build_transport(settings), ap_host=settings.provisioning.ap_host
    )
    return OnboardingFlow(
        service,
        registry,
        latest_firmware_version=settings.provisioning.latest_firmware_version,
        allow_simulated=settings.provisioning.allow_simulated,
    )
