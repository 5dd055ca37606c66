from __future__ import annotations

from .settings import (
    APP_NAME,
    CONFIG_ENV_VAR,
    CONFIG_FILENAME,
    DEFAULT_AP_HOST,
    DEFAULT_API_PORT,
    DatabaseConfig,
    ProvisioningConfig,
    Settings,
    SimulatorConfig,
    data_dir_from_settings,
    default_config_path,
    default_data_dir,
    expand_path,
    get_settings,
    load_settings,
    render_settings_toml,
    resolve_config_path,
    write_settings,
)

__all__ = [
    "APP_NAME",
    "CONFIG_ENV_VAR",
    "CONFIG_FILENAME",
    "DEFAULT_API_PORT",
    "DEFAULT_AP_HOST",
    "DatabaseConfig",
    "ProvisioningConfig",
    "Settings",
    "SimulatorConfig",
    "data_dir_from_settings",
    "default_config_path",
    "default_data_dir",
    "expand_path",
    "get_settings",
    "load_settings",
    "render_settings_toml",
    "resolve_config_path",
    "write_settings",
]
