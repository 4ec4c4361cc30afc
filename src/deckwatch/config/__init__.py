from __future__ import annotations

from .paths import (
    APP_NAME,
    CONFIG_FILENAME,
    default_config_path,
    default_vendor_root,
    expand_path,
)
from .settings import (
    CONFIG_ENV_VAR,
    HELPER_PLUGIN,
    MonitorConfig,
    PathsConfig,
    RegistryConfig,
    Settings,
    get_settings,
    load_settings,
    plugins_dir,
    profiles_dir,
    render_settings_toml,
    resolve_config_path,
    vendor_root,
    write_settings,
)

__all__ = [
    "APP_NAME",
    "CONFIG_ENV_VAR",
    "CONFIG_FILENAME",
    "HELPER_PLUGIN",
    "MonitorConfig",
    "PathsConfig",
    "RegistryConfig",
    "Settings",
    "default_config_path",
    "default_vendor_root",
    "expand_path",
    "get_settings",
    "load_settings",
    "plugins_dir",
    "profiles_dir",
    "render_settings_toml",
    "resolve_config_path",
    "vendor_root",
    "write_settings",
]
