from __future__ import annotations

import json
import os
import tomllib
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from .paths import default_config_path, default_vendor_root, expand_path

CONFIG_ENV_VAR = "DECKWATCH_CONFIG"

HELPER_PLUGIN = "com.example.streamdeck.profilemonitor.sdPlugin"


class PathsConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    vendor_root: str = Field(default_factory=lambda: str(default_vendor_root()))
    profiles_subdir: str = "ProfilesV2"
    plugins_subdir: str = "Plugins"
    helper_plugin: str = HELPER_PLUGIN


class RegistryConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    key: str = r"Software\Elgato Systems GmbH\StreamDeck"
    value: str = "Devices"


class MonitorConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    wait_timeout: float = Field(default=1.0, gt=0)
    log_scan_interval: float = Field(default=10.0, gt=0)
    placeholder_name: str = Field(default="Stream Deck", min_length=1)
    unknown_profile_name: str = "Unknown Profile"
    refresh_unchanged_profiles: bool = True


class Settings(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    paths: PathsConfig = Field(default_factory=PathsConfig)
    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    monitor: MonitorConfig = Field(default_factory=MonitorConfig)


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


def vendor_root(settings: Settings) -> Path:
    return expand_path(settings.paths.vendor_root)


def profiles_dir(settings: Settings) -> Path:
    return vendor_root(settings) / settings.paths.profiles_subdir


def plugins_dir(settings: Settings) -> Path:
    return vendor_root(settings) / settings.paths.plugins_subdir


def _toml_string(value: str) -> str:
    return json.dumps(value)


def _toml_bool(value: bool) -> str:
    return "true" if value else "false"


def render_settings_toml(settings: Settings) -> str:
    lines = [
        "# deckwatch configuration",
        "",
        "[paths]",
        f"vendor_root = {_toml_string(settings.paths.vendor_root)}",
        f"profiles_subdir = {_toml_string(settings.paths.profiles_subdir)}",
        f"plugins_subdir = {_toml_string(settings.paths.plugins_subdir)}",
        f"helper_plugin = {_toml_string(settings.paths.helper_plugin)}",
        "",
        "[registry]",
        f"key = {_toml_string(settings.registry.key)}",
        f"value = {_toml_string(settings.registry.value)}",
        "",
        "[monitor]",
        f"wait_timeout = {settings.monitor.wait_timeout}",
        f"log_scan_interval = {settings.monitor.log_scan_interval}",
        f"placeholder_name = {_toml_string(settings.monitor.placeholder_name)}",
        f"unknown_profile_name = {_toml_string(settings.monitor.unknown_profile_name)}",
        "refresh_unchanged_profiles = "
        f"{_toml_bool(settings.monitor.refresh_unchanged_profiles)}",
        "",
    ]
    return "\n".join(lines)


def write_settings(settings: Settings, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_settings_toml(settings))
