"""deckwatch - follow Stream Deck devices, their active profiles and buttons."""

from __future__ import annotations

from importlib.metadata import version

from .config import MonitorConfig, PathsConfig, RegistryConfig, Settings, get_settings
from .core import DeckMonitor
from .models import ButtonInfo, DeviceState, DeviceView, Snapshot

__all__ = [
    "ButtonInfo",
    "DeckMonitor",
    "DeviceState",
    "DeviceView",
    "MonitorConfig",
    "PathsConfig",
    "RegistryConfig",
    "Settings",
    "Snapshot",
    "__version__",
    "get_settings",
]

__version__ = version("deckwatch")
