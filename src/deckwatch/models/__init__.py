"""Data models for deckwatch."""

from deckwatch.models.device import (
    ButtonInfo,
    DeviceRecord,
    DeviceState,
    DeviceView,
    LogEvidence,
    Snapshot,
)
from deckwatch.models.manifests import (
    ActionState,
    PageAction,
    PageManifest,
    PluginManifest,
    ProfileManifest,
)

__all__ = [
    "ActionState",
    "ButtonInfo",
    "DeviceRecord",
    "DeviceState",
    "DeviceView",
    "LogEvidence",
    "PageAction",
    "PageManifest",
    "PluginManifest",
    "ProfileManifest",
    "Snapshot",
]
