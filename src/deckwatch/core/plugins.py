"""Default action icons from installed plugin manifests."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

from pydantic import ValidationError

from deckwatch.models import PluginManifest

logger = logging.getLogger(__name__)

PLUGIN_SUFFIX = ".sdPlugin"
MANIFEST_FILE = "manifest.json"

# Tried in order after the literal image name.
IMAGE_SUFFIXES = (".png", ".svg", ".jpg", "@2x.png")


class ButtonIconResolver:
    """Resolve an action's default icon, caching one manifest per plugin."""

    def __init__(self, plugins_dir: Path) -> None:
        self.plugins_dir = plugins_dir
        self._lock = threading.Lock()
        self._cache: dict[str, PluginManifest | None] = {}

    def plugin_dir(self, plugin_uuid: str) -> Path:
        return self.plugins_dir / f"{plugin_uuid}{PLUGIN_SUFFIX}"

    def manifest(self, plugin_uuid: str) -> PluginManifest | None:
        """Return the parsed manifest, or ``None`` if it cannot be loaded."""
        with self._lock:
            if plugin_uuid in self._cache:
                return self._cache[plugin_uuid]

        manifest = self._load(plugin_uuid)

        with self._lock:
            return self._cache.setdefault(plugin_uuid, manifest)

    def _load(self, plugin_uuid: str) -> PluginManifest | None:
        manifest_path = self.plugin_dir(plugin_uuid) / MANIFEST_FILE
        if not manifest_path.is_file():
            logger.debug("Plugin manifest not found: %s", manifest_path)
            return None

        try:
            data = json.loads(manifest_path.read_text(encoding="utf-8-sig"))
            return PluginManifest.model_validate(data)
        except (OSError, ValueError, ValidationError) as exc:
            logger.warning(
                "Error parsing plugin manifest for %s: %s", plugin_uuid, exc
            )
            return None

    def resolve(self, plugin_uuid: str, action_uuid: str, state: int = 0) -> str | None:
        manifest = self.manifest(plugin_uuid)
        if manifest is None:
            return None

        action = manifest.find_action(action_uuid)
        if action is None or not action.states or not 0 <= state < len(action.states):
            return None

        image = action.states[state].image
        if not image:
            return None

        base = self.plugin_dir(plugin_uuid) / image
        candidates = [base, *(Path(f"{base}{suffix}") for suffix in IMAGE_SUFFIXES)]
        for candidate in candidates:
            if candidate.is_file():
                return str(candidate)

        logger.debug("Default icon not found on disk: %s", base)
        return None


def guess_plugin_uuid(action_uuid: str) -> str | None:
    """Derive a plugin id from a dotted action id (``a.b.c.act`` -> ``a.b.c``)."""
    parts = action_uuid.split(".")
    if len(parts) < 3:
        return None
    return ".".join(parts[:-1])
