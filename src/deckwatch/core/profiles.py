"""Profile names and per-profile button resolution."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path, PurePath

from pydantic import ValidationError

from deckwatch.core.plugins import ButtonIconResolver, guess_plugin_uuid
from deckwatch.models import ButtonInfo, PageAction, PageManifest, ProfileManifest

logger = logging.getLogger(__name__)

PROFILE_SUFFIX = ".sdProfile"
MANIFEST_FILE = "manifest.json"
PAGES_DIR = "Profiles"
IMAGES_DIR = "Images"


def profile_path(profiles_dir: Path, profile_uuid: str) -> Path:
    return profiles_dir / f"{profile_uuid}{PROFILE_SUFFIX}"


def _read_json(path: Path) -> object:
    return json.loads(path.read_text(encoding="utf-8-sig"))


class ProfileManifestReader:
    """Cache of profile display names keyed by profile uuid."""

    def __init__(self, profiles_dir: Path, unknown_name: str = "Unknown Profile") -> None:
        self.profiles_dir = profiles_dir
        self.unknown_name = unknown_name
        self._lock = threading.Lock()
        self._cache: dict[str, str | None] = {}

    def name(self, profile_uuid: str) -> str:
        with self._lock:
            if profile_uuid in self._cache:
                return self._cache[profile_uuid] or self.unknown_name

        name = self._load(profile_uuid)

        with self._lock:
            cached = self._cache.setdefault(profile_uuid, name)
        return cached or self.unknown_name

    def _load(self, profile_uuid: str) -> str | None:
        manifest_path = profile_path(self.profiles_dir, profile_uuid) / MANIFEST_FILE
        if not manifest_path.is_file():
            logger.debug("Profile manifest not found: %s", manifest_path)
            return None

        try:
            manifest = ProfileManifest.model_validate(_read_json(manifest_path))
        except (OSError, ValueError, ValidationError) as exc:
            logger.warning("Error reading profile manifest %s: %s", manifest_path, exc)
            return None

        return manifest.name


def resolve_image(image: str, page_dir: Path, profile_dir: Path) -> str | None:
    """Locate a page-declared image, trying the fixed search order.

    1. relative to the page directory
    2. relative to the profile root
    3. ``Images`` folder of the profile root
    4. ``Images`` folder of the page directory
    5. the path itself, when absolute
    """
    relative = image.replace("\\", "/").lstrip("/")
    filename = PurePath(relative).name

    candidates = [page_dir / relative, profile_dir / relative]
    if filename:
        candidates += [
            profile_dir / IMAGES_DIR / filename,
            page_dir / IMAGES_DIR / filename,
        ]

    for candidate in candidates:
        if candidate.is_file():
            return str(candidate)

    absolute = Path(image)
    if absolute.is_absolute() and absolute.is_file():
        return str(absolute)

    logger.debug(
        "Image not found: %s (checked %s)", image, ", ".join(map(str, candidates))
    )
    return None


def action_title(action: PageAction) -> str:
    state = action.current_state()
    if state is not None and state.title and state.title.strip():
        return state.title
    if action.name and action.name.strip():
        return action.name
    if action.uuid and action.uuid.strip():
        return action.uuid.split(".")[-1]
    return ""


def merge_button(buttons: dict[str, ButtonInfo], key: str, info: ButtonInfo) -> bool:
    """Merge one page's entry into ``buttons``; returns True if it was taken.

    The first entry with content wins, except that an entry without any
    content, or without an icon, gives way to a later one that has it.
    """
    existing = buttons.get(key)
    if existing is None:
        if info.has_content:
            buttons[key] = info
            return True
        return False

    if not existing.has_content and info.has_content:
        buttons[key] = info
        return True
    if not existing.icon_path and info.icon_path:
        buttons[key] = info
        return True
    return False


class ProfileButtonResolver:
    """Resolve button titles and icons for every page of a profile."""

    def __init__(self, profiles_dir: Path, icons: ButtonIconResolver) -> None:
        self.profiles_dir = profiles_dir
        self.icons = icons

    def resolve(self, profile_uuid: str) -> dict[str, ButtonInfo]:
        buttons: dict[str, ButtonInfo] = {}
        profile_dir = profile_path(self.profiles_dir, profile_uuid)
        pages_dir = profile_dir / PAGES_DIR

        if not pages_dir.is_dir():
            logger.debug("No pages for profile %s at %s", profile_uuid, pages_dir)
            return buttons

        try:
            page_dirs = sorted(p for p in pages_dir.iterdir() if p.is_dir())
        except OSError as exc:
            logger.warning("Cannot list pages of %s: %s", profile_uuid, exc)
            return buttons

        logger.debug("Profile %s: %d page(s)", profile_uuid, len(page_dirs))
        for page_dir in page_dirs:
            manifest_path = page_dir / MANIFEST_FILE
            if not manifest_path.is_file():
                continue

            try:
                page = PageManifest.model_validate(_read_json(manifest_path))
            except (OSError, ValueError, ValidationError) as exc:
                logger.warning("Error processing page %s: %s", page_dir, exc)
                continue

            for controller in page.controllers or []:
                for key, action in (controller.actions or {}).items():
                    info = self._button_info(action, page_dir, profile_dir)
                    if merge_button(buttons, key, info):
                        logger.debug(
                            "Button %s: title=%r icon=%r", key, info.title, info.icon_path
                        )

        return buttons

    def _button_info(
        self, action: PageAction, page_dir: Path, profile_dir: Path
    ) -> ButtonInfo:
        state = action.current_state()
        image = state.image if state is not None else None

        icon_path: str | None = None
        if image and image.strip():
            icon_path = resolve_image(image, page_dir, profile_dir)
        elif action.uuid:
            plugin_uuid = (action.plugin.uuid if action.plugin else None) or (
                guess_plugin_uuid(action.uuid)
            )
            if plugin_uuid:
                icon_path = self.icons.resolve(plugin_uuid, action.uuid, action.state)

        return ButtonInfo(title=action_title(action), icon_path=icon_path or "")
