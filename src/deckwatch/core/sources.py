"""Where the raw ``Devices`` value comes from."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol

from deckwatch.config import Settings
from deckwatch.core.notifier import (
    ChangeNotifier,
    FileChangeNotifier,
    RegistryChangeNotifier,
)

logger = logging.getLogger(__name__)


class RegistryUnavailableError(OSError):
    """The watched registry key cannot be opened."""


class RegistrySource(Protocol):
    def open(self) -> None: ...

    def read(self) -> bytes | None: ...

    def notifier(self) -> ChangeNotifier: ...

    def close(self) -> None: ...


class WindowsRegistrySource:
    """A value under ``HKEY_CURRENT_USER``, read through winreg."""

    def __init__(self, key_path: str, value_name: str) -> None:
        self.key_path = key_path
        self.value_name = value_name
        self._key: Any = None

    def open(self) -> None:
        if self._key is not None:
            return
        try:
            import winreg
        except ImportError as exc:
            raise RegistryUnavailableError(
                "The Windows registry is not available on this platform"
            ) from exc

        access = winreg.KEY_READ | winreg.KEY_NOTIFY
        try:
            self._key = winreg.OpenKey(winreg.HKEY_CURRENT_USER, self.key_path, 0, access)
        except OSError as exc:
            raise RegistryUnavailableError(
                f"Cannot open registry key HKCU\\{self.key_path}: {exc}"
            ) from exc

    def read(self) -> bytes | None:
        import winreg

        self.open()
        try:
            value, value_type = winreg.QueryValueEx(self._key, self.value_name)
        except FileNotFoundError:
            logger.warning("Registry value %s not found", self.value_name)
            return None
        except OSError as exc:
            logger.warning("Cannot read registry value %s: %s", self.value_name, exc)
            return None

        if value_type != winreg.REG_BINARY or not isinstance(value, bytes):
            logger.warning("Registry value %s is not binary", self.value_name)
            return None
        return value

    def notifier(self) -> ChangeNotifier:
        self.open()
        return RegistryChangeNotifier(int(self._key))

    def close(self) -> None:
        if self._key is not None:
            self._key.Close()
            self._key = None


class BlobFileSource:
    """A captured copy of the registry value stored in a file."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def open(self) -> None:
        if not self.path.is_file():
            raise RegistryUnavailableError(f"Blob file not found: {self.path}")

    def read(self) -> bytes | None:
        try:
            return self.path.read_bytes()
        except OSError as exc:
            logger.warning("Cannot read blob file %s: %s", self.path, exc)
            return None

    def notifier(self) -> ChangeNotifier:
        return FileChangeNotifier(self.path)

    def close(self) -> None:
        pass


def build_source(settings: Settings, blob_file: Path | None = None) -> RegistrySource:
    if blob_file is not None:
        return BlobFileSource(blob_file)
    return WindowsRegistrySource(settings.registry.key, settings.registry.value)
