from __future__ import annotations

from .images import FileUriPublisher, ImagePublisher
from .logscan import LogScanner
from .monitor import DeckMonitor
from .names import resolve_device_names
from .notifier import ChangeNotifier, FileChangeNotifier
from .plugins import ButtonIconResolver
from .profiles import ProfileButtonResolver, ProfileManifestReader
from .registry import ExtractionResult, extract_devices
from .registry_parser import parse_blob
from .sources import (
    BlobFileSource,
    RegistrySource,
    RegistryUnavailableError,
    WindowsRegistrySource,
    build_source,
)

__all__ = [
    "BlobFileSource",
    "ButtonIconResolver",
    "ChangeNotifier",
    "DeckMonitor",
    "ExtractionResult",
    "FileChangeNotifier",
    "FileUriPublisher",
    "ImagePublisher",
    "LogScanner",
    "ProfileButtonResolver",
    "ProfileManifestReader",
    "RegistrySource",
    "RegistryUnavailableError",
    "WindowsRegistrySource",
    "build_source",
    "extract_devices",
    "parse_blob",
    "resolve_device_names",
]
