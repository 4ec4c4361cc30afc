from __future__ import annotations

from pathlib import Path
from typing import Protocol

MISSING_IMAGE = "-"


class ImagePublisher(Protocol):
    """Turns a resolved icon file path into something a consumer can load."""

    def resolve(self, file_path: str) -> str: ...


class FileUriPublisher:
    """Publishes icons as ``file://`` URIs, with a placeholder for misses."""

    def resolve(self, file_path: str) -> str:
        if not file_path:
            return MISSING_IMAGE
        path = Path(file_path)
        if not path.is_file():
            return MISSING_IMAGE
        return path.resolve().as_uri()
