"""Evidence about device identities recovered from vendor plugin logs."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from pathlib import Path

from deckwatch.models import LogEvidence

logger = logging.getLogger(__name__)

LOG_GLOB = "*.log"

DEVICES_FRAGMENT = re.compile(r'devices":\[(.*?)\]')
DEVICE_ENTRY = re.compile(r'\{"id":"([a-f0-9]{32})"[^}]*?"name":"([^"]+)"')
PROFILE_LINE = re.compile(r"Device: \w+ \(([a-f0-9]{32})\) - Profile: (.+)")


def _newest_first(paths: list[Path]) -> list[Path]:
    def mtime(path: Path) -> float:
        try:
            return path.stat().st_mtime
        except OSError:
            return 0.0

    return sorted(paths, key=mtime, reverse=True)


def _log_files(root: Path) -> list[Path]:
    if not root.is_dir():
        return []
    try:
        return [p for p in root.rglob(LOG_GLOB) if p.is_file()]
    except OSError as exc:
        logger.debug("Cannot walk %s: %s", root, exc)
        return []


def parse_device_names(content: str) -> Iterator[tuple[str, str]]:
    """Yield ``(device_id, name)`` pairs from the first ``devices`` fragment."""
    match = DEVICES_FRAGMENT.search(content)
    if match is None:
        return
    for entry in DEVICE_ENTRY.finditer(match.group(1)):
        yield entry.group(1), entry.group(2)


def parse_profile_line(line: str) -> tuple[str, str] | None:
    match = PROFILE_LINE.search(line)
    if match is None:
        return None
    profile = match.group(2).strip()
    if not profile:
        return None
    return match.group(1), profile


class LogScanner:
    """Scan plugin logs for device custom names and device/profile pairs.

    Results accumulate in ``evidence`` for the lifetime of the scanner; a
    custom name, once recorded for a device id, is never replaced.
    """

    def __init__(self, plugins_dir: Path, helper_plugin: str) -> None:
        self.plugins_dir = plugins_dir
        self.helper_dir = plugins_dir / helper_plugin
        self.evidence = LogEvidence()

    def scan(self) -> LogEvidence:
        try:
            self._scan_custom_names()
            self._scan_profile_lines()
        except Exception:
            logger.exception("Log scan failed")
        logger.debug(
            "Log evidence: %d name(s), %d device/profile set(s)",
            len(self.evidence.custom_names),
            len(self.evidence.profile_names),
        )
        return self.evidence

    def _scan_custom_names(self) -> None:
        names = self.evidence.custom_names
        for path in _newest_first(_log_files(self.plugins_dir)):
            content = self._read(path)
            if content is None:
                continue
            for device_id, name in parse_device_names(content):
                if device_id not in names:
                    names[device_id] = name
                    logger.info("Custom name for %s: %s", device_id, name)

    def _scan_profile_lines(self) -> None:
        profiles = self.evidence.profile_names
        for path in _log_files(self.helper_dir):
            content = self._read(path)
            if content is None:
                continue
            for line in content.splitlines():
                parsed = parse_profile_line(line)
                if parsed is None:
                    continue
                device_id, profile = parsed
                profiles.setdefault(device_id, set()).add(profile)

    @staticmethod
    def _read(path: Path) -> str | None:
        try:
            return path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            logger.debug("Skipping unreadable log %s: %s", path, exc)
            return None
