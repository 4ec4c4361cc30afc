"""Pattern unit for the vendor's binary ``Devices`` registry value.

The value is an undocumented UTF-16 property list in which device records are
concatenated without delimiters. Every pattern used to pick it apart lives in
this module so format drift shows up in one place (and in the fixture corpus
under ``tests/fixtures/registry``).

A record is recognised as::

    ESDProfilesPreferred ... <36-char profile uuid> ... @(1)[<int>/<int>/<serial>]

and the device name, when the vendor stored one, is the last ``DeviceName``
token between the previous record and this one.
"""

from __future__ import annotations

import logging
import re

from deckwatch.models import DeviceRecord

logger = logging.getLogger(__name__)

ANCHOR_TOKEN = "ESDProfilesPreferred"

RECORD_PATTERN = re.compile(
    re.escape(ANCHOR_TOKEN)
    + r"[\s\S]*?([a-fA-F0-9-]{36})[\s\S]*?(@\(1\)\[\d+/\d+/(.*?)\])"
)
DEVICE_NAME_PATTERN = re.compile(r"DeviceName[\W_]*([^\n\r\x00-\x1F]+)")

LINE_SENTINEL = "\n"


def decode_blob(raw: bytes) -> str:
    """Decode the UTF-16 blob, turning NUL code points into line breaks."""
    text = raw.decode("utf-16-le", errors="replace")
    return text.replace("\x00", LINE_SENTINEL)


def find_device_name(text: str, start: int, end: int, placeholder: str) -> str:
    """Return the last ``DeviceName`` value in ``text[start:end]``."""
    if end <= start:
        return placeholder

    matches = DEVICE_NAME_PATTERN.findall(text, start, end)
    if not matches:
        return placeholder

    name = matches[-1].strip()
    return name or placeholder


def parse_records(text: str, placeholder: str) -> list[DeviceRecord]:
    """Parse every device record from decoded registry text."""
    records: list[DeviceRecord] = []
    previous_end = 0

    for match in RECORD_PATTERN.finditer(text):
        serial = match.group(3).strip()
        if not serial:
            logger.debug("Skipping record with empty serial at %d", match.start())
            previous_end = match.end()
            continue

        records.append(
            DeviceRecord(
                serial=serial,
                full_id=match.group(2),
                profile_uuid=match.group(1),
                device_name=find_device_name(
                    text, previous_end, match.start(), placeholder
                ),
                start=match.start(),
                end=match.end(),
            )
        )
        previous_end = match.end()

    return records


def parse_blob(raw: bytes | None, placeholder: str) -> list[DeviceRecord]:
    """Decode and parse a raw registry value; ``None`` yields no records."""
    if not raw:
        return []
    text = decode_blob(raw)
    logger.debug("Registry content length: %d", len(text))
    records = parse_records(text, placeholder)
    logger.debug("Found %d device record(s)", len(records))
    return records
