"""Registry state extraction: decoded records to a device map transition."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from deckwatch.core.registry_parser import parse_blob
from deckwatch.models import DeviceState

logger = logging.getLogger(__name__)


@dataclass
class ExtractionResult:
    """Outcome of applying one registry pass to the prior device map."""

    devices: dict[str, DeviceState]
    created: list[str] = field(default_factory=list)
    changed: list[str] = field(default_factory=list)  # profile uuid changed
    removed: list[str] = field(default_factory=list)


def extract_devices(
    raw: bytes | None,
    prior: dict[str, DeviceState],
    placeholder: str,
) -> ExtractionResult:
    """Apply the registry value to ``prior`` without mutating it.

    Devices in the returned map are copies. A serial seen for the first time
    is reported as created (and changed, since it has no profile yet); a
    serial whose profile uuid differs from the stored one is reported as
    changed; known serials missing from this pass are evicted.
    """
    devices: dict[str, DeviceState] = {}
    result = ExtractionResult(devices=devices)

    for record in parse_blob(raw, placeholder):
        if record.serial in devices:
            # Duplicate record for the same unit in one blob: first one wins.
            logger.debug("Ignoring duplicate record for %s", record.serial)
            continue

        existing = prior.get(record.serial)
        if existing is None:
            device = DeviceState(
                serial=record.serial,
                full_id=record.full_id,
                device_name=placeholder,
            )
            result.created.append(record.serial)
            logger.info("New device detected: %s", record.serial)
        else:
            device = existing.model_copy(deep=True)

        # Log evidence is re-applied after every pass, so a placeholder here
        # does not lose a name recovered from the logs.
        if device.device_name != record.device_name:
            logger.debug(
                "Updated device name for %s: %s", record.serial, record.device_name
            )
            device.device_name = record.device_name

        if device.profile_uuid != record.profile_uuid:
            logger.info(
                "Profile changed for %s: %s -> %s",
                record.serial,
                device.profile_uuid or "<none>",
                record.profile_uuid,
            )
            device.profile_uuid = record.profile_uuid
            result.changed.append(record.serial)

        devices[record.serial] = device

    for serial in prior:
        if serial not in devices:
            result.removed.append(serial)
            logger.info("Removed stale device: %s", serial)

    return result
