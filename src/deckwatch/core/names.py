from __future__ import annotations

import logging
from collections.abc import Iterable

from deckwatch.models import DeviceState, LogEvidence

logger = logging.getLogger(__name__)


def resolve_device_names(
    devices: Iterable[DeviceState], evidence: LogEvidence, placeholder: str
) -> list[str]:
    """Upgrade placeholder device names from log evidence.

    A device is matched to a log device id when that id was seen with the
    device's current profile name. Only placeholder (or empty) names are
    replaced; any other name is kept. Returns the serials renamed.
    """
    renamed: list[str] = []

    for device in devices:
        if not device.profile_name:
            continue

        for device_id, profile_names in evidence.profile_names.items():
            if device.device_name and device.device_name != placeholder:
                break
            if device.profile_name not in profile_names:
                continue
            custom_name = evidence.custom_names.get(device_id)
            if not custom_name:
                continue

            logger.info(
                "Resolved name for %s via %s: %s", device.serial, device_id, custom_name
            )
            device.device_name = custom_name
            renamed.append(device.serial)

    return renamed
