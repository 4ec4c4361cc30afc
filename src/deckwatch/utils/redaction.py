from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Redactor:
    enabled: bool = True
    _id_map: dict[str, int] = field(default_factory=dict)
    _id_counter: int = 0

    def redact_serial(self, serial: str) -> str:
        if not self.enabled or len(serial) <= 4:
            return serial
        return "x" * (len(serial) - 4) + serial[-4:]

    def redact_uuid(self, uuid: str) -> str:
        if not self.enabled:
            return uuid
        parts = uuid.split("-")
        if len(parts) != 5:
            return uuid
        return "-".join([parts[0], *("x" * len(part) for part in parts[1:])])

    def redact_device_id(self, device_id: str) -> str:
        if not self.enabled:
            return device_id
        counter = self._id_map.get(device_id)
        if counter is None:
            self._id_counter += 1
            counter = self._id_counter
            self._id_map[device_id] = counter
        return f"device-{counter:02d}"
