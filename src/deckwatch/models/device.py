"""Device state models."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from types import MappingProxyType

from pydantic import BaseModel, Field, field_validator


class ButtonInfo(BaseModel):
    """Resolved title and icon of one button."""

    model_config = {"frozen": True}

    title: str = ""
    icon_path: str = ""

    @property
    def has_content(self) -> bool:
        return bool(self.title) or bool(self.icon_path)


class DeviceState(BaseModel):
    """Live state of one physical device, keyed by serial.

    Owned and mutated by the monitor; consumers receive ``DeviceView`` copies.
    """

    serial: str
    full_id: str = ""
    device_name: str = ""
    profile_uuid: str = ""
    profile_name: str = ""
    buttons: dict[str, ButtonInfo] = Field(default_factory=dict)  # "column,row"
    last_update: datetime | None = None

    def view(self) -> DeviceView:
        return DeviceView(
            serial=self.serial,
            full_id=self.full_id,
            device_name=self.device_name,
            profile_uuid=self.profile_uuid,
            profile_name=self.profile_name,
            buttons=self.buttons,
            last_update=self.last_update,
        )


class DeviceView(BaseModel):
    """Read-only device as published in a ``Snapshot``."""

    model_config = {"frozen": True}

    serial: str
    full_id: str = ""
    device_name: str = ""
    profile_uuid: str = ""
    profile_name: str = ""
    buttons: Mapping[str, ButtonInfo] = Field(default_factory=dict)
    last_update: datetime | None = None

    @field_validator("buttons", mode="after")
    @classmethod
    def _read_only_buttons(
        cls, value: Mapping[str, ButtonInfo]
    ) -> Mapping[str, ButtonInfo]:
        # ButtonInfo is frozen, so the entries can be shared with the live map
        return MappingProxyType(dict(value))


class DeviceRecord(BaseModel):
    """One device record decoded from the registry blob."""

    model_config = {"frozen": True}

    serial: str
    full_id: str
    profile_uuid: str
    device_name: str
    start: int
    end: int


class Snapshot(BaseModel):
    """Published unit: ordered read-only devices plus error signalling."""

    model_config = {"frozen": True}

    devices: tuple[DeviceView, ...] = ()
    timestamp: datetime
    has_error: bool = False
    error_message: str | None = None

    def device(self, serial: str) -> DeviceView | None:
        for device in self.devices:
            if device.serial == serial:
                return device
        return None


class LogEvidence(BaseModel):
    """Identity maps recovered from vendor plugin logs."""

    custom_names: dict[str, str] = Field(default_factory=dict)
    profile_names: dict[str, set[str]] = Field(default_factory=dict)
