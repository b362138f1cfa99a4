"""Device identity and the end-of-sweep upload payload."""

from __future__ import annotations

import platform
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from ..sensors.models import Sensor
from .accumulator import SampleAccumulator

METADATA_KEYS = (
    "SDK_INT",
    "RELEASE",
    "BOARD",
    "BRAND",
    "HARDWARE",
    "PRODUCT",
    "MAG_MAX_FREQ",
    "BOOTLOADER",
)


@dataclass(frozen=True)
class DeviceInfo:
    device_name: str
    manufacturer: str
    model: str
    metadata: Dict[str, str] = field(default_factory=dict)


def _or_unknown(value: str) -> str:
    return value or "unknown"


def collect_device_info(
    magnetometer: Optional[Sensor],
    overrides: Mapping[str, Any] | None = None,
) -> DeviceInfo:
    """
    Describe the host from :mod:`platform`; entries in *overrides* win.

    *overrides* may hold ``deviceName``, ``manufacturer``, ``model`` and a
    ``metadata`` mapping with any of :data:`METADATA_KEYS`.
    """
    uname = platform.uname()
    mag_max = magnetometer.max_frequency_hz if magnetometer is not None else 0.0
    metadata: Dict[str, str] = {
        "SDK_INT": _or_unknown(uname.version),
        "RELEASE": _or_unknown(uname.release),
        "BOARD": _or_unknown(uname.machine),
        "BRAND": _or_unknown(uname.system),
        "HARDWARE": _or_unknown(uname.processor or uname.machine),
        "PRODUCT": _or_unknown(platform.platform()),
        "MAG_MAX_FREQ": str(float(mag_max)),
        "BOOTLOADER": "unknown",
    }

    extra = dict(overrides or {})
    meta_overrides = extra.get("metadata")
    if isinstance(meta_overrides, Mapping):
        for key, value in meta_overrides.items():
            if key in METADATA_KEYS and value is not None:
                metadata[key] = str(value)

    return DeviceInfo(
        device_name=str(extra.get("deviceName") or _or_unknown(uname.node)),
        manufacturer=str(extra.get("manufacturer") or _or_unknown(uname.system)),
        model=str(extra.get("model") or _or_unknown(uname.machine)),
        metadata=metadata,
    )


@dataclass(frozen=True)
class UploadPayload:
    """Snapshot sent once at the end of a sweep, then discarded."""

    accelerometer: Dict[str, List[str]]
    gyroscope: Dict[str, List[str]]
    device: DeviceInfo

    @classmethod
    def build(cls, accumulator: SampleAccumulator, device: DeviceInfo) -> "UploadPayload":
        exported = accumulator.export()
        return cls(
            accelerometer=exported["accelerometer"],
            gyroscope=exported["gyroscope"],
            device=device,
        )

    def reading_count(self) -> int:
        return sum(len(v) for v in self.accelerometer.values()) + sum(
            len(v) for v in self.gyroscope.values()
        )

    def to_json_dict(self) -> Dict[str, Any]:
        return {
            "accelerometer": self.accelerometer,
            "gyroscope": self.gyroscope,
            "deviceName": self.device.device_name,
            "manufacturer": self.device.manufacturer,
            "model": self.device.model,
            "metadata": dict(self.device.metadata),
        }
