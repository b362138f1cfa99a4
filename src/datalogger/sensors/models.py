"""Shared dataclasses for sensors, raw events and formatted readings."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

WALL_CLOCK_FORMAT = "%Y-%m-%d,%H:%M:%S"


class SensorKind(enum.Enum):
    ACCELEROMETER = "accelerometer"
    GYROSCOPE = "gyroscope"
    MAGNETOMETER = "magnetometer"

    @property
    def tag(self) -> Optional[str]:
        """Record prefix for recorded kinds (``None`` for the magnetometer)."""
        return _TAGS.get(self)

    @classmethod
    def recorded(cls) -> tuple["SensorKind", ...]:
        return (cls.ACCELEROMETER, cls.GYROSCOPE)


_TAGS = {
    SensorKind.ACCELEROMETER: "ACC",
    SensorKind.GYROSCOPE: "GYRO",
}


@dataclass(frozen=True)
class Sensor:
    """Descriptor for one hardware (or simulated) sensor."""

    kind: SensorKind
    name: str
    vendor: str = ""
    # Smallest sampling period the sensor supports, 0 when unknown.
    min_delay_us: int = 0

    @property
    def max_frequency_hz(self) -> float:
        if self.min_delay_us <= 0:
            return 0.0
        return 1e6 / self.min_delay_us


@dataclass(frozen=True)
class SensorEvent:
    sensor: Sensor
    timestamp_ns: int
    values: tuple[float, ...]
    accuracy: int = 3


@dataclass(frozen=True)
class Reading:
    """One timestamped 3-axis sample of a recorded sensor kind."""

    kind: SensorKind
    wall_clock: datetime
    timestamp_ns: int
    x: float
    y: float
    z: float

    @classmethod
    def from_event(
        cls,
        kind: SensorKind,
        event: SensorEvent,
        wall_clock: datetime | None = None,
    ) -> "Reading":
        if len(event.values) < 3:
            raise ValueError(
                f"Expected 3 axis values from {event.sensor.name}, got {len(event.values)}"
            )
        x, y, z = event.values[:3]
        return cls(
            kind=kind,
            wall_clock=wall_clock or datetime.now(),
            timestamp_ns=int(event.timestamp_ns),
            x=float(x),
            y=float(y),
            z=float(z),
        )

    def to_record(self) -> str:
        """Return the comma-joined record, e.g. ``ACC,2024-05-01,12:00:00,123,0.1,0.2,9.8``."""
        tag = self.kind.tag
        if tag is None:
            raise ValueError(f"{self.kind.value} readings are not recorded")
        stamp = self.wall_clock.strftime(WALL_CLOCK_FORMAT)
        return f"{tag},{stamp},{self.timestamp_ns},{self.x},{self.y},{self.z}"
