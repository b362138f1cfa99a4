"""Listener objects registered against a :class:`SensorManager`.

Accelerometer and gyroscope listeners turn events of their own kind into
:class:`Reading` records and hand them to a sink; events of any other kind are
ignored. The magnetometer listener only keeps the magnetometer powered while a
cell asks for it and records nothing.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Protocol

from ..tools.debug import debug_enabled
from .models import Reading, Sensor, SensorEvent, SensorKind

logger = logging.getLogger(__name__)


class ReadingSink(Protocol):
    def append(self, kind: SensorKind, reading: Reading) -> bool: ...


class SensorListener(ABC):
    """Capability interface for anything a sensor manager can call back."""

    @abstractmethod
    def on_sensor_changed(self, event: SensorEvent) -> None: ...

    def on_accuracy_changed(self, sensor: Sensor, accuracy: int) -> None:
        pass


class _RecordingListener(SensorListener):
    kind: SensorKind

    def __init__(
        self,
        sink: ReadingSink,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._sink = sink
        self._clock = clock
        self.dropped = 0

    def on_sensor_changed(self, event: SensorEvent) -> None:
        if event.sensor.kind is not self.kind:
            return
        reading = Reading.from_event(self.kind, event, self._clock())
        if not self._sink.append(self.kind, reading):
            self.dropped += 1
            if debug_enabled():
                logger.debug(
                    "Dropped %s event outside a registration window (ts=%d)",
                    self.kind.value,
                    event.timestamp_ns,
                )


class AccelerometerListener(_RecordingListener):
    kind = SensorKind.ACCELEROMETER


class GyroscopeListener(_RecordingListener):
    kind = SensorKind.GYROSCOPE


class MagnetometerListener(SensorListener):
    def on_sensor_changed(self, event: SensorEvent) -> None:
        pass
