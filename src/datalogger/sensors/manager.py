"""Sensor subscription abstraction."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from .listeners import SensorListener
from .models import Sensor, SensorKind


class SensorUnavailableError(RuntimeError):
    """Raised when the device does not provide a sensor the sweep needs."""

    def __init__(self, kind: SensorKind) -> None:
        super().__init__(f"No {kind.value} sensor available on this device")
        self.kind = kind


class SensorManager(ABC):
    """
    Event source for sensor readings.

    Listeners are called from whatever thread the backend delivers events on;
    :meth:`unregister_listener` must not return while a callback for that
    listener can still start.
    """

    @abstractmethod
    def default_sensor(self, kind: SensorKind) -> Optional[Sensor]:
        """Return the default sensor of *kind*, or ``None`` if missing."""

    @abstractmethod
    def register_listener(
        self, listener: SensorListener, sensor: Sensor, delay_us: int
    ) -> bool:
        """Start delivering events of *sensor* to *listener* every ``delay_us``."""

    @abstractmethod
    def unregister_listener(self, listener: SensorListener) -> None:
        """Stop every subscription of *listener*; a no-op if none exists."""

    def require_sensor(self, kind: SensorKind) -> Sensor:
        sensor = self.default_sensor(kind)
        if sensor is None:
            raise SensorUnavailableError(kind)
        return sensor

    def close(self) -> None:
        pass
