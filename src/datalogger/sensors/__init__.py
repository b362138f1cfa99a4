"""Sensor-side data models, listeners and subscription backends.

The OS sensor subsystem is modelled as an event source: a
:class:`~datalogger.sensors.manager.SensorManager` hands out sensor
descriptors and calls registered listeners from its own threads. Readings are
turned into :class:`~datalogger.sensors.models.Reading` records by the
listeners in :mod:`listeners`.
"""

from .listeners import (
    AccelerometerListener,
    GyroscopeListener,
    MagnetometerListener,
    SensorListener,
)
from .manager import SensorManager, SensorUnavailableError
from .models import Reading, Sensor, SensorEvent, SensorKind

__all__ = [
    "AccelerometerListener",
    "GyroscopeListener",
    "MagnetometerListener",
    "Reading",
    "Sensor",
    "SensorEvent",
    "SensorKind",
    "SensorListener",
    "SensorManager",
    "SensorUnavailableError",
    "create_sensor_manager",
]


def create_sensor_manager(backend: str) -> SensorManager:
    """Instantiate the sensor manager for *backend* (``synthetic`` or ``plyer``)."""
    if backend == "plyer":
        from .plyer_manager import PlyerSensorManager

        return PlyerSensorManager()
    from .synthetic import SyntheticSensorManager

    return SyntheticSensorManager()
