"""Sensor registration windows for one sweep cell at a time."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Dict, Optional

from ..config.sweep import SweepConfig
from ..sensors.listeners import (
    AccelerometerListener,
    GyroscopeListener,
    MagnetometerListener,
)
from ..sensors.manager import SensorManager
from ..sensors.models import Sensor, SensorKind
from .accumulator import SampleAccumulator
from .experiment import ExperimentKey

logger = logging.getLogger(__name__)

#: ``post_delayed(delay_ms, callback)`` runs *callback* later on the caller's thread.
PostDelayed = Callable[[int, Callable[[], None]], None]


class SensorHub:
    """
    Owns the three listeners and registers them for the active cell.

    The accelerometer (and magnetometer, when the cell asks for it) start
    immediately; the gyroscope follows after ``gyro_stagger_ms``. Windows in the
    accumulator are opened before a listener is registered and closed before it
    is unregistered, so nothing outside a cell is stored.
    """

    def __init__(
        self,
        manager: SensorManager,
        accumulator: SampleAccumulator,
        config: SweepConfig,
        *,
        post_delayed: PostDelayed,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._manager = manager
        self._accumulator = accumulator
        self._config = config
        self._post_delayed = post_delayed

        self.accelerometer_listener = AccelerometerListener(accumulator, clock=clock)
        self.gyroscope_listener = GyroscopeListener(accumulator, clock=clock)
        self.magnetometer_listener = MagnetometerListener()

        self._sensors: Dict[SensorKind, Sensor] = {}
        self._active: Optional[ExperimentKey] = None
        self._generation = 0

    @property
    def active_key(self) -> Optional[ExperimentKey]:
        return self._active

    @property
    def magnetometer(self) -> Optional[Sensor]:
        return self._sensors.get(SensorKind.MAGNETOMETER)

    def acquire_sensors(self) -> None:
        """Look up all three sensors; raises :class:`SensorUnavailableError`."""
        sensors = {kind: self._manager.require_sensor(kind) for kind in SensorKind}
        self._sensors = sensors
        logger.info(
            "Sensors ready: %s",
            ", ".join(f"{s.kind.value}={s.name}" for s in sensors.values()),
        )

    def activate(self, key: ExperimentKey) -> None:
        if not self._sensors:
            self.acquire_sensors()
        if self._active is not None:
            raise RuntimeError(f"cell {self._active} is still active")

        self._generation += 1
        generation = self._generation
        self._active = key
        delay_us = key.delay_us

        self._accumulator.open_window(SensorKind.ACCELEROMETER, key)
        self._manager.register_listener(
            self.accelerometer_listener,
            self._sensors[SensorKind.ACCELEROMETER],
            delay_us,
        )
        if key.magnetometer_on:
            self._manager.register_listener(
                self.magnetometer_listener,
                self._sensors[SensorKind.MAGNETOMETER],
                self._config.magnetometer_delay_us,
            )
        self._post_delayed(
            self._config.gyro_stagger_ms,
            lambda: self._register_gyroscope(generation, key),
        )

    def _register_gyroscope(self, generation: int, key: ExperimentKey) -> None:
        if generation != self._generation or self._active != key:
            logger.debug("Skipping gyroscope registration for finished cell %s", key)
            return
        self._accumulator.open_window(SensorKind.GYROSCOPE, key)
        self._manager.register_listener(
            self.gyroscope_listener,
            self._sensors[SensorKind.GYROSCOPE],
            key.delay_us,
        )

    def deactivate(self) -> None:
        key = self._active
        if key is None:
            return
        self._accumulator.close_window()
        self._manager.unregister_listener(self.accelerometer_listener)
        self._manager.unregister_listener(self.gyroscope_listener)
        if key.magnetometer_on:
            self._manager.unregister_listener(self.magnetometer_listener)
        self._active = None
        self._generation += 1
