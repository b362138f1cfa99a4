"""Synthetic sensor backend for desktops, demos and benchmarks."""

from __future__ import annotations

import threading
from typing import Dict, Iterable, Optional

import numpy as np

from .models import Sensor, SensorKind
from .polling import PollingSensorManager

STANDARD_GRAVITY = 9.80665

# Baseline signal per kind: m/s^2, rad/s, uT.
_BASELINES: Dict[SensorKind, np.ndarray] = {
    SensorKind.ACCELEROMETER: np.array([0.0, 0.0, STANDARD_GRAVITY]),
    SensorKind.GYROSCOPE: np.zeros(3),
    SensorKind.MAGNETOMETER: np.array([22.0, -4.5, -41.0]),
}
_NOISE_STD: Dict[SensorKind, float] = {
    SensorKind.ACCELEROMETER: 0.02,
    SensorKind.GYROSCOPE: 0.002,
    SensorKind.MAGNETOMETER: 0.3,
}
_MIN_DELAY_US: Dict[SensorKind, int] = {
    SensorKind.ACCELEROMETER: 2500,
    SensorKind.GYROSCOPE: 2500,
    SensorKind.MAGNETOMETER: 10000,
}


class SyntheticSensorManager(PollingSensorManager):
    """Generate baseline-plus-Gaussian-noise readings at the requested rate."""

    def __init__(
        self,
        kinds: Iterable[SensorKind] | None = None,
        *,
        seed: int | None = None,
    ) -> None:
        super().__init__()
        available = tuple(kinds) if kinds is not None else tuple(SensorKind)
        self._sensors: Dict[SensorKind, Sensor] = {
            kind: Sensor(
                kind=kind,
                name=f"Synthetic {kind.value}",
                vendor="datalogger",
                min_delay_us=_MIN_DELAY_US[kind],
            )
            for kind in available
        }
        self._rng = np.random.default_rng(seed)
        self._rng_lock = threading.Lock()

    def default_sensor(self, kind: SensorKind) -> Optional[Sensor]:
        return self._sensors.get(kind)

    def read_values(self, sensor: Sensor) -> Optional[tuple[float, ...]]:
        with self._rng_lock:
            noise = self._rng.normal(0.0, _NOISE_STD[sensor.kind], size=3)
        sample = _BASELINES[sensor.kind] + noise
        return tuple(float(v) for v in sample)
