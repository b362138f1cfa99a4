"""Sensor backend for Android/iOS built on the plyer facades."""

from __future__ import annotations

import logging
import threading
from collections import Counter
from typing import Any, Dict, Optional

from .models import Sensor, SensorKind
from .polling import PollingSensorManager

logger = logging.getLogger(__name__)


def _load_facades() -> Dict[SensorKind, Any]:
    from plyer import accelerometer, compass, gyroscope

    return {
        SensorKind.ACCELEROMETER: accelerometer,
        SensorKind.GYROSCOPE: gyroscope,
        SensorKind.MAGNETOMETER: compass,
    }


def _read_facade(kind: SensorKind, facade: Any) -> Any:
    if kind is SensorKind.ACCELEROMETER:
        return facade.acceleration
    if kind is SensorKind.GYROSCOPE:
        return facade.rotation
    return facade.field


class PlyerSensorManager(PollingSensorManager):
    """
    Poll plyer's accelerometer, gyroscope and compass facades.

    plyer exposes neither event timestamps nor the hardware minimum delay, so
    timestamps come from the poller and ``min_delay_us`` stays 0.
    """

    def __init__(self, facades: Dict[SensorKind, Any] | None = None) -> None:
        super().__init__()
        self._facades = facades if facades is not None else _load_facades()
        self._enabled: Counter[SensorKind] = Counter()
        self._enable_lock = threading.Lock()
        self._sensors: Dict[SensorKind, Optional[Sensor]] = {}

    def default_sensor(self, kind: SensorKind) -> Optional[Sensor]:
        if kind not in self._sensors:
            self._sensors[kind] = self._probe(kind)
        return self._sensors[kind]

    def _probe(self, kind: SensorKind) -> Optional[Sensor]:
        facade = self._facades.get(kind)
        if facade is None:
            return None
        try:
            facade.enable()
            facade.disable()
        except NotImplementedError:
            logger.info("plyer has no %s implementation on this platform", kind.value)
            return None
        return Sensor(kind=kind, name=f"plyer {kind.value}", vendor="plyer")

    def on_subscribed(self, sensor: Sensor) -> None:
        with self._enable_lock:
            if self._enabled[sensor.kind] == 0:
                self._facades[sensor.kind].enable()
            self._enabled[sensor.kind] += 1

    def on_unsubscribed(self, sensor: Sensor) -> None:
        with self._enable_lock:
            if self._enabled[sensor.kind] <= 0:
                return
            self._enabled[sensor.kind] -= 1
            if self._enabled[sensor.kind] == 0:
                self._facades[sensor.kind].disable()

    def read_values(self, sensor: Sensor) -> Optional[tuple[float, ...]]:
        raw = _read_facade(sensor.kind, self._facades[sensor.kind])
        if raw is None:
            return None
        values = tuple(raw)[:3]
        if len(values) != 3 or any(v is None for v in values):
            return None
        return tuple(float(v) for v in values)
