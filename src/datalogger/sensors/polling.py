"""Thread-per-subscription base for backends that have to be polled."""

from __future__ import annotations

import logging
import threading
import time
from abc import abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional

from .listeners import SensorListener
from .manager import SensorManager
from .models import Sensor, SensorEvent

logger = logging.getLogger(__name__)

JOIN_TIMEOUT_S = 1.0


@dataclass
class PollerHandle:
    thread: threading.Thread
    stop_event: threading.Event
    sensor: Sensor
    delay_us: int

    def stop(self, *, join: bool = False, timeout: Optional[float] = None) -> None:
        self.stop_event.set()
        if join and self.thread is not threading.current_thread():
            self.thread.join(timeout)

    def is_alive(self) -> bool:
        return self.thread.is_alive()


class PollingSensorManager(SensorManager):
    """
    Run one daemon thread per registered (listener, sensor) pair.

    Each thread calls :meth:`read_values` once per sampling period and forwards
    the result to the listener as a :class:`SensorEvent`. Subclasses only
    provide sensor discovery and the raw read.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._handles: Dict[int, List[PollerHandle]] = {}

    @abstractmethod
    def read_values(self, sensor: Sensor) -> Optional[tuple[float, ...]]:
        """Return the latest 3-axis values of *sensor*, or ``None`` if not ready."""

    def on_subscribed(self, sensor: Sensor) -> None:
        pass

    def on_unsubscribed(self, sensor: Sensor) -> None:
        pass

    def register_listener(
        self, listener: SensorListener, sensor: Sensor, delay_us: int
    ) -> bool:
        delay_us = max(int(delay_us), int(sensor.min_delay_us), 1)
        stop_event = threading.Event()
        thread = threading.Thread(
            target=self._poll_loop,
            args=(listener, sensor, delay_us, stop_event),
            name=f"DataLoggerPoller({sensor.kind.value})",
            daemon=True,
        )
        handle = PollerHandle(
            thread=thread, stop_event=stop_event, sensor=sensor, delay_us=delay_us
        )
        self.on_subscribed(sensor)
        with self._lock:
            self._handles.setdefault(id(listener), []).append(handle)
        thread.start()
        logger.debug("Registered %s listener at %d us", sensor.kind.value, delay_us)
        return True

    def unregister_listener(self, listener: SensorListener) -> None:
        with self._lock:
            handles = self._handles.pop(id(listener), [])
        for handle in handles:
            handle.stop(join=True, timeout=JOIN_TIMEOUT_S)
            if handle.is_alive():
                logger.warning(
                    "Poller for %s did not stop within %.1f s",
                    handle.sensor.kind.value,
                    JOIN_TIMEOUT_S,
                )
            self.on_unsubscribed(handle.sensor)

    def active_subscriptions(self) -> int:
        with self._lock:
            return sum(len(handles) for handles in self._handles.values())

    def close(self) -> None:
        with self._lock:
            handles = [h for group in self._handles.values() for h in group]
            self._handles.clear()
        for handle in handles:
            handle.stop(join=True, timeout=JOIN_TIMEOUT_S)
            self.on_unsubscribed(handle.sensor)

    def _poll_loop(
        self,
        listener: SensorListener,
        sensor: Sensor,
        delay_us: int,
        stop_event: threading.Event,
    ) -> None:
        period_s = delay_us / 1e6
        next_deadline = time.monotonic()
        while not stop_event.is_set():
            try:
                values = self.read_values(sensor)
            except Exception:
                logger.exception("Reading %s failed", sensor.name)
                values = None
            if values is not None and not stop_event.is_set():
                event = SensorEvent(
                    sensor=sensor,
                    timestamp_ns=time.monotonic_ns(),
                    values=tuple(values),
                )
                listener.on_sensor_changed(event)

            next_deadline += period_s
            wait_s = next_deadline - time.monotonic()
            if wait_s < 0.0:
                # Fell behind; resync instead of bursting to catch up.
                next_deadline = time.monotonic()
                wait_s = 0.0
            stop_event.wait(wait_s)
