from __future__ import annotations

import itertools
import pathlib
import sys
from datetime import datetime
from typing import Callable, List, Optional, Tuple

import pytest

# Ensure src/ is on path for direct test execution
ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from datalogger.sensors.listeners import SensorListener  # noqa: E402
from datalogger.sensors.manager import SensorManager  # noqa: E402
from datalogger.sensors.models import Sensor, SensorEvent, SensorKind  # noqa: E402


class FakeSensorManager(SensorManager):
    """In-process event source: tests push events with :meth:`emit`."""

    def __init__(self, kinds=tuple(SensorKind), min_delay_us: int = 10000) -> None:
        self.sensors = {
            kind: Sensor(kind=kind, name=f"fake {kind.value}", min_delay_us=min_delay_us)
            for kind in kinds
        }
        self.active: List[Tuple[SensorListener, Sensor, int]] = []
        self.log: List[Tuple[str, SensorKind, Optional[int]]] = []
        self._clock = itertools.count(1_000)
        self.closed = False

    def default_sensor(self, kind):
        return self.sensors.get(kind)

    def register_listener(self, listener, sensor, delay_us):
        self.active.append((listener, sensor, delay_us))
        self.log.append(("register", sensor.kind, delay_us))
        return True

    def unregister_listener(self, listener):
        keep = []
        for entry in self.active:
            if entry[0] is listener:
                self.log.append(("unregister", entry[1].kind, None))
            else:
                keep.append(entry)
        self.active = keep

    def registered_kinds(self):
        return sorted(sensor.kind.value for _, sensor, _ in self.active)

    def emit(self, kind: SensorKind, values=(0.1, 0.2, 9.8)) -> int:
        """Deliver one event to every listener registered for *kind*."""
        delivered = 0
        for listener, sensor, _ in list(self.active):
            if sensor.kind is kind:
                listener.on_sensor_changed(self.make_event(kind, values))
                delivered += 1
        return delivered

    def make_event(self, kind: SensorKind, values=(0.1, 0.2, 9.8)) -> SensorEvent:
        sensor = self.sensors.get(kind) or Sensor(kind=kind, name="stray")
        return SensorEvent(sensor=sensor, timestamp_ns=next(self._clock), values=tuple(values))

    def close(self):
        self.closed = True


class DelayedCalls:
    """Collects ``post_delayed`` callbacks so tests decide when they fire."""

    def __init__(self) -> None:
        self.pending: List[Tuple[int, Callable[[], None]]] = []

    def __call__(self, delay_ms: int, callback: Callable[[], None]) -> None:
        self.pending.append((delay_ms, callback))

    def run_all(self) -> None:
        pending, self.pending = self.pending, []
        for _, callback in pending:
            callback()


class RecordingNotifier:
    def __init__(self) -> None:
        self.messages: List[str] = []
        self.completions = 0

    def notify(self, message: str) -> None:
        self.messages.append(message)

    def show_completion(self) -> None:
        self.completions += 1


@pytest.fixture
def fake_manager() -> FakeSensorManager:
    return FakeSensorManager()


@pytest.fixture
def delayed() -> DelayedCalls:
    return DelayedCalls()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: datetime(2024, 5, 1, 12, 30, 5)
