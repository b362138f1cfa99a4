"""In-memory store of labelled readings for the sweep in progress."""

from __future__ import annotations

import threading
from typing import Dict, List, Optional

from ..sensors.models import Reading, SensorKind
from .experiment import ExperimentKey


class AccumulatorBusyError(RuntimeError):
    """Raised when clearing or exporting while a registration window is open."""


class SampleAccumulator:
    """
    Append-only readings per sensor kind, grouped by :class:`ExperimentKey`.

    Sensor callbacks call :meth:`append` from backend threads while the
    scheduler opens and closes registration windows from the UI thread, so
    every access goes through one lock. A reading is stored only while a
    window is open for its kind and is labelled with that window's key.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._data: Dict[SensorKind, Dict[ExperimentKey, List[Reading]]] = {
            kind: {} for kind in SensorKind.recorded()
        }
        self._windows: Dict[SensorKind, ExperimentKey] = {}

    # ------------------------------------------------------------------ windows
    def open_window(self, kind: SensorKind, key: ExperimentKey) -> None:
        if kind not in self._data:
            raise ValueError(f"{kind.value} readings are not recorded")
        with self._lock:
            self._windows[kind] = key
            self._data[kind].setdefault(key, [])

    def close_window(self, kind: SensorKind | None = None) -> None:
        """Close the window for *kind*, or every window when *kind* is None."""
        with self._lock:
            if kind is None:
                self._windows.clear()
            else:
                self._windows.pop(kind, None)

    def active_key(self, kind: SensorKind) -> Optional[ExperimentKey]:
        with self._lock:
            return self._windows.get(kind)

    # ------------------------------------------------------------------- ingest
    def append(self, kind: SensorKind, reading: Reading) -> bool:
        """Store *reading* under the open window's key; False if none is open."""
        with self._lock:
            key = self._windows.get(kind)
            if key is None:
                return False
            self._data[kind][key].append(reading)
            return True

    # -------------------------------------------------------------------- query
    def keys(self, kind: SensorKind) -> List[ExperimentKey]:
        with self._lock:
            return [key for key, readings in self._data[kind].items() if readings]

    def readings(self, kind: SensorKind, key: ExperimentKey) -> List[Reading]:
        with self._lock:
            return list(self._data[kind].get(key, ()))

    def count(self, kind: SensorKind | None = None) -> int:
        with self._lock:
            kinds = [kind] if kind is not None else list(self._data)
            return sum(len(r) for k in kinds for r in self._data[k].values())

    def clear(self) -> None:
        with self._lock:
            if self._windows:
                raise AccumulatorBusyError("cannot clear while a window is open")
            for per_key in self._data.values():
                per_key.clear()

    def export(self) -> Dict[str, Dict[str, List[str]]]:
        """
        Return ``{"accelerometer": {"200-On": [record, ...]}, "gyroscope": {...}}``.

        Keys without readings are left out; key and record order follow
        insertion order.
        """
        with self._lock:
            if self._windows:
                raise AccumulatorBusyError("cannot export while a window is open")
            return {
                kind.value: {
                    key.label: [reading.to_record() for reading in readings]
                    for key, readings in per_key.items()
                    if readings
                }
                for kind, per_key in self._data.items()
            }
