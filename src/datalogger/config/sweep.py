"""Sweep plan configuration and helpers."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, List, Mapping, Sequence, Tuple

DEFAULT_FREQUENCIES_HZ: Tuple[int, ...] = (200, 173, 139)
DEFAULT_MAGNETOMETER_STATES: Tuple[bool, ...] = (True, False)


def _coerce_int(value: Any, fallback: int, *, minimum: int = 0) -> int:
    try:
        result = int(value)
    except (TypeError, ValueError):
        return fallback
    return result if result >= minimum else fallback


def _coerce_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in {"1", "true", "on", "yes"}:
        return True
    if text in {"0", "false", "off", "no"}:
        return False
    return None


@dataclass
class SweepConfig:
    """
    Single source of truth for one sweep.

    frequencies_hz: inner loop, sampling frequencies requested from the sensors.
    magnetometer_states: outer loop, whether the magnetometer runs alongside.
    cell_duration_ms: how long each (state, frequency) combination stays active.
    update_interval_ms: tick period of the scheduler / progress bar.
    gyro_stagger_ms: delay between the accelerometer and gyroscope registration.
    magnetometer_delay_us: sampling period requested from the magnetometer.
    """

    frequencies_hz: List[int] = field(default_factory=lambda: list(DEFAULT_FREQUENCIES_HZ))
    magnetometer_states: List[bool] = field(
        default_factory=lambda: list(DEFAULT_MAGNETOMETER_STATES)
    )
    cell_duration_ms: int = 2500
    update_interval_ms: int = 50
    gyro_stagger_ms: int = 2
    magnetometer_delay_us: int = 5001

    @property
    def steps_per_cell(self) -> int:
        """Number of scheduler ticks a single cell stays active."""
        if self.update_interval_ms <= 0:
            return 0
        return self.cell_duration_ms // self.update_interval_ms

    @property
    def combination_count(self) -> int:
        return len(self.frequencies_hz) * len(self.magnetometer_states)

    @property
    def total_ticks(self) -> int:
        """Progress bar maximum for a full sweep."""
        return self.combination_count * self.steps_per_cell

    @property
    def total_duration_ms(self) -> int:
        return self.combination_count * self.cell_duration_ms

    def combinations(self) -> Iterator[Tuple[bool, int]]:
        """Yield ``(magnetometer_on, frequency_hz)`` in sweep order."""
        for magneto in self.magnetometer_states:
            for frequency in self.frequencies_hz:
                yield magneto, frequency

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any] | None) -> "SweepConfig":
        """
        Construct a SweepConfig from a mapping such as ``datalogger.yaml``.

        Supported shape::

            sweep:
              frequencies_hz: [200, 173, 139]
              magnetometer_states: [true, false]
              cell_duration_ms: 2500
              update_interval_ms: 50
              gyro_stagger_ms: 2
              magnetometer_delay_us: 5001
        """
        payload: Mapping[str, Any] = mapping or {}
        block = payload.get("sweep") if isinstance(payload, Mapping) else None
        if not isinstance(block, Mapping):
            return cls()

        defaults = cls()

        frequencies: List[int] = []
        raw_freqs = block.get("frequencies_hz")
        if isinstance(raw_freqs, Sequence) and not isinstance(raw_freqs, str):
            for item in raw_freqs:
                value = _coerce_int(item, 0)
                # A zero or negative rate has no sampling period
                if value > 0:
                    frequencies.append(value)
        if not frequencies:
            frequencies = list(defaults.frequencies_hz)

        states: List[bool] = []
        raw_states = block.get("magnetometer_states")
        if isinstance(raw_states, Sequence) and not isinstance(raw_states, str):
            for item in raw_states:
                state = _coerce_bool(item)
                if state is not None:
                    states.append(state)
        if not states:
            states = list(defaults.magnetometer_states)

        return cls(
            frequencies_hz=frequencies,
            magnetometer_states=states,
            cell_duration_ms=_coerce_int(
                block.get("cell_duration_ms"), defaults.cell_duration_ms
            ),
            update_interval_ms=_coerce_int(
                block.get("update_interval_ms"), defaults.update_interval_ms, minimum=1
            ),
            gyro_stagger_ms=_coerce_int(
                block.get("gyro_stagger_ms"), defaults.gyro_stagger_ms
            ),
            magnetometer_delay_us=_coerce_int(
                block.get("magnetometer_delay_us"),
                defaults.magnetometer_delay_us,
                minimum=1,
            ),
        )

    def to_mapping(self) -> dict:
        """Serialize the sweep config back into a mapping suitable for YAML."""
        return {
            "sweep": {
                "frequencies_hz": [int(f) for f in self.frequencies_hz],
                "magnetometer_states": [bool(s) for s in self.magnetometer_states],
                "cell_duration_ms": int(self.cell_duration_ms),
                "update_interval_ms": int(self.update_interval_ms),
                "gyro_stagger_ms": int(self.gyro_stagger_ms),
                "magnetometer_delay_us": int(self.magnetometer_delay_us),
            }
        }
