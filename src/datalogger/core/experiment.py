"""Experiment labels shared by the scheduler, hub and accumulator."""

from __future__ import annotations

from dataclasses import dataclass


def frequency_to_delay_us(frequency_hz: int | float) -> int:
    """Sampling period in microseconds requested for *frequency_hz* (truncated)."""
    if frequency_hz <= 0:
        raise ValueError("frequency must be positive")
    return int(1.0 / frequency_hz * 1_000_000)


@dataclass(frozen=True)
class ExperimentKey:
    """One sweep cell: a sampling frequency with the magnetometer on or off."""

    frequency_hz: int
    magnetometer_on: bool

    @property
    def label(self) -> str:
        return f"{self.frequency_hz}-{'On' if self.magnetometer_on else 'Off'}"

    @property
    def delay_us(self) -> int:
        return frequency_to_delay_us(self.frequency_hz)

    def __str__(self) -> str:
        return self.label
