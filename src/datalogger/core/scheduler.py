"""Tick-driven experiment scheduler.

The sweep is a nested loop (outer: magnetometer states, inner: frequencies)
expressed as a small state machine. Whoever owns the event loop calls
:meth:`SweepScheduler.tick` every ``update_interval_ms``; the scheduler never
sleeps, so the host UI stays responsive.
"""

from __future__ import annotations

import enum
import logging
from typing import Callable, List, Optional

from ..config.sweep import SweepConfig
from .experiment import ExperimentKey
from .sensor_hub import SensorHub

logger = logging.getLogger(__name__)


class SweepState(enum.Enum):
    IDLE = "idle"
    CELL_ACTIVE = "cell_active"
    SWEEP_DONE = "sweep_done"


class SweepScheduler:
    def __init__(
        self,
        config: SweepConfig,
        hub: SensorHub,
        *,
        on_progress: Optional[Callable[[int, int], None]] = None,
        on_finished: Optional[Callable[[], None]] = None,
    ) -> None:
        self._config = config
        self._hub = hub
        self._on_progress = on_progress
        self._on_finished = on_finished

        self.state = SweepState.IDLE
        self.progress = 0
        self.remaining_ticks = 0
        self.completed: List[ExperimentKey] = []
        self._plan: List[ExperimentKey] = []
        self._index = -1

    @property
    def total_ticks(self) -> int:
        return self._config.total_ticks

    @property
    def current_key(self) -> Optional[ExperimentKey]:
        if self.state is not SweepState.CELL_ACTIVE:
            return None
        return self._plan[self._index]

    @property
    def running(self) -> bool:
        return self.state is SweepState.CELL_ACTIVE

    def plan(self) -> List[ExperimentKey]:
        return [
            ExperimentKey(frequency_hz=frequency, magnetometer_on=magneto)
            for magneto, frequency in self._config.combinations()
        ]

    def start(self) -> None:
        if self.running:
            raise RuntimeError("A sweep is already running")
        self._plan = self.plan()
        self._index = -1
        self.progress = 0
        self.completed = []
        logger.info(
            "Starting sweep: %d cells x %d ms (%d ticks)",
            len(self._plan),
            self._config.cell_duration_ms,
            self.total_ticks,
        )
        self._advance()

    def tick(self) -> None:
        if not self.running:
            return
        self.progress += 1
        self.remaining_ticks -= 1
        if self._on_progress is not None:
            self._on_progress(self.progress, self.total_ticks)
        if self.remaining_ticks <= 0:
            self._finish_cell()
            self._advance()

    def _advance(self) -> None:
        while True:
            self._index += 1
            if self._index >= len(self._plan):
                self.state = SweepState.SWEEP_DONE
                self.remaining_ticks = 0
                logger.info("Sweep finished after %d cells", len(self.completed))
                if self._on_finished is not None:
                    self._on_finished()
                return

            key = self._plan[self._index]
            self.state = SweepState.CELL_ACTIVE
            self.remaining_ticks = self._config.steps_per_cell
            logger.info("Starting with : %s (delay %d us)", key, key.delay_us)
            self._hub.activate(key)
            if self.remaining_ticks > 0:
                return
            # Shorter than one tick: the cell opens and closes at once.
            self._finish_cell()

    def _finish_cell(self) -> None:
        self._hub.deactivate()
        self.completed.append(self._plan[self._index])
