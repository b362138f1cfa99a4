"""Coordinator for one logger session: sensors, sweep, payload hand-off."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Callable, Optional, Protocol

from ..config.app_config import AppConfig
from ..sensors.manager import SensorManager
from ..sensors.models import SensorKind
from ..tools.debug import time_block
from .accumulator import SampleAccumulator
from .payload import UploadPayload, collect_device_info
from .scheduler import SweepScheduler
from .sensor_hub import PostDelayed, SensorHub

if TYPE_CHECKING:
    from ..remote.upload_client import UploadResult

logger = logging.getLogger(__name__)

MSG_NETWORK_UNAVAILABLE = "Network is unavailable"
MSG_ALREADY_RUNNING = "Data collection is already running"
MSG_SENDING = "Sending Data"
MSG_UPLOAD_OK = "Successful"
MSG_UPLOAD_FAILED = "Failed to send the data, Try again later."


class Notifier(Protocol):
    """User-facing notices; the GUI shows them as status messages / dialogs."""

    def notify(self, message: str) -> None: ...

    def show_completion(self) -> None: ...


def report_upload_result(result: "UploadResult", notifier: Notifier) -> None:
    """Surface the outcome of the single upload attempt."""
    if result.ok:
        logger.info("Upload succeeded (%s)", result.describe())
        notifier.notify(MSG_UPLOAD_OK)
        notifier.show_completion()
    else:
        logger.error("Upload failed (%s); collected data is discarded", result.describe())
        notifier.notify(MSG_UPLOAD_FAILED)


class SweepSession:
    """
    Ties the sensor hub, accumulator and scheduler to one notifier.

    The owner drives :meth:`tick` from its event loop and receives the finished
    :class:`UploadPayload` through ``on_payload_ready``.
    """

    def __init__(
        self,
        config: AppConfig,
        manager: SensorManager,
        notifier: Notifier,
        *,
        post_delayed: PostDelayed,
        network_check: Callable[[], bool],
        on_payload_ready: Callable[[UploadPayload], None],
        on_progress: Optional[Callable[[int, int], None]] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.config = config
        self._manager = manager
        self._notifier = notifier
        self._network_check = network_check
        self._on_payload_ready = on_payload_ready

        self.accumulator = SampleAccumulator()
        self.hub = SensorHub(
            manager,
            self.accumulator,
            config.sweep,
            post_delayed=post_delayed,
            clock=clock,
        )
        self.scheduler = SweepScheduler(
            config.sweep,
            self.hub,
            on_progress=on_progress,
            on_finished=self._on_sweep_finished,
        )

    @property
    def running(self) -> bool:
        return self.scheduler.running

    def check_sensors(self) -> None:
        """Fail fast if a sensor is missing; raises :class:`SensorUnavailableError`."""
        self.hub.acquire_sensors()

    def request_start(self) -> bool:
        """Start a fresh sweep; returns False (after a notice) when it cannot."""
        if self.running:
            self._notifier.notify(MSG_ALREADY_RUNNING)
            return False
        if not self._network_check():
            logger.warning("Sweep not started: no network")
            self._notifier.notify(MSG_NETWORK_UNAVAILABLE)
            return False

        self.accumulator.clear()
        logger.info("Starting data collection process")
        self.scheduler.start()
        return True

    def tick(self) -> None:
        self.scheduler.tick()

    def build_payload(self) -> UploadPayload:
        with time_block("build upload payload", emitter=logger.debug):
            device = collect_device_info(
                self.hub.magnetometer, self.config.device_overrides
            )
            return UploadPayload.build(self.accumulator, device)

    def shutdown(self) -> None:
        self.hub.deactivate()
        self._manager.close()

    def _on_sweep_finished(self) -> None:
        logger.info(
            "Collected %d accelerometer and %d gyroscope readings",
            self.accumulator.count(SensorKind.ACCELEROMETER),
            self.accumulator.count(SensorKind.GYROSCOPE),
        )
        payload = self.build_payload()
        self._notifier.notify(MSG_SENDING)
        self._on_payload_ready(payload)
