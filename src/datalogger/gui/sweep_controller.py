"""Non-visual controller that runs a sweep on the Qt event loop."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from PySide6.QtCore import QObject, QThread, QTimer, Qt, Signal, Slot

from ..config.app_config import AppConfig
from ..core.payload import UploadPayload
from ..core.session import SweepSession, report_upload_result
from ..remote.connectivity import is_network_available
from ..remote.upload_client import UploadClient, UploadResult
from ..remote.upload_worker import UploadWorker
from ..sensors.manager import SensorManager

logger = logging.getLogger(__name__)


class SweepController(QObject):
    """
    Bridge between :class:`SweepSession` and the widgets.

    A precise ``QTimer`` ticks the scheduler every ``update_interval_ms`` on
    the main thread; the upload runs in a ``QThread`` and its result is queued
    back here before any notice is shown.
    """

    progress_changed = Signal(int, int)
    sweep_started = Signal(int)  # total ticks
    sweep_finished = Signal()
    upload_finished = Signal(bool)
    notice = Signal(str)
    completion_requested = Signal()

    def __init__(
        self,
        app_config: AppConfig,
        sensor_manager: SensorManager,
        *,
        client: UploadClient | None = None,
        network_check: Callable[[], bool] | None = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._config = app_config
        self._client = client or UploadClient(app_config.upload)

        self._timer = QTimer(self)
        self._timer.setTimerType(Qt.PreciseTimer)
        self._timer.setInterval(max(1, int(app_config.sweep.update_interval_ms)))
        self._timer.timeout.connect(self._on_tick)

        self._upload_thread: Optional[QThread] = None
        self._upload_worker: Optional[UploadWorker] = None

        self._session = SweepSession(
            app_config,
            sensor_manager,
            self,
            post_delayed=self._post_delayed,
            network_check=network_check or is_network_available,
            on_payload_ready=self._start_upload,
            on_progress=self.progress_changed.emit,
        )

    # --------------------------------------------------------------- Notifier
    def notify(self, message: str) -> None:
        self.notice.emit(message)

    def show_completion(self) -> None:
        self.completion_requested.emit()

    # ---------------------------------------------------------------- control
    @property
    def session(self) -> SweepSession:
        return self._session

    def total_ticks(self) -> int:
        return self._config.sweep.total_ticks

    def check_sensors(self) -> None:
        self._session.check_sensors()

    @Slot()
    def start_sweep(self) -> bool:
        if not self._session.request_start():
            return False
        # Cells shorter than one tick finish inside request_start().
        if self._session.running:
            self.sweep_started.emit(self.total_ticks())
            self._timer.start()
        return True

    def shutdown(self, *, wait: bool = True) -> None:
        self._timer.stop()
        self._session.shutdown()
        thread = self._upload_thread
        if thread is not None:
            thread.quit()
            if wait:
                thread.wait()
        self._client.close()

    # -------------------------------------------------------------- internals
    def _post_delayed(self, delay_ms: int, callback: Callable[[], None]) -> None:
        QTimer.singleShot(max(0, int(delay_ms)), self, callback)

    @Slot()
    def _on_tick(self) -> None:
        self._session.tick()
        if not self._session.running:
            self._timer.stop()

    def _start_upload(self, payload: UploadPayload) -> None:
        self.sweep_finished.emit()

        worker = UploadWorker(self._client, payload)
        thread = QThread(self)
        worker.moveToThread(thread)

        thread.started.connect(worker.run)
        worker.finished.connect(self._on_upload_finished)
        worker.finished.connect(thread.quit)
        worker.finished.connect(worker.deleteLater)
        thread.finished.connect(thread.deleteLater)
        thread.finished.connect(self._on_upload_thread_finished)

        self._upload_worker = worker
        self._upload_thread = thread
        thread.start()

    @Slot(object)
    def _on_upload_finished(self, result: UploadResult) -> None:
        report_upload_result(result, self)
        self.upload_finished.emit(bool(result.ok))

    @Slot()
    def _on_upload_thread_finished(self) -> None:
        self._upload_thread = None
        self._upload_worker = None
