"""Main window for the data logger GUI."""

from __future__ import annotations

import logging

from PySide6.QtCore import Qt, Slot
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QApplication,
    QLabel,
    QMainWindow,
    QMessageBox,
    QProgressBar,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ..config.app_config import AppConfig
from ..sensors.manager import SensorManager, SensorUnavailableError
from .sweep_controller import SweepController

NOTICE_TIMEOUT_MS = 3000

SENSOR_UNAVAILABLE_TITLE = "Sensor Unavailable"
SENSOR_UNAVAILABLE_TEXT = (
    "Unfortunately, one of the sensors is not available, so we can't proceed "
    "with the experiment. Feel free to uninstall the app."
)
COMPLETION_TITLE = "Data Collection Complete"
COMPLETION_TEXT = "The app can be closed, and uninstalled now."


class MainWindow(QMainWindow):
    """Single-screen window: a Start button, a progress bar and notices."""

    def __init__(
        self,
        sensor_manager: SensorManager,
        app_config: AppConfig | None = None,
        controller: SweepController | None = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle("Data Logger")

        self._app_config = app_config or AppConfig()
        self._logger = logging.getLogger(__name__)
        self.controller = controller or SweepController(
            self._app_config, sensor_manager, parent=self
        )

        self._build_ui()

        self.controller.progress_changed.connect(self._on_progress_changed)
        self.controller.sweep_started.connect(self._on_sweep_started)
        self.controller.sweep_finished.connect(self._on_sweep_finished)
        self.controller.upload_finished.connect(self._on_upload_finished)
        self.controller.notice.connect(self.show_notice)
        self.controller.completion_requested.connect(self._show_completion_alert)

    def _build_ui(self) -> None:
        sweep = self._app_config.sweep
        container = QWidget()
        layout = QVBoxLayout(container)

        intro = QLabel(
            self.tr(
                "Records accelerometer and gyroscope data at {freqs} Hz, with the "
                "magnetometer on and off, then uploads it. Takes about {secs:.0f} s."
            ).format(
                freqs=", ".join(str(f) for f in sweep.frequencies_hz),
                secs=sweep.total_duration_ms / 1000.0,
            ),
            container,
        )
        intro.setWordWrap(True)
        layout.addWidget(intro)

        self.start_button = QPushButton(self.tr("Start"), container)
        self.start_button.clicked.connect(self._on_start_clicked)
        layout.addWidget(self.start_button)

        self.progress_bar = QProgressBar(container)
        self.progress_bar.setRange(0, max(1, sweep.total_ticks))
        self.progress_bar.setValue(0)
        self.progress_bar.setVisible(False)
        layout.addWidget(self.progress_bar)

        layout.addStretch(1)
        self.setCentralWidget(container)

    # ------------------------------------------------------------- lifecycle
    def check_sensors(self) -> bool:
        """Look up all sensors once; on failure show a blocking alert and quit."""
        try:
            self.controller.check_sensors()
        except SensorUnavailableError as exc:
            self._logger.error("Sensor check failed: %s", exc)
            self._show_sensor_unavailable_alert()
            return False
        return True

    def closeEvent(self, event: QCloseEvent) -> None:
        try:
            self.controller.shutdown(wait=True)
        except Exception:  # pragma: no cover - best-effort shutdown
            self._logger.exception("Failed to shut down sweep controller")
        super().closeEvent(event)

    # ----------------------------------------------------------------- slots
    @Slot()
    def _on_start_clicked(self) -> None:
        self.controller.start_sweep()

    @Slot(int)
    def _on_sweep_started(self, total_ticks: int) -> None:
        self.progress_bar.setRange(0, max(1, total_ticks))
        self.progress_bar.setValue(0)
        self.progress_bar.setVisible(True)
        self.start_button.setEnabled(False)

    @Slot(int, int)
    def _on_progress_changed(self, value: int, maximum: int) -> None:
        self.progress_bar.setValue(min(value, maximum))

    @Slot()
    def _on_sweep_finished(self) -> None:
        self.progress_bar.setVisible(False)

    @Slot(bool)
    def _on_upload_finished(self, ok: bool) -> None:
        self.start_button.setEnabled(True)

    @Slot(str)
    def show_notice(self, message: str) -> None:
        self.statusBar().showMessage(message, NOTICE_TIMEOUT_MS)

    # --------------------------------------------------------------- dialogs
    def _show_sensor_unavailable_alert(self) -> None:
        box = QMessageBox(self)
        box.setIcon(QMessageBox.Critical)
        box.setWindowTitle(SENSOR_UNAVAILABLE_TITLE)
        box.setText(SENSOR_UNAVAILABLE_TEXT)
        box.setStandardButtons(QMessageBox.Ok)
        box.setWindowModality(Qt.ApplicationModal)
        box.exec()
        self.close()
        QApplication.quit()

    @Slot()
    def _show_completion_alert(self) -> None:
        self._logger.debug("Creating completion alert")
        box = QMessageBox(self)
        box.setIcon(QMessageBox.Information)
        box.setWindowTitle(COMPLETION_TITLE)
        box.setText(COMPLETION_TEXT)
        box.setStandardButtons(QMessageBox.Ok)
        box.setWindowModality(Qt.ApplicationModal)
        box.open()
