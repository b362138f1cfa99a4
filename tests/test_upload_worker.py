from __future__ import annotations

import pytest
from PySide6.QtCore import QCoreApplication, QEventLoop, QTimer

from datalogger.config.app_config import AppConfig
from datalogger.config.sweep import SweepConfig
from datalogger.core.payload import DeviceInfo, UploadPayload
from datalogger.core.session import MSG_SENDING, MSG_UPLOAD_FAILED, MSG_UPLOAD_OK
from datalogger.gui.sweep_controller import SweepController
from datalogger.remote.upload_client import UploadResult
from datalogger.remote.upload_worker import UploadWorker

from conftest import FakeSensorManager


@pytest.fixture(scope="module")
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


class _StubClient:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.sent = []
        self.closed = False

    def send(self, payload):
        self.sent.append(payload)
        if self.error is not None:
            raise self.error
        return self.result

    def close(self):
        self.closed = True


def _payload() -> UploadPayload:
    return UploadPayload(
        accelerometer={"200-On": ["ACC,2024-01-01,00:00:00,1,0.0,0.0,9.8"]},
        gyroscope={},
        device=DeviceInfo(device_name="bench", manufacturer="acme", model="m1"),
    )


def _wait_for(signal, timeout_ms: int = 5000) -> list:
    received = []
    loop = QEventLoop()

    def _done(*args):
        received.append(args)
        loop.quit()

    signal.connect(_done)
    QTimer.singleShot(timeout_ms, loop.quit)
    loop.exec()
    return received


def test_worker_turns_client_exception_into_failed_result(qapp) -> None:
    client = _StubClient(error=RuntimeError("socket exploded"))
    worker = UploadWorker(client, _payload())
    results = []
    worker.finished.connect(results.append)

    worker.run()

    assert len(results) == 1
    assert isinstance(results[0], UploadResult)
    assert results[0].ok is False
    assert "socket exploded" in results[0].error
    assert len(client.sent) == 1


def test_worker_forwards_client_result(qapp) -> None:
    client = _StubClient(result=UploadResult(ok=True, status_code=200))
    worker = UploadWorker(client, _payload())
    results = []
    worker.finished.connect(results.append)

    worker.run()

    assert [r.status_code for r in results] == [200]


def _controller(client) -> tuple[SweepController, list, list]:
    # Cells shorter than one tick make the whole sweep finish inside start_sweep().
    config = AppConfig(
        sweep=SweepConfig(
            frequencies_hz=[200],
            magnetometer_states=[True, False],
            cell_duration_ms=10,
            update_interval_ms=50,
        )
    )
    controller = SweepController(
        config, FakeSensorManager(), client=client, network_check=lambda: True
    )
    notices = []
    completions = []
    controller.notice.connect(notices.append)
    controller.completion_requested.connect(lambda: completions.append(True))
    controller.check_sensors()
    return controller, notices, completions


def test_success_is_reported_on_the_ui_thread(qapp) -> None:
    client = _StubClient(result=UploadResult(ok=True, status_code=200))
    controller, notices, completions = _controller(client)
    started = []
    controller.sweep_started.connect(started.append)

    assert controller.start_sweep() is True
    outcome = _wait_for(controller.upload_finished)
    controller.shutdown()

    assert outcome == [(True,)]
    assert len(client.sent) == 1
    assert notices == [MSG_SENDING, MSG_UPLOAD_OK]
    assert completions == [True]
    # The sweep ended before start_sweep returned, so no progress bar is shown.
    assert started == []
    assert client.closed


def test_failure_is_reported_once_without_completion(qapp) -> None:
    client = _StubClient(error=ConnectionError("unreachable"))
    controller, notices, completions = _controller(client)

    controller.start_sweep()
    outcome = _wait_for(controller.upload_finished)
    controller.shutdown()

    assert outcome == [(False,)]
    assert notices == [MSG_SENDING, MSG_UPLOAD_FAILED]
    assert completions == []
