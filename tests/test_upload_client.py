import pathlib
import sys
import unittest
from unittest import mock

import requests

# Ensure src/ is on path for direct test execution
ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from datalogger.config.app_config import UploadConfig  # noqa: E402
from datalogger.core.payload import DeviceInfo, UploadPayload  # noqa: E402
from datalogger.core.session import (  # noqa: E402
    MSG_UPLOAD_FAILED,
    MSG_UPLOAD_OK,
    report_upload_result,
)
from datalogger.remote.upload_client import (  # noqa: E402
    API_KEY_HEADER,
    UploadClient,
    UploadResult,
)


class _Notifier:
    def __init__(self):
        self.messages = []
        self.completions = 0

    def notify(self, message):
        self.messages.append(message)

    def show_completion(self):
        self.completions += 1


def _payload():
    return UploadPayload(
        accelerometer={"200-On": ["ACC,2024-05-01,12:00:00,1,0.1,0.2,9.8"]},
        gyroscope={"200-On": ["GYRO,2024-05-01,12:00:00,2,0.0,0.0,0.0"]},
        device=DeviceInfo("dev", "maker", "model", {"SDK_INT": "30"}),
    )


class UploadClientTest(unittest.TestCase):
    def setUp(self):
        self.session = mock.create_autospec(requests.Session, instance=True)
        self.config = UploadConfig(base_url="http://collector.test/", path="/sensorData", api_key="k3y")
        self.client = UploadClient(self.config, session=self.session)
        self.notifier = _Notifier()

    def _respond(self, status):
        response = mock.Mock(spec=requests.Response)
        response.status_code = status
        self.session.post.return_value = response

    def test_posts_json_with_api_key_header(self):
        self._respond(200)
        result = self.client.send(_payload())

        self.assertTrue(result.ok)
        self.assertEqual(result.status_code, 200)
        self.session.post.assert_called_once_with(
            "http://collector.test/sensorData",
            json=_payload().to_json_dict(),
            headers={API_KEY_HEADER: "k3y"},
            timeout=None,
        )

    def test_success_notifies_once_and_shows_completion(self):
        self._respond(200)
        report_upload_result(self.client.send(_payload()), self.notifier)

        self.assertEqual(self.notifier.messages, [MSG_UPLOAD_OK])
        self.assertEqual(self.notifier.completions, 1)
        self.assertEqual(self.session.post.call_count, 1)

    def test_server_error_fails_without_retry(self):
        self._respond(500)
        result = self.client.send(_payload())
        report_upload_result(result, self.notifier)

        self.assertFalse(result.ok)
        self.assertEqual(result.status_code, 500)
        self.assertEqual(self.notifier.messages, [MSG_UPLOAD_FAILED])
        self.assertEqual(self.notifier.completions, 0)
        self.assertEqual(self.session.post.call_count, 1)

    def test_redirect_status_is_not_success(self):
        self._respond(302)
        self.assertFalse(self.client.send(_payload()).ok)

    def test_transport_error_is_reported_as_failure(self):
        self.session.post.side_effect = requests.ConnectionError("connection refused")
        with self.assertLogs("datalogger.remote.upload_client", level="ERROR"):
            result = self.client.send(_payload())
        report_upload_result(result, self.notifier)

        self.assertFalse(result.ok)
        self.assertIsNone(result.status_code)
        self.assertIn("connection refused", result.error)
        self.assertEqual(self.notifier.messages, [MSG_UPLOAD_FAILED])
        self.assertEqual(self.session.post.call_count, 1)

    def test_configured_timeout_is_passed_through(self):
        self._respond(204)
        client = UploadClient(
            UploadConfig(base_url="http://collector.test", timeout_s=5.0), session=self.session
        )
        self.assertTrue(client.send(_payload()).ok)
        self.assertEqual(self.session.post.call_args.kwargs["timeout"], 5.0)

    def test_result_description(self):
        self.assertEqual(UploadResult(ok=False, status_code=503).describe(), "HTTP 503")
        self.assertEqual(UploadResult(ok=False, error="boom").describe(), "boom")


if __name__ == "__main__":
    unittest.main()
