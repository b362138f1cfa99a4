"""Background worker that posts the sweep payload off the UI thread."""

from __future__ import annotations

import logging

from PySide6.QtCore import QObject, Signal, Slot

from ..core.payload import UploadPayload
from .upload_client import UploadClient, UploadResult

logger = logging.getLogger(__name__)


class UploadWorker(QObject):
    """
    QObject worker meant to live in its own QThread.

    ``finished`` carries the :class:`UploadResult`; Qt queues it back to the
    thread that owns the receiving slot.
    """

    finished = Signal(object)  # UploadResult

    def __init__(self, client: UploadClient, payload: UploadPayload) -> None:
        super().__init__()
        self._client = client
        self._payload = payload

    @Slot()
    def run(self) -> None:
        try:
            result = self._client.send(self._payload)
        except Exception as exc:
            logger.exception("Upload worker failed")
            result = UploadResult(ok=False, error=str(exc))
        finally:
            self._payload = None
        self.finished.emit(result)
