"""HTTP client for the collection server."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import requests

from ..config.app_config import UploadConfig
from ..core.payload import UploadPayload

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-API-Key"


@dataclass(frozen=True)
class UploadResult:
    ok: bool
    status_code: Optional[int] = None
    error: Optional[str] = None

    def describe(self) -> str:
        if self.ok:
            return f"HTTP {self.status_code}"
        if self.status_code is not None:
            return f"HTTP {self.status_code}"
        return self.error or "unknown error"


class UploadClient:
    """
    POST one :class:`UploadPayload` as JSON to ``UploadConfig.url``.

    There is no retry and nothing is kept on failure: the caller gets an
    :class:`UploadResult` and the payload is dropped.
    """

    def __init__(
        self,
        config: UploadConfig,
        session: requests.Session | None = None,
    ) -> None:
        self._config = config
        self._session = session or requests.Session()

    @property
    def url(self) -> str:
        return self._config.url

    def send(self, payload: UploadPayload) -> UploadResult:
        headers = {API_KEY_HEADER: self._config.api_key}
        body = payload.to_json_dict()
        logger.info(
            "Uploading %d readings to %s", payload.reading_count(), self.url
        )
        try:
            response = self._session.post(
                self.url,
                json=body,
                headers=headers,
                timeout=self._config.timeout_s,
            )
        except requests.RequestException as exc:
            logger.exception("Upload to %s failed", self.url)
            return UploadResult(ok=False, error=str(exc))

        logger.info("Upload response: HTTP %d", response.status_code)
        ok = 200 <= response.status_code < 300
        return UploadResult(ok=ok, status_code=response.status_code)

    def close(self) -> None:
        self._session.close()
