"""Default application paths and configuration helpers."""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .sweep import SweepConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path(__file__).resolve().parent / "datalogger.yaml"
DEFAULT_BASE_URL = "http://139.59.65.232"
DEFAULT_UPLOAD_PATH = "sensorData"
SENSOR_BACKENDS = ("synthetic", "plyer")

ENV_CONFIG = "DATALOGGER_CONFIG"
ENV_API_KEY = "DATALOGGER_API_KEY"
ENV_UPLOAD_URL = "DATALOGGER_UPLOAD_URL"


@dataclass
class UploadConfig:
    """Collection server target for the single end-of-sweep POST."""

    base_url: str = DEFAULT_BASE_URL
    path: str = DEFAULT_UPLOAD_PATH
    api_key: str = ""
    timeout_s: Optional[float] = None

    @property
    def url(self) -> str:
        base = str(self.base_url or "").rstrip("/")
        path = str(self.path or "").lstrip("/")
        return f"{base}/{path}" if path else base

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any] | None) -> "UploadConfig":
        payload: Mapping[str, Any] = mapping or {}
        block = payload.get("upload") if isinstance(payload, Mapping) else None
        if not isinstance(block, Mapping):
            return cls()

        timeout: Optional[float] = None
        raw_timeout = block.get("timeout_s")
        if raw_timeout is not None:
            try:
                timeout = float(raw_timeout)
            except (TypeError, ValueError):
                timeout = None
            if timeout is not None and (not math.isfinite(timeout) or timeout <= 0.0):
                timeout = None

        return cls(
            base_url=str(block.get("base_url") or DEFAULT_BASE_URL).strip(),
            path=str(block.get("path") or DEFAULT_UPLOAD_PATH).strip(),
            api_key=str(block.get("api_key") or "").strip(),
            timeout_s=timeout,
        )

    def to_mapping(self) -> dict:
        return {
            "upload": {
                "base_url": self.base_url,
                "path": self.path,
                "api_key": self.api_key,
                "timeout_s": self.timeout_s,
            }
        }


@dataclass
class AppConfig:
    """In-memory configuration snapshot used by the GUI and the sweep session."""

    sweep: SweepConfig = field(default_factory=SweepConfig)
    upload: UploadConfig = field(default_factory=UploadConfig)
    sensor_backend: str = "synthetic"
    device_overrides: Dict[str, Any] = field(default_factory=dict)

    def normalized_sensor_backend(self) -> str:
        """Return the canonical backend identifier (``synthetic`` or ``plyer``)."""
        backend = str(self.sensor_backend or "").strip().lower()
        if backend in {"plyer", "android", "device"}:
            return "plyer"
        return "synthetic"

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any] | None) -> "AppConfig":
        payload: Mapping[str, Any] = mapping if isinstance(mapping, Mapping) else {}

        sensors_block = payload.get("sensors")
        backend = "synthetic"
        if isinstance(sensors_block, Mapping):
            backend = str(sensors_block.get("backend") or backend)

        device_block = payload.get("device")
        overrides = dict(device_block) if isinstance(device_block, Mapping) else {}

        return cls(
            sweep=SweepConfig.from_mapping(payload),
            upload=UploadConfig.from_mapping(payload),
            sensor_backend=backend,
            device_overrides=overrides,
        )

    def to_mapping(self) -> dict:
        data: Dict[str, Any] = {}
        data.update(self.sweep.to_mapping())
        data.update(self.upload.to_mapping())
        data["sensors"] = {"backend": self.normalized_sensor_backend()}
        data["device"] = dict(self.device_overrides)
        return data


def resolve_config_path(path: str | Path | None = None) -> Path:
    """
    Pick the config file to load.

    An explicit *path* wins, then ``DATALOGGER_CONFIG``, then the packaged
    ``datalogger.yaml``.
    """
    if path:
        return Path(path).expanduser()
    env_path = os.environ.get(ENV_CONFIG)
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_FILE


def apply_env_overrides(config: AppConfig) -> AppConfig:
    """Apply credential / endpoint overrides from the environment in place."""
    api_key = os.environ.get(ENV_API_KEY)
    if api_key:
        config.upload.api_key = api_key.strip()
    upload_url = os.environ.get(ENV_UPLOAD_URL)
    if upload_url:
        config.upload.base_url = upload_url.strip()
    return config


def load_app_config(path: str | Path | None = None) -> AppConfig:
    """
    Load configuration from ``path`` (see :func:`resolve_config_path`).

    Missing files fall back to default :class:`AppConfig`.
    """
    cfg_path = resolve_config_path(path)
    if cfg_path.exists():
        with cfg_path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}
        if not isinstance(raw, Mapping):
            raise ValueError(f"Expected mapping in {cfg_path}, got {type(raw).__name__}")
    else:
        logger.warning("Config file %s not found; using defaults", cfg_path)
        raw = {}

    config = apply_env_overrides(AppConfig.from_mapping(raw))
    if not config.upload.api_key:
        logger.warning("No upload API key configured; set %s", ENV_API_KEY)
    return config


def save_app_config(path: Path, config: AppConfig) -> None:
    """Persist *config* as YAML, leaving the API key out of the file."""
    data = config.to_mapping()
    data["upload"]["api_key"] = ""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        yaml.safe_dump(data, fh, default_flow_style=False, sort_keys=False)
