"""Configuration objects and helpers for the data logger.

This package knows how to load the YAML descriptor that captures one
experiment setup:
- the ``sweep`` block (see :mod:`sweep`) with the frequency and magnetometer
  plan for a run
- the ``upload`` block with the collection server target
The resulting typed dataclasses (see :mod:`app_config`) are passed to the
scheduler, the sensor hub, and the upload client.
"""

from .app_config import AppConfig, UploadConfig, load_app_config
from .sweep import SweepConfig

__all__ = ["AppConfig", "SweepConfig", "UploadConfig", "load_app_config"]
