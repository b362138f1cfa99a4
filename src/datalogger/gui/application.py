"""Qt application entry point for the data logger GUI.

This module wires up argument parsing and logging, loads the YAML config,
builds the sensor backend and :class:`~datalogger.gui.main_window.MainWindow`,
and starts the Qt event loop. ``python -m datalogger.gui.application`` and
the ``datalogger`` console script both flow through ``main()`` here.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Tuple

from PySide6.QtCore import QLoggingCategory, QTimer
from PySide6.QtWidgets import QApplication

from ..config.app_config import (
    SENSOR_BACKENDS,
    AppConfig,
    load_app_config,
    save_app_config,
)
from ..sensors import create_sensor_manager
from .main_window import MainWindow

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sensor sweep data logger")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML config file (default: $DATALOGGER_CONFIG or the packaged defaults)",
    )
    parser.add_argument(
        "--sensors",
        choices=SENSOR_BACKENDS,
        default=None,
        help="Sensor backend to use (overrides the config file)",
    )
    parser.add_argument(
        "--upload-url",
        type=str,
        default=None,
        help="Base URL of the collection server (overrides the config file)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--write-config",
        type=str,
        default=None,
        metavar="PATH",
        help="Write the effective config (without the API key) to PATH and exit",
    )
    return parser


def _parse_cli_args(
    argv: list[str],
) -> tuple[argparse.Namespace, list[str]]:
    parser = _build_arg_parser()
    args, qt_args = parser.parse_known_args(argv[1:])
    qt_argv = [argv[0], *qt_args]
    return args, qt_argv


def build_app_config(args: argparse.Namespace) -> AppConfig:
    app_config = load_app_config(args.config)
    if args.sensors:
        app_config.sensor_backend = args.sensors
    if args.upload_url:
        app_config.upload.base_url = args.upload_url
    return app_config


def create_app(
    argv: list[str] | None = None,
    *,
    app_config: AppConfig | None = None,
) -> Tuple[QApplication, MainWindow]:
    """
    Create the QApplication and the main window.

    Parameters
    ----------
    argv:
        Optional argument list to pass to :class:`QApplication`.
    app_config:
        Loaded configuration; defaults to :class:`AppConfig`.

    Returns
    -------
    app:
        The QApplication instance (owned by caller).
    window:
        The main window with its sweep controller.
    """
    qt_args = argv if argv is not None else sys.argv
    app = QApplication.instance() or QApplication(qt_args)

    # Suppress noisy QObject::connect warnings from QStyleHints and similar internals
    QLoggingCategory.setFilterRules("qt.core.qobject.connect=false")

    config = app_config or AppConfig()
    manager = create_sensor_manager(config.normalized_sensor_backend())
    window = MainWindow(manager, app_config=config)
    return app, window


def main(argv: list[str] | None = None) -> None:
    raw_argv = argv if argv is not None else sys.argv
    args, qt_argv = _parse_cli_args(raw_argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format=LOG_FORMAT)

    app_config = build_app_config(args)
    if args.write_config:
        save_app_config(Path(args.write_config).expanduser(), app_config)
        logging.getLogger(__name__).info("Config written to %s", args.write_config)
        raise SystemExit(0)

    app, win = create_app(qt_argv, app_config=app_config)
    win.show()
    # Check sensors once the event loop runs so the alert is modal over the window.
    QTimer.singleShot(0, win.check_sensors)
    raise SystemExit(app.exec())


if __name__ == "__main__":
    main()
