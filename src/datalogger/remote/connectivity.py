"""Pre-sweep check that the device reports internet connectivity."""

from __future__ import annotations

import logging

from PySide6.QtNetwork import QNetworkInformation

logger = logging.getLogger(__name__)


def _qt_reachability() -> bool | None:
    """Ask the OS through Qt; ``None`` when no backend can answer."""
    if QNetworkInformation.instance() is None and not QNetworkInformation.loadDefaultBackend():
        return None
    info = QNetworkInformation.instance()
    if info is None:
        return None
    reachability = info.reachability()
    if reachability == QNetworkInformation.Reachability.Unknown:
        return None
    return reachability == QNetworkInformation.Reachability.Online


def is_network_available() -> bool:
    """
    Return True unless the platform reports that the network is offline.

    Only the OS is asked; no connection is opened. Platforms without a Qt
    network-information backend cannot tell, so the sweep is allowed and a
    dead link surfaces later as an upload failure.
    """
    online = _qt_reachability()
    if online is None:
        logger.warning("Network state unknown (no Qt network backend); assuming online")
        return True
    logger.debug("Qt network reachability online=%s", online)
    return online
