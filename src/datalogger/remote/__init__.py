"""Network side of the logger: the collection-server upload and its helpers.

:class:`UploadClient` performs the single JSON POST, :class:`UploadWorker`
runs it off the Qt main thread, and :mod:`connectivity` answers whether a
sweep should start at all.
"""

from .connectivity import is_network_available
from .upload_client import API_KEY_HEADER, UploadClient, UploadResult
from .upload_worker import UploadWorker

__all__ = [
    "API_KEY_HEADER",
    "UploadClient",
    "UploadResult",
    "UploadWorker",
    "is_network_available",
]
