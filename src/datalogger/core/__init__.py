"""Core sweep logic: experiment keys, accumulation, scheduling, payload.

Nothing in this package touches Qt; the GUI drives :class:`SweepSession`
from a timer and the remote package ships the resulting payload.
"""

from .accumulator import AccumulatorBusyError, SampleAccumulator
from .experiment import ExperimentKey, frequency_to_delay_us
from .payload import DeviceInfo, UploadPayload, collect_device_info
from .scheduler import SweepScheduler, SweepState
from .sensor_hub import SensorHub
from .session import Notifier, SweepSession, report_upload_result

__all__ = [
    "AccumulatorBusyError",
    "DeviceInfo",
    "ExperimentKey",
    "Notifier",
    "SampleAccumulator",
    "SensorHub",
    "SweepScheduler",
    "SweepSession",
    "SweepState",
    "UploadPayload",
    "collect_device_info",
    "frequency_to_delay_us",
    "report_upload_result",
]
