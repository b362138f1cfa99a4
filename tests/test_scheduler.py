from __future__ import annotations

import re

import pytest

from datalogger.config.sweep import SweepConfig
from datalogger.core.accumulator import SampleAccumulator
from datalogger.core.experiment import ExperimentKey
from datalogger.core.scheduler import SweepScheduler, SweepState
from datalogger.core.sensor_hub import SensorHub
from datalogger.sensors.models import SensorKind

ACC = SensorKind.ACCELEROMETER
GYRO = SensorKind.GYROSCOPE
MAG = SensorKind.MAGNETOMETER


def _build(fake_manager, delayed, config=None, **callbacks):
    config = config or SweepConfig()
    accumulator = SampleAccumulator()
    hub = SensorHub(fake_manager, accumulator, config, post_delayed=delayed)
    scheduler = SweepScheduler(config, hub, **callbacks)
    return scheduler, hub, accumulator


def _run(scheduler, fake_manager, delayed) -> None:
    while scheduler.running:
        delayed.run_all()
        fake_manager.emit(ACC)
        fake_manager.emit(GYRO)
        fake_manager.emit(MAG)
        scheduler.tick()


def test_full_sweep_runs_six_cells_and_300_ticks(fake_manager, delayed) -> None:
    progress = []
    finished = []
    scheduler, _, accumulator = _build(
        fake_manager,
        delayed,
        on_progress=lambda value, total: progress.append((value, total)),
        on_finished=lambda: finished.append(True),
    )

    scheduler.start()
    _run(scheduler, fake_manager, delayed)

    assert scheduler.state is SweepState.SWEEP_DONE
    assert scheduler.progress == 300
    assert progress[-1] == (300, 300)
    assert [v for v, _ in progress] == list(range(1, 301))
    assert finished == [True]
    assert [k.label for k in scheduler.completed] == [
        "200-On",
        "173-On",
        "139-On",
        "200-Off",
        "173-Off",
        "139-Off",
    ]

    exported = accumulator.export()
    for kind, prefix in (("accelerometer", "ACC,"), ("gyroscope", "GYRO,")):
        assert len(exported[kind]) == 6
        for label, records in exported[kind].items():
            assert re.fullmatch(r"\d+-(On|Off)", label)
            assert len(records) == 50
            assert all(record.startswith(prefix) for record in records)


def test_readings_within_a_key_are_strictly_time_ordered(fake_manager, delayed) -> None:
    scheduler, _, accumulator = _build(fake_manager, delayed)
    scheduler.start()
    _run(scheduler, fake_manager, delayed)

    for kind in (ACC, GYRO):
        for key in accumulator.keys(kind):
            stamps = [r.timestamp_ns for r in accumulator.readings(kind, key)]
            assert stamps
            assert all(a < b for a, b in zip(stamps, stamps[1:]))


def test_registration_order_and_delays(fake_manager, delayed) -> None:
    config = SweepConfig(frequencies_hz=[200], magnetometer_states=[True, False])
    scheduler, _, _ = _build(fake_manager, delayed, config=config)

    scheduler.start()
    assert fake_manager.registered_kinds() == ["accelerometer", "magnetometer"]
    assert delayed.pending[0][0] == config.gyro_stagger_ms
    delayed.run_all()
    assert fake_manager.registered_kinds() == [
        "accelerometer",
        "gyroscope",
        "magnetometer",
    ]
    assert ("register", ACC, 5000) in fake_manager.log
    assert ("register", MAG, 5001) in fake_manager.log
    assert ("register", GYRO, 5000) in fake_manager.log

    for _ in range(config.steps_per_cell):
        scheduler.tick()

    # Second cell: magnetometer off
    assert fake_manager.registered_kinds() == ["accelerometer"]
    delayed.run_all()
    for _ in range(config.steps_per_cell):
        scheduler.tick()
    assert fake_manager.active == []
    assert fake_manager.log.count(("register", MAG, 5001)) == 1


def test_gyroscope_registration_skipped_when_cell_already_ended(fake_manager, delayed) -> None:
    config = SweepConfig(frequencies_hz=[200], magnetometer_states=[False], cell_duration_ms=50)
    scheduler, hub, accumulator = _build(fake_manager, delayed, config=config)

    scheduler.start()
    scheduler.tick()
    assert scheduler.state is SweepState.SWEEP_DONE
    delayed.run_all()

    assert fake_manager.active == []
    assert accumulator.active_key(GYRO) is None
    assert hub.active_key is None


def test_cells_shorter_than_one_tick_open_and_close(fake_manager, delayed) -> None:
    config = SweepConfig(cell_duration_ms=20, update_interval_ms=50)
    scheduler, _, _ = _build(fake_manager, delayed, config=config)

    scheduler.start()

    assert scheduler.state is SweepState.SWEEP_DONE
    assert scheduler.progress == 0
    assert len(scheduler.completed) == 6
    assert fake_manager.active == []


def test_events_outside_registration_window_are_not_recorded(fake_manager, delayed) -> None:
    config = SweepConfig(frequencies_hz=[139], magnetometer_states=[False], cell_duration_ms=100)
    scheduler, hub, accumulator = _build(fake_manager, delayed, config=config)

    scheduler.start()
    # Gyroscope not registered yet: a stray callback must be ignored.
    hub.gyroscope_listener.on_sensor_changed(fake_manager.make_event(GYRO))
    assert hub.gyroscope_listener.dropped == 1

    _run(scheduler, fake_manager, delayed)
    before = accumulator.count()

    # Late callbacks after deregistration completed.
    hub.accelerometer_listener.on_sensor_changed(fake_manager.make_event(ACC))
    hub.gyroscope_listener.on_sensor_changed(fake_manager.make_event(GYRO))

    assert accumulator.count() == before
    assert hub.accelerometer_listener.dropped == 1
    assert hub.gyroscope_listener.dropped == 2
    assert list(accumulator.export()["gyroscope"]) == ["139-Off"]


def test_start_while_running_raises(fake_manager, delayed) -> None:
    scheduler, _, _ = _build(fake_manager, delayed)
    scheduler.start()
    with pytest.raises(RuntimeError):
        scheduler.start()


def test_tick_when_idle_is_a_no_op(fake_manager, delayed) -> None:
    scheduler, _, _ = _build(fake_manager, delayed)
    scheduler.tick()
    assert scheduler.state is SweepState.IDLE
    assert scheduler.progress == 0
    assert scheduler.current_key is None


def test_plan_matches_key_strings(fake_manager, delayed) -> None:
    scheduler, _, _ = _build(fake_manager, delayed)
    assert scheduler.plan() == [
        ExperimentKey(200, True),
        ExperimentKey(173, True),
        ExperimentKey(139, True),
        ExperimentKey(200, False),
        ExperimentKey(173, False),
        ExperimentKey(139, False),
    ]
