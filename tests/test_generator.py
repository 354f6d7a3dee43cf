from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone

from sensorwatch.core.metrics import METRICS
from sensorwatch.services.generator import GeneratorTarget, MeasurementGenerator
from tests.fakes import FakeMeasurementRepository

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def test_target_parse() -> None:
    target = GeneratorTarget.parse("station-1/pump-a")
    assert target == GeneratorTarget(station="station-1", device_id="pump-a")


def test_tick_writes_every_metric_within_range(repo: FakeMeasurementRepository) -> None:
    generator = MeasurementGenerator(
        repo=repo,
        targets=[GeneratorTarget("station-1", "pump-a"), GeneratorTarget("station-1", "motor-b")],
        rng=random.Random(7),
        clock=lambda: NOW,
    )
    result = generator.tick()
    assert (result.requested, result.written, result.failed) == (2, 2, 0)

    latest = repo.query_latest(start=NOW - timedelta(minutes=1), stop=NOW)
    assert len(latest) == 2 * len(METRICS)
    for reading in latest:
        spec = METRICS[reading.metric]
        assert spec.simulated_low <= reading.value <= spec.simulated_high
        assert reading.value == round(reading.value, 2)
        assert reading.timestamp == NOW


def test_tick_counts_failures(repo: FakeMeasurementRepository) -> None:
    repo.fail = True
    generator = MeasurementGenerator(
        repo=repo, targets=[GeneratorTarget("station-1", "pump-a")], clock=lambda: NOW
    )
    result = generator.tick()
    assert (result.written, result.failed) == (0, 1)
