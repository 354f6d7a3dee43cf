from __future__ import annotations

import logging
import random
from dataclasses import dataclass

from sensorwatch.core.clock import Clock, utc_now
from sensorwatch.core.metrics import METRICS, MetricSpec
from sensorwatch.repositories.base import MeasurementRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratorTarget:
    station: str
    device_id: str

    @classmethod
    def parse(cls, raw: str) -> GeneratorTarget:
        station, _, device_id = raw.partition("/")
        return cls(station=station, device_id=device_id)


@dataclass(frozen=True)
class GeneratorTickResult:
    requested: int
    written: int
    failed: int


class MeasurementGenerator:
    """Writes one simulated reading per metric for every target device."""

    def __init__(
        self,
        *,
        repo: MeasurementRepository,
        targets: list[GeneratorTarget],
        metrics: list[MetricSpec] | None = None,
        rng: random.Random | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._repo = repo
        self._targets = targets
        self._metrics = metrics if metrics is not None else list(METRICS.values())
        self._rng = rng or random.Random()
        self._clock = clock

    def simulate(self, spec: MetricSpec) -> float:
        return round(self._rng.uniform(spec.simulated_low, spec.simulated_high), 2)

    def tick(self) -> GeneratorTickResult:
        now = self._clock()
        written = 0
        failed = 0
        for target in self._targets:
            readings = {spec.name: self.simulate(spec) for spec in self._metrics}
            try:
                self._repo.write_measurement(
                    station=target.station,
                    device_id=target.device_id,
                    readings=readings,
                    timestamp=now,
                )
            except Exception:
                logger.exception(
                    "Failed to write simulated readings for %s/%s",
                    target.station,
                    target.device_id,
                )
                failed += 1
                continue
            logger.debug("Wrote %s for %s/%s", readings, target.station, target.device_id)
            written += 1
        return GeneratorTickResult(requested=len(self._targets), written=written, failed=failed)
