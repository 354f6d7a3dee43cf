from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MetricSpec:
    name: str
    unit: str
    alert_min: float
    alert_max: float
    simulated_low: float
    simulated_high: float

    def is_out_of_range(self, value: float) -> bool:
        return value < self.alert_min or value > self.alert_max


METRICS: dict[str, MetricSpec] = {
    "temperature": MetricSpec("temperature", "°C", 18.0, 30.0, 15.0, 30.0),
    "current": MetricSpec("current", "A", 2.0, 8.0, 1.0, 7.5),
    "voltage": MetricSpec("voltage", "V", 210.0, 230.0, 210.0, 235.0),
}


def resolve_metric(name: str | None) -> MetricSpec | None:
    if not name:
        return None
    return METRICS.get(name.strip().lower())
