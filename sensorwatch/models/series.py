from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RawSample:
    timestamp_ms: int
    value: float


@dataclass(frozen=True)
class TimeRange:
    start_ms: int
    end_ms: int

    @property
    def is_inverted(self) -> bool:
        return self.start_ms > self.end_ms


@dataclass(frozen=True)
class GridPoint:
    timestamp_ms: int
    value: float | None

    @property
    def is_missing(self) -> bool:
        return self.value is None
