from __future__ import annotations

from collections.abc import Sequence

from sensorwatch.models.series import GridPoint, RawSample, TimeRange

MIN_INTERVAL_MS = 60_000
ONE_YEAR_MS = 365 * 24 * 60 * 60 * 1000


def clamp_interval(interval_ms: int) -> int:
    return max(int(interval_ms), MIN_INTERVAL_MS)


def clamp_range(time_range: TimeRange) -> TimeRange:
    if time_range.end_ms - time_range.start_ms > ONE_YEAR_MS:
        return TimeRange(start_ms=time_range.end_ms - ONE_YEAR_MS, end_ms=time_range.end_ms)
    return time_range


def tick_count(time_range: TimeRange, interval_ms: int) -> int:
    if time_range.is_inverted:
        return 0
    return (time_range.end_ms - time_range.start_ms) // interval_ms + 1


def _ascending(samples: Sequence[RawSample]) -> Sequence[RawSample]:
    for prev, cur in zip(samples, samples[1:]):
        if cur.timestamp_ms < prev.timestamp_ms:
            return sorted(samples, key=lambda s: s.timestamp_ms)
    return samples


def resample(
    time_range: TimeRange, interval_ms: int, samples: Sequence[RawSample]
) -> list[GridPoint]:
    """Snap raw samples onto a regular grid of ticks.

    Each tick takes the value of the first not-yet-used sample lying strictly
    within half an interval of it; ticks without one get ``None``. A sample is
    used at most once and samples that fall behind the grid are skipped.
    The interval is clamped to one minute and the range to one year.
    """
    step = clamp_interval(interval_ms)
    time_range = clamp_range(time_range)
    ordered = _ascending(samples)

    points: list[GridPoint] = []
    cursor = 0
    for k in range(tick_count(time_range, step)):
        t = time_range.start_ms + k * step
        # 2*d compared against step keeps the half-interval test exact for odd steps.
        while cursor < len(ordered) and 2 * (t - ordered[cursor].timestamp_ms) > step:
            cursor += 1

        if cursor < len(ordered) and 2 * abs(ordered[cursor].timestamp_ms - t) < step:
            points.append(GridPoint(timestamp_ms=t, value=ordered[cursor].value))
            cursor += 1
        else:
            points.append(GridPoint(timestamp_ms=t, value=None))
    return points
