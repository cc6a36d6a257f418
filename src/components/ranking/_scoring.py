"""
Scoring primitives for the ranking component.

All helpers are pure and total: missing or non-finite inputs score as 0.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime

LN2 = math.log(2)


def metric(value: float | None) -> float:
    """Raw metric value, 0.0 when missing or non-finite."""
    if value is None or not math.isfinite(value):
        return 0.0
    return float(value)


def clamp01(value: float | None) -> float:
    return max(0.0, min(1.0, metric(value)))


def normalize(values: Sequence[float | None]) -> list[float]:
    """
    Min-max scale values to [0, 1] over the given candidates.

    When every value is equal there is nothing to discriminate on and all
    values map to 0.
    """
    raw = [metric(v) for v in values]
    if not raw:
        return []

    low = min(raw)
    high = max(raw)
    span = high - low
    if span <= 0:
        return [0.0 for _ in raw]
    return [(v - low) / span for v in raw]


def to_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC so mixed snapshots compare safely."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def reference_time(timestamps: Iterable[datetime | None]) -> datetime | None:
    """Newest timestamp present, or None."""
    present = [to_utc(ts) for ts in timestamps if ts is not None]
    if not present:
        return None
    return max(present)


def age_hours(ts: datetime | None, now: datetime | None) -> float | None:
    """Age in hours, floored at 0 for timestamps after now."""
    if ts is None or now is None:
        return None
    seconds = (to_utc(now) - to_utc(ts)).total_seconds()
    return max(0.0, seconds / 3600.0)


def decay_rate(half_life_hours: float) -> float:
    """Lambda such that exp(-lambda * half_life) == 0.5."""
    return LN2 / half_life_hours


def recency_decay(ts: datetime | None, now: datetime | None, half_life_hours: float) -> float:
    """exp(-lambda * ageInHours); 0 when the age is unknown."""
    age = age_hours(ts, now)
    if age is None:
        return 0.0
    return math.exp(-decay_rate(half_life_hours) * age)


def sort_timestamp(ts: datetime | None) -> float:
    """Epoch seconds for tie-breaks; missing timestamps sort as oldest."""
    if ts is None:
        return float("-inf")
    return to_utc(ts).timestamp()


def weighted_sum(terms: Iterable[tuple[float, float]]) -> float:
    """Sum of weight * value pairs."""
    return sum(weight * value for weight, value in terms)
