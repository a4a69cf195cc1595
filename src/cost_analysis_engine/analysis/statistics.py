"""Statistics helpers over time-stamped cost samples."""

import statistics
from collections import defaultdict
from datetime import date

from cost_analysis_engine.inputs import CostDataPoint


def mean(values: list[float]) -> float:
    """Arithmetic mean, 0 for no values."""
    if not values:
        return 0.0
    return statistics.fmean(values)


def population_variance(values: list[float], mu: float | None = None) -> float:
    """Population variance, 0 for no values."""
    if not values:
        return 0.0
    return statistics.pvariance(values, mu)


def standard_deviation(values: list[float], mu: float | None = None) -> float:
    """Population standard deviation, 0 for no values."""
    if not values:
        return 0.0
    return statistics.pstdev(values, mu)


def group_by_resource(samples: list[CostDataPoint]) -> dict[str, list[CostDataPoint]]:
    """Partition samples by resource id, each partition sorted oldest first."""
    grouped: dict[str, list[CostDataPoint]] = defaultdict(list)
    for sample in samples:
        grouped[sample.resource_id].append(sample)

    for resource_samples in grouped.values():
        resource_samples.sort(key=lambda s: s.timestamp)

    return dict(grouped)


def bucket_by_day(samples: list[CostDataPoint]) -> dict[date, float]:
    """Sum sample amounts per UTC calendar day, in chronological order."""
    daily: dict[date, float] = defaultdict(float)
    for sample in samples:
        daily[sample.day] += sample.amount
    return dict(sorted(daily.items()))
