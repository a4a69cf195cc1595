"""Tests for statistics helpers."""

from datetime import date

import pytest

from cost_analysis_engine.analysis.statistics import (
    bucket_by_day,
    group_by_resource,
    mean,
    population_variance,
    standard_deviation,
)
from tests.factories import make_cost_point


class TestMoments:
    """Tests for mean, variance and standard deviation."""

    def test_empty(self):
        """Test that empty input yields zeros."""
        assert mean([]) == 0
        assert population_variance([]) == 0
        assert standard_deviation([]) == 0

    def test_population_not_sample(self):
        """Test the population (n) denominator."""
        values = [2, 4, 4, 4, 5, 5, 7, 9]
        assert mean(values) == 5
        assert population_variance(values) == pytest.approx(4)
        assert standard_deviation(values) == pytest.approx(2)

    def test_single_value(self):
        assert standard_deviation([42.0]) == 0


class TestGrouping:
    """Tests for group_by_resource and bucket_by_day."""

    def test_group_by_resource_sorts(self):
        """Test that each partition is ordered oldest first."""
        samples = [
            make_cost_point("r1", 3, day_offset=2),
            make_cost_point("r2", 9, day_offset=0),
            make_cost_point("r1", 1, day_offset=0),
            make_cost_point("r1", 2, day_offset=1),
        ]

        grouped = group_by_resource(samples)

        assert set(grouped) == {"r1", "r2"}
        assert [s.amount for s in grouped["r1"]] == [1, 2, 3]

    def test_bucket_by_day_sums(self):
        """Test that samples on one UTC day are summed."""
        samples = [
            make_cost_point("r1", 10, day_offset=1, hour=1),
            make_cost_point("r1", 5, day_offset=0, hour=8),
            make_cost_point("r1", 7, day_offset=1, hour=23),
        ]

        daily = bucket_by_day(samples)

        assert daily == {date(2024, 1, 1): 5, date(2024, 1, 2): 17}
        assert list(daily) == [date(2024, 1, 1), date(2024, 1, 2)]
