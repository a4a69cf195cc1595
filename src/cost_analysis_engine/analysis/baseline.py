"""Baseline calculation for anomaly detection."""

from dataclasses import dataclass

from cost_analysis_engine.analysis.statistics import mean, standard_deviation


@dataclass
class Baseline:
    """Baseline statistics of a resource's daily cost."""

    mean: float
    std: float
    trend: float  # Positive = increasing, negative = decreasing
    min_cost: float
    max_cost: float
    sample_count: int

    def deviation_in_std_devs(self, amount: float) -> float:
        """Distance of amount from the mean, in standard deviations (0 if flat)."""
        if self.std == 0:
            return 0.0
        return abs(amount - self.mean) / self.std


class BaselineCalculator:
    """
    Calculate a resource's baseline from its daily costs.

    The most recent days are held out of the baseline so that the days under
    test cannot bias their own reference.
    """

    def __init__(self, exclude_recent: int = 3):
        """
        Initialize the baseline calculator.

        Args:
            exclude_recent: Number of trailing days left out of the baseline.
        """
        self.exclude_recent = exclude_recent

    def split(self, daily_amounts: list[float]) -> tuple[list[float], list[float]]:
        """Split daily amounts into (baseline days, recent days)."""
        if self.exclude_recent <= 0:
            return daily_amounts, []
        return daily_amounts[: -self.exclude_recent], daily_amounts[-self.exclude_recent :]

    def calculate(self, daily_amounts: list[float]) -> Baseline:
        """
        Calculate baseline statistics.

        Args:
            daily_amounts: Daily cost totals, ordered oldest to newest.

        Returns:
            Baseline over all but the most recent days.
        """
        costs, _ = self.split(daily_amounts)
        if not costs:
            return Baseline(mean=0, std=0, trend=0, min_cost=0, max_cost=0, sample_count=0)

        mu = mean(costs)
        return Baseline(
            mean=mu,
            std=standard_deviation(costs, mu),
            trend=self._calculate_trend(costs),
            min_cost=min(costs),
            max_cost=max(costs),
            sample_count=len(costs),
        )

    def _calculate_trend(self, costs: list[float]) -> float:
        """Slope of the least-squares line through the costs."""
        if len(costs) < 3:
            return 0.0

        n = len(costs)
        x_mean = (n - 1) / 2
        y_mean = mean(costs)

        numerator = sum((x - x_mean) * (y - y_mean) for x, y in enumerate(costs))
        denominator = sum((x - x_mean) ** 2 for x in range(n))

        return numerator / denominator if denominator else 0.0
