"""Statistical anomaly detection over per-resource daily costs."""

from datetime import UTC, date, datetime

import structlog

from cost_analysis_engine.analysis.baseline import Baseline, BaselineCalculator
from cost_analysis_engine.analysis.lifecycle import check_transition
from cost_analysis_engine.analysis.scoring import validate_optimization_parameters
from cost_analysis_engine.analysis.statistics import bucket_by_day, group_by_resource
from cost_analysis_engine.config.schema import AnomalyDetectionConfig, LifecycleConfig
from cost_analysis_engine.errors import AnalysisFailure, NotFoundError
from cost_analysis_engine.inputs import CostDataPoint
from cost_analysis_engine.storage.base import Storage
from cost_analysis_engine.storage.models import (
    AnomalyPattern,
    AnomalyStatus,
    CostAnomaly,
    Severity,
)

logger = structlog.get_logger()


class AnomalyDetector:
    """
    Detect days on which a resource's spend departs from its own baseline.

    For each resource, daily totals are split into a baseline (all but the
    most recent days) and the recent days under test. A recent day is
    anomalous when it is at least `sensitivity_threshold` standard deviations
    from the baseline mean AND at least `minimum_anomaly_amount` away in
    absolute terms.
    """

    def __init__(
        self,
        storage: Storage,
        config: AnomalyDetectionConfig | None = None,
        lifecycle: LifecycleConfig | None = None,
    ):
        """
        Initialize the anomaly detector.

        Args:
            storage: Registry the detected anomalies are written to.
            config: Anomaly detection configuration.
            lifecycle: Status transition policy.
        """
        self.storage = storage
        self.config = config or AnomalyDetectionConfig()
        self.lifecycle = lifecycle or LifecycleConfig()
        self.baseline_calculator = BaselineCalculator(exclude_recent=self.config.recent_days)

    def detect_anomalies(
        self,
        organization_id: str,
        cost_samples: list[CostDataPoint],
        sensitivity_threshold: float | None = None,
        minimum_anomaly_amount: float | None = None,
        lookback_days: int | None = None,
    ) -> list[CostAnomaly]:
        """
        Detect anomalies in a batch of cost samples.

        Samples are not filtered by organization; the caller partitions them.
        Resources without enough history are skipped silently.

        Args:
            organization_id: Organization the anomalies will belong to.
            cost_samples: Cost observations, any order.
            sensitivity_threshold: Standard deviations required. Defaults to config.
            minimum_anomaly_amount: Absolute deviation required. Defaults to config.
            lookback_days: Recorded on each anomaly; samples are not aged out.

        Returns:
            Newly detected anomalies, already stored.

        Raises:
            ValueError: If organization_id is empty or an option is out of range.
            AnalysisFailure: If the samples cannot be analyzed.
        """
        if not organization_id:
            raise ValueError("organization_id is required")

        threshold = (
            sensitivity_threshold
            if sensitivity_threshold is not None
            else self.config.sensitivity_threshold
        )
        minimum_amount = (
            minimum_anomaly_amount
            if minimum_anomaly_amount is not None
            else self.config.minimum_anomaly_amount
        )
        lookback = lookback_days if lookback_days is not None else self.config.lookback_days
        validate_optimization_parameters(
            minimum_savings=minimum_amount, lookback_days=lookback
        )

        logger.info(
            "anomaly_detection_started",
            organization_id=organization_id,
            data_points=len(cost_samples),
        )

        try:
            anomalies: list[CostAnomaly] = []
            for samples in group_by_resource(cost_samples).values():
                anomalies.extend(
                    self._detect_resource_anomalies(
                        organization_id, samples, threshold, minimum_amount, lookback
                    )
                )
        except Exception as e:
            logger.error(
                "anomaly_detection_failed", organization_id=organization_id, error=str(e)
            )
            raise AnalysisFailure(
                f"Failed to detect cost anomalies for organization {organization_id}: {e}"
            ) from e

        for anomaly in anomalies:
            self.storage.put_anomaly(anomaly)

        logger.info(
            "anomaly_detection_completed",
            organization_id=organization_id,
            anomalies_detected=len(anomalies),
        )

        return anomalies

    def _detect_resource_anomalies(
        self,
        organization_id: str,
        samples: list[CostDataPoint],
        threshold: float,
        minimum_amount: float,
        lookback_days: int,
    ) -> list[CostAnomaly]:
        """Check the most recent days of one resource against its baseline."""
        minimum_points = self.config.minimum_data_points
        if len(samples) < minimum_points:
            return []

        daily_costs = bucket_by_day(samples)
        if len(daily_costs) < minimum_points:
            return []

        days = list(daily_costs)
        amounts = list(daily_costs.values())
        baseline = self.baseline_calculator.calculate(amounts)
        _, recent_amounts = self.baseline_calculator.split(amounts)
        recent_days = days[len(days) - len(recent_amounts) :]

        anomalies = []
        for day, amount in zip(recent_days, recent_amounts):
            deviation = abs(amount - baseline.mean)
            std_devs = baseline.deviation_in_std_devs(amount)

            if std_devs >= threshold and deviation >= minimum_amount:
                anomalies.append(
                    self._create_anomaly(
                        organization_id, samples[0], day, amount, baseline, std_devs, lookback_days
                    )
                )

        return anomalies

    def _create_anomaly(
        self,
        organization_id: str,
        sample: CostDataPoint,
        day: date,
        actual_cost: float,
        baseline: Baseline,
        std_devs: float,
        lookback_days: int,
    ) -> CostAnomaly:
        expected_cost = baseline.mean
        deviation = abs(actual_cost - expected_cost)
        deviation_percentage = deviation / expected_cost * 100 if expected_cost > 0 else 0.0

        return CostAnomaly(
            organization_id=organization_id,
            resource_id=sample.resource_id,
            resource_type=sample.resource_type,
            service_type=sample.service_type,
            region=sample.region,
            account_id=sample.account_id,
            start_date=day,
            end_date=day,
            expected_cost=expected_cost,
            actual_cost=actual_cost,
            deviation=deviation,
            deviation_percentage=deviation_percentage,
            impact=deviation,
            currency=sample.currency,
            severity=self._calculate_severity(std_devs),
            pattern=self._classify_pattern(actual_cost, expected_cost),
            metadata={
                "deviation_in_std_devs": std_devs,
                "detection_method": "statistical",
                "baseline_data_points": baseline.sample_count,
                "baseline_std_dev": baseline.std,
                "baseline_trend": baseline.trend,
                "lookback_days": lookback_days,
            },
        )

    def _calculate_severity(self, std_devs: float) -> Severity:
        """Map the deviation in standard deviations onto the alert ladder."""
        thresholds = self.config.alert_thresholds
        if std_devs >= thresholds.critical:
            return Severity.CRITICAL
        if std_devs >= thresholds.high:
            return Severity.HIGH
        if std_devs >= thresholds.medium:
            return Severity.MEDIUM
        return Severity.LOW

    @staticmethod
    def _classify_pattern(actual_cost: float, expected_cost: float) -> AnomalyPattern:
        if actual_cost > expected_cost * 2:
            return AnomalyPattern.SPIKE
        if actual_cost > expected_cost * 1.5:
            return AnomalyPattern.STEP_CHANGE
        return AnomalyPattern.TREND

    def get_anomalies(
        self,
        organization_id: str,
        status: AnomalyStatus | None = None,
        severity: Severity | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        limit: int | None = None,
    ) -> list[CostAnomaly]:
        """
        Query an organization's anomalies.

        Args:
            organization_id: Owning organization.
            status: Only anomalies in this status.
            severity: Only anomalies of this severity.
            start_date: Only anomalies on or after this day.
            end_date: Only anomalies on or before this day.
            limit: Maximum number of results (ignored unless positive).

        Returns:
            Matching anomalies, most recently detected first.
        """
        anomalies = self.storage.list_anomalies(organization_id)

        if status:
            anomalies = [a for a in anomalies if a.status == status]
        if severity:
            anomalies = [a for a in anomalies if a.severity == severity]
        if start_date:
            anomalies = [a for a in anomalies if a.start_date >= start_date]
        if end_date:
            anomalies = [a for a in anomalies if a.end_date <= end_date]

        # id breaks ties so repeated queries return the same order
        anomalies.sort(key=lambda a: (a.detected_at, a.id), reverse=True)

        if limit and limit > 0:
            anomalies = anomalies[:limit]

        return anomalies

    def get_anomaly(self, anomaly_id: str) -> CostAnomaly | None:
        """Get a single anomaly, or None if unknown."""
        return self.storage.get_anomaly(anomaly_id)

    def update_anomaly_status(
        self,
        anomaly_id: str,
        status: AnomalyStatus,
        assigned_to: str | None = None,
        root_cause: str | None = None,
        resolution_summary: str | None = None,
        resolved_by: str | None = None,
    ) -> CostAnomaly:
        """
        Move an anomaly to a new status.

        Resolving stamps the resolution time, author and summary.

        Raises:
            NotFoundError: If the anomaly does not exist.
            InvalidStatusTransitionError: If strict transitions are enabled and
                the move is not allowed.
        """
        anomaly = self.storage.get_anomaly(anomaly_id)
        if anomaly is None:
            raise NotFoundError("anomaly", anomaly_id)

        status = AnomalyStatus(status)
        check_transition(
            "anomaly", anomaly.status, status, self.lifecycle.enforce_status_transitions
        )

        anomaly.status = status
        if status == AnomalyStatus.RESOLVED:
            anomaly.resolved_at = datetime.now(UTC)
            anomaly.resolved_by = resolved_by
            anomaly.resolution_summary = resolution_summary
        if assigned_to:
            anomaly.assigned_to = assigned_to
        if root_cause:
            anomaly.root_cause = root_cause

        self.storage.put_anomaly(anomaly)

        logger.info(
            "anomaly_status_updated",
            anomaly_id=anomaly_id,
            status=status.value,
            resource_id=anomaly.resource_id,
        )

        return anomaly

    def get_anomaly_summary(self, anomalies: list[CostAnomaly]) -> str:
        """Generate a short text summary of detected anomalies."""
        if not anomalies:
            return "No anomalies detected."

        parts = [f"Detected {len(anomalies)} anomalies:"]
        for severity in Severity:
            count = sum(1 for a in anomalies if a.severity == severity)
            if count:
                parts.append(f"  - {count} {severity.value}")

        total_impact = sum(a.impact for a in anomalies)
        parts.append(f"Total impact: ${total_impact:,.2f}")

        return "\n".join(parts)
