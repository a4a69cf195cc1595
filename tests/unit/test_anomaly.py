"""Tests for anomaly detection module."""

from datetime import UTC, date, datetime, timedelta

import pytest

from cost_analysis_engine.analysis.anomaly_detector import AnomalyDetector
from cost_analysis_engine.analysis.baseline import BaselineCalculator
from cost_analysis_engine.config.schema import AnomalyDetectionConfig, LifecycleConfig
from cost_analysis_engine.errors import AnalysisFailure, InvalidStatusTransitionError, NotFoundError
from cost_analysis_engine.inputs import CostDataPoint
from cost_analysis_engine.storage.models import (
    AnomalyPattern,
    AnomalyStatus,
    CostAnomaly,
    Severity,
)
from tests.factories import make_cost_point, make_daily_series


def alternating(low: float, high: float, days: int = 28) -> list[float]:
    """Baseline days alternating between two amounts."""
    return [low if i % 2 == 0 else high for i in range(days)]


def create_anomaly(
    organization_id: str = "org-1",
    day: date = date(2024, 1, 31),
    severity: Severity = Severity.HIGH,
    status: AnomalyStatus = AnomalyStatus.DETECTED,
    detected_offset: int = 0,
) -> CostAnomaly:
    """Helper to create a stored-shape anomaly."""
    return CostAnomaly(
        organization_id=organization_id,
        resource_id="r1",
        detected_at=datetime(2024, 2, 1, tzinfo=UTC) + timedelta(minutes=detected_offset),
        start_date=day,
        end_date=day,
        expected_cost=400.0,
        actual_cost=900.0,
        deviation=500.0,
        deviation_percentage=125.0,
        impact=500.0,
        severity=severity,
        status=status,
        pattern=AnomalyPattern.SPIKE,
    )


class TestBaselineCalculator:
    """Tests for BaselineCalculator."""

    def test_empty_amounts(self):
        """Test baseline with no data."""
        baseline = BaselineCalculator().calculate([])
        assert baseline.mean == 0
        assert baseline.sample_count == 0

    def test_recent_days_excluded(self):
        """Test that the most recent days do not feed the baseline."""
        baseline = BaselineCalculator(exclude_recent=3).calculate([10, 10, 10, 10, 1000, 1000, 1000])
        assert baseline.mean == 10
        assert baseline.std == 0
        assert baseline.sample_count == 4

    def test_population_std(self):
        """Test that the standard deviation is the population one."""
        baseline = BaselineCalculator(exclude_recent=0).calculate([380, 420, 380, 420])
        assert baseline.mean == 400
        assert baseline.std == pytest.approx(20)

    def test_trend_direction(self):
        """Test slope sign for rising and falling costs."""
        calc = BaselineCalculator(exclude_recent=0)
        assert calc.calculate([1, 2, 3, 4, 5]).trend == pytest.approx(1)
        assert calc.calculate([5, 4, 3, 2, 1]).trend == pytest.approx(-1)

    def test_deviation_with_flat_baseline(self):
        """Test that a zero std baseline reports zero std devs."""
        baseline = BaselineCalculator(exclude_recent=0).calculate([100, 100, 100])
        assert baseline.deviation_in_std_devs(5000) == 0


class TestDetectAnomalies:
    """Tests for AnomalyDetector.detect_anomalies."""

    @pytest.fixture
    def detector(self, storage):
        """Create a detector with default config."""
        return AnomalyDetector(storage)

    def test_final_day_spike_is_critical(self, detector, spike_series):
        """Test the $900 day against a $400 +/- $20 baseline."""
        anomalies = detector.detect_anomalies("org-1", spike_series)

        assert len(anomalies) == 1
        anomaly = anomalies[0]
        assert anomaly.actual_cost == 900
        assert anomaly.expected_cost == pytest.approx(400)
        assert anomaly.severity == Severity.CRITICAL
        assert anomaly.pattern == AnomalyPattern.SPIKE
        assert anomaly.status == AnomalyStatus.DETECTED
        assert anomaly.start_date == anomaly.end_date == date(2024, 1, 31)
        assert anomaly.organization_id == "org-1"
        assert anomaly.resource_id == "r1"
        assert anomaly.metadata["deviation_in_std_devs"] == pytest.approx(25)

    def test_deviation_fields_consistent(self, detector, spike_series):
        """Test deviation == |actual - expected| and the percentage."""
        anomaly = detector.detect_anomalies("org-1", spike_series)[0]
        assert anomaly.deviation == pytest.approx(abs(anomaly.actual_cost - anomaly.expected_cost))
        assert anomaly.deviation_percentage == pytest.approx(
            anomaly.deviation / anomaly.expected_cost * 100
        )
        assert anomaly.impact == anomaly.deviation

    def test_anomalies_are_stored(self, detector, storage, spike_series):
        """Test that detected anomalies land in the registry."""
        anomalies = detector.detect_anomalies("org-1", spike_series)
        assert storage.get_anomaly(anomalies[0].id) is not None
        assert len(storage.list_anomalies("org-1")) == 1

    def test_repeated_runs_never_overwrite(self, detector, storage, spike_series):
        """Test that each run adds fresh anomalies."""
        detector.detect_anomalies("org-1", spike_series)
        detector.detect_anomalies("org-1", spike_series)
        assert len(storage.list_anomalies("org-1")) == 2

    def test_stable_costs(self, detector):
        """Test that stable costs don't trigger anomalies."""
        samples = make_daily_series("r1", alternating(380, 420) + [410, 390, 400])
        assert detector.detect_anomalies("org-1", samples) == []

    def test_std_test_alone_does_not_flag(self, detector):
        """Test a many-sigma deviation that is below the minimum amount."""
        samples = make_daily_series("r1", alternating(99, 101) + [100, 100, 150])
        assert detector.detect_anomalies("org-1", samples) == []

        flagged = detector.detect_anomalies("org-1", samples, minimum_anomaly_amount=40)
        assert len(flagged) == 1

    def test_amount_test_alone_does_not_flag(self, detector):
        """Test a large deviation that is within the std threshold."""
        # mean 400, std 100; 550 deviates by $150 but only 1.5 std devs
        samples = make_daily_series("r1", alternating(300, 500) + [400, 400, 550])
        assert detector.detect_anomalies("org-1", samples) == []

        flagged = detector.detect_anomalies("org-1", samples, sensitivity_threshold=1.5)
        assert len(flagged) == 1

    def test_flat_baseline_never_flags(self, detector):
        """Test that a zero std baseline yields no anomalies."""
        samples = make_daily_series("r1", [100.0] * 28 + [100, 100, 5000])
        assert detector.detect_anomalies("org-1", samples) == []

    def test_too_few_samples(self, detector):
        """Test that fewer than 7 samples is a no-result outcome."""
        samples = make_daily_series("r1", [100, 100, 100, 100, 100, 5000])
        assert detector.detect_anomalies("org-1", samples) == []

    def test_too_few_days(self, detector):
        """Test that many samples over fewer than 7 days is a no-result outcome."""
        samples = [
            make_cost_point("r1", 100.0 if day < 5 else 5000.0, day, hour)
            for day in range(6)
            for hour in (6, 18)
        ]
        assert len(samples) >= 7
        assert detector.detect_anomalies("org-1", samples) == []

    def test_empty_input(self, detector):
        """Test that no samples is valid."""
        assert detector.detect_anomalies("org-1", []) == []

    def test_samples_summed_per_day(self, detector):
        """Test that several samples on one day are bucketed together."""
        baseline = make_daily_series("r1", alternating(380, 420) + [400, 400])
        final_day = [make_cost_point("r1", 450.0, 30, hour) for hour in (1, 13)]
        anomalies = detector.detect_anomalies("org-1", baseline + final_day)

        assert len(anomalies) == 1
        assert anomalies[0].actual_cost == 900

    def test_unsorted_input(self, detector, spike_series):
        """Test that sample order does not matter."""
        anomalies = detector.detect_anomalies("org-1", list(reversed(spike_series)))
        assert len(anomalies) == 1
        assert anomalies[0].start_date == date(2024, 1, 31)

    def test_resources_analyzed_independently(self, detector, spike_series):
        """Test that a quiet resource does not dilute a noisy one."""
        quiet = make_daily_series("r2", [50.0] * 31)
        anomalies = detector.detect_anomalies("org-1", spike_series + quiet)
        assert [a.resource_id for a in anomalies] == ["r1"]

    def test_drop_below_baseline(self, detector):
        """Test that a sharp drop is flagged as a trend."""
        samples = make_daily_series("r1", alternating(380, 420) + [400, 400, 100])
        anomalies = detector.detect_anomalies("org-1", samples)

        assert len(anomalies) == 1
        assert anomalies[0].pattern == AnomalyPattern.TREND
        assert anomalies[0].severity == Severity.CRITICAL

    def test_empty_organization_rejected(self, detector, spike_series):
        """Test that an organization id is required."""
        with pytest.raises(ValueError):
            detector.detect_anomalies("", spike_series)

    def test_malformed_input_is_analysis_failure(self, detector):
        """Test that mixing naive and aware timestamps surfaces as AnalysisFailure."""
        samples = make_daily_series("r1", [100.0] * 8)
        samples.append(
            CostDataPoint(timestamp=datetime(2024, 1, 3), amount=10.0, resource_id="r1")
        )
        with pytest.raises(AnalysisFailure):
            detector.detect_anomalies("org-1", samples)

    def test_lookback_recorded(self, detector, spike_series):
        """Test that lookback days are carried as metadata."""
        anomaly = detector.detect_anomalies("org-1", spike_series, lookback_days=14)[0]
        assert anomaly.metadata["lookback_days"] == 14


class TestClassification:
    """Tests for severity and pattern ladders."""

    @pytest.fixture
    def detector(self, storage):
        return AnomalyDetector(storage)

    @pytest.mark.parametrize(
        "std_devs,expected",
        [
            (4.0, Severity.CRITICAL),
            (3.5, Severity.HIGH),
            (3.0, Severity.HIGH),
            (2.7, Severity.MEDIUM),
            (2.5, Severity.MEDIUM),
            (2.0, Severity.LOW),
        ],
    )
    def test_severity_levels(self, detector, std_devs, expected):
        """Test anomaly severity assignment."""
        assert detector._calculate_severity(std_devs) == expected

    def test_configured_severity_levels(self, storage):
        """Test that the ladder follows configuration."""
        config = AnomalyDetectionConfig(alert_thresholds={"critical": 10, "high": 8, "medium": 6})
        detector = AnomalyDetector(storage, config)
        assert detector._calculate_severity(9) == Severity.HIGH

    @pytest.mark.parametrize(
        "actual,expected",
        [
            (250, AnomalyPattern.SPIKE),
            (200, AnomalyPattern.STEP_CHANGE),
            (160, AnomalyPattern.STEP_CHANGE),
            (150, AnomalyPattern.TREND),
            (20, AnomalyPattern.TREND),
        ],
    )
    def test_patterns(self, actual, expected):
        """Test shape classification against an expected cost of 100."""
        assert AnomalyDetector._classify_pattern(actual, 100) == expected


class TestGetAnomalies:
    """Tests for AnomalyDetector.get_anomalies."""

    @pytest.fixture
    def detector(self, storage):
        storage.put_anomaly(create_anomaly(severity=Severity.LOW, detected_offset=1))
        storage.put_anomaly(
            create_anomaly(
                severity=Severity.CRITICAL,
                status=AnomalyStatus.RESOLVED,
                day=date(2024, 1, 20),
                detected_offset=3,
            )
        )
        storage.put_anomaly(create_anomaly(severity=Severity.HIGH, detected_offset=2))
        storage.put_anomaly(create_anomaly(organization_id="org-2", detected_offset=9))
        return AnomalyDetector(storage)

    def test_newest_first(self, detector):
        """Test ordering by detection time, newest first."""
        anomalies = detector.get_anomalies("org-1")
        assert [a.severity for a in anomalies] == [Severity.CRITICAL, Severity.HIGH, Severity.LOW]

    def test_organization_isolation(self, detector):
        """Test that other organizations' anomalies are never returned."""
        assert len(detector.get_anomalies("org-2")) == 1
        assert detector.get_anomalies("org-3") == []

    def test_filters(self, detector):
        """Test status, severity and date filters."""
        assert len(detector.get_anomalies("org-1", status=AnomalyStatus.DETECTED)) == 2
        assert len(detector.get_anomalies("org-1", severity=Severity.LOW)) == 1
        assert len(detector.get_anomalies("org-1", start_date=date(2024, 1, 25))) == 2
        assert len(detector.get_anomalies("org-1", end_date=date(2024, 1, 25))) == 1

    def test_limit(self, detector):
        """Test that limit keeps the newest."""
        anomalies = detector.get_anomalies("org-1", limit=1)
        assert len(anomalies) == 1
        assert anomalies[0].severity == Severity.CRITICAL

    def test_idempotent(self, detector):
        """Test that two reads without a write agree."""
        first = [a.id for a in detector.get_anomalies("org-1")]
        second = [a.id for a in detector.get_anomalies("org-1")]
        assert first == second


class TestUpdateAnomalyStatus:
    """Tests for AnomalyDetector.update_anomaly_status."""

    @pytest.fixture
    def anomaly(self, storage):
        anomaly = create_anomaly()
        storage.put_anomaly(anomaly)
        return anomaly

    def test_resolve_stamps_resolution(self, storage, anomaly):
        """Test that resolving records who, when and why."""
        detector = AnomalyDetector(storage)
        updated = detector.update_anomaly_status(
            anomaly.id,
            AnomalyStatus.RESOLVED,
            resolved_by="user-1",
            resolution_summary="Batch job rerun",
            root_cause="Duplicate batch",
        )

        assert updated.status == AnomalyStatus.RESOLVED
        assert updated.resolved_at is not None
        assert updated.resolved_by == "user-1"
        assert updated.resolution_summary == "Batch job rerun"
        assert updated.root_cause == "Duplicate batch"
        assert storage.get_anomaly(anomaly.id).status == AnomalyStatus.RESOLVED

    def test_assignment(self, storage, anomaly):
        """Test that assignment does not stamp resolution."""
        detector = AnomalyDetector(storage)
        updated = detector.update_anomaly_status(
            anomaly.id, AnomalyStatus.INVESTIGATING, assigned_to="user-2"
        )
        assert updated.assigned_to == "user-2"
        assert updated.resolved_at is None

    def test_unknown_id(self, storage):
        """Test that an unknown id raises NotFoundError naming the id."""
        detector = AnomalyDetector(storage)
        with pytest.raises(NotFoundError, match="missing-id"):
            detector.update_anomaly_status("missing-id", AnomalyStatus.RESOLVED)

    def test_any_transition_by_default(self, storage, anomaly):
        """Test that a resolved anomaly may go back to detected."""
        detector = AnomalyDetector(storage)
        detector.update_anomaly_status(anomaly.id, AnomalyStatus.RESOLVED)
        updated = detector.update_anomaly_status(anomaly.id, AnomalyStatus.DETECTED)
        assert updated.status == AnomalyStatus.DETECTED

    def test_strict_transitions(self, storage, anomaly):
        """Test that strict mode rejects reverting a resolved anomaly."""
        detector = AnomalyDetector(
            storage, lifecycle=LifecycleConfig(enforce_status_transitions=True)
        )
        detector.update_anomaly_status(anomaly.id, AnomalyStatus.RESOLVED)
        with pytest.raises(InvalidStatusTransitionError):
            detector.update_anomaly_status(anomaly.id, AnomalyStatus.DETECTED)


class TestAnomalySummary:
    """Tests for the text summary."""

    def test_no_anomalies(self, storage):
        assert AnomalyDetector(storage).get_anomaly_summary([]) == "No anomalies detected."

    def test_counts_and_impact(self, storage):
        summary = AnomalyDetector(storage).get_anomaly_summary(
            [create_anomaly(severity=Severity.CRITICAL), create_anomaly(severity=Severity.LOW)]
        )
        assert "Detected 2 anomalies" in summary
        assert "1 critical" in summary
        assert "1 low" in summary
        assert "$1,000.00" in summary
