"""Entry point wiring storage, detection, recommendations and summaries together."""

from __future__ import annotations

from datetime import date

from cost_analysis_engine.analysis.anomaly_detector import AnomalyDetector
from cost_analysis_engine.analysis.recommender import OptimizationRecommender
from cost_analysis_engine.analysis.rules import OptimizationRule
from cost_analysis_engine.analysis.summary import generate_analysis_summary
from cost_analysis_engine.config.schema import Config
from cost_analysis_engine.inputs import CostDataPoint, ResourceUtilization
from cost_analysis_engine.storage.base import Storage
from cost_analysis_engine.storage.dynamodb import DynamoDBStorage
from cost_analysis_engine.storage.memory import InMemoryStorage
from cost_analysis_engine.storage.models import (
    AnomalyStatus,
    CostAnomaly,
    CostOptimizationAnalysis,
    CostOptimizationJob,
    CostOptimizationRecommendation,
    RecommendationStatus,
    RecommendationType,
    Severity,
)


def build_storage(config: Config) -> Storage:
    """Create the storage backend named in configuration."""
    if config.storage.backend == "dynamodb":
        if not config.storage.table_name:
            raise ValueError("storage.table_name is required for the dynamodb backend")
        return DynamoDBStorage(config.storage.table_name)
    return InMemoryStorage()


class CostAnalysisEngine:
    """
    Cost anomaly detection and optimization for many organizations.

    The detector and recommender share one storage handle and hold no other
    state, so one engine can serve concurrent calls for different organizations.
    """

    def __init__(
        self,
        config: Config | None = None,
        storage: Storage | None = None,
        rules: list[OptimizationRule] | None = None,
    ):
        self.config = config or Config()
        self.storage = storage or build_storage(self.config)
        self.anomaly_detector = AnomalyDetector(
            self.storage, self.config.anomaly_detection, self.config.lifecycle
        )
        self.recommender = OptimizationRecommender(self.storage, self.config, rules)

    # =========================================================================
    # Anomalies
    # =========================================================================

    def detect_anomalies(
        self,
        organization_id: str,
        cost_samples: list[CostDataPoint],
        sensitivity_threshold: float | None = None,
        minimum_anomaly_amount: float | None = None,
        lookback_days: int | None = None,
    ) -> list[CostAnomaly]:
        return self.anomaly_detector.detect_anomalies(
            organization_id,
            cost_samples,
            sensitivity_threshold=sensitivity_threshold,
            minimum_anomaly_amount=minimum_anomaly_amount,
            lookback_days=lookback_days,
        )

    def get_anomalies(
        self,
        organization_id: str,
        status: AnomalyStatus | None = None,
        severity: Severity | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        limit: int | None = None,
    ) -> list[CostAnomaly]:
        return self.anomaly_detector.get_anomalies(
            organization_id,
            status=status,
            severity=severity,
            start_date=start_date,
            end_date=end_date,
            limit=limit,
        )

    def get_anomaly(self, anomaly_id: str) -> CostAnomaly | None:
        return self.anomaly_detector.get_anomaly(anomaly_id)

    def update_anomaly_status(
        self, anomaly_id: str, status: AnomalyStatus, **fields: str | None
    ) -> CostAnomaly:
        return self.anomaly_detector.update_anomaly_status(anomaly_id, status, **fields)

    # =========================================================================
    # Recommendations
    # =========================================================================

    def analyze_and_optimize(
        self,
        organization_id: str,
        cost_samples: list[CostDataPoint],
        utilization_samples: list[ResourceUtilization],
        user_id: str,
        minimum_savings: float | None = None,
        include_types: list[RecommendationType | str] | None = None,
    ) -> CostOptimizationJob:
        return self.recommender.analyze_and_optimize(
            organization_id,
            cost_samples,
            utilization_samples,
            user_id=user_id,
            minimum_savings=minimum_savings,
            include_types=include_types,
        )

    def get_recommendations(
        self,
        organization_id: str,
        status: RecommendationStatus | None = None,
        recommendation_type: RecommendationType | None = None,
        limit: int | None = None,
    ) -> list[CostOptimizationRecommendation]:
        return self.recommender.get_recommendations(
            organization_id,
            status=status,
            recommendation_type=recommendation_type,
            limit=limit,
        )

    def get_recommendation(self, recommendation_id: str) -> CostOptimizationRecommendation | None:
        return self.recommender.get_recommendation(recommendation_id)

    def update_recommendation_status(
        self, recommendation_id: str, status: RecommendationStatus, **fields: str | None
    ) -> CostOptimizationRecommendation:
        return self.recommender.update_recommendation_status(recommendation_id, status, **fields)

    def get_optimization_job(self, job_id: str) -> CostOptimizationJob | None:
        return self.recommender.get_optimization_job(job_id)

    # =========================================================================
    # Summary
    # =========================================================================

    def generate_analysis_summary(self, organization_id: str) -> CostOptimizationAnalysis:
        """Roll up the organization's current recommendations."""
        return generate_analysis_summary(
            self.storage,
            organization_id,
            window_days=self.config.reporting.window_days,
            top_n=self.config.reporting.top_wasteful_resources,
            currency=self.config.currency,
        )


def create_cost_analysis_services(
    config: Config | None = None,
    storage: Storage | None = None,
) -> CostAnalysisEngine:
    """Create a fully configured engine, loading nothing beyond what is passed in."""
    return CostAnalysisEngine(config=config, storage=storage)
