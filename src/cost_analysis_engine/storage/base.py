"""Storage interface for anomalies, recommendations and optimization jobs."""

from abc import ABC, abstractmethod

from cost_analysis_engine.storage.models import (
    CostAnomaly,
    CostOptimizationJob,
    CostOptimizationRecommendation,
)


class Storage(ABC):
    """
    Keyed registry of engine entities.

    Every write targets exactly one identifier, so implementations only need
    per-entry consistency. Concurrent writers to the same entry: last writer wins.
    """

    # =========================================================================
    # Anomalies
    # =========================================================================

    @abstractmethod
    def put_anomaly(self, anomaly: CostAnomaly) -> None:
        """Insert or replace an anomaly."""

    @abstractmethod
    def get_anomaly(self, anomaly_id: str) -> CostAnomaly | None:
        """Get an anomaly by id, or None."""

    @abstractmethod
    def list_anomalies(self, organization_id: str) -> list[CostAnomaly]:
        """All anomalies owned by an organization, in no particular order."""

    # =========================================================================
    # Recommendations
    # =========================================================================

    @abstractmethod
    def put_recommendation(self, recommendation: CostOptimizationRecommendation) -> None:
        """Insert or replace a recommendation."""

    @abstractmethod
    def get_recommendation(self, recommendation_id: str) -> CostOptimizationRecommendation | None:
        """Get a recommendation by id, or None."""

    @abstractmethod
    def list_recommendations(self, organization_id: str) -> list[CostOptimizationRecommendation]:
        """All recommendations owned by an organization, in no particular order."""

    # =========================================================================
    # Jobs
    # =========================================================================

    @abstractmethod
    def put_job(self, job: CostOptimizationJob) -> None:
        """Insert or replace an optimization job."""

    @abstractmethod
    def get_job(self, job_id: str) -> CostOptimizationJob | None:
        """Get a job by id, or None."""

    @abstractmethod
    def list_jobs(self, organization_id: str) -> list[CostOptimizationJob]:
        """All jobs started for an organization, in no particular order."""

    def batch_put_recommendations(
        self, recommendations: list[CostOptimizationRecommendation]
    ) -> None:
        """Store multiple recommendations."""
        for recommendation in recommendations:
            self.put_recommendation(recommendation)
