"""Cost optimization recommendations and the jobs that produce them."""

from collections import defaultdict
from datetime import UTC, datetime

import structlog

from cost_analysis_engine.analysis.lifecycle import check_transition
from cost_analysis_engine.analysis.rules import OptimizationRule, default_rules
from cost_analysis_engine.analysis.scoring import validate_optimization_parameters
from cost_analysis_engine.config.schema import Config
from cost_analysis_engine.errors import AnalysisFailure, NotFoundError
from cost_analysis_engine.inputs import CostDataPoint, ResourceUtilization
from cost_analysis_engine.storage.base import Storage
from cost_analysis_engine.storage.models import (
    CostOptimizationJob,
    CostOptimizationRecommendation,
    JobStatus,
    RecommendationStatus,
    RecommendationType,
)

logger = structlog.get_logger()


class OptimizationRecommender:
    """
    Generate, store and track cost optimization recommendations.

    Every run is recorded as a CostOptimizationJob, which ends up either
    completed or failed, so the job registry doubles as an audit trail.
    """

    def __init__(
        self,
        storage: Storage,
        config: Config | None = None,
        rules: list[OptimizationRule] | None = None,
    ):
        """
        Initialize the recommender.

        Args:
            storage: Registry for recommendations and jobs.
            config: Engine configuration.
            rules: Analyzers to run per resource. Defaults to the standard set.
        """
        self.storage = storage
        self.config = config or Config()
        self.rules = rules if rules is not None else default_rules(self.config)

    def analyze_and_optimize(
        self,
        organization_id: str,
        cost_samples: list[CostDataPoint],
        utilization_samples: list[ResourceUtilization],
        user_id: str,
        minimum_savings: float | None = None,
        include_types: list[RecommendationType | str] | None = None,
    ) -> CostOptimizationJob:
        """
        Run every enabled rule against every utilization record.

        Args:
            organization_id: Organization the recommendations belong to.
            cost_samples: Cost observations; summed per resource.
            utilization_samples: One utilization summary per resource to analyze.
            user_id: User recorded as the job creator.
            minimum_savings: Drop recommendations saving less. Defaults to config.
            include_types: Only run rules of these types. None runs all.

        Returns:
            The finalized job.

        Raises:
            ValueError: If required arguments are missing or out of range.
            AnalysisFailure: If analysis fails; the job is stored as failed first.
        """
        if not organization_id:
            raise ValueError("organization_id is required")
        if not user_id:
            raise ValueError("user_id is required")

        if minimum_savings is None:
            minimum_savings = self.config.analysis.minimum_savings_threshold
        validate_optimization_parameters(minimum_savings=minimum_savings)

        types = None
        if include_types is not None:
            types = {RecommendationType(t) for t in include_types}

        job = CostOptimizationJob(
            organization_id=organization_id,
            created_by=user_id,
            currency=self.config.currency,
            metadata={
                "minimum_savings": minimum_savings,
                "include_types": sorted(t.value for t in types) if types is not None else None,
            },
        )
        self.storage.put_job(job)

        logger.info(
            "optimization_analysis_started",
            organization_id=organization_id,
            job_id=job.id,
            cost_data_points=len(cost_samples),
            utilization_data_points=len(utilization_samples),
        )

        try:
            recommendations = self._generate_recommendations(
                organization_id, cost_samples, utilization_samples, minimum_savings, types
            )
            self.storage.batch_put_recommendations(recommendations)
        except Exception as e:
            job.status = JobStatus.FAILED
            job.completed_at = datetime.now(UTC)
            job.error = str(e)
            self.storage.put_job(job)

            logger.error(
                "optimization_analysis_failed",
                organization_id=organization_id,
                job_id=job.id,
                error=str(e),
            )
            raise AnalysisFailure(
                f"Failed to analyze costs for organization {organization_id}: {e}"
            ) from e

        job.status = JobStatus.COMPLETED
        job.completed_at = datetime.now(UTC)
        job.resources_analyzed = len(utilization_samples)
        job.recommendations_generated = len(recommendations)
        job.potential_savings = sum(r.savings_amount for r in recommendations)
        self.storage.put_job(job)

        logger.info(
            "optimization_analysis_completed",
            organization_id=organization_id,
            job_id=job.id,
            recommendations_generated=job.recommendations_generated,
            potential_savings=job.potential_savings,
        )

        return job

    def _generate_recommendations(
        self,
        organization_id: str,
        cost_samples: list[CostDataPoint],
        utilization_samples: list[ResourceUtilization],
        minimum_savings: float,
        types: set[RecommendationType] | None,
    ) -> list[CostOptimizationRecommendation]:
        cost_by_resource: dict[str, float] = defaultdict(float)
        for sample in cost_samples:
            cost_by_resource[sample.resource_id] += sample.amount

        rules = [
            rule
            for rule in self.rules
            if rule.enabled and (types is None or rule.recommendation_type in types)
        ]

        recommendations = []
        for utilization in utilization_samples:
            current_cost = cost_by_resource.get(utilization.resource_id, 0.0)

            # No savings percentage can be expressed against zero cost
            if current_cost == 0:
                continue

            for rule in rules:
                recommendation = rule.evaluate(organization_id, utilization, current_cost)
                if recommendation:
                    recommendations.append(recommendation)

        return [r for r in recommendations if r.savings_amount >= minimum_savings]

    def get_recommendations(
        self,
        organization_id: str,
        status: RecommendationStatus | None = None,
        recommendation_type: RecommendationType | None = None,
        limit: int | None = None,
    ) -> list[CostOptimizationRecommendation]:
        """
        Query an organization's recommendations.

        Args:
            organization_id: Owning organization.
            status: Only recommendations in this status.
            recommendation_type: Only recommendations of this type.
            limit: Maximum number of results (ignored unless positive).

        Returns:
            Matching recommendations, largest savings first.
        """
        recommendations = self.storage.list_recommendations(organization_id)

        if status:
            recommendations = [r for r in recommendations if r.status == status]
        if recommendation_type:
            recommendations = [
                r for r in recommendations if r.recommendation_type == recommendation_type
            ]

        recommendations.sort(key=lambda r: (r.savings_amount, r.id), reverse=True)

        if limit and limit > 0:
            recommendations = recommendations[:limit]

        return recommendations

    def get_recommendation(self, recommendation_id: str) -> CostOptimizationRecommendation | None:
        """Get a single recommendation, or None if unknown."""
        return self.storage.get_recommendation(recommendation_id)

    def get_optimization_job(self, job_id: str) -> CostOptimizationJob | None:
        """Get an optimization job, or None if unknown."""
        return self.storage.get_job(job_id)

    def update_recommendation_status(
        self,
        recommendation_id: str,
        status: RecommendationStatus,
        implemented_by: str | None = None,
        dismissed_by: str | None = None,
        dismiss_reason: str | None = None,
        notes: str | None = None,
    ) -> CostOptimizationRecommendation:
        """
        Move a recommendation to a new status.

        Implementing stamps the implementer and time; dismissing stamps the
        dismisser (falling back to implemented_by), the reason and the time.

        Raises:
            NotFoundError: If the recommendation does not exist.
            InvalidStatusTransitionError: If strict transitions are enabled and
                the move is not allowed.
        """
        recommendation = self.storage.get_recommendation(recommendation_id)
        if recommendation is None:
            raise NotFoundError("recommendation", recommendation_id)

        status = RecommendationStatus(status)
        check_transition(
            "recommendation",
            recommendation.status,
            status,
            self.config.lifecycle.enforce_status_transitions,
        )

        now = datetime.now(UTC)
        recommendation.status = status
        recommendation.updated_at = now

        if status == RecommendationStatus.IMPLEMENTED:
            recommendation.implemented_at = now
            recommendation.implemented_by = implemented_by
        elif status == RecommendationStatus.DISMISSED:
            recommendation.dismissed_at = now
            recommendation.dismissed_by = dismissed_by or implemented_by
            recommendation.dismiss_reason = dismiss_reason

        if notes:
            recommendation.metadata["notes"] = notes

        self.storage.put_recommendation(recommendation)

        logger.info(
            "recommendation_status_updated",
            recommendation_id=recommendation_id,
            status=status.value,
            resource_id=recommendation.resource_id,
        )

        return recommendation
