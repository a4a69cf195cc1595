"""Organization-level rollup of optimization recommendations."""

from __future__ import annotations

from collections import defaultdict
from datetime import UTC, datetime, timedelta

from cost_analysis_engine.storage.base import Storage
from cost_analysis_engine.storage.models import (
    AnalysisPeriod,
    CostOptimizationAnalysis,
    CostOptimizationRecommendation,
    WastefulResource,
)

# Display window only: recommendations are not filtered by age
REPORTING_WINDOW_DAYS = 30

TOP_WASTEFUL_RESOURCES = 10


def generate_analysis_summary(
    storage: Storage,
    organization_id: str,
    window_days: int = REPORTING_WINDOW_DAYS,
    top_n: int = TOP_WASTEFUL_RESOURCES,
    currency: str = "USD",
) -> CostOptimizationAnalysis:
    """
    Summarize every recommendation an organization currently has.

    Args:
        storage: Registry to read recommendations from.
        organization_id: Organization to summarize.
        window_days: Length of the reported period, ending now.
        top_n: Number of wasteful resources to list.
        currency: Currency label of the totals.

    Returns:
        A point-in-time analysis; not stored.
    """
    recommendations = storage.list_recommendations(organization_id)
    recommendations.sort(key=lambda r: (r.savings_amount, r.id), reverse=True)

    total_cost = sum(r.current_cost for r in recommendations)
    potential_savings = sum(r.savings_amount for r in recommendations)
    savings_percentage = potential_savings / total_cost * 100 if total_cost > 0 else 0.0

    savings_by_category: dict[str, float] = defaultdict(float)
    savings_by_type: dict[str, float] = defaultdict(float)
    savings_by_confidence: dict[str, float] = {"high": 0.0, "medium": 0.0, "low": 0.0}

    for rec in recommendations:
        savings_by_category[rec.category.value] += rec.savings_amount
        savings_by_type[rec.recommendation_type.value] += rec.savings_amount
        savings_by_confidence[rec.confidence.value] += rec.savings_amount

    now = datetime.now(UTC)

    return CostOptimizationAnalysis(
        organization_id=organization_id,
        generated_at=now,
        period=AnalysisPeriod(start_date=now - timedelta(days=window_days), end_date=now),
        total_cost=total_cost,
        potential_savings=potential_savings,
        potential_savings_percentage=savings_percentage,
        currency=currency,
        recommendations=recommendations,
        savings_by_category=dict(savings_by_category),
        savings_by_type=dict(savings_by_type),
        savings_by_confidence=savings_by_confidence,
        top_wasteful_resources=_top_wasteful_resources(recommendations, top_n),
        metadata={
            "analysis_method": "utilization_based",
            "recommendations_count": len(recommendations),
        },
    )


def _top_wasteful_resources(
    recommendations: list[CostOptimizationRecommendation],
    top_n: int,
) -> list[WastefulResource]:
    """One entry per recommendation, ranked by the cost it would save."""
    resources = [
        WastefulResource(
            resource_id=rec.resource_id,
            resource_type=rec.resource_type,
            cost=rec.current_cost,
            wasted_cost=rec.savings_amount,
            wasted_percentage=(
                rec.savings_amount / rec.current_cost * 100 if rec.current_cost > 0 else 0.0
            ),
        )
        for rec in recommendations
    ]
    resources.sort(key=lambda r: r.wasted_cost, reverse=True)
    return resources[:top_n]
