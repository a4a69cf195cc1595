"""Scoring and formatting helpers for optimization recommendations."""

from typing import Literal

from cost_analysis_engine.storage.models import Rating, RecommendationType

Priority = Literal["critical", "high", "medium", "low"]

_CONFIDENCE_SCORE = {Rating.HIGH: 3, Rating.MEDIUM: 2, Rating.LOW: 1}
_EFFORT_SCORE = {Rating.LOW: 3, Rating.MEDIUM: 2, Rating.HIGH: 1}

_TITLES = {
    RecommendationType.RIGHTSIZING: "Rightsize {resource_type}",
    RecommendationType.IDLE_RESOURCE: "Terminate Idle {resource_type}",
    RecommendationType.RESERVED_INSTANCE: "Purchase Reserved Instance for {resource_type}",
    RecommendationType.SAVINGS_PLAN: "Apply Savings Plan to {resource_type}",
    RecommendationType.STORAGE_OPTIMIZATION: "Optimize {resource_type} Storage",
    RecommendationType.MODERNIZATION: "Modernize {resource_type}",
}


def calculate_annual_savings(monthly_savings: float) -> float:
    """Annualize a monthly savings figure."""
    return monthly_savings * 12


def calculate_savings_percentage(current_cost: float, new_cost: float) -> float:
    """Savings as a percentage of the current cost, 0 when there is no current cost."""
    if current_cost == 0:
        return 0.0
    return (current_cost - new_cost) / current_cost * 100


def determine_recommendation_priority(
    savings_amount: float,
    confidence: Rating,
    effort: Rating,
) -> Priority:
    """Rank a recommendation by savings size, confidence and ease."""
    savings_score = 3 if savings_amount >= 1000 else 2 if savings_amount >= 500 else 1
    total = _CONFIDENCE_SCORE[confidence] + _EFFORT_SCORE[effort] + savings_score

    if total >= 8:
        return "critical"
    if total >= 6:
        return "high"
    if total >= 4:
        return "medium"
    return "low"


def format_recommendation_title(
    recommendation_type: RecommendationType, resource_type: str
) -> str:
    """Human-readable title for a recommendation."""
    template = _TITLES.get(recommendation_type, "Optimize {resource_type}")
    return template.format(resource_type=resource_type)


def calculate_confidence_score(
    data_points: int,
    observation_days: int,
    utilization_variance: float,
) -> Rating:
    """
    Rate how much the utilization data behind a recommendation can be trusted.

    More samples, a longer window and steadier utilization all raise the rating.
    """
    score = 0

    if data_points >= 100:
        score += 3
    elif data_points >= 50:
        score += 2
    elif data_points >= 20:
        score += 1

    if observation_days >= 30:
        score += 3
    elif observation_days >= 14:
        score += 2
    elif observation_days >= 7:
        score += 1

    if utilization_variance <= 0.1:
        score += 3
    elif utilization_variance <= 0.2:
        score += 2
    elif utilization_variance <= 0.3:
        score += 1

    if score >= 7:
        return Rating.HIGH
    if score >= 4:
        return Rating.MEDIUM
    return Rating.LOW


def validate_optimization_parameters(
    minimum_savings: float | None = None,
    lookback_days: int | None = None,
) -> None:
    """
    Validate optimization options.

    Raises:
        ValueError: If any option is out of range.
    """
    if minimum_savings is not None and minimum_savings < 0:
        raise ValueError(f"minimum_savings must be >= 0, got {minimum_savings}")

    if lookback_days is not None and not 1 <= lookback_days <= 365:
        raise ValueError(f"lookback_days must be between 1 and 365, got {lookback_days}")
