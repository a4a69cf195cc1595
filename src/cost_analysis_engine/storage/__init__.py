"""Storage layer for the cost analysis engine."""

from cost_analysis_engine.storage.base import Storage
from cost_analysis_engine.storage.dynamodb import DynamoDBStorage
from cost_analysis_engine.storage.memory import InMemoryStorage
from cost_analysis_engine.storage.models import (
    AnalysisPeriod,
    AnomalyPattern,
    AnomalyStatus,
    CostAnomaly,
    CostOptimizationAnalysis,
    CostOptimizationJob,
    CostOptimizationRecommendation,
    JobStatus,
    PaymentOption,
    Rating,
    RecommendationCategory,
    RecommendationStatus,
    RecommendationType,
    ResourceConfiguration,
    Severity,
    WastefulResource,
)

__all__ = [
    "Storage",
    "InMemoryStorage",
    "DynamoDBStorage",
    "CostAnomaly",
    "CostOptimizationRecommendation",
    "CostOptimizationJob",
    "CostOptimizationAnalysis",
    "AnalysisPeriod",
    "WastefulResource",
    "ResourceConfiguration",
    "Severity",
    "AnomalyStatus",
    "AnomalyPattern",
    "RecommendationType",
    "RecommendationStatus",
    "RecommendationCategory",
    "Rating",
    "JobStatus",
    "PaymentOption",
]
