"""Anomaly detection, optimization recommendations and summaries."""

from cost_analysis_engine.analysis.anomaly_detector import AnomalyDetector
from cost_analysis_engine.analysis.baseline import Baseline, BaselineCalculator
from cost_analysis_engine.analysis.recommender import OptimizationRecommender
from cost_analysis_engine.analysis.rules import (
    IdleResourceRule,
    OptimizationRule,
    ReservedInstanceRule,
    RightsizingRule,
    default_rules,
)
from cost_analysis_engine.analysis.summary import REPORTING_WINDOW_DAYS, generate_analysis_summary

__all__ = [
    "AnomalyDetector",
    "Baseline",
    "BaselineCalculator",
    "OptimizationRecommender",
    "OptimizationRule",
    "RightsizingRule",
    "IdleResourceRule",
    "ReservedInstanceRule",
    "default_rules",
    "generate_analysis_summary",
    "REPORTING_WINDOW_DAYS",
]
