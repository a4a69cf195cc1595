"""Configuration management for the cost analysis engine."""

from cost_analysis_engine.config.schema import (
    AlertThresholdsConfig,
    AnalysisConfig,
    AnomalyDetectionConfig,
    Config,
    IdleDetectionConfig,
    LifecycleConfig,
    ReportingConfig,
    ReservedInstanceConfig,
    RightsizingConfig,
    StorageConfig,
)
from cost_analysis_engine.config.loader import get_cached_config, load_config

__all__ = [
    "Config",
    "StorageConfig",
    "AnomalyDetectionConfig",
    "AlertThresholdsConfig",
    "AnalysisConfig",
    "RightsizingConfig",
    "IdleDetectionConfig",
    "ReservedInstanceConfig",
    "ReportingConfig",
    "LifecycleConfig",
    "load_config",
    "get_cached_config",
]
