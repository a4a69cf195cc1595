"""Pydantic configuration schema for the cost analysis engine."""

from typing import Literal

from pydantic import BaseModel, Field


class AlertThresholdsConfig(BaseModel):
    """Severity ladder, in standard deviations from the baseline mean."""

    critical: float = Field(default=4.0, ge=0)
    high: float = Field(default=3.0, ge=0)
    medium: float = Field(default=2.5, ge=0)


class AnomalyDetectionConfig(BaseModel):
    """Anomaly detection configuration."""

    sensitivity_threshold: float = Field(default=2.0, gt=0)  # Standard deviations
    minimum_anomaly_amount: float = Field(default=100.0, ge=0)  # Currency units
    lookback_days: int = Field(default=30, ge=1, le=365)  # Advisory only
    minimum_data_points: int = Field(default=7, ge=1)
    recent_days: int = Field(default=3, ge=1)
    alert_thresholds: AlertThresholdsConfig = Field(default_factory=AlertThresholdsConfig)


class AnalysisConfig(BaseModel):
    """Optimization analysis configuration."""

    minimum_savings_threshold: float = Field(default=0.0, ge=0)


class RightsizingConfig(BaseModel):
    """Rightsizing rule configuration."""

    enabled: bool = True
    cpu_threshold: float = Field(default=20.0, ge=0, le=100)  # Percentage
    memory_threshold: float = Field(default=20.0, ge=0, le=100)  # Percentage
    savings_estimate: float = Field(default=30.0, ge=0, le=100)  # Percentage


class IdleDetectionConfig(BaseModel):
    """Idle resource rule configuration."""

    enabled: bool = True
    cpu_threshold: float = Field(default=5.0, ge=0, le=100)  # Percentage
    network_threshold: float = Field(default=1000.0, ge=0)  # Bytes
    savings_estimate: float = Field(default=100.0, ge=0, le=100)  # Percentage


class ReservedInstanceConfig(BaseModel):
    """Reserved instance rule configuration."""

    enabled: bool = True
    savings_estimate: float = Field(default=40.0, ge=0, le=100)  # Percentage
    recommended_term: int = Field(default=12, ge=1, le=60)  # Months
    payment_option: Literal["no_upfront", "partial_upfront", "all_upfront"] = "partial_upfront"


class ReportingConfig(BaseModel):
    """Analysis summary configuration."""

    window_days: int = Field(default=30, ge=1, le=365)
    top_wasteful_resources: int = Field(default=10, ge=1)


class LifecycleConfig(BaseModel):
    """Status lifecycle configuration."""

    enforce_status_transitions: bool = False


class StorageConfig(BaseModel):
    """Registry backend configuration."""

    backend: Literal["memory", "dynamodb"] = "memory"
    table_name: str | None = None


class Config(BaseModel):
    """Root configuration for the cost analysis engine."""

    project_name: str = "cost-analysis-engine"
    environment: Literal["dev", "staging", "prod"] = "dev"
    currency: str = "USD"

    storage: StorageConfig = Field(default_factory=StorageConfig)
    anomaly_detection: AnomalyDetectionConfig = Field(default_factory=AnomalyDetectionConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    rightsizing: RightsizingConfig = Field(default_factory=RightsizingConfig)
    idle_detection: IdleDetectionConfig = Field(default_factory=IdleDetectionConfig)
    reserved_instances: ReservedInstanceConfig = Field(default_factory=ReservedInstanceConfig)
    reporting: ReportingConfig = Field(default_factory=ReportingConfig)
    lifecycle: LifecycleConfig = Field(default_factory=LifecycleConfig)
