"""Pytest configuration and fixtures."""

import pytest

from cost_analysis_engine.storage.memory import InMemoryStorage
from tests.factories import make_daily_series


@pytest.fixture
def storage():
    """Empty in-memory storage."""
    return InMemoryStorage()


@pytest.fixture
def spike_series():
    """
    31 days for r1: 28 baseline days alternating $380/$420 (mean 400, std 20),
    then $400, $400 and a final-day spend of $900.
    """
    baseline = [380.0 if i % 2 == 0 else 420.0 for i in range(28)]
    return make_daily_series("r1", baseline + [400.0, 400.0, 900.0])


@pytest.fixture
def sample_config_dict():
    """Sample configuration dictionary."""
    return {
        "project_name": "test-engine",
        "environment": "dev",
        "anomaly_detection": {
            "sensitivity_threshold": 2.5,
            "minimum_anomaly_amount": 50,
            "lookback_days": 14,
            "alert_thresholds": {"critical": 5.0, "high": 4.0, "medium": 3.0},
        },
        "analysis": {"minimum_savings_threshold": 10},
        "rightsizing": {"cpu_threshold": 25, "memory_threshold": 30},
        "reporting": {"window_days": 7},
    }
