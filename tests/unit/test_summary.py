"""Tests for the organization analysis summary."""

from datetime import timedelta

import pytest

from cost_analysis_engine.analysis.recommender import OptimizationRecommender
from cost_analysis_engine.analysis.summary import REPORTING_WINDOW_DAYS, generate_analysis_summary
from cost_analysis_engine.storage.models import RecommendationType
from tests.factories import make_cost_point, make_utilization


@pytest.fixture
def recommender(storage):
    return OptimizationRecommender(storage)


class TestGenerateAnalysisSummary:
    """Tests for generate_analysis_summary."""

    def test_totals_and_groupings(self, recommender, storage):
        """Test rightsizing + reserved on $500 and idle + reserved on $50."""
        recommender.analyze_and_optimize(
            "org-1",
            [make_cost_point("r1", 500.0), make_cost_point("r2", 50.0)],
            [
                make_utilization("r1", cpu=10, memory=10, network_in=5000, network_out=5000),
                make_utilization("r2", cpu=2, memory=50),
            ],
            user_id="user-1",
        )

        summary = generate_analysis_summary(storage, "org-1")

        assert len(summary.recommendations) == 4
        assert summary.total_cost == pytest.approx(500 + 500 + 50 + 50)
        assert summary.potential_savings == pytest.approx(150 + 200 + 50 + 20)
        assert summary.potential_savings_percentage == pytest.approx(420 / 1100 * 100)
        assert summary.savings_by_category == pytest.approx(
            {"compute": 200.0, "reservation": 220.0}
        )
        assert summary.savings_by_type == pytest.approx(
            {"rightsizing": 150.0, "idle_resource": 50.0, "reserved_instance": 220.0}
        )
        assert summary.savings_by_confidence == pytest.approx(
            {"high": 370.0, "medium": 50.0, "low": 0.0}
        )
        assert summary.metadata["recommendations_count"] == 4

    def test_recommendations_sorted_by_savings(self, recommender, storage):
        """Test that embedded recommendations are largest savings first."""
        recommender.analyze_and_optimize(
            "org-1",
            [make_cost_point("r1", 500.0)],
            [make_utilization("r1", cpu=10, memory=10, network_in=5000, network_out=5000)],
            user_id="user-1",
        )
        summary = generate_analysis_summary(storage, "org-1")
        assert [r.recommendation_type for r in summary.recommendations] == [
            RecommendationType.RESERVED_INSTANCE,
            RecommendationType.RIGHTSIZING,
        ]

    def test_top_wasteful_resources_cutoff(self, recommender, storage):
        """Test that only the ten largest savers are listed."""
        recommender.analyze_and_optimize(
            "org-1",
            [make_cost_point(f"r{i}", i * 100.0) for i in range(1, 13)],
            [make_utilization(f"r{i}", cpu=10, memory=10) for i in range(1, 13)],
            user_id="user-1",
            include_types=[RecommendationType.RIGHTSIZING],
        )

        summary = generate_analysis_summary(storage, "org-1")

        assert len(summary.recommendations) == 12
        assert len(summary.top_wasteful_resources) == 10
        top = summary.top_wasteful_resources[0]
        assert top.resource_id == "r12"
        assert top.cost == pytest.approx(1200)
        assert top.wasted_cost == pytest.approx(360)
        assert top.wasted_percentage == pytest.approx(30)
        assert {r.resource_id for r in summary.top_wasteful_resources}.isdisjoint({"r1", "r2"})

    def test_top_n_override(self, recommender, storage):
        """Test a shorter wasteful resource list."""
        recommender.analyze_and_optimize(
            "org-1",
            [make_cost_point(f"r{i}", i * 100.0) for i in range(1, 4)],
            [make_utilization(f"r{i}", cpu=10, memory=10) for i in range(1, 4)],
            user_id="user-1",
        )
        summary = generate_analysis_summary(storage, "org-1", top_n=2)
        assert len(summary.top_wasteful_resources) == 2

    def test_period_spans_window(self, storage):
        """Test the default 30-day reporting period ending at generation time."""
        summary = generate_analysis_summary(storage, "org-1")

        assert summary.period.end_date == summary.generated_at
        assert summary.period.end_date - summary.period.start_date == timedelta(
            days=REPORTING_WINDOW_DAYS
        )

    def test_custom_window(self, storage):
        """Test an overridden reporting window."""
        summary = generate_analysis_summary(storage, "org-1", window_days=7)
        assert summary.period.end_date - summary.period.start_date == timedelta(days=7)

    def test_empty_organization(self, storage):
        """Test an organization with no recommendations."""
        summary = generate_analysis_summary(storage, "org-empty")

        assert summary.total_cost == 0
        assert summary.potential_savings == 0
        assert summary.potential_savings_percentage == 0
        assert summary.recommendations == []
        assert summary.top_wasteful_resources == []
        assert summary.savings_by_category == {}
        assert summary.savings_by_confidence == {"high": 0.0, "medium": 0.0, "low": 0.0}

    def test_other_organizations_excluded(self, recommender, storage):
        """Test that only the requested organization is summarized."""
        recommender.analyze_and_optimize(
            "org-1",
            [make_cost_point("r1", 500.0)],
            [make_utilization("r1", cpu=10, memory=10)],
            user_id="user-1",
        )
        assert generate_analysis_summary(storage, "org-2").recommendations == []
