"""Builders for test inputs."""

from datetime import UTC, datetime, timedelta

from cost_analysis_engine.inputs import (
    CostDataPoint,
    MetricStatistics,
    NetworkMetrics,
    NetworkTraffic,
    ResourceUtilization,
    UtilizationMetrics,
)

START = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


def make_cost_point(
    resource_id: str,
    amount: float,
    day_offset: int = 0,
    hour: int = 12,
) -> CostDataPoint:
    """Create a cost sample on START + day_offset days."""
    return CostDataPoint(
        timestamp=START.replace(hour=hour) + timedelta(days=day_offset),
        amount=amount,
        resource_id=resource_id,
        resource_type="instance",
        service_type="EC2",
        provider="aws",
        region="us-east-1",
        account_id="123456789012",
        tags={"environment": "production"},
    )


def make_daily_series(resource_id: str, amounts: list[float]) -> list[CostDataPoint]:
    """One cost sample per consecutive day."""
    return [make_cost_point(resource_id, amount, i) for i, amount in enumerate(amounts)]


def make_utilization(
    resource_id: str,
    cpu: float | None = None,
    memory: float | None = None,
    network_in: float | None = None,
    network_out: float | None = None,
) -> ResourceUtilization:
    """Create a 30-day utilization summary with the given averages."""
    network = None
    if network_in is not None or network_out is not None:
        network = NetworkMetrics(
            inbound=NetworkTraffic(average=network_in or 0.0),
            outbound=NetworkTraffic(average=network_out or 0.0),
        )

    return ResourceUtilization(
        resource_id=resource_id,
        resource_type="instance",
        metrics=UtilizationMetrics(
            cpu=MetricStatistics(average=cpu, peak=cpu + 5, p95=cpu + 3) if cpu is not None else None,
            memory=(
                MetricStatistics(average=memory, peak=memory + 5, p95=memory + 3)
                if memory is not None
                else None
            ),
            network=network,
        ),
        period_start=START,
        period_end=START + timedelta(days=30),
        data_points=720,
    )
