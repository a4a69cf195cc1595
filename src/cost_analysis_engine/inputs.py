"""Input records produced by the upstream ingestion pipeline."""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Any


@dataclass(frozen=True)
class CostDataPoint:
    """One billed-cost observation for a resource."""

    timestamp: datetime
    amount: float
    resource_id: str
    resource_type: str = ""
    service_type: str = ""
    provider: str = "aws"
    region: str = ""
    account_id: str = ""
    currency: str = "USD"
    tags: dict[str, str] = field(default_factory=dict)
    id: str | None = None
    usage_type: str | None = None
    usage_quantity: float | None = None
    usage_unit: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def day(self) -> date:
        """UTC calendar date of the observation."""
        if self.timestamp.tzinfo is None:
            return self.timestamp.date()
        return self.timestamp.astimezone(UTC).date()


@dataclass(frozen=True)
class MetricStatistics:
    """Summary statistics for a percentage metric (CPU, memory, disk)."""

    average: float
    peak: float = 0.0
    p95: float = 0.0


@dataclass(frozen=True)
class NetworkTraffic:
    """Traffic statistics for one direction."""

    average: float
    peak: float = 0.0


@dataclass(frozen=True)
class NetworkMetrics:
    """Inbound and outbound traffic."""

    inbound: NetworkTraffic
    outbound: NetworkTraffic


@dataclass(frozen=True)
class IopsMetrics:
    """Disk read and write operations."""

    read: NetworkTraffic
    write: NetworkTraffic


@dataclass(frozen=True)
class UtilizationMetrics:
    """Optional utilization metrics for a resource."""

    cpu: MetricStatistics | None = None
    memory: MetricStatistics | None = None
    disk: MetricStatistics | None = None
    network: NetworkMetrics | None = None
    iops: IopsMetrics | None = None


@dataclass(frozen=True)
class ResourceUtilization:
    """Per-resource utilization summary over a time window."""

    resource_id: str
    resource_type: str
    metrics: UtilizationMetrics
    period_start: datetime
    period_end: datetime
    data_points: int = 0

    # Missing metrics read as zero

    @property
    def cpu_average(self) -> float:
        return self.metrics.cpu.average if self.metrics.cpu else 0.0

    @property
    def memory_average(self) -> float:
        return self.metrics.memory.average if self.metrics.memory else 0.0

    @property
    def network_in_average(self) -> float:
        return self.metrics.network.inbound.average if self.metrics.network else 0.0

    @property
    def network_out_average(self) -> float:
        return self.metrics.network.outbound.average if self.metrics.network else 0.0

    @property
    def observation_days(self) -> int:
        """Whole days covered by the utilization window."""
        return max((self.period_end - self.period_start).days, 0)
