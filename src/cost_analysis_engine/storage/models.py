"""Data models for anomalies, recommendations and optimization jobs."""

import json
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, Field


def _generate_uuid() -> str:
    return str(uuid4())


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _dump_json(value: Any) -> str:
    # DynamoDB rejects Python floats, so nested structures travel as JSON
    return json.dumps(value, default=str, sort_keys=True)


class Severity(str, Enum):
    """Anomaly severity."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class AnomalyStatus(str, Enum):
    """Anomaly investigation status."""

    DETECTED = "detected"
    INVESTIGATING = "investigating"
    RESOLVED = "resolved"
    FALSE_POSITIVE = "false_positive"


class AnomalyPattern(str, Enum):
    """Shape of the deviation."""

    SPIKE = "spike"
    TREND = "trend"
    RECURRING = "recurring"
    STEP_CHANGE = "step_change"


class RecommendationType(str, Enum):
    """Kinds of cost optimization recommendations."""

    RIGHTSIZING = "rightsizing"
    RESERVED_INSTANCE = "reserved_instance"
    SAVINGS_PLAN = "savings_plan"
    IDLE_RESOURCE = "idle_resource"
    STORAGE_OPTIMIZATION = "storage_optimization"
    MODERNIZATION = "modernization"
    REGION_TRANSFER = "region_transfer"
    LICENSE_OPTIMIZATION = "license_optimization"
    INSTANCE_FAMILY_UPGRADE = "instance_family_upgrade"
    GRAVITON_MIGRATION = "graviton_migration"


class RecommendationStatus(str, Enum):
    """Recommendation lifecycle status."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    IMPLEMENTED = "implemented"
    DISMISSED = "dismissed"
    EXPIRED = "expired"


class RecommendationCategory(str, Enum):
    """Area of spend a recommendation targets."""

    COMPUTE = "compute"
    STORAGE = "storage"
    DATABASE = "database"
    NETWORK = "network"
    LICENSING = "licensing"
    RESERVATION = "reservation"
    MODERNIZATION = "modernization"


class Rating(str, Enum):
    """Three-level rating used for confidence, effort and impact."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class JobStatus(str, Enum):
    """Optimization job status."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class PaymentOption(str, Enum):
    """Purchase model of a resource."""

    ON_DEMAND = "on_demand"
    RESERVED = "reserved"
    SAVINGS_PLAN = "savings_plan"
    SPOT = "spot"


class CostAnomaly(BaseModel):
    """
    A day on which a resource's spend deviated from its own baseline.

    DynamoDB Key Structure:
    - PK: ANOMALY#{id}
    - SK: ANOMALY
    - GSI1PK: ORG#{organization_id}#ANOMALY
    """

    id: str = Field(default_factory=_generate_uuid)
    organization_id: str
    resource_id: str | None = None
    resource_type: str | None = None
    service_type: str | None = None
    region: str | None = None
    account_id: str | None = None

    detected_at: datetime = Field(default_factory=_utc_now)
    start_date: date
    end_date: date

    expected_cost: float
    actual_cost: float
    deviation: float
    deviation_percentage: float
    impact: float
    currency: str = "USD"

    status: AnomalyStatus = AnomalyStatus.DETECTED
    severity: Severity
    pattern: AnomalyPattern

    assigned_to: str | None = None
    root_cause: str | None = None
    resolved_at: datetime | None = None
    resolved_by: str | None = None
    resolution_summary: str | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def pk(self) -> str:
        """Generate partition key."""
        return f"ANOMALY#{self.id}"

    @property
    def gsi1pk(self) -> str:
        """Generate organization index key."""
        return f"ORG#{self.organization_id}#ANOMALY"

    def to_dynamodb_item(self) -> dict:
        """Convert to DynamoDB item format."""
        item = {
            "PK": self.pk,
            "SK": "ANOMALY",
            "GSI1PK": self.gsi1pk,
            "GSI1SK": _iso(self.detected_at),
            "id": self.id,
            "organization_id": self.organization_id,
            "detected_at": _iso(self.detected_at),
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "expected_cost": str(self.expected_cost),
            "actual_cost": str(self.actual_cost),
            "deviation": str(self.deviation),
            "deviation_percentage": str(self.deviation_percentage),
            "impact": str(self.impact),
            "currency": self.currency,
            "status": self.status.value,
            "severity": self.severity.value,
            "pattern": self.pattern.value,
            "metadata": _dump_json(self.metadata),
        }

        optional = {
            "resource_id": self.resource_id,
            "resource_type": self.resource_type,
            "service_type": self.service_type,
            "region": self.region,
            "account_id": self.account_id,
            "assigned_to": self.assigned_to,
            "root_cause": self.root_cause,
            "resolved_at": _iso(self.resolved_at),
            "resolved_by": self.resolved_by,
            "resolution_summary": self.resolution_summary,
        }
        item.update({k: v for k, v in optional.items() if v})

        return item

    @classmethod
    def from_dynamodb_item(cls, item: dict) -> "CostAnomaly":
        """Create from DynamoDB item."""
        return cls(
            id=item["id"],
            organization_id=item["organization_id"],
            resource_id=item.get("resource_id"),
            resource_type=item.get("resource_type"),
            service_type=item.get("service_type"),
            region=item.get("region"),
            account_id=item.get("account_id"),
            detected_at=_parse_datetime(item["detected_at"]),
            start_date=date.fromisoformat(item["start_date"]),
            end_date=date.fromisoformat(item["end_date"]),
            expected_cost=float(item["expected_cost"]),
            actual_cost=float(item["actual_cost"]),
            deviation=float(item["deviation"]),
            deviation_percentage=float(item["deviation_percentage"]),
            impact=float(item.get("impact", item["deviation"])),
            currency=item.get("currency", "USD"),
            status=AnomalyStatus(item["status"]),
            severity=Severity(item["severity"]),
            pattern=AnomalyPattern(item["pattern"]),
            assigned_to=item.get("assigned_to"),
            root_cause=item.get("root_cause"),
            resolved_at=_parse_datetime(item.get("resolved_at")),
            resolved_by=item.get("resolved_by"),
            resolution_summary=item.get("resolution_summary"),
            metadata=json.loads(item.get("metadata", "{}")),
        )


class ResourceConfiguration(BaseModel):
    """Provisioned shape of a resource, before or after a recommendation."""

    provider: str = "aws"
    region: str = "us-east-1"
    instance_type: str | None = None
    storage_type: str | None = None
    storage_size: int | None = None
    iops: int | None = None
    throughput: int | None = None
    vcpus: int | None = None
    memory: float | None = None
    network_performance: str | None = None
    operating_system: str | None = None
    tenancy: str | None = None
    payment_option: PaymentOption | None = None
    term: int | None = None  # Months
    attributes: dict[str, Any] = Field(default_factory=dict)


class CostOptimizationRecommendation(BaseModel):
    """
    A proposed cost-reducing change for one resource.

    DynamoDB Key Structure:
    - PK: RECOMMENDATION#{id}
    - SK: RECOMMENDATION
    - GSI1PK: ORG#{organization_id}#RECOMMENDATION
    """

    id: str = Field(default_factory=_generate_uuid)
    organization_id: str
    resource_id: str
    resource_type: str
    recommendation_type: RecommendationType
    title: str
    description: str

    current_configuration: ResourceConfiguration
    recommended_configuration: ResourceConfiguration

    current_cost: float
    recommended_cost: float
    savings_amount: float
    savings_percentage: float
    annual_savings: float
    currency: str = "USD"

    confidence: Rating
    effort: Rating
    impact: Rating
    status: RecommendationStatus = RecommendationStatus.PENDING
    category: RecommendationCategory

    implementation_steps: list[str] = Field(default_factory=list)
    justification: str = ""

    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)
    implemented_at: datetime | None = None
    implemented_by: str | None = None
    dismissed_at: datetime | None = None
    dismissed_by: str | None = None
    dismiss_reason: str | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def pk(self) -> str:
        """Generate partition key."""
        return f"RECOMMENDATION#{self.id}"

    @property
    def gsi1pk(self) -> str:
        """Generate organization index key."""
        return f"ORG#{self.organization_id}#RECOMMENDATION"

    def to_dynamodb_item(self) -> dict:
        """Convert to DynamoDB item format."""
        item = {
            "PK": self.pk,
            "SK": "RECOMMENDATION",
            "GSI1PK": self.gsi1pk,
            "GSI1SK": _iso(self.created_at),
            "id": self.id,
            "organization_id": self.organization_id,
            "resource_id": self.resource_id,
            "resource_type": self.resource_type,
            "recommendation_type": self.recommendation_type.value,
            "title": self.title,
            "description": self.description,
            "current_configuration": self.current_configuration.model_dump_json(),
            "recommended_configuration": self.recommended_configuration.model_dump_json(),
            "current_cost": str(self.current_cost),
            "recommended_cost": str(self.recommended_cost),
            "savings_amount": str(self.savings_amount),
            "savings_percentage": str(self.savings_percentage),
            "annual_savings": str(self.annual_savings),
            "currency": self.currency,
            "confidence": self.confidence.value,
            "effort": self.effort.value,
            "impact": self.impact.value,
            "status": self.status.value,
            "category": self.category.value,
            "implementation_steps": self.implementation_steps,
            "justification": self.justification,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
            "metadata": _dump_json(self.metadata),
        }

        optional = {
            "implemented_at": _iso(self.implemented_at),
            "implemented_by": self.implemented_by,
            "dismissed_at": _iso(self.dismissed_at),
            "dismissed_by": self.dismissed_by,
            "dismiss_reason": self.dismiss_reason,
        }
        item.update({k: v for k, v in optional.items() if v})

        return item

    @classmethod
    def from_dynamodb_item(cls, item: dict) -> "CostOptimizationRecommendation":
        """Create from DynamoDB item."""
        return cls(
            id=item["id"],
            organization_id=item["organization_id"],
            resource_id=item["resource_id"],
            resource_type=item["resource_type"],
            recommendation_type=RecommendationType(item["recommendation_type"]),
            title=item["title"],
            description=item["description"],
            current_configuration=ResourceConfiguration.model_validate_json(
                item["current_configuration"]
            ),
            recommended_configuration=ResourceConfiguration.model_validate_json(
                item["recommended_configuration"]
            ),
            current_cost=float(item["current_cost"]),
            recommended_cost=float(item["recommended_cost"]),
            savings_amount=float(item["savings_amount"]),
            savings_percentage=float(item["savings_percentage"]),
            annual_savings=float(item["annual_savings"]),
            currency=item.get("currency", "USD"),
            confidence=Rating(item["confidence"]),
            effort=Rating(item["effort"]),
            impact=Rating(item["impact"]),
            status=RecommendationStatus(item["status"]),
            category=RecommendationCategory(item["category"]),
            implementation_steps=list(item.get("implementation_steps", [])),
            justification=item.get("justification", ""),
            created_at=_parse_datetime(item["created_at"]),
            updated_at=_parse_datetime(item["updated_at"]),
            implemented_at=_parse_datetime(item.get("implemented_at")),
            implemented_by=item.get("implemented_by"),
            dismissed_at=_parse_datetime(item.get("dismissed_at")),
            dismissed_by=item.get("dismissed_by"),
            dismiss_reason=item.get("dismiss_reason"),
            metadata=json.loads(item.get("metadata", "{}")),
        )


class CostOptimizationJob(BaseModel):
    """
    One run of the recommendation generator.

    DynamoDB Key Structure:
    - PK: JOB#{id}
    - SK: JOB
    - GSI1PK: ORG#{organization_id}#JOB
    """

    id: str = Field(default_factory=_generate_uuid)
    organization_id: str
    status: JobStatus = JobStatus.RUNNING
    started_at: datetime = Field(default_factory=_utc_now)
    completed_at: datetime | None = None
    resources_analyzed: int = 0
    recommendations_generated: int = 0
    potential_savings: float = 0.0
    currency: str = "USD"
    error: str | None = None
    created_by: str
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def pk(self) -> str:
        """Generate partition key."""
        return f"JOB#{self.id}"

    @property
    def gsi1pk(self) -> str:
        """Generate organization index key."""
        return f"ORG#{self.organization_id}#JOB"

    def to_dynamodb_item(self) -> dict:
        """Convert to DynamoDB item format."""
        item = {
            "PK": self.pk,
            "SK": "JOB",
            "GSI1PK": self.gsi1pk,
            "GSI1SK": _iso(self.started_at),
            "id": self.id,
            "organization_id": self.organization_id,
            "status": self.status.value,
            "started_at": _iso(self.started_at),
            "resources_analyzed": self.resources_analyzed,
            "recommendations_generated": self.recommendations_generated,
            "potential_savings": str(self.potential_savings),
            "currency": self.currency,
            "created_by": self.created_by,
            "metadata": _dump_json(self.metadata),
        }

        if self.completed_at:
            item["completed_at"] = _iso(self.completed_at)
        if self.error:
            item["error"] = self.error

        return item

    @classmethod
    def from_dynamodb_item(cls, item: dict) -> "CostOptimizationJob":
        """Create from DynamoDB item."""
        return cls(
            id=item["id"],
            organization_id=item["organization_id"],
            status=JobStatus(item["status"]),
            started_at=_parse_datetime(item["started_at"]),
            completed_at=_parse_datetime(item.get("completed_at")),
            resources_analyzed=int(item.get("resources_analyzed", 0)),
            recommendations_generated=int(item.get("recommendations_generated", 0)),
            potential_savings=float(item.get("potential_savings", 0)),
            currency=item.get("currency", "USD"),
            error=item.get("error"),
            created_by=item["created_by"],
            metadata=json.loads(item.get("metadata", "{}")),
        )


class AnalysisPeriod(BaseModel):
    """Reporting period of an analysis summary."""

    start_date: datetime
    end_date: datetime


class WastefulResource(BaseModel):
    """A resource ranked by the cost a recommendation would save."""

    resource_id: str
    resource_type: str
    cost: float
    wasted_cost: float
    wasted_percentage: float


class CostOptimizationAnalysis(BaseModel):
    """Point-in-time rollup of an organization's recommendations. Never stored."""

    organization_id: str
    generated_at: datetime = Field(default_factory=_utc_now)
    period: AnalysisPeriod
    total_cost: float
    potential_savings: float
    potential_savings_percentage: float
    currency: str = "USD"
    recommendations: list[CostOptimizationRecommendation] = Field(default_factory=list)
    savings_by_category: dict[str, float] = Field(default_factory=dict)
    savings_by_type: dict[str, float] = Field(default_factory=dict)
    savings_by_confidence: dict[Literal["high", "medium", "low"], float] = Field(
        default_factory=lambda: {"high": 0.0, "medium": 0.0, "low": 0.0}
    )
    top_wasteful_resources: list[WastefulResource] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)
