"""Rule-based analyzers that turn utilization into recommendations."""

from abc import ABC, abstractmethod
from typing import Any

from cost_analysis_engine.analysis.scoring import (
    calculate_annual_savings,
    calculate_confidence_score,
    determine_recommendation_priority,
    format_recommendation_title,
)
from cost_analysis_engine.config.schema import (
    Config,
    IdleDetectionConfig,
    ReservedInstanceConfig,
    RightsizingConfig,
)
from cost_analysis_engine.inputs import ResourceUtilization
from cost_analysis_engine.storage.models import (
    CostOptimizationRecommendation,
    PaymentOption,
    Rating,
    RecommendationCategory,
    RecommendationType,
    ResourceConfiguration,
)


class OptimizationRule(ABC):
    """
    One independent analyzer.

    Subclasses declare the type, category and ratings of what they emit and
    implement evaluate(). Savings are expressed as a percentage of the
    resource's current cost.
    """

    recommendation_type: RecommendationType
    category: RecommendationCategory
    confidence: Rating
    effort: Rating
    impact: Rating

    def __init__(self, currency: str = "USD"):
        self.currency = currency

    @property
    def enabled(self) -> bool:
        return True

    @abstractmethod
    def evaluate(
        self,
        organization_id: str,
        utilization: ResourceUtilization,
        current_cost: float,
    ) -> CostOptimizationRecommendation | None:
        """Return a recommendation if the rule fires for this resource."""

    def _build(
        self,
        organization_id: str,
        utilization: ResourceUtilization,
        current_cost: float,
        savings_percentage: float,
        description: str,
        current_configuration: ResourceConfiguration,
        recommended_configuration: ResourceConfiguration,
        implementation_steps: list[str],
        justification: str,
        metadata: dict[str, Any],
    ) -> CostOptimizationRecommendation:
        recommended_cost = current_cost * (100 - savings_percentage) / 100
        savings_amount = current_cost - recommended_cost

        cpu = utilization.metrics.cpu
        spread = (cpu.peak - cpu.average) / 100 if cpu else 1.0

        return CostOptimizationRecommendation(
            organization_id=organization_id,
            resource_id=utilization.resource_id,
            resource_type=utilization.resource_type,
            recommendation_type=self.recommendation_type,
            title=format_recommendation_title(self.recommendation_type, utilization.resource_type),
            description=description,
            current_configuration=current_configuration,
            recommended_configuration=recommended_configuration,
            current_cost=current_cost,
            recommended_cost=recommended_cost,
            savings_amount=savings_amount,
            savings_percentage=savings_percentage,
            annual_savings=calculate_annual_savings(savings_amount),
            currency=self.currency,
            confidence=self.confidence,
            effort=self.effort,
            impact=self.impact,
            category=self.category,
            implementation_steps=implementation_steps,
            justification=justification,
            metadata={
                **metadata,
                "priority": determine_recommendation_priority(
                    savings_amount, self.confidence, self.effort
                ),
                "data_confidence": calculate_confidence_score(
                    utilization.data_points, utilization.observation_days, spread
                ).value,
            },
        )


class RightsizingRule(OptimizationRule):
    """Downsize resources whose CPU and memory both sit under a threshold."""

    recommendation_type = RecommendationType.RIGHTSIZING
    category = RecommendationCategory.COMPUTE
    confidence = Rating.HIGH
    effort = Rating.MEDIUM
    impact = Rating.MEDIUM

    def __init__(self, config: RightsizingConfig | None = None, currency: str = "USD"):
        super().__init__(currency)
        self.config = config or RightsizingConfig()

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    def evaluate(self, organization_id, utilization, current_cost):
        cpu = utilization.cpu_average
        memory = utilization.memory_average

        if cpu >= self.config.cpu_threshold or memory >= self.config.memory_threshold:
            return None

        return self._build(
            organization_id,
            utilization,
            current_cost,
            savings_percentage=self.config.savings_estimate,
            description=(
                f"Resource is underutilized with {cpu:.1f}% CPU and {memory:.1f}% memory usage"
            ),
            current_configuration=ResourceConfiguration(),
            recommended_configuration=ResourceConfiguration(attributes={"action": "downsize"}),
            implementation_steps=[
                "Create a snapshot of the resource",
                "Stop the current resource",
                "Launch a smaller instance size from the snapshot",
                "Test the application performance",
                "Update DNS/load balancer configuration",
            ],
            justification=(
                "Low resource utilization indicates the resource is oversized for its workload"
            ),
            metadata={
                "cpu_utilization": cpu,
                "memory_utilization": memory,
                "analysis_method": "utilization_based",
            },
        )


class IdleResourceRule(OptimizationRule):
    """Terminate resources with negligible CPU and network activity."""

    recommendation_type = RecommendationType.IDLE_RESOURCE
    category = RecommendationCategory.COMPUTE
    confidence = Rating.MEDIUM
    effort = Rating.LOW
    impact = Rating.HIGH

    def __init__(self, config: IdleDetectionConfig | None = None, currency: str = "USD"):
        super().__init__(currency)
        self.config = config or IdleDetectionConfig()

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    def evaluate(self, organization_id, utilization, current_cost):
        cpu = utilization.cpu_average
        network_in = utilization.network_in_average
        network_out = utilization.network_out_average
        limit = self.config.network_threshold

        if cpu >= self.config.cpu_threshold or network_in >= limit or network_out >= limit:
            return None

        return self._build(
            organization_id,
            utilization,
            current_cost,
            savings_percentage=self.config.savings_estimate,
            description=(
                f"Resource appears to be idle with minimal CPU ({cpu:.1f}%) and network activity"
            ),
            current_configuration=ResourceConfiguration(),
            recommended_configuration=ResourceConfiguration(attributes={"action": "terminate"}),
            implementation_steps=[
                "Verify the resource is not needed",
                "Create a backup if necessary",
                "Terminate the resource",
                "Update any dependent configurations",
            ],
            justification="Resource shows no significant activity and may be safely terminated",
            metadata={
                "cpu_utilization": cpu,
                "network_in": network_in,
                "network_out": network_out,
                "analysis_method": "idle_detection",
            },
        )


class ReservedInstanceRule(OptimizationRule):
    """
    Move on-demand resources to reserved pricing.

    Fires for every analyzed resource: utilization is not consulted. Gate it
    on a consistency-of-usage signal before trusting it for real purchases.
    """

    recommendation_type = RecommendationType.RESERVED_INSTANCE
    category = RecommendationCategory.RESERVATION
    confidence = Rating.HIGH
    effort = Rating.LOW
    impact = Rating.HIGH

    def __init__(self, config: ReservedInstanceConfig | None = None, currency: str = "USD"):
        super().__init__(currency)
        self.config = config or ReservedInstanceConfig()

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    def evaluate(self, organization_id, utilization, current_cost):
        term = self.config.recommended_term

        return self._build(
            organization_id,
            utilization,
            current_cost,
            savings_percentage=self.config.savings_estimate,
            description=(
                "Resource runs consistently and would benefit from reserved instance pricing"
            ),
            current_configuration=ResourceConfiguration(payment_option=PaymentOption.ON_DEMAND),
            recommended_configuration=ResourceConfiguration(
                payment_option=PaymentOption.RESERVED,
                term=term,
                attributes={"purchase_option": self.config.payment_option},
            ),
            implementation_steps=[
                "Review usage patterns to confirm consistent usage",
                "Purchase appropriate reserved instance",
                "Apply reservation to the resource",
                "Monitor savings realization",
            ],
            justification=(
                "Consistent usage pattern makes this resource a good candidate for reserved pricing"
            ),
            metadata={
                "analysis_method": "usage_pattern_based",
                "recommended_term": term,
            },
        )


def default_rules(config: Config) -> list[OptimizationRule]:
    """Build the standard analyzers from configuration, in evaluation order."""
    return [
        RightsizingRule(config.rightsizing, config.currency),
        IdleResourceRule(config.idle_detection, config.currency),
        ReservedInstanceRule(config.reserved_instances, config.currency),
    ]
