"""DynamoDB storage for the cost analysis engine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Iterator, TypeVar

if TYPE_CHECKING:
    from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource

import boto3
from boto3.dynamodb.conditions import Key

from cost_analysis_engine.storage.base import Storage
from cost_analysis_engine.storage.models import (
    CostAnomaly,
    CostOptimizationJob,
    CostOptimizationRecommendation,
)

T = TypeVar("T")

ORGANIZATION_INDEX = "GSI1"


class DynamoDBStorage(Storage):
    """
    DynamoDB storage client.

    Single-table layout: each entity lives under its own partition key
    (e.g. "ANOMALY#{id}"), and the GSI1 index groups entities by organization
    and kind (e.g. "ORG#{organization_id}#ANOMALY").
    """

    def __init__(
        self,
        table_name: str,
        dynamodb_resource: DynamoDBServiceResource | None = None,
    ):
        """
        Initialize DynamoDB storage.

        Args:
            table_name: Name of the DynamoDB table.
            dynamodb_resource: Optional boto3 DynamoDB resource. If None, creates one.
        """
        self.dynamodb = dynamodb_resource or boto3.resource("dynamodb")
        self.table = self.dynamodb.Table(table_name)
        self.table_name = table_name

    def _get_item(self, pk: str, sk: str, parse: Callable[[dict], T]) -> T | None:
        response = self.table.get_item(Key={"PK": pk, "SK": sk})
        if "Item" in response:
            return parse(response["Item"])
        return None

    def _query_organization(self, gsi1pk: str, parse: Callable[[dict], T]) -> Iterator[T]:
        query_kwargs: dict = {
            "IndexName": ORGANIZATION_INDEX,
            "KeyConditionExpression": Key("GSI1PK").eq(gsi1pk),
        }

        response = self.table.query(**query_kwargs)
        for item in response.get("Items", []):
            yield parse(item)

        while "LastEvaluatedKey" in response:
            query_kwargs["ExclusiveStartKey"] = response["LastEvaluatedKey"]
            response = self.table.query(**query_kwargs)
            for item in response.get("Items", []):
                yield parse(item)

    # =========================================================================
    # Anomalies
    # =========================================================================

    def put_anomaly(self, anomaly: CostAnomaly) -> None:
        self.table.put_item(Item=anomaly.to_dynamodb_item())

    def get_anomaly(self, anomaly_id: str) -> CostAnomaly | None:
        return self._get_item(
            f"ANOMALY#{anomaly_id}", "ANOMALY", CostAnomaly.from_dynamodb_item
        )

    def list_anomalies(self, organization_id: str) -> list[CostAnomaly]:
        return list(
            self._query_organization(
                f"ORG#{organization_id}#ANOMALY", CostAnomaly.from_dynamodb_item
            )
        )

    # =========================================================================
    # Recommendations
    # =========================================================================

    def put_recommendation(self, recommendation: CostOptimizationRecommendation) -> None:
        self.table.put_item(Item=recommendation.to_dynamodb_item())

    def get_recommendation(self, recommendation_id: str) -> CostOptimizationRecommendation | None:
        return self._get_item(
            f"RECOMMENDATION#{recommendation_id}",
            "RECOMMENDATION",
            CostOptimizationRecommendation.from_dynamodb_item,
        )

    def list_recommendations(self, organization_id: str) -> list[CostOptimizationRecommendation]:
        return list(
            self._query_organization(
                f"ORG#{organization_id}#RECOMMENDATION",
                CostOptimizationRecommendation.from_dynamodb_item,
            )
        )

    def batch_put_recommendations(
        self, recommendations: list[CostOptimizationRecommendation]
    ) -> None:
        """Store multiple recommendations in a batch."""
        with self.table.batch_writer() as batch:
            for recommendation in recommendations:
                batch.put_item(Item=recommendation.to_dynamodb_item())

    # =========================================================================
    # Jobs
    # =========================================================================

    def put_job(self, job: CostOptimizationJob) -> None:
        self.table.put_item(Item=job.to_dynamodb_item())

    def get_job(self, job_id: str) -> CostOptimizationJob | None:
        return self._get_item(f"JOB#{job_id}", "JOB", CostOptimizationJob.from_dynamodb_item)

    def list_jobs(self, organization_id: str) -> list[CostOptimizationJob]:
        return list(
            self._query_organization(
                f"ORG#{organization_id}#JOB", CostOptimizationJob.from_dynamodb_item
            )
        )
