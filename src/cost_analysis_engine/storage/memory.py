"""In-process storage backed by lock-guarded dictionaries."""

from threading import Lock
from typing import TypeVar

from pydantic import BaseModel

from cost_analysis_engine.storage.base import Storage
from cost_analysis_engine.storage.models import (
    CostAnomaly,
    CostOptimizationJob,
    CostOptimizationRecommendation,
)

T = TypeVar("T", bound=BaseModel)


class InMemoryStorage(Storage):
    """
    Thread-safe in-memory registry.

    Entities are copied on the way in and on the way out, so a caller holding
    a returned object cannot change stored state without calling put_*.
    Nothing is ever evicted.
    """

    def __init__(self):
        self._lock = Lock()
        self._anomalies: dict[str, CostAnomaly] = {}
        self._recommendations: dict[str, CostOptimizationRecommendation] = {}
        self._jobs: dict[str, CostOptimizationJob] = {}

    def _put(self, registry: dict[str, T], entity: T) -> None:
        copy = entity.model_copy(deep=True)
        with self._lock:
            registry[copy.id] = copy

    def _get(self, registry: dict[str, T], entity_id: str) -> T | None:
        with self._lock:
            entity = registry.get(entity_id)
        return entity.model_copy(deep=True) if entity else None

    def _list(self, registry: dict[str, T], organization_id: str) -> list[T]:
        with self._lock:
            owned = [e for e in registry.values() if e.organization_id == organization_id]
        return [e.model_copy(deep=True) for e in owned]

    def put_anomaly(self, anomaly: CostAnomaly) -> None:
        self._put(self._anomalies, anomaly)

    def get_anomaly(self, anomaly_id: str) -> CostAnomaly | None:
        return self._get(self._anomalies, anomaly_id)

    def list_anomalies(self, organization_id: str) -> list[CostAnomaly]:
        return self._list(self._anomalies, organization_id)

    def put_recommendation(self, recommendation: CostOptimizationRecommendation) -> None:
        self._put(self._recommendations, recommendation)

    def get_recommendation(self, recommendation_id: str) -> CostOptimizationRecommendation | None:
        return self._get(self._recommendations, recommendation_id)

    def list_recommendations(self, organization_id: str) -> list[CostOptimizationRecommendation]:
        return self._list(self._recommendations, organization_id)

    def put_job(self, job: CostOptimizationJob) -> None:
        self._put(self._jobs, job)

    def get_job(self, job_id: str) -> CostOptimizationJob | None:
        return self._get(self._jobs, job_id)

    def list_jobs(self, organization_id: str) -> list[CostOptimizationJob]:
        return self._list(self._jobs, organization_id)
