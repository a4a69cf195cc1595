"""Status transition tables for anomalies and recommendations."""

from cost_analysis_engine.errors import InvalidStatusTransitionError
from cost_analysis_engine.storage.models import AnomalyStatus, RecommendationStatus

ANOMALY_TRANSITIONS: dict[AnomalyStatus, frozenset[AnomalyStatus]] = {
    AnomalyStatus.DETECTED: frozenset(
        {AnomalyStatus.INVESTIGATING, AnomalyStatus.RESOLVED, AnomalyStatus.FALSE_POSITIVE}
    ),
    AnomalyStatus.INVESTIGATING: frozenset(
        {AnomalyStatus.DETECTED, AnomalyStatus.RESOLVED, AnomalyStatus.FALSE_POSITIVE}
    ),
    AnomalyStatus.RESOLVED: frozenset({AnomalyStatus.INVESTIGATING}),
    AnomalyStatus.FALSE_POSITIVE: frozenset({AnomalyStatus.INVESTIGATING}),
}

RECOMMENDATION_TRANSITIONS: dict[RecommendationStatus, frozenset[RecommendationStatus]] = {
    RecommendationStatus.PENDING: frozenset(
        {
            RecommendationStatus.IN_PROGRESS,
            RecommendationStatus.IMPLEMENTED,
            RecommendationStatus.DISMISSED,
            RecommendationStatus.EXPIRED,
        }
    ),
    RecommendationStatus.IN_PROGRESS: frozenset(
        {
            RecommendationStatus.PENDING,
            RecommendationStatus.IMPLEMENTED,
            RecommendationStatus.DISMISSED,
        }
    ),
    RecommendationStatus.DISMISSED: frozenset({RecommendationStatus.PENDING}),
    RecommendationStatus.IMPLEMENTED: frozenset(),
    RecommendationStatus.EXPIRED: frozenset(),
}


def is_allowed(
    current: AnomalyStatus | RecommendationStatus,
    new: AnomalyStatus | RecommendationStatus,
) -> bool:
    """Whether the strict tables allow current -> new. Re-setting a status is always allowed."""
    if current == new:
        return True
    if isinstance(current, AnomalyStatus):
        return new in ANOMALY_TRANSITIONS[current]
    return new in RECOMMENDATION_TRANSITIONS[current]


def check_transition(
    kind: str,
    current: AnomalyStatus | RecommendationStatus,
    new: AnomalyStatus | RecommendationStatus,
    enforce: bool,
) -> None:
    """
    Validate a status change.

    Any status may move to any other unless enforce is set, in which case
    the transition tables above apply.

    Raises:
        InvalidStatusTransitionError: If enforcing and the move is not allowed.
    """
    if enforce and not is_allowed(current, new):
        raise InvalidStatusTransitionError(kind, current.value, new.value)
