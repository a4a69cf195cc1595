"""Exceptions raised by the cost analysis engine."""


class CostAnalysisError(Exception):
    """Base class for all engine errors."""


class NotFoundError(CostAnalysisError, LookupError):
    """An anomaly, recommendation or job identifier is unknown."""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind.capitalize()} {identifier} not found")


class AnalysisFailure(CostAnalysisError):
    """Unexpected failure while computing anomalies or recommendations."""


class InvalidStatusTransitionError(CostAnalysisError, ValueError):
    """Status change rejected by the strict lifecycle tables."""

    def __init__(self, kind: str, current: str, new: str):
        self.kind = kind
        self.current = current
        self.new = new
        super().__init__(f"Cannot move {kind} from {current} to {new}")
