"""Concurrent airline flight search with progressive filtering."""

from skyfare.search.coordinator import AggregationCoordinator
from skyfare.search.errors import (
    AuthorizationError,
    ErrorCode,
    NoSourcesAuthorized,
    SkyfareError,
    SourceFetchError,
)
from skyfare.search.models import (
    AggregationState,
    Airline,
    Caller,
    FilterConfiguration,
    Leg,
    NormalizedFlight,
    SearchOutcome,
    SearchRequest,
    SearchUpdate,
    SortKey,
    TripType,
)
from skyfare.search.pipeline import evaluate
from skyfare.search.reveal import RevealController
from skyfare.search.service import SearchService, SearchView

__all__ = [
    "AggregationCoordinator",
    "AggregationState",
    "Airline",
    "AuthorizationError",
    "Caller",
    "ErrorCode",
    "FilterConfiguration",
    "Leg",
    "NoSourcesAuthorized",
    "NormalizedFlight",
    "RevealController",
    "SearchOutcome",
    "SearchRequest",
    "SearchService",
    "SearchUpdate",
    "SearchView",
    "SkyfareError",
    "SortKey",
    "SourceFetchError",
    "TripType",
    "evaluate",
]
