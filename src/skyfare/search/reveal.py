"""
"Show more" relaxation of the default result reduction.

A fresh search starts with cheapest-only and direct-only switched on. Each
advance() clears one of them, cheapest first, until both are off. Two-bag is
not part of the ladder.
"""

import logging
from typing import Iterable, Optional

from skyfare.search.models import (
    AggregationState,
    Airline,
    FilterConfiguration,
    NormalizedFlight,
    SortKey,
)
from skyfare.search.pipeline import TWO_BAG_BAGGAGE_TYPE

logger = logging.getLogger(__name__)


def initial_configuration(airlines: Iterable[Airline]) -> FilterConfiguration:
    """Default configuration at the start of a search."""
    return FilterConfiguration(
        airlines=frozenset(airlines),
        cheapest_only=True,
        direct_flights_only=True,
        two_bag_only=True,
        sort_by=SortKey.PRICE,
    )


def can_reveal_more(config: FilterConfiguration) -> bool:
    return config.cheapest_only or config.direct_flights_only


def relax(config: FilterConfiguration) -> FilterConfiguration:
    """Next step of the ladder; returns config unchanged once fully relaxed."""
    if config.cheapest_only:
        return config.with_changes(cheapest_only=False)
    if config.direct_flights_only:
        return config.with_changes(direct_flights_only=False)
    return config


def apply_capabilities(
    config: FilterConfiguration, flights: Iterable[NormalizedFlight]
) -> FilterConfiguration:
    """Switch off filters that no flight in the full result set could pass."""
    has_direct = False
    has_two_bag = False
    for f in flights:
        if f.departure.stops == 0:
            has_direct = True
        if f.airline == Airline.VNA and f.baggage_type == TWO_BAG_BAGGAGE_TYPE:
            has_two_bag = True
    changes = {}
    if config.direct_flights_only and not has_direct:
        changes["direct_flights_only"] = False
    if config.two_bag_only and not has_two_bag:
        changes["two_bag_only"] = False
    return config.with_changes(**changes) if changes else config


class RevealController:
    """Holds the current filter configuration for one search session."""

    def __init__(self, config: Optional[FilterConfiguration] = None):
        self.config = config or initial_configuration(Airline)
        self._adjusted_session: Optional[str] = None

    def reset(self, airlines: Iterable[Airline]) -> FilterConfiguration:
        """Start over for a new search."""
        self.config = initial_configuration(airlines)
        self._adjusted_session = None
        return self.config

    @property
    def more_available(self) -> bool:
        return can_reveal_more(self.config)

    def advance(self) -> FilterConfiguration:
        self.config = relax(self.config)
        return self.config

    def observe(self, state: AggregationState) -> FilterConfiguration:
        """Apply capability corrections once per completed result set."""
        if not state.done or self._adjusted_session == state.session_id:
            return self.config
        self._adjusted_session = state.session_id
        adjusted = apply_capabilities(self.config, state.accumulated)
        if adjusted != self.config:
            logger.debug(
                "Relaxed filters for session %s: direct=%s two_bag=%s",
                state.session_id,
                adjusted.direct_flights_only,
                adjusted.two_bag_only,
            )
        self.config = adjusted
        return self.config


__all__ = [
    "RevealController",
    "apply_capabilities",
    "can_reveal_more",
    "initial_configuration",
    "relax",
]
