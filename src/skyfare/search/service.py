"""Search service - ties aggregation, filtering and reveal-more together."""

import logging
from dataclasses import dataclass, field
from typing import AsyncIterator, Dict, List, Optional

import pandas as pd

from skyfare.reference import airline_name
from skyfare.search.coordinator import AggregationCoordinator, Notifier
from skyfare.search.models import (
    AggregationState,
    Airline,
    Caller,
    FilterConfiguration,
    NormalizedFlight,
    SearchOutcome,
    SearchRequest,
)
from skyfare.search.pipeline import evaluate, group_by_airline
from skyfare.search.reveal import RevealController
from skyfare.search.search_log import SearchLog

logger = logging.getLogger(__name__)

FLIGHT_COLUMNS = [
    "id",
    "airline",
    "price",
    "departure_airport",
    "departure_date",
    "departure_time",
    "stops",
    "return_date",
    "return_time",
    "return_stops",
    "duration",
    "baggage_type",
    "available_seats",
]


@dataclass
class SearchView:
    """What the presentation layer shows at one point in a search."""

    state: AggregationState
    config: FilterConfiguration
    flights: List[NormalizedFlight] = field(default_factory=list)
    more_available: bool = False
    notices: List[str] = field(default_factory=list)

    @property
    def done(self) -> bool:
        return self.state.done

    def by_airline(self) -> Dict[Airline, List[NormalizedFlight]]:
        return group_by_airline(self.flights)

    def to_dataframe(self) -> pd.DataFrame:
        """Convert displayed flights to pandas DataFrame."""
        if not self.flights:
            return pd.DataFrame(columns=FLIGHT_COLUMNS)
        return pd.DataFrame(
            [
                {
                    "id": f.id,
                    "airline": f.airline.value,
                    "price": f.price,
                    "departure_airport": f.departure.airport,
                    "departure_date": f.departure.date,
                    "departure_time": f.departure.time,
                    "stops": f.departure.stops,
                    "return_date": f.return_leg.date if f.return_leg else None,
                    "return_time": f.return_leg.time if f.return_leg else None,
                    "return_stops": f.return_leg.stops if f.return_leg else None,
                    "duration": f.duration,
                    "baggage_type": f.baggage_type,
                    "available_seats": f.available_seats,
                }
                for f in self.flights
            ],
            columns=FLIGHT_COLUMNS,
        )


def build_notices(state: AggregationState) -> List[str]:
    """Informational, non-blocking messages about the search."""
    notices = []
    for airline in sorted(state.unauthorized, key=lambda a: a.value):
        notices.append(f"{airline_name(airline)} search is locked. Please contact an administrator.")
    for airline, reason in state.errors.items():
        notices.append(f"{airline_name(airline)} results are unavailable ({reason}).")
    outcome = state.outcome
    if outcome == SearchOutcome.FAILED:
        notices.append("No airline could be reached. Please try again later.")
    elif outcome == SearchOutcome.EMPTY:
        notices.append("No flights match your search.")
    return notices


class SearchService:
    """Runs searches and keeps the filter configuration for the latest one."""

    def __init__(
        self,
        coordinator: AggregationCoordinator,
        controller: Optional[RevealController] = None,
    ):
        self.coordinator = coordinator
        self.controller = controller or RevealController()

    @classmethod
    def from_settings(
        cls,
        settings=None,
        search_log: Optional[SearchLog] = None,
        notifier: Optional[Notifier] = None,
    ) -> "SearchService":
        """Build a service with the airline sources enabled in settings."""
        from skyfare.search.config import get_settings
        from skyfare.search.sources import VietJetSource, VietnamAirlinesSource

        settings = settings or get_settings()
        factories = {
            Airline.VJ: lambda: VietJetSource(
                base_url=settings.vietjet_base_url,
                api_key=settings.vietjet_api_key,
                timeout=settings.request_timeout,
            ),
            Airline.VNA: lambda: VietnamAirlinesSource(
                base_url=settings.vna_base_url,
                api_key=settings.vna_api_key,
                timeout=settings.request_timeout,
            ),
        }
        sources = [factories[a]() for a in settings.enabled_sources]
        return cls(AggregationCoordinator(sources, search_log=search_log, notifier=notifier))

    async def search(self, request: SearchRequest, caller: Caller) -> AsyncIterator[SearchView]:
        """Yield a fresh view every time a source resolves.

        Raises NoSourcesAuthorized before any fetch when the caller has no
        permitted source.
        """
        updates = self.coordinator.search(request, caller)
        permitted = [a for a in self.coordinator.airlines if a in caller.permissions]
        self.controller.reset(permitted)
        async for update in updates:
            current = self.coordinator.current
            if current is None or current.session_id != update.state.session_id:
                logger.info("Search %s was superseded, ending its view stream", update.state.session_id)
                return
            if update.done:
                self.controller.observe(update.state)
            yield self.view(update.state)

    def view(self, state: Optional[AggregationState] = None) -> SearchView:
        """Re-evaluate the pipeline over the given (or current) state."""
        if state is None:
            current = self.coordinator.current
            state = current.snapshot() if current else AggregationState()
        config = self.controller.config
        return SearchView(
            state=state,
            config=config,
            flights=evaluate(state.accumulated, config),
            more_available=bool(state.accumulated) and self.controller.more_available,
            notices=build_notices(state),
        )

    def reveal_more(self) -> SearchView:
        """Relax the next default filter and re-evaluate without fetching."""
        self.controller.advance()
        return self.view()

    def update_filters(self, **changes) -> SearchView:
        """Replace filter settings chosen by the user (e.g. sort_by)."""
        self.controller.config = self.controller.config.with_changes(**changes)
        return self.view()
