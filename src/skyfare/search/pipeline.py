"""Filter, reduce and sort accumulated flights for display."""

from typing import Dict, Iterable, List, Sequence

from skyfare.search.models import Airline, FilterConfiguration, NormalizedFlight, SortKey

TWO_BAG_BAGGAGE_TYPE = "VFR"


def is_two_bag_eligible(flight: NormalizedFlight) -> bool:
    """VietJet always qualifies; Vietnam Airlines only on VFR fares."""
    return flight.airline == Airline.VJ or (
        flight.airline == Airline.VNA and flight.baggage_type == TWO_BAG_BAGGAGE_TYPE
    )


def cheapest_per_airline(flights: Iterable[NormalizedFlight]) -> List[NormalizedFlight]:
    """Keep the lowest-priced flight of each airline (first one wins on ties)."""
    cheapest: Dict[Airline, NormalizedFlight] = {}
    for f in flights:
        best = cheapest.get(f.airline)
        if best is None or f.price < best.price:
            cheapest[f.airline] = f
    return list(cheapest.values())


def _duration_key(flight: NormalizedFlight) -> float:
    key = flight.duration_minutes_key()
    # Durations without digits sort last
    return float("inf") if key is None else float(key)


_SORT_KEYS = {
    SortKey.PRICE: lambda f: f.price,
    SortKey.DURATION: _duration_key,
    SortKey.DEPARTURE_TIME: lambda f: f.departure.time,
}


def sort_flights(flights: Sequence[NormalizedFlight], sort_by) -> List[NormalizedFlight]:
    """Stable ascending sort. Raises ValueError for an unknown sort key."""
    try:
        key = _SORT_KEYS[SortKey(sort_by)]
    except (KeyError, ValueError):
        raise ValueError(f"Unknown sort key: {sort_by!r}") from None
    return sorted(flights, key=key)


def evaluate(flights: Sequence[NormalizedFlight], config: FilterConfiguration) -> List[NormalizedFlight]:
    """Run airline, direct, two-bag and cheapest filters, then sort.

    Stage order matters: cheapest-only reduces what the earlier filters left.
    """
    # No airline selected means nothing to show, not "every airline"
    result = [f for f in flights if f.airline in config.airlines]

    if config.direct_flights_only:
        result = [f for f in result if f.is_direct()]

    if config.two_bag_only:
        result = [f for f in result if is_two_bag_eligible(f)]

    if config.cheapest_only:
        result = cheapest_per_airline(result)

    return sort_flights(result, config.sort_by)


def group_by_airline(flights: Iterable[NormalizedFlight]) -> Dict[Airline, List[NormalizedFlight]]:
    """Split flights into per-airline lists, keeping their order."""
    groups: Dict[Airline, List[NormalizedFlight]] = {}
    for f in flights:
        groups.setdefault(f.airline, []).append(f)
    return groups


__all__ = [
    "cheapest_per_airline",
    "evaluate",
    "group_by_airline",
    "is_two_bag_eligible",
    "sort_flights",
]
