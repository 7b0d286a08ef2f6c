"""Reference data lookups for airlines."""

from skyfare.reference.airlines import AirlineInfo, airline_name, get_airline, get_airline_by_iata

__all__ = [
    "AirlineInfo",
    "airline_name",
    "get_airline",
    "get_airline_by_iata",
]
