"""Data models for flight search aggregation."""

import re
import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Set

_IATA_RE = re.compile(r"^[A-Z]{3}$")


class Airline(str, Enum):
    """Airline booking backends a search can fan out to."""

    VJ = "VJ"
    VNA = "VNA"


class TripType(str, Enum):
    ONE_WAY = "OW"
    ROUND_TRIP = "RT"


class SortKey(str, Enum):
    """Result orderings the pipeline understands."""

    PRICE = "price"
    DURATION = "duration"
    DEPARTURE_TIME = "departureTime"


class SearchOutcome(str, Enum):
    """Terminal classification of an aggregation.

    EMPTY (every source answered, nothing matched) is a valid result and is
    kept apart from FAILED (every source errored).
    """

    PENDING = "pending"
    COMPLETE = "complete"
    EMPTY = "empty"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(frozen=True)
class Leg:
    """One direction of a trip."""

    airport: str
    date: str
    time: str
    stops: int = 0
    arrival_airport: Optional[str] = None
    arrival_time: Optional[str] = None

    def __post_init__(self):
        if self.stops < 0:
            raise ValueError(f"Invalid stop count: {self.stops}")

    @property
    def is_direct(self) -> bool:
        return self.stops == 0


@dataclass(frozen=True)
class NormalizedFlight:
    """Canonical flight record every source is mapped to."""

    id: str
    airline: Airline
    price: float
    departure: Leg
    duration: str
    baggage_type: str = ""
    return_leg: Optional[Leg] = None
    available_seats: int = 0
    # Opaque tokens handed to the booking flow untouched
    booking_key: Optional[str] = None
    booking_key_return: Optional[str] = None

    def __post_init__(self):
        if self.price < 0:
            raise ValueError(f"Invalid price for flight {self.id}: {self.price}")

    @property
    def is_round_trip(self) -> bool:
        return self.return_leg is not None

    def is_direct(self) -> bool:
        """True when every leg of the itinerary has zero stops."""
        if self.return_leg is None:
            return self.departure.stops == 0
        return self.departure.stops == 0 and self.return_leg.stops == 0

    def duration_minutes_key(self) -> Optional[int]:
        """Numeric ordering key for duration: the digits of the field, or None."""
        digits = re.sub(r"\D", "", self.duration or "")
        return int(digits) if digits else None


@dataclass(frozen=True)
class SearchRequest:
    """Trip parameters submitted by the caller."""

    origin: str
    destination: str
    departure_date: date
    return_date: Optional[date] = None
    adults: int = 1
    children: int = 0
    infants: int = 0
    trip_type: Optional[TripType] = None

    def __post_init__(self):
        origin = self.origin.strip().upper()
        destination = self.destination.strip().upper()
        if not _IATA_RE.match(origin) or not _IATA_RE.match(destination):
            raise ValueError(
                f"Invalid airport code: {self.origin}-{self.destination}. Expected IATA codes (e.g. SGN-HAN)"
            )
        if origin == destination:
            raise ValueError(f"Origin and destination must differ: {origin}")
        if not 1 <= self.adults <= 9:
            raise ValueError(f"Invalid adult count: {self.adults}")
        if self.children < 0 or self.infants < 0:
            raise ValueError("Passenger counts must be non-negative")
        if self.infants > self.adults:
            raise ValueError("Infants cannot outnumber adults")
        if self.return_date is not None and self.return_date < self.departure_date:
            raise ValueError(
                f"Return date {self.return_date} is before departure date {self.departure_date}"
            )
        trip_type = self.trip_type
        if trip_type is None:
            trip_type = TripType.ROUND_TRIP if self.return_date else TripType.ONE_WAY
        if trip_type == TripType.ROUND_TRIP and self.return_date is None:
            raise ValueError("Round-trip search requires a return date")
        object.__setattr__(self, "origin", origin)
        object.__setattr__(self, "destination", destination)
        object.__setattr__(self, "trip_type", TripType(trip_type))

    @property
    def is_round_trip(self) -> bool:
        return self.trip_type == TripType.ROUND_TRIP

    def to_dict(self) -> Dict[str, object]:
        """Raw search parameters, JSON-friendly."""
        return {
            "origin": self.origin,
            "destination": self.destination,
            "departure_date": self.departure_date.isoformat(),
            "return_date": self.return_date.isoformat() if self.return_date else None,
            "adults": self.adults,
            "children": self.children,
            "infants": self.infants,
            "trip_type": self.trip_type.value,
        }


@dataclass(frozen=True)
class Caller:
    """Identity and source permissions of whoever runs the search."""

    user_id: str
    permissions: FrozenSet[Airline] = frozenset()
    email: Optional[str] = None
    full_name: Optional[str] = None

    @classmethod
    def from_codes(cls, user_id: str, codes, **kwargs) -> "Caller":
        """Build a caller from airline code strings like ['VJ', 'VNA']."""
        return cls(user_id=user_id, permissions=frozenset(Airline(c.strip().upper()) for c in codes), **kwargs)


@dataclass(frozen=True)
class FilterConfiguration:
    """Filter and sort settings, replaced wholesale on every change."""

    airlines: FrozenSet[Airline] = frozenset(Airline)
    direct_flights_only: bool = False
    cheapest_only: bool = False
    two_bag_only: bool = False
    sort_by: SortKey = SortKey.PRICE

    def with_changes(self, **changes) -> "FilterConfiguration":
        return replace(self, **changes)


@dataclass
class AggregationState:
    """Accumulating results of one search invocation."""

    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    accumulated: List[NormalizedFlight] = field(default_factory=list)
    pending: Set[Airline] = field(default_factory=set)
    succeeded: Set[Airline] = field(default_factory=set)
    errors: Dict[Airline, str] = field(default_factory=dict)
    unauthorized: FrozenSet[Airline] = frozenset()
    started_at: datetime = field(default_factory=datetime.now)

    @property
    def done(self) -> bool:
        return not self.pending

    @property
    def outcome(self) -> SearchOutcome:
        if self.pending:
            return SearchOutcome.PENDING
        if self.errors and not self.succeeded:
            return SearchOutcome.FAILED
        if self.errors:
            return SearchOutcome.PARTIAL
        if not self.accumulated:
            return SearchOutcome.EMPTY
        return SearchOutcome.COMPLETE

    def snapshot(self) -> "AggregationState":
        """Independent copy safe to hand out while the search is running."""
        return AggregationState(
            session_id=self.session_id,
            accumulated=list(self.accumulated),
            pending=set(self.pending),
            succeeded=set(self.succeeded),
            errors=dict(self.errors),
            unauthorized=self.unauthorized,
            started_at=self.started_at,
        )


@dataclass(frozen=True)
class SearchUpdate:
    """One incremental emission of the aggregation stream."""

    state: AggregationState
    source: Airline
    done: bool
