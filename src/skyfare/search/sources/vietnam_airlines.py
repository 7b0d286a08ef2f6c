"""Vietnam Airlines flight search client.

Itineraries come back as lists of segments per direction; a direction with N
segments has N - 1 stops. The fare basis carries the baggage class (VFR fares
include two checked bags).
"""

import asyncio
import logging
from typing import Any, List, Optional

import requests

from skyfare.search.errors import ErrorCode, SourceFetchError
from skyfare.search.models import Airline, Leg, NormalizedFlight, SearchRequest
from skyfare.search.sources.base import get_dict, get_float, get_int, get_list, get_str

logger = logging.getLogger(__name__)


class VietnamAirlinesSource:
    """Flight source backed by the Vietnam Airlines availability endpoint."""

    airline = Airline.VNA

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        if base_url is None or timeout is None:
            from skyfare.search.config import get_settings

            settings = get_settings()
            base_url = base_url or settings.vna_base_url
            api_key = api_key if api_key is not None else settings.vna_api_key
            timeout = timeout or settings.request_timeout
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

    async def fetch(self, request: SearchRequest) -> List[NormalizedFlight]:
        return await asyncio.to_thread(self.fetch_flights, request)

    def fetch_flights(self, request: SearchRequest) -> List[NormalizedFlight]:
        """Query Vietnam Airlines and normalize the itineraries."""
        params = {
            "dep": request.origin,
            "arr": request.destination,
            "depdate": request.departure_date.strftime("%Y-%m-%d"),
            "adt": str(request.adults),
            "chd": str(request.children),
            "inf": str(request.infants),
            "tripType": request.trip_type.value,
        }
        if request.return_date:
            params["retdate"] = request.return_date.strftime("%Y-%m-%d")
        headers = {"X-Api-Key": self.api_key} if self.api_key else {}

        try:
            resp = requests.get(
                f"{self.base_url}/availability", params=params, headers=headers, timeout=self.timeout
            )
            resp.raise_for_status()
        except requests.RequestException as e:
            raise SourceFetchError(self.airline.value, f"request failed: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise SourceFetchError(
                self.airline.value, "response is not JSON", code=ErrorCode.MALFORMED_RESPONSE
            ) from e

        flights = []
        for index, item in enumerate(get_list(data, "itineraries", "Itineraries", "data")):
            try:
                flight = self._parse_itinerary(item, index, request)
            except (TypeError, ValueError) as e:
                raise SourceFetchError(
                    self.airline.value, f"malformed itinerary {index}: {e}", code=ErrorCode.MALFORMED_RESPONSE
                ) from e
            if flight:
                flights.append(flight)
        logger.debug("Vietnam Airlines returned %d flights", len(flights))
        return flights

    def _parse_itinerary(
        self, item: Any, index: int, request: SearchRequest
    ) -> Optional[NormalizedFlight]:
        if not isinstance(item, dict):
            return None
        outbound = get_dict(item, "outbound", "Outbound", "departure")
        departure = self._parse_direction(outbound)

        price_info = get_dict(item, "price", "Price")
        if price_info is not None:
            price = get_float(price_info, "total", "Total", "amount")
        else:
            price = get_float(item, "price", "totalPrice", "Price")
        if departure is None or price is None:
            logger.debug("Skipping VNA itinerary %d: missing outbound or price", index)
            return None

        return_leg = None
        if request.is_round_trip:
            return_leg = self._parse_direction(get_dict(item, "inbound", "Inbound", "return"))
            if return_leg is None:
                logger.debug("Skipping VNA itinerary %d: round trip without inbound", index)
                return None

        itinerary_id = get_str(item, "id", "itineraryId", "Id") or str(index)
        return NormalizedFlight(
            id=f"VNA-{itinerary_id}",
            airline=self.airline,
            price=price,
            departure=departure,
            return_leg=return_leg,
            duration=(outbound and get_str(outbound, "duration", "Duration")) or get_str(item, "duration") or "",
            baggage_type=get_str(item, "fareBasis", "baggageType", "FareBasis") or "",
            available_seats=get_int(item, "seats", "availableSeats", "Seats"),
            booking_key=get_str(item, "bookingKey", "fareKey"),
            booking_key_return=get_str(item, "bookingKeyReturn", "fareKeyReturn"),
        )

    def _parse_direction(self, direction: Optional[dict]) -> Optional[Leg]:
        """Collapse a list of segments into a single leg."""
        if not direction:
            return None
        segments = [s for s in get_list(direction, "segments", "Segments") if isinstance(s, dict)]
        if not segments:
            return None
        first, last = segments[0], segments[-1]
        airport = get_str(first, "from", "dep", "origin")
        time_str = get_str(first, "departTime", "deptime", "time")
        if not airport or not time_str:
            return None
        return Leg(
            airport=airport,
            date=get_str(first, "date", "depdate") or "",
            time=time_str,
            stops=len(segments) - 1,
            arrival_airport=get_str(last, "to", "arr", "destination"),
            arrival_time=get_str(last, "arriveTime", "arrtime"),
        )
