"""VietJet Air flight search client."""

import asyncio
import logging
from typing import Any, List, Optional

import requests

from skyfare.search.errors import ErrorCode, SourceFetchError
from skyfare.search.models import Airline, Leg, NormalizedFlight, SearchRequest
from skyfare.search.sources.base import get_dict, get_float, get_int, get_list, get_str

logger = logging.getLogger(__name__)


class VietJetSource:
    """Flight source backed by the VietJet search endpoint."""

    airline = Airline.VJ

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        if base_url is None or timeout is None:
            from skyfare.search.config import get_settings

            settings = get_settings()
            base_url = base_url or settings.vietjet_base_url
            api_key = api_key if api_key is not None else settings.vietjet_api_key
            timeout = timeout or settings.request_timeout
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

    async def fetch(self, request: SearchRequest) -> List[NormalizedFlight]:
        return await asyncio.to_thread(self.fetch_flights, request)

    def fetch_flights(self, request: SearchRequest) -> List[NormalizedFlight]:
        """Query VietJet and normalize every itinerary it returns."""
        payload = {
            "origin": request.origin,
            "destination": request.destination,
            "departureDate": request.departure_date.isoformat(),
            "returnDate": request.return_date.isoformat() if request.return_date else None,
            "adults": request.adults,
            "children": request.children,
            "infants": request.infants,
            "tripType": request.trip_type.value,
        }
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            resp = requests.post(
                f"{self.base_url}/search", json=payload, headers=headers, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise SourceFetchError(self.airline.value, f"request failed: {e}") from e
        if resp.status_code != 200:
            raise SourceFetchError(self.airline.value, f"HTTP {resp.status_code} - {resp.text[:120]}")

        try:
            data = resp.json()
        except ValueError as e:
            raise SourceFetchError(
                self.airline.value, "response is not JSON", code=ErrorCode.MALFORMED_RESPONSE
            ) from e

        if isinstance(data, dict) and data.get("success") is False:
            raise SourceFetchError(self.airline.value, f"API error: {data.get('message') or data.get('error')}")

        flights = []
        for index, item in enumerate(get_list(data, "flights", "data", "Flights")):
            try:
                flight = self._parse_item(item, index, request)
            except (TypeError, ValueError) as e:
                raise SourceFetchError(
                    self.airline.value, f"malformed flight {index}: {e}", code=ErrorCode.MALFORMED_RESPONSE
                ) from e
            if flight:
                flights.append(flight)
        logger.debug("VietJet returned %d flights", len(flights))
        return flights

    def _parse_item(
        self, item: Any, index: int, request: SearchRequest
    ) -> Optional[NormalizedFlight]:
        """Parse one itinerary; returns None when mandatory fields are missing."""
        if not isinstance(item, dict):
            return None
        departure = self._parse_leg(get_dict(item, "departure", "Departure", "outbound"))
        price = get_float(item, "totalFare", "TotalFare", "price", "fare")
        if departure is None or price is None:
            logger.debug("Skipping VietJet item %d: missing departure or fare", index)
            return None

        return_leg = None
        if request.is_round_trip:
            return_leg = self._parse_leg(get_dict(item, "return", "Return", "inbound"))
            if return_leg is None:
                logger.debug("Skipping VietJet item %d: round trip without return leg", index)
                return None

        key = get_str(item, "key", "id", "flightId") or str(index)
        return NormalizedFlight(
            id=f"VJ-{key}",
            airline=self.airline,
            price=price,
            departure=departure,
            return_leg=return_leg,
            duration=get_str(item, "duration", "Duration") or "",
            baggage_type=get_str(item, "fareClass", "baggageType", "FareClass") or "",
            available_seats=get_int(item, "seatsAvailable", "availableSeats", "seats"),
            booking_key=get_str(item, "bookingKey", "BookingKey"),
            booking_key_return=get_str(item, "bookingKeyReturn", "BookingKeyReturn"),
        )

    def _parse_leg(self, leg: Optional[dict]) -> Optional[Leg]:
        if not leg:
            return None
        airport = get_str(leg, "airport", "from", "origin")
        time_str = get_str(leg, "time", "departureTime")
        if not airport or not time_str:
            return None
        return Leg(
            airport=airport,
            date=get_str(leg, "date", "departureDate") or "",
            time=time_str,
            stops=get_int(leg, "stops", "numberOfStops"),
            arrival_airport=get_str(leg, "arrivalAirport", "to", "destination"),
            arrival_time=get_str(leg, "arrivalTime"),
        )
