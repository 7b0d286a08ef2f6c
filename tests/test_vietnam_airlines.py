"""Unit tests for the Vietnam Airlines source with mocked HTTP."""

from __future__ import annotations

from datetime import date
from unittest.mock import MagicMock, patch

import pytest
import requests

from skyfare.search.errors import ErrorCode, SourceFetchError
from skyfare.search.models import Airline, SearchRequest
from skyfare.search.sources.vietnam_airlines import VietnamAirlinesSource

ONE_WAY = SearchRequest("SGN", "HAN", date(2025, 3, 1))
ROUND_TRIP = SearchRequest("SGN", "HAN", date(2025, 3, 1), return_date=date(2025, 3, 5), adults=2, infants=1)

DIRECT_OUTBOUND = {
    "duration": "2h 05m",
    "segments": [
        {"from": "SGN", "date": "2025-03-01", "departTime": "09:30", "to": "HAN", "arriveTime": "11:35"},
    ],
}

CONNECTING_INBOUND = {
    "duration": "4h 40m",
    "segments": [
        {"from": "HAN", "date": "2025-03-05", "departTime": "17:00", "to": "DAD", "arriveTime": "18:20"},
        {"from": "DAD", "date": "2025-03-05", "departTime": "19:30", "to": "SGN", "arriveTime": "21:40"},
    ],
}


def _source() -> VietnamAirlinesSource:
    return VietnamAirlinesSource(base_url="https://vna.test", api_key="k", timeout=5)


def _ok(mock_get: MagicMock, payload) -> None:
    mock_get.return_value.raise_for_status.return_value = None
    mock_get.return_value.json.return_value = payload


class TestVietnamAirlinesFetchFlights:
    """Tests for fetch_flights with mocked HTTP."""

    @patch("skyfare.search.sources.vietnam_airlines.requests.get")
    def test_one_way_parsed(self, mock_get: MagicMock) -> None:
        _ok(
            mock_get,
            {
                "itineraries": [
                    {"id": "101", "price": {"total": 1890000}, "outbound": DIRECT_OUTBOUND, "fareBasis": "VFR", "seats": 4},
                ]
            },
        )

        flights = _source().fetch_flights(ONE_WAY)

        assert len(flights) == 1
        f = flights[0]
        assert f.id == "VNA-101"
        assert f.airline == Airline.VNA
        assert f.price == 1890000
        assert f.departure.stops == 0
        assert f.departure.time == "09:30"
        assert f.departure.arrival_airport == "HAN"
        assert f.duration == "2h 05m"
        assert f.baggage_type == "VFR"
        assert f.available_seats == 4
        assert f.return_leg is None

    @patch("skyfare.search.sources.vietnam_airlines.requests.get")
    def test_round_trip_stops_from_segments(self, mock_get: MagicMock) -> None:
        _ok(
            mock_get,
            {
                "itineraries": [
                    {"id": "7", "price": 2500000, "outbound": DIRECT_OUTBOUND, "inbound": CONNECTING_INBOUND},
                    {"id": "8", "price": 2100000, "outbound": DIRECT_OUTBOUND},
                ]
            },
        )

        flights = _source().fetch_flights(ROUND_TRIP)

        assert [f.id for f in flights] == ["VNA-7"]
        f = flights[0]
        assert f.price == 2500000
        assert f.return_leg.stops == 1
        assert f.return_leg.arrival_airport == "SGN"
        assert f.return_leg.arrival_time == "21:40"
        assert not f.is_direct()

    @patch("skyfare.search.sources.vietnam_airlines.requests.get")
    def test_request_params(self, mock_get: MagicMock) -> None:
        _ok(mock_get, {"itineraries": []})

        _source().fetch_flights(ROUND_TRIP)

        args, kwargs = mock_get.call_args
        assert args[0] == "https://vna.test/availability"
        params = kwargs["params"]
        assert params["dep"] == "SGN"
        assert params["arr"] == "HAN"
        assert params["depdate"] == "2025-03-01"
        assert params["retdate"] == "2025-03-05"
        assert params["adt"] == "2"
        assert params["inf"] == "1"
        assert params["tripType"] == "RT"
        assert kwargs["headers"] == {"X-Api-Key": "k"}

    @patch("skyfare.search.sources.vietnam_airlines.requests.get")
    def test_one_way_omits_return_date(self, mock_get: MagicMock) -> None:
        _ok(mock_get, {"itineraries": []})

        _source().fetch_flights(ONE_WAY)

        assert "retdate" not in mock_get.call_args.kwargs["params"]

    @patch("skyfare.search.sources.vietnam_airlines.requests.get")
    def test_itinerary_without_segments_skipped(self, mock_get: MagicMock) -> None:
        _ok(mock_get, {"itineraries": [{"id": "1", "price": 10, "outbound": {"segments": []}}]})

        assert _source().fetch_flights(ONE_WAY) == []

    @patch("skyfare.search.sources.vietnam_airlines.requests.get")
    def test_http_error_raises(self, mock_get: MagicMock) -> None:
        mock_get.return_value.raise_for_status.side_effect = requests.HTTPError("502 Bad Gateway")

        with pytest.raises(SourceFetchError, match="502") as exc:
            _source().fetch_flights(ONE_WAY)
        assert exc.value.source == "VNA"
        assert exc.value.code == ErrorCode.SOURCE_FETCH_FAILED

    @patch("skyfare.search.sources.vietnam_airlines.requests.get")
    def test_timeout_raises(self, mock_get: MagicMock) -> None:
        mock_get.side_effect = requests.Timeout("read timed out")

        with pytest.raises(SourceFetchError, match="timed out"):
            _source().fetch_flights(ONE_WAY)

    @patch("skyfare.search.sources.vietnam_airlines.requests.get")
    def test_malformed_price_raises(self, mock_get: MagicMock) -> None:
        _ok(mock_get, {"itineraries": [{"id": "1", "price": "abc", "outbound": DIRECT_OUTBOUND}]})

        with pytest.raises(SourceFetchError) as exc:
            _source().fetch_flights(ONE_WAY)
        assert exc.value.code == ErrorCode.MALFORMED_RESPONSE

    def test_airline(self) -> None:
        assert _source().airline == Airline.VNA
