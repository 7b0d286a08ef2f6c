"""Unit tests for airline reference data."""

from skyfare.reference import airline_name, get_airline, get_airline_by_iata
from skyfare.search.models import Airline


class TestAirlines:
    """Tests for airline lookups."""

    def test_get_airline_by_source_code(self) -> None:
        info = get_airline("vna")
        assert info is not None
        assert info.code == "VNA"
        assert info.iata == "VN"
        assert info.icao == "HVN"
        assert info.name == "Vietnam Airlines"

    def test_get_airline_accepts_enum(self) -> None:
        assert get_airline(Airline.VJ).name == "VietJet Air"

    def test_unknown_returns_none(self) -> None:
        assert get_airline("QH") is None
        assert get_airline("") is None
        assert get_airline_by_iata("") is None

    def test_get_airline_by_iata(self) -> None:
        assert get_airline_by_iata("vn").code == "VNA"
        assert get_airline_by_iata("VJ").code == "VJ"

    def test_airline_name_falls_back_to_code(self) -> None:
        assert airline_name(Airline.VNA) == "Vietnam Airlines"
        assert airline_name("QH") == "QH"
