"""Airline lookup by source code."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class AirlineInfo:
    """Airline details for a search source."""

    code: str
    iata: str
    icao: str
    name: str
    country: str


_AIRLINES: dict[str, dict] = {
    "VJ": {"iata": "VJ", "icao": "VJC", "name": "VietJet Air", "country": "Vietnam"},
    "VNA": {"iata": "VN", "icao": "HVN", "name": "Vietnam Airlines", "country": "Vietnam"},
}


def get_airline(code) -> Optional[AirlineInfo]:
    """Look up airline by source code (VJ, VNA). Returns None if not found."""
    code = getattr(code, "value", code)
    if not code:
        return None
    code = str(code).upper().strip()
    row = _AIRLINES.get(code)
    if not row:
        return None
    return AirlineInfo(code=code, **row)


def get_airline_by_iata(iata: str) -> Optional[AirlineInfo]:
    """Look up airline by IATA 2-letter code. Returns None if not found."""
    if not iata:
        return None
    iata = iata.upper().strip()
    for code, row in _AIRLINES.items():
        if row["iata"] == iata:
            return AirlineInfo(code=code, **row)
    return None


def airline_name(code) -> str:
    """Display name, falling back to the code itself."""
    info = get_airline(code)
    return info.name if info else str(getattr(code, "value", code))
