"""Abstract interface for airline flight sources."""

from typing import Any, List, Optional, Protocol, runtime_checkable

from skyfare.search.models import Airline, NormalizedFlight, SearchRequest


@runtime_checkable
class SourceFetcher(Protocol):
    """Protocol for pluggable airline search backends."""

    @property
    def airline(self) -> Airline:
        """Airline this source returns flights for."""
        ...

    async def fetch(self, request: SearchRequest) -> List[NormalizedFlight]:
        """Search the backend. Raises SourceFetchError on failure."""
        ...


def get_str(d: dict, *keys: str) -> Optional[str]:
    """First non-blank value among keys, as a stripped string."""
    for k in keys:
        v = d.get(k)
        if v is not None and str(v).strip():
            return str(v).strip()
    return None


def get_int(d: dict, *keys: str, default: int = 0) -> int:
    s = get_str(d, *keys)
    if s is None:
        return default
    return int(float(s))


def get_float(d: dict, *keys: str) -> Optional[float]:
    s = get_str(d, *keys)
    if s is None:
        return None
    return float(s.replace(",", ""))


def get_dict(d: dict, *keys: str) -> Optional[dict]:
    for k in keys:
        v = d.get(k)
        if isinstance(v, dict):
            return v
    return None


def get_list(d: Any, *keys: str) -> list:
    if isinstance(d, list):
        return d
    if not isinstance(d, dict):
        return []
    for k in keys:
        v = d.get(k)
        if isinstance(v, list):
            return v
        if isinstance(v, dict):
            nested = get_list(v, *keys)
            if nested:
                return nested
    return []
