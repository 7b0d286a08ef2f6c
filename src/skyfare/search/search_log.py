"""Audit trail of submitted searches."""

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from skyfare.search.models import Caller, SearchRequest


@dataclass
class SearchLogEntry:
    """Who searched for what, and when."""

    user_id: str
    search_data: Dict[str, Any]
    searched_at: datetime
    email: Optional[str] = None
    full_name: Optional[str] = None

    @classmethod
    def create(
        cls, caller: Caller, request: SearchRequest, searched_at: Optional[datetime] = None
    ) -> "SearchLogEntry":
        return cls(
            user_id=caller.user_id,
            search_data=request.to_dict(),
            searched_at=searched_at or datetime.now(),
            email=caller.email,
            full_name=caller.full_name,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "email": self.email,
            "full_name": self.full_name,
            "search_data": self.search_data,
            "searched_at": self.searched_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SearchLogEntry":
        return cls(
            user_id=d["user_id"],
            search_data=d.get("search_data") or {},
            searched_at=datetime.fromisoformat(d["searched_at"]),
            email=d.get("email"),
            full_name=d.get("full_name"),
        )


@runtime_checkable
class SearchLog(Protocol):
    """Sink for search audit records."""

    def record(self, entry: SearchLogEntry) -> None:
        ...

    def entries(self) -> List[SearchLogEntry]:
        ...


@dataclass
class MemorySearchLog:
    """Keeps entries in a list."""

    items: List[SearchLogEntry] = field(default_factory=list)

    def record(self, entry: SearchLogEntry) -> None:
        self.items.append(entry)

    def entries(self) -> List[SearchLogEntry]:
        return list(self.items)


class JsonlSearchLog:
    """Appends one JSON object per search to a file."""

    def __init__(self, path):
        self.path = Path(path)

    def record(self, entry: SearchLogEntry) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(entry.to_dict(), ensure_ascii=False) + "\n")

    def entries(self) -> List[SearchLogEntry]:
        if not self.path.exists():
            return []
        result = []
        with self.path.open(encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line:
                    result.append(SearchLogEntry.from_dict(json.loads(line)))
        return result
