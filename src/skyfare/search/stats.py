"""Search activity statistics from the audit log."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from skyfare.search.search_log import SearchLogEntry

PERIODS = ("all", "month", "day")


@dataclass
class UserSearchCount:
    user_id: str
    search_count: int
    email: Optional[str] = None
    full_name: Optional[str] = None


@dataclass
class SearchStats:
    """Container for search statistics over one period."""

    period: str = "all"
    label: str = "All time"
    total_searches: int = 0
    by_user: List[UserSearchCount] = field(default_factory=list)
    by_route: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "period": self.period,
            "label": self.label,
            "total_searches": self.total_searches,
            "by_user": [
                {
                    "user_id": u.user_id,
                    "email": u.email,
                    "full_name": u.full_name,
                    "search_count": u.search_count,
                }
                for u in self.by_user
            ],
            "by_route": self.by_route,
        }

    def user_dataframe(self) -> pd.DataFrame:
        """Return per-user counts as DataFrame, busiest first."""
        if not self.by_user:
            return pd.DataFrame(columns=["user_id", "email", "full_name", "search_count"])
        return pd.DataFrame(
            [
                {
                    "user_id": u.user_id,
                    "email": u.email or "N/A",
                    "full_name": u.full_name,
                    "search_count": u.search_count,
                }
                for u in self.by_user
            ]
        )


def _entries_dataframe(entries: Iterable[SearchLogEntry]) -> pd.DataFrame:
    rows = [
        {
            "user_id": e.user_id,
            "email": e.email,
            "full_name": e.full_name,
            "searched_at": e.searched_at,
            "route": f"{e.search_data.get('origin', '?')}-{e.search_data.get('destination', '?')}",
        }
        for e in entries
    ]
    return pd.DataFrame(rows, columns=["user_id", "email", "full_name", "searched_at", "route"])


def _period_bounds(period: str, month: Optional[str], day: Optional[date]):
    """Return (start, end, label) for the period; start/end None for 'all'."""
    if period == "all":
        return None, None, "All time"
    if period == "month":
        if not month:
            raise ValueError("month (YYYY-MM) is required for period 'month'")
        try:
            start = pd.Timestamp(datetime.strptime(month, "%Y-%m"))
        except ValueError:
            raise ValueError(f"Invalid month format: {month}. Expected YYYY-MM") from None
        end = start + pd.offsets.MonthBegin(1)
        return start, end, f"Month {start.strftime('%m/%Y')}"
    if period == "day":
        if day is None:
            raise ValueError("day is required for period 'day'")
        start = pd.Timestamp(day)
        return start, start + pd.Timedelta(days=1), start.strftime("%d/%m/%Y")
    raise ValueError(f"Unknown period: {period}. Expected one of {', '.join(PERIODS)}")


def compute_search_stats(
    entries: Iterable[SearchLogEntry],
    period: str = "all",
    month: Optional[str] = None,
    day: Optional[date] = None,
) -> SearchStats:
    """Count searches per user for all time, one month or one day."""
    start, end, label = _period_bounds(period, month, day)
    stats = SearchStats(period=period, label=label)

    df = _entries_dataframe(entries)
    if df.empty:
        return stats

    df["searched_at"] = pd.to_datetime(df["searched_at"])
    if start is not None:
        df = df[(df["searched_at"] >= start) & (df["searched_at"] < end)]
    if df.empty:
        return stats

    stats.total_searches = len(df)

    # Latest known identity details per user
    identity = df.sort_values("searched_at").groupby("user_id").last()
    counts = (
        df.groupby("user_id").size().rename("search_count").reset_index()
        .sort_values(["search_count", "user_id"], ascending=[False, True])
    )
    for row in counts.itertuples(index=False):
        details = identity.loc[row.user_id]
        stats.by_user.append(
            UserSearchCount(
                user_id=row.user_id,
                search_count=int(row.search_count),
                email=None if pd.isna(details["email"]) else details["email"],
                full_name=None if pd.isna(details["full_name"]) else details["full_name"],
            )
        )

    stats.by_route = {k: int(v) for k, v in df["route"].value_counts().sort_index().items()}
    return stats
