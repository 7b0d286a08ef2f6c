"""Pluggable airline flight sources."""

from skyfare.search.sources.base import SourceFetcher
from skyfare.search.sources.vietjet import VietJetSource
from skyfare.search.sources.vietnam_airlines import VietnamAirlinesSource

__all__ = ["SourceFetcher", "VietJetSource", "VietnamAirlinesSource"]
