"""
Concurrent fan-out of one search to every permitted airline source.

Each source runs as its own asyncio task. When a task resolves, the
coordinator (the only writer of AggregationState) merges the batch or records
the failure, then posts a snapshot on the session queue. The stream returned
by search() drains that queue: one update per resolved source, the last one
with done=True.

Starting a new search supersedes the previous one: its tasks are left to
finish, but whatever they return is dropped and its stream ends, even when
its last updates are still queued. The audit record is written by a separate
task in a worker thread.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import AsyncIterator, Callable, Dict, Iterable, List, Optional

from skyfare.search.errors import NoSourcesAuthorized, SourceFetchError
from skyfare.search.models import (
    AggregationState,
    Airline,
    Caller,
    NormalizedFlight,
    SearchRequest,
    SearchUpdate,
)
from skyfare.search.search_log import SearchLog, SearchLogEntry
from skyfare.search.sources.base import SourceFetcher

logger = logging.getLogger(__name__)

# Called with (airline, batch size) once per non-empty batch
Notifier = Callable[[Airline, int], None]

_SUPERSEDED = object()


@dataclass
class _Session:
    state: AggregationState
    queue: asyncio.Queue = field(default_factory=asyncio.Queue)
    tasks: List[asyncio.Task] = field(default_factory=list)


class AggregationCoordinator:
    """Fans a search out to airline sources and accumulates their batches."""

    def __init__(
        self,
        sources: Iterable[SourceFetcher],
        search_log: Optional[SearchLog] = None,
        notifier: Optional[Notifier] = None,
    ):
        self._sources: Dict[Airline, SourceFetcher] = {}
        for source in sources:
            if source.airline in self._sources:
                raise ValueError(f"Duplicate source for airline {source.airline.value}")
            self._sources[source.airline] = source
        self._search_log = search_log
        self._notifier = notifier
        self._session: Optional[_Session] = None

    @property
    def airlines(self) -> List[Airline]:
        return list(self._sources)

    @property
    def current(self) -> Optional[AggregationState]:
        """Live state of the most recent search, or None before the first one."""
        return self._session.state if self._session else None

    def enabled_sources(self, caller: Caller) -> List[SourceFetcher]:
        return [s for airline, s in self._sources.items() if airline in caller.permissions]

    def search(self, request: SearchRequest, caller: Caller) -> AsyncIterator[SearchUpdate]:
        """Start fetching from every permitted source and return the update stream.

        Must be called from a running event loop. Raises NoSourcesAuthorized,
        before anything is fetched, when the caller may not use any source.
        """
        enabled = self.enabled_sources(caller)
        if not enabled:
            logger.warning("Search refused for %s: no authorized sources", caller.user_id)
            raise NoSourcesAuthorized(caller.user_id)

        entry = SearchLogEntry.create(caller, request) if self._search_log is not None else None

        previous = self._session
        if previous is not None and not previous.state.done:
            logger.info("Superseding search %s", previous.state.session_id)
            previous.queue.put_nowait(_SUPERSEDED)

        state = AggregationState(
            pending={s.airline for s in enabled},
            unauthorized=frozenset(a for a in self._sources if a not in caller.permissions),
        )
        session = _Session(state=state)
        self._session = session
        logger.info(
            "Search %s %s-%s on %s: fetching from %s",
            state.session_id,
            request.origin,
            request.destination,
            request.departure_date,
            ", ".join(s.airline.value for s in enabled),
        )
        if entry is not None:
            session.tasks.append(asyncio.create_task(self._record_search(entry)))
        for source in enabled:
            session.tasks.append(asyncio.create_task(self._run_source(session, source, request)))
        return self._stream(session)

    async def run(self, request: SearchRequest, caller: Caller) -> AggregationState:
        """Drain the stream, wait for the audit write, and return the last observed state."""
        stream = self.search(request, caller)
        session = self._session
        state = session.state.snapshot()
        async for update in stream:
            state = update.state
        await asyncio.gather(*session.tasks, return_exceptions=True)
        return state

    async def _stream(self, session: _Session) -> AsyncIterator[SearchUpdate]:
        while True:
            update = await session.queue.get()
            # A finished search can still have updates queued when the next one starts
            if update is _SUPERSEDED or self._is_stale(session):
                return
            yield update
            if update.done:
                return

    async def _run_source(self, session: _Session, source: SourceFetcher, request: SearchRequest) -> None:
        airline = source.airline
        try:
            batch = list(await source.fetch(request))
        except asyncio.CancelledError:
            self._record_failure(session, airline, SourceFetchError(airline.value, "fetch cancelled"))
            raise
        except Exception as e:
            self._record_failure(session, airline, e)
        else:
            self._record_batch(session, airline, batch)

    def _is_stale(self, session: _Session) -> bool:
        return session is not self._session

    def _record_batch(self, session: _Session, airline: Airline, batch: List[NormalizedFlight]) -> None:
        state = session.state
        if self._is_stale(session):
            logger.info(
                "Discarding %d %s flights from superseded search %s",
                len(batch),
                airline.value,
                state.session_id,
            )
            return
        if airline not in state.pending:
            return
        state.pending.discard(airline)
        state.succeeded.add(airline)
        state.accumulated.extend(batch)
        logger.info("%s returned %d flights for search %s", airline.value, len(batch), state.session_id)
        if batch:
            self._notify(airline, len(batch))
        self._publish(session, airline)

    def _record_failure(self, session: _Session, airline: Airline, error: Exception) -> None:
        state = session.state
        if self._is_stale(session):
            logger.info("Ignoring %s failure from superseded search %s: %s", airline.value, state.session_id, error)
            return
        if airline not in state.pending:
            return
        state.pending.discard(airline)
        state.errors[airline] = str(error) or type(error).__name__
        logger.warning("%s search failed for search %s: %s", airline.value, state.session_id, error)
        self._publish(session, airline)

    def _publish(self, session: _Session, airline: Airline) -> None:
        state = session.state
        session.queue.put_nowait(SearchUpdate(state=state.snapshot(), source=airline, done=state.done))

    def _notify(self, airline: Airline, count: int) -> None:
        if self._notifier is None:
            return
        try:
            self._notifier(airline, count)
        except Exception:
            logger.exception("Arrival notifier failed for %s", airline.value)

    async def _record_search(self, entry: SearchLogEntry) -> None:
        # Log sinks may block on file or network I/O
        try:
            await asyncio.to_thread(self._search_log.record, entry)
        except Exception:
            logger.exception("Could not record search for %s", entry.user_id)
