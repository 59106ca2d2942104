"""Debounced search input and fetch lifecycle for a single search box."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Protocol

from moviefinder.domain.models import (
    ErrorState,
    FetchState,
    IdleState,
    LoadedState,
    LoadingState,
    MovieItem,
)
from moviefinder.logging import logger as default_logger
from moviefinder.services.exceptions import CatalogApplicationError, CatalogError
from moviefinder.utils.debounce import Debouncer

FETCH_ERROR_MESSAGE = "Error fetching movies. Please try again later."
APPLICATION_ERROR_MESSAGE = "Failed to fetch movies"
DEFAULT_DEBOUNCE_SECONDS = 1.0

Observer = Callable[["QueryController"], None]


class MovieSource(Protocol):
    def fetch_movies(self, query: str = "") -> Awaitable[list[MovieItem]]: ...


class QueryController:
    """Owns the raw query, the committed query and the current fetch state.

    Input changes restart a debounce timer; when it expires the raw query is
    committed and, if the committed value changed, one fetch cycle starts.
    Each cycle is tagged with a generation number and only the latest
    generation may write the fetch state, so a slow response for an older
    query never overwrites a newer one.
    """

    def __init__(
        self,
        catalog: MovieSource,
        *,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        logger: Any = None,
    ) -> None:
        self._catalog = catalog
        self._log = logger or default_logger
        self._raw_query = ""
        self._committed_query: str | None = None
        self._state: FetchState = IdleState()
        self._generation = 0
        self._tasks: set[asyncio.Task[None]] = set()
        self._observers: list[Observer] = []
        self._debouncer = Debouncer(debounce_seconds, self._commit)

    @property
    def raw_query(self) -> str:
        return self._raw_query

    @property
    def committed_query(self) -> str | None:
        return self._committed_query

    @property
    def state(self) -> FetchState:
        return self._state

    @property
    def is_loading(self) -> bool:
        return isinstance(self._state, LoadingState)

    @property
    def results(self) -> list[Any]:
        if isinstance(self._state, LoadedState):
            return self._state.results
        return []

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register ``observer``; returns a callable that removes it."""

        self._observers.append(observer)

        def _unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _unsubscribe

    def on_input_change(self, text: str) -> None:
        self._raw_query = text
        self._debouncer.trigger()
        self._notify()

    def flush(self) -> None:
        """Commit the raw query now instead of waiting for the timer."""

        self._debouncer.cancel()
        self._commit()

    async def wait_for_pending(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        self._debouncer.cancel()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._observers.clear()

    def _commit(self) -> None:
        query = self._raw_query
        if query == self._committed_query:
            self._log.debug("query_unchanged", query=query)
            return
        self._committed_query = query
        self._log.info("query_committed", query=query)
        self._start_fetch(query)

    def _start_fetch(self, query: str) -> None:
        self._generation += 1
        generation = self._generation
        self._set_state(LoadingState())
        task = asyncio.get_running_loop().create_task(self._run_fetch(generation, query))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_fetch(self, generation: int, query: str) -> None:
        state: FetchState
        try:
            results = await self._catalog.fetch_movies(query)
            state = LoadedState(results=results)
        except CatalogApplicationError as exc:
            self._log.info("fetch_cycle_rejected", query=query, error=exc.message)
            state = ErrorState(message=exc.message or APPLICATION_ERROR_MESSAGE)
        except CatalogError as exc:
            self._log.warning("fetch_cycle_failed", query=query, error=str(exc))
            state = ErrorState(message=FETCH_ERROR_MESSAGE)
        except Exception:
            self._log.exception("fetch_cycle_crashed", query=query)
            state = ErrorState(message=FETCH_ERROR_MESSAGE)

        if generation != self._generation:
            self._log.debug(
                "stale_fetch_discarded",
                query=query,
                generation=generation,
                latest_generation=self._generation,
            )
            return
        self._set_state(state)

    def _set_state(self, state: FetchState) -> None:
        self._state = state
        self._notify()

    def _notify(self) -> None:
        for observer in list(self._observers):
            try:
                observer(self)
            except Exception:
                self._log.exception("query_observer_failed")


__all__ = [
    "APPLICATION_ERROR_MESSAGE",
    "FETCH_ERROR_MESSAGE",
    "MovieSource",
    "Observer",
    "QueryController",
]
