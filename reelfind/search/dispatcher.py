"""Debounced search dispatch.

Keystrokes arrive through ``submit()``. After a quiet period the latest
query is sent to the backend; anything typed before then cancels the
pending search. Each dispatch carries a sequence number, and a
response that isn't from the latest dispatch is dropped, so a slow,
stale reply can never overwrite fresher results.

Failures never reach the caller: they are logged and the result set is
cleared.
"""

import asyncio
import contextlib
import logging

from .backend import SearchBackend
from .models import SearchResult
from .normalize import normalize_results
from .panels import ActivePanel, PanelState
from .ranking import ResultView

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE = 0.3  # Seconds
DEFAULT_MIN_LENGTH = 2
DEFAULT_LIMIT = 10


class SearchDispatcher:
    """Turns a stream of keystrokes into at most one live search.

    Example:
        dispatcher = SearchDispatcher(backend, panels=PanelState())
        dispatcher.submit("sa")
        dispatcher.submit("sarah")
        await dispatcher.wait_idle()
        print(dispatcher.results)
    """

    def __init__(
        self,
        backend: SearchBackend,
        *,
        debounce: float = DEFAULT_DEBOUNCE,
        min_length: int = DEFAULT_MIN_LENGTH,
        limit: int | None = DEFAULT_LIMIT,
        panels: PanelState | None = None,
    ):
        """Initialize the dispatcher.

        Args:
            backend: Search backend to dispatch to.
            debounce: Seconds to wait after the last keystroke.
            min_length: Queries shorter than this are never dispatched.
            limit: Maximum results requested per search.
            panels: Shared panel state driven by result availability.
        """
        self._backend = backend
        self._debounce = debounce
        self._min_length = min_length
        self._limit = limit
        self._panels = panels or PanelState()

        self._sequence = 0
        self._task: asyncio.Task | None = None

        self.query = ""
        self.is_searching = False
        self.view = ResultView()

    @property
    def results(self) -> list[SearchResult]:
        """Current results, ranked."""
        return self.view.results

    @property
    def panels(self) -> PanelState:
        return self._panels

    @property
    def facet_bar_visible(self) -> bool:
        """The facet bar is only offered when there is something to filter."""
        return bool(self.view.results)

    def submit(self, query: str) -> None:
        """Accept the query as it stands after a keystroke.

        Must be called from within a running event loop. Too-short
        queries clear results immediately without dispatching.
        """
        self.query = query
        self._cancel_pending()

        if len(query) < self._min_length:
            # Invalidate anything still in flight
            self._sequence += 1
            self.is_searching = False
            self._set_results([])
            return

        self._task = asyncio.create_task(self._debounced_search(query))

    async def search(self, query: str) -> list[SearchResult]:
        """Dispatch ``query`` immediately, bypassing the debounce.

        Returns:
            The current results after this search. A response superseded
            by a newer dispatch is discarded and the newer state returned.
        """
        self._sequence += 1
        sequence = self._sequence

        if len(query) < self._min_length:
            self.is_searching = False
            self._set_results([])
            return []

        self.is_searching = True
        try:
            payload = await self._backend.search(query, limit=self._limit)
        except asyncio.CancelledError:
            logger.debug("Search for %r cancelled", query)
            raise
        except Exception as e:
            if sequence == self._sequence:
                logger.error("Search for %r failed: %s", query, e)
                self._set_results([])
            else:
                logger.debug("Ignoring failure of superseded search %r: %s", query, e)
            return self.results
        finally:
            if sequence == self._sequence:
                self.is_searching = False

        if sequence != self._sequence:
            logger.debug("Discarding stale results for %r", query)
            return self.results

        results = normalize_results(payload)
        logger.debug("Search for %r returned %d results", query, len(results))
        self._set_results(results)
        return self.results

    async def wait_idle(self) -> None:
        """Wait for the pending debounced search, if any, to finish."""
        task = self._task
        if task is None:
            return
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def aclose(self) -> None:
        """Cancel any pending search (component teardown)."""
        task = self._task
        self._cancel_pending()
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def _debounced_search(self, query: str) -> None:
        await asyncio.sleep(self._debounce)
        await self.search(query)

    def _cancel_pending(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def _set_results(self, results: list[SearchResult]) -> None:
        self.view.set_results(results)
        if results:
            self._panels.open(ActivePanel.RESULTS)
        else:
            self._panels.close(ActivePanel.RESULTS)
            self._panels.close(ActivePanel.FACETS)
