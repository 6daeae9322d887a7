"""Tests for the debounced search dispatcher."""

import asyncio
import json
import logging

import pytest

from reelfind.search.backend import SearchBackendError
from reelfind.search.dispatcher import SearchDispatcher
from reelfind.search.panels import ActivePanel, PanelState


class FakeBackend:
    """Backend returning canned payloads, optionally after a delay."""

    def __init__(self, responses=None, delays=None):
        self.responses = responses or {}
        self.delays = delays or {}
        self.calls: list[str] = []
        self.cancelled: list[str] = []

    async def search(self, query, limit=None):
        self.calls.append(query)
        try:
            await asyncio.sleep(self.delays.get(query, 0))
        except asyncio.CancelledError:
            self.cancelled.append(query)
            raise
        response = self.responses.get(query, [])
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def backend(sarah_payload) -> FakeBackend:
    return FakeBackend(responses={"sarah": sarah_payload})


@pytest.fixture
def panels() -> PanelState:
    return PanelState()


@pytest.fixture
def dispatcher(backend, panels) -> SearchDispatcher:
    return SearchDispatcher(backend, debounce=0.01, panels=panels)


class TestSubmit:
    """Tests for keystroke handling."""

    @pytest.mark.asyncio
    async def test_short_query_is_not_dispatched(self, dispatcher, backend):
        """Queries under two characters never reach the backend."""
        dispatcher.submit("s")
        await dispatcher.wait_idle()
        await asyncio.sleep(0.03)

        assert backend.calls == []
        assert dispatcher.results == []

    @pytest.mark.asyncio
    async def test_short_query_clears_existing_results(self, dispatcher, panels):
        dispatcher.submit("sarah")
        await dispatcher.wait_idle()
        assert dispatcher.results

        dispatcher.submit("s")

        # Cleared immediately, without waiting for the debounce
        assert dispatcher.results == []
        assert panels.active is ActivePanel.CLOSED

    @pytest.mark.asyncio
    async def test_debounce_sends_only_last_query(self, dispatcher, backend):
        """Rapid keystrokes result in a single request."""
        for partial in ("sa", "sar", "sara", "sarah"):
            dispatcher.submit(partial)
        await dispatcher.wait_idle()

        assert backend.calls == ["sarah"]
        assert [r.id for r in dispatcher.results] == ["a1", "p1"]

    @pytest.mark.asyncio
    async def test_waits_for_quiet_period(self, backend, panels):
        dispatcher = SearchDispatcher(backend, debounce=0.05, panels=panels)
        dispatcher.submit("sarah")
        await asyncio.sleep(0.01)

        assert backend.calls == []
        await dispatcher.wait_idle()
        assert backend.calls == ["sarah"]

    @pytest.mark.asyncio
    async def test_results_open_panel_and_facet_bar(self, dispatcher, panels):
        dispatcher.submit("sarah")
        await dispatcher.wait_idle()

        assert panels.active is ActivePanel.RESULTS
        assert dispatcher.facet_bar_visible

    @pytest.mark.asyncio
    async def test_no_results_keep_panels_closed(self, dispatcher, panels):
        dispatcher.submit("nobody")
        await dispatcher.wait_idle()

        assert dispatcher.results == []
        assert panels.active is ActivePanel.CLOSED
        assert not dispatcher.facet_bar_visible

    @pytest.mark.asyncio
    async def test_new_keystroke_cancels_in_flight_search(self, sarah_payload, panels):
        backend = FakeBackend(
            responses={"slow": sarah_payload, "sarah": sarah_payload},
            delays={"slow": 0.5},
        )
        dispatcher = SearchDispatcher(backend, debounce=0.01, panels=panels)

        dispatcher.submit("slow")
        await asyncio.sleep(0.05)  # past the debounce, request in flight
        assert backend.calls == ["slow"]

        dispatcher.submit("sarah")
        await dispatcher.wait_idle()

        assert backend.cancelled == ["slow"]
        assert backend.calls == ["slow", "sarah"]
        assert [r.id for r in dispatcher.results] == ["a1", "p1"]

    @pytest.mark.asyncio
    async def test_short_query_during_search_stops_spinner(self, sarah_payload, panels):
        """Backspacing below the minimum while a request is in flight."""
        backend = FakeBackend(responses={"sarah": sarah_payload}, delays={"sarah": 0.5})
        dispatcher = SearchDispatcher(backend, debounce=0.01, panels=panels)

        dispatcher.submit("sarah")
        await asyncio.sleep(0.05)
        assert dispatcher.is_searching

        dispatcher.submit("s")
        await asyncio.sleep(0.02)

        assert backend.cancelled == ["sarah"]
        assert not dispatcher.is_searching
        assert dispatcher.results == []


class TestSearch:
    """Tests for immediate dispatch."""

    @pytest.mark.asyncio
    async def test_returns_normalized_results(self, dispatcher):
        results = await dispatcher.search("sarah")
        assert [r.id for r in results] == ["a1", "p1"]
        assert not dispatcher.is_searching

    @pytest.mark.asyncio
    async def test_short_query_returns_empty(self, dispatcher, backend):
        assert await dispatcher.search("s") == []
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_short_query_supersedes_in_flight_search(
        self, sarah_payload, panels
    ):
        backend = FakeBackend(responses={"sarah": sarah_payload}, delays={"sarah": 0.05})
        dispatcher = SearchDispatcher(backend, panels=panels)

        pending = asyncio.create_task(dispatcher.search("sarah"))
        await asyncio.sleep(0.01)
        assert dispatcher.is_searching

        assert await dispatcher.search("s") == []
        assert not dispatcher.is_searching

        await pending
        assert not dispatcher.is_searching
        assert dispatcher.results == []

    @pytest.mark.asyncio
    async def test_string_payload(self, sarah_payload, panels):
        backend = FakeBackend(responses={"sarah": json.dumps(sarah_payload)})
        dispatcher = SearchDispatcher(backend, panels=panels)

        results = await dispatcher.search("sarah")
        assert len(results) == 2

    @pytest.mark.asyncio
    async def test_backend_failure_clears_results_and_logs(
        self, dispatcher, backend, caplog
    ):
        """Failures are logged, never raised."""
        await dispatcher.search("sarah")
        backend.responses["broken"] = SearchBackendError(
            "Search returned errors: boom", [{"message": "boom"}]
        )

        with caplog.at_level(logging.ERROR, logger="reelfind.search.dispatcher"):
            results = await dispatcher.search("broken")

        assert results == []
        assert dispatcher.results == []
        assert "boom" in caplog.text

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_contained(self, dispatcher, backend):
        backend.responses["oops"] = RuntimeError("connection reset")
        assert await dispatcher.search("oops") == []

    @pytest.mark.asyncio
    async def test_stale_response_is_discarded(self, sarah_payload, panels):
        """A slow response arriving after a newer one doesn't overwrite it."""
        stale = [{"type": "task", "id": "t-old", "title": "Old", "relevance": 0.5}]
        backend = FakeBackend(
            responses={"sar": stale, "sarah": sarah_payload},
            delays={"sar": 0.05},
        )
        dispatcher = SearchDispatcher(backend, panels=panels)

        await asyncio.gather(dispatcher.search("sar"), dispatcher.search("sarah"))

        assert [r.id for r in dispatcher.results] == ["a1", "p1"]

    @pytest.mark.asyncio
    async def test_stale_failure_does_not_clear(self, sarah_payload, panels):
        backend = FakeBackend(
            responses={"sar": SearchBackendError("timeout"), "sarah": sarah_payload},
            delays={"sar": 0.05},
        )
        dispatcher = SearchDispatcher(backend, panels=panels)

        await asyncio.gather(dispatcher.search("sar"), dispatcher.search("sarah"))

        assert [r.id for r in dispatcher.results] == ["a1", "p1"]


class TestTeardown:
    """Tests for aclose()."""

    @pytest.mark.asyncio
    async def test_aclose_cancels_pending_search(self, dispatcher, backend):
        dispatcher.submit("sarah")
        await dispatcher.aclose()
        await asyncio.sleep(0.03)

        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_aclose_without_pending_search(self, dispatcher):
        await dispatcher.aclose()
