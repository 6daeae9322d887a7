"""Fixed-interval polling tied to an explicit lifetime.

Polling runs as a task that is started and stopped deliberately, so
nothing keeps firing after its owner is gone.
"""

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class Poller:
    """Call an async function every ``interval`` seconds until stopped.

    The first call happens immediately. A failing call is logged and
    polling continues.

    Example:
        async with Poller(refresh, interval=10.0):
            await run_until_closed()
    """

    def __init__(self, callback: Callable[[], Awaitable[None]], interval: float = 10.0):
        if interval <= 0:
            raise ValueError("Poll interval must be positive")
        self._callback = callback
        self._interval = interval
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start polling. Must be called from within a running event loop."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Cancel the polling task and wait for it to finish."""
        task = self._task
        self._task = None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def wait(self) -> None:
        """Block until polling is stopped from elsewhere."""
        if self._task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await self._task

    async def __aenter__(self) -> "Poller":
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

    async def _run(self) -> None:
        while True:
            try:
                await self._callback()
            except Exception:
                logger.exception("Poll callback failed")
            await asyncio.sleep(self._interval)
