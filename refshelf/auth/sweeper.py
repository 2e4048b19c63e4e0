"""Periodic removal of expired token records."""

import asyncio
from typing import Optional

from ..utils.logging import get_logger
from .store import TokenStore

logger = get_logger("auth.sweeper")


class TokenSweeper:
    """Runs ``TokenStore.sweep_expired`` on a fixed interval in the background.

    Expired rows are already rejected by the store's liveness check; the
    sweep only keeps the table from growing without bound.
    """

    def __init__(self, store: TokenStore, interval_seconds: float = 300):
        self._store = store
        self._interval = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> int:
        return await self._store.sweep_expired()

    async def _run_loop(self) -> None:
        logger.info("token_sweeper_started", interval=self._interval)
        while True:
            try:
                await self.run_once()
                await asyncio.sleep(self._interval)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("token_sweeper_error", error=str(e))
                await asyncio.sleep(self._interval)

    def start(self) -> None:
        """Create and start the background sweep task."""
        if not self.running:
            self._task = asyncio.create_task(self._run_loop())
            logger.info("token_sweeper_task_created")

    async def stop(self) -> None:
        """Cancel the background task and wait for it to finish."""
        if self._task is None:
            return
        if not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        logger.info("token_sweeper_stopped")
