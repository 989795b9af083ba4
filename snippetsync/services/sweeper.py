# snippetsync/services/sweeper.py
# Background removal of expired share codes.
# Lazy deletion on read already hides expired codes; this only keeps the table small.

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from snippetsync.services.share_code_service import ShareCodeService
from snippetsync.utils.logger import log_exception

logger = logging.getLogger(__name__)


class ShareCodeSweeper:
    """Runs ShareCodeService.sweep_expired on a fixed interval."""

    def __init__(self, service: ShareCodeService, interval_seconds: float = 60.0):
        self._service = service
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> int:
        try:
            return await self._service.sweep_expired()
        except Exception as e:
            # a failed sweep must not kill the loop; next tick retries
            log_exception(e, "ShareCodeSweeper.run_once")
            logger.error(f"Share code sweep failed: {type(e).__name__}: {e}")
            return 0

    async def _loop(self) -> None:
        while True:
            await self.run_once()
            await asyncio.sleep(self.interval_seconds)

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name="share-code-sweeper")
        logger.info(f"Share code sweeper started (every {self.interval_seconds}s)")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Share code sweeper stopped")
