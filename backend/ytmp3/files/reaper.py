"""Background task that deletes converted files nobody downloaded.

Runs for the lifetime of the application; started and stopped from the
FastAPI lifespan.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from .service import DownloadStore

logger = logging.getLogger(__name__)


class DownloadReaper:
    """Periodically sweeps the download store for expired files."""

    def __init__(
        self,
        store: DownloadStore,
        max_age_seconds: float = 3600,
        interval_seconds: float = 3600,
    ) -> None:
        self._store = store
        self._max_age = max_age_seconds
        self._interval = interval_seconds
        self._task: Optional[asyncio.Task] = None  # type: ignore[type-arg]

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start the background sweep task."""
        if self.running:
            return
        self._task = asyncio.create_task(self._sweep_loop())
        logger.info(
            "Download reaper started (interval=%ss, max_age=%ss, dir=%s)",
            self._interval,
            self._max_age,
            self._store.directory,
        )

    async def stop(self) -> None:
        """Cancel the sweep task."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Download reaper stopped.")

    # ------------------------------------------------------------------
    # Background sweep
    # ------------------------------------------------------------------

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            self.sweep_once()

    def sweep_once(self) -> int:
        """Run a single sweep; an unreadable directory is logged, not fatal."""
        try:
            return self._store.sweep(self._max_age)
        except OSError as exc:
            logger.warning("Download sweep failed: %s", exc)
            return 0
