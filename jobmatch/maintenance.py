"""
Periodic cache maintenance.

Caches are plain objects owned by whoever builds them; the janitor sweeps
their expired entries on the running event loop between `start()` and
`close()`.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from .config import CACHE_CONFIG

logger = logging.getLogger(__name__)


class CacheJanitor:
    def __init__(self, caches: List, interval: Optional[float] = None):
        self.caches = list(caches)
        self.interval = interval if interval is not None else CACHE_CONFIG["prune_interval"]
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info(f"Cache janitor started (interval {self.interval:.0f}s, {len(self.caches)} caches)")

    def sweep(self) -> int:
        pruned = 0
        for cache in self.caches:
            try:
                pruned += cache.prune_expired()
            except Exception as e:
                logger.error(f"Failed to prune {type(cache).__name__}: {e}", exc_info=True)
        return pruned

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.sweep()

    async def close(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Cache janitor stopped")
