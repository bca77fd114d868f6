"""
Request deduplication cache.

Collapses identical expensive calls into one execution: a finished result is
served from cache until its TTL runs out, and a call that is still in flight
is shared by every caller asking for the same key.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import re
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Pattern, Union

from .config import CACHE_CONFIG

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    result: Any
    stored_at: float
    expires_at: float


class RequestDeduplicationCache:
    def __init__(self, default_ttl: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self.default_ttl = default_ttl if default_ttl is not None else CACHE_CONFIG["dedup_ttl"]
        self._clock = clock
        self._cache: Dict[str, CacheEntry] = {}
        self._pending: Dict[str, asyncio.Task] = {}

    @staticmethod
    def make_key(params: Any) -> str:
        """Stable SHA-256 of the params with keys sorted at every level."""
        normalized = json.dumps(params, sort_keys=True, default=str, separators=(",", ":"))
        return hashlib.sha256(normalized.encode("utf-8")).hexdigest()

    async def get_or_execute(
        self,
        params: Any,
        executor: Callable[[], Awaitable[Any]],
        ttl: Optional[float] = None,
    ) -> Any:
        key = self.make_key(params)

        entry = self._cache.get(key)
        if entry is not None:
            if entry.expires_at > self._clock():
                logger.debug(f"[RequestDeduplicationCache] Cache hit for hash: {key[:8]}...")
                return entry.result
            del self._cache[key]

        task = self._pending.get(key)
        if task is not None:
            logger.debug(f"[RequestDeduplicationCache] Deduplicating in-flight request: {key[:8]}...")
        else:
            ttl = ttl if ttl is not None else self.default_ttl
            task = asyncio.ensure_future(self._execute(key, executor, ttl))
            task.add_done_callback(self._log_unretrieved)
            self._pending[key] = task

        # One caller timing out must not cancel the execution the others share.
        return await asyncio.shield(task)

    async def _execute(self, key: str, executor: Callable[[], Awaitable[Any]], ttl: float) -> Any:
        try:
            result = await executor()
        finally:
            # After clear() a newer execution may own this key.
            current = self._pending.get(key) is asyncio.current_task()
            if current:
                del self._pending[key]

        if not current:
            return result
        now = self._clock()
        self._cache[key] = CacheEntry(result=result, stored_at=now, expires_at=now + ttl)
        return result

    @staticmethod
    def _log_unretrieved(task: asyncio.Task) -> None:
        if not task.cancelled() and task.exception() is not None:
            logger.debug(f"[RequestDeduplicationCache] Execution failed: {task.exception()!r}")

    def invalidate_pattern(self, pattern: Union[str, Pattern[str]]) -> int:
        """Drop cached entries whose key matches `pattern`."""
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        keys = [k for k in self._cache if regex.search(k)]
        for k in keys:
            del self._cache[k]
        if keys:
            logger.info(f"[RequestDeduplicationCache] Invalidated {len(keys)} cache entries")
        return len(keys)

    def prune_expired(self) -> int:
        now = self._clock()
        expired = [k for k, entry in self._cache.items() if entry.expires_at <= now]
        for k in expired:
            del self._cache[k]
        if expired:
            logger.info(f"[RequestDeduplicationCache] Pruned {len(expired)} expired entries")
        return len(expired)

    def clear(self) -> None:
        self._cache.clear()
        self._pending.clear()

    def stats(self) -> Dict[str, int]:
        return {"size": len(self._cache), "pending_requests": len(self._pending)}
