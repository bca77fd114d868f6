"""
Cache for company insights.

Keyed by job id plus a short hash of the description, so an edited posting
misses even under the same id. Entries live for 7 days; at capacity the
least recently used entry is evicted.
"""

from __future__ import annotations

import hashlib
import logging
import time
from typing import Callable, Dict, Optional

from cachetools import TTLCache

from .config import CACHE_CONFIG
from .models import CompanyInsight

logger = logging.getLogger(__name__)


class CompanyInsightCache:
    def __init__(
        self,
        ttl: Optional[float] = None,
        max_size: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl if ttl is not None else CACHE_CONFIG["insight_ttl"]
        self.max_size = max_size if max_size is not None else CACHE_CONFIG["insight_max_size"]
        if self.max_size < 1:
            raise ValueError("max_size must be at least 1")
        self._entries: TTLCache = TTLCache(maxsize=self.max_size, ttl=self.ttl, timer=clock)

    @staticmethod
    def make_key(job_id: str, description: str) -> str:
        digest = hashlib.md5(description.encode("utf-8")).hexdigest()[:8]
        return f"insight:{job_id}:{digest}"

    def get(self, job_id: str, description: str) -> Optional[CompanyInsight]:
        insight = self._entries.get(self.make_key(job_id, description))
        if insight is not None:
            logger.debug(f"[CompanyInsightCache] Cache hit for job: {job_id}")
        return insight

    def set(self, job_id: str, description: str, insight: CompanyInsight) -> None:
        self._entries[self.make_key(job_id, description)] = insight
        logger.debug(f"[CompanyInsightCache] Cached insight for job: {job_id}")

    def prune_expired(self) -> int:
        before = len(self._entries)
        self._entries.expire()
        pruned = before - len(self._entries)
        if pruned:
            logger.info(f"[CompanyInsightCache] Pruned {pruned} expired entries")
        return pruned

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        self._entries.expire()
        return len(self._entries)

    def stats(self) -> Dict[str, int]:
        return {"size": len(self), "max_size": self.max_size}
