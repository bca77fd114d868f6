"""
Wiring for the matching pipeline.

Builds the caches, oracle clients, strategies and orchestrator as one object
with an explicit lifecycle: create at process start, `start()` inside the
running event loop, `close()` at shutdown.
"""

from __future__ import annotations

import logging
from typing import Optional

from .ai_service import SimilarityOracle, SummarizationOracle
from .dedup_cache import RequestDeduplicationCache
from .feature_extractor import MatchFeatureExtractor
from .huggingface_service import HuggingFaceService
from .insight_cache import CompanyInsightCache
from .keyword_strategy import KeywordMatchingStrategy
from .llm_summarizer import LLMSummarizer
from .maintenance import CacheJanitor
from .orchestrator import MatchingOrchestrator
from .performance import PerformanceMonitor
from .semantic_strategy import SemanticMatchingStrategy

logger = logging.getLogger(__name__)


class MatchingService:
    def __init__(
        self,
        similarity_oracle: SimilarityOracle,
        summarizer: SummarizationOracle,
        dedup_cache: RequestDeduplicationCache,
        insight_cache: CompanyInsightCache,
        monitor: Optional[PerformanceMonitor] = None,
        matching_timeout: Optional[float] = None,
        insight_timeout: Optional[float] = None,
        prune_interval: Optional[float] = None,
    ):
        self.dedup_cache = dedup_cache
        self.insight_cache = insight_cache
        self.monitor = monitor or PerformanceMonitor()

        extractor = MatchFeatureExtractor()
        self.orchestrator = MatchingOrchestrator(
            primary=SemanticMatchingStrategy(similarity_oracle, extractor),
            fallback=KeywordMatchingStrategy(extractor),
            summarizer=summarizer,
            insight_cache=insight_cache,
            monitor=self.monitor,
            matching_timeout=matching_timeout,
            insight_timeout=insight_timeout,
        )
        self.janitor = CacheJanitor([dedup_cache, insight_cache], interval=prune_interval)

    @classmethod
    def create(
        cls,
        hugging_face_api_key: Optional[str],
        openai_api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        matching_timeout: Optional[float] = None,
        insight_timeout: Optional[float] = None,
        insight_cache_max_size: Optional[int] = None,
        prune_interval: Optional[float] = None,
    ) -> "MatchingService":
        """Build the production graph: Hugging Face similarity + phi/OpenAI summaries."""
        dedup_cache = RequestDeduplicationCache()
        return cls(
            similarity_oracle=HuggingFaceService(hugging_face_api_key),
            summarizer=LLMSummarizer(dedup_cache, model_name=model_name, api_key=openai_api_key),
            dedup_cache=dedup_cache,
            insight_cache=CompanyInsightCache(max_size=insight_cache_max_size),
            matching_timeout=matching_timeout,
            insight_timeout=insight_timeout,
            prune_interval=prune_interval,
        )

    def start(self) -> None:
        self.janitor.start()

    async def close(self) -> None:
        await self.janitor.close()
        self.dedup_cache.clear()
        self.insight_cache.clear()
        logger.info("Matching service closed")

    def stats(self) -> dict:
        return {
            "performance": self.monitor.all_stats(),
            "dedup_cache": self.dedup_cache.stats(),
            "insight_cache": self.insight_cache.stats(),
        }
