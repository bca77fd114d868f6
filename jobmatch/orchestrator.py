"""
Main Matching Orchestrator

Orchestrates the complete matching process:
1. Race the primary (semantic) strategy against a time budget
2. Fall back to the deterministic (keyword) strategy on timeout or failure
3. Generate cached company insights for the matched jobs
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Dict, List, Optional

from .config import DESCRIPTION_PREVIEW_CHARS, MAX_KEY_RESPONSIBILITIES, MAX_MATCHES, TIMEOUTS
from .ai_service import SummarizationOracle
from .insight_cache import CompanyInsightCache
from .models import AnonymizedProfile, CompanyInsight, Job, MatchResult
from .performance import PerformanceMonitor
from .privacy import ensure_anonymized_profile
from .strategy import MatchingStrategy, rank_matches

logger = logging.getLogger(__name__)

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_PHRASE_SPLIT = re.compile(r"[.!?,\n]+")
_LINE_ITEM = re.compile(r"^\s*(?:[-•*]|\d+[.)])\s+(.+?)\s*$", re.MULTILINE)
_INLINE_BULLET = re.compile(r"\s[-•]\s+")
_INLINE_NUMBERED = re.compile(r"(?:^|\s)\d+[.)]\s+")


def _extract_list_items(text: str) -> List[str]:
    items = [m.strip() for m in _LINE_ITEM.findall(text)]
    if items:
        return items

    for pattern in (_INLINE_BULLET, _INLINE_NUMBERED):
        segments = pattern.split(text)
        if len(segments) > 1:
            return [s.strip().rstrip(".").strip() for s in segments[1:] if s.strip()]
    return []


def build_fallback_insight(job: Job) -> CompanyInsight:
    """Synthesize an insight from the posting text alone."""
    text = job.description or ""

    sentences = [s.strip() for s in _SENTENCE_SPLIT.split(text) if s.strip()]
    description = ". ".join(sentences[:2]) + "." if sentences else ""

    responsibilities = _extract_list_items(text)[:MAX_KEY_RESPONSIBILITIES]
    if not responsibilities:
        phrases = [p.strip() for p in _PHRASE_SPLIT.split(text)]
        responsibilities = [p for p in phrases if 20 < len(p) < 100][:MAX_KEY_RESPONSIBILITIES]

    return CompanyInsight(
        company_size=job.company_size,
        industries=[job.industry],
        description=description or text[:DESCRIPTION_PREVIEW_CHARS],
        key_responsibilities=responsibilities or ["See job description for details"],
    )


class MatchingOrchestrator:
    """
    Facade over the matching strategies and the insight pipeline.

    This is the single fallback decision point: the primary strategy is tried
    once (no retries, no blending) and any failure or timeout swaps in the
    fallback strategy for the whole result set.
    """

    def __init__(
        self,
        primary: MatchingStrategy,
        fallback: MatchingStrategy,
        summarizer: SummarizationOracle,
        insight_cache: CompanyInsightCache,
        monitor: Optional[PerformanceMonitor] = None,
        matching_timeout: Optional[float] = None,
        insight_timeout: Optional[float] = None,
        max_matches: int = MAX_MATCHES,
    ):
        self.primary = primary
        self.fallback = fallback
        self.summarizer = summarizer
        self.insight_cache = insight_cache
        self.monitor = monitor or PerformanceMonitor()
        self.matching_timeout = matching_timeout if matching_timeout is not None else TIMEOUTS["matching"]
        self.insight_timeout = insight_timeout if insight_timeout is not None else TIMEOUTS["insight"]
        self.max_matches = max_matches

    async def find_matches(self, profile: AnonymizedProfile, jobs: List[Job]) -> List[MatchResult]:
        """
        Rank `jobs` for `profile`.

        Returns:
            Up to `max_matches` results sorted by score. `is_approximate` is
            True on every result when the fallback strategy produced them.

        Raises:
            PrivacyViolationError: If the profile carries personal data
        """
        profile = ensure_anonymized_profile(profile)

        async with self.monitor.measure("matching.find_matches"):
            try:
                matches = await asyncio.wait_for(
                    self.primary.find_matches(profile, jobs),
                    timeout=self.matching_timeout,
                )
            except asyncio.TimeoutError:
                logger.warning(
                    f"{self.primary.name} matching timed out after {self.matching_timeout:.1f}s, "
                    f"falling back to {self.fallback.name} matching"
                )
            except Exception as e:
                logger.warning(f"{self.primary.name} matching failed, falling back to {self.fallback.name} matching: {e!r}")
            else:
                top = rank_matches(matches, self.max_matches)
                logger.info(f"{self.primary.name} matching succeeded ({len(top)} matches)")
                return top

            matches = await self.fallback.find_matches(profile, jobs)
            top = rank_matches(matches, self.max_matches)
            logger.info(f"{self.fallback.name} matching completed ({len(top)} matches)")
            return top

    async def generate_company_insights(self, jobs: List[Job]) -> Dict[str, CompanyInsight]:
        """Build an insight per job concurrently; one job's failure never affects another."""
        async with self.monitor.measure("matching.generate_company_insights"):
            insights = await asyncio.gather(*(self._insight_for(job) for job in jobs))
            return {job.id: insight for job, insight in zip(jobs, insights)}

    async def _insight_for(self, job: Job) -> CompanyInsight:
        cached = self.insight_cache.get(job.id, job.description)
        if cached is not None:
            return cached

        try:
            summary = await asyncio.wait_for(
                self.summarizer.summarize(job.description, f"{job.company} - {job.industry}"),
                timeout=self.insight_timeout,
            )
            # Size and industry come from the posting, not the summarizer's guess.
            insight = CompanyInsight(
                company_size=job.company_size,
                industries=[job.industry],
                description=summary.description,
                key_responsibilities=summary.key_responsibilities,
            )
        except Exception as e:
            logger.warning(f"Failed to generate insight for job {job.id}, using fallback: {e!r}")
            insight = build_fallback_insight(job)

        self.insight_cache.set(job.id, job.description, insight)
        return insight

    async def find_matches_with_insights(self, profile: AnonymizedProfile, jobs: List[Job]) -> List[MatchResult]:
        """Rank jobs, then attach an insight card to every returned match."""
        matches = await self.find_matches(profile, jobs)
        insights = await self.generate_company_insights([m.job for m in matches])
        return [m.model_copy(update={"insight_card": insights.get(m.job.id)}) for m in matches]
