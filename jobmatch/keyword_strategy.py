"""
Keyword Matching Strategy

Deterministic scoring built entirely on the feature extractor. Always
available and never fails, so it is the floor the orchestrator falls back to.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from .feature_extractor import MatchFeatureExtractor
from .models import AnonymizedProfile, Job, MatchResult
from .strategy import ExplanationBuilder, MatchingStrategy, rank_matches

logger = logging.getLogger(__name__)


class KeywordMatchingStrategy(MatchingStrategy):
    name = "keyword"

    def __init__(
        self,
        extractor: Optional[MatchFeatureExtractor] = None,
        explainer: Optional[ExplanationBuilder] = None,
    ):
        self.extractor = extractor or MatchFeatureExtractor()
        self.explainer = explainer or ExplanationBuilder()

    async def find_matches(self, profile: AnonymizedProfile, jobs: List[Job]) -> List[MatchResult]:
        return self.score_jobs(profile, jobs)

    def score_jobs(self, profile: AnonymizedProfile, jobs: List[Job]) -> List[MatchResult]:
        """Synchronous core of `find_matches`."""
        matches: List[MatchResult] = []

        for job in jobs:
            features = self.extractor.build_match_features(profile, job)
            score = features.score_breakdown.total
            if score <= 0:
                continue
            if score > 100:
                logger.warning(f"Keyword score for job {job.id} exceeds 100 ({score}); breakdown kept as-is")

            matches.append(
                MatchResult(
                    job=job,
                    score=score,
                    explanation=self.explainer.build(profile, job, features),
                    matched_skills=features.skill_match.matched,
                    is_approximate=True,
                    features=features,
                )
            )

        ranked = rank_matches(matches)
        logger.info(f"Keyword matching scored {len(jobs)} jobs -> {len(ranked)} matches")
        return ranked
