"""
Semantic Matching Strategy

Scores every job with one batched call to a similarity oracle, then backs
each score with the deterministic features, rescaled so the breakdown sums
to the semantic score. Failures propagate: fallback is the orchestrator's
decision.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional

from .ai_service import AIError, ErrorCode, SimilarityOracle
from .config import (
    BREAKDOWN_FIELDS,
    DEFAULT_SIMILARITY_BAND,
    DESCRIPTION_PREVIEW_CHARS,
    FALLBACK_DISTRIBUTION,
    SIMILARITY_BANDS,
)
from .feature_extractor import MatchFeatureExtractor
from .models import AnonymizedProfile, Job, MatchFeatures, MatchResult, ScoreBreakdown
from .strategy import ExplanationBuilder, MatchingStrategy, rank_matches

logger = logging.getLogger(__name__)


def profile_to_text(profile: AnonymizedProfile) -> str:
    parts: List[str] = []

    if profile.skills:
        parts.append(f"Skills: {', '.join(profile.skills)}")
    if profile.desired_roles:
        parts.append(f"Desired roles: {', '.join(profile.desired_roles)}")
    if profile.industries:
        parts.append(f"Industries: {', '.join(profile.industries)}")

    parts.append(f"Experience: {profile.years_experience} years, {profile.seniority} level")
    parts.append(f"Company size preference: {profile.preferred_company_size}")
    parts.append(f"Remote preference: {profile.remote_preference}")

    return ". ".join(parts)


def job_to_text(job: Job) -> str:
    parts = [
        f"Job title: {job.title}",
        f"Company: {job.company}",
        f"Role: {job.role}",
    ]

    if job.required_skills:
        parts.append(f"Required skills: {', '.join(job.required_skills)}")

    parts.append(f"Company size: {job.company_size}")
    parts.append(f"Industry: {job.industry}")
    parts.append(f"Remote preference: {job.remote_preference}")

    if job.description:
        parts.append(f"Description: {job.description[:DESCRIPTION_PREVIEW_CHARS]}")

    return ". ".join(parts)


def similarity_to_score(similarity: float) -> int:
    """Map a 0-1 similarity to a 0-100 score, rounding halves up."""
    clamped = min(max(similarity, 0.0), 1.0)
    return int(math.floor(clamped * 100 + 0.5))


def similarity_band(similarity: float) -> str:
    for threshold, label in SIMILARITY_BANDS:
        if similarity > threshold:
            return label
    return DEFAULT_SIMILARITY_BAND


def apportion(weights: Dict[str, float], total: int) -> Dict[str, int]:
    """
    Split `total` into integers proportional to `weights` (largest remainder).

    The parts always sum to exactly `total`; ties on the remainder go to the
    field listed first in BREAKDOWN_FIELDS.
    """
    weight_sum = sum(weights.values())
    if total <= 0 or weight_sum <= 0:
        return {field: 0 for field in BREAKDOWN_FIELDS}

    raw = {field: total * weights.get(field, 0) / weight_sum for field in BREAKDOWN_FIELDS}
    parts = {field: int(math.floor(value)) for field, value in raw.items()}
    leftover = total - sum(parts.values())

    by_remainder = sorted(
        BREAKDOWN_FIELDS,
        key=lambda field: (-(raw[field] - parts[field]), BREAKDOWN_FIELDS.index(field)),
    )
    for field in by_remainder[:leftover]:
        parts[field] += 1
    return parts


def rescale_breakdown(breakdown: ScoreBreakdown, score: int) -> ScoreBreakdown:
    """Rescale a deterministic breakdown so its fields sum to `score`."""
    if breakdown.total > 0:
        weights = {field: float(getattr(breakdown, field)) for field in BREAKDOWN_FIELDS}
    else:
        weights = dict(FALLBACK_DISTRIBUTION)
    return ScoreBreakdown(**apportion(weights, score))


class SemanticMatchingStrategy(MatchingStrategy):
    name = "semantic"

    def __init__(
        self,
        oracle: SimilarityOracle,
        extractor: Optional[MatchFeatureExtractor] = None,
        explainer: Optional[ExplanationBuilder] = None,
    ):
        self.oracle = oracle
        self.extractor = extractor or MatchFeatureExtractor()
        self.explainer = explainer or ExplanationBuilder()

    async def find_matches(self, profile: AnonymizedProfile, jobs: List[Job]) -> List[MatchResult]:
        if not jobs:
            return []

        profile_text = profile_to_text(profile)
        job_texts = [job_to_text(job) for job in jobs]

        try:
            similarities = await self.oracle.compare(profile_text, job_texts)
        except Exception as e:
            logger.error(f"[SemanticMatching] Failed to generate matches: {e!r}")
            raise

        if len(similarities) != len(jobs):
            raise AIError(
                f"Expected {len(jobs)} similarity scores, got {len(similarities)}",
                "similarity",
                ErrorCode.INVALID_RESPONSE,
            )

        matches: List[MatchResult] = []
        for job, similarity in zip(jobs, similarities):
            if not isinstance(similarity, (int, float)) or math.isnan(similarity):
                logger.warning(f"[SemanticMatching] Skipping job {job.id}: invalid similarity {similarity!r}")
                continue

            score = similarity_to_score(similarity)
            if score <= 0:
                continue

            features = self._rescaled_features(profile, job, score)
            matches.append(
                MatchResult(
                    job=job,
                    score=score,
                    explanation=self.explainer.build(profile, job, features, lead=similarity_band(similarity)),
                    matched_skills=features.skill_match.matched,
                    is_approximate=False,
                    features=features,
                )
            )

        ranked = rank_matches(matches)
        logger.info(f"Semantic matching scored {len(jobs)} jobs -> {len(ranked)} matches")
        return ranked

    def _rescaled_features(self, profile: AnonymizedProfile, job: Job, score: int) -> MatchFeatures:
        features = self.extractor.build_match_features(profile, job)
        return features.model_copy(
            update={"score_breakdown": rescale_breakdown(features.score_breakdown, score)}
        )
