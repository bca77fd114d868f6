"""
Matching strategy contract and the explanation text shared by all strategies.
"""

from __future__ import annotations

import abc
from typing import List, Optional

from .config import MAX_MATCHES, MIN_EXPLANATION_FACTORS
from .models import AnonymizedProfile, Job, MatchFeatures, MatchResult

ALIGNMENT_TEXT = {
    "entry": "suitable for entry-level",
    "junior": "aligned with junior-level",
    "mid": "aligned with mid-level",
    "senior": "aligned with senior-level",
    "lead": "aligned with lead-level",
}


class MatchingStrategy(abc.ABC):
    """Ranks jobs against an anonymized profile."""

    name: str = "base"

    @abc.abstractmethod
    async def find_matches(self, profile: AnonymizedProfile, jobs: List[Job]) -> List[MatchResult]:
        """Return at most `MAX_MATCHES` results, highest score first."""


def rank_matches(matches: List[MatchResult], limit: int = MAX_MATCHES) -> List[MatchResult]:
    """Sort by score descending (stable, ties keep input order) and truncate."""
    return sorted(matches, key=lambda m: m.score, reverse=True)[:limit]


def matched_industries(profile: AnonymizedProfile, features: MatchFeatures) -> List[str]:
    flags = features.preference_match.industry
    return [industry for industry, hit in zip(profile.industries, flags) if hit]


class ExplanationBuilder:
    """
    Turns match features into a human-readable explanation.

    Factors are emitted in a fixed order (skills, role, industry, experience,
    company size, remote). Weak matches are padded with generic sentences so
    every explanation references at least three factors.
    """

    def factor_sentences(self, profile: AnonymizedProfile, job: Job, features: MatchFeatures) -> List[str]:
        parts: List[str] = []
        preference = features.preference_match

        if features.skill_match.matched:
            parts.append(f"Matched on skills: {', '.join(features.skill_match.matched)}")

        if preference.role:
            parts.append(f"Role matches your preferences: {job.role}")

        industries = matched_industries(profile, features)
        if industries:
            parts.append(f"Industry matches: {', '.join(industries)}")

        alignment = features.experience_match.alignment
        if alignment != "mismatch":
            parts.append(f"Experience level {ALIGNMENT_TEXT[alignment]} position")

        if preference.company_size:
            parts.append(f"Company size matches your preference: {job.company_size}")

        if preference.remote is True:
            parts.append(f"Remote work preference matches: {job.remote_preference}")
        elif preference.remote == "partial":
            parts.append("Remote work preference partially matches")

        return self._pad(parts, profile, features)

    def _pad(self, parts: List[str], profile: AnonymizedProfile, features: MatchFeatures) -> List[str]:
        if len(parts) >= MIN_EXPLANATION_FACTORS:
            return parts

        padded = list(parts)
        if not features.skill_match.matched:
            padded.append("Some skill overlap with job requirements")
        if not features.preference_match.role and len(padded) < MIN_EXPLANATION_FACTORS:
            padded.append("Role may align with your career goals")
        if not matched_industries(profile, features) and len(padded) < MIN_EXPLANATION_FACTORS:
            padded.append("Industry may offer growth opportunities")
        return padded

    def build(
        self,
        profile: AnonymizedProfile,
        job: Job,
        features: MatchFeatures,
        lead: Optional[str] = None,
    ) -> str:
        parts = self.factor_sentences(profile, job, features)
        if lead:
            parts.insert(0, lead)
        if not parts:
            return "Some alignment with your profile"
        return ". ".join(parts)
