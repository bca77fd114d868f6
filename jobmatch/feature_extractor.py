"""
Deterministic Feature Extractor

Computes the structured features behind every match score. Pure functions:
same inputs produce same outputs, no I/O and no external calls.
"""

import logging

from .config import (
    ALIGNMENT_TABLE,
    JOB_LEVEL_KEYWORDS,
    SKILL_POINTS,
    WEIGHTS,
    YEARS_HEURISTIC,
)
from .models import (
    AnonymizedProfile,
    ExperienceMatch,
    Job,
    MatchFeatures,
    PreferenceMatch,
    ScoreBreakdown,
    SkillMatch,
)

logger = logging.getLogger(__name__)


class MatchFeatureExtractor:
    """Builds `MatchFeatures` for a (profile, job) pair. Never fails."""

    def extract_skill_match(self, profile: AnonymizedProfile, job: Job) -> SkillMatch:
        """
        Case-insensitive exact intersection, in profile order.

        Formula:
        - score = 10 * matched
        - total_possible = 10 * required
        """
        required = {s.lower() for s in job.required_skills}
        matched = [s for s in profile.skills if s.lower() in required]

        return SkillMatch(
            matched=matched,
            score=len(matched) * SKILL_POINTS,
            total_possible=len(job.required_skills) * SKILL_POINTS,
        )

    def extract_job_level(self, job: Job) -> str:
        """Infer the job's seniority from title, role and description text."""
        combined = f"{job.title.lower()} {job.role.lower()} {job.description.lower()}"

        for level, keywords in JOB_LEVEL_KEYWORDS:
            if any(keyword in combined for keyword in keywords):
                return level

        return "unknown"

    def extract_experience_match(self, profile: AnonymizedProfile, job: Job) -> ExperienceMatch:
        job_level = self.extract_job_level(job)
        profile_level = profile.seniority

        if job_level == "unknown":
            alignment = self._align_by_years(profile.years_experience, profile_level)
        else:
            alignment = ALIGNMENT_TABLE[profile_level].get(job_level, "mismatch")

        logger.debug(f"Experience: profile={profile_level}, job={job_level}, alignment={alignment}")
        return ExperienceMatch(
            profile_years=profile.years_experience,
            profile_level=profile_level,
            job_level=job_level,
            alignment=alignment,
        )

    @staticmethod
    def _align_by_years(years: int, profile_level: str) -> str:
        for max_years, levels, alignment in YEARS_HEURISTIC:
            if max_years is None or years <= max_years:
                return alignment if profile_level in levels else "mismatch"
        return "mismatch"

    def extract_preference_match(self, profile: AnonymizedProfile, job: Job) -> PreferenceMatch:
        job_role = job.role.lower()
        job_industry = job.industry.lower()

        role_match = any(role.lower() == job_role for role in profile.desired_roles)
        industry_matches = [industry.lower() == job_industry for industry in profile.industries]
        company_size_match = profile.preferred_company_size.lower() == job.company_size.lower()

        if profile.remote_preference == job.remote_preference:
            remote_match = True
        elif "flexible" in (profile.remote_preference, job.remote_preference):
            remote_match = "partial"
        else:
            remote_match = False

        return PreferenceMatch(
            role=role_match,
            industry=industry_matches,
            company_size=company_size_match,
            remote=remote_match,
        )

    def calculate_score_breakdown(self, profile: AnonymizedProfile, job: Job) -> ScoreBreakdown:
        return self._breakdown(
            self.extract_skill_match(profile, job),
            self.extract_experience_match(profile, job),
            self.extract_preference_match(profile, job),
        )

    @staticmethod
    def _breakdown(
        skill_match: SkillMatch,
        experience_match: ExperienceMatch,
        preference_match: PreferenceMatch,
    ) -> ScoreBreakdown:
        if preference_match.remote is True:
            remote_score = WEIGHTS["remote"]
        elif preference_match.remote == "partial":
            remote_score = WEIGHTS["remote_partial"]
        else:
            remote_score = 0

        return ScoreBreakdown(
            skills=skill_match.score,
            role=WEIGHTS["role"] if preference_match.role else 0,
            industry=sum(preference_match.industry) * WEIGHTS["industry"],
            company_size=WEIGHTS["company_size"] if preference_match.company_size else 0,
            remote=remote_score,
            experience=WEIGHTS["experience"] if experience_match.alignment != "mismatch" else 0,
        )

    def build_match_features(self, profile: AnonymizedProfile, job: Job) -> MatchFeatures:
        skill_match = self.extract_skill_match(profile, job)
        experience_match = self.extract_experience_match(profile, job)
        preference_match = self.extract_preference_match(profile, job)

        return MatchFeatures(
            skill_match=skill_match,
            experience_match=experience_match,
            preference_match=preference_match,
            score_breakdown=self._breakdown(skill_match, experience_match, preference_match),
        )

    extract = build_match_features
