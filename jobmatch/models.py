"""
Value objects for the matching pipeline.

All models are frozen: they are created per request and owned by the call
that produced them. Only cache entries outlive a matching request.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

SeniorityLevel = Literal["entry", "junior", "mid", "senior", "lead"]
CompanySize = Literal["small", "medium", "large"]
RemotePreference = Literal["remote", "hybrid", "onsite", "flexible"]
Alignment = Literal["entry", "junior", "mid", "senior", "lead", "mismatch"]
JobLevel = Literal["entry", "junior", "mid", "senior", "lead", "unknown"]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class AnonymizedProfile(_Frozen):
    """Profile features safe to send to external scoring services. No PII."""
    skills: List[str] = Field(default_factory=list)
    years_experience: int = Field(ge=0)
    seniority: SeniorityLevel
    desired_roles: List[str] = Field(default_factory=list)
    preferred_company_size: CompanySize
    industries: List[str] = Field(default_factory=list)
    remote_preference: RemotePreference


class Job(_Frozen):
    id: str
    title: str
    company: str
    description: str = ""
    required_skills: List[str] = Field(default_factory=list)
    role: str
    company_size: CompanySize
    industry: str
    remote_preference: RemotePreference
    location: Optional[str] = None
    salary_range: Optional[str] = None
    posted_date: Optional[datetime] = None


class SkillMatch(_Frozen):
    matched: List[str] = Field(default_factory=list)
    score: int = 0
    total_possible: int = 0


class ExperienceMatch(_Frozen):
    profile_years: int
    profile_level: SeniorityLevel
    job_level: JobLevel
    alignment: Alignment


class PreferenceMatch(_Frozen):
    role: bool
    industry: List[bool] = Field(default_factory=list)  # positional, one per profile industry
    company_size: bool
    remote: Union[bool, Literal["partial"]]


class ScoreBreakdown(_Frozen):
    skills: int = Field(default=0, ge=0)
    role: int = Field(default=0, ge=0)
    industry: int = Field(default=0, ge=0)
    company_size: int = Field(default=0, ge=0)
    remote: int = Field(default=0, ge=0)
    experience: int = Field(default=0, ge=0)

    @property
    def total(self) -> int:
        return (
            self.skills
            + self.role
            + self.industry
            + self.company_size
            + self.remote
            + self.experience
        )


class MatchFeatures(_Frozen):
    skill_match: SkillMatch
    experience_match: ExperienceMatch
    preference_match: PreferenceMatch
    score_breakdown: ScoreBreakdown


class CompanyInsight(_Frozen):
    company_size: CompanySize
    industries: List[str] = Field(default_factory=list)
    description: str
    key_responsibilities: List[str] = Field(default_factory=list)


class InsightSummary(_Frozen):
    """Raw summarisation output, before authoritative job fields are attached."""
    description: str
    key_responsibilities: List[str] = Field(default_factory=list)


class MatchResult(_Frozen):
    job: Job
    score: int = Field(ge=0)
    explanation: str
    matched_skills: List[str] = Field(default_factory=list)
    is_approximate: bool
    insight_card: Optional[CompanyInsight] = None
    features: MatchFeatures
