from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, validator

from jobmatch.models import Job, MatchResult


class Settings(BaseModel):
    model_config = ConfigDict(protected_namespaces=())
    hugging_face_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    model_name: str = "gpt-4o-mini"
    matching_timeout_seconds: float = 5.0
    insight_timeout_seconds: float = 5.0
    insight_cache_max_size: int = 500
    cache_prune_interval_seconds: float = 3600.0
    rate_limit_requests_per_minute: int = 60


class MatchRequest(BaseModel):
    profile: Dict[str, Any] = Field(
        ...,
        description="Anonymized profile features (no name, email, phone or address)",
    )
    jobs: Optional[List[Job]] = Field(
        default=None,
        description="Jobs to match against; the built-in catalogue is searched when omitted",
    )
    query: str = Field(default="", description="Keyword filter for the built-in catalogue")
    include_insights: bool = True

    @validator("jobs")
    def validate_jobs(cls, v: Optional[List[Job]]) -> Optional[List[Job]]:
        if v is not None and len(v) > 100:
            raise ValueError("A maximum of 100 jobs is allowed")
        return v


class MatchResponse(BaseModel):
    matches: List[MatchResult]
    is_approximate: bool
    message: Optional[str] = None
    jobs_analyzed: int
    processing_time: str


class HealthResponse(BaseModel):
    status: str
    version: str
