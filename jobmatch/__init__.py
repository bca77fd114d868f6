"""
Explainable Job Matching Pipeline

This package ranks job postings against an anonymized profile:
1. Semantic scoring through an external similarity service (Hugging Face)
2. Deterministic keyword scoring as the always-available fallback
3. Cached, deduplicated company insights (PhiData + OpenAI)

Usage:
    from jobmatch import MatchingService

    service = MatchingService.create(hugging_face_api_key, openai_api_key)
    matches = await service.orchestrator.find_matches_with_insights(profile, jobs)
    print(f"Top match: {matches[0].score}")
"""

from .models import AnonymizedProfile, CompanyInsight, Job, MatchFeatures, MatchResult
from .orchestrator import MatchingOrchestrator
from .service import MatchingService
from .config import WEIGHTS

__all__ = [
    "AnonymizedProfile",
    "CompanyInsight",
    "Job",
    "MatchFeatures",
    "MatchResult",
    "MatchingOrchestrator",
    "MatchingService",
    "WEIGHTS",
]
__version__ = "1.0.0"
