"""
Shared profiles, jobs and fake oracles for the matching tests.
"""

import asyncio
from types import SimpleNamespace
from typing import List, Optional

from jobmatch.ai_service import AIError, ErrorCode, SimilarityOracle, SummarizationOracle
from jobmatch.models import AnonymizedProfile, InsightSummary, Job


def make_profile(**overrides) -> AnonymizedProfile:
    data = dict(
        skills=["React", "TypeScript", "Node.js"],
        years_experience=5,
        seniority="senior",
        desired_roles=["Frontend Developer"],
        preferred_company_size="medium",
        industries=["Technology"],
        remote_preference="remote",
    )
    data.update(overrides)
    return AnonymizedProfile(**data)


def make_job(job_id: str = "job-1", **overrides) -> Job:
    data = dict(
        id=job_id,
        title="Senior Frontend Developer",
        company="TechCorp",
        description="Build user interfaces for our web applications.",
        required_skills=["React", "TypeScript", "CSS"],
        role="Frontend Developer",
        company_size="medium",
        industry="Technology",
        remote_preference="remote",
    )
    data.update(overrides)
    return Job(**data)


def make_jobs(count: int) -> List[Job]:
    """Jobs with a spread of skill overlap so keyword scores differ."""
    skill_pool = ["React", "TypeScript", "Node.js", "Go", "Rust"]
    jobs = []
    for i in range(count):
        jobs.append(
            make_job(
                f"job-{i}",
                title=f"Developer {i}",
                role="Frontend Developer" if i % 2 == 0 else "Backend Developer",
                required_skills=skill_pool[: (i % len(skill_pool)) + 1],
                remote_preference="remote" if i % 3 == 0 else "onsite",
            )
        )
    return jobs


class FakeSimilarityOracle(SimilarityOracle):
    def __init__(self, scores: Optional[List[float]] = None, error: Optional[Exception] = None, delay: float = 0):
        self.scores = scores
        self.error = error
        self.delay = delay
        self.calls = 0
        self.cancelled = False

    async def compare(self, source_text: str, candidate_texts: List[str]) -> List[float]:
        self.calls += 1
        if self.delay:
            try:
                await asyncio.sleep(self.delay)
            except asyncio.CancelledError:
                self.cancelled = True
                raise
        if self.error is not None:
            raise self.error
        if self.scores is not None:
            return list(self.scores)
        return [0.8 for _ in candidate_texts]


class FakeSummarizer(SummarizationOracle):
    """Summarizes every posting, failing for descriptions listed in `fail_on`."""

    def __init__(self, fail_on: Optional[List[str]] = None, delay: float = 0):
        self.fail_on = fail_on or []
        self.delay = delay
        self.calls: List[str] = []

    async def summarize(self, description: str, company_context: Optional[str] = None) -> InsightSummary:
        self.calls.append(description)
        if self.delay:
            await asyncio.sleep(self.delay)
        if description in self.fail_on:
            raise AIError("summary failed", "fake", ErrorCode.SERVICE_UNAVAILABLE)
        return InsightSummary(
            description=f"Summary of {company_context}",
            key_responsibilities=["Ship features", "Review code"],
        )


class FakeAgent:
    """Stands in for a phi Agent: returns canned content and records prompts."""

    def __init__(self, content: str):
        self.content = content
        self.prompts: List[str] = []

    def run(self, prompt: str):
        self.prompts.append(prompt)
        return SimpleNamespace(content=self.content)
