"""
Profile and job sources.

The matching core consumes already-fetched, already-deduplicated job lists
and profiles that were anonymized before they reached it. `StaticJobSource`
serves a fixed in-memory set, used as the default catalogue of the HTTP
boundary.
"""

from __future__ import annotations

import abc
import logging
from typing import Dict, Iterable, List, Optional

from .models import AnonymizedProfile, Job
from .privacy import ensure_anonymized_profile

logger = logging.getLogger(__name__)


class ProfileSource(abc.ABC):
    @abc.abstractmethod
    def get_anonymized_profile(self, identity: str) -> Optional[AnonymizedProfile]:
        """Anonymized features for `identity`, or None if no profile exists."""


class InMemoryProfileSource(ProfileSource):
    """Profiles held in memory, keyed by an opaque identity."""

    def __init__(self, profiles: Optional[Dict[str, AnonymizedProfile]] = None):
        self._profiles: Dict[str, AnonymizedProfile] = {}
        for identity, profile in (profiles or {}).items():
            self.save(identity, profile)

    def save(self, identity: str, profile) -> AnonymizedProfile:
        # Raises PrivacyViolationError before anything is stored
        anonymized = ensure_anonymized_profile(profile)
        self._profiles[identity] = anonymized
        return anonymized

    def get_anonymized_profile(self, identity: str) -> Optional[AnonymizedProfile]:
        return self._profiles.get(identity)


class JobSource(abc.ABC):
    @abc.abstractmethod
    def search(self, query: str = "") -> List[Job]:
        """Return jobs relevant to `query`."""


class StaticJobSource(JobSource):
    def __init__(self, jobs: Optional[Iterable[Job]] = None):
        self.jobs = list(jobs) if jobs is not None else list(SAMPLE_JOBS)

    def search(self, query: str = "") -> List[Job]:
        terms = [t for t in (query or "").lower().split() if t]
        if not terms:
            return list(self.jobs)

        results = []
        for job in self.jobs:
            haystack = " ".join([job.title, job.role, job.description, " ".join(job.required_skills)]).lower()
            if all(term in haystack for term in terms):
                results.append(job)

        logger.info(f"Static job search '{query}' -> {len(results)} of {len(self.jobs)} jobs")
        return results


SAMPLE_JOBS = [
    Job(
        id="job-1",
        title="Frontend Developer",
        company="TechCorp",
        description=(
            "We are looking for a Frontend Developer with experience in React, TypeScript, and modern "
            "web development. You will work on building user interfaces for our web applications. "
            "Responsibilities include: - Developing responsive web applications - Collaborating with "
            "design and backend teams - Writing clean, maintainable code - Participating in code reviews"
        ),
        required_skills=["React", "TypeScript", "JavaScript", "CSS"],
        role="Frontend Developer",
        company_size="medium",
        industry="Technology",
        remote_preference="remote",
        location="Remote",
        salary_range="$80,000 - $120,000",
    ),
    Job(
        id="job-2",
        title="Software Engineer",
        company="StartupXYZ",
        description=(
            "Join our fast-growing startup as a Software Engineer. We need someone with strong "
            "problem-solving skills and experience in full-stack development. Key responsibilities: "
            "- Building and maintaining web applications - Working with databases and APIs "
            "- Collaborating with cross-functional teams"
        ),
        required_skills=["JavaScript", "Node.js", "Python", "SQL"],
        role="Software Engineer",
        company_size="small",
        industry="Technology",
        remote_preference="hybrid",
        location="San Francisco, CA",
    ),
    Job(
        id="job-3",
        title="Junior Developer",
        company="EnterpriseInc",
        description=(
            "Perfect opportunity for a Junior Developer to grow their career. We provide mentorship "
            "and training. You'll work on: - Learning our codebase and development practices "
            "- Contributing to team projects - Attending code reviews and team meetings"
        ),
        required_skills=["JavaScript", "HTML", "CSS"],
        role="Junior Developer",
        company_size="large",
        industry="Technology",
        remote_preference="onsite",
        location="New York, NY",
    ),
]
