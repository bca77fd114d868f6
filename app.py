from __future__ import annotations

import logging
import os
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Dict, List

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from jobmatch import MatchingService, __version__
from jobmatch.privacy import PrivacyViolationError, ensure_anonymized_profile, estimate_profile_size
from jobmatch.sources import JobSource, StaticJobSource
from models import HealthResponse, MatchRequest, MatchResponse, Settings

# Load environment from .env if present
load_dotenv()
load_dotenv(dotenv_path=Path(__file__).resolve().parent / ".env", override=False)

logging.basicConfig(
    level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("jobmatch.audit")

APPROXIMATE_NOTICE = "Some results may be approximate due to AI service limitations"


def get_settings() -> Settings:
    return Settings(
        hugging_face_api_key=os.getenv("HUGGING_FACE_API_KEY"),
        openai_api_key=os.getenv("OPENAI_API_KEY"),
        model_name=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        matching_timeout_seconds=float(os.getenv("MATCHING_TIMEOUT_SECONDS", "5")),
        insight_timeout_seconds=float(os.getenv("INSIGHT_TIMEOUT_SECONDS", "5")),
        insight_cache_max_size=int(os.getenv("INSIGHT_CACHE_MAX_SIZE", "500")),
        cache_prune_interval_seconds=float(os.getenv("CACHE_PRUNE_INTERVAL_SECONDS", "3600")),
        rate_limit_requests_per_minute=int(os.getenv("RATE_LIMIT_RPM", "60")),
    )


def build_matching_service(settings: Settings) -> MatchingService:
    return MatchingService.create(
        hugging_face_api_key=settings.hugging_face_api_key,
        openai_api_key=settings.openai_api_key,
        model_name=settings.model_name,
        matching_timeout=settings.matching_timeout_seconds,
        insight_timeout=settings.insight_timeout_seconds,
        insight_cache_max_size=settings.insight_cache_max_size,
        prune_interval=settings.cache_prune_interval_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Tests may install their own service before startup.
    if getattr(app.state, "matching_service", None) is None:
        app.state.matching_service = build_matching_service(get_settings())
    if getattr(app.state, "job_source", None) is None:
        app.state.job_source = StaticJobSource()
    app.state.matching_service.start()
    logger.info("Matching service started")
    try:
        yield
    finally:
        await app.state.matching_service.close()
        app.state.matching_service = None


app = FastAPI(title="Explainable Job Matching API", version=__version__, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# In-memory stores
LAST_REQUESTS_BY_IP: Dict[str, List[float]] = {}


async def rate_limit(request: Request, settings: Settings = Depends(get_settings)):
    ip = request.client.host if request.client else "unknown"
    window = 60.0
    max_req = settings.rate_limit_requests_per_minute
    now = time.time()
    bucket = LAST_REQUESTS_BY_IP.setdefault(ip, [])
    # prune
    while bucket and now - bucket[0] > window:
        bucket.pop(0)
    if len(bucket) >= max_req:
        raise HTTPException(status_code=429, detail="Rate limit exceeded")
    bucket.append(now)


def get_matching_service(request: Request) -> MatchingService:
    return request.app.state.matching_service


def get_job_source(request: Request) -> JobSource:
    return request.app.state.job_source


@app.get("/", response_model=HealthResponse)
async def root():
    return HealthResponse(status="ok", version=__version__)


@app.post("/api/matches", response_model=MatchResponse, dependencies=[Depends(rate_limit)])
async def find_matches(
    payload: MatchRequest,
    service: MatchingService = Depends(get_matching_service),
    job_source: JobSource = Depends(get_job_source),
):
    """
    Rank jobs for an anonymized profile and explain every match.

    Privacy boundary: only anonymized profile features are accepted. A
    payload carrying personal identifiers is rejected before matching.
    """
    started = time.time()

    try:
        profile = ensure_anonymized_profile(payload.profile)
    except PrivacyViolationError as e:
        audit_logger.warning(f"validateAnonymizedProfile failed: {', '.join(e.errors)}")
        raise HTTPException(status_code=400, detail={"errors": e.errors})
    audit_logger.info("validateAnonymizedProfile passed")

    jobs = payload.jobs if payload.jobs is not None else job_source.search(payload.query)
    profile_size = estimate_profile_size(profile)

    try:
        if payload.include_insights:
            matches = await service.orchestrator.find_matches_with_insights(profile, jobs)
        else:
            matches = await service.orchestrator.find_matches(profile, jobs)
    except Exception as e:
        audit_logger.error(f"findMatches failed (profile size {profile_size}B): {e}")
        logger.error(f"Job matching error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to retrieve job matches")
    audit_logger.info(f"findMatches succeeded (profile size {profile_size}B, {len(matches)} matches)")

    is_approximate = any(m.is_approximate for m in matches)
    return MatchResponse(
        matches=matches,
        is_approximate=is_approximate,
        message=APPROXIMATE_NOTICE if is_approximate else None,
        jobs_analyzed=len(jobs),
        processing_time=f"{time.time() - started:.2f}s",
    )


@app.get("/api/metrics")
async def metrics(service: MatchingService = Depends(get_matching_service)):
    return service.stats()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
