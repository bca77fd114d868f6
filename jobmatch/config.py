"""
Configuration for the explainable job matching pipeline.
Adjust weights, tables and time budgets here.
"""

# Points per matched required skill
SKILL_POINTS = 10

# Score breakdown weights (additive, not normalised)
WEIGHTS = {
    "role": 20,
    "industry": 15,  # per matched profile industry
    "company_size": 10,
    "remote": 10,
    "remote_partial": 5,
    "experience": 5,
}

# Distribution used by the semantic strategy when the deterministic
# breakdown is empty (must sum to 1.0)
FALLBACK_DISTRIBUTION = {
    "skills": 0.40,
    "role": 0.20,
    "industry": 0.15,
    "company_size": 0.10,
    "remote": 0.10,
    "experience": 0.05,
}

BREAKDOWN_FIELDS = ["skills", "role", "industry", "company_size", "remote", "experience"]

SENIORITY_LEVELS = ["entry", "junior", "mid", "senior", "lead"]

# Ordered keyword classes for inferring a job's level. First hit wins, so
# "lead" and "principal" resolve to senior before the lead class is reached.
JOB_LEVEL_KEYWORDS = [
    ("entry", ["entry", "intern", "graduate"]),
    ("junior", ["junior", "jr"]),
    ("senior", ["senior", "sr", "lead", "principal"]),
    ("lead", ["lead", "principal", "architect"]),
    ("mid", ["mid", "middle"]),
]

# Profile level -> job level -> alignment
ALIGNMENT_TABLE = {
    "entry": {
        "entry": "entry",
        "junior": "entry",
        "mid": "mismatch",
        "senior": "mismatch",
        "lead": "mismatch",
    },
    "junior": {
        "entry": "entry",
        "junior": "junior",
        "mid": "junior",
        "senior": "mismatch",
        "lead": "mismatch",
    },
    "mid": {
        "entry": "mismatch",
        "junior": "junior",
        "mid": "mid",
        "senior": "mid",
        "lead": "mismatch",
    },
    "senior": {
        "entry": "mismatch",
        "junior": "mismatch",
        "mid": "mid",
        "senior": "senior",
        "lead": "senior",
    },
    "lead": {
        "entry": "mismatch",
        "junior": "mismatch",
        "mid": "mismatch",
        "senior": "senior",
        "lead": "lead",
    },
}

# Years-of-experience heuristic used when the job level is unknown:
# (max years inclusive, profile levels that align, resulting alignment)
YEARS_HEURISTIC = [
    (2, ("entry", "junior"), "entry"),
    (5, ("junior", "mid"), "mid"),
    (None, ("mid", "senior", "lead"), "senior"),
]

# Result limits
MAX_MATCHES = 10
MIN_EXPLANATION_FACTORS = 3
MIN_KEY_RESPONSIBILITIES = 2
MAX_KEY_RESPONSIBILITIES = 3
DESCRIPTION_PREVIEW_CHARS = 200

# Semantic similarity bands (lower bounds, exclusive)
SIMILARITY_BANDS = [
    (0.7, "Strong semantic match"),
    (0.5, "Good semantic alignment"),
]
DEFAULT_SIMILARITY_BAND = "Some semantic alignment"

# Time budgets (seconds)
TIMEOUTS = {
    "matching": 5.0,
    "insight": 5.0,
    "similarity": 5.0,
    "summarization": 5.0,
}

# Cache parameters (seconds / entries)
CACHE_CONFIG = {
    "dedup_ttl": 60 * 60,
    "insight_ttl": 7 * 24 * 60 * 60,
    "insight_max_size": 500,
    "prune_interval": 60 * 60,
}

# Oracle client configuration
AI_SERVICE_CONFIG = {
    "timeout": 5.0,
    "max_retries": 2,
    "retry_delay": 1.0,
}

HUGGING_FACE_CONFIG = {
    "router_url": "https://router.huggingface.co/hf-inference/models",
    "embedding_model": "sentence-transformers/all-MiniLM-L6-v2",
}

# LLM configuration
LLM_CONFIG = {
    "temperature": 0,  # For maximum consistency
    "model": "gpt-4o-mini",
    "max_retries": 1,
}

# Performance monitor
PERFORMANCE_CONFIG = {
    "max_samples_per_metric": 1000,
    "slow_operation_seconds": 1.0,
}
