"""
Privacy boundary checks.

Matching only ever sees anonymized profile features. These checks run at the
orchestrator's input boundary, before anything reaches an external service.
"""

from __future__ import annotations

import json
import re
from typing import Any, List, Mapping

from pydantic import ValidationError

from .models import AnonymizedProfile

EMAIL_PATTERN = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
PHONE_PATTERN = re.compile(r"\b\d{3}[-.]?\d{3}[-.]?\d{4}\b|\(\d{3}\)\s?\d{3}[-.]?\d{4}\b")
SSN_PATTERN = re.compile(r"\b\d{3}-\d{2}-\d{4}\b")

PII_FIELDS = ["name", "email", "phone", "address", "ssn", "userId", "user_id"]
REQUIRED_FIELDS = [
    "skills",
    "years_experience",
    "seniority",
    "desired_roles",
    "preferred_company_size",
    "industries",
    "remote_preference",
]
LIST_FIELDS = ["skills", "desired_roles", "industries"]


class PrivacyViolationError(ValueError):
    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = errors


def contains_pii_patterns(text: Any) -> bool:
    """True if text contains something that looks like an email, phone or SSN."""
    if not text or not isinstance(text, str):
        return False
    return bool(EMAIL_PATTERN.search(text) or PHONE_PATTERN.search(text) or SSN_PATTERN.search(text))


def _string_values(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [v for v in value if isinstance(v, str)]
    return []


def validate_anonymized_profile(profile: Any) -> List[str]:
    """Return a list of problems; empty means the profile is safe to match."""
    if isinstance(profile, AnonymizedProfile):
        data = profile.model_dump()
    elif isinstance(profile, Mapping):
        data = dict(profile)
    else:
        return ["Profile is not an object"]

    errors: List[str] = []

    for field in PII_FIELDS:
        if data.get(field) is not None:
            errors.append(f"PII field '{field}' found in anonymized profile")

    for field in REQUIRED_FIELDS:
        if field not in data:
            errors.append(f"Required field '{field}' missing from anonymized profile")

    for field in LIST_FIELDS:
        if field in data and not isinstance(data[field], (list, tuple)):
            errors.append(f"Field '{field}' must be an array")

    years = data.get("years_experience")
    if years is not None and (isinstance(years, bool) or not isinstance(years, (int, float))):
        errors.append("Field 'years_experience' must be a number")

    for field in REQUIRED_FIELDS:
        if any(contains_pii_patterns(v) for v in _string_values(data.get(field))):
            errors.append(f"Field '{field}' contains email, phone or SSN patterns")

    return errors


def ensure_anonymized_profile(profile: Any) -> AnonymizedProfile:
    """Validate and coerce to `AnonymizedProfile`, raising PrivacyViolationError."""
    errors = validate_anonymized_profile(profile)
    if errors:
        raise PrivacyViolationError(errors)
    if isinstance(profile, AnonymizedProfile):
        return profile
    try:
        return AnonymizedProfile.model_validate({k: profile[k] for k in REQUIRED_FIELDS})
    except ValidationError as e:
        raise PrivacyViolationError(
            [f"Invalid field '{'.'.join(str(p) for p in err['loc'])}': {err['msg']}" for err in e.errors()]
        )


def estimate_profile_size(profile: AnonymizedProfile) -> int:
    """Rough size in bytes of what is sent to matching, for audit logs."""
    return len(json.dumps(profile.model_dump()))
