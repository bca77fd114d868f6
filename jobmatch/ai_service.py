"""
Base abstractions for external AI services.

Provides the error taxonomy, the two oracle interfaces the matching core
consumes, and a base class with timeout, retry and error-mapping helpers.
Retry and backoff live here, inside the oracle clients, never in the
orchestrator.
"""

from __future__ import annotations

import abc
import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

from .config import AI_SERVICE_CONFIG
from .models import InsightSummary

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ErrorCode:
    TIMEOUT = "TIMEOUT"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    UNKNOWN = "UNKNOWN"


class AIError(Exception):
    """Failure of an external AI call. `retryable` drives `with_retry`."""

    def __init__(self, message: str, provider: str, code: str = ErrorCode.UNKNOWN, retryable: bool = False):
        super().__init__(message)
        self.provider = provider
        self.code = code
        self.retryable = retryable

    def __repr__(self) -> str:
        return f"AIError({self.provider}, {self.code}, retryable={self.retryable}: {self})"


class SimilarityOracle(abc.ABC):
    @abc.abstractmethod
    async def compare(self, source_text: str, candidate_texts: List[str]) -> List[float]:
        """Similarity (0-1) of `source_text` to each candidate, same order and length."""


class SummarizationOracle(abc.ABC):
    @abc.abstractmethod
    async def summarize(self, description: str, company_context: Optional[str] = None) -> InsightSummary:
        """Summarise a job posting into a description and key responsibilities."""


class AIService(abc.ABC):
    """Common timeout / retry / error handling for AI provider clients."""

    provider_name = "AI"

    def __init__(
        self,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
    ):
        self.timeout = timeout if timeout is not None else AI_SERVICE_CONFIG["timeout"]
        self.max_retries = max_retries if max_retries is not None else AI_SERVICE_CONFIG["max_retries"]
        self.retry_delay = retry_delay if retry_delay is not None else AI_SERVICE_CONFIG["retry_delay"]

    async def with_timeout(self, operation: Awaitable[T], timeout: Optional[float] = None) -> T:
        """Await `operation`, cancelling it once `timeout` seconds have passed."""
        timeout = timeout if timeout is not None else self.timeout
        try:
            return await asyncio.wait_for(operation, timeout=timeout)
        except asyncio.TimeoutError:
            raise AIError(
                f"Request timed out after {timeout:.1f}s",
                self.provider_name,
                ErrorCode.TIMEOUT,
                retryable=True,
            )
        except AIError:
            raise
        except Exception as e:
            raise self.handle_error(e) from e

    async def with_retry(self, fn: Callable[[], Awaitable[T]], max_retries: Optional[int] = None) -> T:
        """Call `fn` up to `max_retries + 1` times with exponential backoff."""
        max_retries = max_retries if max_retries is not None else self.max_retries
        last_error: Optional[AIError] = None

        for attempt in range(max_retries + 1):
            try:
                return await fn()
            except Exception as e:
                last_error = self.handle_error(e)
                if not last_error.retryable:
                    raise last_error
                if attempt == max_retries:
                    break
                delay = self.retry_delay * (2 ** attempt)
                logger.warning(
                    f"[{self.provider_name}] attempt {attempt + 1}/{max_retries + 1} failed "
                    f"({last_error.code}), retrying in {delay:.1f}s"
                )
                await asyncio.sleep(delay)

        logger.error(f"[{self.provider_name}] failed after {max_retries + 1} attempts: {last_error}")
        raise last_error

    def handle_error(self, error: Any) -> AIError:
        """Map an arbitrary exception onto the AIError taxonomy."""
        if isinstance(error, AIError):
            return error

        if isinstance(error, asyncio.TimeoutError):
            return AIError("Request timed out", self.provider_name, ErrorCode.TIMEOUT, retryable=True)

        if isinstance(error, Exception):
            message = str(error)
            lowered = message.lower()
            if "timeout" in lowered or "timed out" in lowered:
                return AIError(message, self.provider_name, ErrorCode.TIMEOUT, retryable=True)
            if "503" in message or "loading" in lowered:
                return AIError(
                    "Service temporarily unavailable",
                    self.provider_name,
                    ErrorCode.SERVICE_UNAVAILABLE,
                    retryable=True,
                )
            return AIError(message, self.provider_name, ErrorCode.UNKNOWN, retryable=False)

        return AIError("Unknown error occurred", self.provider_name, ErrorCode.UNKNOWN, retryable=False)
