"""
Hugging Face similarity client.

Calls the HF inference router's sentence-similarity pipeline. `requests` is
blocking, so each call runs in a worker thread; the HTTP timeout bounds the
thread even when the awaiting side has already given up.
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Any, List, Optional

import requests

from .ai_service import AIError, AIService, ErrorCode, SimilarityOracle
from .config import HUGGING_FACE_CONFIG, TIMEOUTS

logger = logging.getLogger(__name__)


class HuggingFaceService(AIService, SimilarityOracle):
    provider_name = "HuggingFace"

    def __init__(
        self,
        api_key: Optional[str],
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
    ):
        super().__init__(
            timeout=timeout if timeout is not None else TIMEOUTS["similarity"],
            max_retries=max_retries,
            retry_delay=retry_delay,
        )
        self.api_key = api_key
        self.model = model or HUGGING_FACE_CONFIG["embedding_model"]
        self.base_url = (base_url or HUGGING_FACE_CONFIG["router_url"]).rstrip("/")
        self.session = session or requests.Session()
        if not api_key:
            logger.warning("[HuggingFace] HUGGING_FACE_API_KEY is not set; semantic matching will fall back")

    @property
    def similarity_url(self) -> str:
        return f"{self.base_url}/{self.model}/pipeline/sentence-similarity"

    async def compare(self, source_text: str, candidate_texts: List[str]) -> List[float]:
        return await self.calculate_similarities(source_text, candidate_texts)

    async def calculate_similarities(self, source_sentence: str, sentences: List[str]) -> List[float]:
        """One batched call comparing `source_sentence` to every sentence."""
        if not sentences:
            return []
        if not self.api_key:
            raise AIError(
                "HUGGING_FACE_API_KEY is not set",
                self.provider_name,
                ErrorCode.SERVICE_UNAVAILABLE,
                retryable=False,
            )
        return await self.with_retry(
            lambda: self.with_timeout(
                asyncio.to_thread(self._post_similarity, source_sentence, sentences)
            )
        )

    def _post_similarity(self, source_sentence: str, sentences: List[str]) -> List[float]:
        logger.info(
            f"[HuggingFace] Calculating similarities (source length: {len(source_sentence)}, "
            f"comparing to {len(sentences)} sentences)"
        )
        payload = {"inputs": {"source_sentence": source_sentence, "sentences": sentences}}
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            response = self.session.post(self.similarity_url, json=payload, headers=headers, timeout=self.timeout)
        except requests.Timeout as e:
            raise AIError(f"Request timed out: {e}", self.provider_name, ErrorCode.TIMEOUT, retryable=True)
        except requests.ConnectionError as e:
            raise AIError(
                f"Connection failed: {e}",
                self.provider_name,
                ErrorCode.SERVICE_UNAVAILABLE,
                retryable=True,
            )

        self._raise_for_status(response)

        try:
            result = response.json()
        except ValueError:
            raise AIError("Similarity response is not JSON", self.provider_name, ErrorCode.INVALID_RESPONSE)

        return self._parse_scores(result, expected=len(sentences))

    def _raise_for_status(self, response: requests.Response) -> None:
        if response.ok:
            return

        logger.error(f"[HuggingFace] Similarity API error: {response.status_code} - {response.text[:200]}")
        if response.status_code == 503:
            raise AIError(
                "Model is loading. Please try again.",
                self.provider_name,
                ErrorCode.SERVICE_UNAVAILABLE,
                retryable=True,
            )
        if response.status_code in (408, 504):
            raise AIError("Request timed out", self.provider_name, ErrorCode.TIMEOUT, retryable=True)
        raise AIError(
            f"Similarity API error: {response.status_code}",
            self.provider_name,
            str(response.status_code),
            retryable=False,
        )

    def _parse_scores(self, result: Any, expected: int) -> List[float]:
        valid = isinstance(result, list) and all(
            isinstance(x, (int, float)) and not isinstance(x, bool) and not math.isnan(x)
            for x in result
        )
        if not valid or len(result) != expected:
            raise AIError("Invalid similarity response format", self.provider_name, ErrorCode.INVALID_RESPONSE)
        return [float(x) for x in result]
