"""
LLM Summarization Module

Uses PhiData + OpenAI to summarise a job posting into a short company
description and its key responsibilities.
"""

import asyncio
import json
import logging
import re
from typing import Any, Dict, Optional

from phi.agent import Agent
from phi.model.openai import OpenAIChat

from .ai_service import AIError, AIService, ErrorCode, SummarizationOracle
from .config import CACHE_CONFIG, LLM_CONFIG, MAX_KEY_RESPONSIBILITIES, MIN_KEY_RESPONSIBILITIES, TIMEOUTS
from .dedup_cache import RequestDeduplicationCache
from .models import InsightSummary

logger = logging.getLogger(__name__)


def get_model_config(model_name: str, temperature: float = 0) -> Dict[str, Any]:
    """
    Get model configuration with temperature support check.
    Some models don't support custom temperature.
    """
    config = {"id": model_name}

    # Models that don't support temperature customization
    models_without_temperature = ["o1", "o1-mini", "o1-preview", "gpt-5-mini", "gpt-5"]

    model_lower = model_name.lower()
    supports_temperature = not any(no_temp in model_lower for no_temp in models_without_temperature)

    if supports_temperature:
        config["temperature"] = temperature

    # JSON mode support
    if "gpt-4" in model_lower:
        config["response_format"] = {"type": "json_object"}

    return config


def extract_json_from_response(text: str) -> Optional[Dict[str, Any]]:
    """Extract JSON from LLM response, handling markdown and other formatting."""
    if not text:
        return None

    # Remove markdown code fences
    if '```json' in text:
        match = re.search(r'```json\s*\n?(.*?)\n?```', text, re.DOTALL)
        if match:
            text = match.group(1).strip()
    elif '```' in text:
        match = re.search(r'```\s*\n?(.*?)\n?```', text, re.DOTALL)
        if match:
            text = match.group(1).strip()

    # Try to find JSON object
    json_match = re.search(r'\{[^{}]*(?:\{[^{}]*\}[^{}]*)*\}', text, re.DOTALL)
    if json_match:
        try:
            return json.loads(json_match.group(0))
        except json.JSONDecodeError:
            pass

    # Try direct parse
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def build_summarizer_agent(model_name: Optional[str] = None, api_key: Optional[str] = None) -> Agent:
    """Build PhiData agent for company insight summaries."""
    model_name = model_name or LLM_CONFIG["model"]
    model_config = get_model_config(model_name, temperature=LLM_CONFIG["temperature"])
    if api_key:
        model_config["api_key"] = api_key

    return Agent(
        name="Company Insight Summarizer",
        role="Summarise a job posting into a company insight card",
        model=OpenAIChat(**model_config),
        instructions=[
            "Return ONLY valid JSON with two keys: 'description' and 'key_responsibilities'.",
            "- description: 1-2 sentences describing the company and the role",
            "- key_responsibilities: array of 2-3 short responsibilities taken from the posting",
            "Use ONLY information from the posting - do NOT invent details.",
            "CRITICAL: Return ONLY the JSON object, no explanations.",
        ],
        show_tool_calls=False,
        markdown=False,
    )


def response_text(response: Any) -> str:
    """Extract text from a phi agent response."""
    if hasattr(response, 'content'):
        return str(response.content)
    if hasattr(response, 'messages') and response.messages:
        last_msg = response.messages[-1]
        return str(last_msg.content if hasattr(last_msg, 'content') else last_msg)
    return str(response)


class LLMSummarizer(AIService, SummarizationOracle):
    """
    Summarisation oracle backed by a phi agent.

    Identical requests are collapsed through the injected deduplication
    cache, so concurrent views of the same posting share one LLM call.
    """

    provider_name = "OpenAI"

    def __init__(
        self,
        dedup_cache: RequestDeduplicationCache,
        agent: Optional[Agent] = None,
        model_name: Optional[str] = None,
        api_key: Optional[str] = None,
        cache_ttl: Optional[float] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
    ):
        super().__init__(
            timeout=timeout if timeout is not None else TIMEOUTS["summarization"],
            max_retries=max_retries if max_retries is not None else LLM_CONFIG["max_retries"],
            retry_delay=retry_delay,
        )
        self.dedup_cache = dedup_cache
        self.model_name = model_name or LLM_CONFIG["model"]
        self.agent = agent or build_summarizer_agent(self.model_name, api_key)
        self.cache_ttl = cache_ttl if cache_ttl is not None else CACHE_CONFIG["insight_ttl"]

    async def summarize(self, description: str, company_context: Optional[str] = None) -> InsightSummary:
        return await self.dedup_cache.get_or_execute(
            {
                "type": "summarizeCompany",
                "model": self.model_name,
                "job_description": description,
                "company_info": company_context,
            },
            lambda: self.with_retry(
                lambda: self.with_timeout(
                    asyncio.to_thread(self._run_agent, description, company_context)
                )
            ),
            ttl=self.cache_ttl,
        )

    def _run_agent(self, description: str, company_context: Optional[str]) -> InsightSummary:
        logger.info(f"[OpenAI] Summarizing company info (description length: {len(description)})")
        prompt = f"Company: {company_context}\n\nJob posting:\n{description}" if company_context else description

        text = response_text(self.agent.run(prompt))
        logger.debug(f"Raw LLM response: {text[:500]}...")
        return self.parse_summary(text)

    def parse_summary(self, text: str) -> InsightSummary:
        data = extract_json_from_response(text)
        if not data:
            raise AIError("Could not extract valid JSON from LLM response", self.provider_name, ErrorCode.INVALID_RESPONSE)

        summary = data.get("description")
        responsibilities = data.get("key_responsibilities", data.get("keyResponsibilities"))
        if not isinstance(summary, str) or not summary.strip():
            raise AIError("Missing 'description' in LLM response", self.provider_name, ErrorCode.INVALID_RESPONSE)
        if not isinstance(responsibilities, list):
            raise AIError(
                "Missing 'key_responsibilities' in LLM response",
                self.provider_name,
                ErrorCode.INVALID_RESPONSE,
            )

        cleaned = [str(r).strip() for r in responsibilities if str(r).strip()]
        if len(cleaned) < MIN_KEY_RESPONSIBILITIES:
            raise AIError(
                f"Expected at least {MIN_KEY_RESPONSIBILITIES} key responsibilities, got {len(cleaned)}",
                self.provider_name,
                ErrorCode.INVALID_RESPONSE,
            )
        return InsightSummary(
            description=summary.strip(),
            key_responsibilities=cleaned[:MAX_KEY_RESPONSIBILITIES],
        )
