import asyncio
import logging
from typing import Any, Dict, Optional, Protocol

from openai import AsyncOpenAI

from invoice_analytics.core.config import settings

logger = logging.getLogger(__name__)


class LanguageModel(Protocol):
    """Anything that can turn a system + user prompt into text."""

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        output_schema: Optional[Dict[str, Any]] = None,
    ) -> str: ...


def strip_code_fences(text: str) -> str:
    """Drop ```json / ```sql wrappers that models like to add."""
    cleaned = (text or "").strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.split("\n", 1)[1] if "\n" in cleaned else ""
        if cleaned.rstrip().endswith("```"):
            cleaned = cleaned.rstrip()[:-3]
    return cleaned.strip()


class OpenAILanguageModel:
    """LanguageModel backed by the OpenAI Responses API."""

    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        model: str = settings.OPENAI_MODEL,
        reasoning_effort: Optional[str] = settings.OPENAI_REASONING_EFFORT,
        timeout: float = settings.LLM_TIMEOUT_SECONDS,
    ):
        self.client = client or AsyncOpenAI(api_key=settings.OPENAI_API_KEY or None)
        self.model = model
        self.reasoning_effort = reasoning_effort
        self.timeout = timeout

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        output_schema: Optional[Dict[str, Any]] = None,
    ) -> str:
        request: Dict[str, Any] = {
            "model": self.model,
            "input": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        }
        if self.reasoning_effort:
            request["reasoning"] = {"effort": self.reasoning_effort}
        if output_schema is not None:
            request["text"] = {
                "format": {
                    "type": "json_schema",
                    "name": "StatisticsResponse",
                    "description": "Statistical analysis with visualization data",
                    "schema": output_schema,
                    "strict": True,
                }
            }

        # Timeout cancels the in-flight request; the caller decides what a failure means
        response = await asyncio.wait_for(
            self.client.responses.create(**request), timeout=self.timeout
        )
        logger.debug(f"Model {self.model} returned response {response.id}")
        return response.output_text or ""
