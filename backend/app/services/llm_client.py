"""
LLM Client — the completion capability used by the query pipeline.
Multi-provider (OpenAI GPT, Anthropic Claude), selected by a "provider:model" id.
"""

import asyncio
import logging
from typing import Optional, Protocol
from openai import AsyncOpenAI
from anthropic import AsyncAnthropic
from app.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

DEFAULT_MODELS = {
    "openai": "gpt-4o",
    "anthropic": "claude-sonnet-4-20250514",
}


class CompletionClient(Protocol):
    """Anything that turns a prompt into text. May raise on failure."""

    async def complete(self, prompt: str) -> str:
        ...


def _parse_model_id(model_id: Optional[str]) -> tuple[str, str]:
    """Parse 'provider:model' into (provider, model). Bare names are OpenAI models."""
    if model_id and ":" in model_id:
        p, m = model_id.split(":", 1)
        provider = p.strip().lower()
        return (provider, m.strip() or DEFAULT_MODELS.get(provider, ""))
    return ("openai", (model_id or "").strip() or DEFAULT_MODELS["openai"])


class LLMClient:
    """Single-prompt completions against OpenAI or Anthropic, bounded by a timeout."""

    def __init__(
        self,
        model_id: Optional[str] = None,
        openai_api_key: Optional[str] = None,
        anthropic_api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ):
        self.provider, self.model = _parse_model_id(model_id or settings.ai_model)
        self.timeout = timeout if timeout is not None else settings.ai_timeout_seconds
        self.max_tokens = max_tokens or settings.ai_max_tokens
        self._openai_client: Optional[AsyncOpenAI] = None
        self._anthropic_client: Optional[AsyncAnthropic] = None

        # Use passed keys, else env
        openai_key = openai_api_key or settings.openai_api_key
        anthropic_key = anthropic_api_key or settings.anthropic_api_key

        if self.provider == "openai":
            if not openai_key:
                raise ValueError("OPENAI_API_KEY not configured. Set OPENAI_API_KEY env.")
            self._openai_client = AsyncOpenAI(api_key=openai_key)
        elif self.provider == "anthropic":
            if not anthropic_key:
                raise ValueError("ANTHROPIC_API_KEY not configured. Set ANTHROPIC_API_KEY env.")
            self._anthropic_client = AsyncAnthropic(api_key=anthropic_key)
        else:
            raise ValueError(f"Unknown AI provider: {self.provider}")

    async def complete(self, prompt: str) -> str:
        """Send one user prompt and return the text reply. Raises on failure or timeout."""
        try:
            return await asyncio.wait_for(self._completion(prompt), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"{self.provider}:{self.model} completion timed out after {self.timeout}s")
            raise

    async def _completion(self, prompt: str, temperature: float = 0.2) -> str:
        """Call the appropriate provider's completion API."""
        if self.provider == "openai":
            response = await self._openai_client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                max_tokens=self.max_tokens,
            )
            return response.choices[0].message.content or ""

        response = await self._anthropic_client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=temperature,
            messages=[{"role": "user", "content": prompt}],
        )
        if response.content and response.content[0].type == "text":
            return response.content[0].text
        return ""


def create_llm_client(
    model_id: Optional[str] = None,
    openai_api_key: Optional[str] = None,
    anthropic_api_key: Optional[str] = None,
) -> LLMClient:
    """Factory function to create an LLM client. Keys from env unless passed."""
    return LLMClient(
        model_id=model_id,
        openai_api_key=openai_api_key,
        anthropic_api_key=anthropic_api_key,
    )
