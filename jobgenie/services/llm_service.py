"""Generative-text provider: "given a prompt, return text"."""

import asyncio
from typing import Optional, Protocol

from openai import AsyncOpenAI, OpenAIError

from jobgenie.config import LLM_TIMEOUT_SECONDS, MODEL_NAME, OPENAI_API_KEY
from jobgenie.exceptions import CollaboratorError
from jobgenie.utils.logger import get_logger

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You are a precise job-search data assistant. "
    "When asked for JSON, return only valid JSON (no markdown, no code block, no commentary)."
)


class TextGenerator(Protocol):
    """Anything that turns a prompt into text. Implementations raise on quota/network errors."""

    async def generate(self, prompt: str) -> str:
        ...


class OpenAITextGenerator:
    """TextGenerator backed by the OpenAI chat completions API."""

    def __init__(
        self,
        api_key: str = OPENAI_API_KEY,
        model: str = MODEL_NAME,
        timeout: float = LLM_TIMEOUT_SECONDS,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        self._model = model
        self._client = client or AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=1)

    async def generate(self, prompt: str) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=0.1,
            )
        except OpenAIError as e:
            logger.warning("OpenAI request failed: %s", e)
            raise CollaboratorError("openai", str(e)) from e
        choice = response.choices[0] if response.choices else None
        if not choice or not choice.message or not choice.message.content:
            raise CollaboratorError("openai", "empty completion")
        return choice.message.content


async def generate_with_timeout(generator: TextGenerator, prompt: str, timeout: float = LLM_TIMEOUT_SECONDS) -> str:
    """Call any TextGenerator under a hard timeout; a timeout surfaces as CollaboratorError."""
    try:
        return await asyncio.wait_for(generator.generate(prompt), timeout=timeout)
    except asyncio.TimeoutError as e:
        raise CollaboratorError("llm", f"timed out after {timeout:.0f}s") from e
