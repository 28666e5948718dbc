"""
OpenAI client construction and the single chat-completion call used by
the rewrite and answer stages.

The client is built once at startup from Settings and injected into the
orchestrator; there is no module-level singleton.
"""

from __future__ import annotations

import logging
from typing import Any

from openai import AsyncOpenAI

from profquery.core.config import Settings

logger = logging.getLogger("profquery.services.llm")


def build_openai_client(settings: Settings) -> AsyncOpenAI:
    """
    Create the async OpenAI client.

    Raises RuntimeError when the API key is missing.
    """
    if not settings.openai_api_key:
        raise RuntimeError("OpenAI API key not configured (OPENAI_API_KEY).")

    client = AsyncOpenAI(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url or None,
        timeout=settings.llm_timeout_seconds,
        max_retries=settings.openai_max_retries,
    )
    logger.info("OpenAI client initialized (max_retries=%d).", settings.openai_max_retries)
    return client


async def chat_completion(
    client: Any,
    *,
    model: str,
    messages: list[dict[str, str]],
    temperature: float,
    max_tokens: int,
    timeout: float,
) -> str:
    """
    Run one chat completion and return the stripped message text.

    Returns "" when the model produced no content; transport and API
    errors propagate to the caller.
    """
    response = await client.chat.completions.create(
        model=model,
        messages=messages,
        temperature=temperature,
        max_tokens=max_tokens,
        timeout=timeout,
    )
    if not response.choices:
        return ""
    content = response.choices[0].message.content
    return (content or "").strip()
