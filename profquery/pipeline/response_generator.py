"""
Pipeline stage 6: grounded answer generation.

One chat-completion call over the assembled profiles.  An error or an
empty answer is a GenerationFailure; nothing is substituted.
"""

from __future__ import annotations

from typing import Any

from profquery.core.config import Settings
from profquery.core.errors import GenerationFailure
from profquery.prompts.answer_generator import build_answer_prompt, build_system_prompt
from profquery.services.llm import chat_completion
from profquery.utils.logging import get_logger

logger = get_logger("profquery.pipeline.response_generator")


async def generate_answer(
    question: str,
    context: str,
    *,
    llm_client: Any,
    settings: Settings,
) -> str:
    messages = [
        {"role": "system", "content": build_system_prompt()},
        {"role": "user", "content": build_answer_prompt(question, context)},
    ]
    logger.info(
        "[GENERATE] model=%s, prompt length: %d chars",
        settings.answer_model, sum(len(m["content"]) for m in messages),
    )

    try:
        answer = await chat_completion(
            llm_client,
            model=settings.answer_model,
            messages=messages,
            temperature=settings.answer_temperature,
            max_tokens=settings.answer_max_tokens,
            timeout=settings.llm_timeout_seconds,
        )
    except Exception as e:
        logger.error("[GENERATE] Answer LLM call failed: %r", e)
        raise GenerationFailure() from e

    if not answer:
        logger.error("[GENERATE] Answer LLM returned no content")
        raise GenerationFailure()

    logger.info("[GENERATE] Answer generated: %d chars", len(answer))
    return answer
