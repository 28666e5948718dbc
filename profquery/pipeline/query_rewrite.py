"""
Pipeline stage 1: conversational query rewriting.

Turns the latest user turn plus recent history into one self-contained
search query.  A failed or empty rewrite never blocks the pipeline: the
verbatim last user message is used instead.
"""

from __future__ import annotations

from typing import Any

from profquery.core.config import Settings
from profquery.core.errors import RewriteFailure
from profquery.prompts.query_rewriter import build_rewrite_prompt
from profquery.schemas.conversation import ConversationTurn
from profquery.services.llm import chat_completion
from profquery.utils.logging import get_logger
from profquery.utils.text import collapse_whitespace

logger = get_logger("profquery.pipeline.query_rewrite")

_TRANSCRIPT_ROLES = ("user", "assistant")


async def rewrite_query(
    messages: list[ConversationTurn],
    *,
    llm_client: Any,
    settings: Settings,
) -> str:
    """
    Return a standalone query for the last user turn of ``messages``.

    Only the most recent ``settings.history_max_turns`` turns are shown
    to the model.  Always returns non-empty text for a validated
    conversation.
    """
    recent = messages[-settings.history_max_turns:]
    latest = recent[-1].content.strip()

    transcript = [
        (turn.role, turn.content.strip())
        for turn in recent[:-1]
        if turn.role in _TRANSCRIPT_ROLES and turn.content.strip()
    ]

    try:
        rewritten = await _call_rewriter(transcript, latest, llm_client, settings)
    except RewriteFailure as e:
        logger.warning("[REWRITE] %s. Using the last user message verbatim.", e)
        return latest

    logger.info("[REWRITE] %r -> %r", latest[:80], rewritten[:80])
    return rewritten


async def _call_rewriter(
    transcript: list[tuple[str, str]],
    latest: str,
    llm_client: Any,
    settings: Settings,
) -> str:
    system_prompt, user_prompt = build_rewrite_prompt(transcript, latest)
    try:
        raw = await chat_completion(
            llm_client,
            model=settings.rewrite_model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=settings.rewrite_temperature,
            max_tokens=settings.rewrite_max_tokens,
            timeout=settings.llm_timeout_seconds,
        )
    except Exception as e:
        raise RewriteFailure(f"Rewrite call failed: {e}") from e

    rewritten = _clean_rewrite(raw)
    if not rewritten:
        raise RewriteFailure("Rewrite call returned empty text")
    return rewritten


def _clean_rewrite(raw: str) -> str:
    """Strip whitespace and wrapping quotes the model sometimes adds."""
    text = collapse_whitespace(raw)
    if len(text) >= 2 and text[0] == text[-1] and text[0] in {'"', "'"}:
        text = text[1:-1].strip()
    return text
