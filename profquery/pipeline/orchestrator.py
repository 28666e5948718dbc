"""
Pipeline orchestrator: the top-level entry point.

ValidateInput → Rewrite → Embed → Retrieve (route, scoped, broaden)
→ SelectPassages → AssembleContext → Generate → Respond.

Stages run strictly in sequence; nothing is retried.  Any hard error
ends the request (Fail); an empty retrieval result ends it early with
the fixed "nothing found" answer.
"""

from __future__ import annotations

import asyncio
from typing import Any

from profquery.core.config import Settings
from profquery.core.errors import (
    InputValidationError,
    ProfQueryError,
    RequestTimeout,
    RetrievalFailure,
)
from profquery.pipeline.context_builder import assemble_context
from profquery.pipeline.passage_selector import select_passages
from profquery.pipeline.query_rewrite import rewrite_query
from profquery.pipeline.response_generator import generate_answer
from profquery.pipeline.retrieval import retrieve_passages
from profquery.schemas.conversation import ConversationTurn
from profquery.schemas.pipeline import PipelineContext, PipelineStage
from profquery.schemas.response import AnswerResult, PipelineMetadata
from profquery.utils.logging import get_logger
from profquery.utils.timing import Timer

logger = get_logger("profquery.pipeline.orchestrator")

NO_MATCH_ANSWER = "I could not find any professors matching that question in the indexed data."


class QueryOrchestrator:
    """
    Runs one conversation through the full pipeline.

    Holds only immutable configuration and stateless clients, so one
    instance serves all concurrent requests.
    """

    def __init__(self, settings: Settings, llm_client: Any, embedder: Any, index: Any):
        self.settings = settings
        self.llm_client = llm_client
        self.embedder = embedder
        self.index = index

    async def run(self, messages: list[ConversationTurn]) -> AnswerResult:
        ctx = PipelineContext(messages=list(messages))
        logger.info("[PIPELINE] Started | %d message(s)", len(ctx.messages))

        try:
            result = await asyncio.wait_for(
                self._run_stages(ctx),
                timeout=self.settings.request_timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            logger.error(
                "[PIPELINE] Timed out after %.2fs during stage=%s",
                ctx.elapsed_seconds, ctx.stage.value,
            )
            ctx.stage = PipelineStage.FAIL
            raise RequestTimeout() from e
        except ProfQueryError as e:
            logger.warning("[PIPELINE] Failed during stage=%s: %s", ctx.stage.value, e)
            ctx.stage = PipelineStage.FAIL
            raise

        logger.info(
            "[PIPELINE] Done in %.2fs | matches=%d broadened=%s timings=%s",
            ctx.elapsed_seconds, len(result.matches),
            result.metadata.broadened, result.metadata.stage_timings,
        )
        return result

    # ── Stage runners ───────────────────────────────────────────────

    async def _run_stages(self, ctx: PipelineContext) -> AnswerResult:
        ctx.stage = PipelineStage.VALIDATE_INPUT
        validate_conversation(ctx.messages)

        ctx.stage = PipelineStage.REWRITE
        async with Timer("rewrite", sink=ctx.stage_timings):
            ctx.standalone_query = await rewrite_query(
                ctx.messages, llm_client=self.llm_client, settings=self.settings,
            )

        ctx.stage = PipelineStage.EMBED
        async with Timer("embed", sink=ctx.stage_timings):
            ctx.query_vector = await self._embed(ctx.standalone_query)

        ctx.stage = PipelineStage.ROUTE
        async with Timer("retrieve", sink=ctx.stage_timings):
            ctx.retrieval_result = await retrieve_passages(
                ctx.query_vector, index=self.index, settings=self.settings,
                on_stage=lambda stage: setattr(ctx, "stage", stage),
            )

        if ctx.retrieval_result.is_empty:
            logger.info("[PIPELINE] Short-circuit: no relevant passages")
            return self._respond(ctx, NO_MATCH_ANSWER)

        ctx.stage = PipelineStage.SELECT_PASSAGES
        ctx.selected = select_passages(
            ctx.retrieval_result.candidates, self.settings.max_passages,
        )

        ctx.stage = PipelineStage.ASSEMBLE_CONTEXT
        ctx.context_text, ctx.matches = assemble_context(
            ctx.selected, self.settings.snippet_max_chars,
        )

        ctx.stage = PipelineStage.GENERATE
        async with Timer("generate", sink=ctx.stage_timings):
            answer = await generate_answer(
                ctx.standalone_query, ctx.context_text,
                llm_client=self.llm_client, settings=self.settings,
            )

        return self._respond(ctx, answer)

    async def _embed(self, text: str) -> list[float]:
        try:
            vector = await self.embedder.embed(text)
        except Exception as e:
            logger.error("[PIPELINE] Embedding failed: %r", e)
            raise RetrievalFailure() from e
        if not vector:
            logger.error("[PIPELINE] Embedding service returned an empty vector")
            raise RetrievalFailure()
        return vector

    def _respond(self, ctx: PipelineContext, answer: str) -> AnswerResult:
        ctx.stage = PipelineStage.RESPOND
        ctx.final_result = AnswerResult(
            answer=answer,
            matches=ctx.matches,
            rewritten_query=ctx.standalone_query,
            metadata=_build_metadata(ctx),
        )
        return ctx.final_result


# ── Helpers ─────────────────────────────────────────────────────────

def validate_conversation(messages: list[ConversationTurn]) -> None:
    """Reject conversations that cannot be answered, before any outbound call."""
    if not messages:
        raise InputValidationError("Request must contain at least one message.")
    last = messages[-1]
    if last.role != "user":
        raise InputValidationError("The last message must come from the user.")
    if not last.content or not last.content.strip():
        raise InputValidationError("The last user message is empty.")


def _build_metadata(ctx: PipelineContext) -> PipelineMetadata:
    r = ctx.retrieval_result
    return PipelineMetadata(
        routed_doc_ids=sorted(r.routed_doc_ids) if r else [],
        broadened=r.broadened if r else False,
        index_calls=r.index_calls if r else 0,
        candidates_found=len(r.candidates) if r else 0,
        passages_selected=len(ctx.selected),
        stage_timings=dict(ctx.stage_timings),
    )


def build_orchestrator(settings: Settings) -> QueryOrchestrator:
    """Create the real OpenAI, embedding and Chroma clients from settings."""
    from profquery.services.embedding import build_embedder
    from profquery.services.llm import build_openai_client
    from profquery.services.vector_store import ProfileIndex, build_chroma_client

    llm_client = build_openai_client(settings)
    embedder = build_embedder(settings, llm_client)
    index = ProfileIndex(
        build_chroma_client(settings),
        settings.chroma_collection,
        settings.index_timeout_seconds,
    )
    return QueryOrchestrator(settings, llm_client, embedder, index)
