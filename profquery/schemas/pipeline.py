"""
PipelineContext carries state between the orchestrator's stages.

Created once per request and progressively enriched; discarded when
the response is sent.
"""

from __future__ import annotations

import time
from enum import Enum

from pydantic import BaseModel, Field

from profquery.schemas.conversation import ConversationTurn
from profquery.schemas.response import AnswerResult, ClientMatch
from profquery.schemas.retrieval import RetrievalResult, ScoredCandidate


class PipelineStage(str, Enum):
    VALIDATE_INPUT = "validate_input"
    REWRITE = "rewrite"
    EMBED = "embed"
    ROUTE = "route"  # stage A: summary search
    RETRIEVE = "retrieve"  # stage B: scoped chunk search
    BROADEN = "broaden"  # unfiltered chunk search after a thin stage B
    SELECT_PASSAGES = "select_passages"
    ASSEMBLE_CONTEXT = "assemble_context"
    GENERATE = "generate"
    RESPOND = "respond"
    FAIL = "fail"


class PipelineContext(BaseModel):
    """Shared context object threaded through all pipeline stages."""

    # ── Inputs ───────────────────────────────────────────────────────
    messages: list[ConversationTurn]

    # ── Stage outputs (populated progressively) ─────────────────────
    stage: PipelineStage = PipelineStage.VALIDATE_INPUT
    standalone_query: str = ""
    query_vector: list[float] = Field(default_factory=list)
    retrieval_result: RetrievalResult | None = None
    selected: list[ScoredCandidate] = Field(default_factory=list)
    context_text: str = ""
    matches: list[ClientMatch] = Field(default_factory=list)
    final_result: AnswerResult | None = None

    # ── Timing ──────────────────────────────────────────────────────
    start_time: float = Field(default_factory=time.time)
    stage_timings: dict[str, float] = Field(default_factory=dict)

    @property
    def elapsed_seconds(self) -> float:
        return time.time() - self.start_time
