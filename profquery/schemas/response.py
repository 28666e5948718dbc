"""
Schemas for the pipeline result and the HTTP response.

AnswerResult is the pipeline-internal result.
AskResponse is the external API contract consumed by the chat UI,
which reads match fields as ``professor`` / ``url`` / ``chunkBlock``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ClientMatch(BaseModel):
    """One source shown under an answer, in the same order as the prompt."""
    model_config = ConfigDict(populate_by_name=True)

    score: float
    professor_name: str = Field(alias="professor")
    source_url: str = Field(default="", alias="url")
    section_block: str = Field(default="", alias="chunkBlock")
    snippet: str = ""


class PipelineMetadata(BaseModel):
    """Diagnostic metadata, logged but not returned to clients."""
    routed_doc_ids: list[str] = Field(default_factory=list)
    broadened: bool = False
    index_calls: int = 0
    candidates_found: int = 0
    passages_selected: int = 0
    stage_timings: dict[str, float] = Field(default_factory=dict)


class AnswerResult(BaseModel):
    """Complete pipeline output for one request."""
    answer: str
    matches: list[ClientMatch] = Field(default_factory=list)
    rewritten_query: str = ""
    metadata: PipelineMetadata = Field(default_factory=PipelineMetadata)


class AskResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    answer: str
    matches: list[ClientMatch] = Field(default_factory=list)
    rewritten_query: str | None = Field(default=None, alias="rewrittenQuery")


class ErrorResponse(BaseModel):
    error: str
