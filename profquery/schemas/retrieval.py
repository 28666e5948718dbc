"""
Schemas for the retrieval stage.

IndexHit is the raw shape returned by the vector index adapter.
ScoredCandidate wraps a parsed ProfileChunk and flows into passage
selection and context assembly.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class IndexHit(BaseModel):
    """One nearest-neighbour result, already converted to a similarity score."""
    id: str
    score: float
    metadata: dict[str, Any] = Field(default_factory=dict)
    text: str = ""


class ProfileChunk(BaseModel):
    """A passage of one professor's profile."""
    chunk_id: str
    doc_id: str = ""
    section_block: str = ""
    text: str = ""
    source_url: str = ""
    professor_name: str = ""


class ScoredCandidate(BaseModel):
    chunk: ProfileChunk
    score: float = 0.0


class RetrievalResult(BaseModel):
    """
    Output of the retrieval planner.

    ``candidates`` keep the index ranking (descending similarity).
    """
    candidates: list[ScoredCandidate] = Field(default_factory=list)
    routed_doc_ids: set[str] = Field(default_factory=set)
    scoped_count: int = 0
    broadened: bool = False
    index_calls: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.candidates
