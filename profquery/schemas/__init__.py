"""
Pydantic schemas for every pipeline boundary.
Each module covers one pipeline stage or cross-cutting concern.
"""

from profquery.schemas.conversation import (
    AskRequest,
    ConversationTurn,
    Role,
)
from profquery.schemas.retrieval import (
    IndexHit,
    ProfileChunk,
    RetrievalResult,
    ScoredCandidate,
)
from profquery.schemas.response import (
    AnswerResult,
    AskResponse,
    ClientMatch,
    ErrorResponse,
    PipelineMetadata,
)
from profquery.schemas.pipeline import PipelineContext, PipelineStage

__all__ = [
    # Conversation
    "AskRequest",
    "ConversationTurn",
    "Role",
    # Retrieval
    "IndexHit",
    "ProfileChunk",
    "RetrievalResult",
    "ScoredCandidate",
    # Response
    "AnswerResult",
    "AskResponse",
    "ClientMatch",
    "ErrorResponse",
    "PipelineMetadata",
    # Pipeline
    "PipelineContext",
    "PipelineStage",
]
