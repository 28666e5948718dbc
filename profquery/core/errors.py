"""
Error taxonomy for the question-answering pipeline.

Every hard failure bubbles up to the orchestrator as a ``ProfQueryError``
subclass; the API layer turns ``public_message`` into ``{"error": ...}``
with ``status_code``.
"""

from __future__ import annotations


class ProfQueryError(Exception):
    """Base class for failures that end a request."""

    status_code: int = 500
    public_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.public_message)
        if message:
            self.public_message = message


class InputValidationError(ProfQueryError):
    """Malformed conversation: rejected before any outbound call."""

    status_code = 400
    public_message = "Invalid request"


class RewriteFailure(ProfQueryError):
    """Rewrite call failed or returned nothing. Always recovered locally."""

    public_message = "Query rewrite failed"


class RetrievalFailure(ProfQueryError):
    """Embedding or vector index call failed."""

    status_code = 502
    public_message = "Searching the professor index failed. Please try again later."


class GenerationFailure(ProfQueryError):
    """Answer generation failed or produced empty text."""

    status_code = 502
    public_message = "Generating the answer failed. Please try again later."


class RequestTimeout(ProfQueryError):
    """The whole request exceeded its deadline."""

    status_code = 504
    public_message = "The request took too long to complete. Please try again."
