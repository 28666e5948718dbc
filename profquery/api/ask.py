"""
Thin API route for the professor question endpoint.

No business logic: reads the orchestrator from app state, runs the
pipeline, and maps failures to ``{"error": ...}`` responses.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from profquery.core.errors import ProfQueryError
from profquery.pipeline.orchestrator import QueryOrchestrator
from profquery.schemas.conversation import AskRequest
from profquery.schemas.response import AskResponse, ErrorResponse
from profquery.utils.logging import get_logger

logger = get_logger("profquery.api.ask")

router = APIRouter(tags=["Ask"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    504: {"model": ErrorResponse},
}


def get_orchestrator(request: Request) -> QueryOrchestrator:
    return request.app.state.orchestrator


@router.post(
    "/prof-query",
    response_model=AskResponse,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
)
@router.post(
    "/v1/ask",
    response_model=AskResponse,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
)
async def ask_question(
    request: AskRequest,
    orchestrator: QueryOrchestrator = Depends(get_orchestrator),
):
    """Answer the last user message of a conversation from professor profiles."""
    last = request.messages[-1].content.strip() if request.messages else ""
    logger.info("[ASK] New question: %s%s", last[:80], "..." if len(last) > 80 else "")

    try:
        result = await orchestrator.run(request.messages)
    except ProfQueryError as e:
        return JSONResponse(status_code=e.status_code, content={"error": e.public_message})
    except Exception as e:
        logger.error("[ASK] Error: %s", e, exc_info=True)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    return AskResponse(
        answer=result.answer,
        matches=result.matches,
        rewritten_query=(
            result.rewritten_query if orchestrator.settings.expose_rewritten_query else None
        ),
    )
