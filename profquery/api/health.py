"""
Health check endpoints for monitoring.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from pydantic import BaseModel

router = APIRouter(tags=["Health"])


class IndexStatusResponse(BaseModel):
    available: bool
    collection: str
    record_count: int = 0
    message: str = ""


@router.get("/health")
async def health_check():
    """Basic health check."""
    return {"status": "ok", "service": "profquery"}


@router.get("/health/index", response_model=IndexStatusResponse)
async def index_status(request: Request):
    """Check that the vector index collection can be opened."""
    info = await request.app.state.orchestrator.index.status()
    return IndexStatusResponse(**info)
