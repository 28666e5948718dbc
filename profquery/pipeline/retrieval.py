"""
Pipeline stage 3: two-stage retrieval.

1. Route: search summary entries (top routing_top_k) and collect the
   distinct profile doc ids they point to.
2. Retrieve: search chunk entries restricted to the routed doc ids
   (top chunk_top_k); no doc filter when routing found nothing.
3. Broaden: when routing found docs but the scoped search returned fewer
   than broaden_min_chunks chunks, search all chunks again unfiltered.

The same query vector is reused for every search.  Any index error is a
RetrievalFailure; an empty result is a legitimate outcome.
"""

from __future__ import annotations

from typing import Any, Callable

from profquery.core.config import Settings
from profquery.core.errors import RetrievalFailure
from profquery.schemas.pipeline import PipelineStage
from profquery.schemas.retrieval import (
    IndexHit,
    ProfileChunk,
    RetrievalResult,
    ScoredCandidate,
)
from profquery.services.vector_store import build_where
from profquery.utils.logging import get_logger
from profquery.utils.text import metadata_str

logger = get_logger("profquery.pipeline.retrieval")


async def retrieve_passages(
    query_vector: list[float],
    *,
    index: Any,
    settings: Settings,
    on_stage: Callable[[PipelineStage], None] | None = None,
) -> RetrievalResult:
    """
    Run routing, scoped retrieval and (if needed) broadening.

    ``on_stage`` is told which search is about to run, so a caller can
    report the exact index call that failed.
    """
    result = RetrievalResult()

    # ── Stage A: routing ────────────────────────────────────────────
    summaries = await _search(
        index, query_vector, settings.routing_top_k,
        build_where({settings.kind_field: settings.summary_kind}),
        stage=PipelineStage.ROUTE, on_stage=on_stage,
    )
    result.index_calls += 1
    doc_ids = {metadata_str(h.metadata, settings.doc_id_field) for h in summaries}
    doc_ids.discard("")
    result.routed_doc_ids = doc_ids
    logger.info("[RETRIEVAL] Routing: %d summary hit(s) -> %d doc(s)", len(summaries), len(doc_ids))

    # ── Stage B: scoped chunk retrieval ─────────────────────────────
    hits = await _search(
        index, query_vector, settings.chunk_top_k,
        _chunk_filter(settings, doc_ids),
        stage=PipelineStage.RETRIEVE, on_stage=on_stage,
    )
    result.index_calls += 1
    result.scoped_count = len(hits)
    logger.info("[RETRIEVAL] Scoped search returned %d chunk(s)", len(hits))

    # ── Broadening fallback ─────────────────────────────────────────
    if doc_ids and len(hits) < settings.broaden_min_chunks:
        logger.info(
            "[RETRIEVAL] Only %d scoped chunk(s) (< %d), broadening to all profiles",
            len(hits), settings.broaden_min_chunks,
        )
        hits = await _search(
            index, query_vector, settings.chunk_top_k,
            _chunk_filter(settings, set()),
            stage=PipelineStage.BROADEN, on_stage=on_stage,
        )
        result.index_calls += 1
        result.broadened = True
        logger.info("[RETRIEVAL] Broadened search returned %d chunk(s)", len(hits))

    result.candidates = [to_candidate(h, settings) for h in hits]
    if result.is_empty:
        logger.warning("[RETRIEVAL] No chunks found")
    return result


def to_candidate(hit: IndexHit, settings: Settings) -> ScoredCandidate:
    """Parse an index hit's metadata into a ScoredCandidate."""
    md = hit.metadata
    professor = metadata_str(md, settings.professor_field) or metadata_str(md, settings.professor_field.lower())
    return ScoredCandidate(
        chunk=ProfileChunk(
            chunk_id=hit.id,
            doc_id=metadata_str(md, settings.doc_id_field),
            section_block=metadata_str(md, settings.section_field),
            text=hit.text,
            source_url=metadata_str(md, settings.url_field) or _url_from_id(hit.id),
            professor_name=professor,
        ),
        score=hit.score,
    )


# ── Internal helpers ────────────────────────────────────────────────

def _chunk_filter(settings: Settings, doc_ids: set[str]) -> dict[str, Any] | None:
    return build_where(
        {settings.kind_field: settings.chunk_kind},
        {settings.doc_id_field: sorted(doc_ids)},
    )


async def _search(
    index: Any,
    vector: list[float],
    top_k: int,
    where: dict[str, Any] | None,
    *,
    stage: PipelineStage,
    on_stage: Callable[[PipelineStage], None] | None,
) -> list[IndexHit]:
    if on_stage is not None:
        on_stage(stage)
    try:
        return await index.search(vector, top_k, where=where)
    except Exception as e:
        logger.error("[RETRIEVAL] Index query failed during %s search: %r", stage.value, e)
        raise RetrievalFailure() from e


def _url_from_id(hit_id: str) -> str:
    # some ingestions key records by their page URL
    return hit_id if hit_id.startswith(("http://", "https://")) else ""
