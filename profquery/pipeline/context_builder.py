"""
Pipeline stage 5: render selected passages for the model and the client.

Record N in the prompt ("--- PASSAGE #N ---") and match N in the client
list always describe the same passage.
"""

from __future__ import annotations

from profquery.schemas.response import ClientMatch
from profquery.schemas.retrieval import ScoredCandidate
from profquery.utils.text import shorten

UNKNOWN_PROFESSOR = "(unknown name)"


def assemble_context(
    selected: list[ScoredCandidate],
    snippet_max_chars: int = 200,
) -> tuple[str, list[ClientMatch]]:
    """
    Build the prompt context block and the client-facing match list.

    Returns:
        (context_text, matches)
    """
    records: list[str] = []
    matches: list[ClientMatch] = []

    for idx, cand in enumerate(selected, start=1):
        chunk = cand.chunk
        name = chunk.professor_name or UNKNOWN_PROFESSOR

        lines = [f"--- PASSAGE #{idx} ---", f"Professor: {name}"]
        if chunk.section_block:
            lines.append(f"Section: {chunk.section_block}")
        if chunk.source_url:
            lines.append(f"URL: {chunk.source_url}")
        lines.append("")
        lines.append(chunk.text.strip())
        records.append("\n".join(lines))

        matches.append(ClientMatch(
            score=cand.score,
            professor_name=name,
            source_url=chunk.source_url,
            section_block=chunk.section_block,
            snippet=shorten(chunk.text, snippet_max_chars),
        ))

    return "\n\n".join(records), matches
