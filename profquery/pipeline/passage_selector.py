"""
Pipeline stage 4: bounded, section-diverse passage selection.

Pass 1 walks the ranked candidates and takes one passage per distinct,
non-empty section label.  Pass 2 walks them again and fills the
remaining slots with whatever was skipped (repeated or empty sections).
The result keeps acceptance order, so a lower-ranked passage from a new
section can precede a higher-ranked one from a section already covered.
"""

from __future__ import annotations

from profquery.schemas.retrieval import ScoredCandidate


def select_passages(
    candidates: list[ScoredCandidate],
    max_passages: int = 8,
) -> list[ScoredCandidate]:
    """Return at most ``max_passages`` candidates, favouring section diversity."""
    if max_passages <= 0:
        return []

    ranked = _deduplicate(candidates)
    selected: list[ScoredCandidate] = []
    taken: set[int] = set()
    seen_sections: set[str] = set()

    # Pass 1: one passage per new section
    for pos, cand in enumerate(ranked):
        if len(selected) >= max_passages:
            break
        section = _section_key(cand)
        if not section or section in seen_sections:
            continue
        seen_sections.add(section)
        taken.add(pos)
        selected.append(cand)

    # Pass 2: fill remaining slots in rank order
    for pos, cand in enumerate(ranked):
        if len(selected) >= max_passages:
            break
        if pos in taken:
            continue
        taken.add(pos)
        selected.append(cand)

    return selected


def _section_key(cand: ScoredCandidate) -> str:
    return cand.chunk.section_block.strip().casefold()


def _deduplicate(candidates: list[ScoredCandidate]) -> list[ScoredCandidate]:
    """Drop repeated chunk ids, keeping the first (best-ranked) occurrence."""
    seen: set[str] = set()
    unique: list[ScoredCandidate] = []
    for cand in candidates:
        if cand.chunk.chunk_id in seen:
            continue
        seen.add(cand.chunk.chunk_id)
        unique.append(cand)
    return unique
