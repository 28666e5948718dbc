"""
Prompt templates for answer generation.

The answer must be grounded in the supplied profiles only and read as
plain user-facing prose.
"""

from __future__ import annotations


def build_system_prompt() -> str:
    """Build the static system message."""
    return (
        "You are an assistant answering questions about TUM professors. "
        "You are given a set of professor profile excerpts. "
        "Use ONLY this information to answer. "
        "If the answer is not stated in the profiles, say so clearly. "
        "Never invent professors, positions, projects or links. "
        "Do not mention how the profiles were found: never refer to searches, "
        "indexes, embeddings, passages, excerpts or 'the context'. "
        "Write for the person asking, in clear prose."
    )


def build_answer_prompt(question: str, context: str) -> str:
    """
    Build the user message.

    Structure:
      1. Profiles block between start/end markers
      2. The standalone question
      3. Answer instructions
    """
    return (
        "Here are the relevant professor profiles:\n\n"
        "--- PROFILES START ---\n"
        f"{context}\n"
        "--- PROFILES END ---\n\n"
        f"User question: {question}\n\n"
        "Please:\n"
        "1. Name the best-matching professor(s) with their URL.\n"
        "2. Explain why they are relevant.\n"
        "3. Answer the question as specifically as possible from the profiles.\n"
        "If none of the profiles answer the question, say that the information "
        "is not available instead of guessing."
    )
