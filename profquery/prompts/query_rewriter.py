"""
Prompt template for the rewrite stage: conversation → standalone search query.
"""

from __future__ import annotations


REWRITE_SYSTEM_PROMPT = (
    "You rewrite the latest user message of a conversation about university "
    "professors into a single standalone search query.\n\n"
    "Rules:\n"
    "- Resolve pronouns and ellipsis (\"he\", \"her lab\", \"what about robotics?\") "
    "using the earlier turns.\n"
    "- Keep the user's intent; do NOT add names, topics or facts that are not in the conversation.\n"
    "- If the latest message is already self-contained, return it unchanged.\n"
    "- Output ONLY the query text: no quotes, no explanation, no prefix."
)


def build_rewrite_prompt(transcript: list[tuple[str, str]], latest: str) -> tuple[str, str]:
    """
    Build the system and user prompts for query rewriting.

    ``transcript`` holds the earlier (role, content) turns, oldest first.

    Returns:
        (system_prompt, user_prompt)
    """
    user_parts: list[str] = []

    if transcript:
        lines = [f"{role.capitalize()}: {content}" for role, content in transcript]
        user_parts.append("## CONVERSATION SO FAR\n" + "\n".join(lines))

    user_parts.append(f"## LATEST USER MESSAGE\n{latest}")
    user_parts.append("## STANDALONE QUERY")

    return REWRITE_SYSTEM_PROMPT, "\n\n".join(user_parts)
