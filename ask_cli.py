#!/usr/bin/env python3
"""
Ask one question from the terminal using the configured services.

USAGE:
    python ask_cli.py "<question>" [--history conversation.json] [--json]

EXAMPLES:
    python ask_cli.py "Who works on quantum cryptography?"
    python ask_cli.py "What about her teaching?" --history chat.json

The history file is a JSON list of {"role": ..., "content": ...}
messages, oldest first; the question is appended as the last user turn.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from profquery.core.config import get_settings
from profquery.core.errors import ProfQueryError
from profquery.pipeline.orchestrator import build_orchestrator
from profquery.schemas.conversation import ConversationTurn


def load_history(path: str | None) -> list[ConversationTurn]:
    if not path:
        return []
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return [ConversationTurn(**turn) for turn in data]


async def ask(question: str, history: list[ConversationTurn]) -> dict:
    orchestrator = build_orchestrator(get_settings())
    messages = [*history, ConversationTurn(role="user", content=question)]
    result = await orchestrator.run(messages)
    return {
        "answer": result.answer,
        "rewrittenQuery": result.rewritten_query,
        "matches": [m.model_dump(by_alias=True) for m in result.matches],
    }


def main() -> int:
    parser = argparse.ArgumentParser(description="Ask a question about professor profiles.")
    parser.add_argument("question", help="The question to ask")
    parser.add_argument("--history", help="JSON file with earlier conversation turns")
    parser.add_argument("--json", action="store_true", help="Print the raw JSON response")
    args = parser.parse_args()

    try:
        response = asyncio.run(ask(args.question, load_history(args.history)))
    except ProfQueryError as e:
        print(f"Error: {e.public_message}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(response, indent=2, ensure_ascii=False))
        return 0

    print(f"\nQuery: {response['rewrittenQuery']}\n")
    print(response["answer"])
    if response["matches"]:
        print(f"\nSources ({len(response['matches'])}):")
        for i, m in enumerate(response["matches"], start=1):
            section = f" [{m['chunkBlock']}]" if m["chunkBlock"] else ""
            print(f"  {i}. {m['professor']}{section} (score={m['score']:.3f}) {m['url']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
