"""
Shared fixtures: in-memory stand-ins for the OpenAI client, the embedder
and the vector index.  Each records its calls so tests can assert on
call counts and ordering.
"""
import asyncio
from types import SimpleNamespace

import pytest

from profquery.core.config import Settings
from profquery.pipeline.orchestrator import QueryOrchestrator
from profquery.schemas.conversation import ConversationTurn
from profquery.schemas.retrieval import IndexHit

REWRITE_MODEL = "rewrite-model"
ANSWER_MODEL = "answer-model"


def completion(text):
    """Mimic an OpenAI chat completion response."""
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])


class FakeLLM:
    """Stands in for AsyncOpenAI; answers by model name."""

    def __init__(self, rewrite="standalone query", answer="Prof. Ada Lovelace works on it.",
                 rewrite_error=None, answer_error=None):
        self.rewrite = rewrite
        self.answer = answer
        self.rewrite_error = rewrite_error
        self.answer_error = answer_error
        self.calls = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    async def _create(self, **kwargs):
        self.calls.append(kwargs)
        if kwargs["model"] == REWRITE_MODEL:
            if self.rewrite_error:
                raise self.rewrite_error
            return completion(self.rewrite)
        if self.answer_error:
            raise self.answer_error
        return completion(self.answer)

    def calls_for(self, model):
        return [c for c in self.calls if c["model"] == model]


class FakeEmbedder:
    def __init__(self, vector=None, error=None, delay=0.0):
        self.vector = vector if vector is not None else [0.1, 0.2, 0.3]
        self.error = error
        self.delay = delay
        self.calls = []

    async def embed(self, text):
        self.calls.append(text)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.vector


class FakeIndex:
    """
    Scripted vector index.

    ``summaries`` answer summary-kind searches, ``scoped`` answers chunk
    searches filtered by doc id, ``global_chunks`` answers unfiltered
    chunk searches.  ``error`` is raised on every call, or only on the
    1-based call number ``fail_on_call``.
    """

    def __init__(self, summaries=None, scoped=None, global_chunks=None, error=None, fail_on_call=None):
        self.summaries = summaries or []
        self.scoped = scoped or []
        self.global_chunks = global_chunks or []
        self.error = error
        self.fail_on_call = fail_on_call
        self.calls = []

    async def search(self, vector, top_k, where=None):
        self.calls.append({"vector": vector, "top_k": top_k, "where": where})
        if self.error and self.fail_on_call in (None, len(self.calls)):
            raise self.error
        if where and "$and" in where:
            return list(self.scoped[:top_k])
        if where and where.get("kind", {}).get("$eq") == "summary":
            return list(self.summaries[:top_k])
        return list(self.global_chunks[:top_k])

    async def status(self):
        return {"available": True, "collection": "tumprof", "record_count": 42, "message": ""}


def summary_hit(doc_id, score=0.9):
    return IndexHit(id=f"summary-{doc_id}", score=score,
                    metadata={"kind": "summary", "docId": doc_id}, text=f"Summary of {doc_id}")


def chunk_hit(chunk_id, doc_id="prof-a", section="Research", score=0.8,
              text="Works on quantum cryptography and post-quantum protocols.",
              professor="Ada Lovelace", url="https://www.tum.de/prof/ada"):
    metadata = {"kind": "chunk", "docId": doc_id, "chunkBlock": section,
                "professorName": professor, "url": url}
    return IndexHit(id=chunk_id, score=score, metadata=metadata, text=text)


def user(content):
    return ConversationTurn(role="user", content=content)


def assistant(content):
    return ConversationTurn(role="assistant", content=content)


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        openai_api_key="test-key",
        rewrite_model=REWRITE_MODEL,
        answer_model=ANSWER_MODEL,
    )


@pytest.fixture
def llm():
    return FakeLLM()


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def make_orchestrator(settings):
    def _make(index, llm=None, embedder=None, settings_override=None):
        return QueryOrchestrator(
            settings_override or settings,
            llm or FakeLLM(),
            embedder or FakeEmbedder(),
            index,
        )
    return _make
