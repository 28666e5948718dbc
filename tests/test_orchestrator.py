"""
End-to-end pipeline scenarios with fake clients: call counts, short
circuits and error mapping.
"""
from unittest.mock import patch

import pytest

from profquery.core.errors import (
    GenerationFailure,
    InputValidationError,
    RequestTimeout,
    RetrievalFailure,
)
from profquery.pipeline.orchestrator import NO_MATCH_ANSWER, validate_conversation
from profquery.schemas.pipeline import PipelineStage

from .conftest import (
    ANSWER_MODEL,
    REWRITE_MODEL,
    FakeEmbedder,
    FakeIndex,
    FakeLLM,
    assistant,
    chunk_hit,
    summary_hit,
    user,
)


def rich_index():
    return FakeIndex(
        summaries=[summary_hit("prof-a"), summary_hit("prof-b")],
        scoped=[
            chunk_hit("a1", doc_id="prof-a", section="Research", score=0.9),
            chunk_hit("a2", doc_id="prof-a", section="Research", score=0.85),
            chunk_hit("b1", doc_id="prof-b", section="Teaching", score=0.8,
                      professor="Alan Turing", url="https://www.tum.de/prof/alan"),
            chunk_hit("b2", doc_id="prof-b", section="", score=0.7, professor="Alan Turing"),
        ],
    )


async def test_happy_path(make_orchestrator):
    llm = FakeLLM(rewrite="professors working on quantum cryptography",
                  answer="Prof. Ada Lovelace works on quantum cryptography.")
    embedder = FakeEmbedder()
    index = rich_index()
    orchestrator = make_orchestrator(index, llm=llm, embedder=embedder)

    result = await orchestrator.run([user("Who works on quantum crypto?")])

    assert result.answer == "Prof. Ada Lovelace works on quantum cryptography."
    assert result.rewritten_query == "professors working on quantum cryptography"
    assert embedder.calls == ["professors working on quantum cryptography"]
    assert len(index.calls) == 2
    assert len(llm.calls_for(REWRITE_MODEL)) == 1
    assert len(llm.calls_for(ANSWER_MODEL)) == 1
    # diverse sections first, then the rest
    assert [m.professor_name for m in result.matches] == [
        "Ada Lovelace", "Alan Turing", "Ada Lovelace", "Alan Turing",
    ]
    assert result.metadata.routed_doc_ids == ["prof-a", "prof-b"]
    assert result.metadata.passages_selected == 4
    assert set(result.metadata.stage_timings) == {"rewrite", "embed", "retrieve", "generate"}


async def test_follow_up_embeds_the_rewritten_query(make_orchestrator):
    llm = FakeLLM(rewrite="What does Prof. Ada Lovelace teach?")
    embedder = FakeEmbedder()
    orchestrator = make_orchestrator(rich_index(), llm=llm, embedder=embedder)

    result = await orchestrator.run([
        user("Who works on quantum cryptography?"),
        assistant("Prof. Ada Lovelace."),
        user("What does she teach?"),
    ])

    assert embedder.calls == ["What does Prof. Ada Lovelace teach?"]
    answer_prompt = llm.calls_for(ANSWER_MODEL)[0]["messages"][1]["content"]
    assert "What does Prof. Ada Lovelace teach?" in answer_prompt
    assert result.rewritten_query == "What does Prof. Ada Lovelace teach?"


async def test_rewrite_failure_falls_back_to_last_message(make_orchestrator):
    llm = FakeLLM(rewrite_error=RuntimeError("rewrite down"))
    embedder = FakeEmbedder()
    orchestrator = make_orchestrator(rich_index(), llm=llm, embedder=embedder)

    result = await orchestrator.run([user("Who teaches compilers?")])

    assert embedder.calls == ["Who teaches compilers?"]
    assert result.rewritten_query == "Who teaches compilers?"
    assert result.answer


async def test_nothing_found_skips_generation(make_orchestrator):
    llm = FakeLLM()
    index = FakeIndex()
    orchestrator = make_orchestrator(index, llm=llm)

    result = await orchestrator.run([user("Who studies underwater basket weaving?")])

    assert result.answer == NO_MATCH_ANSWER
    assert result.matches == []
    assert llm.calls_for(ANSWER_MODEL) == []
    assert len(index.calls) == 2


async def test_broadening_scenario(make_orchestrator):
    index = FakeIndex(
        summaries=[summary_hit("prof-a")],
        scoped=[chunk_hit("a1", doc_id="prof-a")],
        global_chunks=[chunk_hit(f"g{i}", section=f"S{i}") for i in range(12)],
    )
    orchestrator = make_orchestrator(index)

    result = await orchestrator.run([user("robotics?")])

    assert len(index.calls) == 3
    assert result.metadata.broadened
    assert len(result.matches) == 8


@pytest.mark.parametrize("messages", [
    [],
    [user("   ")],
    [user("hello"), assistant("hi there")],
])
async def test_invalid_conversation_makes_no_calls(make_orchestrator, messages):
    llm = FakeLLM()
    embedder = FakeEmbedder()
    index = rich_index()
    orchestrator = make_orchestrator(index, llm=llm, embedder=embedder)

    with pytest.raises(InputValidationError):
        await orchestrator.run(messages)

    assert llm.calls == []
    assert embedder.calls == []
    assert index.calls == []


async def test_embedding_error_is_retrieval_failure(make_orchestrator):
    llm = FakeLLM()
    index = rich_index()
    orchestrator = make_orchestrator(index, llm=llm, embedder=FakeEmbedder(error=RuntimeError("down")))

    with pytest.raises(RetrievalFailure):
        await orchestrator.run([user("q")])

    assert index.calls == []
    assert llm.calls_for(ANSWER_MODEL) == []


async def test_empty_vector_is_retrieval_failure(make_orchestrator):
    orchestrator = make_orchestrator(rich_index(), embedder=FakeEmbedder(vector=[]))
    with pytest.raises(RetrievalFailure):
        await orchestrator.run([user("q")])


async def test_index_error_is_retrieval_failure(make_orchestrator):
    llm = FakeLLM()
    orchestrator = make_orchestrator(FakeIndex(error=RuntimeError("index down")), llm=llm)

    with pytest.raises(RetrievalFailure):
        await orchestrator.run([user("q")])

    assert llm.calls_for(ANSWER_MODEL) == []


async def test_generation_error_after_retrieval_completed(make_orchestrator):
    llm = FakeLLM(answer_error=RuntimeError("llm down"))
    embedder = FakeEmbedder()
    index = rich_index()
    orchestrator = make_orchestrator(index, llm=llm, embedder=embedder)

    with pytest.raises(GenerationFailure):
        await orchestrator.run([user("q")])

    assert len(embedder.calls) == 1
    assert len(index.calls) == 2
    assert len(llm.calls_for(ANSWER_MODEL)) == 1


async def test_request_timeout(make_orchestrator, settings):
    slow = settings.model_copy(update={"request_timeout_seconds": 0.05})
    orchestrator = make_orchestrator(rich_index(), embedder=FakeEmbedder(delay=1.0),
                                     settings_override=slow)
    with pytest.raises(RequestTimeout):
        await orchestrator.run([user("q")])


def test_validate_conversation_accepts_user_last():
    validate_conversation([assistant("hi"), user("Who teaches AI?")])


async def test_failure_log_names_the_failing_search(make_orchestrator):
    index = FakeIndex(
        summaries=[summary_hit("prof-a")],
        error=ConnectionError("index down"),
        fail_on_call=2,
    )
    orchestrator = make_orchestrator(index)

    with patch("profquery.pipeline.orchestrator.logger") as log:
        with pytest.raises(RetrievalFailure):
            await orchestrator.run([user("q")])

    args = log.warning.call_args.args
    assert args[1] == PipelineStage.RETRIEVE.value
