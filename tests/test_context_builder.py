from profquery.pipeline.context_builder import UNKNOWN_PROFESSOR, assemble_context
from profquery.schemas.retrieval import ProfileChunk, ScoredCandidate


def cand(chunk_id, professor="Ada Lovelace", section="Research", url="https://tum.de/ada",
         text="Works on quantum cryptography.", score=0.8):
    return ScoredCandidate(
        chunk=ProfileChunk(chunk_id=chunk_id, doc_id="d", section_block=section, text=text,
                           source_url=url, professor_name=professor),
        score=score,
    )


def test_records_and_matches_align():
    selected = [cand("a", professor="Ada Lovelace"), cand("b", professor="Alan Turing", score=0.5)]
    context, matches = assemble_context(selected)

    assert context.index("--- PASSAGE #1 ---") < context.index("Ada Lovelace")
    assert context.index("--- PASSAGE #2 ---") < context.index("Alan Turing")
    assert [m.professor_name for m in matches] == ["Ada Lovelace", "Alan Turing"]
    assert [m.score for m in matches] == [0.8, 0.5]


def test_record_layout():
    context, _ = assemble_context([cand("a")])
    assert context == (
        "--- PASSAGE #1 ---\n"
        "Professor: Ada Lovelace\n"
        "Section: Research\n"
        "URL: https://tum.de/ada\n"
        "\n"
        "Works on quantum cryptography."
    )


def test_missing_name_section_and_url():
    context, matches = assemble_context([cand("a", professor="", section="", url="")])
    assert f"Professor: {UNKNOWN_PROFESSOR}" in context
    assert "Section:" not in context
    assert "URL:" not in context
    assert matches[0].professor_name == UNKNOWN_PROFESSOR
    assert matches[0].source_url == ""


def test_snippet_is_bounded():
    long_text = "quantum " * 200
    _, matches = assemble_context([cand("a", text=long_text)], snippet_max_chars=200)
    assert len(matches[0].snippet) <= 200
    assert matches[0].snippet.endswith("...")


def test_match_serializes_with_client_keys():
    _, matches = assemble_context([cand("a")])
    dumped = matches[0].model_dump(by_alias=True)
    assert set(dumped) == {"score", "professor", "url", "chunkBlock", "snippet"}
    assert dumped["chunkBlock"] == "Research"


def test_empty_selection():
    assert assemble_context([]) == ("", [])
