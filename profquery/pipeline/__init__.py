"""
Pipeline modules for the profile question-answering flow.

Stage 1: Query rewriting      (query_rewrite.py)
Stage 2: Query embedding      (services/embedding.py, called by the orchestrator)
Stage 3: Retrieval            (retrieval.py)
Stage 4: Passage selection    (passage_selector.py)
Stage 5: Context assembly     (context_builder.py)
Stage 6: Answer generation    (response_generator.py)

Orchestrated by: orchestrator.py
"""
