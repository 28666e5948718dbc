"""
Query embedding adapters.

Two backends share one async interface, ``await embedder.embed(text)``:
  - OpenAIEmbedder: remote embeddings endpoint (default)
  - LocalEmbedder:  sentence-transformers model, run in a worker thread

Both enforce a timeout; any failure propagates to the caller.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

from profquery.core.config import Settings

logger = logging.getLogger("profquery.services.embedding")


class Embedder(Protocol):
    async def embed(self, text: str) -> list[float]: ...


class OpenAIEmbedder:
    def __init__(self, client: Any, model: str, timeout: float):
        self.client = client
        self.model = model
        self.timeout = timeout

    async def embed(self, text: str) -> list[float]:
        response = await self.client.embeddings.create(
            model=self.model,
            input=text,
            timeout=self.timeout,
        )
        if not response.data:
            raise ValueError(f"Embedding model {self.model} returned no vectors")
        return list(response.data[0].embedding)


class LocalEmbedder:
    """Loads the SentenceTransformer model lazily on first use."""

    def __init__(self, model_name: str, timeout: float):
        self.model_name = model_name
        self.timeout = timeout
        self._model = None

    def _get_model(self) -> Any:
        if self._model is None:
            from sentence_transformers import SentenceTransformer

            self._model = SentenceTransformer(self.model_name)
            logger.info("Loaded local embedding model %s", self.model_name)
        return self._model

    def _encode(self, text: str) -> list[float]:
        # show_progress_bar=False keeps tqdm off stderr
        return self._get_model().encode(text, show_progress_bar=False).tolist()

    async def embed(self, text: str) -> list[float]:
        loop = asyncio.get_running_loop()
        return await asyncio.wait_for(
            loop.run_in_executor(None, self._encode, text),
            timeout=self.timeout,
        )


def build_embedder(settings: Settings, openai_client: Any | None = None) -> Embedder:
    """Pick the embedding backend named by ``settings.embedding_backend``."""
    backend = settings.embedding_backend.lower()
    if backend == "local":
        return LocalEmbedder(settings.local_embedding_model, settings.embedding_timeout_seconds)
    if backend == "openai":
        if openai_client is None:
            raise RuntimeError("OpenAI embedding backend selected but no OpenAI client was provided.")
        return OpenAIEmbedder(openai_client, settings.embedding_model, settings.embedding_timeout_seconds)
    raise ValueError(f"Unknown embedding backend: {settings.embedding_backend!r}")
