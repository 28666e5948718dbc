"""
Read-only access to the professor-profile Chroma collection.

The collection holds two kinds of records, distinguished by metadata:
  - summary entries: one condensed description per profile (routing)
  - chunk entries:   passages of a profile (answer context)

The chromadb client is synchronous, so queries run in the default
thread executor under ``asyncio.wait_for``.  Distances (cosine space)
are converted to similarity scores as ``1 - distance``.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import chromadb

from profquery.core.config import Settings
from profquery.schemas.retrieval import IndexHit
from profquery.utils.logging import get_logger

logger = get_logger("profquery.services.vector_store")


def build_chroma_client(settings: Settings) -> chromadb.ClientAPI:
    """HTTP client when ``chroma_host`` is set, else a local persistent client."""
    client_settings = chromadb.Settings(anonymized_telemetry=False)
    if settings.chroma_host:
        logger.info("Connecting to Chroma at %s:%d", settings.chroma_host, settings.chroma_port)
        return chromadb.HttpClient(
            host=settings.chroma_host,
            port=settings.chroma_port,
            settings=client_settings,
        )

    path = Path(settings.chroma_persist_directory)
    path.mkdir(parents=True, exist_ok=True)
    logger.info("Opening persistent Chroma store at %s", path)
    return chromadb.PersistentClient(path=str(path), settings=client_settings)


def build_where(
    equals: dict[str, Any],
    one_of: dict[str, list[Any]] | None = None,
) -> dict[str, Any] | None:
    """
    Build a Chroma ``where`` filter from equality and membership clauses.

    Chroma rejects ``$and`` with a single operand, so one clause is
    returned bare.
    """
    clauses: list[dict[str, Any]] = [{key: {"$eq": value}} for key, value in equals.items()]
    for key, values in (one_of or {}).items():
        if values:
            clauses.append({key: {"$in": list(values)}})

    if not clauses:
        return None
    if len(clauses) == 1:
        return clauses[0]
    return {"$and": clauses}


def hits_from_query_result(results: dict[str, Any]) -> list[IndexHit]:
    """Flatten Chroma's nested single-query result into ranked IndexHits."""
    ids = (results.get("ids") or [[]])[0] or []
    documents = (results.get("documents") or [[]])[0] or []
    metadatas = (results.get("metadatas") or [[]])[0] or []
    distances = (results.get("distances") or [[]])[0] or []

    hits: list[IndexHit] = []
    for idx, hit_id in enumerate(ids):
        distance = float(distances[idx]) if idx < len(distances) and distances[idx] is not None else 1.0
        hits.append(IndexHit(
            id=str(hit_id),
            score=1.0 - distance,
            metadata=dict(metadatas[idx] or {}) if idx < len(metadatas) else {},
            text=(documents[idx] or "") if idx < len(documents) else "",
        ))
    return hits


class ProfileIndex:
    """Async nearest-neighbour search over one Chroma collection."""

    def __init__(self, client: chromadb.ClientAPI, collection_name: str, timeout: float):
        self.client = client
        self.collection_name = collection_name
        self.timeout = timeout
        self._collection = None

    def _get_collection(self) -> Any:
        # get_collection (not create): the index is owned by the ingestion side
        if self._collection is None:
            self._collection = self.client.get_collection(name=self.collection_name)
        return self._collection

    def _sync_query(
        self,
        vector: list[float],
        top_k: int,
        where: dict[str, Any] | None,
    ) -> list[IndexHit]:
        results = self._get_collection().query(
            query_embeddings=[vector],
            n_results=top_k,
            where=where,
            include=["documents", "metadatas", "distances"],
        )
        return hits_from_query_result(results)

    async def search(
        self,
        vector: list[float],
        top_k: int,
        where: dict[str, Any] | None = None,
    ) -> list[IndexHit]:
        loop = asyncio.get_running_loop()
        return await asyncio.wait_for(
            loop.run_in_executor(None, self._sync_query, vector, top_k, where),
            timeout=self.timeout,
        )

    def _sync_count(self) -> int:
        return self._get_collection().count()

    async def status(self) -> dict[str, Any]:
        """Status info for the health endpoint. Never raises."""
        loop = asyncio.get_running_loop()
        try:
            count = await asyncio.wait_for(
                loop.run_in_executor(None, self._sync_count),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Vector index status check timed out after %.1fs", self.timeout)
            return self._unavailable(f"Collection check timed out after {self.timeout}s")
        except Exception as e:
            logger.warning("Vector index status check failed: %s", e)
            return self._unavailable(f"Collection unavailable: {e}")
        return {
            "available": True,
            "collection": self.collection_name,
            "record_count": count,
            "message": "",
        }

    def _unavailable(self, message: str) -> dict[str, Any]:
        return {
            "available": False,
            "collection": self.collection_name,
            "record_count": 0,
            "message": message,
        }
