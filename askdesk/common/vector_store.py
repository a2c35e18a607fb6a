"""
Vector Store

Abstract interface for the external vector index plus a ChromaDB-backed
implementation. Payloads are flat dicts; ``text`` is stored as the Chroma
document and every other field as metadata.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger("askdesk.common.vector_store")

Payload = Dict[str, Any]
PointId = Union[int, str]


class VectorStore(ABC):
    """Operations the core and the ingestion job need from a vector index."""

    @abstractmethod
    async def reset(self, dimension: int) -> None:
        """Drop and recreate the collection."""

    @abstractmethod
    async def upsert(self, point_id: PointId, vector: List[float], payload: Payload) -> None:
        """Insert or replace one point."""

    @abstractmethod
    async def search(self, vector: List[float], limit: int = 3) -> List[Payload]:
        """Return payloads of the ``limit`` nearest points, best first."""

    @abstractmethod
    async def count(self) -> int:
        """Number of stored points."""


class ChromaVectorStore(VectorStore):
    """
    ChromaDB-based vector store with cosine distance.

    Uses a persistent client at ``path`` unless a client is injected.
    """

    def __init__(
        self,
        path: str = "",
        collection: str = "docs",
        client: Optional[Any] = None,
    ) -> None:
        if client is None:
            import chromadb

            client = chromadb.PersistentClient(path=path) if path else chromadb.EphemeralClient()
        self._client = client
        self.collection_name = collection
        self._collection = None

    def _get_collection(self):
        if self._collection is None:
            self._collection = self._client.get_or_create_collection(
                name=self.collection_name,
                metadata={"hnsw:space": "cosine"},
            )
        return self._collection

    async def reset(self, dimension: int) -> None:
        def _reset():
            try:
                self._client.delete_collection(self.collection_name)
            except Exception as e:
                # Missing collection on first run
                logger.debug("Nothing to delete for %s: %s", self.collection_name, e)
            self._collection = None
            self._get_collection()

        await asyncio.to_thread(_reset)
        logger.info("Collection '%s' ready (dimension %d, cosine)", self.collection_name, dimension)

    async def upsert(self, point_id: PointId, vector: List[float], payload: Payload) -> None:
        metadata = {k: v for k, v in payload.items() if k != "text" and v is not None}
        await asyncio.to_thread(
            self._get_collection().upsert,
            ids=[str(point_id)],
            embeddings=[list(vector)],
            documents=[payload.get("text", "")],
            metadatas=[metadata] if metadata else None,
        )

    async def search(self, vector: List[float], limit: int = 3) -> List[Payload]:
        result = await asyncio.to_thread(
            self._get_collection().query,
            query_embeddings=[list(vector)],
            n_results=limit,
            include=["documents", "metadatas", "distances"],
        )

        documents = (result.get("documents") or [[]])[0]
        metadatas = (result.get("metadatas") or [[]])[0]
        distances = (result.get("distances") or [[]])[0]

        payloads = []
        for i, text in enumerate(documents):
            payload = dict(metadatas[i] or {}) if i < len(metadatas) else {}
            payload["text"] = text or ""
            if i < len(distances):
                payload["score"] = 1.0 - distances[i]
            payloads.append(payload)
        return payloads

    async def count(self) -> int:
        return await asyncio.to_thread(self._get_collection().count)
