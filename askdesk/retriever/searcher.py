"""
Searcher

Semantic retrieval over the FAQ vector store.
Embeds the question, runs a nearest-neighbour search and maps the raw
payloads to RetrievedDocument. Store failures degrade to an empty result;
embedding failures propagate.
"""

import logging
from typing import Any, Dict, List, Optional

from ..common.embedding_service import EmbeddingService
from ..common.errors import InvalidInput, StoreUnavailable
from ..common.schemas import RetrievedDocument
from ..common.vector_store import VectorStore

logger = logging.getLogger("askdesk.retriever.searcher")


class Searcher:
    """Retrieval store adapter: question text in, documents out."""

    def __init__(
        self,
        embedding_service: EmbeddingService,
        vector_store: VectorStore,
        default_limit: int = 3,
    ):
        self._embedding = embedding_service
        self._store = vector_store
        self.default_limit = default_limit

    async def retrieve(self, question: str, limit: Optional[int] = None) -> List[RetrievedDocument]:
        """
        Find the documents closest to ``question``.

        Args:
            question: User question
            limit: Max number of documents (default ``default_limit``)

        Returns:
            Documents in ranking order; empty if the store is unavailable
        """
        if limit is None:
            limit = self.default_limit
        if limit < 1:
            raise InvalidInput(f"limit must be at least 1, got {limit}")
        query_vector = await self._embedding.embed(question)

        try:
            hits = await self._store.search(query_vector, limit)
        except Exception as e:
            error = StoreUnavailable(f"Vector search failed: {e}")
            logger.error("%s", error.message, exc_info=True)
            return []

        return [self._to_document(hit) for hit in hits]

    @staticmethod
    def _to_document(payload: Dict[str, Any]) -> RetrievedDocument:
        text = payload.get("text", "")
        # Some ingested points nest the row under "text"
        if isinstance(text, dict):
            payload = text
            text = payload.get("text", "")
        return RetrievedDocument(
            label=str(payload.get("location_name", "") or "Unknown"),
            text=str(text or ""),
        )
