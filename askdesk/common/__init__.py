"""
askdesk Common Module

Shared infrastructure for the retriever, the tool bridge and ingestion.
"""

from .config import AskdeskConfig, load_config
from .embedding_service import EmbeddingService, GeminiEmbeddingBackend
from .history import ConversationTurn, HistoryStore
from .llm_client import LLMClient, create_llm_client
from .retry import RetryPolicy
from .vector_store import ChromaVectorStore, VectorStore

__all__ = [
    "AskdeskConfig",
    "load_config",
    "EmbeddingService",
    "GeminiEmbeddingBackend",
    "ConversationTurn",
    "HistoryStore",
    "LLMClient",
    "create_llm_client",
    "RetryPolicy",
    "ChromaVectorStore",
    "VectorStore",
]
