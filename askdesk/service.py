"""
Wiring for askdesk components.

Builds the embedding service, vector store, generation client, tool bridge
and orchestrator from an AskdeskConfig.
"""

import logging
from typing import Optional

from .adapter.tool_bridge import ToolBridge
from .common.config import AskdeskConfig, load_config
from .common.embedding_service import EmbeddingService, GeminiEmbeddingBackend
from .common.history import HistoryStore
from .common.llm_client import create_llm_client
from .common.retry import RetryPolicy, linear_backoff
from .common.vector_store import ChromaVectorStore
from .retriever.generator import GenerationClient
from .retriever.orchestrator import AnswerOrchestrator
from .retriever.searcher import Searcher

logger = logging.getLogger("askdesk.service")


def create_embedding_service(config: AskdeskConfig) -> EmbeddingService:
    backend = GeminiEmbeddingBackend(
        api_key=config.llm.google_api_key,
        model=config.embedding.model,
        dimension=config.embedding.dimension,
    )
    return EmbeddingService(
        backend,
        dimension=config.embedding.dimension,
        max_chars=config.embedding.max_chars,
        retry_policy=RetryPolicy(
            max_attempts=config.embedding.retries,
            backoff=linear_backoff(config.embedding.backoff_seconds),
        ),
    )


def create_vector_store(config: AskdeskConfig) -> ChromaVectorStore:
    return ChromaVectorStore(
        path=config.vector_store.path,
        collection=config.vector_store.collection,
    )


def create_tool_bridge(config: AskdeskConfig) -> ToolBridge:
    database_env = {"DATABASE_URL": config.database.resolved_url}
    return ToolBridge(
        server_path=config.tool_bridge.server_path,
        command=config.tool_bridge.command,
        env=database_env,
        timeout=config.tool_bridge.timeout,
    )


def create_orchestrator(
    config: Optional[AskdeskConfig] = None,
    history: Optional[HistoryStore] = None,
) -> AnswerOrchestrator:
    """Build a fully wired orchestrator. Pass ``history`` to share one store."""
    config = config or load_config()

    llm = create_llm_client(config.llm)
    if not llm.is_available:
        logger.warning("LLM provider '%s' is not available; answers will fail", config.llm.provider)

    searcher = Searcher(
        create_embedding_service(config),
        create_vector_store(config),
        default_limit=config.vector_store.top_k,
    )
    generator = GenerationClient(
        llm,
        max_tokens=config.llm.max_tokens,
        timeout=config.llm.timeout,
    )
    return AnswerOrchestrator(
        history=history or HistoryStore(max_turns=config.history.max_turns),
        searcher=searcher,
        generator=generator,
        tool_bridge=create_tool_bridge(config),
        persona=config.assistant.persona,
        default_language=config.assistant.default_language,
        database_mode=config.assistant.database_mode,
    )
