"""
Embedding Service

Turns question and document text into fixed-length vectors.
Wraps a raw embedding backend (Gemini by default) with input validation,
truncation and rate-limit retry.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol

from .errors import AskdeskError, BackendError, InvalidInput
from .retry import RetryPolicy, linear_backoff

logger = logging.getLogger("askdesk.common.embedding_service")


class EmbeddingBackend(Protocol):
    """Anything that can turn one string into one vector."""

    async def embed(self, text: str) -> List[float]: ...


class GeminiEmbeddingBackend:
    """Google Gemini embeddings through the ``google-genai`` SDK."""

    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-004",
        dimension: int = 768,
    ) -> None:
        self.model = model
        self.dimension = dimension
        self._client = None

        if not api_key:
            logger.info("Google API key not provided, embedding backend unavailable")
            return
        try:
            from google import genai

            self._client = genai.Client(api_key=api_key)
        except Exception as e:
            logger.warning("Failed to initialize Gemini embedding client: %s", e)

    @property
    def is_available(self) -> bool:
        return self._client is not None

    async def embed(self, text: str) -> List[float]:
        if not self.is_available:
            raise BackendError("Embedding backend is not available (Google API key not configured)")

        from google.genai import types

        result = await self._client.aio.models.embed_content(
            model=self.model,
            contents=text,
            config=types.EmbedContentConfig(output_dimensionality=self.dimension),
        )
        if not result.embeddings:
            raise BackendError("No embedding returned from API")
        return list(result.embeddings[0].values)


class EmbeddingService:
    """
    Validating, retrying front for an embedding backend.

    - Empty input is rejected with ``InvalidInput``.
    - Input longer than ``max_chars`` is silently truncated (with a warning log).
    - Rate-limit errors are retried by ``retry_policy``; other backend errors
      surface as ``BackendError`` after a single call.
    """

    def __init__(
        self,
        backend: EmbeddingBackend,
        dimension: int = 768,
        max_chars: int = 5000,
        retries: int = 3,
        retry_policy: Optional[RetryPolicy] = None,
    ) -> None:
        self._backend = backend
        self.dimension = dimension
        self.max_chars = max_chars
        self._retry = retry_policy or RetryPolicy(
            max_attempts=retries,
            backoff=linear_backoff(1.0),
        )

    async def embed(self, text: str) -> List[float]:
        """
        Generate an embedding for a single text.

        Args:
            text: String to embed

        Returns:
            Embedding vector of length ``self.dimension``
        """
        if not isinstance(text, str) or not text.strip():
            raise InvalidInput("Invalid input: text must be a non-empty string")

        if len(text) > self.max_chars:
            logger.warning(
                "Truncating input text from %d to %d characters",
                len(text), self.max_chars,
            )
            text = text[: self.max_chars]

        logger.debug("Embedding input: %s...", text[:50])

        async def _attempt() -> List[float]:
            return await self._backend.embed(text)

        try:
            vector = await self._retry.run(_attempt)
        except AskdeskError:
            raise
        except Exception as e:
            logger.error("Error generating embedding: %s", e)
            raise BackendError(f"Embedding backend failed: {e}") from e

        if len(vector) != self.dimension:
            raise BackendError(
                f"Embedding dimension mismatch: expected {self.dimension}, got {len(vector)}"
            )
        return vector
