"""Embedding client adapter.

Implements EmbeddingClientProtocol with the OpenAI embeddings API.
"""

import time

from openai import APIError, OpenAI

from src.config.logging_config import get_logger
from src.domain.exceptions import EmbeddingError

logger = get_logger(__name__)


class OpenAIEmbeddingClient:
    """OpenAI embeddings wrapper returning plain float vectors."""

    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-3-small",
        timeout: float = 10.0,
        max_retries: int = 1,
    ) -> None:
        """Initialize embedding client.

        Args:
            api_key: OpenAI API key
            model: Embedding model name
            timeout: Per-request timeout in seconds
            max_retries: Client-level retries on transient errors
        """
        self.client = OpenAI(api_key=api_key, timeout=timeout, max_retries=max_retries)
        self.model = model

    def embed(self, text: str) -> list[float]:
        """Embed a single text.

        Raises:
            EmbeddingError: On API errors or a response without a vector
        """
        if not text.strip():
            raise EmbeddingError("Cannot embed empty text")

        start_time = time.time()
        try:
            response = self.client.embeddings.create(model=self.model, input=text)
        except APIError as exc:
            logger.error("embedding_api_error", model=self.model, error=str(exc))
            raise EmbeddingError(f"OpenAI embeddings error: {exc}") from exc

        try:
            vector = list(response.data[0].embedding)
        except (AttributeError, IndexError, TypeError) as exc:
            raise EmbeddingError("Invalid embedding response from OpenAI") from exc

        if not vector:
            raise EmbeddingError("Empty embedding vector from OpenAI")

        logger.debug(
            "embedding_created",
            model=self.model,
            dimensions=len(vector),
            latency_ms=int((time.time() - start_time) * 1000),
        )
        return vector
