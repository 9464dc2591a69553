"""Protocol definitions for dependency inversion.

These abstract interfaces define contracts that adapters must implement.
Concrete clients are long-lived, shared across requests and injected through
constructors; nothing in the pipeline looks them up globally.
"""

from datetime import date
from typing import Any, Protocol

from src.domain.models import Intent, VectorMatch


class EmbeddingClientProtocol(Protocol):
    """Protocol for the text embedding service."""

    def embed(self, text: str) -> list[float]:
        """Convert text to a dense vector.

        Args:
            text: Text to embed

        Returns:
            Embedding vector

        Raises:
            EmbeddingError: On API errors or empty/invalid responses
        """
        ...


class VectorIndexProtocol(Protocol):
    """Protocol for the nearest-neighbor vector index."""

    def query(
        self,
        vector: list[float],
        top_k: int,
        metadata_filter: dict[str, Any],
        include_metadata: bool = True,
    ) -> list[VectorMatch]:
        """Query nearest neighbors restricted by an equality metadata filter.

        Args:
            vector: Query vector
            top_k: Number of matches to return
            metadata_filter: Index filter expression (equality predicates only)
            include_metadata: Whether to return match metadata

        Returns:
            Matches ordered by descending similarity

        Raises:
            RetrievalError: On API communication errors
            MalformedUpstreamResponseError: On responses that cannot be parsed
        """
        ...


class DateFallbackProtocol(Protocol):
    """Protocol for the AI date extraction fallback."""

    def extract_date(self, text: str, reference_date: date) -> date | None:
        """Extract an explicit calendar date the rule cascade could not parse.

        Args:
            text: Raw query text
            reference_date: Today's date on campus

        Returns:
            Parsed date, or None when the text holds no explicit date

        Raises:
            ExtractionTimeoutError: When the call exceeds its time budget
            LLMAPIError: On API communication errors
        """
        ...


class IntentClassifierProtocol(Protocol):
    """Protocol for inbound message intent classification."""

    def classify_intent(self, message: str) -> Intent:
        """Classify a message as search, info, signup or random.

        Raises:
            ExtractionTimeoutError: When the call exceeds its time budget
            LLMAPIError: On API communication errors
        """
        ...
