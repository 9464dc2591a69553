"""Vector index adapter backed by Pinecone.

Implements VectorIndexProtocol. Responses are normalized into VectorMatch
models whether the SDK hands back typed objects or plain dicts.
"""

from collections.abc import Mapping
from typing import Any

from pinecone import Pinecone
from pinecone.exceptions import PineconeException

from src.config.logging_config import get_logger
from src.domain.exceptions import MalformedUpstreamResponseError, RetrievalError
from src.domain.models import VectorMatch

logger = get_logger(__name__)


def _field(source: Any, name: str) -> Any:
    if isinstance(source, Mapping):
        return source.get(name)
    return getattr(source, name, None)


def parse_matches(response: Any) -> list[VectorMatch]:
    """Convert a raw query response into VectorMatch models.

    Raises:
        MalformedUpstreamResponseError: If the response has no usable matches list
    """
    raw_matches = _field(response, "matches")
    if raw_matches is None:
        raise MalformedUpstreamResponseError("Index response has no 'matches' field")

    matches: list[VectorMatch] = []
    for raw in raw_matches:
        match_id = _field(raw, "id")
        score = _field(raw, "score")
        metadata = _field(raw, "metadata") or {}
        if not match_id or score is None or not isinstance(metadata, Mapping):
            raise MalformedUpstreamResponseError(
                f"Index match is missing id/score/metadata: {match_id!r}"
            )
        matches.append(
            VectorMatch(id=str(match_id), score=float(score), metadata=dict(metadata))
        )
    return matches


class PineconeVectorIndex:
    """Pinecone index wrapper scoped to one namespace."""

    def __init__(self, api_key: str, index_name: str, namespace: str = "") -> None:
        """Initialize index handle.

        Args:
            api_key: Pinecone API key
            index_name: Name of the index holding event/organization records
            namespace: Namespace inside the index (empty string for default)
        """
        self._index = Pinecone(api_key=api_key).Index(index_name)
        self.index_name = index_name
        self.namespace = namespace

    def query(
        self,
        vector: list[float],
        top_k: int,
        metadata_filter: dict[str, Any],
        include_metadata: bool = True,
    ) -> list[VectorMatch]:
        """Query nearest neighbors.

        Raises:
            RetrievalError: On Pinecone API errors
            MalformedUpstreamResponseError: On unparseable responses
        """
        try:
            response = self._index.query(
                vector=vector,
                top_k=top_k,
                filter=metadata_filter,
                include_metadata=include_metadata,
                namespace=self.namespace,
            )
        except PineconeException as exc:
            logger.error(
                "vector_query_failed", index=self.index_name, error=str(exc)
            )
            raise RetrievalError(f"Pinecone query failed: {exc}") from exc
        except Exception as exc:
            # Transport errors surface from urllib3/grpc rather than the SDK hierarchy
            logger.error(
                "vector_query_unexpected_error",
                index=self.index_name,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise RetrievalError(f"Unexpected Pinecone error: {exc}") from exc

        matches = parse_matches(response)
        logger.debug(
            "vector_query_completed", index=self.index_name, matches=len(matches)
        )
        return matches
