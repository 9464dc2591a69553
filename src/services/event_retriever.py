"""Retrieval client: embedding text → candidate events from the vector index.

Errors from the embedding service or the index are never swallowed here;
they propagate as typed exceptions so the use case can choose the reply.
"""

import re
from collections.abc import Sequence
from datetime import date
from typing import Any, Final

from pydantic import ValidationError as PydanticValidationError

from src.adapters.query_builders import VectorQueryCriteria
from src.config.logging_config import get_logger
from src.domain.exceptions import MalformedUpstreamResponseError
from src.domain.models import CandidateEvent, RecordType, VectorMatch
from src.domain.protocols import EmbeddingClientProtocol, VectorIndexProtocol

logger = get_logger(__name__)

DEFAULT_TOP_K: Final[int] = 20
"""Over-fetch so ranking and diversity have room to filter."""

LOOSE_TIME_PATTERN: Final[re.Pattern[str]] = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::\d{2})?\s*$")
"""Index start times are sometimes unpadded ('9:00') or carry seconds."""


def normalize_start_time(raw: Any) -> str | None:
    """Pad an index start time to HH:MM; unusable values become None.

    Example:
        >>> normalize_start_time("9:05")
        '09:05'
        >>> normalize_start_time("TBD")
    """
    if not isinstance(raw, str):
        return None
    match = LOOSE_TIME_PATTERN.match(raw)
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return f"{hour:02d}:{minute:02d}"


def candidate_from_match(match: VectorMatch) -> CandidateEvent:
    """Build a CandidateEvent from index metadata.

    Raises:
        MalformedUpstreamResponseError: If metadata violates the record contract
    """
    metadata = match.metadata
    cost = metadata.get("cost")

    try:
        return CandidateEvent(
            id=match.id,
            title=str(metadata.get("title") or ""),
            organization_name=str(metadata.get("organization_name") or ""),
            tags=metadata.get("tags"),
            categories=metadata.get("categories"),
            event_date=metadata.get("date_normalized") or None,
            start_time=normalize_start_time(metadata.get("time_normalized_start")),
            location=str(metadata.get("location") or ""),
            cost="" if cost is None else str(cost),
            record_type=str(metadata.get("record_type") or RecordType.EVENT.value),
            tenant=str(metadata.get("tenant_id") or ""),
            score=match.score,
        )
    except PydanticValidationError as exc:
        raise MalformedUpstreamResponseError(
            f"Record {match.id!r} violates the metadata contract: {exc.error_count()} errors"
        ) from exc


class EventRetriever:
    """Embeds query text and fetches nearest candidates for a tenant."""

    def __init__(
        self,
        embedding_client: EmbeddingClientProtocol,
        vector_index: VectorIndexProtocol,
        top_k: int = DEFAULT_TOP_K,
        record_types: Sequence[RecordType] = (RecordType.EVENT, RecordType.ORGANIZATION),
    ) -> None:
        self._embedding_client = embedding_client
        self._vector_index = vector_index
        self._top_k = top_k
        self._record_types = list(record_types)

    def retrieve(
        self, embedding_text: str, tenant: str, date_filter: date | None = None
    ) -> list[CandidateEvent]:
        """Retrieve candidates ordered by descending similarity.

        Args:
            embedding_text: Expanded query text
            tenant: Tenant identifier (normalized for the filter)
            date_filter: Exact event date, when the query names one day

        Returns:
            Candidate events

        Raises:
            EmbeddingError: If the embedding call fails
            RetrievalError: If the index query fails or returns malformed data
        """
        vector = self._embedding_client.embed(embedding_text)

        criteria = VectorQueryCriteria(
            tenant=tenant,
            record_types=self._record_types,
            event_date=date_filter,
            top_k=self._top_k,
        )
        metadata_filter = criteria.to_filter()
        matches = self._vector_index.query(
            vector=vector,
            top_k=criteria.top_k,
            metadata_filter=metadata_filter,
            include_metadata=True,
        )

        candidates = [candidate_from_match(match) for match in matches]
        logger.info(
            "candidates_retrieved",
            count=len(candidates),
            top_k=criteria.top_k,
            filter=metadata_filter,
            top_score=round(candidates[0].score, 4) if candidates else None,
        )
        return candidates
