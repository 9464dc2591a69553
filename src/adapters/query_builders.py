"""Query builders for constructing vector index metadata filters.

Instead of assembling filter dicts inline, use these builders to create
index filters in a type-safe, testable way. Only equality predicates are
emitted; range logic lives in the ranker's hard filters.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from src.domain.models import RecordType
from src.services.text_normalizer import normalize_tenant


@dataclass
class VectorQueryCriteria:
    """Criteria for a nearest-neighbor query against the event index.

    Example:
        >>> criteria = VectorQueryCriteria(
        ...     tenant="UMD",
        ...     record_types=[RecordType.EVENT],
        ...     event_date=date(2025, 1, 7),
        ... )
        >>> criteria.to_filter()
        {'record_type': {'$eq': 'event'}, 'tenant_id': {'$eq': 'umd'}, 'date_normalized': {'$eq': '2025-01-07'}}
    """

    tenant: str
    """Tenant whose records are searched (normalized before filtering)"""

    record_types: list[RecordType] = field(
        default_factory=lambda: [RecordType.EVENT, RecordType.ORGANIZATION]
    )
    """Record types to include (OR logic)"""

    event_date: date | None = None
    """Exact event date, when the query names a single day"""

    top_k: int = 20
    """Number of nearest neighbors to over-fetch for ranking"""

    def __post_init__(self) -> None:
        if not self.record_types:
            raise ValueError("record_types must not be empty")
        if self.top_k < 1:
            raise ValueError("top_k must be positive")

    def to_filter(self) -> dict[str, Any]:
        """Build the metadata filter expression.

        Returns:
            Filter dict in the index's query language
        """
        metadata_filter: dict[str, Any] = {}

        if len(self.record_types) == 1:
            metadata_filter["record_type"] = {"$eq": self.record_types[0].value}
        else:
            metadata_filter["record_type"] = {
                "$in": [record_type.value for record_type in self.record_types]
            }

        metadata_filter["tenant_id"] = {"$eq": normalize_tenant(self.tenant)}

        if self.event_date is not None:
            metadata_filter["date_normalized"] = {"$eq": self.event_date.isoformat()}

        return metadata_filter
