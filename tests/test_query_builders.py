"""Tests for vector index filter builders."""

from datetime import date

import pytest

from src.adapters.query_builders import VectorQueryCriteria
from src.domain.models import RecordType


def test_default_filter_covers_events_and_organizations() -> None:
    criteria = VectorQueryCriteria(tenant="UNC-Chapel Hill")

    assert criteria.to_filter() == {
        "record_type": {"$in": ["event", "organization"]},
        "tenant_id": {"$eq": "uncchapelhill"},
    }


def test_single_record_type_and_date() -> None:
    criteria = VectorQueryCriteria(
        tenant="UMD",
        record_types=[RecordType.EVENT],
        event_date=date(2025, 1, 7),
    )

    assert criteria.to_filter() == {
        "record_type": {"$eq": "event"},
        "tenant_id": {"$eq": "umd"},
        "date_normalized": {"$eq": "2025-01-07"},
    }


def test_empty_record_types_rejected() -> None:
    with pytest.raises(ValueError):
        VectorQueryCriteria(tenant="umd", record_types=[])


def test_non_positive_top_k_rejected() -> None:
    with pytest.raises(ValueError):
        VectorQueryCriteria(tenant="umd", top_k=0)
