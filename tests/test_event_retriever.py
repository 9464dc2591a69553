"""Tests for the retrieval client."""

from datetime import date

import pytest

from src.domain.exceptions import EmbeddingError, MalformedUpstreamResponseError
from src.domain.models import RecordType, VectorMatch
from src.services.event_retriever import (
    EventRetriever,
    candidate_from_match,
    normalize_start_time,
)
from tests.conftest import FakeEmbeddingClient, FakeVectorIndex, create_vector_match


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("19:00", "19:00"),
        ("9:05", "09:05"),
        ("18:30:00", "18:30"),
        ("TBD", None),
        ("25:00", None),
        ("", None),
        (None, None),
        (1900, None),
    ],
)
def test_normalize_start_time(raw: object, expected: str | None) -> None:
    assert normalize_start_time(raw) == expected


def test_candidate_from_match_maps_metadata() -> None:
    match = create_vector_match(
        "evt_9",
        score=0.71,
        tags="pizza, social ,",
        time_normalized_start="9:00",
        cost=0,
    )

    candidate = candidate_from_match(match)

    assert candidate.id == "evt_9"
    assert candidate.score == 0.71
    assert candidate.tags == ("pizza", "social")
    assert candidate.event_date == date(2025, 1, 7)
    assert candidate.start_time == "09:00"
    assert candidate.cost == "0"
    assert candidate.tenant == "umd"


def test_candidate_from_match_tolerates_missing_fields() -> None:
    match = VectorMatch(id="org_1", score=0.5, metadata={"record_type": "organization"})

    candidate = candidate_from_match(match)

    assert candidate.title == ""
    assert candidate.event_date is None
    assert candidate.start_time is None
    assert candidate.cost == ""
    assert candidate.record_type == "organization"


def test_candidate_from_match_rejects_invalid_date() -> None:
    match = create_vector_match(date_normalized="next tuesday")

    with pytest.raises(MalformedUpstreamResponseError):
        candidate_from_match(match)


def test_retrieve_embeds_and_filters() -> None:
    embedding_client = FakeEmbeddingClient(vector=[0.5, 0.5])
    index = FakeVectorIndex([create_vector_match("a", 0.8), create_vector_match("b", 0.6)])
    retriever = EventRetriever(
        embedding_client, index, top_k=15, record_types=[RecordType.EVENT]
    )

    candidates = retriever.retrieve("free pizza", "UMD", date_filter=date(2025, 1, 7))

    assert [candidate.id for candidate in candidates] == ["a", "b"]
    assert embedding_client.texts == ["free pizza"]
    call = index.calls[0]
    assert call["vector"] == [0.5, 0.5]
    assert call["top_k"] == 15
    assert call["include_metadata"] is True
    assert call["metadata_filter"] == {
        "record_type": {"$eq": "event"},
        "tenant_id": {"$eq": "umd"},
        "date_normalized": {"$eq": "2025-01-07"},
    }


def test_retrieve_without_date_filter() -> None:
    index = FakeVectorIndex()
    retriever = EventRetriever(FakeEmbeddingClient(), index)

    assert retriever.retrieve("concerts", "umd") == []
    assert "date_normalized" not in index.calls[0]["metadata_filter"]


def test_retrieve_propagates_embedding_errors() -> None:
    class FailingEmbeddingClient:
        def embed(self, text: str) -> list[float]:
            raise EmbeddingError("down")

    index = FakeVectorIndex()
    retriever = EventRetriever(FailingEmbeddingClient(), index)

    with pytest.raises(EmbeddingError):
        retriever.retrieve("concerts", "umd")
    assert index.calls == []
