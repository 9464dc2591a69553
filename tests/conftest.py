"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from datetime import date
from typing import Any

import pytest

from src.config.settings import Settings
from src.domain.models import CandidateEvent, ScoredCandidate, VectorMatch

REFERENCE_DATE = date(2025, 1, 6)
"""Monday; every relative date in the tests resolves against it."""


def create_test_candidate(
    event_id: str = "evt_1",
    title: str = "Free Pizza Night",
    score: float = 0.6,
    event_date: date | None = date(2025, 1, 7),
    start_time: str | None = "19:00",
    **kwargs: Any,
) -> CandidateEvent:
    """Helper to create a retrieved candidate with sensible defaults."""

    defaults: dict[str, Any] = {
        "id": event_id,
        "title": title,
        "organization_name": "Student Union Board",
        "tags": ("pizza", "social"),
        "categories": ("Food",),
        "event_date": event_date,
        "start_time": start_time,
        "location": "Union",
        "cost": "Free",
        "record_type": "event",
        "tenant": "umd",
        "score": score,
    }
    defaults.update(kwargs)
    return CandidateEvent(**defaults)


def create_scored(
    event_id: str = "evt_1",
    enhanced_score: float = 0.6,
    **kwargs: Any,
) -> ScoredCandidate:
    """Helper to wrap a test candidate in a ScoredCandidate."""

    return ScoredCandidate(
        candidate=create_test_candidate(event_id=event_id, score=enhanced_score, **kwargs),
        enhanced_score=enhanced_score,
    )


def create_vector_match(
    match_id: str = "evt_1",
    score: float = 0.6,
    **metadata: Any,
) -> VectorMatch:
    """Helper to create an index match with record metadata."""

    defaults: dict[str, Any] = {
        "title": "Free Pizza Night",
        "organization_name": "Student Union Board",
        "tags": ["pizza", "social"],
        "categories": ["Food"],
        "date_normalized": "2025-01-07",
        "time_normalized_start": "19:00",
        "location": "Union",
        "cost": "Free",
        "record_type": "event",
        "tenant_id": "umd",
    }
    defaults.update(metadata)
    return VectorMatch(id=match_id, score=score, metadata=defaults)


class FakeEmbeddingClient:
    """Records embedded texts and returns a fixed vector."""

    def __init__(self, vector: list[float] | None = None) -> None:
        self.vector = vector or [0.1, 0.2, 0.3]
        self.texts: list[str] = []

    def embed(self, text: str) -> list[float]:
        self.texts.append(text)
        return self.vector


class FakeVectorIndex:
    """Returns canned matches and records every query."""

    def __init__(self, matches: list[VectorMatch] | None = None) -> None:
        self.matches = matches or []
        self.calls: list[dict[str, Any]] = []

    def query(
        self,
        vector: list[float],
        top_k: int,
        metadata_filter: dict[str, Any],
        include_metadata: bool = True,
    ) -> list[VectorMatch]:
        self.calls.append(
            {
                "vector": vector,
                "top_k": top_k,
                "metadata_filter": metadata_filter,
                "include_metadata": include_metadata,
            }
        )
        return list(self.matches)


@pytest.fixture
def reference_date() -> date:
    """Reference date for testing: Monday, Jan 6, 2025."""
    return REFERENCE_DATE


@pytest.fixture
def fake_embedding_client() -> FakeEmbeddingClient:
    return FakeEmbeddingClient()


@pytest.fixture
def fake_vector_index() -> FakeVectorIndex:
    return FakeVectorIndex()


@pytest.fixture
def settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Provide the secrets Settings requires."""

    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("PINECONE_API_KEY", "pc-test")


@pytest.fixture
def settings(settings_env: None) -> Settings:
    """Settings built from config/main.yaml plus test secrets."""

    return Settings()  # type: ignore[call-arg]
