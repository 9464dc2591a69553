"""Tests for pipeline composition from settings."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import pytest

from src.adapters.embedding_client import OpenAIEmbeddingClient
from src.adapters.llm_client import LLMClient
from src.adapters.pinecone_index import PineconeVectorIndex
from src.config.settings import Settings
from src.use_cases.handle_inbound_message import HandleInboundMessageUseCase
from src.use_cases.pipeline_factories import (
    create_inbound_handler,
    create_search_clients,
    create_search_executor,
)


@pytest.fixture
def patched_sdks(monkeypatch: pytest.MonkeyPatch) -> dict[str, list[Any]]:
    calls: dict[str, list[Any]] = {"openai": [], "pinecone": []}

    def fake_openai(**kwargs: Any) -> SimpleNamespace:
        calls["openai"].append(kwargs)
        return SimpleNamespace()

    def fake_pinecone(api_key: str) -> SimpleNamespace:
        calls["pinecone"].append(api_key)
        return SimpleNamespace(Index=lambda name: SimpleNamespace(name=name))

    monkeypatch.setattr("src.adapters.llm_client.OpenAI", fake_openai)
    monkeypatch.setattr("src.adapters.embedding_client.OpenAI", fake_openai)
    monkeypatch.setattr("src.adapters.pinecone_index.Pinecone", fake_pinecone)
    return calls


def test_create_search_clients(settings: Settings, patched_sdks: dict[str, list[Any]]) -> None:
    clients = create_search_clients(settings)

    assert isinstance(clients.embedding_client, OpenAIEmbeddingClient)
    assert isinstance(clients.vector_index, PineconeVectorIndex)
    assert isinstance(clients.date_fallback, LLMClient)
    assert clients.intent_classifier is clients.date_fallback
    assert clients.vector_index.index_name == "campus-events"
    assert patched_sdks["pinecone"] == ["pc-test"]
    assert all(call["api_key"] == "sk-test" for call in patched_sdks["openai"])


def test_create_inbound_handler(settings: Settings, patched_sdks: dict[str, list[Any]]) -> None:
    executor = create_search_executor()
    try:
        handler = create_inbound_handler(
            settings=settings,
            clients=create_search_clients(settings),
            executor=executor,
        )
    finally:
        executor.shutdown(wait=False)

    assert isinstance(handler, HandleInboundMessageUseCase)
