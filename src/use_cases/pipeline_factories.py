"""Factories to compose the search pipeline from settings."""

from __future__ import annotations

from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass

from src.adapters.embedding_client import OpenAIEmbeddingClient
from src.adapters.llm_client import LLMClient
from src.adapters.pinecone_index import PineconeVectorIndex
from src.config.settings import Settings
from src.domain.protocols import (
    DateFallbackProtocol,
    EmbeddingClientProtocol,
    IntentClassifierProtocol,
    VectorIndexProtocol,
)
from src.services.event_retriever import EventRetriever
from src.services.query_expander import QueryExpander
from src.services.query_interpreter import QueryInterpreter
from src.services.relevance_ranker import RelevanceRanker
from src.services.response_formatter import ResponseFormatter
from src.services.result_selector import ResultSelector
from src.use_cases.handle_inbound_message import HandleInboundMessageUseCase
from src.use_cases.search_events import SearchEventsUseCase

SEARCH_WORKER_THREADS = 8


@dataclass(frozen=True, slots=True)
class SearchClients:
    """Long-lived external clients shared by every request."""

    embedding_client: EmbeddingClientProtocol
    vector_index: VectorIndexProtocol
    date_fallback: DateFallbackProtocol | None
    intent_classifier: IntentClassifierProtocol | None


def create_search_clients(settings: Settings) -> SearchClients:
    """Build the OpenAI and Pinecone clients from settings."""

    openai_key = settings.openai_api_key.get_secret_value()
    llm_client = LLMClient(
        api_key=openai_key,
        model=settings.llm_model,
        timeout=settings.llm_timeout_seconds,
        date_prompt_file=settings.llm_date_prompt_file,
        intent_prompt_file=settings.llm_intent_prompt_file,
    )
    return SearchClients(
        embedding_client=OpenAIEmbeddingClient(
            api_key=openai_key, model=settings.llm_embedding_model
        ),
        vector_index=PineconeVectorIndex(
            api_key=settings.pinecone_api_key.get_secret_value(),
            index_name=settings.search_index_name,
            namespace=settings.search_namespace,
        ),
        date_fallback=llm_client,
        intent_classifier=llm_client,
    )


def create_search_executor() -> ThreadPoolExecutor:
    return ThreadPoolExecutor(
        max_workers=SEARCH_WORKER_THREADS, thread_name_prefix="search"
    )


def create_search_use_case(
    *,
    settings: Settings,
    clients: SearchClients,
    executor: Executor,
) -> SearchEventsUseCase:
    """Wire the search pipeline around injected clients."""

    return SearchEventsUseCase(
        interpreter=QueryInterpreter(date_fallback=clients.date_fallback),
        expander=QueryExpander(),
        retriever=EventRetriever(
            embedding_client=clients.embedding_client,
            vector_index=clients.vector_index,
            top_k=settings.search_top_k,
            record_types=settings.search_record_types,
        ),
        ranker=RelevanceRanker(
            treat_blank_cost_as_free=settings.search_treat_blank_cost_as_free,
            cheap_cost_max_usd=settings.search_cheap_cost_max_usd,
            record_types=settings.search_record_types,
        ),
        selector=ResultSelector(thresholds=settings.search_quality_thresholds),
        formatter=ResponseFormatter(
            char_budget=settings.search_char_budget,
            title_max_chars=settings.search_title_max_chars,
            part_max_chars=settings.search_part_max_chars,
        ),
        executor=executor,
        public_app_url=settings.public_app_url,
        timeout_seconds=settings.search_timeout_seconds,
        tz_name=settings.tz_default,
    )


def create_inbound_handler(
    *,
    settings: Settings,
    clients: SearchClients,
    executor: Executor,
) -> HandleInboundMessageUseCase:
    """Wire inbound message handling on top of the search pipeline."""

    return HandleInboundMessageUseCase(
        search=create_search_use_case(
            settings=settings, clients=clients, executor=executor
        ),
        intent_classifier=clients.intent_classifier,
        executor=executor,
        public_app_url=settings.public_app_url,
        intent_timeout_seconds=settings.intent_timeout_seconds,
        part_max_chars=settings.search_part_max_chars,
    )
