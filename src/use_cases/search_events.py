"""Search events use case.

Composes interpret → expand → retrieve → rank → select → format for one
inbound query. This is the only layer that turns failures into user-facing
text: callers always receive a SearchOutcome, never an exception.
"""

from collections.abc import Iterator
from concurrent.futures import Executor
from contextlib import contextmanager
from datetime import date, datetime, time
from time import perf_counter
from typing import Final

from src.config.logging_config import get_logger
from src.domain.exceptions import CampusSearchError, SearchTimeoutError
from src.domain.models import (
    CostIntent,
    ExtractedFacets,
    QueryMode,
    SearchOutcome,
    SearchQuery,
    SearchStatus,
)
from src.observability.metrics import (
    SEARCH_REQUESTS_TOTAL,
    SEARCH_STAGE_DURATION_SECONDS,
)
from src.observability.tracing import request_scope
from src.services.date_resolver import get_reference_datetime
from src.services.deadline import Deadline, run_with_deadline
from src.services.event_retriever import EventRetriever
from src.services.query_expander import QueryExpander
from src.services.query_interpreter import QueryInterpreter
from src.services.relevance_ranker import RelevanceRanker
from src.services.response_formatter import ResponseFormatter
from src.services.result_selector import ResultSelector

logger = get_logger(__name__)

ERROR_MESSAGE: Final[str] = (
    "Sorry, I'm having trouble searching right now. Please try again in a moment!"
)
TIMEOUT_MESSAGE: Final[str] = "Sorry, that took too long. Please try again!"
NO_MATCH_PREFIX: Final[str] = "I couldn't find any upcoming events that match."
OVER_BUDGET_MESSAGE: Final[str] = (
    "I found events but couldn't fit them in a text. Try being more specific!"
)


def no_match_suggestion(facets: ExtractedFacets) -> str:
    """Pick a follow-up hint for an empty result, most specific facet first.

    Example:
        >>> no_match_suggestion(ExtractedFacets(cost_intent=CostIntent.FREE))
        "Try searching without 'free' or check back later for free events!"
    """
    is_free = facets.cost_intent is CostIntent.FREE
    if is_free and facets.activity_type:
        return "Try searching without 'free' or the specific activity, or check back later!"
    if is_free:
        return "Try searching without 'free' or check back later for free events!"
    if facets.activity_type:
        return "Try a different activity or check what's happening this week!"
    if facets.time_constraint is not None:
        return "Try a different time or check what's happening this week!"
    return "Try asking in a different way or for another day!"


class SearchEventsUseCase:
    """Runs the search pipeline for one query under an outer deadline."""

    def __init__(
        self,
        interpreter: QueryInterpreter,
        expander: QueryExpander,
        retriever: EventRetriever,
        ranker: RelevanceRanker,
        selector: ResultSelector,
        formatter: ResponseFormatter,
        executor: Executor,
        *,
        public_app_url: str,
        timeout_seconds: float = 20.0,
        tz_name: str = "America/New_York",
    ) -> None:
        """Initialize use case.

        Args:
            interpreter: Facet extraction
            expander: Embedding text construction
            retriever: Embedding + vector index client
            ranker: Hard filters and boost scoring
            selector: Threshold, count and diversity policy
            formatter: SMS rendering
            executor: Shared pool the pipeline runs on (owned by the caller)
            public_app_url: Base URL for poster links
            timeout_seconds: Outer deadline for one request
            tz_name: Campus timezone used to derive today's date
        """
        self._interpreter = interpreter
        self._expander = expander
        self._retriever = retriever
        self._ranker = ranker
        self._selector = selector
        self._formatter = formatter
        self._executor = executor
        self._public_app_url = public_app_url
        self._timeout_seconds = timeout_seconds
        self._tz_name = tz_name

    def execute(
        self,
        query: SearchQuery,
        reference_datetime: datetime | None = None,
        *,
        correlation_id: str | None = None,
    ) -> SearchOutcome:
        """Search events for a query.

        Args:
            query: Query text and tenant
            reference_datetime: Campus wall-clock time (default: now in tz_name)
            correlation_id: Existing correlation id to reuse in logs

        Returns:
            Outcome with status, reply text and transport parts

        Example:
            >>> outcome = use_case.execute(SearchQuery(text="free pizza tomorrow", tenant="UMD"))
            >>> outcome.status
            <SearchStatus.OK: 'ok'>
        """
        with request_scope(query.tenant, correlation_id):
            reference = reference_datetime or get_reference_datetime(self._tz_name)
            deadline = Deadline(self._timeout_seconds)
            started = perf_counter()

            logger.info(
                "search_started",
                query=query.text,
                reference_date=reference.date().isoformat(),
            )

            try:
                outcome = run_with_deadline(
                    self._executor,
                    deadline,
                    lambda: self._run(query, reference.date(), reference.time(), deadline),
                )
            except SearchTimeoutError as exc:
                logger.warning(
                    "search_timed_out", stage=exc.stage, timeout_seconds=exc.timeout_seconds
                )
                outcome = SearchOutcome(
                    status=SearchStatus.TIMED_OUT,
                    message=TIMEOUT_MESSAGE,
                    parts=[TIMEOUT_MESSAGE],
                )
            except CampusSearchError as exc:
                logger.error(
                    "search_failed",
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                outcome = SearchOutcome(
                    status=SearchStatus.FAILED,
                    message=ERROR_MESSAGE,
                    parts=[ERROR_MESSAGE],
                )
            except Exception as exc:
                logger.exception(
                    "search_unexpected_error",
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                outcome = SearchOutcome(
                    status=SearchStatus.FAILED,
                    message=ERROR_MESSAGE,
                    parts=[ERROR_MESSAGE],
                )

            SEARCH_REQUESTS_TOTAL.labels(outcome=outcome.status.value).inc()
            logger.info(
                "search_completed",
                status=outcome.status.value,
                results=len(outcome.results),
                chars=len(outcome.message),
                duration_ms=int((perf_counter() - started) * 1000),
            )
            return outcome

    @contextmanager
    def _stage(self, name: str, deadline: Deadline) -> Iterator[None]:
        deadline.check(name)
        stage_start = perf_counter()
        try:
            yield
        finally:
            SEARCH_STAGE_DURATION_SECONDS.labels(stage=name).observe(
                perf_counter() - stage_start
            )

    def _run(
        self,
        query: SearchQuery,
        reference_date: date,
        now: time,
        deadline: Deadline,
    ) -> SearchOutcome:
        with self._stage("interpret", deadline):
            facets = self._interpreter.interpret(query.text, reference_date, now)

        with self._stage("expand", deadline):
            embedding_text = self._expander.expand(
                query.text, facets, query.tenant, reference_date
            )

        with self._stage("retrieve", deadline):
            candidates = self._retriever.retrieve(
                embedding_text, query.tenant, date_filter=facets.target_date
            )

        with self._stage("rank", deadline):
            ranked = self._ranker.rank(
                candidates, facets, reference_date, tenant=query.tenant
            )

        with self._stage("select", deadline):
            selected = self._selector.select(ranked, facets)

        if not selected:
            message = f"{NO_MATCH_PREFIX} {no_match_suggestion(facets)}"
            logger.info("search_no_matches", mode=facets.mode.value, retrieved=len(candidates))
            return SearchOutcome(
                status=SearchStatus.NO_MATCHES,
                message=message,
                parts=[message],
                facets=facets,
            )

        pure_date = facets.mode is QueryMode.PURE_DATE
        with self._stage("format", deadline):
            formatted = self._formatter.format(
                selected,
                self._public_app_url,
                total_found=len({item.id for item in ranked}) if pure_date else None,
                budgeted=pure_date,
            )

        deadline.check("complete")
        if not formatted.events_included:
            logger.info(
                "search_results_over_budget",
                selected=len(selected),
                chars_budget=self._formatter.char_budget,
            )
            return SearchOutcome(
                status=SearchStatus.NO_MATCHES,
                message=OVER_BUDGET_MESSAGE,
                parts=[OVER_BUDGET_MESSAGE],
                facets=facets,
            )

        return SearchOutcome(
            status=SearchStatus.OK,
            message=formatted.text,
            parts=formatted.parts,
            facets=facets,
            results=selected[: formatted.events_included],
        )
