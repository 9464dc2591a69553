"""Tests for inbound message routing."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock

import pytest
import structlog

from src.domain.exceptions import LLMAPIError
from src.domain.models import Intent, SearchOutcome, SearchQuery, SearchStatus
from src.observability.tracing import CORRELATION_ID_KEY, request_scope
from src.use_cases import handle_inbound_message
from src.use_cases.handle_inbound_message import (
    EMPTY_MESSAGE_REPLY,
    INFO_REPLY,
    RANDOM_REPLY,
    HandleInboundMessageUseCase,
)
from src.use_cases.search_events import SearchEventsUseCase


@pytest.fixture
def executor() -> Iterator[ThreadPoolExecutor]:
    pool = ThreadPoolExecutor(max_workers=2)
    yield pool
    pool.shutdown(wait=False, cancel_futures=True)


@pytest.fixture
def search() -> Mock:
    mock = Mock(spec=SearchEventsUseCase)
    mock.execute.return_value = SearchOutcome(
        status=SearchStatus.OK,
        message="1) Yoga: usethemove.com/poster/e1",
        parts=["1) Yoga: usethemove.com/poster/e1"],
    )
    return mock


def build_handler(
    search: Mock,
    executor: ThreadPoolExecutor,
    classifier: object | None,
    intent_timeout_seconds: float = 5.0,
) -> HandleInboundMessageUseCase:
    return HandleInboundMessageUseCase(
        search=search,
        intent_classifier=classifier,
        executor=executor,
        public_app_url="https://usethemove.com/",
        intent_timeout_seconds=intent_timeout_seconds,
    )


def classifier_returning(intent: Intent) -> Mock:
    classifier = Mock()
    classifier.classify_intent.return_value = intent
    return classifier


@pytest.mark.parametrize("keyword", ["STOP", "help", " Stop "])
def test_compliance_keywords_get_no_reply(
    search: Mock, executor: ThreadPoolExecutor, keyword: str
) -> None:
    classifier = classifier_returning(Intent.SEARCH)
    handler = build_handler(search, executor, classifier)

    assert handler.handle(keyword, "umd") == []
    classifier.classify_intent.assert_not_called()
    search.execute.assert_not_called()


def test_empty_message(search: Mock, executor: ThreadPoolExecutor) -> None:
    handler = build_handler(search, executor, classifier_returning(Intent.SEARCH))
    assert handler.handle("   ", "umd") == [EMPTY_MESSAGE_REPLY]


@pytest.mark.parametrize(
    ("intent", "expected"),
    [
        (Intent.INFO, INFO_REPLY),
        (Intent.SIGNUP, "You can sign up at https://usethemove.com/signup"),
        (Intent.RANDOM, RANDOM_REPLY),
    ],
)
def test_canned_replies(
    search: Mock, executor: ThreadPoolExecutor, intent: Intent, expected: str
) -> None:
    handler = build_handler(search, executor, classifier_returning(intent))

    assert handler.handle("hey what is this", "umd") == [expected]
    search.execute.assert_not_called()


def test_search_intent_runs_pipeline(search: Mock, executor: ThreadPoolExecutor) -> None:
    handler = build_handler(search, executor, classifier_returning(Intent.SEARCH))

    replies = handler.handle("  yoga tomorrow ", "UMD")

    assert replies == ["1) Yoga: usethemove.com/poster/e1"]
    args, kwargs = search.execute.call_args
    assert args[0] == SearchQuery(text="yoga tomorrow", tenant="UMD")
    assert kwargs["correlation_id"]


def test_outcome_without_parts_is_split(search: Mock, executor: ThreadPoolExecutor) -> None:
    search.execute.return_value = SearchOutcome(
        status=SearchStatus.NO_MATCHES, message="Nothing found."
    )
    handler = build_handler(search, executor, None)

    assert handler.handle("robotics", "umd") == ["Nothing found."]


def test_missing_classifier_means_search(search: Mock, executor: ThreadPoolExecutor) -> None:
    handler = build_handler(search, executor, None)

    handler.handle("what is this", "umd")

    search.execute.assert_called_once()


def test_classifier_error_falls_back_to_search(
    search: Mock, executor: ThreadPoolExecutor
) -> None:
    classifier = Mock()
    classifier.classify_intent.side_effect = LLMAPIError("down")
    handler = build_handler(search, executor, classifier)

    assert handler.handle("poker tonight?", "umd") == ["1) Yoga: usethemove.com/poster/e1"]
    search.execute.assert_called_once()


def test_classifier_bug_falls_back_to_search(
    search: Mock, executor: ThreadPoolExecutor
) -> None:
    classifier = Mock()
    classifier.classify_intent.side_effect = KeyError("choices")
    handler = build_handler(search, executor, classifier)

    assert handler.handle("poker tonight?", "umd") == ["1) Yoga: usethemove.com/poster/e1"]
    search.execute.assert_called_once()


def test_classifier_timeout_falls_back_to_search(
    search: Mock, executor: ThreadPoolExecutor
) -> None:
    release = threading.Event()

    class SlowClassifier:
        def classify_intent(self, message: str) -> Intent:
            release.wait(2)
            return Intent.RANDOM

    handler = build_handler(search, executor, SlowClassifier(), intent_timeout_seconds=0.05)

    try:
        replies = handler.handle("poker tonight?", "umd")
    finally:
        release.set()

    assert replies == ["1) Yoga: usethemove.com/poster/e1"]
    search.execute.assert_called_once()


def test_long_canned_reply_respects_part_limit(executor: ThreadPoolExecutor) -> None:
    search = Mock(spec=SearchEventsUseCase)
    search.execute.return_value = SearchOutcome(
        status=SearchStatus.NO_MATCHES, message="x" * 700
    )
    handler = HandleInboundMessageUseCase(
        search=search,
        intent_classifier=None,
        executor=executor,
        public_app_url="https://usethemove.com",
        part_max_chars=600,
    )

    replies = handler.handle("robotics", "umd")

    assert [len(reply) for reply in replies] == [600, 100]


def test_correlation_id_survives_search_scope(
    search: Mock, executor: ThreadPoolExecutor, monkeypatch: pytest.MonkeyPatch
) -> None:
    outcome = search.execute.return_value

    def run_search(query: SearchQuery, reference: object, *, correlation_id: str) -> SearchOutcome:
        with request_scope(query.tenant, correlation_id):
            return outcome

    search.execute.side_effect = run_search
    events: dict[str, dict] = {}
    fake_logger = Mock()
    fake_logger.info.side_effect = lambda event, **kwargs: events.setdefault(
        event, dict(structlog.contextvars.get_contextvars())
    )
    monkeypatch.setattr(handle_inbound_message, "logger", fake_logger)
    handler = build_handler(search, executor, None)

    handler.handle("yoga tomorrow", "umd")

    correlation_id = search.execute.call_args.kwargs["correlation_id"]
    assert events["inbound_search_answered"][CORRELATION_ID_KEY] == correlation_id
    assert CORRELATION_ID_KEY not in structlog.contextvars.get_contextvars()
