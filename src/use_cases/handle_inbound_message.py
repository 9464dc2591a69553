"""Inbound SMS handling use case.

Routes a raw inbound message by intent: canned replies for info/signup/random,
the search pipeline for everything else. Always answers with at least one
transport message.
"""

from concurrent.futures import Executor
from concurrent.futures import TimeoutError as FutureTimeoutError
from datetime import datetime
from typing import Final

from src.config.logging_config import get_logger
from src.domain.exceptions import CampusSearchError
from src.domain.models import Intent, SearchQuery
from src.domain.protocols import IntentClassifierProtocol
from src.observability.metrics import INTENT_CLASSIFICATIONS_TOTAL
from src.observability.tracing import correlation_scope
from src.services.response_formatter import DEFAULT_PART_MAX_CHARS, split_message
from src.use_cases.search_events import SearchEventsUseCase

logger = get_logger(__name__)

EMPTY_MESSAGE_REPLY: Final[str] = "Tell me what you're looking for on campus"
INFO_REPLY: Final[str] = (
    'Text me something like "poker tonight?" or "volunteer this weekend." '
    "and I'll find campus events for you."
)
RANDOM_REPLY: Final[str] = "Try asking about campus events"
SIGNUP_REPLY_TEMPLATE: Final[str] = "You can sign up at {url}/signup"

SILENT_KEYWORDS: Final[frozenset[str]] = frozenset({"stop", "help"})
"""Carrier compliance keywords; the transport layer answers these itself."""


class HandleInboundMessageUseCase:
    """Classifies inbound text and produces the reply messages."""

    def __init__(
        self,
        search: SearchEventsUseCase,
        intent_classifier: IntentClassifierProtocol | None,
        executor: Executor,
        *,
        public_app_url: str,
        intent_timeout_seconds: float = 10.0,
        part_max_chars: int = DEFAULT_PART_MAX_CHARS,
    ) -> None:
        """Initialize use case.

        Args:
            search: Search pipeline
            intent_classifier: Optional classifier; without one every message is a search
            executor: Shared pool used to bound the classification call
            public_app_url: Base URL used in the signup reply
            intent_timeout_seconds: Classification budget; on expiry the message is searched
            part_max_chars: Longest single transport message
        """
        self._search = search
        self._intent_classifier = intent_classifier
        self._executor = executor
        self._public_app_url = public_app_url.rstrip("/")
        self._intent_timeout_seconds = intent_timeout_seconds
        self._part_max_chars = part_max_chars

    def handle(
        self,
        text: str,
        tenant: str,
        reference_datetime: datetime | None = None,
    ) -> list[str]:
        """Produce the reply for one inbound message.

        Args:
            text: Raw inbound text
            tenant: Tenant the sender belongs to
            reference_datetime: Campus wall-clock time (default: now)

        Returns:
            Transport messages to send, in order; empty only for STOP/HELP
        """
        message = text.strip()
        if message.lower() in SILENT_KEYWORDS:
            return []
        if not message:
            return [EMPTY_MESSAGE_REPLY]

        with correlation_scope() as correlation_id:
            intent = self._classify(message)
            INTENT_CLASSIFICATIONS_TOTAL.labels(intent=intent.value).inc()
            logger.info("inbound_message_classified", intent=intent.value)

            if intent is Intent.INFO:
                reply = INFO_REPLY
            elif intent is Intent.SIGNUP:
                reply = SIGNUP_REPLY_TEMPLATE.format(url=self._public_app_url)
            elif intent is Intent.RANDOM:
                reply = RANDOM_REPLY
            else:
                outcome = self._search.execute(
                    SearchQuery(text=message, tenant=tenant),
                    reference_datetime,
                    correlation_id=correlation_id,
                )
                logger.info(
                    "inbound_search_answered",
                    status=outcome.status.value,
                    parts=len(outcome.parts),
                )
                if outcome.parts:
                    return outcome.parts
                reply = outcome.message

            return split_message(reply, self._part_max_chars) or [reply]

    def _classify(self, message: str) -> Intent:
        if self._intent_classifier is None:
            return Intent.SEARCH

        future = self._executor.submit(self._intent_classifier.classify_intent, message)
        try:
            return future.result(timeout=self._intent_timeout_seconds)
        except FutureTimeoutError:
            future.cancel()
            logger.warning(
                "intent_classification_timed_out",
                timeout_seconds=self._intent_timeout_seconds,
            )
        except CampusSearchError as exc:
            logger.warning(
                "intent_classification_failed",
                error=str(exc),
                error_type=type(exc).__name__,
            )
        except Exception as exc:
            logger.exception(
                "intent_classification_unexpected_error",
                error=str(exc),
                error_type=type(exc).__name__,
            )
        return Intent.SEARCH
