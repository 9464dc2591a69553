"""Temporal/attribute interpreter: raw query text → ExtractedFacets.

The date is resolved by a deterministic cascade (keywords, weekday names,
calendar patterns) with a narrow AI fallback. Ranges, time of day, cost and
activity are resolved independently. Interpretation never fails a request:
any extractor error drops that facet.
"""

from collections.abc import Callable
from datetime import date, datetime, time
from typing import TypeVar

from src.config.logging_config import get_logger
from src.domain.exceptions import CampusSearchError
from src.domain.models import ExtractedFacets
from src.domain.protocols import DateFallbackProtocol
from src.observability.metrics import DATE_FALLBACK_TOTAL
from src.services import date_resolver, facet_extractor
from src.services.text_normalizer import normalize_query

logger = get_logger(__name__)

T = TypeVar("T")

DateRule = Callable[[str, date], date | None]

DETERMINISTIC_DATE_RULES: tuple[tuple[str, DateRule], ...] = (
    ("keyword", date_resolver.resolve_keyword_date),
    ("weekday", date_resolver.resolve_weekday),
    ("calendar", date_resolver.parse_calendar_date),
)
"""Date cascade in priority order; the first rule returning a date wins."""


class QueryInterpreter:
    """Extracts search facets from free-form query text."""

    def __init__(self, date_fallback: DateFallbackProtocol | None = None) -> None:
        """Initialize interpreter.

        Args:
            date_fallback: Optional AI date extractor used when no rule matches
        """
        self._date_fallback = date_fallback

    def interpret(
        self, text: str, reference_date: date, now: time | None = None
    ) -> ExtractedFacets:
        """Interpret a query relative to a reference date.

        Args:
            text: Raw query text
            reference_date: Today's date on campus
            now: Current campus clock time for 'right now'/'later today'
                (default: midnight, which keeps results deterministic)

        Returns:
            Immutable extracted facets

        Example:
            >>> QueryInterpreter().interpret("free pizza tomorrow", date(2025, 1, 6))
            ExtractedFacets(target_date=datetime.date(2025, 1, 7), ..., cost_intent=<CostIntent.FREE: 'free'>, activity_type='pizza', ...)
        """
        normalized = normalize_query(text)
        clock = now or time(0, 0)

        date_range = self._safely("date_range", date_resolver.resolve_date_range, normalized, reference_date)
        target_date = self._resolve_date(text, normalized, reference_date, date_range is not None)
        if target_date is not None:
            # An explicit point date drives filtering; the relative range is dropped
            date_range = None

        time_constraint = self._safely("time", date_resolver.resolve_time_constraint, normalized, clock)
        cost_intent = self._safely("cost", facet_extractor.extract_cost_intent, normalized)
        activity_type = self._safely("activity", facet_extractor.extract_activity_type, normalized)
        keywords = self._safely("keywords", facet_extractor.extract_keywords, normalized) or ()

        single_word = None
        if target_date is None and date_range is None and time_constraint is None:
            single_word = self._safely("single_word", facet_extractor.detect_single_word, normalized)

        facets = ExtractedFacets(
            target_date=target_date,
            date_range=date_range,
            time_constraint=time_constraint,
            cost_intent=cost_intent,
            activity_type=activity_type,
            keywords=keywords,
            single_word=single_word,
        )
        logger.info(
            "query_interpreted",
            target_date=str(target_date) if target_date else None,
            date_range=(
                f"{date_range.start}..{date_range.end}" if date_range else None
            ),
            time_constraint=time_constraint.model_dump() if time_constraint else None,
            cost_intent=cost_intent.value if cost_intent else None,
            activity_type=activity_type,
            keywords=list(keywords),
            mode=facets.mode.value,
        )
        return facets

    def _resolve_date(
        self, raw_text: str, normalized: str, reference_date: date, has_range: bool
    ) -> date | None:
        for rule_name, rule in DETERMINISTIC_DATE_RULES:
            resolved = self._safely(rule_name, rule, normalized, reference_date)
            if resolved is not None:
                logger.debug("date_rule_matched", rule=rule_name, date=str(resolved))
                return resolved

        # A relative range already answers "when"; asking the model would
        # only collapse it into a single day
        if has_range or self._date_fallback is None:
            return None
        return self._ask_fallback(raw_text, reference_date)

    def _ask_fallback(self, raw_text: str, reference_date: date) -> date | None:
        started = datetime.now()
        try:
            resolved = self._date_fallback.extract_date(raw_text, reference_date)  # type: ignore[union-attr]
        except CampusSearchError as exc:
            DATE_FALLBACK_TOTAL.labels(result=type(exc).__name__).inc()
            logger.warning(
                "date_fallback_failed",
                error=str(exc),
                error_type=type(exc).__name__,
                elapsed_ms=int((datetime.now() - started).total_seconds() * 1000),
            )
            return None

        DATE_FALLBACK_TOTAL.labels(result="date" if resolved else "none").inc()
        return resolved

    @staticmethod
    def _safely(facet: str, extractor: Callable[..., T], *args: object) -> T | None:
        try:
            return extractor(*args)
        except (ValueError, TypeError, OverflowError) as exc:
            logger.warning("facet_extraction_failed", facet=facet, error=str(exc))
            return None
