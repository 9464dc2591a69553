"""Relevance ranking: hard filters plus an additive boost model.

Phase 1 drops candidates that violate a deterministic facet (date, range,
cost, time, past events). Phase 2 folds a fixed list of boost rules over the
raw similarity; each rule caps its own contribution and the total is clamped
to [0, 1]. Pure-date queries skip phase 2 entirely.
"""

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Final

from src.config.logging_config import get_logger
from src.domain.models import (
    CandidateEvent,
    CostIntent,
    ExtractedFacets,
    QueryMode,
    RecordType,
    ScoredCandidate,
)
from src.domain.query_vocabulary import (
    CHEAP_COST_MARKERS,
    FREE_COST_EXACT,
    FREE_COST_MARKERS,
)
from src.domain.scoring_constants import (
    ACTIVITY_TAG_BOOST,
    CATEGORY_TERM_WEIGHT,
    FREE_COST_BOOST,
    MAX_CATEGORY_BOOST,
    MAX_SCORE,
    MAX_TAG_BOOST,
    MAX_TITLE_BOOST,
    MIN_SCORE,
    MISSING_TIME_SORT_KEY,
    PURE_DATE_SCORE,
    RECENCY_TIERS,
    SINGLE_WORD_TITLE_BOOST,
    TAG_TERM_WEIGHT,
    TITLE_TERM_WEIGHT,
)
from src.services.text_normalizer import normalize_tenant, tokenize

logger = get_logger(__name__)

DOLLAR_AMOUNT_PATTERN: Final[re.Pattern[str]] = re.compile(r"\$\s*(\d+(?:\.\d{1,2})?)")

DEFAULT_CHEAP_COST_MAX_USD: Final[float] = 10.0


def is_free_cost(cost: str, blank_is_free: bool = True) -> bool:
    """Check whether an event cost field means free admission.

    Example:
        >>> is_free_cost("FREE for students")
        True
        >>> is_free_cost("", blank_is_free=False)
        False
    """
    normalized = cost.strip().lower()
    if not normalized:
        return blank_is_free
    if normalized in FREE_COST_EXACT:
        return True
    return any(marker in normalized for marker in FREE_COST_MARKERS)


def is_cheap_cost(cost: str, max_usd: float = DEFAULT_CHEAP_COST_MAX_USD) -> bool:
    """Check whether an event cost field is free or low cost.

    A blank cost is unknown, not cheap.

    Example:
        >>> is_cheap_cost("$5 at the door")
        True
        >>> is_cheap_cost("$25")
        False
    """
    normalized = cost.strip().lower()
    if not normalized:
        return False
    if is_free_cost(normalized, blank_is_free=False):
        return True
    if any(marker in normalized for marker in CHEAP_COST_MARKERS):
        return True
    amounts = [float(value) for value in DOLLAR_AMOUNT_PATTERN.findall(normalized)]
    return bool(amounts) and min(amounts) <= max_usd


def _normalize_tag(tag: str) -> str:
    return re.sub(r"[\s\-]+", "_", tag.strip().lower())


@dataclass(frozen=True)
class RankingContext:
    """Per-request inputs shared by every boost rule."""

    facets: ExtractedFacets
    reference_date: date
    blank_cost_is_free: bool


BoostRule = Callable[[CandidateEvent, RankingContext], tuple[float, str | None]]


def title_boost(candidate: CandidateEvent, context: RankingContext) -> tuple[float, str | None]:
    title_tokens = set(tokenize(candidate.title))
    single_word = context.facets.single_word
    if single_word:
        if single_word in title_tokens:
            return SINGLE_WORD_TITLE_BOOST, "single_word_title"
        return 0.0, None

    overlap = sum(1 for keyword in context.facets.keywords if keyword in title_tokens)
    if not overlap:
        return 0.0, None
    return min(overlap * TITLE_TERM_WEIGHT, MAX_TITLE_BOOST), f"title_overlap:{overlap}"


def tag_boost(candidate: CandidateEvent, context: RankingContext) -> tuple[float, str | None]:
    tag_tokens = {token for tag in candidate.tags for token in tokenize(tag)}
    overlap = sum(1 for keyword in context.facets.keywords if keyword in tag_tokens)
    if not overlap:
        return 0.0, None
    return min(overlap * TAG_TERM_WEIGHT, MAX_TAG_BOOST), f"tag_overlap:{overlap}"


def activity_tag_boost(
    candidate: CandidateEvent, context: RankingContext
) -> tuple[float, str | None]:
    activity = context.facets.activity_type
    if activity and any(_normalize_tag(tag) == activity for tag in candidate.tags):
        return ACTIVITY_TAG_BOOST, f"activity_tag:{activity}"
    return 0.0, None


def category_boost(
    candidate: CandidateEvent, context: RankingContext
) -> tuple[float, str | None]:
    category_tokens = {token for category in candidate.categories for token in tokenize(category)}
    overlap = sum(1 for keyword in context.facets.keywords if keyword in category_tokens)
    if not overlap:
        return 0.0, None
    return (
        min(overlap * CATEGORY_TERM_WEIGHT, MAX_CATEGORY_BOOST),
        f"category_overlap:{overlap}",
    )


def recency_boost(
    candidate: CandidateEvent, context: RankingContext
) -> tuple[float, str | None]:
    if candidate.event_date is None:
        return 0.0, None
    days_until = (candidate.event_date - context.reference_date).days
    if days_until < 0:
        return 0.0, None
    for max_days, boost, label in RECENCY_TIERS:
        if days_until <= max_days:
            return boost, f"recency:{label}"
    return 0.0, None


def free_cost_boost(
    candidate: CandidateEvent, context: RankingContext
) -> tuple[float, str | None]:
    if context.facets.cost_intent is CostIntent.FREE and is_free_cost(
        candidate.cost, context.blank_cost_is_free
    ):
        return FREE_COST_BOOST, "free_cost"
    return 0.0, None


BOOST_RULES: Final[tuple[BoostRule, ...]] = (
    title_boost,
    tag_boost,
    activity_tag_boost,
    category_boost,
    recency_boost,
    free_cost_boost,
)
"""Soft scoring rules, applied in order; each returns (boost, reason)."""


def score_candidate(
    candidate: CandidateEvent,
    context: RankingContext,
    rules: Sequence[BoostRule] = BOOST_RULES,
) -> tuple[float, tuple[str, ...]]:
    """Fold boost rules over the raw similarity.

    Returns:
        Clamped enhanced score and the reasons of every rule that fired
    """
    score = candidate.score
    reasons: list[str] = []
    for rule in rules:
        boost, reason = rule(candidate, context)
        if boost and reason:
            score += boost
            reasons.append(f"{reason}(+{boost:.2f})")
    return max(MIN_SCORE, min(MAX_SCORE, score)), tuple(reasons)


def _time_key(candidate: CandidateEvent) -> str:
    return candidate.start_time or MISSING_TIME_SORT_KEY


class RelevanceRanker:
    """Filters and scores retrieved candidates against extracted facets."""

    def __init__(
        self,
        treat_blank_cost_as_free: bool = True,
        cheap_cost_max_usd: float = DEFAULT_CHEAP_COST_MAX_USD,
        record_types: Sequence[RecordType] = (RecordType.EVENT, RecordType.ORGANIZATION),
    ) -> None:
        """Initialize ranker.

        Args:
            treat_blank_cost_as_free: Count an empty cost field as free for
                free-intent queries (filter and boost)
            cheap_cost_max_usd: Highest dollar amount considered cheap
            record_types: Record types allowed through the re-check
        """
        self._blank_cost_is_free = treat_blank_cost_as_free
        self._cheap_cost_max_usd = cheap_cost_max_usd
        self._record_types = frozenset(record_type.value for record_type in record_types)

    def rank(
        self,
        candidates: Sequence[CandidateEvent],
        facets: ExtractedFacets,
        reference_date: date,
        tenant: str | None = None,
    ) -> list[ScoredCandidate]:
        """Filter, score and order candidates.

        Args:
            candidates: Retrieved candidates
            facets: Extracted query facets
            reference_date: Today's date on campus
            tenant: Expected tenant; mismatching records are dropped when given

        Returns:
            Scored candidates in display order
        """
        survivors = [
            candidate
            for candidate in candidates
            if self._passes_hard_filters(candidate, facets, reference_date, tenant)
        ]

        if facets.mode is QueryMode.PURE_DATE:
            ranked = [
                ScoredCandidate(
                    candidate=candidate,
                    enhanced_score=PURE_DATE_SCORE,
                    boost_reasons=("pure_date",),
                )
                for candidate in sorted(
                    survivors,
                    key=lambda c: (_time_key(c), c.title.lower()),
                )
            ]
        else:
            context = RankingContext(
                facets=facets,
                reference_date=reference_date,
                blank_cost_is_free=self._blank_cost_is_free,
            )
            scored = []
            for candidate in survivors:
                enhanced, reasons = score_candidate(candidate, context)
                scored.append(
                    ScoredCandidate(
                        candidate=candidate,
                        enhanced_score=enhanced,
                        boost_reasons=reasons,
                    )
                )
            ranked = sorted(
                scored,
                key=lambda s: (
                    -s.enhanced_score,
                    _time_key(s.candidate),
                    s.candidate.title.lower(),
                ),
            )

        logger.info(
            "candidates_ranked",
            mode=facets.mode.value,
            received=len(candidates),
            filtered_out=len(candidates) - len(survivors),
            ranked=len(ranked),
            top_score=round(ranked[0].enhanced_score, 4) if ranked else None,
        )
        return ranked

    def _passes_hard_filters(
        self,
        candidate: CandidateEvent,
        facets: ExtractedFacets,
        reference_date: date,
        tenant: str | None,
    ) -> bool:
        if candidate.record_type not in self._record_types:
            return False
        if tenant is not None and normalize_tenant(candidate.tenant) != normalize_tenant(tenant):
            return False

        if facets.target_date is not None:
            if candidate.event_date != facets.target_date:
                return False
        elif facets.date_range is not None:
            if candidate.event_date is None or not facets.date_range.contains(
                candidate.event_date
            ):
                return False
        elif candidate.event_date is not None and candidate.event_date < reference_date:
            return False

        if facets.cost_intent is CostIntent.FREE:
            if not is_free_cost(candidate.cost, self._blank_cost_is_free):
                return False
        elif facets.cost_intent is CostIntent.CHEAP:
            if not is_cheap_cost(candidate.cost, self._cheap_cost_max_usd):
                return False

        if facets.time_constraint is not None:
            if candidate.start_time is None or not facets.time_constraint.matches(
                candidate.start_time
            ):
                return False

        return True
