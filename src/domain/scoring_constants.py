"""Scoring constants and limits for relevance ranking and result selection.

Boosts are additive adjustments on top of raw vector similarity. Each boost
type is capped on its own before summation and the total is clamped to
[0.0, 1.0].
"""

from typing import Final

from src.domain.models import QueryMode

# Score bounds
MIN_SCORE: Final[float] = 0.0
MAX_SCORE: Final[float] = 1.0

PURE_DATE_SCORE: Final[float] = 1.0
"""Score assigned to every candidate of a pure-date query.

Business rule: all events on the requested day are equally relevant; order is
decided by start time, never by semantic similarity.
"""

# Title overlap
TITLE_TERM_WEIGHT: Final[float] = 0.05
MAX_TITLE_BOOST: Final[float] = 0.15
"""Maximum contribution from query terms found in the title (3 terms)."""

SINGLE_WORD_TITLE_BOOST: Final[float] = 0.25
"""Boost when a single-word query appears verbatim in the title.

Replaces the per-term title boost. Bare keywords embed weakly, so a literal
title hit has to be able to outrank a semantically "closer" neighbour.

Example:
    - "basketball" vs "Basketball Tournament" (0.42) → 0.67
"""

# Tag / category overlap
TAG_TERM_WEIGHT: Final[float] = 0.04
MAX_TAG_BOOST: Final[float] = 0.12

ACTIVITY_TAG_BOOST: Final[float] = 0.10
"""Flat boost when the extracted activity type equals one of the tags."""

CATEGORY_TERM_WEIGHT: Final[float] = 0.03
MAX_CATEGORY_BOOST: Final[float] = 0.08

# Recency tiers: (max days until event, boost, reason)
RECENCY_TIERS: Final[tuple[tuple[int, float, str], ...]] = (
    (1, 0.08, "immediate"),
    (3, 0.05, "soon"),
    (7, 0.03, "upcoming"),
)
"""Recency boosts, first matching tier wins. Past events get nothing."""

FREE_COST_BOOST: Final[float] = 0.06
"""Boost when the user asked for free events and the event is free."""

# Quality thresholds per query mode
QUALITY_THRESHOLDS: Final[dict[QueryMode, float]] = {
    QueryMode.PURE_DATE: 0.0,
    QueryMode.DATE_ACTIVITY: 0.40,
    QueryMode.SINGLE_WORD: 0.35,
    QueryMode.SEMANTIC: 0.50,
}
"""Minimum enhanced score for a candidate to be shown.

Business rule: single-word queries and date+activity queries get lower floors
because their similarity scores run lower for equally relevant events.
"""

# Adaptive result counts
PURE_DATE_MAX_RESULTS: Final[int] = 3
"""Pure-date replies must fit in two SMS segments (~300 chars)."""

DATE_ACTIVITY_MAX_RESULTS: Final[int] = 5

SEMANTIC_COUNT_TIERS: Final[tuple[tuple[float, int], ...]] = (
    (0.8, 5),
    (0.7, 4),
    (0.6, 3),
    (0.5, 2),
)
"""(top score must exceed, result count) for semantic queries.

A tier applies only when the pool holds at least that many candidates;
otherwise the next tier is tried. Falls back to a single result.
"""

DIVERSITY_MIN_COUNT: Final[int] = 3
"""Organization diversity only kicks in when selecting at least this many."""

DIVERSITY_FREE_SLOTS: Final[int] = 2
"""Results that may repeat an organization before diversity applies."""

# Sort key for candidates without a start time
MISSING_TIME_SORT_KEY: Final[str] = "99:99"
