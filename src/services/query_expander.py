"""Builds the natural-language text that gets embedded for retrieval.

Structured facets are never sent to the embedding service as structure;
they are rendered as plain constraint sentences so the vector captures the
intent while the ranker enforces the facets as hard filters.
"""

import re
from datetime import date
from typing import Final

from src.domain.models import CostIntent, ExtractedFacets
from src.domain.query_vocabulary import ACTIVITY_CONTEXT, SYNONYMS
from src.services.text_normalizer import contains_phrase, normalize_query

FREE_CONSTRAINT: Final[str] = (
    "The student specifically wants FREE events with no cost, no admission "
    "fee, or complimentary access. Prioritize events marked as free."
)
CHEAP_CONSTRAINT: Final[str] = (
    "The student wants cheap or low-cost events. Prioritize free or "
    "inexpensive events."
)
UPCOMING_CONSTRAINT: Final[str] = "Match upcoming events happening soon."
MATCHING_GUIDANCE: Final[str] = (
    "Match using title, tags, description, date, time, location, cost, and "
    "categories. Prioritize events that match the specific activities, "
    "interests, and requirements mentioned in the query."
)


def _display_date(value: date) -> str:
    return value.strftime("%a %b %d %Y")


def expand_synonyms(raw_query: str) -> str:
    """Append related terms for every domain term present in the query.

    Example:
        >>> expand_synonyms("pizza tonight")
        'pizza tonight food free food meal snacks refreshments catered'
    """
    normalized = normalize_query(raw_query)
    related: list[str] = []
    for term, synonyms in SYNONYMS.items():
        if contains_phrase(normalized, term):
            related.extend(synonyms)
    return " ".join([raw_query.strip(), *related]).strip()


class QueryExpander:
    """Renders a query and its facets into embedding text."""

    def expand(
        self,
        raw_query: str,
        facets: ExtractedFacets,
        tenant: str,
        reference_date: date,
    ) -> str:
        """Build the embedding text.

        Args:
            raw_query: Query as typed by the student
            facets: Interpreted facets of the query
            tenant: Campus/tenant display name used in the restated intent
            reference_date: Today's date on campus

        Returns:
            Single-line, whitespace-collapsed text
        """
        sentences = [
            f"Today's date is {_display_date(reference_date)}.",
            f'A {tenant} student is searching for: "{raw_query.strip()}".',
            f'Search terms: "{expand_synonyms(raw_query)}".',
            "Find campus events matching these keywords and concepts.",
        ]

        if facets.cost_intent is CostIntent.FREE:
            sentences.append(FREE_CONSTRAINT)
        elif facets.cost_intent is CostIntent.CHEAP:
            sentences.append(CHEAP_CONSTRAINT)

        if facets.activity_type and facets.activity_type in ACTIVITY_CONTEXT:
            sentences.append(ACTIVITY_CONTEXT[facets.activity_type])

        if facets.date_range is not None:
            sentences.append(
                "The student wants events happening between "
                f"{_display_date(facets.date_range.start)} and "
                f"{_display_date(facets.date_range.end)}."
            )
        elif facets.target_date is not None:
            sentences.append(
                f"Only include events happening on {_display_date(facets.target_date)}."
            )
        else:
            sentences.append(UPCOMING_CONSTRAINT)

        sentences.append(MATCHING_GUIDANCE)
        return re.sub(r"\s+", " ", " ".join(sentences)).strip()
