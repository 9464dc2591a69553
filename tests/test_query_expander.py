"""Tests for embedding text construction."""

from datetime import date

from src.domain.models import CostIntent, DateRange, ExtractedFacets
from src.services.query_expander import (
    CHEAP_CONSTRAINT,
    FREE_CONSTRAINT,
    MATCHING_GUIDANCE,
    UPCOMING_CONSTRAINT,
    QueryExpander,
    expand_synonyms,
)


def test_expand_synonyms_appends_related_terms() -> None:
    result = expand_synonyms("pizza tonight")
    assert result.startswith("pizza tonight ")
    assert "refreshments" in result
    assert "catered" in result


def test_expand_synonyms_without_domain_terms() -> None:
    assert expand_synonyms("  robotics demo ") == "robotics demo"


def test_expand_synonyms_word_boundaries() -> None:
    """'musical' must not trigger the 'music' synonyms."""
    assert expand_synonyms("musical") == "musical"


def test_expand_restates_query_and_date(reference_date: date) -> None:
    text = QueryExpander().expand("robotics demo", ExtractedFacets(), "UMD", reference_date)

    assert text.startswith("Today's date is Mon Jan 06 2025.")
    assert 'A UMD student is searching for: "robotics demo".' in text
    assert UPCOMING_CONSTRAINT in text
    assert text.endswith(MATCHING_GUIDANCE)


def test_expand_free_activity_and_date(reference_date: date) -> None:
    facets = ExtractedFacets(
        target_date=date(2025, 1, 7),
        cost_intent=CostIntent.FREE,
        activity_type="pizza",
        keywords=("free", "pizza"),
    )

    text = QueryExpander().expand("free pizza tomorrow", facets, "UMD", reference_date)

    assert FREE_CONSTRAINT in text
    assert "Prioritize events that mention or serve pizza." in text
    assert "Only include events happening on Tue Jan 07 2025." in text
    assert UPCOMING_CONSTRAINT not in text


def test_expand_cheap_and_range(reference_date: date) -> None:
    facets = ExtractedFacets(
        date_range=DateRange(start=date(2025, 1, 11), end=date(2025, 1, 12)),
        cost_intent=CostIntent.CHEAP,
    )

    text = QueryExpander().expand("cheap stuff this weekend", facets, "UMD", reference_date)

    assert CHEAP_CONSTRAINT in text
    assert FREE_CONSTRAINT not in text
    assert "between Sat Jan 11 2025 and Sun Jan 12 2025" in text


def test_expand_is_single_line(reference_date: date) -> None:
    text = QueryExpander().expand("line one\n\nline   two", ExtractedFacets(), "UMD", reference_date)
    assert "\n" not in text
    assert "  " not in text
