"""Tests for result selection policy."""

from datetime import date

from src.domain.models import ExtractedFacets, QueryMode
from src.services.result_selector import (
    ResultSelector,
    adaptive_count,
    apply_diversity,
    deduplicate,
)
from tests.conftest import create_scored

SEMANTIC = ExtractedFacets(keywords=("robotics",))
PURE_DATE = ExtractedFacets(target_date=date(2025, 1, 7))
DATE_ACTIVITY = ExtractedFacets(target_date=date(2025, 1, 7), keywords=("pizza",))


def test_deduplicate_keeps_first_occurrence() -> None:
    pool = [create_scored("a", 0.9), create_scored("b", 0.8), create_scored("a", 0.7)]

    unique = deduplicate(pool)

    assert [item.id for item in unique] == ["a", "b"]
    assert unique[0].enhanced_score == 0.9


def test_threshold_filters_semantic() -> None:
    pool = [create_scored("a", 0.55), create_scored("b", 0.45)]

    selected = ResultSelector().select(pool, SEMANTIC)

    assert [item.id for item in selected] == ["a"]


def test_custom_thresholds() -> None:
    pool = [create_scored("a", 0.55)]

    selected = ResultSelector(thresholds={QueryMode.SEMANTIC: 0.6}).select(pool, SEMANTIC)

    assert selected == []


def test_pure_date_capped_at_three() -> None:
    pool = [
        create_scored(f"e{i}", 1.0, organization_name=f"Org {i}") for i in range(6)
    ]

    selected = ResultSelector().select(pool, PURE_DATE)

    assert [item.id for item in selected] == ["e0", "e1", "e2"]


def test_adaptive_count_tiers() -> None:
    big_pool = [create_scored(f"e{i}", 0.82 - i * 0.01) for i in range(6)]

    assert adaptive_count(QueryMode.SEMANTIC, big_pool) == 5
    assert adaptive_count(QueryMode.SEMANTIC, big_pool[:3]) == 3
    assert adaptive_count(QueryMode.SEMANTIC, [create_scored("x", 0.55)] * 4) == 2
    assert adaptive_count(QueryMode.SEMANTIC, [create_scored("x", 0.5)] * 4) == 1
    assert adaptive_count(QueryMode.DATE_ACTIVITY, big_pool) == 5
    assert adaptive_count(QueryMode.PURE_DATE, big_pool[:2]) == 2
    assert adaptive_count(QueryMode.SEMANTIC, []) == 0


def test_diversity_skips_repeated_organization() -> None:
    pool = [
        create_scored("a1", 0.9, organization_name="Chess Club"),
        create_scored("a2", 0.88, organization_name="Chess Club"),
        create_scored("a3", 0.86, organization_name="Chess Club"),
        create_scored("b1", 0.84, organization_name="Film Society"),
        create_scored("c1", 0.82, organization_name="Dance Team"),
    ]

    selected = apply_diversity(pool, 4)

    assert [item.id for item in selected] == ["a1", "a2", "b1", "c1"]


def test_diversity_backfills_in_rank_order() -> None:
    pool = [
        create_scored("a1", 0.9, organization_name="Chess Club"),
        create_scored("a2", 0.88, organization_name="Chess Club"),
        create_scored("a3", 0.86, organization_name="Chess Club"),
        create_scored("b1", 0.84, organization_name="Film Society"),
        create_scored("a4", 0.82, organization_name="Chess Club"),
    ]

    selected = apply_diversity(pool, 4)

    assert [item.id for item in selected] == ["a1", "a2", "a3", "b1"]


def test_select_applies_diversity_when_pool_is_larger() -> None:
    pool = [
        create_scored("a1", 0.9, organization_name="Chess Club"),
        create_scored("a2", 0.89, organization_name="Chess Club"),
        create_scored("a3", 0.88, organization_name="Chess Club"),
        create_scored("a4", 0.87, organization_name="Chess Club"),
        create_scored("a5", 0.86, organization_name="Chess Club"),
        create_scored("b1", 0.85, organization_name="Film Society"),
    ]

    selected = ResultSelector().select(pool, SEMANTIC)

    assert len(selected) == 5
    assert "b1" in {item.id for item in selected}
    assert [item.enhanced_score for item in selected] == sorted(
        (item.enhanced_score for item in selected), reverse=True
    )


def test_select_empty_pool() -> None:
    assert ResultSelector().select([], DATE_ACTIVITY) == []
