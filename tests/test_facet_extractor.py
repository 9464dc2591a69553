"""Tests for keyword facet extraction."""

import pytest

from src.domain.models import CostIntent
from src.services import facet_extractor


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("free pizza tonight", CostIntent.FREE),
        ("anything at no cost", CostIntent.FREE),
        ("cheap concerts", CostIntent.CHEAP),
        ("affordable dinner", CostIntent.CHEAP),
        ("basketball", None),
        ("freedom rally", None),
    ],
)
def test_extract_cost_intent(text: str, expected: CostIntent | None) -> None:
    assert facet_extractor.extract_cost_intent(text) == expected


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("any study groups tonight", "study_groups"),
        ("career fair friday", "career_fairs"),
        ("free pizza", "pizza"),
        ("clubs to join", "clubs"),
        ("basketball", None),
    ],
)
def test_extract_activity_type(text: str, expected: str | None) -> None:
    assert facet_extractor.extract_activity_type(text) == expected


def test_activity_priority_order() -> None:
    """Earlier table entries win when several triggers match."""
    assert facet_extractor.extract_activity_type("tutoring workshop") == "tutoring"


def test_extract_keywords_drops_filler_and_temporal_words() -> None:
    assert facet_extractor.extract_keywords("whats happening tomorrow") == ()
    assert facet_extractor.extract_keywords("events related to robotics this friday") == (
        "robotics",
    )


def test_extract_keywords_dedupes_and_keeps_order() -> None:
    result = facet_extractor.extract_keywords("free pizza and more free pizza")
    assert result == ("free", "pizza", "more")


def test_extract_keywords_drops_clock_tokens() -> None:
    assert facet_extractor.extract_keywords("trivia at 7pm 11/25") == ("trivia",)


def test_detect_single_word() -> None:
    assert facet_extractor.detect_single_word("basketball") == "basketball"
    assert facet_extractor.detect_single_word("Basketball!") == "basketball"


@pytest.mark.parametrize("text", ["free", "cheap", "fun", "art", "today", "pizza tonight"])
def test_detect_single_word_rejects(text: str) -> None:
    assert facet_extractor.detect_single_word(text) is None
