"""Keyword-driven facet extraction: cost intent, activity type, salient terms.

Every extractor reads normalized query text and consults the static tables in
``src.domain.query_vocabulary``; none of them call external services.
"""

from typing import Final

from src.domain.models import CostIntent
from src.domain.query_vocabulary import (
    ACTIVITY_TRIGGERS,
    CHEAP_COST_TRIGGERS,
    FREE_COST_TRIGGERS,
    STOP_WORDS,
    TEMPORAL_WORDS,
)
from src.services.text_normalizer import contains_phrase, tokenize

MIN_KEYWORD_LENGTH: Final[int] = 3
"""Shorter tokens ('a', 'at', 'me') never count as activity keywords."""

MIN_SINGLE_WORD_LENGTH: Final[int] = 4
"""A single-word activity query must be longer than 3 characters."""

_COST_WORDS: Final[frozenset[str]] = frozenset(
    word for phrase in FREE_COST_TRIGGERS + CHEAP_COST_TRIGGERS for word in phrase.split()
)


def extract_cost_intent(text: str) -> CostIntent | None:
    """Detect a free or cheap intent.

    Example:
        >>> extract_cost_intent("free pizza tonight")
        <CostIntent.FREE: 'free'>
        >>> extract_cost_intent("affordable concerts")
        <CostIntent.CHEAP: 'cheap'>
    """
    if any(contains_phrase(text, trigger) for trigger in FREE_COST_TRIGGERS):
        return CostIntent.FREE
    if any(contains_phrase(text, trigger) for trigger in CHEAP_COST_TRIGGERS):
        return CostIntent.CHEAP
    return None


def extract_activity_type(text: str) -> str | None:
    """Map the query to an activity tag; first table entry that matches wins.

    Example:
        >>> extract_activity_type("any study groups tonight")
        'study_groups'
        >>> extract_activity_type("basketball")
    """
    for activity, triggers in ACTIVITY_TRIGGERS:
        if any(contains_phrase(text, trigger) for trigger in triggers):
            return activity
    return None


def is_salient(token: str) -> bool:
    """Check whether a token can carry semantic intent."""
    return (
        len(token) >= MIN_KEYWORD_LENGTH
        and not token.isdigit()
        and token not in STOP_WORDS
        and token not in TEMPORAL_WORDS
        and not any(char.isdigit() for char in token)
    )


def extract_keywords(text: str) -> tuple[str, ...]:
    """Return salient query terms in order of appearance, without duplicates.

    Example:
        >>> extract_keywords("whats happening tomorrow")
        ()
        >>> extract_keywords("events related to robotics this friday")
        ('robotics',)
    """
    seen: dict[str, None] = {}
    for token in tokenize(text):
        if is_salient(token):
            seen.setdefault(token, None)
    return tuple(seen)


def detect_single_word(text: str) -> str | None:
    """Return the bare keyword when the query is one salient activity word.

    Cost words ('free', 'cheap') do not count: they are intents, not topics.

    Example:
        >>> detect_single_word("basketball")
        'basketball'
        >>> detect_single_word("free")
    """
    tokens = tokenize(text)
    if len(tokens) != 1:
        return None
    token = tokens[0]
    if len(token) < MIN_SINGLE_WORD_LENGTH or token in _COST_WORDS:
        return None
    return token if is_salient(token) else None
