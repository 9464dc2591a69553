"""Text normalization for queries and outbound SMS text.

Handles:
- Query normalization (lowercase, apostrophes, punctuation, whitespace)
- Tokenization for keyword matching
- Transport-safe rendering (GSM-7 friendly: no emoji, no smart punctuation)
"""

import re
from typing import Final

# Emoji and pictograph ranges that force UCS-2 encoding on SMS
EMOJI_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"[\U0001F600-\U0001F64F\U0001F300-\U0001F5FF\U0001F680-\U0001F6FF"
    r"\U0001F1E0-\U0001F1FF\U0001F900-\U0001F9FF\U00002600-\U000026FF"
    r"\U00002700-\U000027BF\U0000FE0F\U0000200D]"
)

# Punctuation outside GSM-7 mapped to its closest GSM-7 equivalent
TRANSPORT_REPLACEMENTS: Final[dict[str, str]] = {
    "‘": "'",
    "’": "'",
    "“": '"',
    "”": '"',
    "–": "-",
    "—": "-",
    "…": "...",
    " ": " ",
    "•": "-",
}

APOSTROPHE_PATTERN: Final[re.Pattern[str]] = re.compile(r"['’`]")
# Keeps '/', ':' and '-' so calendar and clock patterns survive normalization
NON_WORD_PATTERN: Final[re.Pattern[str]] = re.compile(r"[^a-z0-9/:\-$ ]+")
TOKEN_PATTERN: Final[re.Pattern[str]] = re.compile(r"[a-z0-9]+")


def normalize_query(text: str) -> str:
    """Normalize query text for rule matching.

    Args:
        text: Raw query text

    Returns:
        Lowercase text without apostrophes, stray punctuation or repeated spaces

    Example:
        >>> normalize_query("What's happening   Tomorrow?!")
        'whats happening tomorrow'
    """
    text = text.lower()
    text = APOSTROPHE_PATTERN.sub("", text)
    text = NON_WORD_PATTERN.sub(" ", text)
    return re.sub(r"\s+", " ", text).strip()


def tokenize(text: str) -> list[str]:
    """Split normalized text into alphanumeric tokens.

    Example:
        >>> tokenize("free pizza @ 7pm")
        ['free', 'pizza', '7pm']
    """
    return TOKEN_PATTERN.findall(text.lower())


def contains_phrase(normalized_text: str, phrase: str) -> bool:
    """Check whether a phrase occurs on word boundaries.

    Example:
        >>> contains_phrase("club fair today", "club")
        True
        >>> contains_phrase("clubhouse", "club")
        False
    """
    return re.search(rf"\b{re.escape(phrase)}\b", normalized_text) is not None


def to_transport_safe(text: str) -> str:
    """Render text using characters that keep SMS in GSM-7 encoding.

    Args:
        text: Display text (titles, locations)

    Returns:
        Text with smart punctuation replaced and emoji removed

    Example:
        >>> to_transport_safe("Pizza — Night \U0001F355")
        'Pizza - Night'
    """
    for source, target in TRANSPORT_REPLACEMENTS.items():
        text = text.replace(source, target)
    text = EMOJI_PATTERN.sub("", text)
    return re.sub(r"\s+", " ", text).strip()


def normalize_tenant(tenant: str) -> str:
    """Normalize a tenant identifier the way records are indexed.

    Example:
        >>> normalize_tenant("Univ of Maryland")
        'univofmaryland'
        >>> normalize_tenant("penn-state")
        'pennstate'
    """
    return re.sub(r"[\s\-]+", "", tenant.strip().lower())
