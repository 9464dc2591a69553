"""Response formatting for the SMS channel.

Renders one compact line per result:

    1) Free Pizza Night - Tue 1/7 7p @ Union: usethemove.com/poster/abc123

Lines are GSM-7 friendly (no emoji, no smart punctuation) so every segment
carries 160/153 characters instead of 70/67.
"""

import math
import re
from collections.abc import Sequence
from datetime import date
from typing import Final

from src.config.logging_config import get_logger
from src.domain.models import FormattedMessage, ScoredCandidate
from src.services.text_normalizer import to_transport_safe

logger = get_logger(__name__)

DEFAULT_CHAR_BUDGET: Final[int] = 300
"""Budget for budgeted replies: two concatenated segments minus a safety margin."""

DEFAULT_TITLE_MAX_CHARS: Final[int] = 25
DEFAULT_LOCATION_MAX_CHARS: Final[int] = 30
ELLIPSIS: Final[str] = "..."

DEFAULT_PART_MAX_CHARS: Final[int] = 600
"""Longest single transport message; longer replies are split."""

LINE_SEPARATOR: Final[str] = "\n\n"

SINGLE_SEGMENT_CHARS: Final[int] = 160
CONCATENATED_SEGMENT_CHARS: Final[int] = 153
"""GSM-7 payload per segment once a User Data Header is needed."""

_WEEKDAY_ABBREVIATIONS: Final[tuple[str, ...]] = (
    "Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun",
)
_SCHEME_PATTERN: Final[re.Pattern[str]] = re.compile(r"^https?://(www\.)?", re.IGNORECASE)


def format_compact_date(value: date) -> str:
    """Format a date as 'Wkd M/D'.

    Example:
        >>> format_compact_date(date(2025, 1, 7))
        'Tue 1/7'
    """
    return f"{_WEEKDAY_ABBREVIATIONS[value.weekday()]} {value.month}/{value.day}"


def format_compact_time(value: str) -> str:
    """Format a 24h HH:MM time as a compact 12h time.

    Example:
        >>> format_compact_time("19:30")
        '7:30p'
        >>> format_compact_time("12:00")
        '12p'
    """
    hour, minute = (int(part) for part in value.split(":"))
    suffix = "a" if hour < 12 else "p"
    display_hour = hour % 12 or 12
    if minute:
        return f"{display_hour}:{minute:02d}{suffix}"
    return f"{display_hour}{suffix}"


def truncate_text(text: str, max_chars: int = DEFAULT_TITLE_MAX_CHARS) -> str:
    if len(text) <= max_chars:
        return text
    return text[: max_chars - len(ELLIPSIS)].rstrip() + ELLIPSIS


def short_link_base(base_url: str) -> str:
    """Strip scheme, 'www.' and trailing slash from the public app URL."""
    return _SCHEME_PATTERN.sub("", base_url.strip()).rstrip("/")


def count_segments(text: str) -> int:
    """Count GSM-7 segments needed to deliver one message."""
    if not text:
        return 0
    if len(text) <= SINGLE_SEGMENT_CHARS:
        return 1
    return math.ceil(len(text) / CONCATENATED_SEGMENT_CHARS)


def split_message(text: str, max_chars: int = DEFAULT_PART_MAX_CHARS) -> list[str]:
    """Split text into transport messages on blank-line boundaries.

    Blocks are packed greedily; a single block longer than ``max_chars`` is
    hard-wrapped so no part ever exceeds the limit.

    Example:
        >>> [len(part) for part in split_message("a" * 400 + "\\n\\n" + "b" * 400)]
        [400, 400]
    """
    text = text.strip()
    if not text:
        return []

    parts: list[str] = []
    current = ""
    for block in text.split(LINE_SEPARATOR):
        while len(block) > max_chars:
            if current:
                parts.append(current)
                current = ""
            parts.append(block[:max_chars])
            block = block[max_chars:]
        if not block:
            continue
        candidate = f"{current}{LINE_SEPARATOR}{block}" if current else block
        if len(candidate) <= max_chars:
            current = candidate
        else:
            parts.append(current)
            current = block
    if current:
        parts.append(current)
    return parts


class ResponseFormatter:
    """Renders selected results into budgeted, transport-safe text."""

    def __init__(
        self,
        char_budget: int = DEFAULT_CHAR_BUDGET,
        title_max_chars: int = DEFAULT_TITLE_MAX_CHARS,
        part_max_chars: int = DEFAULT_PART_MAX_CHARS,
    ) -> None:
        self.char_budget = char_budget
        self._title_max_chars = title_max_chars
        self._part_max_chars = part_max_chars

    def format_line(self, index: int, result: ScoredCandidate, link_base: str) -> str:
        """Render one result line.

        Example:
            '1) Free Pizza Night - Tue 1/7 7p @ Union: usethemove.com/poster/abc123'
        """
        candidate = result.candidate
        title = truncate_text(to_transport_safe(candidate.title), self._title_max_chars)
        line = f"{index}) {title}"

        when = []
        if candidate.event_date is not None:
            when.append(format_compact_date(candidate.event_date))
        if candidate.start_time:
            when.append(format_compact_time(candidate.start_time))
        if when:
            line += f" - {' '.join(when)}"

        location = truncate_text(
            to_transport_safe(candidate.location), DEFAULT_LOCATION_MAX_CHARS
        )
        if location:
            line += f" @ {location}"

        return f"{line}: {link_base}/poster/{candidate.id}"

    def format(
        self,
        selected: Sequence[ScoredCandidate],
        base_url: str,
        total_found: int | None = None,
        budgeted: bool = True,
    ) -> FormattedMessage:
        """Render the reply.

        Args:
            selected: Final results in display order
            base_url: Public app URL used for poster links
            total_found: Matches available before selection; adds the
                'Showing N of M' footer when larger than the shown count
            budgeted: Stop before the line that would exceed the char budget,
                even the first one; the text never exceeds the budget

        Returns:
            Formatted message with transport parts and segment count;
            events_included is 0 when no line fits
        """
        link_base = short_link_base(base_url)
        text = ""
        included = 0

        for index, result in enumerate(selected, start=1):
            line = self.format_line(index, result, link_base)
            candidate_text = f"{text}{LINE_SEPARATOR}{line}" if text else line
            if budgeted and len(candidate_text) > self.char_budget:
                break
            text = candidate_text
            included += 1

        total = total_found if total_found is not None else len(selected)
        if total > included and included:
            footer = f"{LINE_SEPARATOR}(Showing {included} of {total}. Be more specific!)"
            if not budgeted or len(text) + len(footer) <= self.char_budget:
                text += footer

        parts = split_message(text, self._part_max_chars)
        message = FormattedMessage(
            text=text,
            parts=parts,
            segment_count=sum(count_segments(part) for part in parts),
            events_included=included,
            events_total=total,
            chars_used=len(text),
        )
        logger.debug(
            "response_formatted",
            events_included=included,
            events_total=total,
            chars_used=message.chars_used,
            parts=len(parts),
            segments=message.segment_count,
        )
        return message
