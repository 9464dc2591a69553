"""Date and time resolution for search queries.

Handles:
- Relative keywords (today, tonight, tomorrow, in N days)
- Weekday names (always the next occurrence, never today)
- Calendar dates (11/25, Nov 25th, 11-25, with optional year)
- Relative ranges (this weekend, this week, next week, soon)
- Time of day (morning, after 6, before noon, 7:30pm, right now)

All functions are pure: the caller supplies the reference date and clock
time, so identical inputs always resolve identically. Text is expected to be
normalized with ``text_normalizer.normalize_query``.
"""

import re
from datetime import date, datetime, time, timedelta
from typing import Final

import pytz
from dateutil.relativedelta import relativedelta, weekday

from src.domain.models import DateRange, TimeConstraint, TimeOperator
from src.domain.query_vocabulary import MONTHS, TIME_OF_DAY_RANGES, WEEKDAYS
from src.services.text_normalizer import contains_phrase

END_OF_DAY: Final[str] = "23:59"

# Relative date keywords mapping (days offset from reference date)
RELATIVE_PATTERNS: Final[tuple[tuple[str, int], ...]] = (
    ("tonight", 0),
    ("tomorrow", 1),
    ("today", 0),
)
"""Relative date keywords and their day offsets, checked in order."""

IN_N_DAYS_PATTERN: Final[re.Pattern[str]] = re.compile(r"\bin\s+(\d{1,3})\s+days?\b")
"""Pattern to match phrases like 'in 3 days'."""

SLASH_DATE_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"\b(\d{1,2})/(\d{1,2})(?:/(\d{4}|\d{2}))?\b"
)
"""M/D with optional /YY or /YYYY."""

DASH_DATE_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"\b(\d{1,2})-(\d{1,2})(?:-(\d{4}|\d{2}))?\b"
)
"""M-D with optional -YY or -YYYY."""

MONTH_DAY_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"\b(jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?"
    r"|aug(?:ust)?|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)"
    r"\.?\s+(\d{1,2})(?:st|nd|rd|th)?\b"
)
"""Month name or abbreviation followed by a day, e.g. 'nov 22nd'."""

CLOCK_WITH_SUFFIX_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"\b(\d{1,2})(?::([0-5]\d))?\s*(am|pm)\b|\b(\d{1,2})(?::([0-5]\d))?(a|p)\b"
)
"""12h clock times: '7pm', '7:30 pm', '7p'."""

CLOCK_24H_PATTERN: Final[re.Pattern[str]] = re.compile(r"\b([01]?\d|2[0-3]):([0-5]\d)\b")
"""24h clock times: '19:00'."""

BARE_HOUR_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"\b(?:after|before|at|around|until|since)\s+(\d{1,2})\b"
)
"""Bare hours introduced by a preposition: 'after 6'."""

NOON_PATTERN: Final[re.Pattern[str]] = re.compile(r"\b(noon|midday)\b")
MIDNIGHT_PATTERN: Final[re.Pattern[str]] = re.compile(r"\bmidnight\b")

AFTER_WORDS: Final[tuple[str, ...]] = ("after", "since")
BEFORE_WORDS: Final[tuple[str, ...]] = ("before", "until")

BARE_HOUR_PM_MAX: Final[int] = 7
"""Bare hours 1..7 without am/pm are read as evening times (campus events)."""

RIGHT_NOW_PHRASES: Final[tuple[str, ...]] = ("right now", "happening now")
LATER_TODAY_PHRASE: Final[str] = "later today"

_DATEUTIL_WEEKDAYS: Final[tuple[weekday, ...]] = tuple(weekday(i) for i in range(7))


def get_reference_datetime(tz_name: str, now: datetime | None = None) -> datetime:
    """Get the current wall-clock time on campus.

    Args:
        tz_name: IANA timezone of the tenant
        now: Optional aware datetime to convert (default: current UTC time)

    Returns:
        Timezone-aware datetime in the campus timezone
    """
    try:
        tz = pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        tz = pytz.timezone("America/New_York")

    if now is None:
        now = datetime.now(pytz.UTC)
    elif now.tzinfo is None:
        return tz.localize(now)
    return now.astimezone(tz)


def format_clock(value: time) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


def resolve_keyword_date(text: str, reference: date) -> date | None:
    """Resolve 'tonight', 'today', 'tomorrow' and 'in N days'.

    Example:
        >>> resolve_keyword_date("pizza tomorrow", date(2025, 1, 6))
        datetime.date(2025, 1, 7)
    """
    for keyword, offset in RELATIVE_PATTERNS:
        if contains_phrase(text, keyword):
            return reference + timedelta(days=offset)

    match = IN_N_DAYS_PATTERN.search(text)
    if match:
        return reference + timedelta(days=int(match.group(1)))

    return None


def resolve_weekday(text: str, reference: date) -> date | None:
    """Resolve the first weekday name to its next occurrence after reference.

    A weekday equal to the reference weekday resolves to one week later.

    Example:
        >>> resolve_weekday("yoga monday", date(2025, 1, 6))  # a Monday
        datetime.date(2025, 1, 13)
    """
    best: tuple[int, int] | None = None
    for index, name in enumerate(WEEKDAYS):
        match = re.search(rf"\b{name}s?\b", text)
        if match and (best is None or match.start() < best[0]):
            best = (match.start(), index)

    if best is None:
        return None

    # days=+1 is applied before the weekday jump, so today never matches
    return reference + relativedelta(days=+1, weekday=_DATEUTIL_WEEKDAYS[best[1]](+1))


def _expand_year(raw_year: str | None, reference: date) -> int:
    if raw_year is None:
        return reference.year
    year = int(raw_year)
    return year + 2000 if year < 100 else year


def _build_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _roll_forward(candidate: date, reference: date, explicit_year: bool) -> date:
    if not explicit_year and candidate < reference:
        return candidate + relativedelta(years=1)
    return candidate


def _numeric_date(
    pattern: re.Pattern[str], text: str, reference: date
) -> date | None:
    match = pattern.search(text)
    if not match:
        return None
    month, day, raw_year = int(match.group(1)), int(match.group(2)), match.group(3)
    candidate = _build_date(_expand_year(raw_year, reference), month, day)
    if candidate is None:
        return None
    return _roll_forward(candidate, reference, explicit_year=raw_year is not None)


def parse_calendar_date(text: str, reference: date) -> date | None:
    """Parse an explicit calendar date.

    Patterns are tried in order: M/D[/Y], Month D[st|nd|rd|th], M-D[-Y].
    Yearless dates in the past roll forward to next year.

    Example:
        >>> parse_calendar_date("career fair 11/25", date(2025, 12, 1))
        datetime.date(2026, 11, 25)
        >>> parse_calendar_date("nov 22nd", date(2025, 1, 6))
        datetime.date(2025, 11, 22)
    """
    slash_date = _numeric_date(SLASH_DATE_PATTERN, text, reference)
    if slash_date:
        return slash_date

    match = MONTH_DAY_PATTERN.search(text)
    if match:
        month = next(
            i + 1 for i, name in enumerate(MONTHS) if name.startswith(match.group(1)[:3])
        )
        candidate = _build_date(reference.year, month, int(match.group(2)))
        if candidate:
            return _roll_forward(candidate, reference, explicit_year=False)

    return _numeric_date(DASH_DATE_PATTERN, text, reference)


def resolve_date_range(text: str, reference: date) -> DateRange | None:
    """Resolve relative range phrases.

    - this weekend / weekend: upcoming Saturday-Sunday (today through Sunday
      when asked on a weekend)
    - next week: +7 .. +13 days
    - this week: today .. next Sunday
    - soon: today .. +3 days

    Example:
        >>> resolve_date_range("this weekend", date(2025, 1, 6))
        DateRange(start=datetime.date(2025, 1, 11), end=datetime.date(2025, 1, 12))
    """
    if contains_phrase(text, "weekend"):
        dow = reference.weekday()
        if dow >= 5:
            return DateRange(start=reference, end=reference + timedelta(days=6 - dow))
        saturday = reference + timedelta(days=5 - dow)
        return DateRange(start=saturday, end=saturday + timedelta(days=1))

    if contains_phrase(text, "next week"):
        return DateRange(
            start=reference + timedelta(days=7), end=reference + timedelta(days=13)
        )

    if contains_phrase(text, "this week"):
        days_until_sunday = (6 - reference.weekday()) or 7
        return DateRange(start=reference, end=reference + timedelta(days=days_until_sunday))

    if contains_phrase(text, "soon"):
        return DateRange(start=reference, end=reference + timedelta(days=3))

    return None


def _time_operator(text: str) -> TimeOperator:
    if any(contains_phrase(text, word) for word in AFTER_WORDS):
        return TimeOperator.GTE
    if any(contains_phrase(text, word) for word in BEFORE_WORDS):
        return TimeOperator.LTE
    return TimeOperator.EQ


def parse_clock_time(text: str) -> str | None:
    """Extract an explicit clock time as HH:MM (24h).

    Example:
        >>> parse_clock_time("trivia after 7:30pm")
        '19:30'
        >>> parse_clock_time("open mic after 6")
        '18:00'
    """
    if NOON_PATTERN.search(text):
        return "12:00"
    if MIDNIGHT_PATTERN.search(text):
        return "00:00"

    match = CLOCK_WITH_SUFFIX_PATTERN.search(text)
    if match:
        hour = int(match.group(1) or match.group(4))
        minute = int(match.group(2) or match.group(5) or 0)
        suffix = (match.group(3) or match.group(6))[0]
        if 1 <= hour <= 12:
            if suffix == "p" and hour < 12:
                hour += 12
            elif suffix == "a" and hour == 12:
                hour = 0
            return f"{hour:02d}:{minute:02d}"

    match = CLOCK_24H_PATTERN.search(text)
    if match:
        return f"{int(match.group(1)):02d}:{match.group(2)}"

    match = BARE_HOUR_PATTERN.search(text)
    if match:
        hour = int(match.group(1))
        if 1 <= hour <= BARE_HOUR_PM_MAX:
            hour += 12
        if hour <= 23:
            return f"{hour:02d}:00"

    return None


def resolve_time_constraint(text: str, now: time) -> TimeConstraint | None:
    """Resolve a time-of-day constraint.

    Named parts of the day win over explicit clock times; 'right now' covers
    the next hour and 'later today' runs to the end of the day.

    Example:
        >>> resolve_time_constraint("yoga in the morning", time(9, 0))
        TimeConstraint(operator=<TimeOperator.RANGE: 'range'>, start='06:00', end='12:00', value=None)
    """
    for triggers, start, end in TIME_OF_DAY_RANGES:
        if any(contains_phrase(text, trigger) for trigger in triggers):
            return TimeConstraint(operator=TimeOperator.RANGE, start=start, end=end)

    current = format_clock(now)
    if any(contains_phrase(text, phrase) for phrase in RIGHT_NOW_PHRASES):
        one_hour_later = datetime.combine(date.min, now) + timedelta(hours=1)
        end = (
            format_clock(one_hour_later.time())
            if one_hour_later.date() == date.min
            else END_OF_DAY
        )
        return TimeConstraint(operator=TimeOperator.RANGE, start=current, end=end)

    if contains_phrase(text, LATER_TODAY_PHRASE):
        return TimeConstraint(operator=TimeOperator.RANGE, start=current, end=END_OF_DAY)

    clock = parse_clock_time(text)
    if clock is None:
        return None
    return TimeConstraint(operator=_time_operator(text), value=clock)
