"""Static vocabulary tables used to interpret and expand search queries.

Kept as data so they can be reviewed and extended without touching the
interpreter or ranking logic. Triggers are matched on word boundaries against
the normalized (lowercase, apostrophe-free) query.
"""

from typing import Final

# --- Cost -------------------------------------------------------------------

FREE_COST_TRIGGERS: Final[tuple[str, ...]] = (
    "free",
    "no cost",
    "complimentary",
    "no charge",
)
"""Query phrases expressing a free-events intent."""

CHEAP_COST_TRIGGERS: Final[tuple[str, ...]] = (
    "cheap",
    "affordable",
    "low cost",
    "inexpensive",
)
"""Query phrases expressing a low-cost intent."""

FREE_COST_MARKERS: Final[tuple[str, ...]] = (
    "free",
    "no cost",
    "complimentary",
    "no charge",
    "gratis",
)
"""Substrings of an event cost field that mark the event as free."""

FREE_COST_EXACT: Final[frozenset[str]] = frozenset({"$0", "0", "$0.00", "0.00"})

CHEAP_COST_MARKERS: Final[tuple[str, ...]] = (
    "cheap",
    "affordable",
    "low cost",
    "inexpensive",
    "donation",
    "suggested",
)
"""Substrings of an event cost field that mark the event as low cost."""

# --- Activity types ---------------------------------------------------------

ACTIVITY_TRIGGERS: Final[tuple[tuple[str, tuple[str, ...]], ...]] = (
    # Academic
    ("study_groups", ("study group", "study groups", "study session")),
    ("tutoring", ("tutoring", "tutor", "tutors")),
    ("workshops", ("workshop", "workshops")),
    ("lectures", ("lecture", "lectures", "talk", "talks")),
    ("seminars", ("seminar", "seminars")),
    # Career
    ("career_fairs", ("career fair", "career fairs", "job fair", "job fairs")),
    ("networking", ("networking", "network")),
    ("job_opportunities", ("job opportunity", "job opportunities", "jobs")),
    ("internships", ("internship", "internships")),
    (
        "research_opportunities",
        ("research opportunity", "research opportunities", "research position"),
    ),
    # Organizations
    ("clubs", ("club", "clubs")),
    ("organizations", ("organization", "organizations", "org", "orgs")),
    # Social
    ("parties", ("party", "parties")),
    ("social_events", ("social event", "social events", "mixer")),
    ("social", ("meet people", "make friends", "hang out", "hangout")),
    # Food
    ("pizza", ("pizza",)),
    ("food_trucks", ("food truck", "food trucks")),
    ("dinner", ("dinner",)),
    ("lunch", ("lunch",)),
    ("catered", ("catered", "catering")),
    # Event formats
    ("concerts", ("concert", "concerts")),
    ("tournaments", ("tournament", "tournaments")),
    ("competitions", ("competition", "competitions", "contest")),
    ("games", ("game", "games")),
    ("performances", ("performance", "performances", "theater", "theatre")),
)
"""(activity tag, trigger phrases) in priority order; first match wins."""

ACTIVITY_CONTEXT: Final[dict[str, str]] = {
    "study_groups": "The student wants study groups or study sessions. Prioritize events about studying, group study, or academic collaboration.",
    "tutoring": "The student wants tutoring or academic help. Prioritize events about tutoring, academic support, or learning assistance.",
    "workshops": "The student wants workshops. Prioritize hands-on learning or skill-building sessions.",
    "lectures": "The student wants lectures or talks. Prioritize lectures, talks, or presentations.",
    "seminars": "The student wants seminars. Prioritize seminars or academic discussions.",
    "career_fairs": "The student wants career fairs. Prioritize careers, job fairs, or employer networking.",
    "networking": "The student wants networking events. Prioritize professional connections or meeting professionals.",
    "job_opportunities": "The student wants job opportunities. Prioritize jobs, employment, or hiring.",
    "internships": "The student wants internships. Prioritize internship opportunities.",
    "research_opportunities": "The student wants research opportunities. Prioritize research, labs, or research positions.",
    "clubs": "The student wants clubs. Prioritize student clubs and club events.",
    "organizations": "The student wants student organizations. Prioritize organization events.",
    "parties": "The student wants parties. Prioritize parties or social gatherings.",
    "social_events": "The student wants social events. Prioritize fun, community-building events.",
    "social": "The student wants to meet people. Prioritize social, community-oriented events for making friends.",
    "pizza": "The student wants pizza. Prioritize events that mention or serve pizza.",
    "food_trucks": "The student wants food trucks. Prioritize events with food trucks.",
    "dinner": "The student wants dinner. Prioritize events with dinner or evening meals.",
    "lunch": "The student wants lunch. Prioritize events with lunch or midday meals.",
    "catered": "The student wants catered events. Prioritize events with catering.",
    "concerts": "The student wants concerts. Prioritize concerts or live music.",
    "tournaments": "The student wants tournaments. Prioritize tournaments or competitions.",
    "competitions": "The student wants competitions. Prioritize competitions or contests.",
    "games": "The student wants games. Prioritize games, gaming, or game nights.",
    "performances": "The student wants performances or shows. Prioritize performances and entertainment.",
}
"""Constraint sentence appended to the embedding text per activity tag."""

# --- Synonyms ---------------------------------------------------------------

SYNONYMS: Final[dict[str, tuple[str, ...]]] = {
    "free": ("no cost", "complimentary", "no charge", "gratis", "zero cost"),
    "pizza": ("food", "free food", "meal", "snacks", "refreshments", "catered"),
    "food": ("pizza", "tacos", "brunch", "lunch", "dinner", "snacks", "refreshments", "meal", "catered", "festival"),
    "study": ("studying", "academic", "homework", "learning", "review", "exam prep"),
    "networking": ("professional", "career", "connections", "meet people", "industry", "employers"),
    "concert": ("music", "performance", "show", "live music", "musical", "gig"),
    "music": ("concert", "performance", "show", "live music", "musical", "gig", "open mic", "jam session"),
    "poker": ("card games", "games", "gaming", "tournament", "cards", "casino night"),
    "yoga": ("fitness", "wellness", "exercise", "mindfulness", "meditation", "stretching"),
    "basketball": ("sports", "athletics", "game", "tournament", "hoops", "b-ball"),
    "sports": ("athletics", "fitness", "competition", "tournament", "game", "games"),
    "volunteer": ("volunteering", "community service", "service", "help", "outreach", "charity"),
    "career": ("job", "employment", "professional", "work", "internship", "hiring"),
    "workshop": ("class", "training", "tutorial", "session", "seminar"),
    "cultural": ("diversity", "international", "heritage", "tradition"),
    "social": ("meetup", "gathering", "hangout", "community", "friends"),
}
"""Domain term → related terms emitted alongside it in the embedding text."""

# --- Calendar words ---------------------------------------------------------

WEEKDAYS: Final[tuple[str, ...]] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)
"""Index matches ``date.weekday()``."""

MONTHS: Final[tuple[str, ...]] = (
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
)

TIME_OF_DAY_RANGES: Final[tuple[tuple[tuple[str, ...], str, str], ...]] = (
    (("morning",), "06:00", "12:00"),
    (("afternoon",), "12:00", "17:00"),
    (("evening", "tonight", "night", "late night"), "17:00", "23:59"),
)
"""(trigger words, start, end) for named parts of the day."""

# --- Words that never count as activity keywords ---------------------------

STOP_WORDS: Final[frozenset[str]] = frozenset(
    {
        "what", "whats", "happening", "going", "event", "events", "anything",
        "something", "things", "thing", "stuff", "there", "any", "some",
        "related", "about", "for", "the", "and", "are", "was", "were", "been",
        "being", "have", "has", "had", "does", "did", "can", "could", "would",
        "should", "want", "wanna", "looking", "find", "show", "tell", "give",
        "know", "campus", "near", "with", "this", "that", "these", "those",
        "get", "got", "where", "when", "who", "how", "which", "please",
        "happen", "happens", "you", "your", "yours", "our", "all", "fun",
        "into", "from", "out", "let", "lets", "need", "like", "good", "cool",
        "after", "before", "around", "right", "now", "later", "not",
    }
)
"""Filler words removed before deciding whether a query names an activity."""

TEMPORAL_WORDS: Final[frozenset[str]] = frozenset(
    {
        "today", "tonight", "tomorrow", "week", "weekend", "weekends", "next",
        "soon", "days", "day", "morning", "afternoon", "evening", "night",
        "noon", "midnight", "time", "date",
        "mon", "tue", "tues", "wed", "thu", "thur", "thurs", "fri", "sat", "sun",
        "jan", "feb", "mar", "apr", "jun", "jul", "aug", "sep", "sept", "oct",
        "nov", "dec",
        *WEEKDAYS,
        *MONTHS,
    }
)
"""Date and time words; they drive facets, not semantic matching."""
