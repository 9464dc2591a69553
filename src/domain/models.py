"""Domain models for campus event search.

All models use Pydantic v2 for validation and serialization.
"""

from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class Intent(str, Enum):
    """Inbound message intent."""

    SEARCH = "search"
    INFO = "info"
    SIGNUP = "signup"
    RANDOM = "random"


class CostIntent(str, Enum):
    """Cost preference expressed in a query."""

    FREE = "free"
    CHEAP = "cheap"


class TimeOperator(str, Enum):
    """Comparison applied to a candidate start time."""

    RANGE = "range"
    EQ = "="
    GTE = ">="
    LTE = "<="


class QueryMode(str, Enum):
    """Ranking/selection mode derived from extracted facets."""

    PURE_DATE = "pure_date"
    DATE_ACTIVITY = "date_activity"
    SINGLE_WORD = "single_word"
    SEMANTIC = "semantic"


class RecordType(str, Enum):
    """Record types stored in the vector index."""

    EVENT = "event"
    ORGANIZATION = "organization"


class SearchStatus(str, Enum):
    """Outcome of one search request."""

    OK = "ok"
    NO_MATCHES = "no_matches"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


class SearchQuery(BaseModel):
    """Inbound search request."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(..., description="Raw query text as typed by the user")
    tenant: str = Field(..., description="Issuing organization (school) identifier")


class TimeConstraint(BaseModel):
    """Time-of-day constraint on event start times (24h HH:MM strings)."""

    model_config = ConfigDict(frozen=True)

    operator: TimeOperator
    start: str | None = Field(default=None, pattern=TIME_PATTERN)
    end: str | None = Field(default=None, pattern=TIME_PATTERN)
    value: str | None = Field(default=None, pattern=TIME_PATTERN)

    @model_validator(mode="after")
    def _check_shape(self) -> "TimeConstraint":
        if self.operator == TimeOperator.RANGE:
            if self.start is None or self.end is None:
                raise ValueError("range constraint requires start and end")
        elif self.value is None:
            raise ValueError(f"'{self.operator.value}' constraint requires value")
        return self

    def matches(self, start_time: str) -> bool:
        """Check a zero-padded HH:MM start time against the constraint."""
        if self.operator == TimeOperator.RANGE:
            return self.start <= start_time <= self.end  # type: ignore[operator]
        if self.operator == TimeOperator.EQ:
            return start_time == self.value
        if self.operator == TimeOperator.GTE:
            return start_time >= self.value  # type: ignore[operator]
        return start_time <= self.value  # type: ignore[operator]


class DateRange(BaseModel):
    """Inclusive calendar date range."""

    model_config = ConfigDict(frozen=True)

    start: date
    end: date

    @model_validator(mode="after")
    def _check_order(self) -> "DateRange":
        if self.end < self.start:
            raise ValueError("date range end precedes start")
        return self

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


class ExtractedFacets(BaseModel):
    """Constraints extracted from one query. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    target_date: date | None = None
    date_range: DateRange | None = None
    time_constraint: TimeConstraint | None = None
    cost_intent: CostIntent | None = None
    activity_type: str | None = None
    keywords: tuple[str, ...] = Field(
        default=(), description="Salient query terms used for boosting"
    )
    single_word: str | None = Field(
        default=None, description="Bare activity keyword for single-word queries"
    )

    @model_validator(mode="after")
    def _point_or_range(self) -> "ExtractedFacets":
        if self.target_date is not None and self.date_range is not None:
            raise ValueError("target_date and date_range are mutually exclusive")
        return self

    @property
    def has_activity_filter(self) -> bool:
        """True when anything beyond the date narrows the request."""
        return bool(self.activity_type or self.cost_intent or self.keywords)

    @property
    def mode(self) -> QueryMode:
        if self.target_date is not None:
            if self.has_activity_filter:
                return QueryMode.DATE_ACTIVITY
            return QueryMode.PURE_DATE
        if self.single_word:
            return QueryMode.SINGLE_WORD
        return QueryMode.SEMANTIC


class VectorMatch(BaseModel):
    """Raw nearest-neighbor match as returned by the vector index."""

    id: str
    score: float
    metadata: dict[str, Any] = Field(default_factory=dict)


class CandidateEvent(BaseModel):
    """Event or organization record returned by retrieval. Read-only."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    title: str = ""
    organization_name: str = ""
    tags: tuple[str, ...] = ()
    categories: tuple[str, ...] = ()
    event_date: date | None = Field(default=None, description="date_normalized")
    start_time: str | None = Field(
        default=None, pattern=TIME_PATTERN, description="time_normalized_start"
    )
    location: str = ""
    cost: str = ""
    record_type: str = RecordType.EVENT.value
    tenant: str = ""
    score: float = Field(..., description="Raw similarity from the vector index")

    @field_validator("tags", "categories", mode="before")
    @classmethod
    def _split_joined(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, str):
            return tuple(part.strip() for part in value.split(",") if part.strip())
        return value

    @field_validator("event_date", "start_time", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ScoredCandidate(BaseModel):
    """Candidate with its enhanced score and the boosts that produced it."""

    model_config = ConfigDict(frozen=True)

    candidate: CandidateEvent
    enhanced_score: float = Field(..., ge=0.0, le=1.0)
    boost_reasons: tuple[str, ...] = ()

    @property
    def id(self) -> str:
        return self.candidate.id


class FormattedMessage(BaseModel):
    """Transport-ready reply text."""

    text: str
    parts: list[str] = Field(default_factory=list)
    segment_count: int = 0
    events_included: int = 0
    events_total: int = 0
    chars_used: int = 0


class SearchOutcome(BaseModel):
    """Result of one pipeline run as seen by the caller."""

    status: SearchStatus
    message: str
    parts: list[str] = Field(default_factory=list)
    facets: ExtractedFacets | None = None
    results: list[ScoredCandidate] = Field(default_factory=list)
