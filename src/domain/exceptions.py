"""Custom exception hierarchy for campus event search.

Every pipeline failure is transient from the caller's point of view
(timeouts and upstream failures), so all of them derive from RetryableError.
The search use case is the only place these are converted into user-facing
text; components below it raise them unchanged.
"""


class CampusSearchError(Exception):
    """Base exception for all application errors."""

    pass


class RetryableError(CampusSearchError):
    """Errors that can be retried (network issues, temporary failures)."""

    pass


class ExtractionTimeoutError(RetryableError):
    """AI facet extraction exceeded its time budget.

    Recovered locally by the interpreter: the facet is dropped.
    """

    def __init__(self, timeout_seconds: float | None = None) -> None:
        """Initialize with the budget that was exceeded."""
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Facet extraction timed out after {timeout_seconds}s")


class LLMAPIError(RetryableError):
    """LLM API communication errors."""

    pass


class EmbeddingError(RetryableError):
    """Embedding service failed or returned an unusable vector."""

    pass


class RetrievalError(RetryableError):
    """Vector index query failed."""

    pass


class MalformedUpstreamResponseError(RetrievalError):
    """Vector index returned a response that does not match the metadata contract."""

    pass


class SearchTimeoutError(RetryableError):
    """Search pipeline exceeded its outer deadline."""

    def __init__(self, stage: str, timeout_seconds: float) -> None:
        """Initialize with the stage that observed the expired deadline."""
        self.stage = stage
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"Search deadline of {timeout_seconds}s exceeded at stage '{stage}'"
        )
