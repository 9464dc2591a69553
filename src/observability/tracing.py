"""Helpers for correlation identifiers and request context in logs."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from uuid import uuid4

from src.config.logging_config import bound_context

CORRELATION_ID_KEY = "correlation_id"
TENANT_KEY = "tenant"


@contextmanager
def correlation_scope(existing_id: str | None = None) -> Iterator[str]:
    """Bind a correlation identifier for the lifetime of the context.

    Nested scopes restore the enclosing identifier on exit.
    """

    correlation_id = existing_id or str(uuid4())
    with bound_context(**{CORRELATION_ID_KEY: correlation_id}):
        yield correlation_id


@contextmanager
def request_scope(tenant: str, existing_id: str | None = None) -> Iterator[str]:
    """Bind correlation id and tenant for one inbound search request.

    Example:
        >>> with request_scope("umd") as correlation_id:
        ...     logger.info("search_started")  # carries correlation_id and tenant
    """

    with correlation_scope(existing_id) as correlation_id, bound_context(
        **{TENANT_KEY: tenant}
    ):
        yield correlation_id


__all__ = ["CORRELATION_ID_KEY", "TENANT_KEY", "correlation_scope", "request_scope"]
