"""Smoke tests for correlation context and metrics."""

from __future__ import annotations

import pytest
import structlog
from prometheus_client import REGISTRY

from src.observability import metrics
from src.observability.tracing import (
    CORRELATION_ID_KEY,
    TENANT_KEY,
    correlation_scope,
    request_scope,
)


def test_correlation_scope_generates_and_unbinds() -> None:
    with correlation_scope() as correlation_id:
        assert correlation_id
        assert structlog.contextvars.get_contextvars()[CORRELATION_ID_KEY] == correlation_id

    assert CORRELATION_ID_KEY not in structlog.contextvars.get_contextvars()


def test_request_scope_binds_tenant_and_reuses_id() -> None:
    with request_scope("umd", "abc123") as correlation_id:
        context = structlog.contextvars.get_contextvars()
        assert correlation_id == "abc123"
        assert context[CORRELATION_ID_KEY] == "abc123"
        assert context[TENANT_KEY] == "umd"

    context = structlog.contextvars.get_contextvars()
    assert TENANT_KEY not in context
    assert CORRELATION_ID_KEY not in context


def test_stage_histogram_records_observation() -> None:
    labels = {"stage": "smoke"}
    before = REGISTRY.get_sample_value("search_stage_duration_seconds_count", labels) or 0.0

    metrics.SEARCH_STAGE_DURATION_SECONDS.labels(**labels).observe(0.01)

    after = REGISTRY.get_sample_value("search_stage_duration_seconds_count", labels)
    assert after == before + 1


def test_exporter_starts_once(monkeypatch: pytest.MonkeyPatch) -> None:
    started: list[int] = []
    monkeypatch.setattr(metrics, "start_http_server", lambda port: started.append(port))
    monkeypatch.setattr(metrics, "_EXPORTER_STARTED", False)
    monkeypatch.setenv("METRICS_PORT", "9123")

    metrics.ensure_metrics_exporter()
    metrics.ensure_metrics_exporter()

    assert started == [9123]


def test_invalid_metrics_port_falls_back(monkeypatch: pytest.MonkeyPatch) -> None:
    started: list[int] = []
    monkeypatch.setattr(metrics, "start_http_server", lambda port: started.append(port))
    monkeypatch.setattr(metrics, "_EXPORTER_STARTED", False)
    monkeypatch.setenv("METRICS_PORT", "not-a-port")

    metrics.ensure_metrics_exporter()

    assert started == [9000]


def test_nested_request_scope_restores_outer_correlation_id() -> None:
    with correlation_scope() as outer_id:
        with request_scope("umd", outer_id):
            pass

        context = structlog.contextvars.get_contextvars()
        assert context[CORRELATION_ID_KEY] == outer_id
        assert TENANT_KEY not in context

    assert CORRELATION_ID_KEY not in structlog.contextvars.get_contextvars()


def test_nested_scope_with_new_id_restores_outer_id() -> None:
    with correlation_scope("outer"):
        with correlation_scope("inner"):
            assert structlog.contextvars.get_contextvars()[CORRELATION_ID_KEY] == "inner"

        assert structlog.contextvars.get_contextvars()[CORRELATION_ID_KEY] == "outer"
