"""Observability module: structured logging, tracing and metrics."""

from memo_search.observability.context import get_trace_context, set_trace_context, trace_context
from memo_search.observability.logging import JsonFormatter, configure_logging
from memo_search.observability.metrics import (
    INDEX_DOC_COUNT,
    OPERATION_LATENCY,
    SEARCH_COUNT,
    get_metrics,
    get_metrics_content_type,
    track_latency,
)
from memo_search.observability.tracing import create_span, get_tracer, init_tracing


__all__ = [
    "INDEX_DOC_COUNT",
    "OPERATION_LATENCY",
    "SEARCH_COUNT",
    "JsonFormatter",
    "configure_logging",
    "create_span",
    "get_metrics",
    "get_metrics_content_type",
    "get_trace_context",
    "get_tracer",
    "init_tracing",
    "set_trace_context",
    "trace_context",
    "track_latency",
]
