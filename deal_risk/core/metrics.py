"""Prometheus metrics for the Deal Risk service.

Metrics are organized into two categories:

Business Metrics (for Risk/Operations):
- deal_risk_scores_computed_total: Scores computed by band and trigger
- deal_risk_band_transitions_total: Band changes between recomputes
- deal_risk_bulk_batch_size: Deals enumerated per bulk recalculation

Technical Metrics (for Engineering/SRE):
- deal_risk_recompute_latency_seconds: Single-deal recompute latency
- deal_risk_recompute_failures_total: Failed recomputes by error code
- deal_risk_deal_fetch_latency_seconds: Deal data API latency
- deal_risk_deal_fetch_failures_total: Deal data API failures
- deal_risk_http_requests_total: HTTP requests by endpoint/status
"""

import time
from contextlib import contextmanager
from typing import Generator

from prometheus_client import Counter, Histogram, REGISTRY, generate_latest
from prometheus_client.exposition import CONTENT_TYPE_LATEST


# =============================================================================
# Business Metrics
# =============================================================================

scores_computed_total = Counter(
    "deal_risk_scores_computed_total",
    "Total number of deal risk scores computed",
    ["band", "trigger"],
)

band_transitions_total = Counter(
    "deal_risk_band_transitions_total",
    "Number of recomputes that moved a deal to a different band",
    ["from_band", "to_band"],
)

bulk_batch_size = Histogram(
    "deal_risk_bulk_batch_size",
    "Number of deals enumerated per bulk recalculation",
    buckets=[1, 10, 50, 100, 250, 500, 1000, 5000],
)


# =============================================================================
# Technical Metrics
# =============================================================================

recompute_latency = Histogram(
    "deal_risk_recompute_latency_seconds",
    "Single-deal recompute latency in seconds",
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

recompute_failures = Counter(
    "deal_risk_recompute_failures_total",
    "Total number of failed deal recomputes",
    ["error_code"],
)

deal_fetch_latency = Histogram(
    "deal_risk_deal_fetch_latency_seconds",
    "Deal data API fetch latency in seconds",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

deal_fetch_failures = Counter(
    "deal_risk_deal_fetch_failures_total",
    "Total number of deal data API failures",
    ["error_type"],  # timeout, error, not_found
)

http_requests_total = Counter(
    "deal_risk_http_requests_total",
    "Total HTTP requests by endpoint and status",
    ["method", "endpoint", "status"],
)

http_request_latency = Histogram(
    "deal_risk_http_request_latency_seconds",
    "HTTP request latency by endpoint",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)


# =============================================================================
# Helper Functions
# =============================================================================

def record_score_computed(
    band: str,
    trigger: str,
    previous_band: str | None = None,
) -> None:
    """Record a computed score and any band transition it caused."""
    scores_computed_total.labels(band=band, trigger=trigger).inc()
    if previous_band is not None and previous_band != band:
        band_transitions_total.labels(from_band=previous_band, to_band=band).inc()


def record_recompute_failure(error_code: str) -> None:
    """Record a failed recompute."""
    recompute_failures.labels(error_code=error_code).inc()


def record_bulk_batch(size: int) -> None:
    """Record the number of deals in a bulk recalculation."""
    bulk_batch_size.observe(size)


@contextmanager
def track_recompute_latency() -> Generator[None, None, None]:
    """Context manager to track single-deal recompute latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        recompute_latency.observe(time.perf_counter() - start)


@contextmanager
def track_deal_fetch_latency() -> Generator[None, None, None]:
    """Context manager to track deal data API latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        deal_fetch_latency.observe(time.perf_counter() - start)


def record_deal_fetch_failure(error_type: str) -> None:
    """Record a deal data API failure."""
    deal_fetch_failures.labels(error_type=error_type).inc()


def record_http_request(method: str, endpoint: str, status: int, duration: float) -> None:
    """Record an HTTP request."""
    http_requests_total.labels(method=method, endpoint=endpoint, status=str(status)).inc()
    http_request_latency.labels(method=method, endpoint=endpoint).observe(duration)


def get_metrics() -> bytes:
    """Get current metrics in Prometheus format."""
    return generate_latest(REGISTRY)


def get_metrics_content_type() -> str:
    """Get the content type for metrics response."""
    return CONTENT_TYPE_LATEST
