"""Prometheus metrics for scheduled price batches and HTTP traffic"""

from prometheus_client import Counter, Histogram

from optioil_gateway.domain.models import BatchSummary

# Batch metrics
schedule_outcome_counter = Counter(
    "optioil_price_schedule_applied_total",
    "Price schedules processed by the batch",
    ["outcome"],  # applied | failed
)

batch_run_counter = Counter(
    "optioil_price_batch_runs_total",
    "Price schedule batch invocations",
    ["outcome"],  # success | failed
)

batch_duration_histogram = Histogram(
    "optioil_price_batch_duration_seconds",
    "Time spent applying due price schedules",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

# Scheduler trigger metrics
trigger_failure_counter = Counter(
    "optioil_trigger_failures_total",
    "Failed attempts to trigger the price schedule batch over HTTP",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_batch(summary: BatchSummary, duration_seconds: float) -> None:
    """Record a completed batch: per-item outcomes and duration"""
    batch_run_counter.labels(outcome="success").inc()
    batch_duration_histogram.observe(duration_seconds)
    if summary.applied_count:
        schedule_outcome_counter.labels(outcome="applied").inc(summary.applied_count)
    if summary.failed_count:
        schedule_outcome_counter.labels(outcome="failed").inc(summary.failed_count)


def record_batch_failure() -> None:
    batch_run_counter.labels(outcome="failed").inc()
